"""Typed wrapper around st.session_state for inventory records and operator state."""

import streamlit as st
from typing import List, Optional
from datetime import datetime
from loguru import logger
from models.customer import Customer
from models.device import Device
from models.session import LeaseSession
from models.subnet import Subnet
from models.snapshot import InventorySnapshot
from models.intents import AssignmentIntent, PlacementIntent, UnmountIntent
from models.audit import AuditEntry
from engine.inventory import apply_assignment, apply_placement, apply_unmount, resolve_rogue


def initialize_session_state():
    """Initialize all session state keys with defaults."""
    defaults = {
        "devices": [],
        "customers": [],
        "sessions": [],
        "subnets": [],
        "active_subnet": None,
        "active_rack": None,
        "rogue_ips": [],
        "audit_log": [],
        "data_loaded": False,
    }
    for key, default in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = default


# --- Getters ---

def get_devices() -> List[Device]:
    return st.session_state.get("devices", [])


def get_customers() -> List[Customer]:
    return st.session_state.get("customers", [])


def get_sessions() -> List[LeaseSession]:
    return st.session_state.get("sessions", [])


def get_subnets() -> List[Subnet]:
    return st.session_state.get("subnets", [])


def get_snapshot() -> InventorySnapshot:
    """Records as they stand for this render."""
    return InventorySnapshot(
        devices=list(get_devices()),
        customers=list(get_customers()),
        sessions=list(get_sessions()),
        subnets=list(get_subnets()),
    )


def get_active_subnet() -> Optional[str]:
    return st.session_state.get("active_subnet")


def get_active_rack() -> Optional[str]:
    return st.session_state.get("active_rack")


def get_rogue_ips() -> List[str]:
    return st.session_state.get("rogue_ips", [])


def get_audit_log() -> List[AuditEntry]:
    return st.session_state.get("audit_log", [])


def is_data_loaded() -> bool:
    return st.session_state.get("data_loaded", False)


# --- Setters ---

def set_inventory(
    devices: List[Device],
    customers: List[Customer],
    sessions: List[LeaseSession],
    subnets: List[Subnet],
):
    st.session_state["devices"] = devices
    st.session_state["customers"] = customers
    st.session_state["sessions"] = sessions
    st.session_state["subnets"] = subnets
    st.session_state["data_loaded"] = True
    st.session_state["rogue_ips"] = []
    if subnets and get_active_subnet() not in {s.prefix for s in subnets}:
        st.session_state["active_subnet"] = subnets[0].prefix
    logger.info(
        "Inventory loaded: {} devices, {} customers, {} sessions, {} subnets",
        len(devices), len(customers), len(sessions), len(subnets),
    )


def set_active_subnet(prefix: str):
    """Switch subnets. Scan findings belong to one subnet and are discarded."""
    if prefix != get_active_subnet():
        st.session_state["active_subnet"] = prefix
        st.session_state["rogue_ips"] = []


def set_active_rack(rack_id: Optional[str]):
    st.session_state["active_rack"] = rack_id


def set_rogue_ips(rogue_ips: List[str]):
    st.session_state["rogue_ips"] = list(rogue_ips)


def reset_inventory():
    for key in ("devices", "customers", "sessions", "subnets", "rogue_ips"):
        st.session_state[key] = []
    st.session_state["active_subnet"] = None
    st.session_state["active_rack"] = None
    st.session_state["data_loaded"] = False


# --- Intent commits ---

def commit_assignment(intent: AssignmentIntent, owner_kind: str, owner_id: str, rationale: str = ""):
    """Persist an address assignment; raises NonAssignableAddressError if the address was taken meanwhile."""
    devices, customers = apply_assignment(
        intent, owner_kind, owner_id, get_devices(), get_customers(), get_sessions(),
    )
    st.session_state["devices"] = devices
    st.session_state["customers"] = customers
    st.session_state["rogue_ips"] = resolve_rogue(intent.ip_address, get_rogue_ips())
    add_audit_entry(
        "assign_ip", intent.ip_address, "owner",
        intent.previous_status, f"{owner_kind} {owner_id}", rationale=rationale,
    )


def commit_placement(intent: PlacementIntent, old_position: str, rationale: str = ""):
    st.session_state["devices"] = apply_placement(intent, get_devices())
    add_audit_entry(
        "move", intent.device_id, "placement",
        old_position, f"{intent.rack_id} U{intent.u_position}", rationale=rationale,
    )


def commit_unmount(intent: UnmountIntent, old_position: str, rationale: str = ""):
    st.session_state["devices"] = apply_unmount(intent, get_devices())
    add_audit_entry(
        "unmount", intent.device_id, "placement",
        old_position, "staged" if intent.keep_rack else "unassigned", rationale=rationale,
    )


# --- Audit ---

def add_audit_entry(
    action: str,
    target_id: str,
    field_changed: str,
    old_value: str,
    new_value: str,
    rationale: str = "",
):
    entry = AuditEntry(
        timestamp=datetime.now(),
        action=action,
        target_id=target_id,
        field_changed=field_changed,
        old_value=old_value,
        new_value=new_value,
        rationale=rationale,
    )
    st.session_state["audit_log"].append(entry)
