"""In-process inventory store: applies intents to record lists.

Stands in for the external persistence collaborator. Every function returns
new lists and leaves its inputs untouched.
"""

import copy
from typing import Iterable, List, Tuple

from loguru import logger

from models.customer import Customer
from models.device import Device
from models.session import LeaseSession
from models.intents import AssignmentIntent, PlacementIntent, UnmountIntent
from engine.errors import NonAssignableAddressError, PreconditionViolation

OWNER_KINDS = ("Device", "Customer")


def _replace_by_id(records: list, id_attr: str, record_id: str, update) -> list:
    result = []
    found = False
    for r in records:
        if getattr(r, id_attr) == record_id:
            r = copy.deepcopy(r)
            update(r)
            found = True
        result.append(r)
    if not found:
        raise PreconditionViolation(f"Unknown {id_attr}: {record_id}")
    return result


def apply_assignment(
    intent: AssignmentIntent,
    owner_kind: str,
    owner_id: str,
    devices: List[Device],
    customers: List[Customer],
    sessions: Iterable[LeaseSession] = (),
) -> Tuple[List[Device], List[Customer]]:
    """Give the intent's address to a device or customer.

    The claim is re-checked against the devices, customers and active sessions
    as they are now; another operator or a new lease may have taken the address
    since the intent was issued.
    """
    if owner_kind not in OWNER_KINDS:
        raise PreconditionViolation(f"Owner kind must be one of {OWNER_KINDS}, got {owner_kind!r}")

    ip = intent.ip_address
    holders = [d.device_id for d in devices if d.ip_address == ip and d.device_id != owner_id]
    holders += [c.customer_id for c in customers if c.ip_address == ip and c.customer_id != owner_id]
    holders += [s.session_id for s in sessions if s.is_active and s.ip_address == ip]
    if holders:
        logger.debug("Assignment of {} lost to {}", ip, holders[0])
        raise NonAssignableAddressError(ip)

    def set_ip(record):
        record.ip_address = ip

    if owner_kind == "Device":
        devices = _replace_by_id(devices, "device_id", owner_id, set_ip)
    else:
        customers = _replace_by_id(customers, "customer_id", owner_id, set_ip)

    logger.info("Assigned {} to {} {}", ip, owner_kind.lower(), owner_id)
    return list(devices), list(customers)


def apply_placement(intent: PlacementIntent, devices: List[Device]) -> List[Device]:
    def place(device):
        device.rack_id = intent.rack_id
        device.u_position = intent.u_position

    return _replace_by_id(devices, "device_id", intent.device_id, place)


def apply_unmount(intent: UnmountIntent, devices: List[Device]) -> List[Device]:
    def clear(device):
        device.u_position = None
        if not intent.keep_rack:
            device.rack_id = None

    return _replace_by_id(devices, "device_id", intent.device_id, clear)


def resolve_rogue(ip_address: str, rogue_ips: List[str]) -> List[str]:
    """Drop an address from the rogue set once it has been claimed."""
    return [ip for ip in rogue_ips if ip != ip_address]
