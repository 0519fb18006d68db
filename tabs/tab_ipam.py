"""Tab 2: IPAM — address map, rogue scan and address assignment."""

import time
import streamlit as st
import pandas as pd

from data.session_store import (
    get_snapshot, get_rogue_ips, set_rogue_ips, commit_assignment, add_audit_entry, is_data_loaded,
)
from engine.errors import NonAssignableAddressError
from engine.ipam import classify_subnet, subnet_summary, scan_for_rogues, request_assign, next_free_address
from components.charts import address_grid_heatmap, GRID_CATEGORIES
from components.metrics_cards import render_subnet_metrics
from components.tables import render_address_table
from config.defaults import POOL_STATIC, POOL_DHCP


def render(sidebar_state):
    """Render the IPAM tab."""
    st.header("IP Address Management")

    if not is_data_loaded():
        st.info("No inventory loaded. Please load data in the Inventory Admin tab.")
        return

    snap = get_snapshot()
    subnet = snap.subnet(sidebar_state.subnet_prefix) if sidebar_state.subnet_prefix else None
    if subnet is None:
        st.info("No subnet selected.")
        return

    rogue_ips = get_rogue_ips()
    classifications = classify_subnet(subnet, snap.devices, snap.customers, snap.sessions, rogue_ips)
    summary = subnet_summary(subnet, snap.devices, snap.customers, snap.sessions, rogue_ips)

    st.subheader(f"{subnet.cidr} {subnet.name}".strip())
    if subnet.has_dhcp_range:
        st.caption(f"DHCP pool: .{subnet.dhcp_start} – .{subnet.dhcp_end}")
    render_subnet_metrics(summary)

    st.caption(" · ".join(label for label, _ in GRID_CATEGORIES))
    st.plotly_chart(address_grid_heatmap(classifications, title=subnet.cidr), use_container_width=True)

    st.divider()

    # --- Rogue Scan ---
    col1, col2 = st.columns([1, 3])
    with col1:
        if st.button("Scan for rogue devices", key="ipam_scan"):
            with st.spinner(f"Probing {subnet.cidr}..."):
                time.sleep(1.0)
                found = scan_for_rogues(subnet, snap.devices, snap.customers, snap.sessions)
            set_rogue_ips(sorted(set(rogue_ips) | set(found), key=lambda ip: int(ip.rsplit(".", 1)[1])))
            add_audit_entry("scan", subnet.prefix, "rogue_ips", str(len(rogue_ips)), str(len(found)))
            st.rerun()
    with col2:
        if rogue_ips:
            st.error(f"Unclaimed addresses answering on {subnet.cidr}: {', '.join(rogue_ips)}")
            if st.button("Clear scan results", key="ipam_clear_scan"):
                set_rogue_ips([])
                st.rerun()
        else:
            st.caption("Scan results are kept until you switch subnets.")

    st.divider()

    # --- Assignment ---
    st.subheader("Assign Address")
    assignable = [c.ip_address for c in classifications if c.is_assignable]
    if not assignable:
        st.warning("No free or rogue addresses left in this subnet.")
    else:
        suggestion = next_free_address(subnet, snap.devices, snap.customers, snap.sessions, rogue_ips, pool=POOL_STATIC)
        default_idx = assignable.index(suggestion) if suggestion in assignable else 0

        col1, col2, col3 = st.columns(3)
        with col1:
            ip = st.selectbox("Address", assignable, index=default_idx, key="ipam_assign_ip")
        with col2:
            owner_kind = st.radio("Owner type", ["Device", "Customer"], horizontal=True, key="ipam_owner_kind")
        with col3:
            if owner_kind == "Device":
                owners = {d.device_id: f"{d.device_id} — {d.name}" for d in snap.devices}
            else:
                owners = {c.customer_id: f"{c.customer_id} — {c.name}" for c in snap.customers}
            owner_id = st.selectbox("Owner", list(owners), format_func=lambda k: owners[k], key="ipam_owner")

        if st.button("Assign", type="primary", key="ipam_assign", disabled=not owners):
            try:
                # Re-read the records: another operator may have claimed the address
                fresh = get_snapshot()
                intent = request_assign(ip, subnet, fresh.devices, fresh.customers, fresh.sessions, get_rogue_ips())
                commit_assignment(intent, owner_kind, owner_id)
            except NonAssignableAddressError as e:
                st.error(str(e))
            else:
                st.success(f"{ip} assigned to {owners[owner_id]}")
                st.rerun()

        dhcp_next = next_free_address(subnet, snap.devices, snap.customers, snap.sessions, rogue_ips, pool=POOL_DHCP)
        if dhcp_next:
            st.caption(f"Next free DHCP pool address: {dhcp_next}")

    st.divider()

    # --- Detail Table ---
    with st.expander("Address detail"):
        status_filter = st.multiselect(
            "Status", ["RESERVED", "ASSIGNED", "LEASED", "ROGUE", "AVAILABLE"],
            default=["ASSIGNED", "LEASED", "ROGUE"], key="ipam_status_filter",
        )
        rows = [{
            "Address": c.ip_address,
            "Status": c.status,
            "Type": c.kind,
            "Name": c.label,
            "Reference": c.ref_id or "—",
        } for c in classifications if c.status in status_filter]
        if rows:
            render_address_table(pd.DataFrame(rows))
        else:
            st.caption("No addresses match the filter.")
