"""Tab 4: Inventory Admin — inventory upload, validation and audit trail."""

import streamlit as st
import pandas as pd

from data.loader import (
    load_file, load_multi_sheet_excel,
    parse_devices, parse_customers, parse_sessions, parse_subnets,
)
from data.validator import (
    validate_devices, validate_customers, validate_sessions, validate_subnets, validate_cross_file,
)
from data.sample_data import (
    generate_devices_df, generate_customers_df, generate_sessions_df, generate_subnets_df,
)
from data.session_store import (
    set_inventory, reset_inventory, get_audit_log, add_audit_entry, is_data_loaded, get_snapshot,
)


def _load_and_validate(devices_df, customers_df, sessions_df=None, subnets_df=None):
    """Validate and store uploaded inventory."""
    if subnets_df is None:
        subnets_df = generate_subnets_df()
        st.info("No subnet sheet supplied; using the default managed subnets.")

    results = [
        validate_devices(devices_df),
        validate_customers(customers_df),
        validate_subnets(subnets_df),
    ]
    if sessions_df is not None:
        results.append(validate_sessions(sessions_df))

    errors = [e for r in results for e in r.errors]
    warnings = [w for r in results for w in r.warnings]

    if not errors:
        cross = validate_cross_file(devices_df, customers_df, sessions_df)
        warnings.extend(cross.warnings)

    if errors:
        for e in errors:
            st.error(e)
        return False

    for w in warnings:
        st.warning(w)

    devices = parse_devices(devices_df)
    customers = parse_customers(customers_df)
    sessions = parse_sessions(sessions_df) if sessions_df is not None else []
    subnets = parse_subnets(subnets_df)

    set_inventory(devices, customers, sessions, subnets)
    add_audit_entry("upload", "inventory", "all_data", "", "uploaded", rationale="Inventory upload")

    st.success(
        f"Inventory loaded: {len(devices)} devices, {len(customers)} customers, "
        f"{len(sessions)} sessions, {len(subnets)} subnets"
    )
    return True


def render(sidebar_state):
    """Render the Inventory Admin tab."""
    st.header("Inventory Admin")

    # --- Data Upload Section ---
    st.subheader("Inventory Upload")

    upload_mode = st.radio(
        "Upload mode",
        ["Single Excel workbook", "Separate files"],
        horizontal=True,
        key="upload_mode",
    )

    if upload_mode == "Single Excel workbook":
        st.caption(
            "Upload one `.xlsx` file with sheets named **Devices** and **Customers**, "
            "optionally **Sessions** and **Subnets** "
            "(aliases like 'Inventory', 'Subscribers', 'RADIUS', 'IPAM' are accepted)."
        )
        single_file = st.file_uploader("Inventory workbook", type=["xlsx"], key="upload_single")

        if st.button("Upload & Validate", type="primary", key="btn_upload_single"):
            if single_file:
                try:
                    d_df, c_df, s_df, n_df = load_multi_sheet_excel(single_file)
                    _load_and_validate(d_df, c_df, s_df, n_df)
                except (ValueError, KeyError) as e:
                    st.error(f"Error loading file: {e}")
            else:
                st.warning("Please upload an Excel file.")

    else:
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            devices_file = st.file_uploader("Devices", type=["csv", "xlsx"], key="upload_devices")
        with col2:
            customers_file = st.file_uploader("Customers", type=["csv", "xlsx"], key="upload_customers")
        with col3:
            sessions_file = st.file_uploader("Active Sessions (optional)", type=["csv", "xlsx"], key="upload_sessions")
        with col4:
            subnets_file = st.file_uploader("Subnets (optional)", type=["csv", "xlsx"], key="upload_subnets")

        if st.button("Upload & Validate", type="primary", key="btn_upload_multi"):
            if devices_file and customers_file:
                try:
                    _load_and_validate(
                        load_file(devices_file),
                        load_file(customers_file),
                        load_file(sessions_file) if sessions_file else None,
                        load_file(subnets_file) if subnets_file else None,
                    )
                except (ValueError, KeyError) as e:
                    st.error(f"Error loading files: {e}")
            else:
                st.warning("Please upload at least the device and customer files.")

    col_sample, col_reset = st.columns(2)
    with col_sample:
        if st.button("Load Sample Data", key="btn_sample"):
            _load_and_validate(
                generate_devices_df(), generate_customers_df(),
                generate_sessions_df(), generate_subnets_df(),
            )
    with col_reset:
        if is_data_loaded() and st.button("Clear Inventory", key="btn_reset"):
            reset_inventory()
            add_audit_entry("reset", "inventory", "all_data", "loaded", "cleared")
            st.rerun()

    st.divider()

    # --- Current Inventory ---
    if is_data_loaded():
        snap = get_snapshot()
        st.subheader("Current Inventory")
        dev_tab, cust_tab, sess_tab, net_tab = st.tabs(["Devices", "Customers", "Sessions", "Subnets"])
        with dev_tab:
            st.dataframe(pd.DataFrame([{
                "Device ID": d.device_id, "Name": d.name, "Type": d.device_type,
                "IP Address": d.ip_address or "—", "Status": d.status,
                "Rack": d.rack_id or "—",
                "U": f"U{d.bottom_u}-U{d.u_position}" if d.is_mounted else "—",
            } for d in snap.devices]), use_container_width=True, hide_index=True)
        with cust_tab:
            st.dataframe(pd.DataFrame([{
                "Customer ID": c.customer_id, "Name": c.name, "Status": c.status,
                "Package": c.package_name, "IP Address": c.ip_address or "—",
            } for c in snap.customers]), use_container_width=True, hide_index=True)
        with sess_tab:
            st.dataframe(pd.DataFrame([{
                "Session ID": s.session_id, "Username": s.username, "IP Address": s.ip_address,
                "Protocol": s.protocol, "Status": s.status,
            } for s in snap.sessions]), use_container_width=True, hide_index=True)
        with net_tab:
            st.dataframe(pd.DataFrame([{
                "Subnet": s.cidr, "Name": s.name,
                "DHCP Range": f".{s.dhcp_start} – .{s.dhcp_end}" if s.has_dhcp_range else "—",
            } for s in snap.subnets]), use_container_width=True, hide_index=True)

        st.divider()

    # --- Audit Trail ---
    st.subheader("Audit Trail")

    audit_log = get_audit_log()
    if audit_log:
        audit_data = []
        for entry in reversed(audit_log):
            audit_data.append({
                "Timestamp": entry.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
                "Action": entry.action,
                "Target": entry.target_id,
                "Field": entry.field_changed,
                "Old Value": entry.old_value[:50],
                "New Value": entry.new_value[:50],
                "Rationale": entry.rationale,
            })
        audit_df = pd.DataFrame(audit_data)
        st.dataframe(audit_df, use_container_width=True, height=300)

        csv = audit_df.to_csv(index=False)
        st.download_button("Export Audit Log (CSV)", csv, "audit_log.csv", "text/csv")
    else:
        st.info("No audit entries yet.")
