"""Tab 1: Capacity Overview — address and rack utilization across the network."""

import streamlit as st
import pandas as pd

from data.session_store import get_snapshot, get_active_subnet, get_rogue_ips, is_data_loaded
from engine.ipam import global_utilization, subnet_summary
from engine.rack import list_racks, rack_stats
from components.charts import subnet_utilization_bar, usage_donut, rack_utilization_bar
from components.metrics_cards import render_metric_row
from components.tables import render_utilization_table
from config.defaults import TOTAL_ADDRESSES, TOTAL_UNITS, SUBNET_SATURATION_PCT, RACK_SATURATION_PCT


def render(sidebar_state):
    """Render the Capacity Overview tab."""
    st.header("Capacity Overview")

    if not is_data_loaded():
        st.info("No inventory loaded. Please load data in the Inventory Admin tab.")
        return

    snap = get_snapshot()
    active = get_active_subnet()

    # Scan findings only apply to the subnet they were taken on
    summaries = [
        subnet_summary(s, snap.devices, snap.customers, snap.sessions,
                       get_rogue_ips() if s.prefix == active else ())
        for s in snap.subnets
    ]
    racks = list_racks(snap.devices)
    stats = [rack_stats(r, snap.devices) for r in racks]

    total_used_u = sum(s["used_units"] for s in stats)
    total_power = sum(s["power_load_w"] for s in stats)

    render_metric_row([
        {"label": "Global IP Utilization",
         "value": f"{global_utilization(snap.subnets, snap.devices, snap.customers, snap.sessions)}%"},
        {"label": "Managed Subnets", "value": len(snap.subnets)},
        {"label": "Racks", "value": len(racks)},
        {"label": "Rack Units Used", "value": f"{total_used_u}/{TOTAL_UNITS * len(racks)}"},
        {"label": "Total Power Load", "value": f"{total_power:,} W"},
    ])

    st.divider()

    col1, col2 = st.columns([3, 2])
    with col1:
        if summaries:
            st.plotly_chart(subnet_utilization_bar(summaries), use_container_width=True)
    with col2:
        used = sum(s["used"] for s in summaries)
        st.plotly_chart(
            usage_donut(used, TOTAL_ADDRESSES * len(summaries), title="Address Space"),
            use_container_width=True,
        )

    if summaries:
        render_utilization_table(pd.DataFrame([{
            "Subnet": s["cidr"],
            "Name": s["name"],
            "Used": s["used"],
            "Devices": s["devices"],
            "Customers": s["customers"],
            "Leased": s["leased"],
            "Static Free": s["static_free"],
            "DHCP Free": s["dhcp_free"],
            "Utilization %": s["utilization_pct"],
        } for s in summaries]), threshold=SUBNET_SATURATION_PCT)

    st.divider()

    st.subheader("Racks")
    if not stats:
        st.info("No devices are mounted in a rack.")
        return

    st.plotly_chart(rack_utilization_bar(stats), use_container_width=True)
    render_utilization_table(pd.DataFrame([{
        "Rack": s["rack_id"],
        "Devices": s["device_count"],
        "Used U": s["used_units"],
        "Free U": s["free_units"],
        "Largest Free Block": s["largest_free_block"],
        "Power (W)": s["power_load_w"],
        "Heat (BTU/hr)": s["thermal_btu_hr"],
        "Utilization %": s["utilization_pct"],
    } for s in stats]), threshold=RACK_SATURATION_PCT)
