"""Global sidebar controls for subnet and rack selection."""

import streamlit as st
from dataclasses import dataclass
from typing import Optional
from data.session_store import (
    get_subnets, get_devices, get_active_subnet, set_active_subnet,
    get_active_rack, set_active_rack, get_rogue_ips, is_data_loaded,
)
from engine.rack import list_racks


@dataclass
class SidebarState:
    subnet_prefix: Optional[str]
    rack_id: Optional[str]


def render_sidebar() -> SidebarState:
    """Render the global sidebar controls and return current state."""
    with st.sidebar:
        st.title("NetOps Resources")
        st.divider()

        if not is_data_loaded():
            st.warning("No inventory loaded — go to Inventory Admin tab")
            return SidebarState(subnet_prefix=None, rack_id=None)

        # Subnet selector; switching clears scan findings
        subnets = get_subnets()
        prefixes = [s.prefix for s in subnets]
        names = {s.prefix: f"{s.cidr} {s.name}".strip() for s in subnets}
        current = get_active_subnet()
        selected_prefix = None
        if prefixes:
            selected_prefix = st.selectbox(
                "Subnet",
                options=prefixes,
                format_func=lambda p: names.get(p, p),
                index=prefixes.index(current) if current in prefixes else 0,
                key="sidebar_subnet",
            )
            if selected_prefix != current:
                set_active_subnet(selected_prefix)

        # Rack selector
        racks = list_racks(get_devices())
        selected_rack = None
        if racks:
            current_rack = get_active_rack()
            selected_rack = st.selectbox(
                "Rack",
                options=racks,
                index=racks.index(current_rack) if current_rack in racks else 0,
                key="sidebar_rack",
            )
            set_active_rack(selected_rack)

        st.divider()
        st.success("Inventory loaded")
        rogues = get_rogue_ips()
        if rogues:
            st.caption(f"Scan findings: {len(rogues)} unclaimed address(es)")

    return SidebarState(subnet_prefix=selected_prefix, rack_id=selected_rack)
