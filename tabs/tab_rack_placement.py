"""Tab 3: Rack Placement — elevation view, validated moves and unmounting."""

import streamlit as st
import pandas as pd

from data.session_store import get_snapshot, commit_placement, commit_unmount, is_data_loaded
from engine.rack import (
    rack_slots, rack_devices, rack_stats, validate_move, apply_move, unmount,
    unmounted_devices, valid_targets, free_blocks,
)
from components.charts import rack_elevation
from components.metrics_cards import render_rack_metrics
from components.tables import render_styled_table
from config.defaults import TOTAL_UNITS


def _position_label(device) -> str:
    if device.is_mounted:
        return f"{device.rack_id} U{device.bottom_u}-U{device.u_position}"
    if device.rack_id:
        return f"{device.rack_id} (staged)"
    return "unassigned"


def render(sidebar_state):
    """Render the Rack Placement tab."""
    st.header("Rack Placement")

    if not is_data_loaded():
        st.info("No inventory loaded. Please load data in the Inventory Admin tab.")
        return

    rack_id = sidebar_state.rack_id
    if not rack_id:
        st.info("No racks found. Assign a Rack ID to a device in the inventory file.")
        return

    snap = get_snapshot()
    render_rack_metrics(rack_stats(rack_id, snap.devices))

    mounted = rack_devices(rack_id, snap.devices)
    staged = unmounted_devices(snap.devices, rack_id)
    candidates = {d.device_id: d for d in mounted + staged}

    col1, col2 = st.columns([2, 3])

    with col2:
        st.subheader("Move Device")
        if not candidates:
            st.caption("No devices available for this rack.")
            selected = None
        else:
            device_id = st.selectbox(
                "Device",
                list(candidates),
                format_func=lambda k: f"{candidates[k].name} [{candidates[k].u_height}U] — {_position_label(candidates[k])}",
                key="rack_move_device",
            )
            selected = candidates[device_id]

        targets = []
        if selected is not None:
            targets = valid_targets(selected, mounted)
            default_top = selected.u_position if selected.u_position else (targets[0] if targets else selected.u_height)
            target = st.number_input(
                "Target top unit", min_value=1, max_value=TOTAL_UNITS,
                value=int(default_top), step=1, key="rack_move_target",
            )

            # Live feedback while choosing; re-checked on commit
            preview = validate_move(selected, int(target), mounted)
            if preview.is_ok:
                st.success(f"U{int(target) - selected.u_height + 1}-U{int(target)} is free")
            else:
                st.error(preview.reason)

            if not targets:
                st.warning(f"No free block of {selected.u_height}U in {rack_id}.")

            c1, c2, c3 = st.columns(3)
            with c1:
                if st.button("Move", type="primary", key="rack_move_commit"):
                    outcome = apply_move(selected, rack_id, int(target), get_snapshot().devices)
                    if outcome.applied:
                        commit_placement(outcome.intent, _position_label(selected))
                        st.rerun()
                    else:
                        st.error(outcome.validation.reason)
            with c2:
                if st.button("Unmount", key="rack_unmount", disabled=not selected.is_mounted):
                    _, intent = unmount(selected, keep_rack=True)
                    commit_unmount(intent, _position_label(selected))
                    st.rerun()
            with c3:
                if st.button("Remove from rack", key="rack_remove", disabled=not selected.rack_id):
                    _, intent = unmount(selected, keep_rack=False)
                    commit_unmount(intent, _position_label(selected))
                    st.rerun()

        st.divider()
        st.subheader("Free Space")
        blocks = free_blocks(rack_id, snap.devices)
        if blocks:
            render_styled_table(pd.DataFrame([
                {"From": f"U{top - height + 1}", "To": f"U{top}", "Height (U)": height}
                for top, height in blocks
            ]))
        else:
            st.caption("Rack is full.")

        st.subheader("Unmounted Assets")
        if staged:
            render_styled_table(pd.DataFrame([{
                "Device": d.device_id,
                "Name": d.name,
                "Type": d.device_type,
                "Height (U)": d.u_height,
                "Staged For": d.rack_id or "—",
            } for d in staged]))
        else:
            st.caption("Every device is mounted.")

    with col1:
        slots = rack_slots(rack_id, snap.devices)
        st.plotly_chart(rack_elevation(slots, rack_id, highlight_units=targets), use_container_width=True)
