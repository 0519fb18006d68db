"""KPI metric card widgets for subnets and racks."""

import streamlit as st

from config.defaults import SUBNET_SATURATION_PCT, RACK_SATURATION_PCT


def render_metric_row(metrics: list[dict]):
    """Render a row of metric cards.

    Each metric dict should have: label, value, and optionally delta, delta_color.
    """
    cols = st.columns(len(metrics))
    for col, m in zip(cols, metrics):
        with col:
            st.metric(
                label=m["label"],
                value=m["value"],
                delta=m.get("delta"),
                delta_color=m.get("delta_color", "normal"),
            )


def render_subnet_metrics(summary: dict):
    render_metric_row([
        {"label": "Utilization", "value": f"{summary['utilization_pct']}%"},
        {"label": "Used", "value": summary["used"]},
        {"label": "Free", "value": summary["free"]},
        {"label": "Leased", "value": summary["leased"]},
        {"label": "Rogue", "value": summary["rogue"],
         "delta": "unclaimed" if summary["rogue"] else None, "delta_color": "inverse"},
    ])
    if summary["utilization_pct"] > SUBNET_SATURATION_PCT:
        render_alert_card(
            f"{summary['cidr']} is {summary['utilization_pct']}% utilized; "
            f"only {summary['static_free']} static addresses remain.",
            level="error",
        )


def render_rack_metrics(stats: dict):
    render_metric_row([
        {"label": "Space Used", "value": f"{stats['used_units']}U / {stats['total_units']}U"},
        {"label": "Utilization", "value": f"{stats['utilization_pct']}%"},
        {"label": "Largest Free Block", "value": f"{stats['largest_free_block']}U"},
        {"label": "Power Load", "value": f"{stats['power_load_w']:,} W"},
        {"label": "Heat Output", "value": f"{stats['thermal_btu_hr']:,} BTU/hr"},
    ])
    if stats["utilization_pct"] > RACK_SATURATION_PCT:
        render_alert_card(f"{stats['rack_id']} is nearly full ({stats['utilization_pct']}%).")


def render_alert_card(message: str, level: str = "warning"):
    """Render an alert card with appropriate styling."""
    if level == "error":
        st.error(message, icon="🔴")
    elif level == "warning":
        st.warning(message, icon="🟡")
    else:
        st.info(message, icon="🔵")
