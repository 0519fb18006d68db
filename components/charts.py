"""Plotly chart builders for the NetOps Resource Allocation console."""

import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import Iterable, List, Optional

from config.defaults import TOTAL_UNITS

# Grid cell colour per (status, kind); order defines the heatmap codes
GRID_CATEGORIES = [
    ("Static Free", "#F1F5F9"),
    ("DHCP Pool", "#FFFFFF"),
    ("Reserved", "#1E293B"),
    ("Infrastructure", "#E9D5FF"),
    ("Customer", "#BFDBFE"),
    ("Leased", "#BBF7D0"),
    ("Rogue / Unknown", "#FCA5A5"),
]


def _grid_category(c) -> int:
    if c.status == "RESERVED":
        return 2
    if c.kind == "Device":
        return 3
    if c.kind == "Customer":
        return 4
    if c.status == "LEASED":
        return 5
    if c.status == "ROGUE":
        return 6
    if c.kind == "DHCP":
        return 1
    return 0


def _discrete_colorscale() -> list:
    n = len(GRID_CATEGORIES)
    scale = []
    for i, (_, color) in enumerate(GRID_CATEGORIES):
        scale.append([i / n, color])
        scale.append([(i + 1) / n, color])
    return scale


def address_grid_heatmap(classifications: List, title: str = "Address Map") -> go.Figure:
    """16x16 grid of a /24, one cell per address, octet 0 at the top left."""
    z, text, hover = [], [], []
    for row in range(16):
        z_row, text_row, hover_row = [], [], []
        for col in range(16):
            c = classifications[row * 16 + col]
            z_row.append(_grid_category(c))
            text_row.append(str(c.octet))
            hover_row.append(f"{c.ip_address}<br>{c.label}<br>{c.kind}")
        z.append(z_row)
        text.append(text_row)
        hover.append(hover_row)

    fig = go.Figure(data=go.Heatmap(
        z=z,
        text=text,
        texttemplate="%{text}",
        customdata=hover,
        hovertemplate="%{customdata}<extra></extra>",
        colorscale=_discrete_colorscale(),
        zmin=0,
        zmax=len(GRID_CATEGORIES),
        xgap=2,
        ygap=2,
        showscale=False,
    ))
    fig.update_layout(
        title=title,
        height=560,
        xaxis=dict(visible=False),
        yaxis=dict(visible=False, autorange="reversed", scaleanchor="x"),
    )
    return fig


def subnet_utilization_bar(summaries: List[dict], title: str = "Subnet Utilization") -> go.Figure:
    """Stacked bar of used addresses by category for each subnet."""
    df = pd.DataFrame(summaries)
    fig = px.bar(
        df, x="cidr", y=["reserved", "devices", "customers", "leased"],
        labels={"value": "Addresses", "cidr": "Subnet", "variable": ""},
        title=title,
        color_discrete_map={
            "reserved": "#1E293B", "devices": "#A855F7",
            "customers": "#3B82F6", "leased": "#22C55E",
        },
    )
    fig.update_layout(legend_title_text="", height=400, yaxis_range=[0, 256])
    return fig


def usage_donut(used: int, total: int, title: str = "Utilization", unit: str = "") -> go.Figure:
    """Donut chart showing used vs free capacity."""
    fig = go.Figure(data=[go.Pie(
        labels=["Used", "Free"],
        values=[used, total - used],
        hole=0.6,
        marker_colors=["#E8734A", "#4A90D9"],
        textinfo="percent+label",
    )])
    fig.update_layout(
        title=title,
        height=350,
        showlegend=True,
        annotations=[dict(text=f"{used}/{total}{unit}", x=0.5, y=0.5, font_size=16, showarrow=False)],
    )
    return fig


def rack_elevation(
    slots: List[dict],
    rack_id: str,
    highlight_units: Optional[Iterable[int]] = None,
) -> go.Figure:
    """Front elevation of a rack: one bar per mounted device, U1 at the bottom.

    `highlight_units` marks candidate drop units for the device being moved.
    """
    fig = go.Figure()
    for slot in slots:
        if not slot["is_top"]:
            continue
        device = slot["device"]
        bottom = slot["u"] - slot["span"] + 1
        fig.add_trace(go.Bar(
            x=[rack_id],
            y=[slot["span"]],
            base=[bottom - 1],
            name=f"U{slot['u']} {device.name}",
            text=f"{device.name} ({device.device_type})",
            textposition="inside",
            marker_color="#1E293B" if device.status == "Active" else "#CBD5E1",
            marker_line_color="#0F172A",
            marker_line_width=1,
            hovertemplate=(
                f"{device.name}<br>{device.model} • {device.ip_address or 'no IP'}"
                f"<br>U{bottom}-U{slot['u']}<extra></extra>"
            ),
        ))

    for u in highlight_units or []:
        fig.add_shape(
            type="rect", xref="paper", x0=0, x1=1, y0=u - 1, y1=u,
            fillcolor="#86EFAC", opacity=0.35, line_width=0, layer="below",
        )

    fig.update_layout(
        title=f"{rack_id} ({TOTAL_UNITS}U)",
        barmode="overlay",
        showlegend=False,
        height=900,
        yaxis=dict(
            range=[0, TOTAL_UNITS],
            tickmode="array",
            tickvals=[u - 0.5 for u in range(1, TOTAL_UNITS + 1)],
            ticktext=[str(u) for u in range(1, TOTAL_UNITS + 1)],
            title="Rack Unit",
        ),
    )
    return fig


def rack_utilization_bar(stats: List[dict], title: str = "Rack Space & Power") -> go.Figure:
    """Used units per rack with power load on hover."""
    df = pd.DataFrame(stats)
    fig = px.bar(
        df, x="rack_id", y="used_units",
        labels={"rack_id": "Rack", "used_units": "Used U"},
        title=title,
        color="utilization_pct",
        color_continuous_scale=["#4A90D9", "#F5C542", "#E8734A"],
        range_color=[0, 100],
        hover_data=["power_load_w", "thermal_btu_hr"],
    )
    fig.update_layout(height=400, yaxis_range=[0, TOTAL_UNITS])
    return fig
