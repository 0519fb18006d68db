"""Styled dataframe display helpers."""

import streamlit as st
import pandas as pd
from typing import Optional

STATUS_STYLES = {
    "RESERVED": "background-color: #e2e8f0; color: #1e293b",
    "ASSIGNED": "background-color: #ede9fe; color: #5b21b6; font-weight: bold",
    "LEASED": "background-color: #dcfce7; color: #166534",
    "ROGUE": "background-color: #ffcccc; color: #cc0000; font-weight: bold",
    "AVAILABLE": "",
}


def render_styled_table(
    df: pd.DataFrame,
    title: Optional[str] = None,
    height: Optional[int] = None,
    use_container_width: bool = True,
):
    """Render a styled, non-editable dataframe."""
    if title:
        st.subheader(title)
    st.dataframe(df, height=height, use_container_width=use_container_width)


def render_address_table(df: pd.DataFrame, status_column: str = "Status"):
    """Render address classifications with colour-coded status."""
    def color_status(val):
        return STATUS_STYLES.get(val, "")

    if status_column in df.columns:
        styled = df.style.map(color_status, subset=[status_column])
        st.dataframe(styled, use_container_width=True)
    else:
        st.dataframe(df, use_container_width=True)


def render_utilization_table(df: pd.DataFrame, pct_column: str = "Utilization %", threshold: int = 80):
    """Highlight rows whose utilization crosses the saturation threshold."""
    def color_pct(val):
        try:
            if float(val) > threshold:
                return "color: #cc0000; font-weight: bold"
        except (ValueError, TypeError):
            pass
        return ""

    if pct_column in df.columns:
        styled = df.style.map(color_pct, subset=[pct_column])
        st.dataframe(styled, use_container_width=True)
    else:
        st.dataframe(df, use_container_width=True)
