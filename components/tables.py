"""Styled dataframe display helpers."""

import streamlit as st
import pandas as pd
from typing import Optional

STATUS_STYLES = {
    "Pending": "background-color: #fff3cd; color: #856404",
    "Successful": "background-color: #d4edda; color: #155724",
    "Booked": "background-color: #cce5ff; color: #004085; font-weight: bold",
    "Unsuccessful": "background-color: #f8d7da; color: #721c24",
    "Withdrawn": "color: #6c757d",
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
    if df.empty:
        st.caption("Nothing to show.")
        return
    st.dataframe(df, height=height, use_container_width=use_container_width)


def render_status_table(df: pd.DataFrame, status_column: str = "Status"):
    """Render an application table with colour-coded statuses."""
    def color_status(val):
        return STATUS_STYLES.get(val, "")

    if df.empty:
        st.caption("No applications.")
    elif status_column in df.columns:
        styled = df.style.map(color_status, subset=[status_column])
        st.dataframe(styled, use_container_width=True)
    else:
        st.dataframe(df, use_container_width=True)
