"""Reusable KPI metric card and operation-result widgets."""

import streamlit as st

from models.result import Result


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


def render_result(result: Result, success_message: str):
    """Show the outcome of a service call."""
    if result.ok:
        st.success(success_message, icon="✅")
    else:
        st.error(f"{result.error.value}: {result.message}", icon="🔴")
