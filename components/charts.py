"""Plotly chart builders for the BTO Flat Allocation dashboard."""

import plotly.express as px
import plotly.graph_objects as go
import pandas as pd
from typing import Dict


def inventory_bar(summary_df: pd.DataFrame, title: str = "Units by Project") -> go.Figure:
    """Stacked bar of booked vs available units per project and unit type."""
    df = summary_df.copy()
    df["Label"] = df["Project"] + " · " + df["Unit Type"]
    fig = px.bar(
        df, x="Label", y=["Booked", "Available"],
        labels={"value": "Units", "Label": "Project / Unit Type", "variable": ""},
        title=title,
        color_discrete_map={"Booked": "#E8734A", "Available": "#4A90D9"},
    )
    fig.update_layout(barmode="stack", legend_title_text="", height=400)
    return fig


def status_donut(counts: Dict[str, int], title: str = "Applications by Status") -> go.Figure:
    """Donut chart of application counts per status."""
    labels = [k for k, v in counts.items() if v > 0]
    values = [counts[k] for k in labels]
    fig = go.Figure(data=[go.Pie(
        labels=labels,
        values=values,
        hole=0.6,
        textinfo="value+label",
    )])
    fig.update_layout(
        title=title,
        height=350,
        showlegend=True,
        annotations=[dict(text=str(sum(values)), x=0.5, y=0.5, font_size=16, showarrow=False)],
    )
    return fig
