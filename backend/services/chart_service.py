"""
Chart service — builds interactive Plotly figures from the replication frames.
Returns JSON strings that the frontend renders with Plotly.js.
"""

import plotly.graph_objects as go
import pandas as pd

from core.config import CHART_DOMAIN, CHART_TICKS

# ---------------------------------------------------------------------------
# Colour palette
# ---------------------------------------------------------------------------
C_WEIGHT = "#3B82F6"   # Blue (weight bars)
C_GAMMA  = "#10B981"   # Emerald (portfolio $gamma)
C_SPOT   = "#F59E0B"   # Spot (Amber)
PAPER_BG = "rgba(15, 23, 42, 0)"
PLOT_BG  = "rgba(30, 41, 59, 0.2)"
FONT_CLR = "#CBD5E1"
GRID_CLR = "rgba(255,255,255,0.06)"


def _base_layout(title: str) -> dict:
    return dict(
        title=dict(
            text=title.upper(),
            font=dict(size=12, color="#94A3B8", weight=700),
            x=0.01,
            y=0.98
        ),
        paper_bgcolor=PAPER_BG,
        plot_bgcolor=PLOT_BG,
        font=dict(color=FONT_CLR, family="'Inter', sans-serif", size=11),
        legend=dict(
            bgcolor="rgba(0,0,0,0)", borderwidth=0,
            orientation="h", yanchor="bottom", y=1.02, xanchor="right", x=1,
            font=dict(size=10)
        ),
        margin=dict(l=50, r=30, t=80, b=50),
        xaxis=dict(
            range=list(CHART_DOMAIN),
            tickmode="array",
            tickvals=list(CHART_TICKS),
            gridcolor=GRID_CLR,
            griddash="dash",
            zeroline=False,
            showline=True,
            linecolor="rgba(255,255,255,0.1)",
            tickfont=dict(size=10)
        ),
        yaxis=dict(
            gridcolor=GRID_CLR,
            griddash="dash",
            zeroline=True,
            zerolinecolor="rgba(255,255,255,0.1)",
            tickfont=dict(size=10)
        ),
        height=420,
        autosize=True
    )


# ---------------------------------------------------------------------------
# 1 — Option weights vs strike
# ---------------------------------------------------------------------------

def build_weights_chart(df: pd.DataFrame) -> str:
    """Bar chart of the normalized replication weight at each grid strike."""
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=df["strike"].tolist(), y=df["weight"].tolist(),
        marker_color=C_WEIGHT, name="Weight",
        hovertemplate="K=%{x:.0f}<br>%{y:.2f}%<extra></extra>",
    ))

    layout = _base_layout("Option Weights vs Strike")
    layout["yaxis"]["rangemode"]  = "tozero"
    layout["yaxis"]["ticksuffix"] = "%"
    layout["yaxis"]["tickformat"] = ".0f"
    layout["xaxis"]["title"]      = "Strike"
    fig.update_layout(**layout)

    return fig.to_json()


# ---------------------------------------------------------------------------
# 2 — Portfolio $gamma profile
# ---------------------------------------------------------------------------

def build_gamma_chart(df: pd.DataFrame, spot: float | None = None) -> str:
    """Line chart of the strip's aggregate dollar gamma across the price grid."""
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=df["price"].tolist(), y=df["gamma"].tolist(),
        mode="lines", line=dict(color=C_GAMMA, width=2, shape="spline"),
        name="Portfolio $Gamma",
    ))

    # Spot marker only when it falls inside the plotted domain
    if spot is not None and CHART_DOMAIN[0] <= spot <= CHART_DOMAIN[1]:
        fig.add_vline(x=spot, line_color=C_SPOT, line_dash="dot", line_width=1.5,
                      annotation_text=f"SPOT: {spot:g}", annotation_font_color=C_SPOT,
                      annotation_position="top left", annotation_font_size=10)

    layout = _base_layout("Portfolio $Gamma Profile")
    layout["xaxis"]["title"] = "Underlying Price"
    layout["yaxis"]["title"] = "$Gamma"
    fig.update_layout(**layout)

    return fig.to_json()
