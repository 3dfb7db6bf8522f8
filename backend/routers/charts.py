"""
Charts router — returns Plotly JSON for interactive charts.
Route: GET /api/charts/{chart_type}

chart_type options:
  weights | gamma
"""

from fastapi import APIRouter, Depends, HTTPException

from routers.replication import read_params
from services.chart_service import build_gamma_chart, build_weights_chart
from services.replication import ReplicationParams, compute

router = APIRouter(prefix="/api", tags=["charts"])

CHART_TYPES = {"weights", "gamma"}


@router.get("/charts/{chart_type}")
def get_chart(chart_type: str, params: ReplicationParams = Depends(read_params)):
    """Return Plotly JSON string for the requested chart."""
    if chart_type not in CHART_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown chart type. Valid: {', '.join(sorted(CHART_TYPES))}",
        )

    result = compute(params)

    try:
        if chart_type == "weights":
            json_str = build_weights_chart(result["option_weights"])
        else:
            json_str = build_gamma_chart(result["portfolio_gamma"], spot=params.spot_price)
    except Exception as exc:  # noqa: BLE001
        raise HTTPException(status_code=500, detail=f"Chart error: {exc}") from exc

    # Return as a plain string; the frontend will JSON.parse() it
    return {"chart_type": chart_type, "figure": json_str}
