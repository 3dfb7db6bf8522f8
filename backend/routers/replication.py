"""
Replication router — strike ladder, weights, $gamma profile and summary.
Routes:
  GET /api/defaults
  GET /api/replication
  GET /api/summary
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from core.config import (
    CHART_DOMAIN,
    CHART_TICKS,
    DEFAULT_MATURITY,
    DEFAULT_MAX_STRIKE,
    DEFAULT_MIN_STRIKE,
    DEFAULT_SPOT,
    DEFAULT_STRIKE_STEP,
    DEFAULT_VOLATILITY,
    PRICE_GRID_MAX,
)
from services.replication import InvalidParameter, ReplicationParams, compute, summarize

router = APIRouter(prefix="/api", tags=["replication"])


def read_params(
    spot:       float = Query(DEFAULT_SPOT,        description="Underlying spot price"),
    vol:        float = Query(DEFAULT_VOLATILITY,  description="Volatility (%)"),
    maturity:   float = Query(DEFAULT_MATURITY,    description="Time to maturity (years)"),
    min_strike: float = Query(DEFAULT_MIN_STRIKE,  description="Min strike (% of spot)"),
    max_strike: float = Query(DEFAULT_MAX_STRIKE,  description="Max strike (% of spot)"),
    step:       float = Query(DEFAULT_STRIKE_STEP, description="Strike step (% of spot)"),
) -> ReplicationParams:
    """Query string -> validated ReplicationParams (422 on bad input)."""
    params = ReplicationParams(
        spot_price=spot,
        volatility_pct=vol,
        maturity_years=maturity,
        min_strike_pct=min_strike,
        max_strike_pct=max_strike,
        strike_step_pct=step,
    )
    try:
        return params.validate()
    except InvalidParameter as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def params_dict(params: ReplicationParams) -> dict:
    return {
        "spot":       params.spot_price,
        "vol":        params.volatility_pct,
        "maturity":   params.maturity_years,
        "min_strike": params.min_strike_pct,
        "max_strike": params.max_strike_pct,
        "step":       params.strike_step_pct,
    }


# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------

@router.get("/defaults")
def get_defaults():
    """Return the default parameters and chart axis setup for the page."""
    return {
        "params": params_dict(ReplicationParams()),
        "grid":   {"min": 0, "max": PRICE_GRID_MAX},
        "axis":   {"domain": CHART_DOMAIN, "ticks": CHART_TICKS},
    }


# ---------------------------------------------------------------------------
# Full replication
# ---------------------------------------------------------------------------

@router.get("/replication")
def get_replication(params: ReplicationParams = Depends(read_params)):
    """Return the strike ladder plus both series as lists of records."""
    result = compute(params)
    return {
        "params":         params_dict(params),
        "strikes":        result["strikes"].tolist(),
        "optionWeights":  result["option_weights"].to_dict(orient="records"),
        "portfolioGamma": result["portfolio_gamma"].to_dict(orient="records"),
    }


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

@router.get("/summary")
def get_summary(params: ReplicationParams = Depends(read_params)):
    """Return strike counts, weight total, $gamma at spot and band flatness."""
    result = compute(params)
    return {"params": params_dict(params), "summary": summarize(result, params)}
