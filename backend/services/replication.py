"""
Replication service — variance swap replication by a static strip of options.

Builds the 1/K² strike ladder, the normalized weight-by-strike distribution on
the 0..200 price grid, and the aggregate dollar-gamma profile of the strip.
Everything here is pure: same parameters in, same frames out.
"""

from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass

import numpy as np
import pandas as pd
from scipy.stats import norm

from core.config import (
    DEFAULT_MATURITY,
    DEFAULT_MAX_STRIKE,
    DEFAULT_MIN_STRIKE,
    DEFAULT_SPOT,
    DEFAULT_STRIKE_STEP,
    DEFAULT_VOLATILITY,
    FLAT_BAND_PCT,
    MAX_STRIKES,
    PRICE_GRID_MAX,
    STRIKE_MATCH_TOL_PCT,
)

logger = logging.getLogger(__name__)


class InvalidParameter(ValueError):
    """Parameters that cannot describe a replication portfolio."""


@dataclass(frozen=True)
class ReplicationParams:
    spot_price: float = DEFAULT_SPOT
    volatility_pct: float = DEFAULT_VOLATILITY
    maturity_years: float = DEFAULT_MATURITY
    min_strike_pct: float = DEFAULT_MIN_STRIKE
    max_strike_pct: float = DEFAULT_MAX_STRIKE
    strike_step_pct: float = DEFAULT_STRIKE_STEP

    def validate(self) -> "ReplicationParams":
        """Raise InvalidParameter on the first field that breaks an invariant."""
        for name, value in asdict(self).items():
            if not math.isfinite(value):
                raise InvalidParameter(f"{name} must be finite, got {value}")

        if self.spot_price <= 0:
            raise InvalidParameter(f"spot_price must be > 0, got {self.spot_price}")
        if self.volatility_pct <= 0:
            raise InvalidParameter(f"volatility_pct must be > 0, got {self.volatility_pct}")
        if self.maturity_years <= 0:
            raise InvalidParameter(f"maturity_years must be > 0, got {self.maturity_years}")
        if self.strike_step_pct <= 0:
            raise InvalidParameter(f"strike_step_pct must be > 0, got {self.strike_step_pct}")
        if self.min_strike_pct <= 0:
            raise InvalidParameter(
                f"min_strike_pct must be > 0 (strikes must be positive), got {self.min_strike_pct}"
            )
        if self.max_strike_pct < self.min_strike_pct:
            raise InvalidParameter(
                f"max_strike_pct ({self.max_strike_pct}) is below min_strike_pct ({self.min_strike_pct})"
            )

        # Derived strikes: both ends finite, and 1/K² finite at the low end
        low  = self.spot_price * self.min_strike_pct / 100.0
        high = self.spot_price * self.max_strike_pct / 100.0
        if not math.isfinite(high):
            raise InvalidParameter(
                f"strikes overflow: spot_price * max_strike_pct / 100 is not finite ({high})"
            )
        low_sq = low * low
        if low_sq == 0 or not math.isfinite(1.0 / low_sq):
            raise InvalidParameter(
                f"strikes too small: 1/K² is not finite for the lowest strike ({low})"
            )

        count = self.ladder_size()
        if count > MAX_STRIKES:
            raise InvalidParameter(
                f"strike ladder has {count} strikes, above the {MAX_STRIKES} limit; "
                "widen strike_step_pct or narrow the strike range"
            )
        return self

    def ladder_size(self) -> float:
        """Number of percent levels min, min + step, ..., max (inf if it overflows)."""
        ratio = (self.max_strike_pct - self.min_strike_pct) / self.strike_step_pct
        if not math.isfinite(ratio):
            return math.inf
        return int(math.floor(ratio + 1e-9)) + 1


def price_grid() -> np.ndarray:
    """Integer underlying prices 0..PRICE_GRID_MAX as floats."""
    return np.arange(PRICE_GRID_MAX + 1, dtype=float)


# ---------------------------------------------------------------------------
# Strike ladder
# ---------------------------------------------------------------------------

def build_replication_strikes(params: ReplicationParams) -> np.ndarray:
    """
    Absolute strikes spot * pct / 100 for pct = min, min + step, ..., max.

    Percent levels come from an index rather than repeated addition, so the
    ladder cannot drift past max. A non-positive step or a ladder longer than
    MAX_STRIKES is rejected before anything is allocated.
    """
    params.validate()

    count = params.ladder_size()
    pcts  = params.min_strike_pct + params.strike_step_pct * np.arange(count)

    return params.spot_price * pcts / 100.0


# ---------------------------------------------------------------------------
# Weights
# ---------------------------------------------------------------------------

def build_option_weights(
    params: ReplicationParams, strikes: np.ndarray | None = None
) -> pd.DataFrame:
    """
    Weight per grid price, in percent of the whole strip.

    A grid price p carries raw weight 1/p² when a ladder strike rounds onto it
    (within STRIKE_MATCH_TOL_PCT of spot); all other points carry 0. Raw
    weights are rescaled to sum to 100. When no strike lands on the grid every
    weight is 0.
    """
    params.validate()
    if strikes is None:
        strikes = build_replication_strikes(params)

    grid = price_grid()
    raw  = np.zeros_like(grid)

    tol     = STRIKE_MATCH_TOL_PCT * params.spot_price / 100.0
    nearest = np.rint(strikes)
    on_grid = (
        (np.abs(strikes - nearest) <= tol)
        & (nearest > 0)
        & (nearest <= PRICE_GRID_MAX)
    )
    idx = nearest[on_grid].astype(int)
    raw[idx] = 1.0 / grid[idx] ** 2

    total = raw.sum()
    if total > 0:
        weights = raw / total * 100.0
    else:
        logger.warning(
            "No replication strike lands on the 0..%d grid (spot=%s, range=%s..%s%%, step=%s%%); "
            "weights are all zero.",
            PRICE_GRID_MAX, params.spot_price, params.min_strike_pct,
            params.max_strike_pct, params.strike_step_pct,
        )
        weights = raw

    logger.debug("Weights: %d of %d strikes on grid, raw total %.6g", len(idx), len(strikes), total)
    return pd.DataFrame({"strike": grid, "weight": weights})


# ---------------------------------------------------------------------------
# Gamma
# ---------------------------------------------------------------------------

def black_scholes_dollar_gamma(
    underlying_price, strike, volatility_pct: float, maturity_years: float
):
    """
    Closed-form dollar gamma (per 1% move) of an option struck at `strike`.

        d1     = (ln(S/K) + vol²/2 · T) / (vol · √T)
        gamma  = exp(-d1²/2) / (K · vol · √(2πT))
        $gamma = gamma · S² / 100

    `underlying_price` and `strike` may be scalars or arrays that broadcast
    against each other; S = 0 gives 0.
    """
    k = np.asarray(strike, dtype=float)
    if np.any(k <= 0) or not np.all(np.isfinite(k)):
        raise InvalidParameter(f"strike must be finite and > 0, got {strike}")
    vol = volatility_pct / 100.0
    if not math.isfinite(vol) or vol <= 0:
        raise InvalidParameter(f"volatility_pct must be > 0, got {volatility_pct}")
    if not math.isfinite(maturity_years) or maturity_years <= 0:
        raise InvalidParameter(f"maturity_years must be > 0, got {maturity_years}")

    s = np.asarray(underlying_price, dtype=float)
    if np.any(s < 0) or not np.all(np.isfinite(s)):
        raise InvalidParameter("underlying price must be finite and >= 0")

    vol_sqrt_t = vol * math.sqrt(maturity_years)
    with np.errstate(divide="ignore"):
        d1 = (np.log(s / k) + 0.5 * vol ** 2 * maturity_years) / vol_sqrt_t

    # norm.pdf(d1) / (K·vol·√T) == exp(-d1²/2) / (K·vol·√(2πT))
    gamma  = norm.pdf(d1) / (k * vol_sqrt_t)
    dollar = np.where(s == 0, 0.0, gamma * s ** 2 / 100.0)

    return float(dollar) if dollar.ndim == 0 else dollar


def build_portfolio_gamma(params: ReplicationParams, strikes: np.ndarray) -> pd.DataFrame:
    """
    Aggregate dollar gamma of the strip at every grid price.

    Each strike K enters with (1/K²) / 100, the raw replication weight, not
    the normalized percentage shown by build_option_weights. The sum runs over
    a (strikes x grid) array in one pass.
    """
    params.validate()
    grid = price_grid()
    k    = np.asarray(strikes, dtype=float)

    if k.size == 0:
        return pd.DataFrame({"price": grid, "gamma": np.zeros_like(grid)})

    dollar = black_scholes_dollar_gamma(
        grid[np.newaxis, :], k[:, np.newaxis], params.volatility_pct, params.maturity_years
    )
    with np.errstate(divide="ignore", over="ignore", invalid="ignore"):
        weights = (1.0 / (k * k)) / 100.0
        gamma   = (weights[:, np.newaxis] * dollar).sum(axis=0)

    if not np.all(np.isfinite(gamma)):
        raise InvalidParameter(
            "portfolio $gamma overflows for these parameters; raise spot_price or min_strike_pct"
        )

    return pd.DataFrame({"price": grid, "gamma": gamma})


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

def compute(params: ReplicationParams) -> dict:
    """Return {"strikes", "option_weights", "portfolio_gamma"} for `params`."""
    params.validate()

    strikes         = build_replication_strikes(params)
    option_weights  = build_option_weights(params, strikes)
    portfolio_gamma = build_portfolio_gamma(params, strikes)

    logger.debug(
        "Computed replication: %d strikes, peak weight %.4f%%, peak $gamma %.6g",
        len(strikes), option_weights["weight"].max(), portfolio_gamma["gamma"].max(),
    )
    return {
        "strikes":         strikes,
        "option_weights":  option_weights,
        "portfolio_gamma": portfolio_gamma,
    }


def summarize(result: dict, params: ReplicationParams, band: tuple = FLAT_BAND_PCT) -> dict:
    """
    Headline numbers for a computed replication.

    `band` is a (low, high) range in % of spot; the gamma flatness is
    (max - min) / mean of the profile over that band, clipped to the grid.
    """
    weights = result["option_weights"]
    gamma   = result["portfolio_gamma"]
    spot    = params.spot_price

    lo = max(0.0, spot * band[0] / 100.0)
    hi = min(float(PRICE_GRID_MAX), spot * band[1] / 100.0)
    central = gamma.loc[(gamma["price"] >= lo) & (gamma["price"] <= hi), "gamma"]

    if central.empty or central.mean() <= 0:
        band_mean = band_min = band_max = flatness = 0.0
    else:
        band_mean = float(central.mean())
        band_min  = float(central.min())
        band_max  = float(central.max())
        flatness  = (band_max - band_min) / band_mean

    # None when spot is off the 0..PRICE_GRID_MAX grid (np.interp would clamp)
    gamma_at_spot = None
    if 0 <= spot <= PRICE_GRID_MAX:
        gamma_at_spot = float(np.interp(spot, gamma["price"], gamma["gamma"]))

    return {
        "strike_count":    int(len(result["strikes"])),
        "matched_strikes": int((weights["weight"] > 0).sum()),
        "weight_total":    float(weights["weight"].sum()),
        "gamma_at_spot":   gamma_at_spot,
        "band":            [lo, hi],
        "band_mean":       band_mean,
        "band_min":        band_min,
        "band_max":        band_max,
        "flatness":        flatness,
    }
