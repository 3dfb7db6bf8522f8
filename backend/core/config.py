import os

from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# Default replication parameters (what the page opens with)
# ---------------------------------------------------------------------------
DEFAULT_SPOT: float        = float(os.getenv("DEFAULT_SPOT", "100"))
DEFAULT_VOLATILITY: float  = float(os.getenv("DEFAULT_VOLATILITY", "15"))   # %
DEFAULT_MATURITY: float    = float(os.getenv("DEFAULT_MATURITY", "1"))      # years
DEFAULT_MIN_STRIKE: float  = float(os.getenv("DEFAULT_MIN_STRIKE", "50"))   # % of spot
DEFAULT_MAX_STRIKE: float  = float(os.getenv("DEFAULT_MAX_STRIKE", "150"))  # % of spot
DEFAULT_STRIKE_STEP: float = float(os.getenv("DEFAULT_STRIKE_STEP", "5"))   # % of spot

# ---------------------------------------------------------------------------
# Grid / calculation constants
# ---------------------------------------------------------------------------
PRICE_GRID_MAX = 200               # underlying price grid is 0..PRICE_GRID_MAX
STRIKE_MATCH_TOL_PCT = 0.001       # % of spot a strike may miss a grid point by
FLAT_BAND_PCT = (60.0, 140.0)      # central band (% of spot) for the flatness check
MAX_STRIKES: int = int(os.getenv("MAX_STRIKES", "5000"))  # longest strike ladder accepted

# ---------------------------------------------------------------------------
# Chart axes
# ---------------------------------------------------------------------------
CHART_DOMAIN = [0, PRICE_GRID_MAX]
CHART_TICKS  = [0, 50, 100, 150, 200]

# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
CORS_ORIGINS: list[str] = [
    o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
]
