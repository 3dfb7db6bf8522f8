"""
FastAPI entry point — mounts all routers, CORS, and serves the frontend.
"""

import logging
import sys
from pathlib import Path

# Ensure the 'backend' directory is in the path for internal imports
sys.path.append(str(Path(__file__).parent))

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from core.config import CORS_ORIGINS, LOG_LEVEL
from routers import charts, export, replication
from services.replication import InvalidParameter

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
)
logger = logging.getLogger("varswap")

# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Variance Swap Replication API",
    description="Replication weights and portfolio dollar-gamma for a 1/K² option strip",
    version="1.0.0",
)

# ---------------------------------------------------------------------------
# CORS — allow browser requests from the configured origins
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(replication.router)
app.include_router(charts.router)
app.include_router(export.router)


# ---------------------------------------------------------------------------
# Errors — parameters rejected anywhere in the kernel surface as 422
# ---------------------------------------------------------------------------
@app.exception_handler(InvalidParameter)
async def invalid_parameter_handler(request: Request, exc: InvalidParameter):
    logger.info("Rejected %s: %s", request.url.path, exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


# ---------------------------------------------------------------------------
# Health check  (must be BEFORE the static file mount)
# ---------------------------------------------------------------------------
@app.get("/api/health")
def health():
    return {"status": "ok", "service": "Variance Swap Replication API"}


# ---------------------------------------------------------------------------
# Serve frontend static files (catch-all — must be LAST)
# ---------------------------------------------------------------------------
FRONTEND_DIR = Path(__file__).parent.parent / "frontend"

if FRONTEND_DIR.exists():
    app.mount("/", StaticFiles(directory=str(FRONTEND_DIR), html=True), name="frontend")
    logger.info("Serving frontend from %s", FRONTEND_DIR)
