"""
Export router — download a computed series as CSV.
Route: GET /api/export/{series}

series options:
  weights | gamma
"""

import io
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from routers.replication import read_params
from services.replication import ReplicationParams, compute

router = APIRouter(prefix="/api", tags=["export"])

SERIES = {
    "weights": "option_weights",
    "gamma":   "portfolio_gamma",
}


@router.get("/export/{series}")
def export_csv(series: str, params: ReplicationParams = Depends(read_params)):
    """Stream the requested series as a CSV file download."""
    if series not in SERIES:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown series. Valid: {', '.join(sorted(SERIES))}",
        )

    df = compute(params)[SERIES[series]]
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filename  = f"replication_{series}_{timestamp}.csv"

    buffer = io.StringIO()
    df.to_csv(buffer, index=False)
    buffer.seek(0)

    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
