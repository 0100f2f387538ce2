"""
Liveness and readiness endpoints for the platform's deploy checks.

/health answers as long as the process serves requests. The readiness check
also needs the database and the profile, subject, subscription and
notification tables; until they exist it answers 503 so traffic is held back.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from azhari_platform.database.session import get_db_session
from azhari_platform.platform.db_readiness import check_required_tables

SERVICE_NAME = "azhari-platform"

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok", "service": SERVICE_NAME}


@router.get("/api/health/readiness")
async def readiness(db_session=Depends(get_db_session)):
    schema = check_required_tables(db_session)
    body = {
        "status": "ready" if schema.ready else "not_ready",
        "checks": {
            "database": "ok",
            "tables": {
                "required": schema.checked_tables,
                "missing": schema.missing_tables,
            },
        },
    }
    return JSONResponse(status_code=200 if schema.ready else 503, content=body)
