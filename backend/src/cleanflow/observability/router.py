"""Health endpoint for load balancers and container probes."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from .health import HealthStatus, check_database_health

router = APIRouter(tags=["Observability"])


@router.get(
    "/health",
    summary="Health check endpoint",
    description="Returns the health of the database connection",
    status_code=200,
)
def health_check(db: Session = Depends(get_db)):
    """Return 200 when the database answers, 503 otherwise."""
    database = check_database_health(db)

    response_data = {
        "status": database.status.value,
        "components": {
            "database": {
                "status": database.status.value,
                "message": database.message,
                "latency_ms": database.latency_ms,
            }
        },
    }
    status_code = 200 if database.status == HealthStatus.HEALTHY else 503
    return JSONResponse(content=response_data, status_code=status_code)
