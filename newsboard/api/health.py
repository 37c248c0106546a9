"""Health check: is the service up, and can it reach its database."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from newsboard.core.config import settings
from newsboard.core.database import check_db_connected, get_db
from newsboard.schemas.health import HealthResponse

router = APIRouter()


@router.get(
    "",
    response_model=HealthResponse,
    responses={status.HTTP_503_SERVICE_UNAVAILABLE: {"model": HealthResponse}},
)
def get_health(
    response: Response,
    db: Annotated[Session, Depends(get_db)],
) -> HealthResponse:
    """
    200 with status "ok" while the database answers.
    503 with status "degraded" when it does not, so a load balancer stops routing here.
    """
    if check_db_connected(db):
        return HealthResponse(status="ok", environment=settings.APP_ENV, database="connected")
    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(status="degraded", environment=settings.APP_ENV, database="disconnected")
