import logging

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

router = APIRouter(tags=["health"])

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str


@router.get("/health", response_model=HealthResponse, status_code=200)
async def healthcheck():
    return {"status": "ok"}


@router.get("/health/ready", response_model=HealthResponse)
async def readiness(request: Request):
    """Report whether the post index answers."""
    es = getattr(request.app.state, "es", None)
    if es is None:
        raise HTTPException(status_code=503, detail="Elasticsearch client not configured")
    try:
        reachable = await es.ping()
    except Exception:
        logger.exception("Elasticsearch ping failed")
        reachable = False
    if not reachable:
        raise HTTPException(status_code=503, detail="Elasticsearch unreachable")
    return {"status": "ready"}
