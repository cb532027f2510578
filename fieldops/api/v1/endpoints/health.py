"""Health check endpoints. No auth; used for liveness and readiness probes."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from fieldops.core.config import get_settings
from fieldops.infrastructure.firebase.client import get_firestore_client
from fieldops.schemas.health import HealthResponse, ReadinessResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Return ok status for liveness."""
    return HealthResponse(version=get_settings().app_version)


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    responses={503: {"description": "Store or trigger workers unavailable", "model": ReadinessResponse}},
)
def readiness_check(request: Request) -> ReadinessResponse | JSONResponse:
    """200 when the document store is configured and trigger workers run; else 503."""
    dispatcher = getattr(request.app.state, "trigger_dispatcher", None)
    body = ReadinessResponse(
        store=get_firestore_client() is not None,
        dispatcher=dispatcher is not None and dispatcher.running,
    )
    if body.store and body.dispatcher:
        return body
    body.status = "not_ready"
    return JSONResponse(status_code=503, content=body.model_dump())
