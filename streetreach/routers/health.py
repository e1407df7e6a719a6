"""Health check endpoint."""

from fastapi import APIRouter

from streetreach.routers.deps import RecordStoreDep
from streetreach.schemas.health import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    store: RecordStoreDep,
) -> HealthResponse:
    """Check service health including record store connectivity."""
    store_healthy = await store.health_check()

    return HealthResponse(
        status="healthy" if store_healthy else "degraded",
        record_store=store_healthy,
    )
