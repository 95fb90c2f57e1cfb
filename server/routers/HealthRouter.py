from fastapi import APIRouter

from server.models.responses import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> HealthResponse:
    """Liveness probe. Does not contact the embedding provider or the store."""
    return HealthResponse(status="OK", message="Local RAG Endpoint is running")
