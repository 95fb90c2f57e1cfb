from fastapi import APIRouter, Request

from server.core.failures import to_public_failure
from server.models.requests import SearchRequest
from server.models.responses import SearchResponse
from shared.exceptions.AppError import ValidationError

router = APIRouter(prefix="/api", tags=["search"])


@router.post("/search")
async def search_documents(request: Request, body: SearchRequest) -> SearchResponse:
    """Execute a semantic search over all embedded documents.

    Args:
        request (Request): FastAPI request (provides app.state.search_service).
        body (SearchRequest): JSON body with query, optional limit (default 10) and page (default 1).

    Returns:
        SearchResponse: Ranked documents with their similarity scores.
    """
    request.app.state.logging.info("Search request received: %r", (body.query or "")[:80])
    try:
        return await request.app.state.search_service.search(body.query, limit=body.limit, page=body.page)
    except ValidationError:
        raise
    except Exception as exc:
        raise to_public_failure(request.app.state.logging, "Failed to perform search", exc) from exc
