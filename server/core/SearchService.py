from services.ingest.EmbeddingPipeline import EmbeddingPipeline
from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.exceptions.AppError import ValidationError
from shared.helper.HelperConfig import HelperConfig
from shared.helper.vector_utils import clamp_pagination, distance_to_similarity
from server.models.responses import SearchResponse, SearchResultItem

DEFAULT_SEARCH_LIMIT = 10


class SearchService:
    """Handles semantic search queries: embed -> rank by cosine distance -> join catalog metadata."""

    def __init__(
        self,
        helper_config: HelperConfig,
        store_client: StoreClientInterface,
        pipeline: EmbeddingPipeline,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._store_client = store_client
        self._pipeline = pipeline

    ##########################################
    ############### CORE #####################
    ##########################################

    async def search(self, query: str | None, limit: int | None = None, page: int | None = None) -> SearchResponse:
        """Rank stored documents by similarity to a free-text query.

        Pagination is applied to the full ranking: page 2 with limit 10 returns ranks 11-20.
        Documents stored without a vector are never returned.

        Args:
            query (str | None): The query text, embedded as one chunk.
            limit (int | None): Page size, clamped to [1, 100]; 10 if missing.
            page (int | None): 1-based page number, clamped to >= 1.

        Returns:
            SearchResponse: Ranked hits with similarity = 1 - cosine distance.

        Raises:
            ValidationError: If the query is empty. Raised before any network call.
            EmbeddingUnavailableError: If the query cannot be embedded or its dimensionality
                does not match the stored vectors.
            StoreError: If the vector store query fails.
        """
        if not query or not query.strip():
            raise ValidationError("Query is required")

        limit, page, offset = clamp_pagination(limit, page, default_limit=DEFAULT_SEARCH_LIMIT)
        self.logging.info("Search: query=%r limit=%d page=%d", query[:80], limit, page)

        probe = await self._pipeline.do_embed_query(query)
        hits = await self._store_client.do_search_nearest(probe, limit=limit, offset=offset)

        results = [
            SearchResultItem(
                id=hit.id,
                filename=hit.filename,
                content=hit.content_preview,
                similarity=distance_to_similarity(hit.distance),
                upload_date=hit.upload_date,
            )
            for hit in hits
        ]
        self.logging.info("Search: returning %d result(s).", len(results))
        return SearchResponse(results=results, page=page, limit=limit)
