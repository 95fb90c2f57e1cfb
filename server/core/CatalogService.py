from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.helper.vector_utils import clamp_pagination
from server.models.responses import DocumentsResponse, DocumentSummary

DEFAULT_LIST_LIMIT = 50


class CatalogService:
    """Paginated listing of the document catalog, newest upload first."""

    def __init__(self, helper_config: HelperConfig, store_client: StoreClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._store_client = store_client

    async def list_documents(self, limit: int | None = None, page: int | None = None) -> DocumentsResponse:
        limit, page, offset = clamp_pagination(limit, page, default_limit=DEFAULT_LIST_LIMIT)
        records = await self._store_client.do_list_documents(limit=limit, offset=offset)
        return DocumentsResponse(
            documents=[
                DocumentSummary(
                    id=record.id,
                    filename=record.filename,
                    preview=record.content_preview,
                    upload_date=record.upload_date,
                )
                for record in records
            ],
            page=page,
            limit=limit,
        )
