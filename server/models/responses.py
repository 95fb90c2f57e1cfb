from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Response model serialised with camelCase keys (fileUrl, documentId, uploadDate)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(CamelModel):
    status: str
    message: str


class UploadResponse(CamelModel):
    message: str
    file_url: str
    filename: str


class DownloadResponse(CamelModel):
    message: str
    filename: str
    file_url: str


class ProcessResponse(CamelModel):
    message: str
    document_id: int
    preview: str


class SearchResultItem(CamelModel):
    id: int
    filename: str
    content: str | None
    similarity: float
    upload_date: str


class SearchResponse(CamelModel):
    results: list[SearchResultItem]
    page: int
    limit: int


class DocumentSummary(CamelModel):
    id: int
    filename: str
    preview: str | None
    upload_date: str


class DocumentsResponse(CamelModel):
    documents: list[DocumentSummary]
    page: int
    limit: int
