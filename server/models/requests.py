from pydantic import BaseModel, ConfigDict, Field


class SearchRequest(BaseModel):
    query: str | None = None
    limit: int | None = None
    page: int | None = None


class ProcessRequest(BaseModel):
    filename: str | None = None


class DownloadRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_url: str | None = Field(default=None, alias="fileUrl")
