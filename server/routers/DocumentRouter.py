from fastapi import APIRouter, File, Query, Request, UploadFile

from server.core.failures import to_public_failure
from server.models.requests import DownloadRequest, ProcessRequest
from server.models.responses import DocumentsResponse, DownloadResponse, ProcessResponse, UploadResponse
from shared.exceptions.AppError import NotFoundError, ValidationError

router = APIRouter(prefix="/api", tags=["documents"])


@router.post("/upload")
async def upload_document(request: Request, file: UploadFile | None = File(default=None)) -> UploadResponse:
    """Store an uploaded document for later processing.

    Args:
        request (Request): FastAPI request (provides app.state.upload_storage).
        file (UploadFile | None): Multipart field "file".

    Returns:
        UploadResponse: The stored file name and its URL.
    """
    storage = request.app.state.upload_storage
    try:
        if file is None:
            raise ValidationError("No file uploaded")
        content = await file.read(storage.max_bytes + 1)
        filename = await storage.do_save_upload(file.filename, content)
    except ValidationError:
        raise
    except Exception as exc:
        raise to_public_failure(request.app.state.logging, "Failed to upload file", exc) from exc
    return UploadResponse(
        message="File uploaded successfully",
        file_url=storage.get_public_url(filename),
        filename=filename,
    )


@router.post("/download")
async def download_document(request: Request, body: DownloadRequest) -> DownloadResponse:
    """Fetch a document from a URL into upload storage.

    Args:
        request (Request): FastAPI request (provides app.state.upload_storage).
        body (DownloadRequest): JSON body with fileUrl.

    Returns:
        DownloadResponse: The stored file name and its URL.
    """
    storage = request.app.state.upload_storage
    try:
        filename = await storage.do_download(body.file_url)
    except ValidationError:
        raise
    except Exception as exc:
        raise to_public_failure(request.app.state.logging, "Failed to download file", exc) from exc
    return DownloadResponse(
        message="File downloaded and saved successfully",
        filename=filename,
        file_url=storage.get_public_url(filename),
    )


@router.post("/process")
async def process_document(request: Request, body: ProcessRequest) -> ProcessResponse:
    """Extract, catalog and embed a stored upload.

    An embedding failure does not fail the request; the document is then listed
    but not searchable.

    Args:
        request (Request): FastAPI request (provides app.state.upload_storage and app.state.ingest_service).
        body (ProcessRequest): JSON body with the stored filename.

    Returns:
        ProcessResponse: The assigned document id and the stored preview.
    """
    try:
        path = request.app.state.upload_storage.resolve(body.filename)
        result = await request.app.state.ingest_service.do_ingest(body.filename, path)
    except (ValidationError, NotFoundError):
        raise
    except Exception as exc:
        raise to_public_failure(request.app.state.logging, "Failed to process document", exc) from exc
    return ProcessResponse(
        message="Document processed and indexed successfully",
        document_id=result.document_id,
        preview=result.preview,
    )


@router.get("/documents")
async def list_documents(
    request: Request,
    limit: int = Query(default=50),
    page: int = Query(default=1),
) -> DocumentsResponse:
    """List cataloged documents, newest first.

    Args:
        request (Request): FastAPI request (provides app.state.catalog_service).
        limit (int): Page size, clamped to [1, 100].
        page (int): 1-based page number, clamped to >= 1.

    Returns:
        DocumentsResponse: The requested page of the catalog.
    """
    try:
        return await request.app.state.catalog_service.list_documents(limit=limit, page=page)
    except Exception as exc:
        raise to_public_failure(request.app.state.logging, "Failed to list documents", exc) from exc
