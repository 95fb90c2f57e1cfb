"""FastAPI application entry point for the local RAG endpoint."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from services.ingest.EmbeddingPipeline import EmbeddingPipeline
from services.ingest.IngestService import IngestService
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.clients.store.StoreClientManager import StoreClientManager
from shared.exceptions.AppError import AppError
from shared.extraction.TextExtractor import TextExtractor
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging
from server.core.CatalogService import CatalogService
from server.core.SearchService import SearchService
from server.core.UploadStorage import UploadStorage
from server.routers.DocumentRouter import router as document_router
from server.routers.HealthRouter import router as health_router
from server.routers.SearchRouter import router as search_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


def wire_services(
    app: FastAPI,
    helper_config: HelperConfig,
    embed_client: EmbedClientInterface,
    store_client: StoreClientInterface,
    upload_storage: UploadStorage,
) -> None:
    """Build the services on top of booted clients and publish them on app.state."""
    pipeline = EmbeddingPipeline(helper_config=helper_config, embed_client=embed_client)
    app.state.logging = helper_config.get_logger()
    app.state.helper_config = helper_config
    app.state.embed_client = embed_client
    app.state.store_client = store_client
    app.state.upload_storage = upload_storage
    app.state.ingest_service = IngestService(
        helper_config=helper_config,
        store_client=store_client,
        pipeline=pipeline,
        text_extractor=TextExtractor(helper_config=helper_config),
    )
    app.state.search_service = SearchService(
        helper_config=helper_config,
        store_client=store_client,
        pipeline=pipeline,
    )
    app.state.catalog_service = CatalogService(helper_config=helper_config, store_client=store_client)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    helper_config = HelperConfig(logger=logging)
    embed_client = EmbedClientManager(helper_config=helper_config).get_client()
    store_client = StoreClientManager(helper_config=helper_config).get_client()
    upload_storage = UploadStorage(helper_config=helper_config)

    logging.info("Booting all clients...")
    await store_client.boot()
    await embed_client.boot()
    await upload_storage.boot()
    logging.info("All clients booted successfully.")

    await check_connections(embed_client, store_client)
    wire_services(app, helper_config, embed_client, store_client, upload_storage)

    # while the app is running...
    yield

    # when the app shuts down, close all client connections
    logging.info("Shutting down, closing all clients...")
    await upload_storage.close()
    await embed_client.close()
    await store_client.close()
    logging.info("All clients closed.")


async def check_connections(embed_client: EmbedClientInterface, store_client: StoreClientInterface) -> None:
    """Check connectivity to all configured backends on startup.

    An unreachable embedding provider is non-fatal: ingestion degrades to
    metadata-only and search fails per request until it comes back.
    The store is fatal, nothing can be served without it.

    Raises:
        RuntimeError: If the store is not usable.
    """
    if await embed_client.do_healthcheck():
        try:
            description = await embed_client.do_fetch_model_description()
        except (httpx.HTTPError, ValueError) as exc:
            logging.warning("Could not read model details from '%s': %s", embed_client.get_engine_name(), exc)
            description = "model details unavailable"
        logging.info("Embedding provider '%s' is reachable (%s).", embed_client.get_engine_name(), description, color="green")
    else:
        logging.warning(
            "Embedding provider '%s' is not reachable. Documents will be stored without vectors and search will fail.",
            embed_client.get_engine_name(),
        )

    if not await store_client.do_healthcheck():
        raise RuntimeError(f"Store client '{store_client.get_engine_name()}' is not usable. Cannot serve requests.")


app = FastAPI(
    title="Local RAG Endpoint",
    description=(
        "Document ingestion and semantic search. Uploaded documents are converted to text, "
        "embedded chunk by chunk through an embedding model server, mean-pooled into one "
        "vector per document and ranked by cosine distance via POST /api/search."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(document_router)
app.include_router(search_router)


@app.exception_handler(AppError)
async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "query"))
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(status_code=400, content={"error": "Invalid request: " + "; ".join(problems)})


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logging.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal Server Error"})


# Server Start
if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("APP_PORT", "3000"))
    logging.info("Starting Local RAG Endpoint v%s on port %d...", app_version, port)
    uvicorn.run(app, host="0.0.0.0", port=port)
