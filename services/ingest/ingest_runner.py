"""Ingest runner entry point.

Ingests files from disk without going through the HTTP API. With no
arguments every file in UPLOAD_DIR with a supported extension is ingested.

Usage:
    python -m services.ingest.ingest_runner [path ...]
"""

import asyncio
import os
import sys

from services.ingest.EmbeddingPipeline import EmbeddingPipeline
from services.ingest.IngestService import IngestService
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.store.StoreClientManager import StoreClientManager
from shared.exceptions.AppError import AppError
from shared.extraction.TextExtractor import TextExtractor
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import setup_logging


def collect_paths(config: HelperConfig, args: list[str], extensions: list[str]) -> list[str]:
    """Return the files to ingest: the given paths, or every file in UPLOAD_DIR with one of the given extensions."""
    if args:
        return args
    upload_dir = config.get_path_val("UPLOAD_DIR", "uploads")
    if not os.path.isdir(upload_dir):
        return []
    return sorted(
        os.path.join(upload_dir, name)
        for name in os.listdir(upload_dir)
        if os.path.isfile(os.path.join(upload_dir, name)) and os.path.splitext(name)[1].lower() in extensions
    )


async def main(args: list[str]) -> int:
    """Ingest the given files and return the number of failures."""
    logger = setup_logging()
    config = HelperConfig(logger=logger)
    embed_client = EmbedClientManager(helper_config=config).get_client()
    store_client = StoreClientManager(helper_config=config).get_client()

    try:
        # the store is required; the provider may be down (documents are then cataloged without vectors)
        await store_client.boot()
        await embed_client.boot()
        if not await embed_client.do_healthcheck():
            logger.warning("Embedding provider '%s' is not reachable. Documents will be stored without vectors.", embed_client.get_engine_name())

        text_extractor = TextExtractor(helper_config=config)
        service = IngestService(
            helper_config=config,
            store_client=store_client,
            pipeline=EmbeddingPipeline(helper_config=config, embed_client=embed_client),
            text_extractor=text_extractor,
        )

        paths = collect_paths(config, args, text_extractor.get_supported_extensions())
        if not paths:
            logger.warning("No files to ingest.")
            return 0

        failures = 0
        for path in paths:
            try:
                result = await service.do_ingest(os.path.basename(path), path)
            except AppError as exc:
                failures += 1
                logger.error("Failed to ingest %s: %s", path, exc.message)
                continue
            logger.info(
                "Ingested %s as document id=%d (%s).",
                path, result.document_id, "embedded" if result.embedded else "metadata only",
            )
        logger.info("Ingestion finished: %d file(s), %d failure(s).", len(paths), failures)
        return failures
    finally:
        await embed_client.close()
        await store_client.close()


if __name__ == "__main__":
    sys.exit(1 if asyncio.run(main(sys.argv[1:])) else 0)
