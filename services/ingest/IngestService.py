"""Ingestion service.

Extracts the text of a stored upload, writes its catalog row, and stores the
document vector produced by the EmbeddingPipeline. The catalog write does not
depend on the embedding outcome: a document whose embedding fails is still
listed, it just never shows up in similarity search.
"""

import asyncio

from services.ingest.EmbeddingPipeline import EmbeddingPipeline
from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.exceptions.AppError import EmbeddingUnavailableError
from shared.extraction.TextExtractor import TextExtractor
from shared.helper.HelperConfig import HelperConfig
from shared.helper.vector_utils import make_preview
from shared.models.document import IngestResult

PREVIEW_CHARS = 500


class IngestService:
    """Orchestrates extract -> catalog insert -> embed -> vector insert for one document."""

    def __init__(
        self,
        helper_config: HelperConfig,
        store_client: StoreClientInterface,
        pipeline: EmbeddingPipeline,
        text_extractor: TextExtractor,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._store_client = store_client
        self._pipeline = pipeline
        self._text_extractor = text_extractor
        self.preview_chars = int(helper_config.get_number_val("INGEST_PREVIEW_CHARS", default=PREVIEW_CHARS))

    ##########################################
    ############### CORE INGEST ##############
    ##########################################

    async def do_ingest(self, filename: str, file_path: str) -> IngestResult:
        """Ingest a single stored upload.

        Re-ingesting the same filename creates a new document; nothing is overwritten.

        Args:
            filename (str): Name recorded in the catalog.
            file_path (str): Path of the stored upload.

        Returns:
            IngestResult: Assigned document id, stored preview and embedding outcome.

        Raises:
            ExtractionFailedError: If the text cannot be extracted. Nothing is written.
            StoreError: If a catalog or vector write fails.
            DimensionMismatchError: If the document vector does not match the store dimensionality.
        """
        # parsers are blocking
        text = await asyncio.to_thread(self._text_extractor.extract, file_path)
        preview = make_preview(text, self.preview_chars)

        record = await self._store_client.do_insert_document(filename, preview)
        self.logging.info("Cataloged document id=%d ('%s'), %d characters.", record.id, filename, len(text))

        chunk_count = len(self._pipeline.split(text))
        try:
            vector = await self._pipeline.do_embed_document(text)
        except EmbeddingUnavailableError as exc:
            self.logging.error(
                "Embedding failed for document id=%d ('%s'): %s. Document is stored without a vector.",
                record.id, filename, exc.message,
            )
            return IngestResult(document_id=record.id, preview=preview, chunk_count=chunk_count, embedded=False)

        if vector is None:
            self.logging.warning("Document id=%d ('%s') has no text; no vector stored.", record.id, filename)
            return IngestResult(document_id=record.id, preview=preview, chunk_count=0, embedded=False)

        await self._store_client.do_insert_embedding(record.id, vector)
        self.logging.info(
            "Embedded document id=%d ('%s'): %d chunk(s) pooled into one %d-dimensional vector.",
            record.id, filename, chunk_count, len(vector), color="green",
        )
        return IngestResult(document_id=record.id, preview=preview, chunk_count=chunk_count, embedded=True)
