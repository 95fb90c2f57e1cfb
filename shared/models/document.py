"""Pydantic models for catalog entries and ranked search hits.

Hierarchy:
  DocumentRecord: one row of the document catalog.
  RankedDocument: a catalog row joined with its cosine distance to a probe vector.
"""

from pydantic import BaseModel


class DocumentRecord(BaseModel):
    """Catalog metadata of an ingested document. Never mutated after insert."""

    id: int
    filename: str
    content_preview: str | None = None
    upload_date: str


class RankedDocument(DocumentRecord):
    """A catalog entry that has a stored vector, with its distance to the probe vector.

    Attributes:
        distance: Cosine distance in [0, 2]; lower is closer.
    """

    distance: float


class IngestResult(BaseModel):
    """Outcome of a single ingestion.

    Attributes:
        document_id: Catalog identifier assigned to the document.
        preview: The stored content preview.
        chunk_count: Number of chunks sent to the embedding provider (0 for empty text).
        embedded: Whether a vector was stored for the document.
    """

    document_id: int
    preview: str
    chunk_count: int = 0
    embedded: bool = False
