"""Chunk-and-embed pipeline.

Turns a document's text into the single vector stored for it: the text is cut
into positional chunks, every chunk is embedded by the provider one call at a
time, and the chunk vectors are mean-pooled.
"""

from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.exceptions.AppError import DimensionMismatchError
from shared.helper.HelperConfig import HelperConfig
from shared.helper.vector_utils import mean_pool, split_text

DEFAULT_CHUNK_SIZE = 2000  # characters per chunk


class EmbeddingPipeline:
    def __init__(self, helper_config: HelperConfig, embed_client: EmbedClientInterface) -> None:
        self.logging = helper_config.get_logger()
        self._embed_client = embed_client
        self.chunk_size = int(helper_config.get_number_val("INGEST_CHUNK_SIZE", default=DEFAULT_CHUNK_SIZE))
        if self.chunk_size <= 0:
            raise ValueError(f"INGEST_CHUNK_SIZE must be positive, got {self.chunk_size}.")

    def split(self, text: str) -> list[str]:
        return split_text(text, self.chunk_size)

    async def do_embed_document(self, text: str) -> list[float] | None:
        """Embed a whole document into one vector.

        Args:
            text (str): The full extracted text.

        Returns:
            list[float] | None: The mean of all chunk vectors, or None for empty text
                (the provider is not contacted in that case).

        Raises:
            EmbeddingUnavailableError: If any chunk fails to embed; the whole document is aborted.
            DimensionMismatchError: If the provider returns vectors of different lengths.
        """
        if not text:
            return None

        chunks = self.split(text)
        self.logging.debug("Embedding %d chunk(s) of up to %d characters.", len(chunks), self.chunk_size)

        vectors: list[list[float]] = []
        for index, chunk in enumerate(chunks):
            vector = await self._embed_client.do_embed(chunk)
            if vectors and len(vector) != len(vectors[0]):
                self.logging.error(
                    "Chunk %d returned a %d-dimensional vector, previous chunks had %d.",
                    index, len(vector), len(vectors[0]),
                )
                raise DimensionMismatchError(expected=len(vectors[0]), actual=len(vector))
            vectors.append(vector)

        return mean_pool(vectors)

    async def do_embed_query(self, text: str) -> list[float]:
        """Embed a search query as a single chunk, without splitting.

        Raises:
            EmbeddingUnavailableError: If the provider fails.
        """
        return await self._embed_client.do_embed(text)
