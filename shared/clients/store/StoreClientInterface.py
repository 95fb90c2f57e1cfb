from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.document import DocumentRecord, RankedDocument


class StoreClientInterface(ClientInterface):
    """Document catalog and vector store behind one client.

    The catalog keeps one metadata row per ingested document. The vector store keeps
    at most one vector per document, all of the same dimensionality, and answers
    distance-ordered nearest-neighbour queries. Documents without a vector are
    never returned by do_search_nearest().
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "store"
        """
        return "store"

    ##########################################
    ################ CATALOG #################
    ##########################################

    @abstractmethod
    async def do_insert_document(self, filename: str, content_preview: str) -> DocumentRecord:
        """Insert a catalog row stamped with the current upload time.

        Args:
            filename (str): Name of the stored upload.
            content_preview (str): Preview of the extracted text.

        Returns:
            DocumentRecord: The inserted row including its assigned identifier.

        Raises:
            StoreError: If the write fails.
        """
        pass

    @abstractmethod
    async def do_get_document(self, document_id: int) -> DocumentRecord | None:
        """Fetch a single catalog row.

        Returns:
            DocumentRecord | None: The row, or None if the id is unknown.

        Raises:
            StoreError: If the read fails.
        """
        pass

    @abstractmethod
    async def do_list_documents(self, limit: int, offset: int) -> list[DocumentRecord]:
        """List catalog rows, newest upload first.

        Args:
            limit (int): Maximum number of rows.
            offset (int): Number of rows to skip.

        Returns:
            list[DocumentRecord]: The requested page.

        Raises:
            StoreError: If the read fails.
        """
        pass

    @abstractmethod
    async def do_count_documents(self) -> int:
        """Return the number of catalog rows."""
        pass

    ##########################################
    ############### VECTORS ##################
    ##########################################

    @abstractmethod
    async def do_insert_embedding(self, document_id: int, vector: list[float]) -> None:
        """Persist the combined vector of a document.

        Args:
            document_id (int): Catalog identifier the vector belongs to.
            vector (list[float]): The document vector.

        Raises:
            DimensionMismatchError: If the vector length differs from the store's dimensionality.
            StoreError: If the write fails.
        """
        pass

    @abstractmethod
    async def do_search_nearest(self, probe: list[float], limit: int, offset: int) -> list[RankedDocument]:
        """Rank every stored vector by cosine distance to the probe, ascending.

        Pagination is applied after ranking: offset skips the closest `offset` documents
        of the full ranked set.

        Args:
            probe (list[float]): The query vector.
            limit (int): Maximum number of hits.
            offset (int): Number of ranked hits to skip.

        Returns:
            list[RankedDocument]: Hits joined with their catalog metadata.

        Raises:
            DimensionMismatchError: If the probe length differs from the store's dimensionality.
            StoreError: If the read fails.
        """
        pass

    @abstractmethod
    async def do_count_embeddings(self) -> int:
        """Return the number of stored vectors."""
        pass

    @abstractmethod
    async def get_dimension(self) -> int | None:
        """Return the dimensionality fixed by the first stored vector, or None while empty."""
        pass
