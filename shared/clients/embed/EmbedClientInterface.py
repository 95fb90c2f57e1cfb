from abc import abstractmethod
import math

import httpx

from shared.clients.HttpClientInterface import HttpClientInterface
from shared.exceptions.AppError import EmbeddingUnavailableError
from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(HttpClientInterface):
    """Client of an embedding provider: turns one text into one fixed-length vector."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "embed"
        """
        return "embed"

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/embed")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, text: str) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            text (str): The text to embed.

        Returns:
            dict: JSON-serialisable request body (e.g. {"text": "..."}).
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embedding_from_response(self, response_data: dict) -> list:
        """Extract the raw embedding vector from a parsed embedding response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list: The vector as sent by the backend, not yet validated.

        Raises:
            ValueError: If the response does not contain an embedding.
        """
        pass

    def extract_error_detail(self, response: httpx.Response) -> str:
        """Pull a human readable error out of a failed response ({"detail": ...} by convention)."""
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if isinstance(body, dict) and body.get("detail"):
            return str(body["detail"])
        return response.text[:200]

    @staticmethod
    def validate_vector(raw: list) -> list[float]:
        """Check that a provider vector is a non-empty list of finite numbers.

        Args:
            raw (list): The vector as decoded from JSON.

        Returns:
            list[float]: The vector as floats.

        Raises:
            ValueError: If the vector is empty or contains non-numeric or non-finite entries.
        """
        if not isinstance(raw, list) or not raw:
            raise ValueError("Embedding is not a non-empty list.")
        vector: list[float] = []
        for value in raw:
            # bool is an int subclass, but never a valid component
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"Embedding contains a non-numeric value: {value!r}.")
            if not math.isfinite(value):
                raise ValueError(f"Embedding contains a non-finite value: {value!r}.")
            vector.append(float(value))
        return vector

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, text: str) -> list[float]:
        """Embed a single text.

        Builds the backend-specific payload via get_embed_payload(), sends the request,
        checks the status and validates the vector extracted by extract_embedding_from_response().

        Args:
            text (str): The text to embed.

        Returns:
            list[float]: The embedding vector.

        Raises:
            EmbeddingUnavailableError: If the provider is unreachable, times out, answers
                with a non-2xx status or returns a malformed body.
        """
        try:
            response = await self.do_request(
                method="POST",
                endpoint=self.get_endpoint_embedding(),
                json=self.get_embed_payload(text),
            )
        except httpx.HTTPError as exc:
            self.logging.error("Embedding provider '%s' unreachable: %s", self.get_engine_name(), exc)
            raise EmbeddingUnavailableError(f"Embedding provider unreachable: {exc}") from exc

        if not response.is_success:
            detail = self.extract_error_detail(response)
            self.logging.error(
                "Embedding request failed: status %d, detail: %s",
                response.status_code,
                detail,
            )
            raise EmbeddingUnavailableError(f"Embedding request failed with status {response.status_code}: {detail}")

        try:
            return self.validate_vector(self.extract_embedding_from_response(response.json()))
        except ValueError as exc:
            self.logging.error("Embedding provider '%s' returned a malformed response: %s", self.get_engine_name(), exc)
            raise EmbeddingUnavailableError(f"Malformed embedding response: {exc}") from exc

    @abstractmethod
    async def do_fetch_model_description(self) -> str:
        """Describe the model the provider serves, for the startup log.

        Raises:
            httpx.HTTPError: If the provider cannot be reached or answers with an error.
            ValueError: If the provider's answer cannot be interpreted.
        """
        pass
