from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientOllama(EmbedClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self.embed_model = self.get_config_val("MODEL", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Ollama"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="MODEL", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        # root on ollama
        return ""

    def get_endpoint_embedding(self) -> str:
        return "/api/embed"

    def get_endpoint_model_details(self) -> str:
        # model name goes in the body
        return "/api/show"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, text: str) -> dict:
        """Build the Ollama embedding request body.

        Args:
            text (str): The text to embed.

        Returns:
            dict: {"model": "...", "input": ["..."]}
        """
        return {"model": self.embed_model, "input": [text]}

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embedding_from_response(self, response_data: dict) -> list:
        """Extract the single embedding from an Ollama /api/embed response.

        Args:
            response_data (dict): The parsed JSON response body ({"embeddings": [[...]]}).

        Returns:
            list: The first (and only) embedding.

        Raises:
            ValueError: If the response does not contain exactly one embedding.
        """
        embeddings = response_data.get("embeddings") if isinstance(response_data, dict) else None
        if not embeddings or len(embeddings) != 1:
            raise ValueError(
                "Ollama response does not contain exactly one embedding. "
                f"Response keys: {list(response_data.keys()) if isinstance(response_data, dict) else type(response_data).__name__}"
            )
        return embeddings[0]

    def extract_vector_size_from_model_info(self, model_info: dict) -> int:
        info: dict = model_info.get("model_info", {})
        for key, value in info.items():
            if key.endswith(".embedding_length"):
                return int(value)
        raise ValueError(f"Could not determine embedding vector size for model {self.embed_model}")

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_embedding_vector_size(self) -> int:
        """Fetch the output dimension of the configured embedding model.

        Returns:
            int: The number of dimensions produced by the model.

        Raises:
            httpx.HTTPError: If the backend cannot be reached or answers with an error.
            ValueError: If the dimension cannot be determined from the response.
        """
        response = await self.do_request(
            method="POST",
            json={"name": self.embed_model},
            endpoint=self.get_endpoint_model_details(),
            raise_on_error=True,
        )
        return self.extract_vector_size_from_model_info(model_info=response.json())

    async def do_fetch_model_description(self) -> str:
        return f"model '{self.embed_model}', {await self.do_fetch_embedding_vector_size()} dimensions"
