from shared.clients.embed.EmbedClientInterface import EmbedClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class EmbedClientLocal(EmbedClientInterface):
    """Client of the bundled embedding model server.

    Endpoints: GET /health -> {"status", "model"}; POST /embed {"text"} -> {"embedding": [...]}.
    Errors come back as {"detail": "..."} with status 400 or 500.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="http://localhost:13303", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Local"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="http://localhost:13303"),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
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
        return "/health"

    def get_endpoint_embedding(self) -> str:
        return "/embed"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, text: str) -> dict:
        return {"text": text}

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embedding_from_response(self, response_data: dict) -> list:
        embedding = response_data.get("embedding") if isinstance(response_data, dict) else None
        if embedding is None:
            raise ValueError(f"Response does not contain an 'embedding' field. Got: {str(response_data)[:200]}")
        return embedding

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_fetch_model_name(self) -> str | None:
        """Read the model name the server reports on its health endpoint.

        Returns:
            str | None: The model name, or None if the server does not report one.
        """
        response = await self.do_request(method="GET", endpoint=self._get_endpoint_healthcheck(), raise_on_error=True)
        return response.json().get("model")

    async def do_fetch_model_description(self) -> str:
        return f"model '{await self.do_fetch_model_name() or 'unknown'}'"
