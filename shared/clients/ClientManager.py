from typing import Generic, TypeVar

from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig

ClientT = TypeVar("ClientT", bound=ClientInterface)


class ClientManager(Generic[ClientT]):
    """Instantiates the client implementation selected by "<TYPE>_ENGINE".

    Implementations live in shared/clients/<type>/<engine>/<Prefix><Engine>.py,
    e.g. EMBED_ENGINE=ollama loads shared.clients.embed.ollama.EmbedClientOllama.
    """

    client_type: str = ""
    class_prefix: str = ""
    default_engine: str = ""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client: ClientT = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """Return the configured engine, capitalised the way the module names are (e.g. "Sqlitevec")."""
        engine = self.helper_config.get_string_val(f"{self.client_type.upper()}_ENGINE", default=self.default_engine)
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> ClientT:
        """
        Raises:
            ValueError: If no implementation exists for the configured engine.
        """
        engine = self._get_engine_from_env()
        class_name = f"{self.class_prefix}{engine}"
        try:
            module = __import__(
                f"shared.clients.{self.client_type}.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            client_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported {self.client_type} engine specified: '{engine}'. Error: {e}")
        client = client_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated %s client for engine: %s", self.client_type, engine)
        return client

    def get_client(self) -> ClientT:
        return self.client
