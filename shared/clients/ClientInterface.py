from abc import ABC, abstractmethod
from typing import Any

from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class ClientInterface(ABC):
    """Base class of every backend client (embedding provider, catalog/vector store).

    Client settings follow the "<TYPE>_<ENGINE>_<KEY>" convention, e.g.
    EMBED_OLLAMA_MODEL. The application drives the lifecycle: boot() at startup,
    do_healthcheck() once booted, close() at shutdown.
    """

    def __init__(self, helper_config: HelperConfig):
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self._getters = {
            "string": helper_config.get_string_val,
            "number": helper_config.get_number_val,
            "bool": helper_config.get_bool_val,
            "list": helper_config.get_list_val,
        }
        self.timeout = helper_config.get_number_val(f"{self.get_client_type().upper()}_TIMEOUT", default=30.0)
        self.validate_full_configuration()

    ##########################################
    ############### CHECKER ##################
    ##########################################

    def validate_full_configuration(self) -> None:
        """
        Raises:
            ValueError: If a required setting is missing or has the wrong type.
        """
        for config in self._get_required_config():
            self.get_config_val(raw_key=config.env_key, default=config.default, val_type=config.val_type)

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_client_type(self) -> str:
        return self._get_client_type().lower()

    @abstractmethod
    def _get_client_type(self) -> str:
        """E.g. "embed" or "store"."""
        pass

    def get_engine_name(self) -> str:
        return self._get_engine_name().lower()

    @abstractmethod
    def _get_engine_name(self) -> str:
        """E.g. "Ollama" or "Sqlitevec"."""
        pass

    @abstractmethod
    def _get_required_config(self) -> list[EnvConfig]:
        """Settings checked at construction time; entries without default are mandatory."""
        pass

    def _get_config_key_name(self, raw_key: str) -> str:
        return f"{self.get_client_type().upper()}_{self.get_engine_name().upper()}_{raw_key.upper()}"

    def get_config_val(self, raw_key: str, default: Any = None, val_type: str = "string") -> Any:
        """Read one of the client's own settings.

        Args:
            raw_key (str): Key suffix, e.g. "BASE_URL" for EMBED_LOCAL_BASE_URL.
            default (Any): Value used when the variable is not set.
            val_type (str): "string", "number", "bool" or "list".
        """
        getter = self._getters.get(val_type)
        if getter is None:
            raise ValueError(
                f"Unsupported config value type '{val_type}' for env key '{raw_key}' "
                f"in {self.get_client_type().upper()} client '{self.get_engine_name()}'."
            )
        return getter(self._get_config_key_name(raw_key), default=default)

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    @abstractmethod
    async def boot(self) -> None:
        """Acquire the resources the client needs (connections, handles)."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release everything acquired in boot(). Safe to call twice."""
        pass

    @abstractmethod
    async def do_healthcheck(self) -> bool:
        """Return True if the backend answered as expected."""
        pass
