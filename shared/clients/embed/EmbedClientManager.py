from shared.clients.ClientManager import ClientManager
from shared.clients.embed.EmbedClientInterface import EmbedClientInterface


class EmbedClientManager(ClientManager[EmbedClientInterface]):
    """Selects the embedding provider client from EMBED_ENGINE ("local" or "ollama")."""

    client_type = "embed"
    class_prefix = "EmbedClient"
    default_engine = "local"
