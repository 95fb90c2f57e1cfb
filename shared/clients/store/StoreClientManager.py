from shared.clients.ClientManager import ClientManager
from shared.clients.store.StoreClientInterface import StoreClientInterface


class StoreClientManager(ClientManager[StoreClientInterface]):
    """Selects the catalog/vector store client from STORE_ENGINE."""

    client_type = "store"
    class_prefix = "StoreClient"
    default_engine = "sqlitevec"
