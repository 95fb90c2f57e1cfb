"""
Pytest configuration: isolated ROOT_DIR, a fake embedding provider and a temporary SQLite store.
"""
import asyncio
import logging
import os
import tempfile

import pytest

# the app module configures file logging below ROOT_DIR on import
os.environ.setdefault("ROOT_DIR", tempfile.mkdtemp(prefix="rag-endpoint-tests-"))

from shared.clients.store.sqlitevec.StoreClientSqlitevec import StoreClientSqlitevec
from shared.exceptions.AppError import EmbeddingUnavailableError
from shared.helper.HelperConfig import HelperConfig
from shared.logging.logging_setup import ColorLogger


class FakeEmbedClient:
    """Stands in for an embedding provider. Records every text it is asked to embed."""

    def __init__(self, vector_for=None):
        self.calls: list[str] = []
        self.vector_for = vector_for or (lambda text: [1.0, 0.0, 0.0, 0.0])
        self.fail = False

    def get_engine_name(self) -> str:
        return "fake"

    async def boot(self) -> None:
        pass

    async def close(self) -> None:
        pass

    async def do_healthcheck(self) -> bool:
        return not self.fail

    async def do_fetch_model_description(self) -> str:
        return "model 'fake'"

    async def do_embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            raise EmbeddingUnavailableError("Embedding provider unreachable: stub is down")
        return list(self.vector_for(text))


@pytest.fixture
def helper_config(tmp_path, monkeypatch) -> HelperConfig:
    """Config rooted in a per-test directory."""
    monkeypatch.setenv("ROOT_DIR", str(tmp_path))
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("STORE_SQLITEVEC_PATH", str(tmp_path / "db" / "rag.db"))
    monkeypatch.delenv("INGEST_CHUNK_SIZE", raising=False)
    monkeypatch.delenv("EMBED_ENGINE", raising=False)
    monkeypatch.delenv("STORE_ENGINE", raising=False)
    return HelperConfig(logger=ColorLogger(logging.getLogger("tests")))


@pytest.fixture
def fake_embed_client() -> FakeEmbedClient:
    return FakeEmbedClient()


@pytest.fixture
def make_embed_client():
    """Factory for fake providers with a custom text -> vector mapping."""
    return FakeEmbedClient


@pytest.fixture
def store(helper_config):
    """Booted SQLite store, closed after the test."""
    client = StoreClientSqlitevec(helper_config=helper_config)
    asyncio.run(client.boot())
    yield client
    asyncio.run(client.close())
