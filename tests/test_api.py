"""
HTTP tests for the FastAPI app, wired against a real SQLite store and a fake embedding provider.
"""
import asyncio
import logging

import httpx
import pytest
from fastapi.testclient import TestClient

from server.api_server import app, check_connections, wire_services
from server.core.UploadStorage import UploadStorage
from shared.clients.embed.local.EmbedClientLocal import EmbedClientLocal
from shared.clients.embed.ollama.EmbedClientOllama import EmbedClientOllama
from shared.clients.store.sqlitevec.StoreClientSqlitevec import StoreClientSqlitevec


@pytest.fixture
def api(helper_config, store, fake_embed_client):
    wire_services(app, helper_config, fake_embed_client, store, UploadStorage(helper_config=helper_config))
    # no context manager: the lifespan would boot the configured backends
    return TestClient(app)


def _upload(api, name, content, content_type="text/plain"):
    response = api.post("/api/upload", files={"file": (name, content, content_type)})
    assert response.status_code == 200, response.text
    return response.json()["filename"]


class TestHealth:

    def test_health(self, api):
        response = api.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "OK", "message": "Local RAG Endpoint is running"}


class TestUploadAndProcess:

    def test_upload_returns_stored_name_and_url(self, api):
        response = api.post("/api/upload", files={"file": ("notes.txt", b"hello", "text/plain")})
        body = response.json()
        assert response.status_code == 200
        assert body["message"] == "File uploaded successfully"
        assert body["filename"].endswith("-notes.txt")
        assert body["fileUrl"] == f"/uploads/{body['filename']}"

    def test_upload_without_file(self, api):
        response = api.post("/api/upload")
        assert response.status_code == 400
        assert response.json() == {"error": "No file uploaded"}

    def test_upload_invalid_type(self, api):
        response = api.post("/api/upload", files={"file": ("photo.png", b"\x89PNG", "image/png")})
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid file type.")

    def test_process_long_document_then_search(self, api, fake_embed_client):
        filename = _upload(api, "long.txt", b"x" * 4500)

        processed = api.post("/api/process", json={"filename": filename})
        assert processed.status_code == 200
        body = processed.json()
        assert body["message"] == "Document processed and indexed successfully"
        assert body["preview"] == "x" * 500 + "..."
        assert len(fake_embed_client.calls) == 3

        found = api.post("/api/search", json={"query": "anything"})
        assert found.status_code == 200
        results = found.json()["results"]
        assert results[0]["id"] == body["documentId"]
        assert results[0]["filename"] == filename
        assert results[0]["similarity"] == pytest.approx(1.0, abs=1e-6)
        assert set(results[0]) == {"id", "filename", "content", "similarity", "uploadDate"}

    def test_process_missing_file(self, api):
        response = api.post("/api/process", json={"filename": "123-missing.txt"})
        assert response.status_code == 404
        assert response.json() == {"error": "File not found"}

    def test_process_without_filename(self, api):
        response = api.post("/api/process", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "filename is required"}

    def test_process_unparseable_file(self, api):
        filename = _upload(api, "broken.docx", b"not a zip archive", "application/octet-stream")
        response = api.post("/api/process", json={"filename": filename})
        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process document"}

    def test_provider_down_keeps_document_listed(self, api, fake_embed_client):
        fake_embed_client.fail = True
        filename = _upload(api, "offline.txt", b"written while the provider was down")

        processed = api.post("/api/process", json={"filename": filename})
        assert processed.status_code == 200

        listed = api.get("/api/documents").json()["documents"]
        assert [doc["filename"] for doc in listed] == [filename]

        searched = api.post("/api/search", json={"query": "provider"})
        assert searched.status_code == 500
        assert searched.json() == {"error": "Failed to perform search"}


class TestSearch:

    def test_empty_query(self, api, fake_embed_client):
        response = api.post("/api/search", json={"query": ""})
        assert response.status_code == 400
        assert response.json() == {"error": "Query is required"}
        assert fake_embed_client.calls == []

    def test_missing_query(self, api):
        response = api.post("/api/search", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "Query is required"}

    def test_search_on_empty_store(self, api):
        response = api.post("/api/search", json={"query": "nothing here", "limit": 5, "page": 2})
        assert response.status_code == 200
        assert response.json() == {"results": [], "page": 2, "limit": 5}

    def test_limit_is_clamped(self, api):
        response = api.post("/api/search", json={"query": "q", "limit": 1000, "page": 0})
        body = response.json()
        assert body["limit"] == 100
        assert body["page"] == 1

    def test_invalid_limit_type(self, api):
        response = api.post("/api/search", json={"query": "q", "limit": "many"})
        assert response.status_code == 400
        assert response.json()["error"].startswith("Invalid request:")


class TestDocuments:

    def test_documents_newest_first_with_camel_case_keys(self, api):
        first = _upload(api, "first.txt", b"first document")
        second = _upload(api, "second.txt", b"second document")
        api.post("/api/process", json={"filename": first})
        api.post("/api/process", json={"filename": second})

        body = api.get("/api/documents").json()

        assert body["page"] == 1
        assert body["limit"] == 50
        assert [doc["filename"] for doc in body["documents"]] == [second, first]
        assert set(body["documents"][0]) == {"id", "filename", "preview", "uploadDate"}
        assert body["documents"][0]["preview"] == "second document"

    def test_documents_pagination(self, api):
        names = [_upload(api, f"doc{i}.txt", f"document {i}".encode()) for i in range(3)]
        for name in names:
            api.post("/api/process", json={"filename": name})

        body = api.get("/api/documents", params={"limit": 2, "page": 2}).json()
        assert [doc["filename"] for doc in body["documents"]] == [names[0]]

    def test_invalid_page_type(self, api):
        response = api.get("/api/documents", params={"page": "last"})
        assert response.status_code == 400


class TestDownload:

    def test_download_requires_url(self, api):
        response = api.post("/api/download", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "fileUrl is required"}

    def test_download_rejects_non_http_url(self, api):
        response = api.post("/api/download", json={"fileUrl": "ftp://example.com/a.txt"})
        assert response.status_code == 400


class TestStartupChecks:

    def test_reachable_provider_logs_model(self, helper_config, store, monkeypatch, caplog):
        monkeypatch.setenv("EMBED_LOCAL_BASE_URL", "http://embedder:13303")
        client = EmbedClientLocal(helper_config=helper_config)
        client._client = httpx.AsyncClient(transport=httpx.MockTransport(
            lambda request: httpx.Response(200, json={"status": "ok", "model": "nomic-embed-text"})
        ))

        with caplog.at_level(logging.INFO):
            asyncio.run(check_connections(client, store))

        assert "is reachable (model 'nomic-embed-text')" in caplog.text

    def test_model_details_failure_is_not_fatal(self, helper_config, store, monkeypatch, caplog):
        monkeypatch.setenv("EMBED_OLLAMA_BASE_URL", "http://ollama:11434")
        monkeypatch.setenv("EMBED_OLLAMA_MODEL", "nomic-embed-text")
        client = EmbedClientOllama(helper_config=helper_config)

        def handler(request):
            if request.url.path == "/api/show":
                return httpx.Response(500, json={"error": "model not loaded"})
            return httpx.Response(200, text="Ollama is running")

        client._client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

        with caplog.at_level(logging.INFO):
            asyncio.run(check_connections(client, store))

        assert "Could not read model details" in caplog.text
        assert "model details unavailable" in caplog.text

    def test_unusable_store_is_fatal(self, helper_config, fake_embed_client):
        closed = StoreClientSqlitevec(helper_config=helper_config)
        with pytest.raises(RuntimeError):
            asyncio.run(check_connections(fake_embed_client, closed))
