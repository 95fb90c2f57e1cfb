"""
Tests for upload storage: saving, name resolution and URL downloads.
"""
import asyncio
import os
import re
import time

import httpx
import pytest

from server.core.UploadStorage import UploadStorage
from shared.exceptions.AppError import NotFoundError, ValidationError


@pytest.fixture
def storage(helper_config):
    return UploadStorage(helper_config=helper_config)


def _download(storage, handler, url):
    async def run():
        storage._http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        try:
            return await storage.do_download(url)
        finally:
            await storage.close()
    return asyncio.run(run())


class TestSaveUpload:

    def test_saved_name_is_prefixed_with_millis(self, storage):
        name = asyncio.run(storage.do_save_upload("report.txt", b"hello"))
        assert re.fullmatch(r"\d{13}-report\.txt", name)
        with open(os.path.join(storage.upload_dir, name), "rb") as f:
            assert f.read() == b"hello"
        assert storage.get_public_url(name) == f"/uploads/{name}"

    def test_client_path_components_are_dropped(self, storage):
        name = asyncio.run(storage.do_save_upload("../../etc/evil.txt", b"x"))
        assert name.endswith("-evil.txt")
        assert os.path.isfile(os.path.join(storage.upload_dir, name))

    def test_invalid_extension(self, storage):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(storage.do_save_upload("image.png", b"x"))
        assert exc_info.value.message.startswith("Invalid file type.")
        assert "Got: .png" in exc_info.value.message
        assert os.listdir(storage.upload_dir) == []

    def test_missing_file(self, storage):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(storage.do_save_upload(None, b""))
        assert exc_info.value.message == "No file uploaded"

    def test_too_large(self, storage):
        with pytest.raises(ValidationError):
            asyncio.run(storage.do_save_upload("big.txt", b"x" * (storage.max_bytes + 1)))

    def test_same_name_in_same_millisecond_gets_distinct_files(self, storage, monkeypatch):
        monkeypatch.setattr(time, "time", lambda: 1700000000.0)

        first = asyncio.run(storage.do_save_upload("same.txt", b"first"))
        second = asyncio.run(storage.do_save_upload("same.txt", b"second"))

        assert first == "1700000000000-same.txt"
        assert second == "1700000000001-same.txt"
        with open(os.path.join(storage.upload_dir, first), "rb") as f:
            assert f.read() == b"first"
        with open(os.path.join(storage.upload_dir, second), "rb") as f:
            assert f.read() == b"second"

    def test_allowed_extensions_are_configurable(self, helper_config, monkeypatch):
        monkeypatch.setenv("UPLOAD_ALLOWED_EXTENSIONS", "[md]")
        storage = UploadStorage(helper_config=helper_config)
        assert asyncio.run(storage.do_save_upload("notes.md", b"# hi")).endswith("-notes.md")
        with pytest.raises(ValidationError):
            storage.validate_extension("notes.txt")


class TestResolve:

    def test_resolves_stored_file(self, storage):
        name = asyncio.run(storage.do_save_upload("a.txt", b"a"))
        assert storage.resolve(name) == os.path.realpath(os.path.join(storage.upload_dir, name))

    def test_missing_name(self, storage):
        with pytest.raises(ValidationError):
            storage.resolve("")

    def test_unknown_file(self, storage):
        with pytest.raises(NotFoundError):
            storage.resolve("123-nothing.txt")

    def test_traversal_is_not_found(self, storage, tmp_path):
        (tmp_path / "secret.txt").write_text("secret")
        with pytest.raises(NotFoundError):
            storage.resolve("../secret.txt")


class TestDownload:

    def test_download_stores_last_path_segment(self, storage):
        def handler(request):
            return httpx.Response(200, content=b"remote body")

        name = _download(storage, handler, "https://files.example.com/docs/My%20Report.txt")

        assert name.endswith("-My Report.txt")
        with open(os.path.join(storage.upload_dir, name), "rb") as f:
            assert f.read() == b"remote body"

    def test_download_without_path_uses_fallback_name(self, storage):
        def handler(request):
            return httpx.Response(200, content=b"x")

        name = _download(storage, handler, "https://files.example.com")
        assert name.endswith("-downloaded_file")

    def test_error_status_leaves_no_file(self, storage):
        def handler(request):
            return httpx.Response(404, content=b"missing")

        with pytest.raises(httpx.HTTPStatusError):
            _download(storage, handler, "https://files.example.com/gone.txt")
        assert os.listdir(storage.upload_dir) == []

    def test_oversized_download_is_removed(self, helper_config, monkeypatch):
        monkeypatch.setenv("UPLOAD_MAX_BYTES", "4")
        storage = UploadStorage(helper_config=helper_config)

        def handler(request):
            return httpx.Response(200, content=b"0123456789")

        with pytest.raises(ValueError):
            _download(storage, handler, "https://files.example.com/big.txt")
        assert os.listdir(storage.upload_dir) == []

    def test_url_is_required(self, storage):
        with pytest.raises(ValidationError) as exc_info:
            asyncio.run(storage.do_download(None))
        assert exc_info.value.message == "fileUrl is required"

    def test_only_http_urls(self, storage):
        with pytest.raises(ValidationError):
            asyncio.run(storage.do_download("file:///etc/passwd"))

    def test_download_before_boot(self, storage):
        with pytest.raises(RuntimeError):
            asyncio.run(storage.do_download("https://files.example.com/a.txt"))
