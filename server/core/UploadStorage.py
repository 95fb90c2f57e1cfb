"""Upload storage: files accepted through /api/upload or fetched through /api/download.

Stored files are named "<epoch millis>-<original name>" inside UPLOAD_DIR and are
addressed by that name when they are processed.
"""

import asyncio
import os
import time
from urllib.parse import unquote, urlparse

import httpx

from shared.exceptions.AppError import NotFoundError, ValidationError
from shared.helper.HelperConfig import HelperConfig

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
DEFAULT_ALLOWED_EXTENSIONS = ["txt", "pdf", "docx", "xlsx", "csv"]


class UploadStorage:
    def __init__(self, helper_config: HelperConfig) -> None:
        self.logging = helper_config.get_logger()
        self.upload_dir = helper_config.get_path_val("UPLOAD_DIR", "uploads")
        self.max_bytes = int(helper_config.get_number_val("UPLOAD_MAX_BYTES", default=MAX_UPLOAD_BYTES))
        self.allowed_extensions = [
            ext.lower().lstrip(".")
            for ext in helper_config.get_list_val("UPLOAD_ALLOWED_EXTENSIONS", default=DEFAULT_ALLOWED_EXTENSIONS)
        ]
        self.download_timeout = helper_config.get_number_val("DOWNLOAD_TIMEOUT", default=30.0)
        self._http: httpx.AsyncClient | None = None
        os.makedirs(self.upload_dir, exist_ok=True)

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        self._http = httpx.AsyncClient(timeout=self.download_timeout, follow_redirects=True)

    async def close(self) -> None:
        if self._http:
            await self._http.aclose()
            self._http = None

    ##########################################
    ################ GETTER ##################
    ##########################################

    def get_public_url(self, filename: str) -> str:
        return f"/uploads/{filename}"

    def _reserve_stored_name(self, original_name: str) -> tuple[str, str]:
        """Claim a free "<millis>-<basename>" name by creating the empty file.

        If the name is taken (same file name within the same millisecond) the
        timestamp is bumped until a free name is found.

        Returns:
            tuple[str, str]: The stored name and its path.
        """
        # keep only the final path component of whatever the client sent
        base = os.path.basename(original_name.replace("\\", "/")) or "downloaded_file"
        millis = int(time.time() * 1000)
        while True:
            stored_name = f"{millis}-{base}"
            path = os.path.join(self.upload_dir, stored_name)
            try:
                open(path, "xb").close()
                return stored_name, path
            except FileExistsError:
                millis += 1

    def validate_extension(self, original_name: str) -> None:
        """Reject names whose extension is not in UPLOAD_ALLOWED_EXTENSIONS.

        Raises:
            ValidationError: If the extension is not allowed.
        """
        ext = os.path.splitext(original_name)[1].lower().lstrip(".")
        if ext not in self.allowed_extensions:
            raise ValidationError(
                f"Invalid file type. Only {', '.join(self.allowed_extensions)} are allowed. "
                f"Got: {('.' + ext) if ext else '(no extension)'}"
            )

    def resolve(self, filename: str | None) -> str:
        """Return the path of a stored upload.

        Args:
            filename (str | None): Stored name as returned by upload or download.

        Returns:
            str: Absolute path inside UPLOAD_DIR.

        Raises:
            ValidationError: If no filename is given.
            NotFoundError: If the file does not exist or the name points outside UPLOAD_DIR.
        """
        if not filename:
            raise ValidationError("filename is required")
        root = os.path.realpath(self.upload_dir)
        path = os.path.realpath(os.path.join(root, filename))
        if os.path.dirname(path) != root or not os.path.isfile(path):
            raise NotFoundError("File not found")
        return path

    ##########################################
    ############### STORAGE ##################
    ##########################################

    async def do_save_upload(self, original_name: str | None, content: bytes) -> str:
        """Store an uploaded file.

        Args:
            original_name (str | None): File name sent by the client.
            content (bytes): File body; callers read at most max_bytes + 1 bytes.

        Returns:
            str: The stored file name.

        Raises:
            ValidationError: If no file was sent, its type is not allowed or it is too large.
        """
        if not original_name:
            raise ValidationError("No file uploaded")
        self.validate_extension(original_name)
        if len(content) > self.max_bytes:
            raise ValidationError(f"File too large. Maximum size is {self.max_bytes} bytes.")

        stored_name, path = self._reserve_stored_name(original_name)
        await asyncio.to_thread(self._write_file, path, content)
        self.logging.info("Stored upload '%s' as %s (%d bytes).", original_name, stored_name, len(content))
        return stored_name

    async def do_download(self, file_url: str | None) -> str:
        """Fetch a remote file into upload storage.

        The stored name is built from the last URL path segment ("downloaded_file" if there is none).

        Args:
            file_url (str | None): http(s) URL of the file.

        Returns:
            str: The stored file name.

        Raises:
            ValidationError: If no URL is given or it is not an http(s) URL.
            httpx.HTTPError: If the fetch fails or answers with an error status.
            ValueError: If the body exceeds the upload size limit.
        """
        if not file_url:
            raise ValidationError("fileUrl is required")
        parsed = urlparse(file_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError("fileUrl must be an http or https URL")
        if self._http is None:
            raise RuntimeError("Download client not initialised. Call boot() before downloading.")

        original_name = unquote(parsed.path.rstrip("/").split("/")[-1]) if parsed.path else ""
        stored_name, path = self._reserve_stored_name(original_name or "downloaded_file")

        received = 0
        try:
            async with self._http.stream("GET", file_url) as response:
                response.raise_for_status()
                with open(path, "wb") as f:
                    async for chunk in response.aiter_bytes():
                        received += len(chunk)
                        if received > self.max_bytes:
                            raise ValueError(f"Downloaded file exceeds the limit of {self.max_bytes} bytes.")
                        f.write(chunk)
        except BaseException:
            if os.path.exists(path):
                os.remove(path)
            raise

        self.logging.info("Downloaded %s as %s (%d bytes).", file_url, stored_name, received)
        return stored_name

    @staticmethod
    def _write_file(path: str, content: bytes) -> None:
        with open(path, "wb") as f:
            f.write(content)
