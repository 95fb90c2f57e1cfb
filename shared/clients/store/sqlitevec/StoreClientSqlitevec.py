"""SQLite implementation of StoreClientInterface.

Catalog rows and document vectors live in one database file. Vectors are stored
as float32 blobs and ranked with the cosine distance function of the sqlite-vec
extension, scanning every stored vector per query.
"""

import asyncio
import os
import sqlite3
from datetime import datetime, timezone
from typing import Any, Callable

import sqlite_vec

from shared.clients.store.StoreClientInterface import StoreClientInterface
from shared.exceptions.AppError import DimensionMismatchError, StoreError
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig
from shared.models.document import DocumentRecord, RankedDocument

_SCHEMA = """
CREATE TABLE IF NOT EXISTS documents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    filename TEXT NOT NULL,
    content_preview TEXT,
    upload_date TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_documents_upload_date ON documents (upload_date);
CREATE TABLE IF NOT EXISTS embeddings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    doc_id INTEGER NOT NULL REFERENCES documents (id),
    vector BLOB NOT NULL
);
CREATE TABLE IF NOT EXISTS store_meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_DIMENSION_KEY = "embedding_dimension"


class StoreClientSqlitevec(StoreClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._db_path = self.get_config_val("PATH", default=self._default_db_path(), val_type="string")
        self._conn: sqlite3.Connection | None = None
        self._lock: asyncio.Lock | None = None
        self._dimension: int | None = None
        self._last_upload_date: datetime | None = None
        self._vec_version: str | None = None

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Sqlitevec"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="PATH", val_type="string", default=self._default_db_path()),
        ]

    def _default_db_path(self) -> str:
        return os.path.join(self._helper_config.get_root_dir(), "db", "rag.db")

    def get_db_path(self) -> str:
        return self._db_path

    async def get_dimension(self) -> int | None:
        return self._dimension

    ##########################################
    ############### LIFECYCLE ################
    ##########################################

    async def boot(self) -> None:
        """Open the database, load sqlite-vec and create the schema if missing."""
        self._lock = asyncio.Lock()
        try:
            await asyncio.to_thread(self._open_sync)
        except sqlite3.Error as exc:
            raise StoreError(f"Could not open store at {self._db_path}: {exc}") from exc
        self.logging.info(
            "SQLite store opened at %s (sqlite-vec %s, dimension %s).",
            self._db_path, self._vec_version, self._dimension,
        )

    async def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    async def do_healthcheck(self) -> bool:
        try:
            version = await self._run(lambda conn: conn.execute("SELECT vec_version()").fetchone()[0])
        except StoreError as exc:
            self.logging.warning("Healthcheck of SQLite store failed: %s", exc.message)
            return False
        return bool(version)

    def _open_sync(self) -> None:
        if self._db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(self._db_path)), exist_ok=True)
        # calls are serialised by self._lock but run on worker threads
        conn = sqlite3.connect(self._db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.enable_load_extension(True)
        sqlite_vec.load(conn)
        conn.enable_load_extension(False)
        conn.executescript(_SCHEMA)
        conn.commit()
        self._conn = conn

        self._vec_version = conn.execute("SELECT vec_version()").fetchone()[0]
        row = conn.execute("SELECT value FROM store_meta WHERE key = ?", (_DIMENSION_KEY,)).fetchone()
        self._dimension = int(row["value"]) if row else None
        row = conn.execute("SELECT MAX(upload_date) AS last FROM documents").fetchone()
        self._last_upload_date = datetime.fromisoformat(row["last"]) if row and row["last"] else None

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        """Run a blocking database call on a worker thread, one call at a time.

        Raises:
            StoreError: If the store is not booted or SQLite reports an error.
        """
        if self._lock is None:
            raise StoreError("Store not initialised. Call boot() before using it.")
        async with self._lock:
            if self._conn is None:
                raise StoreError("Store is closed.")
            try:
                return await asyncio.to_thread(fn, self._conn, *args)
            except sqlite3.Error as exc:
                self.logging.error("SQLite store error: %s", exc)
                raise StoreError(f"Store operation failed: {exc}") from exc

    ##########################################
    ################ CATALOG #################
    ##########################################

    def _next_upload_date(self) -> str:
        # never earlier than the previous insert, even if the wall clock steps back
        now = datetime.now(timezone.utc)
        if self._last_upload_date is not None and now < self._last_upload_date:
            now = self._last_upload_date
        self._last_upload_date = now
        return now.isoformat(timespec="microseconds")

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> DocumentRecord:
        return DocumentRecord(
            id=row["id"],
            filename=row["filename"],
            content_preview=row["content_preview"],
            upload_date=row["upload_date"],
        )

    async def do_insert_document(self, filename: str, content_preview: str) -> DocumentRecord:
        def insert(conn: sqlite3.Connection) -> DocumentRecord:
            upload_date = self._next_upload_date()
            with conn:
                cursor = conn.execute(
                    "INSERT INTO documents (filename, content_preview, upload_date) VALUES (?, ?, ?)",
                    (filename, content_preview, upload_date),
                )
            return DocumentRecord(
                id=cursor.lastrowid,
                filename=filename,
                content_preview=content_preview,
                upload_date=upload_date,
            )

        return await self._run(insert)

    async def do_get_document(self, document_id: int) -> DocumentRecord | None:
        def fetch(conn: sqlite3.Connection) -> DocumentRecord | None:
            row = conn.execute(
                "SELECT id, filename, content_preview, upload_date FROM documents WHERE id = ?",
                (document_id,),
            ).fetchone()
            return self._row_to_record(row) if row else None

        return await self._run(fetch)

    async def do_list_documents(self, limit: int, offset: int) -> list[DocumentRecord]:
        def fetch(conn: sqlite3.Connection) -> list[DocumentRecord]:
            rows = conn.execute(
                "SELECT id, filename, content_preview, upload_date FROM documents "
                "ORDER BY upload_date DESC, id DESC LIMIT ? OFFSET ?",
                (limit, offset),
            ).fetchall()
            return [self._row_to_record(row) for row in rows]

        return await self._run(fetch)

    async def do_count_documents(self) -> int:
        return await self._run(lambda conn: conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0])

    ##########################################
    ############### VECTORS ##################
    ##########################################

    async def do_insert_embedding(self, document_id: int, vector: list[float]) -> None:
        def insert(conn: sqlite3.Connection) -> None:
            if self._dimension is not None and len(vector) != self._dimension:
                raise DimensionMismatchError(expected=self._dimension, actual=len(vector))
            with conn:
                if self._dimension is None:
                    conn.execute(
                        "INSERT INTO store_meta (key, value) VALUES (?, ?)",
                        (_DIMENSION_KEY, str(len(vector))),
                    )
                conn.execute(
                    "INSERT INTO embeddings (doc_id, vector) VALUES (?, ?)",
                    (document_id, sqlite_vec.serialize_float32(vector)),
                )
            self._dimension = len(vector)

        await self._run(insert)
        self.logging.debug("Stored %d-dimensional vector for document id=%d.", len(vector), document_id)

    async def do_search_nearest(self, probe: list[float], limit: int, offset: int) -> list[RankedDocument]:
        if self._dimension is None:
            # nothing stored yet
            return []
        if len(probe) != self._dimension:
            raise DimensionMismatchError(expected=self._dimension, actual=len(probe))

        def search(conn: sqlite3.Connection) -> list[RankedDocument]:
            rows = conn.execute(
                """
                SELECT d.id, d.filename, d.content_preview, d.upload_date,
                       vec_distance_cosine(e.vector, ?) AS distance
                FROM embeddings e
                JOIN documents d ON d.id = e.doc_id
                ORDER BY distance ASC, d.id ASC
                LIMIT ? OFFSET ?
                """,
                (sqlite_vec.serialize_float32(probe), limit, offset),
            ).fetchall()
            return [
                RankedDocument(
                    id=row["id"],
                    filename=row["filename"],
                    content_preview=row["content_preview"],
                    upload_date=row["upload_date"],
                    distance=row["distance"],
                )
                for row in rows
            ]

        return await self._run(search)

    async def do_count_embeddings(self) -> int:
        return await self._run(lambda conn: conn.execute("SELECT COUNT(*) FROM embeddings").fetchone()[0])
