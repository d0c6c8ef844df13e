"""SQLite-backed uploaded-file record store.

Tracks every binary upload in an ``uploaded_files`` table at
``data/uploaded_files.db``.  Uses ``aiosqlite`` for async I/O.  Rows are
only ever inserted and have ``rag_processed`` flipped from 0 to 1.
"""

from __future__ import annotations

import sqlite3
import uuid
from pathlib import Path

import aiosqlite
import structlog

from ragingest.interfaces.file_record_provider import IFileRecordProvider
from ragingest.models.ingest import UploadedFileRecord
from ragingest.utils.errors import StorageError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/uploaded_files.db")
_PROVIDER = "sqlite-records"

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS uploaded_files (
    id             TEXT    PRIMARY KEY,
    owner_id       TEXT,
    file_name      TEXT    NOT NULL,
    mime_type      TEXT    NOT NULL,
    byte_size      INTEGER NOT NULL DEFAULT 0,
    storage_path   TEXT    NOT NULL,
    is_text_file   INTEGER NOT NULL DEFAULT 0,
    rag_processed  INTEGER NOT NULL DEFAULT 0,
    created_at     TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_uploaded_files_owner ON uploaded_files(owner_id);",
]

_INSERT_SQL = """\
INSERT INTO uploaded_files (id, owner_id, file_name, mime_type, byte_size, storage_path)
VALUES (?, ?, ?, ?, ?, ?);
"""

_SELECT_SQL = """\
SELECT id, owner_id, file_name, mime_type, byte_size, storage_path, is_text_file, rag_processed
FROM uploaded_files
WHERE id = ?;
"""

# Guarded on rag_processed = 0 so the flag never moves backwards.
_MARK_PROCESSED_SQL = "UPDATE uploaded_files SET rag_processed = 1 WHERE id = ? AND rag_processed = 0;"


def _row_to_record(row: aiosqlite.Row) -> UploadedFileRecord:
    data = dict(row)
    return UploadedFileRecord(
        id=data["id"],
        owner_id=data["owner_id"],
        file_name=data["file_name"],
        mime_type=data["mime_type"],
        byte_size=data["byte_size"],
        storage_path=data["storage_path"],
        is_text_file=bool(data["is_text_file"]),
        rag_processed=bool(data["rag_processed"]),
    )


class SQLiteFileRecordProvider(IFileRecordProvider):
    """SQLite persistence for :class:`UploadedFileRecord` rows."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create the uploaded_files table and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_CREATE_TABLE_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("file_record_db_initialized", path=str(self._db_path))

    async def insert(
        self,
        owner_id: str | None,
        file_name: str,
        mime_type: str,
        byte_size: int,
        storage_path: str,
    ) -> UploadedFileRecord:
        record = UploadedFileRecord(
            id=str(uuid.uuid4()),
            owner_id=owner_id,
            file_name=file_name,
            mime_type=mime_type,
            byte_size=byte_size,
            storage_path=storage_path,
        )
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(
                    _INSERT_SQL,
                    (
                        record.id,
                        record.owner_id,
                        record.file_name,
                        record.mime_type,
                        record.byte_size,
                        record.storage_path,
                    ),
                )
                await db.commit()
        except sqlite3.Error as exc:
            raise StorageError(
                message=f"Failed to insert file record for '{file_name}': {exc}",
                provider_name=_PROVIDER,
            ) from exc

        logger.info("file_record_inserted", file_id=record.id, file_name=file_name)
        return record

    async def get(self, file_id: str) -> UploadedFileRecord | None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(_SELECT_SQL, (file_id,))
                row = await cursor.fetchone()
        except sqlite3.Error as exc:
            raise StorageError(
                message=f"Failed to read file record {file_id}: {exc}",
                provider_name=_PROVIDER,
            ) from exc
        return _row_to_record(row) if row is not None else None

    async def mark_processed(self, file_id: str) -> None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                cursor = await db.execute(_MARK_PROCESSED_SQL, (file_id,))
                await db.commit()
                updated = cursor.rowcount
        except sqlite3.Error as exc:
            raise StorageError(
                message=f"Failed to mark file record {file_id} processed: {exc}",
                provider_name=_PROVIDER,
            ) from exc
        logger.info("file_record_marked_processed", file_id=file_id, updated=updated)

    def get_provider_name(self) -> str:
        return _PROVIDER
