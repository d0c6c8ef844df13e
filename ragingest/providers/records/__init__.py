"""Uploaded-file record store adapters."""

from ragingest.providers.records.sqlite_file_record_provider import SQLiteFileRecordProvider

__all__ = ["SQLiteFileRecordProvider"]
