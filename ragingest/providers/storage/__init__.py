"""Blob storage adapters (Supabase Storage, local directory)."""

from ragingest.providers.storage.local_storage_provider import LocalStorageProvider
from ragingest.providers.storage.supabase_storage_provider import SupabaseStorageProvider

__all__ = ["LocalStorageProvider", "SupabaseStorageProvider"]
