"""Abstract provider contracts.

Every external collaborator (LLM, vector store, blob storage, file-record
store) sits behind one of these ABCs so services can be wired with real
adapters in ``main.py`` and with mocks in tests.
"""

from ragingest.interfaces.blob_storage_provider import IBlobStorageProvider
from ragingest.interfaces.file_record_provider import IFileRecordProvider
from ragingest.interfaces.llm_provider import ILLMProvider
from ragingest.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "IBlobStorageProvider",
    "IFileRecordProvider",
    "ILLMProvider",
    "IVectorStoreProvider",
]
