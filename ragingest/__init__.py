"""ragingest: document ingestion into a vector index."""

__version__ = "0.1.0"
