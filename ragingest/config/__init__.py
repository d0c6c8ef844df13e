"""Configuration: environment settings plus YAML tunables."""

from ragingest.config.loader import build_ingestion_config, load_config
from ragingest.config.settings import Settings

__all__ = ["Settings", "build_ingestion_config", "load_config"]
