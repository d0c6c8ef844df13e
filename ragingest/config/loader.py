"""YAML configuration loader with environment variable overrides.

Configuration is layered (later layers win):

    1. config/config.yaml  -- static tunables checked into the repo
    2. .env file           -- local developer overrides
    3. Environment vars    -- set at deploy time

:func:`load_config` merges the layers into one dict.
:func:`build_ingestion_config` then validates that dict plus the credentials
in :class:`Settings` and freezes the result into an :class:`IngestionConfig`.
It is the only place that decides whether the service can start.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pydantic
import yaml

from ragingest.config.settings import Settings
from ragingest.models.ingest import TEXT_EXTENSIONS, IngestionConfig
from ragingest.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge environment-based Settings on top.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
              an empty base layer.
        settings: Settings to overlay.  Read from the environment when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides: dict[str, Any] = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "llm": {
            "provider": settings.llm_provider,
            "available_providers": settings.get_available_llm_providers(),
        },
        "logging": {
            "level": settings.log_level,
        },
    }
    # Only non-empty env values override the YAML schema section.
    schema_overrides: dict[str, Any] = {}
    if settings.weaviate_class_name:
        schema_overrides["class_name"] = settings.weaviate_class_name
    if settings.weaviate_embedding_model:
        schema_overrides["embedding_model"] = settings.weaviate_embedding_model
    if schema_overrides:
        env_overrides["schema"] = schema_overrides

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def build_ingestion_config(settings: Settings, config: dict | None = None) -> IngestionConfig:
    """Validate credentials and tunables, returning the frozen pipeline config.

    Raises:
        ConfigurationError: if a required endpoint/credential is missing or a
            tunable is out of range.  The message lists every problem found.
    """
    config = config if config is not None else load_config(settings=settings)

    missing: list[str] = []
    if not settings.weaviate_url:
        missing.append("WEAVIATE_URL")
    if not settings.weaviate_api_key:
        missing.append("WEAVIATE_API_KEY")
    # The text2vec-openai vectorizer needs the key on every write.
    if not settings.openai_api_key:
        missing.append("OPENAI_API_KEY")
    if settings.storage_backend == "supabase":
        if not settings.supabase_url:
            missing.append("SUPABASE_URL")
        if not settings.supabase_service_key:
            missing.append("SUPABASE_SERVICE_KEY")
    elif settings.storage_backend != "local":
        raise ConfigurationError(
            f"Unknown STORAGE_BACKEND '{settings.storage_backend}' (expected 'supabase' or 'local')"
        )
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    schema = config.get("schema", {})
    chunking = config.get("chunking", {})
    extensions = config.get("text_extensions")
    try:
        return IngestionConfig(
            class_name=schema.get("class_name", "Text"),
            class_description=schema.get("description", "Chunks of documents for RAG"),
            embedding_model=schema.get("embedding_model", "text-embedding-3-large"),
            window_size=chunking.get("window_size", 220),
            overlap=chunking.get("overlap", 40),
            batch_size=config.get("upload", {}).get("batch_size", 100),
            preview_chars=config.get("enrichment", {}).get("preview_chars", 500),
            max_concurrent_files=config.get("pipeline", {}).get("max_concurrent_files", 4),
            text_extensions=(
                frozenset(e.lower() for e in extensions) if extensions else TEXT_EXTENSIONS
            ),
        )
    except pydantic.ValidationError as exc:
        raise ConfigurationError(f"Invalid ingestion configuration: {exc}") from exc


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
