"""Application settings loaded from environment variables via pydantic-settings.

Values come from (highest priority first) environment variables, then a
``.env`` file in the working directory, then the defaults below.  Field
``weaviate_api_key`` maps to env var ``WEAVIATE_API_KEY`` and so on.

An empty string means "not configured".  Which of these are *required*
depends on the chosen backends and is checked once, at startup, by
:func:`ragingest.config.loader.build_ingestion_config`.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """ragingest application settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === LLM Providers ===
    # "auto" picks the first configured provider: Anthropic -> OpenAI -> Ollama.
    llm_provider: str = "auto"
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, vLLM, ...)
    openai_text_model: str = ""  # defaults to gpt-4o-mini
    openai_vision_model: str = ""  # defaults to gpt-4o-mini
    anthropic_api_key: str = ""
    anthropic_model: str = ""
    ollama_base_url: str = ""
    llm_timeout_seconds: float = 25.0
    llm_max_retries: int = 2

    # === Vector Store (Weaviate) ===
    weaviate_url: str = ""
    weaviate_api_key: str = ""
    weaviate_class_name: str = ""  # overrides config.yaml schema.class_name
    weaviate_embedding_model: str = ""  # overrides config.yaml schema.embedding_model

    # === Blob Storage ===
    storage_backend: str = "supabase"  # "supabase" or "local"
    supabase_url: str = ""
    supabase_service_key: str = ""
    storage_bucket: str = "uploaded-files"
    local_storage_dir: str = "data/blobs"

    # === File Records ===
    file_record_db_path: str = "data/uploaded_files.db"

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names that have credentials or an endpoint configured."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers
