# =============================================================================
# Application Configuration — Pydantic Settings
# =============================================================================
#
# DESIGN DECISION: We use Pydantic V2's `BaseSettings` for configuration.
# This provides:
# 1. Type-safe configuration with validation at startup
# 2. Automatic loading from environment variables
# 3. Support for .env files (via `env_file` in model_config)
# 4. Sensible defaults for local development
#
# HOW IT WORKS:
# Pydantic Settings loads values in this priority order (highest first):
#   1. Environment variables (e.g., `PORT=8080`)
#   2. Values from the .env file
#   3. Default values defined below
#
# USAGE:
#   from app.config import settings
#   print(settings.source_pdf_path)
# =============================================================================

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Only the API keys need to be provided; everything else defaults to the
    values the chat service was tuned with.
    """

    # -------------------------------------------------------------------------
    # Application
    # -------------------------------------------------------------------------
    app_name: str = "Ice Butcher FAQ Chat"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    # -------------------------------------------------------------------------
    # HTTP Server
    # -------------------------------------------------------------------------
    # PORT is the conventional variable set by hosting platforms.
    # The chat widget is embedded on third-party pages, so any origin may
    # call the API.
    # -------------------------------------------------------------------------
    host: str = "0.0.0.0"
    port: int = 5000
    cors_allow_origins: list[str] = ["*"]

    # -------------------------------------------------------------------------
    # API Keys — External Services
    # -------------------------------------------------------------------------
    # OPENAI_API_KEY: embeddings, and completions with the default provider
    # ANTHROPIC_API_KEY: completions when LLM_PROVIDER=anthropic
    # LLM_API_KEY: overrides the provider-specific key if set
    # -------------------------------------------------------------------------
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    llm_api_key: str | None = None

    # -------------------------------------------------------------------------
    # LLM Configuration — Multi-Provider
    # -------------------------------------------------------------------------
    # "openai_compatible": OpenAI itself or any API that speaks its protocol
    # "anthropic": Claude via the native Anthropic SDK
    #
    # Temperatures are NOT configured here: each call site picks its own
    # (0 for relevance checks and grounded answers, the prompt profile's
    # temperature for general answers).
    # -------------------------------------------------------------------------
    llm_provider: str = "openai_compatible"
    llm_base_url: str | None = None
    llm_model: str = "gpt-4o-mini"
    llm_max_tokens: int = 1024
    # Passed to both SDK clients; a chat widget user will not wait longer.
    llm_timeout_seconds: float = 30.0
    llm_max_retries: int = 2

    # -------------------------------------------------------------------------
    # Embedding Configuration
    # -------------------------------------------------------------------------
    # text-embedding-ada-002 is the model the knowledge base was originally
    # embedded with. Query and chunk embeddings must come from the same model.
    # -------------------------------------------------------------------------
    embedding_model: str = "text-embedding-ada-002"
    embedding_base_url: str | None = None
    embedding_batch_size: int = 100

    # -------------------------------------------------------------------------
    # Knowledge Base
    # -------------------------------------------------------------------------
    # The FAQ PDF is loaded once per process and held in memory.
    # Chunking is character-based: 1000-char chunks split on sentence
    # boundaries with a 500-char overlap, so every sentence near a boundary
    # appears whole in at least one chunk.
    # -------------------------------------------------------------------------
    source_pdf_path: str = "faqs.pdf"
    chunk_separator: str = ". "
    chunk_size: int = 1000
    chunk_overlap: int = 500
    retrieval_top_k: int = 2
    warm_index_on_startup: bool = True

    # -------------------------------------------------------------------------
    # Prompting
    # -------------------------------------------------------------------------
    # Name of the PromptProfile in app/agents/prompts.py.
    #   "ice_butcher"       — persona prompt, URLs rendered as HTML anchors
    #   "ice_butcher_plain" — persona prompt, URLs left as plain text
    # -------------------------------------------------------------------------
    prompt_profile: str = "ice_butcher"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Module-level convenience instance:
#   from app.config import settings
settings = Settings()
