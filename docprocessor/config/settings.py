"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# pydantic-settings reads configuration from two sources (priority order):
#
#   1. **Environment variables**: e.g. ANTHROPIC_API_KEY=sk-ant-...
#   2. **.env file**: key=value lines in the project root .env file
#
# Field ``anthropic_api_key`` maps to env var ``ANTHROPIC_API_KEY``.
# An empty string means "not configured": the composition root in
# main.py substitutes the mock key-value extractor for an AI provider
# whose key is missing, and the OCR chain skips Google Vision when no
# credentials file exists.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Accepted spellings of AI_PROVIDER, mapped to the canonical provider name.
_PROVIDER_ALIASES = {
    "claude": "anthropic",
    "anthropic": "anthropic",
    "openai": "openai",
    "gpt": "openai",
    "mock": "mock",
    "": "mock",
}


class Settings(BaseSettings):
    """Document processor settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Key-value extraction backend ===
    ai_provider: str = "mock"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoints (TogetherAI, Groq, ...)
    openai_text_model: str = ""

    # === OCR ===
    google_application_credentials: str = ""
    google_cloud_project_id: str = ""
    pdf_ocr_enabled: bool = False  # rasterize scanned PDFs with PyMuPDF and OCR them

    # === Storage ===
    database_path: str = "data/documents.db"
    upload_dir: str = "data/uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    @field_validator("ai_provider", mode="before")
    @classmethod
    def _canonical_provider(cls, value: object) -> str:
        name = str(value or "").strip().lower()
        return _PROVIDER_ALIASES.get(name, name)

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    def get_available_ai_providers(self) -> list[str]:
        """Return AI provider names whose credentials are configured (mock always is)."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        providers.append("mock")
        return providers
