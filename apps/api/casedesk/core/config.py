"""Application configuration with environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Environment
    ENV: str = "dev"

    # App Version (format: a.bc.de - major.feature.patch)
    VERSION: str = "0.01.00"

    # Database (SQLite for local dev, PostgreSQL in production)
    DATABASE_URL: str = "sqlite:///./casedesk.db"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Error Tracking (optional, set in production)
    SENTRY_DSN: str = ""

    # Rate Limiting (requests per minute)
    RATE_LIMIT_API: int = 60

    # Acting user: fall back to the first user in the store when the identity
    # provider supplies none. Disable in production.
    ALLOW_ANONYMOUS_FALLBACK: bool = True

    # Pipeline
    PIPELINE_STAGES: str = ""  # Comma-separated override of the default stage order
    STRICT_STAGE_VALIDATION: bool = False  # Reject statuses outside the stage list

    # Deadline urgency policy: "working_days" or "calendar_days"
    URGENCY_POLICY: str = "working_days"

    # Case numbers (e.g. HF-0001)
    CASE_NUMBER_PREFIX: str = "HF-"
    CASE_NUMBER_WIDTH: int = 4
    LEGACY_CASE_NUMBER_PREFIXES: str = "HF-,CASE-"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS into a list."""
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def pipeline_stages_list(self) -> list[str]:
        """Parse PIPELINE_STAGES into an ordered list (empty = use defaults)."""
        return [s.strip() for s in self.PIPELINE_STAGES.split(",") if s.strip()]

    @property
    def legacy_case_number_prefixes(self) -> list[str]:
        """Prefixes recognised when reading existing case numbers."""
        return [p.strip() for p in self.LEGACY_CASE_NUMBER_PREFIXES.split(",") if p.strip()]


settings = Settings()
