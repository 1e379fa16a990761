from pydantic_settings import BaseSettings, SettingsConfigDict

from resumeai.gateway.types import DEFAULT_OVERALL_DEADLINE, DEFAULT_PER_ATTEMPT_TIMEOUT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Provider credentials; a provider without a key is not configured
    groq_api_key: str = ""
    gemini_api_key: str = ""
    baseten_api_key: str = ""
    openrouter_api_key: str = ""

    # Optional model overrides (empty = catalogue default)
    groq_model: str = ""
    gemini_model: str = ""
    baseten_model: str = ""
    openrouter_model: str = ""

    # Fallback chain
    provider_order: str = "gemini,groq,baseten,openrouter"  # comma-separated, most reliable first
    provider_timeout_seconds: float = DEFAULT_PER_ATTEMPT_TIMEOUT  # per attempt
    overall_deadline_seconds: float = DEFAULT_OVERALL_DEADLINE  # whole chain
    continue_on_unparsable: bool = False  # try the next provider when output cannot be recovered
    provider_retry_on_rate_limit: str = ""  # comma-separated provider ids retried once on 429
    retry_base_delay: float = 1.0

    # OpenRouter attribution headers
    openrouter_referer: str = "https://resumescore.app"
    openrouter_title: str = "ResumeScore"

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://app.example.com,https://admin.example.com"

    # Rate limiting (slowapi syntax)
    generate_rate_limit: str = "10/minute"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable

    @property
    def provider_order_list(self) -> list[str]:
        return [p.strip().lower() for p in self.provider_order.split(",") if p.strip()]

    @property
    def retry_on_rate_limit_list(self) -> list[str]:
        return [p.strip().lower() for p in self.provider_retry_on_rate_limit.split(",") if p.strip()]


settings = Settings()


def validate_settings_for_production(current: Settings | None = None) -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    current = current or settings
    errors: list[str] = []

    if current.provider_timeout_seconds <= 0:
        errors.append("PROVIDER_TIMEOUT_SECONDS must be positive")

    if current.overall_deadline_seconds < current.provider_timeout_seconds:
        errors.append("OVERALL_DEADLINE_SECONDS must be at least PROVIDER_TIMEOUT_SECONDS")

    if current.app_env == "production":
        if not any(
            (current.groq_api_key, current.gemini_api_key, current.baseten_api_key, current.openrouter_api_key)
        ):
            errors.append("At least one provider API key must be set in production")
        if current.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if current.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
