from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

_PACKAGE_DIR = Path(__file__).resolve().parent


class ConfigError(Exception):
    """Raised when required configuration is missing at startup."""


class Settings(BaseSettings):
    v0_api_key: str = ""
    v0_base_url: str = "https://api.v0.dev/v1"
    v0_model: str = "v0-1.5-md"
    default_temperature: float = 0.7
    max_attempts: int = 3
    retry_backoff_seconds: float = 1.0
    request_timeout: float | None = None  # None = wait for the provider indefinitely
    log_level: str = "INFO"
    templates_dir: str = str(_PACKAGE_DIR / "templates" / "catalog")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class GenerationDefaults(BaseModel, frozen=True):
    """Request defaults applied by the client when a request leaves them unset."""

    model: str = "v0-1.5-md"
    temperature: float = 0.7
    stream: bool = False
    max_attempts: int = 3
    backoff_seconds: float = 1.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationDefaults":
        return cls(
            model=settings.v0_model,
            temperature=settings.default_temperature,
            max_attempts=settings.max_attempts,
            backoff_seconds=settings.retry_backoff_seconds,
        )


def validate_config(settings: Settings) -> None:
    missing = []
    if not settings.v0_api_key.strip():
        missing.append("V0_API_KEY")
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")


settings = Settings()
