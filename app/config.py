"""Service configuration read from environment variables and ``.env``."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Generation is disabled while the key is empty
    OPENAI_API_KEY: str = ""
    OPENAI_IMAGE_MODEL: str = "gpt-image-1.5"
    OPENAI_IMAGE_SIZE: str = "auto"
    OPENAI_TIMEOUT_S: float = 120.0

    DRESSES_DIR: Path = Path("assets/dresses")
    DRESSES_URL_PREFIX: str = "/assets/dresses/"

    MAX_UPLOAD_MB: float = 5
    FALLBACK_TO_DEMO_WHEN_UNCONFIGURED: bool = False

    ALLOWED_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    @property
    def max_upload_bytes(self) -> int:
        return int(self.MAX_UPLOAD_MB * 1024 * 1024)

    @property
    def origins(self) -> list[str]:
        origins = [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]
