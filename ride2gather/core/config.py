"""Environment-driven configuration for the ride2gather API.

Every knob the service reads lives on ``AppSettings``. Values come from the
process environment first and then from ``.env``/``.env.local`` so a local
checkout boots without extra setup.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Iterable

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """Environment-driven application configuration."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "ride2gather-api"

    # Relative to the working directory; deployments point this at a volume.
    DATA_DIR: Path = Path("data")
    UPLOADS_DIR: Path | None = None

    DB_URL: str | None = Field(default=None, validation_alias=AliasChoices("DATABASE_URL", "DB_URL"))

    # bcrypt work factor; 10 keeps hashes compatible with the existing rows.
    BCRYPT_ROUNDS: int = 10

    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024
    # When unset, avatar URLs are built from the incoming request's base URL.
    PUBLIC_BASE_URL: str | None = None

    # Comma separated in the environment, so skip the JSON decoding of list fields.
    ALLOWED_ORIGINS: Annotated[list[str], NoDecode] = Field(default_factory=lambda: ["*"])

    SEED_EQUIPMENT: bool = False
    LOG_LEVEL: str = "INFO"

    HOST: str = "0.0.0.0"
    PORT: int = 3000

    @property
    def uploads_dir(self) -> Path:
        return self.UPLOADS_DIR if self.UPLOADS_DIR is not None else self.DATA_DIR / "uploads"

    @property
    def database_url(self) -> str:
        return self.DB_URL or f"sqlite:///{self.DATA_DIR / 'ride2gather.db'}"

    @field_validator("ALLOWED_ORIGINS", mode="before")
    @classmethod
    def parse_allowed_origins(cls, value: Any) -> list[str]:
        if value in (None, "", []):
            return []
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        if isinstance(value, Iterable):
            return [str(item).strip() for item in value if str(item).strip()]
        raise TypeError("ALLOWED_ORIGINS must be a comma separated string or list")

    @field_validator("BCRYPT_ROUNDS")
    @classmethod
    def check_rounds(cls, value: int) -> int:
        # bcrypt only accepts log2 work factors in this range.
        if not 4 <= value <= 31:
            raise ValueError("BCRYPT_ROUNDS must be between 4 and 31")
        return value


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    settings = AppSettings()
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    return settings


settings = get_settings()
