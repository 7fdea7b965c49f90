from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv
from functools import lru_cache
from typing import Any, List, Optional
import logging

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_TOKEN_TTL = 3600
DEFAULT_PORT = 3000
# Ten years; far larger values overflow the expiry timestamp
MAX_TOKEN_TTL = 10 * 365 * 24 * 3600


def _positive_int(value: Any, default: int) -> int:
    # "abc", "", "nan" and friends must never leak into the token expiry
    if value is None or isinstance(value, bool):
        return default
    try:
        number = int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return default
    return number if number > 0 else default


class Settings(BaseSettings):
    LIVEKIT_URL: str
    LIVEKIT_API_KEY: str
    LIVEKIT_API_SECRET: str
    TOKEN_TTL: int = Field(DEFAULT_TOKEN_TTL, le=MAX_TOKEN_TTL)
    HOST: str = "0.0.0.0"
    PORT: int = DEFAULT_PORT
    CORS_ALLOW_ORIGINS: str = "*"  # comma separated
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @field_validator("LIVEKIT_URL", "LIVEKIT_API_KEY", "LIVEKIT_API_SECRET")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("TOKEN_TTL", mode="before")
    @classmethod
    def _coerce_ttl(cls, v: Any) -> int:
        return _positive_int(v, DEFAULT_TOKEN_TTL)

    @field_validator("PORT", mode="before")
    @classmethod
    def _coerce_port(cls, v: Any) -> int:
        return _positive_int(v, DEFAULT_PORT)

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ALLOW_ORIGINS.split(",") if o.strip()]


def load_settings(env_file: Optional[str] = ".env") -> Settings:
    """Build Settings or stop the process, naming every missing or invalid variable."""
    try:
        return Settings(_env_file=env_file)
    except ValidationError as e:
        for err in e.errors():
            name = err["loc"][0] if err["loc"] else "<unknown>"
            if err["type"] in ("missing", "value_error"):
                logger.error(f"Missing env: {name}")
            else:
                logger.error(f"Invalid env: {name}")
        raise SystemExit(1) from None


@lru_cache
def get_settings() -> Settings:
    return load_settings()
