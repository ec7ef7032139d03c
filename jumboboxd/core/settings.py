# jumboboxd/core/settings.py
import json
from typing import Annotated, Any, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _split_csv(v: str) -> List[str]:
    v = v.strip()
    if v.startswith("["):
        return [str(x).strip() for x in json.loads(v) if str(x).strip()]
    return [p.strip() for p in v.split(",") if p.strip()]


class Settings(BaseSettings):
    # --- DB ---
    database_url: str = Field(
        default="sqlite+aiosqlite:///./jumboboxd.db", alias="DATABASE_URL"
    )  # e.g. postgresql+asyncpg://...
    database_url_sync: Optional[str] = Field(default=None, alias="DATABASE_URL_SYNC")

    # --- Movie catalog ---
    catalog_base_url: str = Field(
        default="https://jumboboxd.soylemez.net/api", alias="CATALOG_BASE_URL"
    )
    catalog_timeout: float = Field(default=15.0, alias="CATALOG_TIMEOUT")

    # --- Identity provider ---
    identity_api_base: str = Field(default="https://api.clerk.com/v1", alias="IDENTITY_API_BASE")
    identity_secret_key: Optional[str] = Field(default=None, alias="IDENTITY_SECRET_KEY")
    # PEM public key (RS256) or shared secret (HS256) used to verify session tokens
    identity_jwt_key: Optional[str] = Field(default=None, alias="IDENTITY_JWT_KEY")
    identity_jwt_algorithms: Annotated[List[str], NoDecode] = Field(default=["RS256"], alias="IDENTITY_JWT_ALGORITHMS")
    identity_issuer: Optional[str] = Field(default=None, alias="IDENTITY_ISSUER")
    identity_session_cookie: str = Field(default="__session", alias="IDENTITY_SESSION_COOKIE")
    identity_timeout: float = Field(default=10.0, alias="IDENTITY_TIMEOUT")

    # --- HTTP ---
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:5173"], alias="CORS_ORIGINS"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Plain env values: "RS256" or "https://a.example,https://b.example"
    @field_validator("identity_jwt_algorithms", "cors_origins", mode="before")
    @classmethod
    def _assemble_list(cls, v: Any):
        if isinstance(v, str):
            return _split_csv(v)
        return v

    # Pydantic v2 settings config
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )


settings = Settings()
