"""Configuration settings for sieledger."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings read from SIELEDGER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SIELEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: Optional[str] = Field(
        default=None, description="SQLAlchemy URL; overrides db_path when set"
    )
    db_path: Optional[str] = Field(
        default=None, description="SQLite file path (default ~/.sieledger/sieledger.db)"
    )

    # Auth (tokens are issued by the hosted auth provider)
    jwt_secret: SecretStr = Field(default=SecretStr("dev-secret"), description="JWT signing secret")
    jwt_algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwt_audience: Optional[str] = Field(
        default=None, description="Expected 'aud' claim, e.g. 'authenticated'"
    )

    # Company info used in SIE exports
    company_name: str = Field(default="Mitt Företag", description="Company name for #FNAMN")
    org_number: str = Field(default="", description="Organisation number for #ORGNR")

    # Server
    host: str = Field(default="127.0.0.1", description="HTTP bind host")
    port: int = Field(default=8000, description="HTTP bind port")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log output format"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
