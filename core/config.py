from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings


load_dotenv()


class AppSettings(BaseSettings):
    # Accept MONGODB_URI (used by the original Node service) or MONGO_URI
    mongo_uri: str = Field(
        default="mongodb://localhost:27017",
        validation_alias=AliasChoices("MONGODB_URI", "MONGO_URI"),
    )
    database_name: str = Field(
        default="suraksha-car-care",
        validation_alias=AliasChoices("MONGO_DB_NAME", "DATABASE_NAME"),
    )

    # SMTP transport
    smtp_host: str = Field(default="smtp.gmail.com", alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_use_tls: bool = Field(default=True, alias="SMTP_USE_TLS")
    smtp_timeout: float = Field(default=30.0, alias="SMTP_TIMEOUT")
    smtp_username: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SMTP_USERNAME", "EMAIL_USER")
    )
    smtp_password: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("SMTP_PASSWORD", "EMAIL_PASS")
    )
    smtp_from_email: Optional[str] = Field(default=None, alias="SMTP_FROM_EMAIL")
    smtp_from_name: str = Field(default="Suraksha Car Care", alias="SMTP_FROM_NAME")
    smtp_pool_max_connections: int = Field(default=5, ge=1, alias="SMTP_POOL_MAX_CONNECTIONS")
    smtp_pool_max_messages: int = Field(default=100, ge=1, alias="SMTP_POOL_MAX_MESSAGES")

    # Booking notifications go here; the original service mailed its own inbox
    admin_email: Optional[str] = Field(default=None, alias="ADMIN_EMAIL")

    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    port: int = Field(default=5000, alias="PORT")

    environment: Literal["development", "production", "test"] = Field(
        default="development", alias="ENVIRONMENT"
    )

    @property
    def sender_address(self) -> Optional[str]:
        return self.smtp_from_email or self.smtp_username

    @property
    def admin_address(self) -> Optional[str]:
        return self.admin_email or self.smtp_username


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


settings = get_settings()
