"""
Resolver settings.

Store addresses and tokens are read from the process environment once, at the
boundary, and the resulting object is handed to every client constructor.
"""

import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import AuthenticationError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_KMS_REGION = "eu-west-1"


class ResolverSettings(BaseSettings):
    """Environment-backed settings for the KV store, secret store and KMS."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    consul_addr: str | None = Field(default=None, description="Consul base address")
    consul_token: str | None = Field(default=None, description="Consul ACL token")
    vault_addr: str | None = Field(default=None, description="Vault base address")
    vault_token: str | None = Field(default=None, description="Vault token")
    kms_region: str = Field(default=DEFAULT_KMS_REGION, description="KMS region")
    request_timeout: float | None = Field(
        default=None, description="Total HTTP request timeout in seconds"
    )
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("consul_addr", "vault_addr")
    @classmethod
    def strip_trailing_slash(cls, value: str | None) -> str | None:
        if value:
            return value.rstrip("/")
        return value

    def require_consul_token(self) -> str:
        """Return the Consul token or fail before any network call."""
        if not self.consul_token:
            raise AuthenticationError(
                "Missing consul token for authentication, "
                "you need to set CONSUL_TOKEN as a environment variable",
                context={"setting": "CONSUL_TOKEN"},
            )
        return self.consul_token

    def require_vault_token(self) -> str:
        """Return the Vault token or fail before any network call."""
        if not self.vault_token:
            raise AuthenticationError(
                "Missing vault token for authentication, "
                "you need to set VAULT_TOKEN as a environment variable",
                context={"setting": "VAULT_TOKEN"},
            )
        return self.vault_token

    def require_consul_addr(self) -> str:
        if not self.consul_addr:
            raise ConfigurationError(
                "Missing consul address, you need to set CONSUL_ADDR as a environment variable",
                context={"setting": "CONSUL_ADDR"},
            )
        return self.consul_addr

    def require_vault_addr(self) -> str:
        if not self.vault_addr:
            raise ConfigurationError(
                "Missing vault address, you need to set VAULT_ADDR as a environment variable",
                context={"setting": "VAULT_ADDR"},
            )
        return self.vault_addr
