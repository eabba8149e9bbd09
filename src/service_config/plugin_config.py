"""
Plugin Configuration

Loads the caller's static `service_config_plugin` block and the per-stage
`KMS_KEY_ID` table from the host's custom section. Both are built fresh for
every invocation.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import ConfigurationError, KeyResolutionError
from .settings import ResolverSettings

logger = logging.getLogger(__name__)

PLUGIN_CONFIG_SECTION = "service_config_plugin"
KMS_CONFIG_SECTION = "KMS_KEY_ID"


class PluginConfig(BaseModel):
    """Static configuration block declared by the deployable service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    consul_addr: str | None = Field(default=None, alias="consulAddr")
    vault_addr: str | None = Field(default=None, alias="vaultAddr")
    consul_root_context: str = Field(default="", alias="consulRootContext")
    vault_root_context: str = Field(default="", alias="vaultRootContext")
    consul_url_override: str | None = Field(default=None, alias="consulUrl")
    vault_url_override: str | None = Field(default=None, alias="vaultUrl")
    kms_key_id: str | None = Field(default=None, alias="kmsKeyId")
    kms_region: str | None = Field(default=None, alias="kmsRegion")

    @classmethod
    def load(
        cls, block: Mapping[str, Any] | None, settings: ResolverSettings
    ) -> "PluginConfig":
        """Build the plugin config, falling back to settings for store addresses."""
        data = dict(block or {})
        defaults = {
            "consul_addr": settings.consul_addr,
            "vault_addr": settings.vault_addr,
            "kms_region": settings.kms_region,
        }
        for name, value in defaults.items():
            # the block may use either the field name or its camelCase alias
            if name not in data and cls.model_fields[name].alias not in data:
                data[name] = value
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid [custom/{PLUGIN_CONFIG_SECTION}] block: {e}",
                context={"section": PLUGIN_CONFIG_SECTION},
            ) from e

    def consul_url(self) -> str:
        """Base URL for direct KV lookups, terminated so a path can be appended."""
        if self.consul_url_override:
            return self.consul_url_override
        if not self.consul_addr:
            raise ConfigurationError(
                f"Consul address missing, set CONSUL_ADDR or [custom/{PLUGIN_CONFIG_SECTION}/consulAddr]",
                context={"section": PLUGIN_CONFIG_SECTION},
            )
        return f"{self.consul_addr.rstrip('/')}/v1/kv/{self.consul_root_context}"

    def vault_url(self) -> str:
        """Base URL for direct secret lookups, terminated so a path can be appended."""
        if self.vault_url_override:
            return self.vault_url_override
        if not self.vault_addr:
            raise ConfigurationError(
                f"Vault address missing, set VAULT_ADDR or [custom/{PLUGIN_CONFIG_SECTION}/vaultAddr]",
                context={"section": PLUGIN_CONFIG_SECTION},
            )
        return f"{self.vault_addr.rstrip('/')}/v1/{self.vault_root_context}"


class KmsConfig:
    """Per-stage KMS key identifiers."""

    def __init__(self, keys: Mapping[str, str] | None = None):
        self._keys = dict(keys or {})

    @classmethod
    def load(cls, custom: Mapping[str, Any] | None) -> "KmsConfig":
        keys = (custom or {}).get(KMS_CONFIG_SECTION) or {}
        if not isinstance(keys, Mapping):
            raise ConfigurationError(
                f"[custom/{KMS_CONFIG_SECTION}] must map stage names to key ids",
                context={"section": KMS_CONFIG_SECTION},
            )
        return cls(keys)

    def get(self, stage: str) -> str | None:
        return self._keys.get(stage)

    def key_for(self, stage: str) -> str:
        """Return the key id for a stage or raise KeyResolutionError."""
        key_id = self._keys.get(stage)
        if not key_id:
            raise KeyResolutionError(stage)
        return key_id

    def __repr__(self) -> str:
        return f"KmsConfig(stages={sorted(self._keys)})"


@dataclass
class InvocationContext:
    """What the host tells us about the current deployment."""

    service: str
    stage: str | None
    aws_profile: str | None = None
    custom: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_serverless(
        cls,
        serverless: Any,
        options: Mapping[str, Any] | None = None,
        require_stage: bool = True,
    ) -> "InvocationContext":
        """Extract service, stage, profile and custom block from a Serverless-like host.

        The stage given on the command line wins over the provider default.
        Direct lookups pass `require_stage=False` and may get a `None` stage.
        """
        service = serverless.service
        cli_options = dict(options or {})
        variables = getattr(serverless, "variables", None)
        if variables is not None and getattr(variables, "options", None):
            cli_options = {**cli_options, **dict(variables.options)}

        provider = getattr(service, "provider", None)
        stage = cli_options.get("stage") or getattr(provider, "stage", None) or None
        if stage is None and require_stage:
            raise ConfigurationError("Unable to determine deployment stage")

        return cls(
            service=service.service,
            stage=stage,
            aws_profile=cli_options.get("aws-profile"),
            custom=dict(getattr(service, "custom", None) or {}),
        )

    def plugin_config(self, settings: ResolverSettings) -> PluginConfig:
        return PluginConfig.load(self.custom.get(PLUGIN_CONFIG_SECTION), settings)

    def kms_config(self) -> KmsConfig:
        return KmsConfig.load(self.custom)
