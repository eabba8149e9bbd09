"""
Host plugin exposing configuration resolvers as deployment variables.

The host calls one of the registered variable resolvers with the raw variable
string (for example `serviceConfig:database/host`). Every call is a fresh,
stateless pass: settings, plugin config, store clients and the KMS client are
built for the call and released when it completes.
"""

import logging
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from typing import Any

from .clients.consul import ConsulKVClient
from .clients.vault import VaultSecretClient
from .kms import KeyWrapService
from .logging import setup_logging
from .plugin_config import InvocationContext, PluginConfig
from .resolver import DuplicateKeyPolicy, ResolutionEngine
from .settings import ResolverSettings
from .transform import SecretWrapper

logger = logging.getLogger(__name__)

SERVICE_CONFIG_PREFIX = "serviceConfig:"
SECRET_CONFIG_PREFIX = "secretConfig:"


class ServiceConfigPlugin:
    """Variable resolvers for service configuration and secrets."""

    def __init__(
        self,
        serverless: Any,
        options: Mapping[str, Any] | None = None,
        settings: ResolverSettings | None = None,
        duplicate_policy: DuplicateKeyPolicy = DuplicateKeyPolicy.LAST_WINS,
        configure_logging: bool = False,
    ):
        self.serverless = serverless
        self.options = dict(options or {})
        self._settings = settings
        self.duplicate_policy = duplicate_policy

        self.variable_resolvers = {
            "ww_serviceConfig": self.get_config,
            "serviceConfig": self.get_service_config,
            "secretConfig": self.get_secret_config,
        }

        if configure_logging:
            setup_logging(
                service_name=getattr(serverless.service, "service", "unknown"),
                log_level=self._load_settings().log_level,
            )

    def _load_settings(self) -> ResolverSettings:
        return self._settings if self._settings is not None else ResolverSettings()

    @asynccontextmanager
    async def _engine(
        self, context: InvocationContext, settings: ResolverSettings, plugin_config: PluginConfig
    ) -> AsyncIterator[ResolutionEngine]:
        region = plugin_config.kms_region or settings.kms_region
        key_wrap = KeyWrapService(region_name=region, profile_name=context.aws_profile)

        async with ConsulKVClient(settings) as kv_client, VaultSecretClient(settings) as vault_client:
            yield ResolutionEngine(
                kv_client, SecretWrapper(vault_client, key_wrap), self.duplicate_policy
            )

    async def get_config(self, param: str | None = None) -> dict[str, str]:
        """Resolve the whole configuration namespace of the current service and stage."""
        settings = self._load_settings()
        context = InvocationContext.from_serverless(self.serverless, self.options)
        plugin_config = context.plugin_config(settings)

        logger.info("Resolving configuration for %s (%s)", context.service, context.stage)
        async with self._engine(context, settings, plugin_config) as engine:
            return await engine.resolve(context.service, context.stage, context.kms_config())

    async def get_service_config(self, param: str = SERVICE_CONFIG_PREFIX) -> str:
        """Resolve `serviceConfig:<path>` to the plaintext KV value."""
        path = param.removeprefix(SERVICE_CONFIG_PREFIX)
        settings = self._load_settings()
        context = InvocationContext.from_serverless(self.serverless, self.options, require_stage=False)
        plugin_config = context.plugin_config(settings)

        async with self._engine(context, settings, plugin_config) as engine:
            return await engine.get_service_config(path, plugin_config)

    async def get_secret_config(self, param: str = SECRET_CONFIG_PREFIX) -> str:
        """Resolve `secretConfig:<path>` to base64 KMS ciphertext."""
        path = param.removeprefix(SECRET_CONFIG_PREFIX)
        settings = self._load_settings()
        context = InvocationContext.from_serverless(self.serverless, self.options, require_stage=False)
        plugin_config = context.plugin_config(settings)

        async with self._engine(context, settings, plugin_config) as engine:
            return await engine.get_secret_config(path, plugin_config, stage=context.stage)
