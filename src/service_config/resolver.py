"""
Resolution Engine

Walks the configuration namespace of a service and stage, and assembles the
flat mapping handed to the deployment:

- `<root>ConfigMap/<name>` entries resolve to their decoded KV value.
- `<root>secrets/<name>` entries hold a Vault path; the secret behind it is
  re-encrypted with KMS and the base64 ciphertext is used.
- Any other listed path is skipped.

Keys are processed one at a time in listing order. The first failure aborts
the whole resolution; no partial mapping is returned.
"""

import logging
from enum import Enum

from .classifier import KeyKind, classify, namespace_root
from .clients.consul import ConsulKVClient
from .exceptions import ConfigUnavailable, ConfigurationError, ServiceConfigError
from .plugin_config import KmsConfig, PluginConfig
from .transform import SecretWrapper

logger = logging.getLogger(__name__)


class DuplicateKeyPolicy(Enum):
    """What to do when two listed paths share the same config key name."""

    LAST_WINS = "last_wins"
    ERROR = "error"


class ResolutionEngine:
    """Resolves service configuration from Consul, Vault and KMS."""

    def __init__(
        self,
        kv_client: ConsulKVClient,
        secret_wrapper: SecretWrapper,
        duplicate_policy: DuplicateKeyPolicy = DuplicateKeyPolicy.LAST_WINS,
    ):
        self.kv_client = kv_client
        self.secret_wrapper = secret_wrapper
        self.duplicate_policy = duplicate_policy

    async def resolve(self, service: str, stage: str, kms_config: KmsConfig) -> dict[str, str]:
        """Resolve every ConfigMap and secrets entry for service and stage."""
        root = namespace_root(service, stage)

        try:
            paths = await self.kv_client.list_keys(root)
        except ServiceConfigError as e:
            logger.error("Unable to list configuration under %s: %s", root, e)
            raise ConfigUnavailable(
                f"Configuration namespace {root} is unavailable: {e.message}",
                context={"root": root, "stage": stage, **e.context},
            ) from e

        values: dict[str, str] = {}
        sources: dict[str, str] = {}

        for path in paths:
            logger.debug("processing %s", path)
            key = classify(root, path)
            logger.debug("%s classified as %s", path, key.kind.value)

            if key.kind is KeyKind.NO_MATCH:
                continue

            try:
                decoded = await self.kv_client.read(path)
                if key.kind is KeyKind.SECRET:
                    value = await self.secret_wrapper.wrap(decoded, stage, kms_config)
                else:
                    value = decoded
            except ServiceConfigError as e:
                e.context.setdefault("stage", stage)
                e.context.setdefault("path", path)
                logger.error("Failed to resolve %s for stage %s: %s", path, stage, e.message)
                raise

            self._store(values, sources, key.name, path, value)

        logger.info("Resolved %d configuration values for %s (%s)", len(values), service, stage)
        return values

    def _store(
        self, values: dict[str, str], sources: dict[str, str], name: str, path: str, value: str
    ) -> None:
        previous = sources.get(name)
        if previous is not None:
            if self.duplicate_policy is DuplicateKeyPolicy.ERROR:
                raise ConfigurationError(
                    f"Configuration key '{name}' is defined by both {previous} and {path}",
                    context={"key": name, "paths": [previous, path]},
                )
            logger.warning("Configuration key '%s' from %s is overridden by %s", name, previous, path)
        values[name] = value
        sources[name] = path

    async def get_service_config(self, path: str, plugin_config: PluginConfig) -> str:
        """Return the decoded KV value at the plugin's Consul URL plus path."""
        self.kv_client.settings.require_consul_token()
        return await self.kv_client.get_value(f"{plugin_config.consul_url()}{path}")

    async def get_secret_config(
        self, path: str, plugin_config: PluginConfig, stage: str | None = None
    ) -> str:
        """Return KMS ciphertext for the secret at the plugin's Vault URL plus path."""
        self.secret_wrapper.vault_client.settings.require_vault_token()
        if not plugin_config.kms_key_id:
            raise ConfigurationError(
                "KMS Key Id missing, please specify it in the plugin config "
                "[service_config_plugin/kmsKeyId]",
                context={"setting": "kmsKeyId"},
            )
        return await self.secret_wrapper.wrap_url(
            f"{plugin_config.vault_url()}{path}", plugin_config.kms_key_id, stage=stage
        )
