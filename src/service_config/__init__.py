"""
Service configuration resolver.

Resolves deployment-time configuration for a service and stage from a Consul
KV namespace, fetching referenced secrets from Vault and re-encrypting them
with AWS KMS before they are handed to the deployment.
"""

from .classifier import ClassifiedKey, KeyKind, classify, namespace_root
from .clients import ConsulKVClient, VaultSecretClient, decode_value
from .exceptions import (
    AuthenticationError,
    ConfigUnavailable,
    ConfigurationError,
    EncryptionError,
    ErrorType,
    KeyResolutionError,
    MissingValueError,
    ServiceConfigError,
    UpstreamFetchError,
)
from .kms import KeyWrapService
from .logging import setup_logging
from .plugin import ServiceConfigPlugin
from .plugin_config import InvocationContext, KmsConfig, PluginConfig
from .resolver import DuplicateKeyPolicy, ResolutionEngine
from .settings import ResolverSettings
from .transform import SecretWrapper

__version__ = "1.0.0"

__all__ = [
    "AuthenticationError",
    "ClassifiedKey",
    "ConfigUnavailable",
    "ConfigurationError",
    "ConsulKVClient",
    "DuplicateKeyPolicy",
    "EncryptionError",
    "ErrorType",
    "InvocationContext",
    "KeyKind",
    "KeyResolutionError",
    "KeyWrapService",
    "KmsConfig",
    "MissingValueError",
    "PluginConfig",
    "ResolutionEngine",
    "ResolverSettings",
    "SecretWrapper",
    "ServiceConfigError",
    "ServiceConfigPlugin",
    "UpstreamFetchError",
    "VaultSecretClient",
    "classify",
    "decode_value",
    "namespace_root",
    "setup_logging",
]
