"""
Store clients for the Consul KV store and the Vault secret store.
"""

from .base import HTTPStoreClient
from .consul import ConsulKVClient, decode_value
from .vault import VaultSecretClient

__all__ = [
    "ConsulKVClient",
    "HTTPStoreClient",
    "VaultSecretClient",
    "decode_value",
]
