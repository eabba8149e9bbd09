"""
Secret wrapping: fetch a secret from Vault and re-encrypt it with KMS.
"""

import logging

from .clients.vault import VaultSecretClient
from .exceptions import ServiceConfigError
from .kms import KeyWrapService
from .plugin_config import KmsConfig

logger = logging.getLogger(__name__)


class SecretWrapper:
    """Turns a Vault secret path into KMS ciphertext."""

    def __init__(self, vault_client: VaultSecretClient, key_wrap: KeyWrapService):
        self.vault_client = vault_client
        self.key_wrap = key_wrap

    async def wrap(self, secret_path: str, stage: str, kms_config: KmsConfig) -> str:
        """Wrap the secret at a Vault path with the key configured for stage."""
        # Key id is resolved before Vault is contacted.
        key_id = kms_config.key_for(stage)
        return await self.wrap_url(self.vault_client.secret_url(secret_path), key_id, stage=stage)

    async def wrap_url(self, url: str, key_id: str, stage: str | None = None) -> str:
        """Wrap the secret at a full Vault URL with an explicit key id."""
        try:
            plaintext = await self.vault_client.read_secret_url(url)
            return self.key_wrap.encrypt(key_id, plaintext)
        except ServiceConfigError as e:
            e.context.setdefault("url", url)
            if stage:
                e.context.setdefault("stage", stage)
            logger.error(
                "err [%s] received while fetching %s",
                e.message,
                url,
                extra={"url": url, "stage": stage, "error_type": e.error_type.value},
            )
            raise
