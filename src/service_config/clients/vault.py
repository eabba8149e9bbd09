"""
Vault secret client.

Reads one secret at a time from the Vault HTTP API and returns the plaintext
held in its `value` field.
"""

import logging

from ..exceptions import MissingValueError, UpstreamFetchError
from .base import HTTPStoreClient

logger = logging.getLogger(__name__)


class VaultSecretClient(HTTPStoreClient):
    """Vault reader authenticated with X-Vault-Token."""

    store_name = "Vault"
    token_header = "X-Vault-Token"

    def _token(self) -> str:
        return self.settings.require_vault_token()

    def secret_url(self, path: str) -> str:
        return f"{self.settings.require_vault_addr()}/v1/{path}"

    async def read_secret_url(self, url: str) -> str:
        """Read the plaintext secret at a full Vault URL."""
        self._token()
        payload = await self._get_json(url)

        if payload is None:
            raise UpstreamFetchError(f"Vault returned HTTP 404 for {url}", url=url, status=404)

        data = payload.get("data") if isinstance(payload, dict) else None
        value = data.get("value") if isinstance(data, dict) else None
        if not isinstance(value, str):
            raise MissingValueError(url)
        return value

    async def read_secret(self, path: str) -> str:
        """Read the plaintext secret at a Vault path."""
        self._token()
        return await self.read_secret_url(self.secret_url(path))
