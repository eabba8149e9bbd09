"""
Consul KV client.

Reads single values and key listings from the Consul KV HTTP API. Values are
stored base64-encoded and are returned decoded.
"""

import base64
import binascii
import logging

from ..exceptions import MissingValueError, UpstreamFetchError
from .base import HTTPStoreClient

logger = logging.getLogger(__name__)


def decode_value(encoded: str) -> str:
    """Decode a base64 KV payload to text."""
    try:
        return base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError(f"KV payload is not valid base64 text: {e}") from e


class ConsulKVClient(HTTPStoreClient):
    """Consul KV reader authenticated with X-Consul-Token."""

    store_name = "Consul"
    token_header = "X-Consul-Token"

    def _token(self) -> str:
        return self.settings.require_consul_token()

    def kv_url(self, path: str) -> str:
        return f"{self.settings.require_consul_addr()}/v1/kv/{path}"

    async def get_value(self, url: str) -> str:
        """Read and decode the value stored at a full KV URL."""
        self._token()
        data = await self._get_json(url)

        if not data or not isinstance(data, list) or not isinstance(data[0], dict):
            raise MissingValueError(url)
        encoded = data[0].get("Value")
        if not encoded:
            raise MissingValueError(url)

        try:
            return decode_value(encoded)
        except ValueError as e:
            raise UpstreamFetchError(f"Consul returned an undecodable value for {url}: {e}", url=url) from e

    async def read(self, path: str) -> str:
        """Read and decode the value stored at a KV path."""
        self._token()
        return await self.get_value(self.kv_url(path))

    async def list_keys(self, prefix: str) -> list[str]:
        """List every key under a prefix; an absent prefix yields an empty list."""
        self._token()
        url = self.kv_url(prefix)
        data = await self._get_json(url, params={"keys": ""})

        if data is None:
            return []
        if not isinstance(data, list):
            raise UpstreamFetchError(f"Consul returned a malformed key listing for {url}", url=url)
        logger.debug("Listed %d keys under %s", len(data), prefix)
        return [str(key) for key in data]
