"""
Base HTTP store client.

Shared aiohttp session handling and JSON GET for the KV and secret store
clients.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

import aiohttp

from ..exceptions import UpstreamFetchError
from ..settings import ResolverSettings

logger = logging.getLogger(__name__)


class HTTPStoreClient(ABC):
    """Token-authenticated JSON reader over an aiohttp session."""

    store_name = "store"
    token_header = ""

    def __init__(self, settings: ResolverSettings, session: aiohttp.ClientSession | None = None):
        self.settings = settings
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = aiohttp.ClientTimeout(total=self.settings.request_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @abstractmethod
    def _token(self) -> str:
        """Return the store token or raise AuthenticationError."""

    async def _get_json(self, url: str, params: dict[str, str] | None = None) -> Any | None:
        """GET a JSON document; returns None on 404, raises on any other failure."""
        headers = {self.token_header: self._token()}
        session = self._get_session()

        try:
            async with session.get(url, headers=headers, params=params) as response:
                if response.status == 404:
                    logger.debug("%s returned 404 for %s", self.store_name, url)
                    return None
                if response.status >= 400:
                    raise UpstreamFetchError(
                        f"{self.store_name} returned HTTP {response.status} for {url}",
                        url=url,
                        status=response.status,
                    )
                return await response.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamFetchError(
                f"Failed to fetch {url} from {self.store_name}: {e}", url=url
            ) from e
        except ValueError as e:
            raise UpstreamFetchError(
                f"{self.store_name} returned malformed JSON for {url}: {e}", url=url
            ) from e
