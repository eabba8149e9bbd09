"""
Test doubles and constants shared by the unit tests.
"""

import base64
from typing import Any

CONSUL_ADDR = "http://consul.test:8500"
VAULT_ADDR = "http://vault.test:8200"
TEST_SERVICE = "orders"
TEST_STAGE = "dev"
TEST_ROOT = f"app_config_vars/serverless/{TEST_SERVICE}.json/{TEST_STAGE}/"
TEST_KEY_ID = "arn:aws:kms:eu-west-1:123456789012:key/dev-key"


def encode(value: str) -> str:
    """Base64-encode text the way Consul stores KV payloads."""
    return base64.b64encode(value.encode("utf-8")).decode("ascii")


class FakeResponse:
    """Minimal async response compatible with `async with session.get(...)`."""

    def __init__(self, status: int, payload: Any):
        self.status = status
        self._payload = payload

    async def json(self, content_type=None):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False


class FakeSession:
    """Routes GET requests to canned responses and records every request."""

    def __init__(self):
        self.routes: dict[tuple[str, bool], Any] = {}
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def add(self, url: str, payload: Any, status: int = 200, listing: bool = False) -> None:
        self.routes[(url, listing)] = (status, payload)

    def fail(self, url: str, error: Exception, listing: bool = False) -> None:
        self.routes[(url, listing)] = error

    def add_kv(self, path: str, value: str) -> None:
        self.add(f"{CONSUL_ADDR}/v1/kv/{path}", [{"Key": path, "Value": encode(value)}])

    def add_listing(self, prefix: str, keys: list[str]) -> None:
        self.add(f"{CONSUL_ADDR}/v1/kv/{prefix}", keys, listing=True)

    def add_secret(self, path: str, value: str) -> None:
        self.add(f"{VAULT_ADDR}/v1/{path}", {"data": {"value": value}})

    def urls(self) -> list[str]:
        return [request["url"] for request in self.requests]

    def get(self, url: str, headers: dict[str, str] | None = None, params: dict[str, str] | None = None):
        listing = bool(params and "keys" in params)
        self.requests.append({"url": url, "headers": headers or {}, "params": params})
        route = self.routes.get((url, listing))
        if route is None:
            return FakeResponse(404, None)
        if isinstance(route, Exception):
            raise route
        status, payload = route
        return FakeResponse(status, payload)

    async def close(self) -> None:
        self.closed = True


class FakeKeyWrap:
    """Deterministic key-wrap stand-in recording every encrypt call."""

    def __init__(self):
        self.calls: list[tuple[str, str]] = []

    def encrypt(self, key_id: str, plaintext: str) -> str:
        self.calls.append((key_id, plaintext))
        return encode(f"cipher[{key_id}]:{plaintext}")

