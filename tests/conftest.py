"""
Global pytest configuration and fixtures for service config tests.

Provides settings pointing at fake store addresses, an in-memory stand-in for
the aiohttp session used by the store clients, and a stubbed KMS client.
"""

import boto3
import pytest
from botocore.stub import Stubber

from helpers import CONSUL_ADDR, TEST_KEY_ID, TEST_STAGE, VAULT_ADDR, FakeKeyWrap, FakeSession

from service_config.clients import ConsulKVClient, VaultSecretClient
from service_config.kms import KeyWrapService
from service_config.plugin_config import KmsConfig
from service_config.settings import ResolverSettings
from service_config.transform import SecretWrapper


@pytest.fixture
def settings() -> ResolverSettings:
    """Settings with every store address and token configured."""
    return ResolverSettings(
        consul_addr=CONSUL_ADDR,
        consul_token="consul-token",
        vault_addr=VAULT_ADDR,
        vault_token="vault-token",
        kms_region="eu-west-1",
        log_level="INFO",
        _env_file=None,
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def kv_client(settings, session) -> ConsulKVClient:
    return ConsulKVClient(settings, session=session)


@pytest.fixture
def vault_client(settings, session) -> VaultSecretClient:
    return VaultSecretClient(settings, session=session)


@pytest.fixture
def key_wrap() -> FakeKeyWrap:
    return FakeKeyWrap()


@pytest.fixture
def secret_wrapper(vault_client, key_wrap) -> SecretWrapper:
    return SecretWrapper(vault_client, key_wrap)


@pytest.fixture
def kms_config() -> KmsConfig:
    return KmsConfig({TEST_STAGE: TEST_KEY_ID, "prod": "prod-key"})


@pytest.fixture
def kms_client():
    """Real boto3 KMS client with static test credentials, wrapped in a Stubber."""
    client = boto3.client(
        "kms",
        region_name="eu-west-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
    with Stubber(client) as stubber:
        yield client, stubber


@pytest.fixture
def kms_service(kms_client) -> KeyWrapService:
    client, _ = kms_client
    return KeyWrapService(region_name="eu-west-1", client=client)
