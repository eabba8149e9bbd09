"""
Unit tests for resolver settings, plugin config and invocation context loading.
"""

import os
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from service_config.exceptions import (
    AuthenticationError,
    ConfigurationError,
    KeyResolutionError,
)
from service_config.plugin_config import InvocationContext, KmsConfig, PluginConfig
from service_config.settings import DEFAULT_KMS_REGION, ResolverSettings


def _serverless(stage=None, options=None, custom=None):
    return SimpleNamespace(
        service=SimpleNamespace(
            service="orders",
            provider=SimpleNamespace(stage=stage),
            custom=custom or {},
        ),
        variables=SimpleNamespace(options=options or {}),
    )


@pytest.mark.unit
class TestResolverSettings:
    @patch.dict(
        os.environ,
        {
            "CONSUL_ADDR": "http://consul.env:8500/",
            "CONSUL_TOKEN": "env-consul",
            "VAULT_ADDR": "http://vault.env:8200",
            "VAULT_TOKEN": "env-vault",
        },
    )
    def test_loaded_from_environment(self):
        settings = ResolverSettings(_env_file=None)

        assert settings.consul_addr == "http://consul.env:8500"
        assert settings.consul_token == "env-consul"
        assert settings.vault_addr == "http://vault.env:8200"
        assert settings.vault_token == "env-vault"
        assert settings.kms_region == DEFAULT_KMS_REGION

    def test_require_tokens(self):
        settings = ResolverSettings(consul_token=None, vault_token=None, _env_file=None)

        with pytest.raises(AuthenticationError, match="CONSUL_TOKEN"):
            settings.require_consul_token()
        with pytest.raises(AuthenticationError, match="VAULT_TOKEN"):
            settings.require_vault_token()

    def test_authentication_error_is_configuration_error(self):
        settings = ResolverSettings(consul_token=None, _env_file=None)

        with pytest.raises(ConfigurationError):
            settings.require_consul_token()


@pytest.mark.unit
class TestPluginConfig:
    def test_urls_derived_from_settings_and_root_context(self, settings):
        config = PluginConfig.load(
            {"consulRootContext": "tenant-a/", "vaultRootContext": "secret/tenant-a/"}, settings
        )

        assert config.consul_url() == "http://consul.test:8500/v1/kv/tenant-a/"
        assert config.vault_url() == "http://vault.test:8200/v1/secret/tenant-a/"

    def test_explicit_urls_win(self, settings):
        config = PluginConfig.load(
            {"consulUrl": "https://kv.example/v1/kv/", "vaultUrl": "https://vault.example/v1/"},
            settings,
        )

        assert config.consul_url() == "https://kv.example/v1/kv/"
        assert config.vault_url() == "https://vault.example/v1/"

    def test_block_addresses_override_settings(self, settings):
        config = PluginConfig.load({"consulAddr": "http://other:8500/"}, settings)

        assert config.consul_url() == "http://other:8500/v1/kv/"

    def test_snake_case_block_overrides_settings(self, settings):
        block = {
            "consul_addr": "http://block:8500",
            "vault_addr": "http://block:8200",
            "kms_region": "us-east-1",
        }
        config = PluginConfig.load(block, settings)

        assert config.kms_region == "us-east-1"
        assert config.consul_url() == "http://block:8500/v1/kv/"
        assert config.vault_url() == "http://block:8200/v1/"

    def test_missing_block_uses_defaults(self, settings):
        config = PluginConfig.load(None, settings)

        assert config.kms_key_id is None
        assert config.kms_region == settings.kms_region

    def test_missing_address_raises(self):
        settings = ResolverSettings(consul_addr=None, vault_addr=None, _env_file=None)
        config = PluginConfig.load({}, settings)

        with pytest.raises(ConfigurationError):
            config.consul_url()
        with pytest.raises(ConfigurationError):
            config.vault_url()

    def test_invalid_block_raises_configuration_error(self, settings):
        with pytest.raises(ConfigurationError, match="service_config_plugin"):
            PluginConfig.load({"kmsKeyId": ["not", "a", "string"]}, settings)

    def test_config_is_immutable(self, settings):
        config = PluginConfig.load({"kmsKeyId": "key"}, settings)

        with pytest.raises(ValidationError):
            config.kms_key_id = "other"


@pytest.mark.unit
class TestKmsConfig:
    def test_key_for_stage(self):
        config = KmsConfig.load({"KMS_KEY_ID": {"dev": "dev-key", "prod": "prod-key"}})

        assert config.key_for("prod") == "prod-key"
        assert config.get("qa") is None

    def test_unknown_stage_raises_key_resolution_error(self):
        config = KmsConfig.load({"KMS_KEY_ID": {"dev": "dev-key"}})

        with pytest.raises(KeyResolutionError, match="qa") as exc_info:
            config.key_for("qa")

        assert exc_info.value.context["stage"] == "qa"

    def test_missing_section_means_no_keys(self):
        with pytest.raises(KeyResolutionError):
            KmsConfig.load({}).key_for("dev")

    def test_malformed_section_rejected(self):
        with pytest.raises(ConfigurationError):
            KmsConfig.load({"KMS_KEY_ID": "single-key"})


@pytest.mark.unit
class TestInvocationContext:
    def test_cli_stage_wins_over_provider(self):
        context = InvocationContext.from_serverless(
            _serverless(stage="dev", options={"stage": "prod", "aws-profile": "deploy"})
        )

        assert context.service == "orders"
        assert context.stage == "prod"
        assert context.aws_profile == "deploy"

    def test_provider_stage_is_default(self):
        context = InvocationContext.from_serverless(_serverless(stage="dev"))

        assert context.stage == "dev"
        assert context.aws_profile is None

    def test_plugin_options_are_considered(self):
        context = InvocationContext.from_serverless(_serverless(), options={"stage": "qa"})

        assert context.stage == "qa"

    def test_missing_stage_raises(self):
        with pytest.raises(ConfigurationError, match="stage"):
            InvocationContext.from_serverless(_serverless())

    def test_stage_optional_when_not_required(self):
        context = InvocationContext.from_serverless(_serverless(), require_stage=False)

        assert context.stage is None
        assert context.service == "orders"

    def test_custom_sections_loaded(self, settings):
        custom = {
            "service_config_plugin": {"kmsKeyId": "plugin-key"},
            "KMS_KEY_ID": {"dev": "dev-key"},
        }
        context = InvocationContext.from_serverless(_serverless(stage="dev", custom=custom))

        assert context.plugin_config(settings).kms_key_id == "plugin-key"
        assert context.kms_config().key_for("dev") == "dev-key"
