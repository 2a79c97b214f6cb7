"""Network registry and settings."""

import dataclasses

import pytest

from src.blockchain.factory import create_adapter_factory
from src.blockchain.networks import (
    NetworkId,
    build_network_registry,
    build_signing_configs,
)
from src.core.config import Settings


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        polygon_enabled=True,
        tron_enabled=True,
        tron_api_key="key-123",
        tron_mnemonic="test test test test test test test test test test test junk",
        tron_wallet_index=2,
        arbitrum_private_key="0xabc",
        allowed_origins="http://a.example, http://b.example,",
    )


def test_registry_has_every_network(settings):
    registry = build_network_registry(settings)

    assert set(registry) == set(NetworkId)
    assert registry[NetworkId.ARBITRUM].chain_id == 42161
    assert registry[NetworkId.POLYGON].chain_id == 137
    assert registry[NetworkId.AVALANCHE].chain_id == 43114
    assert registry[NetworkId.SOLANA].chain_id is None
    assert registry[NetworkId.TRC20].native_token == "TRX"
    assert registry[NetworkId.TRC20].api_key == "key-123"


def test_registry_enabled_flags_follow_settings(settings):
    registry = build_network_registry(settings)

    assert registry[NetworkId.POLYGON].enabled
    assert registry[NetworkId.TRC20].enabled
    assert not registry[NetworkId.SOLANA].enabled


def test_registry_is_read_only(settings):
    registry = build_network_registry(settings)

    with pytest.raises(TypeError):
        registry[NetworkId.SOLANA] = registry[NetworkId.TRC20]
    with pytest.raises(dataclasses.FrozenInstanceError):
        registry[NetworkId.SOLANA].enabled = True


def test_signing_configs(settings):
    configs = build_signing_configs(settings)

    assert configs[NetworkId.TRC20].mnemonic.endswith("junk")
    assert configs[NetworkId.TRC20].wallet_index == 2
    assert configs[NetworkId.TRC20].is_configured
    assert configs[NetworkId.ARBITRUM].private_key == "0xabc"
    assert not configs[NetworkId.SOLANA].is_configured
    assert configs[NetworkId.SOLANA].derivation_path is None


def test_cors_origins(settings):
    assert settings.cors_origins == ["http://a.example", "http://b.example"]


def test_create_adapter_factory(settings):
    factory = create_adapter_factory(settings)

    assert factory.list_network_ids() == list(NetworkId)
    assert factory.get_descriptor(NetworkId.POLYGON).display_name == "Polygon Mainnet"
