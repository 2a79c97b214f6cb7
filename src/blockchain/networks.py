"""Network registry.

Static mapping from network id to connection configuration, built once
from settings at process start and read-only afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from src.core.config import Settings


class NetworkId(str, Enum):
    """Supported network identifiers."""

    ARBITRUM = "arbitrum"
    POLYGON = "polygon"
    AVALANCHE = "avalanche"
    SOLANA = "solana"
    TRC20 = "trc20"


@dataclass(frozen=True)
class NetworkDescriptor:
    """Identity and connection details of one supported network."""

    id: NetworkId
    display_name: str
    rpc_endpoint: str
    native_token: str
    chain_id: int | None = None
    api_key: str | None = None
    is_testnet: bool = False
    enabled: bool = True


@dataclass(frozen=True)
class SigningConfig:
    """Signing key material an adapter may load during initialization."""

    private_key: str | None = None
    mnemonic: str | None = None
    wallet_index: int = 0
    derivation_path: str | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.private_key or self.mnemonic)


def build_network_registry(settings: Settings) -> Mapping[NetworkId, NetworkDescriptor]:
    """Build the read-only network registry.

    Args:
        settings: Application settings

    Returns:
        Mapping of network id to descriptor
    """
    descriptors = [
        NetworkDescriptor(
            id=NetworkId.ARBITRUM,
            display_name="Arbitrum One",
            rpc_endpoint=settings.arbitrum_rpc_url,
            native_token="ETH",
            chain_id=42161,
            enabled=settings.arbitrum_enabled,
        ),
        NetworkDescriptor(
            id=NetworkId.POLYGON,
            display_name="Polygon Mainnet",
            rpc_endpoint=settings.polygon_rpc_url,
            native_token="POL",
            chain_id=137,
            enabled=settings.polygon_enabled,
        ),
        NetworkDescriptor(
            id=NetworkId.AVALANCHE,
            display_name="Avalanche C-Chain",
            rpc_endpoint=settings.avalanche_rpc_url,
            native_token="AVAX",
            chain_id=43114,
            enabled=settings.avalanche_enabled,
        ),
        NetworkDescriptor(
            id=NetworkId.SOLANA,
            display_name="Solana Mainnet",
            rpc_endpoint=settings.solana_rpc_url,
            native_token="SOL",
            enabled=settings.solana_enabled,
        ),
        NetworkDescriptor(
            id=NetworkId.TRC20,
            display_name="Tron Mainnet",
            rpc_endpoint=settings.tron_rpc_url,
            native_token="TRX",
            api_key=settings.tron_api_key or None,
            enabled=settings.tron_enabled,
        ),
    ]
    return MappingProxyType({d.id: d for d in descriptors})


def build_signing_configs(settings: Settings) -> Mapping[NetworkId, SigningConfig]:
    """Collect per-network signing key material from settings."""
    configs = {}
    for network_id in NetworkId:
        prefix = "tron" if network_id is NetworkId.TRC20 else network_id.value
        configs[network_id] = SigningConfig(
            private_key=getattr(settings, f"{prefix}_private_key") or None,
            mnemonic=getattr(settings, f"{prefix}_mnemonic") or None,
            wallet_index=getattr(settings, f"{prefix}_wallet_index"),
            derivation_path=getattr(settings, f"{prefix}_derivation_path") or None,
        )
    return MappingProxyType(configs)
