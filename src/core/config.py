"""Multi-Chain Gateway - Core Configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Multi-Chain Gateway"
    debug: bool = False
    log_level: str = Field(default="INFO", description="Root log level")
    allowed_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins",
    )

    # Timeouts (seconds)
    adapter_call_timeout: float = Field(
        default=15.0, gt=0, description="Deadline for a single adapter call"
    )
    adapter_init_timeout: float = Field(
        default=20.0, gt=0, description="Deadline for adapter initialization"
    )
    rpc_request_timeout: float = Field(
        default=10.0, gt=0, description="Transport timeout for RPC requests"
    )

    # Arbitrum
    arbitrum_rpc_url: str = Field(
        default="https://arb1.arbitrum.io/rpc", description="Arbitrum One RPC endpoint"
    )
    arbitrum_enabled: bool = False
    arbitrum_private_key: str = Field(default="", description="Signing key (hex)")
    arbitrum_mnemonic: str = Field(default="", description="Signing seed phrase")
    arbitrum_wallet_index: int = 0
    arbitrum_derivation_path: str = ""

    # Polygon
    polygon_rpc_url: str = Field(
        default="https://polygon-rpc.com", description="Polygon PoS RPC endpoint"
    )
    polygon_enabled: bool = False
    polygon_private_key: str = ""
    polygon_mnemonic: str = ""
    polygon_wallet_index: int = 0
    polygon_derivation_path: str = ""

    # Avalanche
    avalanche_rpc_url: str = Field(
        default="https://api.avax.network/ext/bc/C/rpc",
        description="Avalanche C-Chain RPC endpoint",
    )
    avalanche_enabled: bool = False
    avalanche_private_key: str = ""
    avalanche_mnemonic: str = ""
    avalanche_wallet_index: int = 0
    avalanche_derivation_path: str = ""

    # Solana
    solana_rpc_url: str = Field(
        default="https://api.mainnet-beta.solana.com",
        description="Solana RPC endpoint",
    )
    solana_enabled: bool = False
    solana_private_key: str = Field(
        default="", description="Keypair as JSON byte array or base58 string"
    )
    solana_mnemonic: str = ""
    solana_wallet_index: int = 0
    solana_derivation_path: str = ""

    # TRON
    tron_rpc_url: str = Field(
        default="https://api.trongrid.io", description="TronGrid full node endpoint"
    )
    tron_api_key: str = Field(default="", description="TronGrid API key")
    tron_enabled: bool = True
    tron_private_key: str = ""
    tron_mnemonic: str = ""
    tron_wallet_index: int = 0
    tron_derivation_path: str = ""

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
