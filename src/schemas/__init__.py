"""Schemas module - Pydantic DTOs for request/response."""

from src.schemas.blockchain import (
    AddressValidationResponse,
    BalanceEntryResponse,
    BalanceResponse,
    CreateWalletBody,
    GasEstimateResponse,
    LatestBlockResponse,
    MultiNetworkBalanceResponse,
    NetworkHealthResponse,
    SendTransactionResponse,
    SupportedNetworksResponse,
    TransactionRequestBody,
    TransactionStatusResponse,
    WalletCreationResponse,
    WalletInfoResponse,
)

__all__: list[str] = [
    # Requests
    "TransactionRequestBody",
    "CreateWalletBody",
    # Networks
    "SupportedNetworksResponse",
    "NetworkHealthResponse",
    # Balances
    "BalanceResponse",
    "BalanceEntryResponse",
    "MultiNetworkBalanceResponse",
    # Wallets
    "WalletInfoResponse",
    "WalletCreationResponse",
    "AddressValidationResponse",
    # Transactions & Blocks
    "SendTransactionResponse",
    "TransactionStatusResponse",
    "GasEstimateResponse",
    "LatestBlockResponse",
]
