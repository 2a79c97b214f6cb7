"""Core module - configuration, logging, and exceptions."""

from src.core.config import Settings, get_settings
from src.core.exceptions import (
    AdapterNotReadyError,
    AdapterTimeoutError,
    ChainError,
    ConstructionError,
    FactoryError,
    GatewayError,
    InitializationError,
    InvalidAddressError,
    QueryError,
    TransactionError,
    UnsupportedNetworkError,
    ValidationError,
    WalletError,
    WalletNotInitializedError,
)
from src.core.logging import configure_logging

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Logging
    "configure_logging",
    # Exceptions
    "GatewayError",
    "ValidationError",
    "FactoryError",
    "UnsupportedNetworkError",
    "ConstructionError",
    "ChainError",
    "InvalidAddressError",
    "WalletNotInitializedError",
    "AdapterNotReadyError",
    "InitializationError",
    "QueryError",
    "AdapterTimeoutError",
    "TransactionError",
    "WalletError",
]
