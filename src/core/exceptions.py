"""Multi-Chain Gateway - Custom exceptions."""

from typing import Any


class GatewayError(Exception):
    """Base exception for all gateway errors."""

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(GatewayError):
    """Request input failed validation before reaching any adapter."""

    status_code = 400


# ============ Factory errors ============


class FactoryError(GatewayError):
    """Adapter could not be obtained from the factory."""

    status_code = 503

    def __init__(
        self,
        message: str,
        network: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.network = network
        super().__init__(message, details)


class UnsupportedNetworkError(FactoryError):
    """Network id is not in the registry or has no adapter registered."""

    status_code = 400


class ConstructionError(FactoryError):
    """Adapter construction or initialization failed; nothing was cached."""

    pass


# ============ Chain errors ============


class ChainError(GatewayError):
    """Blockchain interaction error, tagged with network and operation."""

    status_code = 502

    def __init__(
        self,
        message: str,
        network: str | None = None,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.network = network
        self.operation = operation
        super().__init__(message, details)


class InvalidAddressError(ChainError):
    """Address failed the chain's own format validation."""

    status_code = 400


class WalletNotInitializedError(ChainError):
    """Operation needs a signing key that was never configured."""

    status_code = 503


class AdapterNotReadyError(ChainError):
    """Adapter was never initialized (network disabled in configuration)."""

    status_code = 503


class InitializationError(ChainError):
    """Handshake with the node or signing key load failed."""

    status_code = 503


class QueryError(ChainError):
    """Transient RPC failure. Safe to retry at the caller's discretion."""

    pass


class AdapterTimeoutError(QueryError):
    """Adapter call exceeded its deadline and was cancelled."""

    status_code = 504


class TransactionError(ChainError):
    """Transaction rejected by the network."""

    pass


class WalletError(ChainError):
    """Wallet generation or key derivation error."""

    status_code = 500
