"""Base chain adapter interface.

Defines the abstract interface that every network adapter must follow, so
the rest of the service never branches on chain identity.
"""

import asyncio
import dataclasses
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable
from dataclasses import dataclass
from decimal import Decimal, localcontext
from enum import Enum
from typing import Any, TypeVar

from src.blockchain.networks import NetworkDescriptor, NetworkId, SigningConfig
from src.core.exceptions import (
    AdapterNotReadyError,
    AdapterTimeoutError,
    ChainError,
    InitializationError,
    InvalidAddressError,
    ValidationError,
    WalletNotInitializedError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TransactionStatus(str, Enum):
    """Transaction status."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class TransactionRequest:
    """Native currency transfer request."""

    to: str
    amount: Decimal
    from_address: str | None = None
    memo: str | None = None
    gas_limit: int | None = None
    gas_price: Decimal | None = None  # chain-specific unit (gwei on EVM)


@dataclass
class TransactionReceipt:
    """Transaction status as reported by the chain."""

    tx_hash: str
    status: TransactionStatus
    block_number: int | None = None
    gas_used: int | None = None
    fee: Decimal | None = None
    timestamp: int | None = None


@dataclass
class WalletInfo:
    """Balance plus chain-specific account metadata."""

    address: str
    balance: Decimal
    native_token: str
    transaction_count: int | None = None
    energy: int | None = None  # TRON
    bandwidth: int | None = None  # TRON
    frozen_amount: Decimal | None = None  # TRON


@dataclass
class BlockInfo:
    """Latest block summary. Fields a chain lacks stay None."""

    number: int
    hash: str
    timestamp: int | None = None
    transaction_count: int | None = None
    gas_used: int | None = None
    gas_limit: int | None = None
    base_fee_per_gas: int | None = None
    parent_hash: str | None = None
    witness_address: str | None = None


@dataclass
class CreateWalletOptions:
    """Wallet derivation options."""

    mnemonic: str | None = None
    index: int | None = None
    derivation_path: str | None = None


@dataclass
class WalletCreationResult:
    """Generated wallet. Contains secrets, never log it."""

    address: str
    private_key: str
    public_key: str
    network: str
    mnemonic: str | None = None
    derivation_path: str | None = None
    index: int | None = None


async def call_with_timeout(
    awaitable: Awaitable[T],
    *,
    timeout: float | None,
    network: str,
    operation: str,
) -> T:
    """Await an adapter call under a deadline.

    The pending call is cancelled when the deadline passes.

    Raises:
        AdapterTimeoutError: If the deadline expired
    """
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except asyncio.TimeoutError as e:
        raise AdapterTimeoutError(
            f"{network} {operation} timed out after {timeout}s",
            network=network,
            operation=operation,
        ) from e


class ChainAdapter(ABC):
    """Abstract base class for network adapters.

    Each adapter is bound to one NetworkDescriptor. Instances are built only
    by the AdapterFactory, initialized at most once, and live for the whole
    process. Until ``initialize()`` has run, every operation that needs the
    node fails fast with AdapterNotReadyError.
    """

    # Conservative fee used when estimation fails (native units)
    DEFAULT_FEE_ESTIMATE: Decimal = Decimal("0")

    def __init__(
        self,
        descriptor: NetworkDescriptor,
        signing: SigningConfig | None = None,
        request_timeout: float = 10.0,
    ) -> None:
        self._descriptor = descriptor
        self._signing = signing or SigningConfig()
        self._request_timeout = request_timeout
        self._initialized = False

    # ============ Identity ============

    @property
    def network_id(self) -> NetworkId:
        return self._descriptor.id

    @property
    def native_token(self) -> str:
        return self._descriptor.native_token

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    @abstractmethod
    def has_signer(self) -> bool:
        """Return True if a signing key is loaded."""
        pass

    def get_network_descriptor(self) -> NetworkDescriptor:
        """Return a copy of this adapter's descriptor."""
        return dataclasses.replace(self._descriptor)

    # ============ Lifecycle ============

    async def initialize(self) -> None:
        """Connect to the node and load the configured signing key.

        Must be called at most once per instance.

        Raises:
            InitializationError: If the handshake or key load failed
        """
        try:
            await self._connect()
            if self._signing.is_configured:
                self._load_signer(self._signing)
        except ChainError:
            raise
        except Exception as e:
            raise self._error(InitializationError, "initialize", e) from e

        self._initialized = True
        logger.info(f"{self._descriptor.display_name} adapter initialized")

    @abstractmethod
    async def _connect(self) -> None:
        """Create the RPC client and perform a handshake."""
        pass

    @abstractmethod
    def _load_signer(self, signing: SigningConfig) -> None:
        """Load a signing key from private key or mnemonic."""
        pass

    async def close(self) -> None:
        """Release transport resources."""
        pass

    # ============ Wallet Operations ============

    @abstractmethod
    def validate_address(self, address: str) -> bool:
        """Validate if an address is valid for this chain.

        Pure and side-effect free. Never raises.

        Args:
            address: The address to validate

        Returns:
            True if valid, False otherwise
        """
        pass

    @abstractmethod
    async def create_wallet(
        self, options: CreateWalletOptions | None = None
    ) -> WalletCreationResult:
        """Create a wallet, deterministically when a mnemonic is supplied.

        Args:
            options: Mnemonic, account index and derivation path

        Returns:
            WalletCreationResult with address and keys

        Raises:
            WalletError: If key derivation or generation failed
        """
        pass

    # ============ Balance Operations ============

    @abstractmethod
    async def get_balance(self, address: str) -> Decimal:
        """Get native balance in native units.

        Raises:
            InvalidAddressError: If the address fails validation
            QueryError: On RPC failure
        """
        pass

    @abstractmethod
    async def get_wallet_info(self, address: str) -> WalletInfo:
        """Get balance plus account metadata.

        Raises:
            InvalidAddressError: If the address fails validation
            QueryError: On RPC failure
        """
        pass

    # ============ Transaction Operations ============

    @abstractmethod
    async def send_transaction(self, request: TransactionRequest) -> TransactionReceipt:
        """Sign and submit a native transfer with the loaded key.

        Raises:
            WalletNotInitializedError: If no signing key is loaded
            InvalidAddressError: If recipient or sender is invalid
            TransactionError: If the network rejected the submission
        """
        pass

    @abstractmethod
    async def get_transaction_status(self, tx_hash: str) -> TransactionReceipt:
        """Get transaction status. Unknown identifiers report FAILED."""
        pass

    @abstractmethod
    async def get_latest_block(self) -> BlockInfo:
        """Get the latest block."""
        pass

    @abstractmethod
    async def estimate_gas(self, request: TransactionRequest) -> Decimal:
        """Estimate the transfer fee in native units.

        Falls back to DEFAULT_FEE_ESTIMATE when estimation fails.
        """
        pass

    # ============ Utility Methods ============

    def _require_ready(self, operation: str) -> None:
        if not self._initialized:
            raise AdapterNotReadyError(
                f"{self.network_id.value} adapter is not initialized "
                f"(network disabled or not yet connected)",
                network=self.network_id.value,
                operation=operation,
            )

    def _require_signer(self, operation: str) -> None:
        if not self.has_signer:
            raise WalletNotInitializedError(
                f"Wallet not initialized for {self.network_id.value}. "
                f"Configure a private key or mnemonic",
                network=self.network_id.value,
                operation=operation,
            )

    def _ensure_valid_address(self, address: str, operation: str, role: str = "address") -> None:
        if not self.validate_address(address):
            raise InvalidAddressError(
                f"Invalid {self._descriptor.display_name} {role}: {address}",
                network=self.network_id.value,
                operation=operation,
            )

    def _error(
        self,
        error_cls: type[ChainError],
        operation: str,
        exc: BaseException,
        **details: Any,
    ) -> ChainError:
        """Build a chain error carrying network and operation context."""
        logger.error(f"Error in {self.network_id.value} {operation}: {exc}")
        return error_cls(
            f"{self.network_id.value} {operation} failed: {exc}",
            network=self.network_id.value,
            operation=operation,
            details=details or None,
        )

    def to_smallest_unit(self, amount: Decimal, decimals: int) -> int:
        """Convert amount to smallest unit (e.g., wei, sun, lamports).

        Args:
            amount: Amount in standard unit
            decimals: Token decimals

        Returns:
            Amount in smallest unit as integer

        Raises:
            ValidationError: If the amount is not positive or has more
                decimal places than the unit allows
        """
        amount = Decimal(amount)
        with localcontext() as ctx:
            ctx.prec = 100
            scaled = amount.scaleb(decimals) if amount.is_finite() else amount
        if not scaled.is_finite() or scaled != scaled.to_integral_value():
            raise ValidationError(
                f"Amount {amount} exceeds {decimals} decimal places of {self.native_token}",
                details={"network": self.network_id.value, "amount": str(amount), "decimals": decimals},
            )
        value = int(scaled)
        if value <= 0:
            raise ValidationError(
                "Amount must be greater than 0",
                details={"network": self.network_id.value, "amount": str(amount)},
            )
        return value

    def from_smallest_unit(self, amount: int, decimals: int) -> Decimal:
        """Convert from smallest unit to standard unit.

        Args:
            amount: Amount in smallest unit
            decimals: Token decimals

        Returns:
            Amount in standard unit as Decimal
        """
        return Decimal(amount) / Decimal(10**decimals)
