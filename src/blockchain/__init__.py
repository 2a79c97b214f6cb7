"""Blockchain module.

Provides the chain adapter abstraction, the adapter factory and the
cross-network balance aggregator.
"""

from src.blockchain.aggregator import (
    AggregateBalanceReport,
    BalanceAggregator,
    BalanceQueryResult,
    BalanceStatus,
)
from src.blockchain.base import (
    BlockInfo,
    ChainAdapter,
    CreateWalletOptions,
    TransactionReceipt,
    TransactionRequest,
    TransactionStatus,
    WalletCreationResult,
    WalletInfo,
    call_with_timeout,
)
from src.blockchain.factory import ADAPTER_TABLE, AdapterFactory, create_adapter_factory
from src.blockchain.networks import (
    NetworkDescriptor,
    NetworkId,
    SigningConfig,
    build_network_registry,
    build_signing_configs,
)

__all__ = [
    "ADAPTER_TABLE",
    "AdapterFactory",
    "AggregateBalanceReport",
    "BalanceAggregator",
    "BalanceQueryResult",
    "BalanceStatus",
    "BlockInfo",
    "ChainAdapter",
    "CreateWalletOptions",
    "NetworkDescriptor",
    "NetworkId",
    "SigningConfig",
    "TransactionReceipt",
    "TransactionRequest",
    "TransactionStatus",
    "WalletCreationResult",
    "WalletInfo",
    "build_network_registry",
    "build_signing_configs",
    "call_with_timeout",
    "create_adapter_factory",
]
