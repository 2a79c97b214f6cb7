"""Shared fixtures: an in-memory chain adapter and a small registry."""

import asyncio
from decimal import Decimal

import pytest

from src.blockchain.base import (
    BlockInfo,
    ChainAdapter,
    CreateWalletOptions,
    TransactionReceipt,
    TransactionRequest,
    TransactionStatus,
    WalletCreationResult,
    WalletInfo,
)
from src.blockchain.factory import AdapterFactory
from src.blockchain.networks import NetworkDescriptor, NetworkId, SigningConfig
from src.core.exceptions import QueryError


class FakeAdapter(ChainAdapter):
    """Adapter backed by class-level knobs so tests can script behaviour.

    ``behaviour`` maps a network id to a dict of overrides:
        connect_error: exception raised from _connect
        connect_delay: seconds to sleep inside _connect
        balance: Decimal returned by balance queries
        query_error: exception raised from balance queries
        query_delay: seconds to sleep inside balance queries
        prefix: addresses must start with this to be valid
        validate_error: exception raised from validate_address
    """

    behaviour: dict[NetworkId, dict] = {}
    connect_calls: dict[NetworkId, int] = {}
    constructed: list[NetworkId] = []
    closed: list[NetworkId] = []

    DEFAULT_FEE_ESTIMATE = Decimal("0.01")

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        FakeAdapter.constructed.append(self.network_id)
        self._signer = False

    @classmethod
    def reset(cls) -> None:
        cls.behaviour = {}
        cls.connect_calls = {}
        cls.constructed = []
        cls.closed = []

    @property
    def _knobs(self) -> dict:
        return FakeAdapter.behaviour.get(self.network_id, {})

    @property
    def has_signer(self) -> bool:
        return self._signer

    async def _connect(self) -> None:
        FakeAdapter.connect_calls[self.network_id] = FakeAdapter.connect_calls.get(self.network_id, 0) + 1
        if self._knobs.get("connect_delay"):
            await asyncio.sleep(self._knobs["connect_delay"])
        if self._knobs.get("connect_error"):
            raise self._knobs["connect_error"]

    def _load_signer(self, signing: SigningConfig) -> None:
        self._signer = True

    async def close(self) -> None:
        FakeAdapter.closed.append(self.network_id)

    def validate_address(self, address: str) -> bool:
        if self._knobs.get("validate_error"):
            raise self._knobs["validate_error"]
        return bool(address) and address.startswith(self._knobs.get("prefix", "0x"))

    async def create_wallet(self, options: CreateWalletOptions | None = None) -> WalletCreationResult:
        prefix = self._knobs.get("prefix", "0x")
        return WalletCreationResult(
            address=f"{prefix}new",
            private_key="secret",
            public_key="public",
            network=self.network_id.value,
            mnemonic=options.mnemonic if options else None,
        )

    async def get_balance(self, address: str) -> Decimal:
        self._require_ready("get_balance")
        self._ensure_valid_address(address, "get_balance")
        if self._knobs.get("query_delay"):
            await asyncio.sleep(self._knobs["query_delay"])
        if self._knobs.get("query_error"):
            raise self._knobs["query_error"]
        return self._knobs.get("balance", Decimal("1"))

    async def get_wallet_info(self, address: str) -> WalletInfo:
        balance = await self.get_balance(address)
        return WalletInfo(address=address, balance=balance, native_token=self.native_token)

    async def send_transaction(self, request: TransactionRequest) -> TransactionReceipt:
        self._require_ready("send_transaction")
        self._require_signer("send_transaction")
        self._ensure_valid_address(request.to, "send_transaction", "recipient address")
        self.to_smallest_unit(request.amount, 18)
        return TransactionReceipt(tx_hash="0xabc", status=TransactionStatus.PENDING, timestamp=1)

    async def get_transaction_status(self, tx_hash: str) -> TransactionReceipt:
        self._require_ready("get_transaction_status")
        return TransactionReceipt(tx_hash=tx_hash, status=TransactionStatus.FAILED, timestamp=1)

    async def get_latest_block(self) -> BlockInfo:
        self._require_ready("get_latest_block")
        if self._knobs.get("query_error"):
            raise self._knobs["query_error"]
        return BlockInfo(number=100, hash="0xblock", timestamp=1)

    async def estimate_gas(self, request: TransactionRequest) -> Decimal:
        self._require_ready("estimate_gas")
        return self.DEFAULT_FEE_ESTIMATE


def make_registry() -> dict[NetworkId, NetworkDescriptor]:
    """Four networks; Avalanche disabled."""
    return {
        NetworkId.ARBITRUM: NetworkDescriptor(
            id=NetworkId.ARBITRUM,
            display_name="Arbitrum One",
            rpc_endpoint="http://arbitrum.invalid",
            native_token="ETH",
            chain_id=42161,
        ),
        NetworkId.POLYGON: NetworkDescriptor(
            id=NetworkId.POLYGON,
            display_name="Polygon Mainnet",
            rpc_endpoint="http://polygon.invalid",
            native_token="POL",
            chain_id=137,
        ),
        NetworkId.AVALANCHE: NetworkDescriptor(
            id=NetworkId.AVALANCHE,
            display_name="Avalanche C-Chain",
            rpc_endpoint="http://avalanche.invalid",
            native_token="AVAX",
            chain_id=43114,
            enabled=False,
        ),
        NetworkId.TRC20: NetworkDescriptor(
            id=NetworkId.TRC20,
            display_name="Tron Mainnet",
            rpc_endpoint="http://tron.invalid",
            native_token="TRX",
        ),
    }


@pytest.fixture(autouse=True)
def reset_fake_adapter():
    FakeAdapter.reset()
    FakeAdapter.behaviour[NetworkId.TRC20] = {"prefix": "T"}
    yield
    FakeAdapter.reset()


@pytest.fixture
def registry():
    return make_registry()


@pytest.fixture
def fake_table():
    return {network_id: FakeAdapter for network_id in NetworkId}


@pytest.fixture
def factory(registry, fake_table):
    return AdapterFactory(
        registry=registry,
        signing_configs={NetworkId.ARBITRUM: SigningConfig(private_key="0x01")},
        adapter_table=fake_table,
        init_timeout=1.0,
    )


@pytest.fixture
def query_error():
    return QueryError("rpc down", network="polygon", operation="get_balance")
