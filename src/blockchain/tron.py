"""TRON chain adapter.

Provides TRON-specific operations using the tronpy library.
"""

import logging
import time
from decimal import Decimal

from tronpy import AsyncTron
from tronpy.exceptions import AddressNotFound, TransactionNotFound
from tronpy.keys import PrivateKey, is_base58check_address
from tronpy.providers.async_http import AsyncHTTPProvider

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
from src.blockchain.hd import derive_secp256k1_key, new_mnemonic, select_path
from src.blockchain.networks import SigningConfig
from src.core.exceptions import GatewayError, QueryError, TransactionError, WalletError

logger = logging.getLogger(__name__)

TRON_PATH_TEMPLATE = "m/44'/195'/{index}'/0/0"

# 1 TRX = 1,000,000 SUN
TRX_DECIMALS = 6

# Approximate serialized size of a signed TRX transfer
TRANSFER_TX_BYTES = 268


class TronAdapter(ChainAdapter):
    """TRON adapter.

    Native TRX transfers, account resources (energy, bandwidth, frozen TRX)
    and block queries through a TronGrid-compatible full node.
    """

    DEFAULT_FEE_ESTIMATE = Decimal("0.268")

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._client: AsyncTron | None = None
        self._private_key: PrivateKey | None = None
        self._address: str | None = None

    @property
    def has_signer(self) -> bool:
        return self._private_key is not None

    # ============ Lifecycle ============

    async def _connect(self) -> None:
        provider = AsyncHTTPProvider(
            self._descriptor.rpc_endpoint,
            timeout=self._request_timeout,
            api_key=self._descriptor.api_key,
        )
        self._client = AsyncTron(provider=provider)
        node_info = await self._client.get_node_info()
        version = node_info.get("configNodeInfo", {}).get("codeVersion", "unknown")
        logger.info(f"Connected to Tron network: {version}")

    def _load_signer(self, signing: SigningConfig) -> None:
        if signing.private_key:
            logger.info("Initializing Tron wallet from private key...")
            raw = bytes.fromhex(signing.private_key.removeprefix("0x"))
        else:
            logger.info("Initializing Tron wallet from seed phrase...")
            path = select_path(TRON_PATH_TEMPLATE, signing.wallet_index, signing.derivation_path)
            raw = derive_secp256k1_key(signing.mnemonic, path)
            logger.info(f"Derivation path used: {path}")

        self._private_key = PrivateKey(raw)
        self._address = self._private_key.public_key.to_base58check_address()
        logger.info(f"Tron wallet initialized: {self._address}")

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is None:
            return
        try:
            await self._client.close()
        except Exception as e:
            logger.warning(f"Error closing Tron client: {e}")

    # ============ Wallet Operations ============

    def validate_address(self, address: str) -> bool:
        """Validate TRON base58check address."""
        if not address or not isinstance(address, str):
            return False
        # TRON addresses start with 'T' and are 34 characters
        if not address.startswith("T") or len(address) != 34:
            return False
        try:
            return is_base58check_address(address)
        except Exception:
            return False

    async def create_wallet(
        self, options: CreateWalletOptions | None = None
    ) -> WalletCreationResult:
        """Create a TRON wallet, derived from a mnemonic when one is given."""
        options = options or CreateWalletOptions()
        mnemonic = options.mnemonic
        path = None

        try:
            if not mnemonic and (options.index is not None or options.derivation_path):
                mnemonic = new_mnemonic()
            if mnemonic:
                path = select_path(TRON_PATH_TEMPLATE, options.index, options.derivation_path)
                priv_key = PrivateKey(derive_secp256k1_key(mnemonic, path))
            else:
                priv_key = PrivateKey.random()
            address = priv_key.public_key.to_base58check_address()
        except Exception as e:
            raise self._error(WalletError, "create_wallet", e) from e

        logger.info(f"Created new Tron wallet: {address}")
        return WalletCreationResult(
            address=address,
            private_key=priv_key.hex(),
            public_key=priv_key.public_key.hex(),
            network=self.network_id.value,
            mnemonic=mnemonic,
            derivation_path=path,
            index=options.index,
        )

    # ============ Balance Operations ============

    async def get_balance(self, address: str) -> Decimal:
        """Get TRX balance. Unactivated accounts hold zero."""
        self._require_ready("get_balance")
        self._ensure_valid_address(address, "get_balance")
        try:
            return Decimal(await self._client.get_account_balance(address))
        except AddressNotFound:
            return Decimal("0")
        except Exception as e:
            raise self._error(QueryError, "get_balance", e) from e

    async def get_wallet_info(self, address: str) -> WalletInfo:
        """Get TRX balance with energy, bandwidth and frozen TRX."""
        self._require_ready("get_wallet_info")
        self._ensure_valid_address(address, "get_wallet_info")
        try:
            try:
                account = await self._client.get_account(address)
            except AddressNotFound:
                account = {}
            resource = await self._client.get_account_resource(address) if account else {}
        except Exception as e:
            raise self._error(QueryError, "get_wallet_info", e) from e

        energy = resource.get("EnergyLimit", 0) - resource.get("EnergyUsed", 0)
        bandwidth = (resource.get("freeNetLimit", 0) - resource.get("freeNetUsed", 0)) + (
            resource.get("NetLimit", 0) - resource.get("NetUsed", 0)
        )
        frozen_sun = sum(item.get("amount", 0) for item in account.get("frozenV2", []))
        frozen_sun += sum(item.get("frozen_balance", 0) for item in account.get("frozen", []))

        return WalletInfo(
            address=address,
            balance=self.from_smallest_unit(account.get("balance", 0), TRX_DECIMALS),
            native_token=self.native_token,
            energy=max(energy, 0),
            bandwidth=max(bandwidth, 0),
            frozen_amount=self.from_smallest_unit(frozen_sun, TRX_DECIMALS),
        )

    # ============ Transaction Operations ============

    async def send_transaction(self, request: TransactionRequest) -> TransactionReceipt:
        """Send TRX from the loaded wallet."""
        self._require_ready("send_transaction")
        self._require_signer("send_transaction")
        self._ensure_valid_address(request.to, "send_transaction", "recipient address")
        if request.from_address:
            self._ensure_valid_address(request.from_address, "send_transaction", "sender address")

        try:
            amount_sun = self.to_smallest_unit(request.amount, TRX_DECIMALS)
            builder = self._client.trx.transfer(self._address, request.to, amount_sun)
            if request.memo:
                builder = builder.memo(request.memo)
            txn = await builder.build()
            result = await txn.sign(self._private_key).broadcast()
        except GatewayError:
            raise
        except Exception as e:
            raise self._error(TransactionError, "send_transaction", e) from e

        tx_hash = result.get("txid") or txn.txid
        accepted = bool(result.get("result"))
        if accepted:
            logger.info(f"TRX transfer submitted: {tx_hash} to={request.to} amount={request.amount}")
        else:
            logger.error(f"TRX transfer rejected: {result.get('message', 'Unknown error')}")

        return TransactionReceipt(
            tx_hash=tx_hash,
            status=TransactionStatus.PENDING if accepted else TransactionStatus.FAILED,
            timestamp=int(time.time()),
        )

    # ============ Transaction Query ============

    async def get_transaction_status(self, tx_hash: str) -> TransactionReceipt:
        """Get transaction status from its execution info."""
        self._require_ready("get_transaction_status")
        now = int(time.time())
        try:
            try:
                await self._client.get_transaction(tx_hash)
            except TransactionNotFound:
                return TransactionReceipt(tx_hash=tx_hash, status=TransactionStatus.FAILED, timestamp=now)

            try:
                info = await self._client.get_transaction_info(tx_hash)
            except TransactionNotFound:
                return TransactionReceipt(tx_hash=tx_hash, status=TransactionStatus.PENDING, timestamp=now)
        except Exception as e:
            raise self._error(QueryError, "get_transaction_status", e) from e

        receipt = info.get("receipt", {})
        failed = info.get("result") == "FAILED" or receipt.get("result") not in (None, "SUCCESS")
        block_ts = info.get("blockTimeStamp")
        return TransactionReceipt(
            tx_hash=tx_hash,
            status=TransactionStatus.FAILED if failed else TransactionStatus.CONFIRMED,
            block_number=info.get("blockNumber"),
            gas_used=receipt.get("energy_usage_total"),
            fee=self.from_smallest_unit(info.get("fee", 0), TRX_DECIMALS),
            timestamp=block_ts // 1000 if block_ts else now,
        )

    async def get_latest_block(self) -> BlockInfo:
        """Get the latest block, including parent hash and witness."""
        self._require_ready("get_latest_block")
        try:
            block = await self._client.get_latest_block()
        except Exception as e:
            raise self._error(QueryError, "get_latest_block", e) from e

        raw_data = block["block_header"]["raw_data"]
        timestamp_ms = raw_data.get("timestamp")
        return BlockInfo(
            number=raw_data.get("number", 0),
            hash=block.get("blockID", ""),
            timestamp=timestamp_ms // 1000 if timestamp_ms else None,
            transaction_count=len(block.get("transactions", [])),
            parent_hash=raw_data.get("parentHash"),
            witness_address=raw_data.get("witness_address"),
        )

    async def estimate_gas(self, request: TransactionRequest) -> Decimal:
        """Estimate the bandwidth fee of a TRX transfer in TRX."""
        self._require_ready("estimate_gas")
        self._ensure_valid_address(request.to, "estimate_gas", "recipient address")
        self.to_smallest_unit(request.amount, TRX_DECIMALS)
        try:
            parameters = await self._client.get_chain_parameters()
            fee_per_byte = next(
                (p.get("value") for p in parameters if p.get("key") == "getTransactionFee"),
                None,
            )
            if fee_per_byte is None:
                raise ValueError("getTransactionFee missing from chain parameters")
            size = TRANSFER_TX_BYTES + len((request.memo or "").encode())
            return self.from_smallest_unit(fee_per_byte * size, TRX_DECIMALS)
        except Exception as e:
            logger.warning(
                f"Tron fee estimation failed, using default {self.DEFAULT_FEE_ESTIMATE}: {e}"
            )
            return self.DEFAULT_FEE_ESTIMATE
