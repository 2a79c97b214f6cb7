"""EVM chain adapter.

Provides operations for account-based EVM networks (Arbitrum, Polygon,
Avalanche C-Chain) using web3.py and eth-account.
"""

import asyncio
import logging
import time
from decimal import Decimal

from aiohttp import ClientTimeout
from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_keys import keys
from eth_utils import is_checksum_address, is_hex_address, remove_0x_prefix
from web3 import AsyncWeb3
from web3.exceptions import TransactionNotFound

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
from src.blockchain.hd import select_path
from src.blockchain.networks import SigningConfig
from src.core.exceptions import GatewayError, QueryError, TransactionError, WalletError

logger = logging.getLogger(__name__)

Account.enable_unaudited_hdwallet_features()

# BIP-44 path for coin type 60, account index in the hardened account level
EVM_PATH_TEMPLATE = "m/44'/60'/{index}'/0/0"

NATIVE_DECIMALS = 18


class EvmAdapter(ChainAdapter):
    """Adapter for EVM-compatible networks.

    One class serves every EVM network; the descriptor supplies endpoint,
    expected chain id and native token symbol.
    """

    DEFAULT_FEE_ESTIMATE = Decimal("0.001")

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._w3: AsyncWeb3 | None = None
        self._account: LocalAccount | None = None

    @property
    def has_signer(self) -> bool:
        return self._account is not None

    # ============ Lifecycle ============

    async def _connect(self) -> None:
        self._w3 = AsyncWeb3(
            AsyncWeb3.AsyncHTTPProvider(
                self._descriptor.rpc_endpoint,
                request_kwargs={"timeout": ClientTimeout(total=self._request_timeout)},
            )
        )
        chain_id = await self._w3.eth.chain_id
        expected = self._descriptor.chain_id
        if expected is not None and chain_id != expected:
            logger.warning(
                f"{self._descriptor.display_name}: connected to unexpected chain id "
                f"{chain_id} (expected {expected})"
            )
        logger.info(f"Connected to {self._descriptor.display_name} (chain id {chain_id})")

    def _load_signer(self, signing: SigningConfig) -> None:
        if signing.private_key:
            key = signing.private_key
            if not key.startswith("0x"):
                key = "0x" + key
            self._account = Account.from_key(key)
        else:
            path = select_path(EVM_PATH_TEMPLATE, signing.wallet_index, signing.derivation_path)
            self._account = Account.from_mnemonic(signing.mnemonic, account_path=path)
            logger.info(f"Derivation path used: {path}")
        logger.info(f"{self.network_id.value} wallet initialized: {self._account.address}")

    async def close(self) -> None:
        """Close the provider connection."""
        if self._w3 is None:
            return
        provider = self._w3.provider
        if hasattr(provider, "disconnect"):
            try:
                await provider.disconnect()
            except Exception as e:
                logger.warning(f"Error closing {self.network_id.value} provider: {e}")

    # ============ Wallet Operations ============

    def validate_address(self, address: str) -> bool:
        """Validate EVM address format.

        All-lowercase and all-uppercase hex are accepted as is; mixed case
        must carry a valid EIP-55 checksum.
        """
        if not address or not isinstance(address, str):
            return False
        try:
            if not is_hex_address(address):
                return False
            body = remove_0x_prefix(address)
            if body != body.lower() and body != body.upper():
                return is_checksum_address(address)
            return True
        except Exception:
            return False

    async def create_wallet(
        self, options: CreateWalletOptions | None = None
    ) -> WalletCreationResult:
        """Create an EVM wallet, derived from a mnemonic when one is given."""
        options = options or CreateWalletOptions()
        mnemonic = options.mnemonic
        path = None

        try:
            if mnemonic:
                path = select_path(EVM_PATH_TEMPLATE, options.index, options.derivation_path)
                account = Account.from_mnemonic(mnemonic, account_path=path)
            elif options.index is not None or options.derivation_path:
                path = select_path(EVM_PATH_TEMPLATE, options.index, options.derivation_path)
                account, mnemonic = Account.create_with_mnemonic(account_path=path)
            else:
                account = Account.create()
            public_key = keys.PrivateKey(bytes(account.key)).public_key.to_hex()
        except Exception as e:
            raise self._error(WalletError, "create_wallet", e) from e

        logger.info(f"Created new {self._descriptor.display_name} wallet: {account.address}")
        return WalletCreationResult(
            address=account.address,
            private_key=AsyncWeb3.to_hex(bytes(account.key)),
            public_key=public_key,
            network=self.network_id.value,
            mnemonic=mnemonic,
            derivation_path=path,
            index=options.index,
        )

    # ============ Balance Operations ============

    async def get_balance(self, address: str) -> Decimal:
        """Get native balance."""
        self._require_ready("get_balance")
        self._ensure_valid_address(address, "get_balance")
        try:
            balance_wei = await self._w3.eth.get_balance(AsyncWeb3.to_checksum_address(address))
        except Exception as e:
            raise self._error(QueryError, "get_balance", e) from e
        return self.from_smallest_unit(balance_wei, NATIVE_DECIMALS)

    async def get_wallet_info(self, address: str) -> WalletInfo:
        """Get native balance and nonce-based transaction count."""
        self._require_ready("get_wallet_info")
        self._ensure_valid_address(address, "get_wallet_info")
        try:
            checksum = AsyncWeb3.to_checksum_address(address)
            balance_wei, transaction_count = await asyncio.gather(
                self._w3.eth.get_balance(checksum),
                self._w3.eth.get_transaction_count(checksum),
            )
        except Exception as e:
            raise self._error(QueryError, "get_wallet_info", e) from e

        return WalletInfo(
            address=address,
            balance=self.from_smallest_unit(balance_wei, NATIVE_DECIMALS),
            native_token=self.native_token,
            transaction_count=transaction_count,
        )

    # ============ Transaction Operations ============

    async def send_transaction(self, request: TransactionRequest) -> TransactionReceipt:
        """Send native currency from the loaded wallet."""
        self._require_ready("send_transaction")
        self._require_signer("send_transaction")
        self._ensure_valid_address(request.to, "send_transaction", "recipient address")
        if request.from_address:
            self._ensure_valid_address(request.from_address, "send_transaction", "sender address")

        try:
            tx = await self._build_transfer(request, self._account.address)
            if request.gas_limit:
                tx["gas"] = request.gas_limit
            else:
                tx["gas"] = await self._w3.eth.estimate_gas(tx)
            tx["nonce"] = await self._w3.eth.get_transaction_count(self._account.address)
            tx["chainId"] = await self._w3.eth.chain_id

            signed_tx = self._account.sign_transaction(tx)
            tx_hash = await self._w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except GatewayError:
            raise
        except Exception as e:
            raise self._error(TransactionError, "send_transaction", e) from e

        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        logger.info(
            f"{self.network_id.value} transfer submitted: {tx_hash_hex} "
            f"to={request.to} amount={request.amount}"
        )
        return TransactionReceipt(
            tx_hash=tx_hash_hex,
            status=TransactionStatus.PENDING,
            timestamp=int(time.time()),
        )

    async def _build_transfer(self, request: TransactionRequest, sender: str | None) -> dict:
        tx = {
            "to": AsyncWeb3.to_checksum_address(request.to),
            "value": self.to_smallest_unit(request.amount, NATIVE_DECIMALS),
        }
        if sender:
            tx["from"] = sender
        if request.memo:
            tx["data"] = AsyncWeb3.to_hex(text=request.memo)
        if request.gas_price:
            tx["gasPrice"] = AsyncWeb3.to_wei(request.gas_price, "gwei")
        else:
            tx["gasPrice"] = await self._w3.eth.gas_price
        return tx

    # ============ Transaction Query ============

    async def get_transaction_status(self, tx_hash: str) -> TransactionReceipt:
        """Get transaction status from its receipt."""
        self._require_ready("get_transaction_status")
        now = int(time.time())
        try:
            try:
                tx = await self._w3.eth.get_transaction(tx_hash)
            except TransactionNotFound:
                return TransactionReceipt(tx_hash=tx_hash, status=TransactionStatus.FAILED, timestamp=now)

            try:
                receipt = await self._w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                return TransactionReceipt(tx_hash=tx_hash, status=TransactionStatus.PENDING, timestamp=now)
        except Exception as e:
            raise self._error(QueryError, "get_transaction_status", e) from e

        status = TransactionStatus.CONFIRMED if receipt["status"] == 1 else TransactionStatus.FAILED
        gas_used = receipt["gasUsed"]
        gas_price = receipt.get("effectiveGasPrice") or tx.get("gasPrice") or 0
        return TransactionReceipt(
            tx_hash=tx_hash,
            status=status,
            block_number=receipt["blockNumber"],
            gas_used=gas_used,
            fee=self.from_smallest_unit(gas_used * gas_price, NATIVE_DECIMALS),
            timestamp=now,
        )

    async def get_latest_block(self) -> BlockInfo:
        """Get the latest block."""
        self._require_ready("get_latest_block")
        try:
            block = await self._w3.eth.get_block("latest")
        except Exception as e:
            raise self._error(QueryError, "get_latest_block", e) from e

        block_hash = block.get("hash")
        parent_hash = block.get("parentHash")
        return BlockInfo(
            number=block["number"],
            hash=AsyncWeb3.to_hex(block_hash) if block_hash else "",
            timestamp=block.get("timestamp"),
            transaction_count=len(block.get("transactions", [])),
            gas_used=block.get("gasUsed"),
            gas_limit=block.get("gasLimit"),
            base_fee_per_gas=block.get("baseFeePerGas"),
            parent_hash=AsyncWeb3.to_hex(parent_hash) if parent_hash else None,
        )

    async def estimate_gas(self, request: TransactionRequest) -> Decimal:
        """Estimate transfer fee (gas * gas price) in native units."""
        self._require_ready("estimate_gas")
        self._ensure_valid_address(request.to, "estimate_gas", "recipient address")
        self.to_smallest_unit(request.amount, NATIVE_DECIMALS)

        if request.from_address and self.validate_address(request.from_address):
            sender = AsyncWeb3.to_checksum_address(request.from_address)
        elif self._account is not None:
            sender = self._account.address
        else:
            sender = None

        try:
            tx = await self._build_transfer(request, sender)
            gas = await self._w3.eth.estimate_gas(tx)
            return self.from_smallest_unit(gas * tx["gasPrice"], NATIVE_DECIMALS)
        except Exception as e:
            logger.warning(
                f"{self.network_id.value} fee estimation failed, "
                f"using default {self.DEFAULT_FEE_ESTIMATE}: {e}"
            )
            return self.DEFAULT_FEE_ESTIMATE
