"""Solana chain adapter.

Provides Solana-specific operations using the solana-py library.
"""

import asyncio
import json
import logging
import time
from decimal import Decimal

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed, Finalized
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction
from solders.transaction_status import TransactionConfirmationStatus

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
from src.blockchain.hd import mnemonic_to_seed, new_mnemonic, select_path
from src.blockchain.networks import SigningConfig
from src.core.exceptions import GatewayError, QueryError, TransactionError, WalletError

logger = logging.getLogger(__name__)

SOLANA_PATH_TEMPLATE = "m/44'/501'/{index}'/0'"

# SOL has 9 decimals (1 SOL = 1,000,000,000 lamports)
SOL_DECIMALS = 9

MEMO_PROGRAM_ID = Pubkey.from_string("MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr")

# Signatures fetched to report recent activity
RECENT_SIGNATURE_LIMIT = 100


class SolanaAdapter(ChainAdapter):
    """Solana adapter.

    Native SOL transfers with optional memo, signature status lookups and
    slot-based block queries.
    """

    DEFAULT_FEE_ESTIMATE = Decimal("0.000005")

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._client: AsyncClient | None = None
        self._keypair: Keypair | None = None

    @property
    def has_signer(self) -> bool:
        return self._keypair is not None

    # ============ Lifecycle ============

    async def _connect(self) -> None:
        self._client = AsyncClient(
            self._descriptor.rpc_endpoint,
            commitment=Confirmed,
            timeout=self._request_timeout,
        )
        version = await self._client.get_version()
        logger.info(f"Connected to Solana cluster version: {version.value.solana_core}")

    def _load_signer(self, signing: SigningConfig) -> None:
        if signing.private_key:
            secret = signing.private_key.strip()
            if secret.startswith("["):
                self._keypair = Keypair.from_bytes(bytes(json.loads(secret)))
            else:
                self._keypair = Keypair.from_base58_string(secret)
        else:
            path = select_path(SOLANA_PATH_TEMPLATE, signing.wallet_index, signing.derivation_path)
            self._keypair = Keypair.from_seed_and_derivation_path(
                mnemonic_to_seed(signing.mnemonic), path
            )
            logger.info(f"Derivation path used: {path}")
        logger.info(f"Solana wallet initialized: {self._keypair.pubkey()}")

    async def close(self) -> None:
        """Close the client connection."""
        if self._client is None:
            return
        try:
            await self._client.close()
        except Exception as e:
            logger.warning(f"Error closing Solana client: {e}")

    # ============ Wallet Operations ============

    def validate_address(self, address: str) -> bool:
        """Validate Solana wallet address (base58 ed25519 point)."""
        if not address or not isinstance(address, str):
            return False
        # Solana addresses are base58 encoded, 32-44 characters
        if len(address) < 32 or len(address) > 44:
            return False
        try:
            return Pubkey.from_string(address).is_on_curve()
        except Exception:
            return False

    async def create_wallet(
        self, options: CreateWalletOptions | None = None
    ) -> WalletCreationResult:
        """Create a Solana wallet, derived from a mnemonic when one is given.

        The private key is the base58 encoding of the 64-byte keypair.
        """
        options = options or CreateWalletOptions()
        mnemonic = options.mnemonic
        path = None

        try:
            if not mnemonic and (options.index is not None or options.derivation_path):
                mnemonic = new_mnemonic()
            if mnemonic:
                path = select_path(SOLANA_PATH_TEMPLATE, options.index, options.derivation_path)
                keypair = Keypair.from_seed_and_derivation_path(mnemonic_to_seed(mnemonic), path)
            else:
                keypair = Keypair()
        except Exception as e:
            raise self._error(WalletError, "create_wallet", e) from e

        address = str(keypair.pubkey())
        logger.info(f"Created new Solana wallet: {address}")
        return WalletCreationResult(
            address=address,
            private_key=str(keypair),
            public_key=address,
            network=self.network_id.value,
            mnemonic=mnemonic,
            derivation_path=path,
            index=options.index,
        )

    # ============ Balance Operations ============

    async def get_balance(self, address: str) -> Decimal:
        """Get SOL balance."""
        self._require_ready("get_balance")
        self._ensure_valid_address(address, "get_balance")
        try:
            response = await self._client.get_balance(Pubkey.from_string(address))
        except Exception as e:
            raise self._error(QueryError, "get_balance", e) from e
        return self.from_smallest_unit(response.value or 0, SOL_DECIMALS)

    async def get_wallet_info(self, address: str) -> WalletInfo:
        """Get SOL balance and the count of recent signatures."""
        self._require_ready("get_wallet_info")
        self._ensure_valid_address(address, "get_wallet_info")
        try:
            pubkey = Pubkey.from_string(address)
            balance, signatures = await asyncio.gather(
                self._client.get_balance(pubkey),
                self._client.get_signatures_for_address(pubkey, limit=RECENT_SIGNATURE_LIMIT),
            )
        except Exception as e:
            raise self._error(QueryError, "get_wallet_info", e) from e

        return WalletInfo(
            address=address,
            balance=self.from_smallest_unit(balance.value or 0, SOL_DECIMALS),
            native_token=self.native_token,
            transaction_count=len(signatures.value or []),
        )

    # ============ Transaction Operations ============

    def _transfer_instructions(
        self, from_pubkey: Pubkey, request: TransactionRequest
    ) -> list[Instruction]:
        instructions = [
            transfer(
                TransferParams(
                    from_pubkey=from_pubkey,
                    to_pubkey=Pubkey.from_string(request.to),
                    lamports=self.to_smallest_unit(request.amount, SOL_DECIMALS),
                )
            )
        ]
        if request.memo:
            instructions.append(Instruction(MEMO_PROGRAM_ID, request.memo.encode(), []))
        return instructions

    async def send_transaction(self, request: TransactionRequest) -> TransactionReceipt:
        """Send SOL from the loaded keypair."""
        self._require_ready("send_transaction")
        self._require_signer("send_transaction")
        self._ensure_valid_address(request.to, "send_transaction", "recipient address")
        if request.from_address:
            self._ensure_valid_address(request.from_address, "send_transaction", "sender address")

        try:
            from_pubkey = self._keypair.pubkey()
            instructions = self._transfer_instructions(from_pubkey, request)

            recent_blockhash = await self._client.get_latest_blockhash()
            tx = Transaction.new_signed_with_payer(
                instructions=instructions,
                payer=from_pubkey,
                signing_keypairs=[self._keypair],
                recent_blockhash=recent_blockhash.value.blockhash,
            )
            response = await self._client.send_transaction(tx)
        except GatewayError:
            raise
        except Exception as e:
            raise self._error(TransactionError, "send_transaction", e) from e

        tx_hash = str(response.value)
        logger.info(f"SOL transfer submitted: {tx_hash} to={request.to} amount={request.amount}")
        return TransactionReceipt(
            tx_hash=tx_hash,
            status=TransactionStatus.PENDING,
            timestamp=int(time.time()),
        )

    # ============ Transaction Query ============

    async def get_transaction_status(self, tx_hash: str) -> TransactionReceipt:
        """Get signature status. Unknown signatures report FAILED."""
        self._require_ready("get_transaction_status")
        now = int(time.time())
        try:
            signature = Signature.from_string(tx_hash)
            response = await self._client.get_signature_statuses(
                [signature], search_transaction_history=True
            )
        except Exception as e:
            raise self._error(QueryError, "get_transaction_status", e) from e

        status = response.value[0] if response.value else None
        if status is None:
            return TransactionReceipt(tx_hash=tx_hash, status=TransactionStatus.FAILED, timestamp=now)

        if status.err is not None:
            state = TransactionStatus.FAILED
        elif status.confirmation_status in (
            TransactionConfirmationStatus.Confirmed,
            TransactionConfirmationStatus.Finalized,
        ):
            state = TransactionStatus.CONFIRMED
        else:
            state = TransactionStatus.PENDING

        return TransactionReceipt(
            tx_hash=tx_hash,
            status=state,
            block_number=status.slot,
            timestamp=now,
        )

    async def get_latest_block(self) -> BlockInfo:
        """Get the latest finalized slot's block."""
        self._require_ready("get_latest_block")
        try:
            slot = (await self._client.get_slot(Finalized)).value
            block = (
                await self._client.get_block(slot, max_supported_transaction_version=0)
            ).value
        except Exception as e:
            raise self._error(QueryError, "get_latest_block", e) from e

        if block is None:
            return BlockInfo(number=slot, hash="")
        return BlockInfo(
            number=slot,
            hash=str(block.blockhash),
            timestamp=block.block_time,
            transaction_count=len(block.transactions or []),
            parent_hash=str(block.previous_blockhash),
        )

    async def estimate_gas(self, request: TransactionRequest) -> Decimal:
        """Estimate the transfer fee in SOL from the compiled message."""
        self._require_ready("estimate_gas")
        self._ensure_valid_address(request.to, "estimate_gas", "recipient address")
        self.to_smallest_unit(request.amount, SOL_DECIMALS)

        if self._keypair is not None:
            payer = self._keypair.pubkey()
        elif request.from_address and self.validate_address(request.from_address):
            payer = Pubkey.from_string(request.from_address)
        else:
            payer = SYSTEM_PROGRAM_ID

        try:
            recent_blockhash = await self._client.get_latest_blockhash()
            blockhash: Hash = recent_blockhash.value.blockhash
            message = Message.new_with_blockhash(
                self._transfer_instructions(payer, request), payer, blockhash
            )
            fee = await self._client.get_fee_for_message(message)
            if fee.value is None:
                return self.DEFAULT_FEE_ESTIMATE
            return self.from_smallest_unit(fee.value, SOL_DECIMALS)
        except Exception as e:
            logger.warning(
                f"Solana fee estimation failed, using default {self.DEFAULT_FEE_ESTIMATE}: {e}"
            )
            return self.DEFAULT_FEE_ESTIMATE
