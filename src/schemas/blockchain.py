"""Multi-Chain Gateway - Blockchain request and response schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from src.blockchain.aggregator import BalanceStatus
from src.blockchain.base import CreateWalletOptions, TransactionRequest, TransactionStatus


# ============================================================================
# Request Schemas
# ============================================================================

class TransactionRequestBody(BaseModel):
    """Native transfer request body."""

    model_config = ConfigDict(populate_by_name=True)

    from_address: str | None = Field(
        None, alias="from", description="Sender address (optional, must be valid if given)"
    )
    to: str = Field(..., min_length=1, max_length=128, description="Recipient address")
    amount: Decimal = Field(..., gt=0, description="Amount in native units")
    memo: str | None = Field(None, max_length=512, description="Optional memo")
    gas_limit: int | None = Field(None, gt=0, description="Gas limit override")
    gas_price: Decimal | None = Field(None, gt=0, description="Gas price override")

    def to_request(self) -> TransactionRequest:
        return TransactionRequest(
            to=self.to,
            amount=self.amount,
            from_address=self.from_address,
            memo=self.memo,
            gas_limit=self.gas_limit,
            gas_price=self.gas_price,
        )


class CreateWalletBody(BaseModel):
    """Wallet creation options. Empty body creates a random wallet."""

    mnemonic: str | None = Field(None, description="BIP-39 mnemonic for deterministic derivation")
    index: int | None = Field(None, ge=0, description="Account index on the chain's HD path")
    derivation_path: str | None = Field(None, max_length=64, description="Explicit HD path")

    def to_options(self) -> CreateWalletOptions:
        return CreateWalletOptions(
            mnemonic=self.mnemonic,
            index=self.index,
            derivation_path=self.derivation_path,
        )


# ============================================================================
# Network Schemas
# ============================================================================

class NetworkStatusResponse(BaseModel):
    """Availability of one supported network."""

    type: str
    name: str
    chain_id: int | None = None
    testnet: bool = False
    native_token: str | None = None
    status: str = Field(..., description="available, disabled or unavailable")
    error: str | None = None


class SupportedNetworksResponse(BaseModel):
    """All supported networks with live availability."""

    supported_networks: list[NetworkStatusResponse]
    count: int
    available_count: int
    timestamp: datetime


class NetworkHealthResponse(BaseModel):
    """Result of a latest-block health check against one network."""

    network: str
    network_name: str | None = None
    status: str
    latest_block: int | None = None
    response_time_ms: int | None = None
    error: str | None = None
    timestamp: datetime


# ============================================================================
# Balance Schemas
# ============================================================================

class BalanceResponse(BaseModel):
    """Single-network balance."""

    network: str
    address: str
    balance: Decimal
    native_token: str
    timestamp: datetime


class BalanceEntryResponse(BaseModel):
    """One network's entry in a multi-network balance query."""

    model_config = ConfigDict(from_attributes=True)

    network: str
    network_name: str
    status: BalanceStatus
    address: str | None = None
    balance: Decimal | None = None
    native_token: str | None = None
    error: str | None = None


class BalanceSummaryResponse(BaseModel):
    successful_queries: int
    failed_queries: int
    total_networks_checked: int


class MultiNetworkBalanceResponse(BaseModel):
    """Balance of one address across every live network."""

    address: str
    networks: list[BalanceEntryResponse]
    total_networks: int
    total_balance: Decimal = Field(
        ...,
        description=(
            "Raw sum of native balances across networks. Different native tokens "
            "are added without conversion, so this is not a value in any one currency."
        ),
    )
    failed_networks: list[BalanceEntryResponse]
    summary: BalanceSummaryResponse
    timestamp: datetime


# ============================================================================
# Wallet Schemas
# ============================================================================

class WalletInfoModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: str
    balance: Decimal
    native_token: str
    transaction_count: int | None = None
    energy: int | None = None
    bandwidth: int | None = None
    frozen_amount: Decimal | None = None


class NetworkConfigModel(BaseModel):
    name: str
    chain_id: int | None = None


class WalletInfoResponse(BaseModel):
    network: str
    wallet: WalletInfoModel
    network_config: NetworkConfigModel
    timestamp: datetime


class WalletCreationModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: str
    private_key: str
    public_key: str
    network: str
    mnemonic: str | None = None
    derivation_path: str | None = None
    index: int | None = None


class WalletCreationResponse(BaseModel):
    network: str
    wallet: WalletCreationModel
    timestamp: datetime


class AddressValidationResponse(BaseModel):
    network: str
    address: str
    is_valid: bool
    network_name: str
    timestamp: datetime


# ============================================================================
# Transaction and Block Schemas
# ============================================================================

class TransactionReceiptModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    tx_hash: str
    status: TransactionStatus
    block_number: int | None = None
    gas_used: int | None = None
    fee: Decimal | None = None
    timestamp: int | None = None


class TransactionSummaryModel(BaseModel):
    to: str
    amount: Decimal
    memo: str | None = None


class SendTransactionResponse(BaseModel):
    network: str
    transaction: TransactionReceiptModel
    request: TransactionSummaryModel
    timestamp: datetime


class TransactionStatusResponse(BaseModel):
    network: str
    transaction_hash: str
    status: TransactionStatus
    details: TransactionReceiptModel
    timestamp: datetime


class GasEstimateResponse(BaseModel):
    network: str
    estimated_fee: Decimal
    fee_token: str
    transaction_details: TransactionSummaryModel
    timestamp: datetime


class BlockModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    number: int
    hash: str
    timestamp: int | None = None
    transaction_count: int | None = None
    gas_used: int | None = None
    gas_limit: int | None = None
    base_fee_per_gas: int | None = None
    parent_hash: str | None = None
    witness_address: str | None = None


class NetworkInfoModel(BaseModel):
    name: str
    chain_id: int | None = None


class LatestBlockResponse(BaseModel):
    network: str
    block: BlockModel
    network_info: NetworkInfoModel
    timestamp: datetime
