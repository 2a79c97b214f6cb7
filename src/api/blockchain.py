"""Multi-Chain Gateway - Blockchain API routes."""

import logging
import time
from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request
from fastapi.responses import JSONResponse

from src.blockchain.aggregator import BalanceAggregator
from src.blockchain.base import ChainAdapter, call_with_timeout
from src.blockchain.factory import AdapterFactory
from src.blockchain.networks import NetworkId
from src.core.exceptions import GatewayError, InvalidAddressError, ValidationError
from src.schemas.blockchain import (
    AddressValidationResponse,
    BalanceEntryResponse,
    BalanceResponse,
    BalanceSummaryResponse,
    BlockModel,
    CreateWalletBody,
    GasEstimateResponse,
    LatestBlockResponse,
    MultiNetworkBalanceResponse,
    NetworkConfigModel,
    NetworkHealthResponse,
    NetworkInfoModel,
    NetworkStatusResponse,
    SendTransactionResponse,
    SupportedNetworksResponse,
    TransactionReceiptModel,
    TransactionRequestBody,
    TransactionStatusResponse,
    TransactionSummaryModel,
    WalletCreationModel,
    WalletCreationResponse,
    WalletInfoModel,
    WalletInfoResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/blockchain", tags=["blockchain"])


# ============================================================================
# Dependencies
# ============================================================================

def get_adapter_factory(request: Request) -> AdapterFactory:
    """Get the process-wide adapter factory."""
    return request.app.state.adapter_factory


def get_balance_aggregator(request: Request) -> BalanceAggregator:
    """Get the process-wide balance aggregator."""
    return request.app.state.balance_aggregator


def get_call_timeout(request: Request) -> float:
    return request.app.state.settings.adapter_call_timeout


def get_network_id(network: str) -> NetworkId:
    """Parse the network path segment.

    Raises:
        ValidationError: If the network is not supported
    """
    try:
        return NetworkId(network.lower())
    except ValueError:
        raise ValidationError(
            "Invalid network type",
            details={"supported_networks": [n.value for n in NetworkId]},
        )


Factory = Annotated[AdapterFactory, Depends(get_adapter_factory)]
Aggregator = Annotated[BalanceAggregator, Depends(get_balance_aggregator)]
CallTimeout = Annotated[float, Depends(get_call_timeout)]
Network = Annotated[NetworkId, Depends(get_network_id)]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _require_address(adapter: ChainAdapter, address: str, operation: str, role: str = "address"):
    if not adapter.validate_address(address):
        raise InvalidAddressError(
            f"Invalid {role} format",
            network=adapter.network_id.value,
            operation=operation,
        )


async def _call(adapter: ChainAdapter, operation: str, awaitable, timeout: float):
    return await call_with_timeout(
        awaitable,
        timeout=timeout,
        network=adapter.network_id.value,
        operation=operation,
    )


# ============================================================================
# Cross-network Endpoints
# ============================================================================

@router.get("/networks", response_model=SupportedNetworksResponse)
async def get_supported_networks(factory: Factory):
    """List every supported network with its live availability.

    Disabled networks are listed with status ``disabled``; networks whose
    adapter failed to initialize are ``unavailable``.
    """
    network_ids = factory.list_network_ids()
    live = {adapter.network_id for adapter in await factory.get_all()}

    networks = []
    for network_id in network_ids:
        descriptor = factory.get_descriptor(network_id)
        if network_id in live:
            status, error = "available", None
        elif not descriptor.enabled:
            status, error = "disabled", None
        else:
            status, error = "unavailable", factory.construction_error(network_id)
        networks.append(
            NetworkStatusResponse(
                type=network_id.value,
                name=descriptor.display_name,
                chain_id=descriptor.chain_id,
                testnet=descriptor.is_testnet,
                native_token=descriptor.native_token,
                status=status,
                error=error,
            )
        )

    return SupportedNetworksResponse(
        supported_networks=networks,
        count=len(network_ids),
        available_count=sum(1 for n in networks if n.status == "available"),
        timestamp=_now(),
    )


@router.get("/balance/{address}", response_model=MultiNetworkBalanceResponse)
async def get_multi_network_balance(address: str, aggregator: Aggregator):
    """Get the balance of an address on every live network."""
    report = await aggregator.aggregate_balances(address)

    return MultiNetworkBalanceResponse(
        address=address,
        networks=[BalanceEntryResponse.model_validate(r) for r in report.successful],
        total_networks=report.successful_count,
        total_balance=report.total_balance,
        failed_networks=[BalanceEntryResponse.model_validate(r) for r in report.failed],
        summary=BalanceSummaryResponse(
            successful_queries=report.successful_count,
            failed_queries=report.failed_count,
            total_networks_checked=report.total_networks_queried,
        ),
        timestamp=_now(),
    )


# ============================================================================
# Single-network Endpoints
# ============================================================================

@router.get("/{network}/balance/{address}", response_model=BalanceResponse)
async def get_balance(address: str, network: Network, factory: Factory, timeout: CallTimeout):
    """Get native balance of an address on one network."""
    adapter = await factory.get_or_create(network)
    _require_address(adapter, address, "get_balance")
    balance = await _call(adapter, "get_balance", adapter.get_balance(address), timeout)

    return BalanceResponse(
        network=network.value,
        address=address,
        balance=balance,
        native_token=adapter.native_token,
        timestamp=_now(),
    )


@router.post("/{network}/transaction", response_model=SendTransactionResponse)
async def send_transaction(
    body: TransactionRequestBody,
    network: Network,
    factory: Factory,
    timeout: CallTimeout,
):
    """Send native currency from the network's configured wallet."""
    adapter = await factory.get_or_create(network)
    _require_address(adapter, body.to, "send_transaction", "recipient address")
    if body.from_address:
        _require_address(adapter, body.from_address, "send_transaction", "sender address")

    receipt = await _call(
        adapter, "send_transaction", adapter.send_transaction(body.to_request()), timeout
    )

    return SendTransactionResponse(
        network=network.value,
        transaction=TransactionReceiptModel.model_validate(receipt),
        request=TransactionSummaryModel(to=body.to, amount=body.amount, memo=body.memo),
        timestamp=_now(),
    )


@router.get("/{network}/transaction/{tx_hash}", response_model=TransactionStatusResponse)
async def get_transaction_status(
    tx_hash: str, network: Network, factory: Factory, timeout: CallTimeout
):
    """Get the status of a transaction."""
    adapter = await factory.get_or_create(network)
    receipt = await _call(
        adapter, "get_transaction_status", adapter.get_transaction_status(tx_hash), timeout
    )

    return TransactionStatusResponse(
        network=network.value,
        transaction_hash=tx_hash,
        status=receipt.status,
        details=TransactionReceiptModel.model_validate(receipt),
        timestamp=_now(),
    )


@router.post("/{network}/estimate-gas", response_model=GasEstimateResponse)
async def estimate_gas(
    body: TransactionRequestBody,
    network: Network,
    factory: Factory,
    timeout: CallTimeout,
):
    """Estimate the fee of a native transfer in native units."""
    adapter = await factory.get_or_create(network)
    _require_address(adapter, body.to, "estimate_gas", "recipient address")

    fee = await _call(adapter, "estimate_gas", adapter.estimate_gas(body.to_request()), timeout)

    return GasEstimateResponse(
        network=network.value,
        estimated_fee=fee,
        fee_token=adapter.native_token,
        transaction_details=TransactionSummaryModel(to=body.to, amount=body.amount),
        timestamp=_now(),
    )


@router.post("/{network}/wallet/create", response_model=WalletCreationResponse)
async def create_wallet(
    network: Network,
    factory: Factory,
    body: Annotated[CreateWalletBody | None, Body()] = None,
):
    """Create a wallet. Deterministic when a mnemonic is supplied."""
    adapter = await factory.get_or_create(network)
    options = (body or CreateWalletBody()).to_options()
    wallet = await adapter.create_wallet(options)

    return WalletCreationResponse(
        network=network.value,
        wallet=WalletCreationModel.model_validate(wallet),
        timestamp=_now(),
    )


@router.get("/{network}/wallet/{address}", response_model=WalletInfoResponse)
async def get_wallet_info(address: str, network: Network, factory: Factory, timeout: CallTimeout):
    """Get balance and account metadata of an address."""
    adapter = await factory.get_or_create(network)
    _require_address(adapter, address, "get_wallet_info")
    wallet = await _call(adapter, "get_wallet_info", adapter.get_wallet_info(address), timeout)
    descriptor = adapter.get_network_descriptor()

    return WalletInfoResponse(
        network=network.value,
        wallet=WalletInfoModel.model_validate(wallet),
        network_config=NetworkConfigModel(name=descriptor.display_name, chain_id=descriptor.chain_id),
        timestamp=_now(),
    )


@router.get("/{network}/block/latest", response_model=LatestBlockResponse)
async def get_latest_block(network: Network, factory: Factory, timeout: CallTimeout):
    """Get the latest block."""
    adapter = await factory.get_or_create(network)
    block = await _call(adapter, "get_latest_block", adapter.get_latest_block(), timeout)
    descriptor = adapter.get_network_descriptor()

    return LatestBlockResponse(
        network=network.value,
        block=BlockModel.model_validate(block),
        network_info=NetworkInfoModel(name=descriptor.display_name, chain_id=descriptor.chain_id),
        timestamp=_now(),
    )


@router.get("/{network}/validate/{address}", response_model=AddressValidationResponse)
async def validate_address(address: str, network: Network, factory: Factory):
    """Check an address against the network's format rules."""
    adapter = await factory.get_or_create(network)

    return AddressValidationResponse(
        network=network.value,
        address=address,
        is_valid=adapter.validate_address(address),
        network_name=adapter.get_network_descriptor().display_name,
        timestamp=_now(),
    )


@router.get("/{network}/health", response_model=NetworkHealthResponse)
async def get_network_health(network: Network, factory: Factory, timeout: CallTimeout):
    """Check a network by fetching its latest block."""
    try:
        adapter = await factory.get_or_create(network)
        started = time.monotonic()
        block = await _call(adapter, "get_latest_block", adapter.get_latest_block(), timeout)
        elapsed_ms = int((time.monotonic() - started) * 1000)
    except GatewayError as e:
        logger.error(f"Network health check failed for {network.value}: {e}")
        unhealthy = NetworkHealthResponse(
            network=network.value,
            status="unhealthy",
            error=e.message,
            timestamp=_now(),
        )
        return JSONResponse(status_code=503, content=unhealthy.model_dump(mode="json"))

    return NetworkHealthResponse(
        network=network.value,
        network_name=adapter.get_network_descriptor().display_name,
        status="healthy",
        latest_block=block.number,
        response_time_ms=elapsed_ms,
        timestamp=_now(),
    )
