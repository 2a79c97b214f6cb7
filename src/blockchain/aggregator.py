"""Cross-network balance aggregation.

Fans one address out to every live adapter concurrently and collects a
result for each network, whatever happens to its siblings.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from src.blockchain.base import ChainAdapter, call_with_timeout
from src.blockchain.factory import AdapterFactory

logger = logging.getLogger(__name__)


class BalanceStatus(str, Enum):
    """Outcome of querying one network."""

    SUCCESS = "success"
    INVALID_ADDRESS = "invalid_address"
    ERROR = "error"


@dataclass
class BalanceQueryResult:
    """Balance of one address on one network, or why it is missing."""

    network: str
    network_name: str
    status: BalanceStatus
    address: str | None = None
    balance: Decimal | None = None
    native_token: str | None = None
    error: str | None = None


@dataclass
class AggregateBalanceReport:
    """Per-network results split into successes and failures.

    ``total_balance`` adds up native balances of different chains without
    any currency conversion. It is a raw sum, not a value in one unit.
    """

    address: str
    successful: list[BalanceQueryResult] = field(default_factory=list)
    failed: list[BalanceQueryResult] = field(default_factory=list)
    total_balance: Decimal = Decimal("0")

    @property
    def successful_count(self) -> int:
        return len(self.successful)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def total_networks_queried(self) -> int:
        return len(self.successful) + len(self.failed)


class BalanceAggregator:
    """Queries one address across every live network."""

    INVALID_ADDRESS_MESSAGE = "Address format not supported on this network"

    def __init__(self, factory: AdapterFactory, call_timeout: float | None = None) -> None:
        self._factory = factory
        self._call_timeout = call_timeout

    async def aggregate_balances(self, address: str) -> AggregateBalanceReport:
        """Get the balance of an address on every live network.

        Args:
            address: Address to look up; tested against each chain's format

        Returns:
            AggregateBalanceReport with one entry per queried network
        """
        adapters = await self._factory.get_all()
        logger.info(f"Checking balance for address {address} across {len(adapters)} networks")

        results = await asyncio.gather(
            *(self._query_one(adapter, address) for adapter in adapters),
            return_exceptions=True,
        )

        report = AggregateBalanceReport(address=address)
        for adapter, result in zip(adapters, results):
            if isinstance(result, BaseException):
                result = self._error_result(adapter, result)
            if result.status is BalanceStatus.SUCCESS:
                report.successful.append(result)
                report.total_balance += result.balance
            else:
                report.failed.append(result)
        return report

    async def _query_one(self, adapter: ChainAdapter, address: str) -> BalanceQueryResult:
        try:
            network = adapter.network_id.value
            descriptor = adapter.get_network_descriptor()

            if not adapter.validate_address(address):
                return BalanceQueryResult(
                    network=network,
                    network_name=descriptor.display_name,
                    status=BalanceStatus.INVALID_ADDRESS,
                    error=self.INVALID_ADDRESS_MESSAGE,
                )

            wallet = await call_with_timeout(
                adapter.get_wallet_info(address),
                timeout=self._call_timeout,
                network=network,
                operation="get_wallet_info",
            )
        except Exception as e:
            return self._error_result(adapter, e)

        return BalanceQueryResult(
            network=network,
            network_name=descriptor.display_name,
            status=BalanceStatus.SUCCESS,
            address=wallet.address,
            balance=wallet.balance,
            native_token=wallet.native_token,
        )

    def _error_result(self, adapter: ChainAdapter, exc: BaseException) -> BalanceQueryResult:
        network = adapter.network_id.value
        logger.warning(f"Balance query failed on {network}: {exc}")
        return BalanceQueryResult(
            network=network,
            network_name=adapter.get_network_descriptor().display_name,
            status=BalanceStatus.ERROR,
            error=str(exc) or exc.__class__.__name__,
        )
