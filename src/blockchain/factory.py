"""Chain adapter factory.

Single point of construction for chain adapters. Builds one adapter per
network lazily, caches it for the life of the process, and keeps a failure
on one network from affecting any other.
"""

import asyncio
import dataclasses
import logging
from collections.abc import Callable, Mapping

from src.blockchain.base import ChainAdapter, call_with_timeout
from src.blockchain.evm import EvmAdapter
from src.blockchain.networks import (
    NetworkDescriptor,
    NetworkId,
    SigningConfig,
    build_network_registry,
    build_signing_configs,
)
from src.blockchain.solana import SolanaAdapter
from src.blockchain.tron import TronAdapter
from src.core.config import Settings
from src.core.exceptions import ConstructionError, UnsupportedNetworkError

logger = logging.getLogger(__name__)

AdapterConstructor = Callable[..., ChainAdapter]

# Network id -> adapter constructor. Adding a network means adding an entry.
ADAPTER_TABLE: dict[NetworkId, AdapterConstructor] = {
    NetworkId.ARBITRUM: EvmAdapter,
    NetworkId.POLYGON: EvmAdapter,
    NetworkId.AVALANCHE: EvmAdapter,
    NetworkId.SOLANA: SolanaAdapter,
    NetworkId.TRC20: TronAdapter,
}


class AdapterFactory:
    """Lazily constructs, initializes and caches chain adapters.

    Lifecycle: created once at startup with an empty cache. Entries are
    added on first successful initialization and never removed until
    ``close()`` at shutdown. Failed initializations are not cached, so the
    next request for that network retries from scratch. Disabled networks
    get an uninitialized adapter that is never cached.

    Construction for one network id is single-flight; different network ids
    are constructed in parallel.
    """

    def __init__(
        self,
        registry: Mapping[NetworkId, NetworkDescriptor],
        signing_configs: Mapping[NetworkId, SigningConfig] | None = None,
        adapter_table: Mapping[NetworkId, AdapterConstructor] | None = None,
        init_timeout: float | None = None,
        request_timeout: float = 10.0,
    ) -> None:
        self._registry = registry
        self._signing_configs = signing_configs or {}
        self._adapter_table = adapter_table if adapter_table is not None else ADAPTER_TABLE
        self._init_timeout = init_timeout
        self._request_timeout = request_timeout
        self._cache: dict[NetworkId, ChainAdapter] = {}
        self._locks: dict[NetworkId, asyncio.Lock] = {}
        self._construction_errors: dict[NetworkId, str] = {}

    def list_network_ids(self) -> list[NetworkId]:
        """Get all registered network ids, regardless of adapter state."""
        return list(self._registry.keys())

    def get_descriptor(self, network_id: NetworkId) -> NetworkDescriptor:
        """Get a copy of a network's descriptor.

        Raises:
            UnsupportedNetworkError: If the network id is not registered
        """
        descriptor = self._registry.get(network_id)
        if descriptor is None:
            raise UnsupportedNetworkError(f"Unsupported network: {network_id}", network=str(network_id))
        return dataclasses.replace(descriptor)

    def construction_error(self, network_id: NetworkId) -> str | None:
        """Get the message of the last failed construction, if any."""
        return self._construction_errors.get(network_id)

    def is_cached(self, network_id: NetworkId) -> bool:
        return network_id in self._cache

    async def get_or_create(self, network_id: NetworkId) -> ChainAdapter:
        """Get the adapter for a network, constructing it if needed.

        Args:
            network_id: Network to get an adapter for

        Returns:
            Cached initialized adapter, or an uninitialized one for a
            disabled network

        Raises:
            UnsupportedNetworkError: If the network is unknown or has no adapter
            ConstructionError: If construction or initialization failed
        """
        adapter = self._cache.get(network_id)
        if adapter is not None:
            return adapter

        lock = self._locks.setdefault(network_id, asyncio.Lock())
        async with lock:
            # Another caller may have finished construction while we waited
            adapter = self._cache.get(network_id)
            if adapter is not None:
                return adapter
            return await self._construct(network_id)

    async def _construct(self, network_id: NetworkId) -> ChainAdapter:
        descriptor = self._registry.get(network_id)
        constructor = self._adapter_table.get(network_id)
        if descriptor is None or constructor is None:
            raise UnsupportedNetworkError(f"Unsupported network: {network_id}", network=str(network_id))

        name = descriptor.id.value
        try:
            adapter = constructor(
                descriptor,
                self._signing_configs.get(network_id),
                request_timeout=self._request_timeout,
            )
        except Exception as e:
            self._construction_errors[network_id] = str(e)
            logger.error(f"Failed to construct {name} adapter: {e}")
            raise ConstructionError(f"{name} adapter construction failed: {e}", network=name) from e

        if not descriptor.enabled:
            logger.debug(f"{name} is disabled; returning uninitialized adapter")
            return adapter

        try:
            await call_with_timeout(
                adapter.initialize(),
                timeout=self._init_timeout,
                network=name,
                operation="initialize",
            )
        except Exception as e:
            self._construction_errors[network_id] = str(e)
            logger.error(f"Failed to initialize {name} service: {e}")
            await adapter.close()
            raise ConstructionError(f"{name} adapter initialization failed: {e}", network=name) from e

        self._cache[network_id] = adapter
        self._construction_errors.pop(network_id, None)
        logger.info(f"{name} adapter cached")
        return adapter

    async def get_all(self) -> list[ChainAdapter]:
        """Get every initialized adapter.

        Networks that fail to construct are logged and omitted; disabled
        networks are omitted. Never raises because of a single network.
        """
        network_ids = self.list_network_ids()
        results = await asyncio.gather(
            *(self.get_or_create(network_id) for network_id in network_ids),
            return_exceptions=True,
        )

        adapters = []
        for network_id, result in zip(network_ids, results):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error(f"Failed to initialize {network_id.value} service: {result}")
                continue
            if result.is_initialized:
                adapters.append(result)
        return adapters

    async def close(self) -> None:
        """Close all cached adapters. Called once at shutdown."""
        for network_id, adapter in list(self._cache.items()):
            try:
                await adapter.close()
            except Exception as e:
                logger.error(f"Error closing {network_id.value} adapter: {e}")
        self._cache.clear()
        logger.info("Chain adapter cache cleared")


def create_adapter_factory(settings: Settings) -> AdapterFactory:
    """Build the process-wide factory from settings."""
    return AdapterFactory(
        registry=build_network_registry(settings),
        signing_configs=build_signing_configs(settings),
        init_timeout=settings.adapter_init_timeout,
        request_timeout=settings.rpc_request_timeout,
    )
