"""Reserve registry — listed assets and their risk parameters, cached with a TTL."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable

from ..interfaces.gateway import LedgerGateway
from ..models import ReserveDescriptor
from ..protocols.aave import parser

logger = logging.getLogger(__name__)


class ReserveRegistry:
    """Serve the reserve list from memory while it is fresher than ``ttl`` seconds.

    A refresh fetches everything, then swaps the cached tuple and its
    timestamp in one step. A failed refresh leaves the previous entry in
    place. Concurrent refreshes after expiry are not deduplicated.
    """

    def __init__(
        self,
        gateway: LedgerGateway,
        ttl: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._gateway = gateway
        self._ttl = ttl
        self._clock = clock
        self._cache: tuple[tuple[ReserveDescriptor, ...], float] | None = None

    async def list_reserves(self) -> tuple[ReserveDescriptor, ...]:
        now = self._clock()
        if self._cache is not None:
            reserves, fetched_at = self._cache
            if now - fetched_at < self._ttl:
                logger.debug("Reserve cache hit (%d reserves)", len(reserves))
                return reserves

        reserves = await self._fetch()
        self._cache = (reserves, now)
        logger.info("Reserve cache refreshed with %d reserves", len(reserves))
        return reserves

    async def find(self, asset: str) -> ReserveDescriptor | None:
        """Look up a reserve by asset address, ignoring case."""
        target = asset.lower()
        for reserve in await self.list_reserves():
            if reserve.asset.lower() == target:
                return reserve
        return None

    async def _fetch(self) -> tuple[ReserveDescriptor, ...]:
        tokens = await self._gateway.get_all_reserves_tokens()

        configs, decimals = await asyncio.gather(
            asyncio.gather(
                *(self._gateway.get_reserve_configuration_data(a) for _, a in tokens)
            ),
            asyncio.gather(*(self._gateway.decimals(a) for _, a in tokens)),
        )

        return tuple(
            parser.build_reserve_descriptor(symbol, asset, decimals[i], configs[i])
            for i, (symbol, asset) in enumerate(tokens)
        )
