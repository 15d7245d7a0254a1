"""Bounded-concurrency liquidation analysis over many addresses."""
from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Sequence

from ..models import BatchResult
from .opportunity_analyzer import OpportunityAnalyzer

logger = logging.getLogger(__name__)


class BatchScheduler:
    """Run the analyzer over a list of addresses with a fixed worker pool.

    Workers claim indices from a shared cursor and write into the matching
    output slot, so results follow input order. A failure for one address is
    recorded in its slot and never cancels the other workers.
    """

    def __init__(self, analyzer: OpportunityAnalyzer, concurrency: int = 5) -> None:
        self._analyzer = analyzer
        self._concurrency = concurrency

    async def analyze_batch(self, addresses: Sequence[str]) -> list[BatchResult]:
        if not addresses:
            return []

        results: list[BatchResult | None] = [None] * len(addresses)
        cursor = itertools.count()
        workers = min(self._concurrency, len(addresses))

        async def worker() -> None:
            while True:
                idx = next(cursor)
                if idx >= len(addresses):
                    return
                address = addresses[idx]
                try:
                    opportunity = await self._analyzer.analyze(address)
                    results[idx] = BatchResult(address=address, opportunity=opportunity)
                except Exception as e:
                    logger.warning("Analysis failed for %s: %s", address, e)
                    results[idx] = BatchResult(address=address, error=str(e) or type(e).__name__)

        logger.info(
            "Analyzing %d addresses with %d workers", len(addresses), workers
        )
        await asyncio.gather(*(worker() for _ in range(workers)))

        return results  # type: ignore[return-value]
