"""Batch check coordinator."""

import asyncio
import logging
from typing import Any, Mapping, Optional, Sequence, Union

from ....config.constants import CacheTTL, Limits
from ....core.exceptions import AuthzError, BatchCheckError
from ...cache.adapters import MemoryMembershipCache
from ..entities import BatchCheckResult, CheckOutcome, CheckRequest
from .permission_checker import PermissionChecker

logger = logging.getLogger(__name__)

BatchEntry = Union[CheckRequest, Mapping[str, Any]]


class BatchCheckCoordinator:
    """Runs many checks concurrently under a bounded worker limit.

    Results keep request order. Checks in one batch share a membership
    cache so a group resolved once is not re-read for every entry.
    """

    def __init__(
        self,
        checker: PermissionChecker,
        max_concurrency: int = Limits.BATCH_MAX_CONCURRENCY,
        batch_cache_ttl: float = CacheTTL.MEMBERSHIP_DEFAULT
    ):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self._checker = checker
        self._max_concurrency = max_concurrency
        self._batch_cache_ttl = batch_cache_ttl

    async def batch_check(
        self,
        requests: Sequence[BatchEntry],
        all_or_nothing: bool = False,
        timeout: Optional[float] = None
    ) -> BatchCheckResult:
        """Check every request.

        Args:
            requests: CheckRequest objects or mappings with the same fields
            all_or_nothing: Raise instead of returning a partial result
            timeout: Per-check deadline in seconds

        Raises:
            BatchCheckError: With ``all_or_nothing`` when any check is indeterminate
        """
        if not requests:
            return BatchCheckResult(())

        engine = self._checker.engine
        if engine.membership_cache is None:
            engine = engine.with_cache(MemoryMembershipCache(ttl_seconds=self._batch_cache_ttl))

        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def run(entry: BatchEntry) -> CheckOutcome:
            try:
                request = entry if isinstance(entry, CheckRequest) else CheckRequest.from_dict(entry)
            except AuthzError as e:
                return CheckOutcome.undetermined(e.message)
            async with semaphore:
                return await self._checker.check_detailed(request, timeout=timeout, engine=engine)

        results = await asyncio.gather(*(run(entry) for entry in requests), return_exceptions=True)

        outcomes = []
        for index, result in enumerate(results):
            if isinstance(result, BaseException):
                logger.error(f"Batch entry {index} failed unexpectedly: {result!r}")
                outcomes.append(CheckOutcome.undetermined(str(result) or type(result).__name__))
            else:
                outcomes.append(result)

        batch = BatchCheckResult(tuple(outcomes))
        if batch.partial_failure:
            logger.warning(
                f"Batch of {len(batch)} checks had {len(batch.indeterminate_indices)} indeterminate result(s)"
            )
            if all_or_nothing:
                raise BatchCheckError(batch.indeterminate_indices)
        return batch
