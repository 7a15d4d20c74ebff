"""Allocation of unique 7-digit business numbers for cards."""

import logging
import random
from collections.abc import Callable
from typing import TypeVar

from bizcards.services.errors import AllocationExhausted, UniquenessConflict

logger = logging.getLogger(__name__)

T = TypeVar("T")

BIZ_NUMBER_FIELD = "biz_number"
DEFAULT_MAX_RETRIES = 5
DEFAULT_MIN = 1_000_000
DEFAULT_MAX = 9_999_999


class BizNumberAllocator:
    """Draws random business numbers until one is free.

    The existence check and the later insert are separate statements, so two
    requests can pick the same number. The unique index on cards.biz_number is
    the backstop: ``insert_unique`` restarts with a fresh draw when the insert
    reports a conflict on the number.
    """

    def __init__(
        self,
        is_taken: Callable[[int], bool],
        max_retries: int = DEFAULT_MAX_RETRIES,
        low: int = DEFAULT_MIN,
        high: int = DEFAULT_MAX,
        rng: random.Random | None = None,
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")
        if low > high:
            raise ValueError("low must not exceed high")
        self.is_taken = is_taken
        self.max_retries = max_retries
        self.low = low
        self.high = high
        self.rng = rng or random.SystemRandom()

    def allocate(self) -> int:
        """Return a number that is currently unused."""
        for attempt in range(1, self.max_retries + 1):
            candidate = self.rng.randint(self.low, self.high)
            if not self.is_taken(candidate):
                return candidate
            logger.info(f"Business number {candidate} taken (attempt {attempt}/{self.max_retries})")
        raise AllocationExhausted(self.max_retries)

    def insert_unique(self, insert: Callable[[int], T]) -> T:
        """Allocate a number and persist with it, restarting on a race.

        ``insert`` must raise UniquenessConflict with field ``biz_number`` when
        storage rejects the number; other conflicts propagate.
        """
        for attempt in range(1, self.max_retries + 1):
            candidate = self.allocate()
            try:
                return insert(candidate)
            except UniquenessConflict as exc:
                if exc.field != BIZ_NUMBER_FIELD:
                    raise
                logger.warning(
                    f"Business number {candidate} claimed concurrently, restarting allocation "
                    f"({attempt}/{self.max_retries})"
                )
        raise AllocationExhausted(self.max_retries)
