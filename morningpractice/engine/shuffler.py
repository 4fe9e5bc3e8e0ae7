"""
Unbiased random selection of exercises.

A session draws its exercises once, at start, by shuffling a full copy of
the catalogue (Fisher-Yates) and keeping the first ``count`` records.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


def fisher_yates(items: Sequence[T], rng: Optional[random.Random] = None) -> list[T]:
    """
    Return a shuffled copy of *items*.

    Args:
        items: Source sequence (left untouched)
        rng: Random source; defaults to the module-level generator

    Returns:
        New list containing every item exactly once
    """
    source = rng if rng is not None else random
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = source.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def select(catalogue: Sequence[T], count: int, rng: Optional[random.Random] = None) -> tuple[T, ...]:
    """
    Draw ``min(count, len(catalogue))`` distinct records without replacement.

    Args:
        catalogue: Records to draw from
        count: Requested number of records; clamped to the catalogue size
        rng: Random source; pass ``random.Random(seed)`` for repeatable draws

    Returns:
        Tuple of selected records in draw order

    Raises:
        ValueError: If count is negative
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    if count > len(catalogue):
        logger.warning(
            "[shuffler] Requested %d exercises but catalogue has %d; clamping",
            count, len(catalogue),
        )
    return tuple(fisher_yates(catalogue, rng)[:count])
