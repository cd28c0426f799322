# solver/pool.py
from typing import Iterable, List

from models import Item, MIN_DIFFICULTY

# Pad slots carry the lowest ordinal and are not backed by any item.
FILLER_DIFFICULTY = MIN_DIFFICULTY


def build_pool(items: Iterable[Item], cells: int) -> List[int]:
    """
    Flatten item supply into a list of difficulty ordinals.

    Each item contributes its difficulty ``count`` times, in item order. When the
    supply is smaller than the ``cells`` on the board the pool is padded with
    ``FILLER_DIFFICULTY`` so the result is always at least ``cells`` long.
    """
    pool: List[int] = []
    for item in items:
        pool.extend([item.difficulty] * max(0, int(item.count)))

    short = int(cells) - len(pool)
    if short > 0:
        pool.extend([FILLER_DIFFICULTY] * short)
    return pool


def total_supply(items: Iterable[Item]) -> int:
    return sum(max(0, int(item.count)) for item in items)
