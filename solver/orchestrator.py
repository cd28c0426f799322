# Orchestrator: validate → pool → search → select → materialize
from __future__ import annotations

import math
import random
import threading
import time
from typing import Iterable, Optional, Sequence, Tuple

from config import CFG
from models import (
    Board, Item, InvalidCount, InvalidDifficulty, InvalidDimensions, InvalidItems,
    MIN_DIFFICULTY, MAX_DIFFICULTY,
)
from progress import log_detail
from solver.materialize import materialize_board
from solver.pool import build_pool, total_supply
from solver.search import ProgressFn, run_search, select_candidate


# ---------- helpers ----------

def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_items(items: Sequence[Item]) -> None:
    """Reject items the scorer and materializer cannot handle. Never clamps."""
    seen_ids = set()
    for item in items:
        if not _is_int(item.difficulty) or not (MIN_DIFFICULTY <= item.difficulty <= MAX_DIFFICULTY):
            raise InvalidDifficulty(
                f"item {item.id} ({item.name!r}) has difficulty {item.difficulty!r}; "
                f"expected an integer in {MIN_DIFFICULTY}..{MAX_DIFFICULTY}"
            )
        if not _is_int(item.count) or item.count < 0:
            raise InvalidCount(
                f"item {item.id} ({item.name!r}) has count {item.count!r}; expected an integer >= 0"
            )
        if item.id in seen_ids:
            raise InvalidItems(f"duplicate item id {item.id!r}")
        seen_ids.add(item.id)


def default_dimensions(items: Iterable[Item]) -> Tuple[int, int]:
    """Largest square that the total supply can fill."""
    side = math.isqrt(total_supply(items))
    return side, side


def resolve_dimensions(
    items: Sequence[Item],
    width: Optional[int],
    height: Optional[int],
) -> Tuple[int, int]:
    if width is None and height is None:
        width, height = default_dimensions(items)
    elif width is None:
        width = height
    elif height is None:
        height = width

    if not _is_int(width) or not _is_int(height) or width <= 0 or height <= 0:
        raise InvalidDimensions(f"grid must be at least 1 × 1, got {width!r} × {height!r}")
    return width, height


def make_rng(seed: Optional[int] = None) -> random.Random:
    return random.Random(seed)


# ---------- public entrypoint ----------

def generate_board(
    items: Sequence[Item],
    width: Optional[int] = None,
    height: Optional[int] = None,
    *,
    trials: Optional[int] = None,
    top_k: Optional[int] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
    on_progress: Optional[ProgressFn] = None,
    on_phase=None,
) -> Board:
    """
    Generate one balanced board from ``items``.

    Dimensions default to the largest square the supply fills. Validation
    errors (``InvalidDimensions``, ``InvalidDifficulty``, ``InvalidCount``,
    ``InvalidItems``) are raised before any work starts; a set ``cancel``
    event raises ``GenerationCancelled``. Either way no board is returned.

    ``on_phase(name)`` is told when the run enters ``pool``, ``search`` and
    ``materialize``; ``on_progress`` is forwarded to the search.
    """
    t0 = time.time()
    items = list(items)
    validate_items(items)
    width, height = resolve_dimensions(items, width, height)
    cells = width * height

    used_seed = None
    if rng is None:
        used_seed = CFG.SEED if seed is None else seed
        rng = make_rng(used_seed)
    n_trials = CFG.TRIALS if trials is None else int(trials)
    capacity = CFG.TOP_K if top_k is None else int(top_k)
    supply = total_supply(items)

    log_detail(
        "Run setup",
        items=len(items),
        supply=supply,
        grid=f"{width}x{height}",
        trials=n_trials,
        top_k=capacity,
        seed=used_seed,
    )

    if on_phase is not None:
        on_phase("pool")
    pool = build_pool(items, cells)

    if on_phase is not None:
        on_phase("search")
    retainer = run_search(
        pool, width, height,
        rng=rng,
        trials=n_trials,
        top_k=capacity,
        cancel=cancel,
        on_progress=on_progress,
    )
    chosen = select_candidate(retainer.candidates, rng)
    best = retainer.best()

    if on_phase is not None:
        on_phase("materialize")
    board = materialize_board(chosen.sequence, items, rng, width, height, score=chosen.score)
    board.seed = used_seed

    elapsed = time.time() - t0
    board.meta.update({
        "supply": supply,
        "trials": n_trials,
        "retained": len(retainer),
        "best_score": best.score if best else None,
        "elapsed": elapsed,
    })
    if supply < cells:
        log_detail("Short supply", supply=supply, cells=cells, empty=board.empty_count)
    log_detail(
        "Board generated",
        grid=f"{width}x{height}",
        score=round(chosen.score, 4),
        best_score=round(best.score, 4) if best else None,
        placed=board.placed_count,
        empty=board.empty_count,
        duration=f"{elapsed:.2f}s",
    )
    return board

