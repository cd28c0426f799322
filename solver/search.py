# solver/search.py
from __future__ import annotations

import random
import threading
from typing import Callable, List, Optional, Sequence

from config import CFG
from models import Candidate, GenerationCancelled
from solver.scoring import score_board

ProgressFn = Callable[[int, int, Optional[float]], None]


class TopKRetainer:
    """Keep the ``capacity`` highest-scoring candidates offered so far.

    Eviction is a linear scan for the current minimum. At the default capacity
    of 10 that beats maintaining a heap.
    """

    def __init__(self, capacity: int = 10):
        if int(capacity) < 1:
            raise ValueError(f"retainer capacity must be >= 1, got {capacity}")
        self.capacity = int(capacity)
        self._held: List[Candidate] = []

    def __len__(self) -> int:
        return len(self._held)

    def offer(self, candidate: Candidate) -> bool:
        """Insert ``candidate`` if it belongs in the top set; return True when kept."""
        if len(self._held) < self.capacity:
            self._held.append(candidate)
            return True

        min_idx = 0
        for i in range(1, len(self._held)):
            if self._held[i].score < self._held[min_idx].score:
                min_idx = i

        # ties keep the incumbent
        if candidate.score > self._held[min_idx].score:
            self._held[min_idx] = candidate
            return True
        return False

    @property
    def candidates(self) -> List[Candidate]:
        return list(self._held)

    def best(self) -> Optional[Candidate]:
        if not self._held:
            return None
        return max(self._held, key=lambda c: c.score)


def _check_cancel(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise GenerationCancelled("board generation cancelled")


def run_search(
    pool: Sequence[int],
    width: int,
    height: int,
    *,
    rng: random.Random,
    trials: Optional[int] = None,
    top_k: Optional[int] = None,
    cancel: Optional[threading.Event] = None,
    on_progress: Optional[ProgressFn] = None,
) -> TopKRetainer:
    """
    Score ``trials`` random truncated permutations of ``pool`` and retain the best.

    One working copy of the pool is reshuffled in place each trial
    (Fisher–Yates via ``rng.shuffle``) and its first ``width * height`` entries
    are scored.

    ``cancel`` is checked before the first trial and after every
    ``CFG.PROGRESS_EVERY`` trials; a set event raises ``GenerationCancelled``.
    ``on_progress(done, total, best_score)`` is called at the same points.
    """
    n_trials = CFG.TRIALS if trials is None else int(trials)
    capacity = CFG.TOP_K if top_k is None else int(top_k)
    chunk = max(1, int(CFG.PROGRESS_EVERY))
    cells = width * height

    if n_trials < 1:
        raise ValueError(f"trial count must be >= 1, got {n_trials}")

    retainer = TopKRetainer(capacity)
    _check_cancel(cancel)

    if cells <= 0:
        retainer.offer(Candidate((), 0.0))
        return retainer
    if len(pool) < cells:
        raise ValueError(f"pool of {len(pool)} cannot fill {cells} cells")

    work = list(pool)
    best_score: Optional[float] = None
    for trial in range(1, n_trials + 1):
        rng.shuffle(work)
        sequence = tuple(work[:cells])
        score = score_board(sequence, width, height)
        retainer.offer(Candidate(sequence, score))
        if best_score is None or score > best_score:
            best_score = score

        if trial % chunk == 0:
            if on_progress is not None:
                on_progress(trial, n_trials, best_score)
            _check_cancel(cancel)

    if on_progress is not None:
        on_progress(n_trials, n_trials, best_score)
    return retainer


def select_candidate(retained: Sequence[Candidate], rng: random.Random) -> Candidate:
    """Pick one survivor uniformly at random, trading peak score for variety."""
    if not retained:
        raise ValueError("no candidates retained")
    return retained[rng.randrange(len(retained))]
