# solver/materialize.py
import random
from dataclasses import replace
from typing import Iterable, List, Sequence

from models import Board, BoardCell, Cell, EMPTY, Item


def materialize_cells(sequence: Sequence[int], items: Iterable[Item], rng: random.Random) -> List[BoardCell]:
    """
    Map a difficulty arrangement onto named items.

    Works on value copies of ``items`` so the caller's counts are untouched.
    Each slot draws uniformly among named items of the slot's difficulty that
    still have supply; when none qualify the slot stays ``EMPTY``.
    """
    working = [replace(item) for item in items]

    cells: List[BoardCell] = []
    for difficulty in sequence:
        matches = [
            item for item in working
            if item.difficulty == difficulty and item.name and item.count > 0
        ]
        if not matches:
            cells.append(EMPTY)
            continue
        picked = rng.choice(matches)
        picked.count -= 1
        cells.append(Cell(name=picked.name, difficulty=picked.difficulty, item_id=picked.id))
    return cells


def materialize_board(
    sequence: Sequence[int],
    items: Iterable[Item],
    rng: random.Random,
    width: int,
    height: int,
    score: float = 0.0,
) -> Board:
    cells = materialize_cells(sequence, items, rng)
    return Board(width=width, height=height, cells=cells, sequence=tuple(sequence), score=score)
