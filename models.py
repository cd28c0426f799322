from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
DIFFICULTIES = tuple(range(MIN_DIFFICULTY, MAX_DIFFICULTY + 1))


# ======= Errors =======

class BoardError(Exception):
    """Base class for everything the generator raises on purpose."""


class InvalidInput(BoardError, ValueError):
    kind = "invalid_input"


class InvalidDimensions(InvalidInput):
    kind = "invalid_dimensions"


class InvalidDifficulty(InvalidInput):
    kind = "invalid_difficulty"


class InvalidCount(InvalidInput):
    kind = "invalid_count"


class InvalidItems(InvalidInput):
    kind = "invalid_items"


class GenerationCancelled(BoardError):
    kind = "cancelled"


# ======= Data =======

@dataclass
class Item:
    id: int
    name: str
    count: int
    difficulty: int


@dataclass(frozen=True)
class Cell:
    name: str
    difficulty: int
    item_id: Optional[int] = None

    is_empty = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "difficulty": self.difficulty, "item_id": self.item_id}


@dataclass(frozen=True)
class EmptyCell:
    name: str = "-"
    difficulty: Optional[int] = None

    is_empty = True

    def __repr__(self) -> str:
        return "EMPTY"

    def to_dict(self) -> Dict[str, Any]:
        return {"name": None, "difficulty": None, "empty": True}


EMPTY = EmptyCell()

BoardCell = Union[Cell, EmptyCell]


@dataclass(frozen=True)
class Candidate:
    sequence: Tuple[int, ...]
    score: float


@dataclass
class Board:
    width: int
    height: int
    cells: List[BoardCell]
    sequence: Tuple[int, ...] = ()
    score: float = 0.0
    seed: Optional[int] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.cells)

    def __iter__(self) -> Iterator[BoardCell]:
        return iter(self.cells)

    def __getitem__(self, idx: int) -> BoardCell:
        return self.cells[idx]

    def rows(self) -> List[List[BoardCell]]:
        return [self.cells[r * self.width:(r + 1) * self.width] for r in range(self.height)]

    @property
    def empty_count(self) -> int:
        return sum(1 for c in self.cells if c.is_empty)

    @property
    def placed_count(self) -> int:
        return len(self.cells) - self.empty_count

    def usage_by_item(self) -> Dict[int, int]:
        return dict(Counter(c.item_id for c in self.cells if not c.is_empty))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "cells": [c.to_dict() for c in self.cells],
            "sequence": list(self.sequence),
            "score": self.score,
        }
