# solver/scoring.py
"""
Balance score for one candidate board.

Every term is a penalty subtracted from zero, so a perfectly balanced board
scores 0 and everything else is negative. The two constants below were tuned
by hand on real item lists; keep them exact.
"""
from typing import Sequence

from models import InvalidDimensions

ADJACENT_REPEAT_PENALTY = 0.75
TARGET_VARIANCE = 1.25


def row_penalty(board: Sequence[int], width: int, height: int, mean: float) -> float:
    total = 0.0
    for r in range(height):
        row = board[r * width:(r + 1) * width]
        total += abs(sum(row) / width - mean)
    return total


def column_penalty(board: Sequence[int], width: int, height: int, mean: float) -> float:
    total = 0.0
    for c in range(width):
        col_sum = 0
        for r in range(height):
            col_sum += board[r * width + c]
        total += abs(col_sum / height - mean)
    return total


def adjacency_penalty(board: Sequence[int], width: int, height: int) -> float:
    repeats = 0
    for i, v in enumerate(board):
        r, c = divmod(i, width)
        if c + 1 < width and board[i + 1] == v:
            repeats += 1
        if r + 1 < height and board[i + width] == v:
            repeats += 1
    return repeats * ADJACENT_REPEAT_PENALTY


def variance_penalty(board: Sequence[int], mean: float) -> float:
    variance = sum((v - mean) ** 2 for v in board) / len(board)
    return abs(variance - TARGET_VARIANCE)


def score_board(board: Sequence[int], width: int, height: int) -> float:
    """Return the balance score of ``board`` laid out row-major on ``width`` × ``height``."""
    if width < 0 or height < 0 or len(board) != width * height:
        raise InvalidDimensions(
            f"sequence of length {len(board)} does not fill a {width} × {height} grid"
        )
    if not board:
        return 0.0

    mean = sum(board) / len(board)

    score = 0.0
    score -= row_penalty(board, width, height, mean)
    score -= column_penalty(board, width, height, mean)
    score -= adjacency_penalty(board, width, height)
    score -= variance_penalty(board, mean)
    return score
