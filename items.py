# items.py: forgiving item-list parser
from __future__ import annotations
import math
from typing import Any, List, Optional, Tuple

from models import Item

Decoded = Tuple[str, int, int]  # (name, count, difficulty)

# A freshly added editor row is one unit of difficulty 1.
DEFAULT_COUNT = 1
DEFAULT_DIFFICULTY = 1


class _ParseError(ValueError):
    pass


def _to_int(x: Any, field: str, default: int) -> int:
    if x is None or (isinstance(x, str) and x.strip() == ""):
        return default
    if isinstance(x, bool):
        raise _ParseError(f"{field} must be a number, got {x!r}")
    try:
        f = float(x)
    except (TypeError, ValueError):
        raise _ParseError(f"{field} must be a number, got {x!r}")
    if not math.isfinite(f) or f != int(f):
        raise _ParseError(f"{field} must be a whole number, got {x!r}")
    return int(f)


def _as_listish(val: Any) -> List[Any]:
    if val is None:
        return []
    if isinstance(val, (list, tuple)):
        return list(val)
    return [val]


def _getlist(container: Any, key: str) -> List[Any]:
    if container is None:
        return []
    if isinstance(container, dict) and key in container:
        return _as_listish(container[key])
    if hasattr(container, "getlist"):
        return list(container.getlist(key))
    return []


def _first(val: Any) -> Any:
    if isinstance(val, (list, tuple)):
        return val[0] if val else None
    return val


def _make_item(idx: int, raw_id: Any, name: Any, count: Any, difficulty: Any) -> Item:
    return Item(
        id=_to_int(raw_id, "id", idx),
        name="" if name is None else str(name).strip(),
        count=_to_int(count, "count", DEFAULT_COUNT),
        difficulty=_to_int(difficulty, "difficulty", DEFAULT_DIFFICULTY),
    )


def _decode(items: List[Item]) -> List[Decoded]:
    return [(it.name, it.count, it.difficulty) for it in items]


def parse_items(form_like: Any) -> Tuple[List[Item], List[Decoded], Optional[str]]:
    """
    Return (items, decoded_items, error_message_or_None).

    Accepts a JSON ``items`` list, parallel ``name``/``count``/``difficulty``
    arrays, or the same arrays posted as form fields with ``[]`` suffixes.
    Only shape and number format are checked here; ranges are validated by the
    orchestrator.
    """
    if not form_like:
        return [], [], "nothing parsed from request"

    try:
        # --- Shape 1: explicit JSON items list ------------------------------
        if isinstance(form_like, dict) and isinstance(form_like.get("items"), list):
            items: List[Item] = []
            for idx, raw in enumerate(form_like["items"]):
                if not isinstance(raw, dict):
                    return [], [], f"item {idx} is not an object"
                items.append(_make_item(idx, raw.get("id"), raw.get("name"), raw.get("count"), raw.get("difficulty")))
            if items:
                return items, _decode(items), None

        # --- Shape 2/3: parallel arrays, JSON or form -----------------------
        for nK, cK, dK in (
            ("name", "count", "difficulty"),
            ("name[]", "count[]", "difficulty[]"),
        ):
            names = _getlist(form_like, nK)
            if not names:
                continue
            counts = _getlist(form_like, cK)
            diffs = _getlist(form_like, dK)
            items = []
            for idx, name in enumerate(names):
                count = counts[idx] if idx < len(counts) else None
                diff = diffs[idx] if idx < len(diffs) else None
                items.append(_make_item(idx, None, name, count, diff))
            if items:
                return items, _decode(items), None
    except _ParseError as e:
        return [], [], str(e)

    return [], [], "nothing parsed from request"


def parse_dimensions(form_like: Any) -> Tuple[Optional[int], Optional[int], Optional[str]]:
    """Return (width, height, error_or_None); missing values come back as None."""
    if not isinstance(form_like, dict):
        return None, None, None

    grid = form_like.get("grid")
    try:
        if isinstance(grid, (list, tuple)) and len(grid) == 2:
            return _to_int(grid[0], "width", 0), _to_int(grid[1], "height", 0), None
        width = _first(form_like.get("width"))
        height = _first(form_like.get("height"))
        w = None if width in (None, "") else _to_int(width, "width", 0)
        h = None if height in (None, "") else _to_int(height, "height", 0)
    except _ParseError as e:
        return None, None, str(e)
    return w, h, None


def fmt_decoded_items(decoded: List[Decoded]) -> List[Decoded]:
    return sorted(decoded, key=lambda t: (t[2], t[0]))
