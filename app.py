# app.py: board generation endpoints, progress served no-cache
from __future__ import annotations
import threading
import time
from typing import Any, Dict, Optional, Set

from flask import Flask, request, jsonify

from config import CFG
from items import parse_items, parse_dimensions, fmt_decoded_items
from models import Board, BoardError, GenerationCancelled, InvalidCount, InvalidDimensions
from render import render_board
from solver.orchestrator import generate_board, resolve_dimensions, validate_items
from progress import (
    reset as progress_reset,
    snapshot as progress_snapshot,
    start_timer as progress_start,
    fmt_elapsed, set_status, set_phase, set_grid, set_trials, set_done, log_detail,
)

_EMPTY_RESULT: Dict[str, Any] = {
    "ok": False,
    "width": 0,
    "height": 0,
    "cells": [],
    "score": None,
    "svg": "",
    "legend": "",
    "placed_count": 0,
    "empty_count": 0,
    "demand_count": 0,
    "demand_items": [],
    "elapsed_str": "0s",
}

LAST_RESULT: Dict[str, Any] = dict(_EMPTY_RESULT)

# Cancel events of the generations currently running.
_ACTIVE_LOCK = threading.Lock()
_ACTIVE_CANCELS: Set[threading.Event] = set()

app = Flask(__name__)


@app.after_request
def _no_cache_progress(resp):
    if request.path == "/progress":
        resp.headers["Cache-Control"] = "no-store, max-age=0"
        resp.headers["Pragma"] = "no-cache"
        resp.headers["Expires"] = "0"
    return resp


def _merge_like_mapping() -> Dict[str, Any]:
    merged: Dict[str, Any] = {}
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        merged.update(payload)

    for k, v in request.form.to_dict(flat=False).items():
        merged.setdefault(k, v)

    for k, v in request.args.to_dict(flat=False).items():
        merged.setdefault(k, v)

    return merged


def _board_result(board: Board, demand_count: int, decoded, t0: float) -> Dict[str, Any]:
    svg, legend = render_board(board)
    return {
        "ok": True,
        "width": board.width,
        "height": board.height,
        "cells": [c.to_dict() for c in board.cells],
        "score": board.score,
        "svg": svg,
        "legend": legend,
        "placed_count": board.placed_count,
        "empty_count": board.empty_count,
        "demand_count": demand_count,
        "demand_items": fmt_decoded_items(decoded),
        "elapsed_str": fmt_elapsed(time.time() - t0),
    }


def _fail(reason: str, kind: str, status: int, *, progress_status: Optional[str] = None):
    set_done(False, reason=reason, status=progress_status)
    log_detail("Request rejected", kind=kind, reason=reason)
    return jsonify({"ok": False, "error": reason, "kind": kind}), status


def _begin_generation() -> threading.Event:
    evt = threading.Event()
    with _ACTIVE_LOCK:
        _ACTIVE_CANCELS.add(evt)
    return evt


def _end_generation(evt: threading.Event) -> None:
    with _ACTIVE_LOCK:
        _ACTIVE_CANCELS.discard(evt)


@app.route("/generate", methods=["POST"])
def generate():
    progress_reset()
    progress_start()
    set_status("Generating")
    t0 = time.time()

    like = _merge_like_mapping()
    items, decoded, err = parse_items(like)
    if err or not items:
        seen_keys = ", ".join(list(like.keys())[:8]) or "none"
        return _fail(f"Bad items: {err or 'nothing parsed from request'} (saw keys: {seen_keys})", "bad_request", 400)

    width, height, dim_err = parse_dimensions(like)
    if dim_err:
        return _fail(f"Bad dimensions: {dim_err}", InvalidDimensions.kind, 400)
    try:
        validate_items(items)
        width, height = resolve_dimensions(items, width, height)
    except BoardError as e:
        return _fail(str(e), getattr(e, "kind", "error"), 400)
    if width * height > CFG.MAX_CELLS:
        return _fail(
            f"grid {width} × {height} exceeds the {CFG.MAX_CELLS}-cell limit",
            InvalidDimensions.kind, 400,
        )

    demand_count = sum(max(0, it.count) for it in items)
    if demand_count > CFG.MAX_SUPPLY:
        return _fail(
            f"total count {demand_count} exceeds the {CFG.MAX_SUPPLY}-item limit",
            InvalidCount.kind, 400,
        )

    set_grid(width, height)
    cancel = _begin_generation()
    try:
        board = generate_board(
            items, width, height,
            cancel=cancel,
            on_phase=set_phase,
            on_progress=set_trials,
        )
    except GenerationCancelled:
        return _fail("cancelled", GenerationCancelled.kind, 409, progress_status="Cancelled")
    except BoardError as e:
        return _fail(str(e), getattr(e, "kind", "error"), 400)
    except ValueError as e:
        # Misconfigured search knobs (BB_TRIALS, BB_TOP_K) surface here.
        return _fail(str(e), "invalid_config", 500)
    finally:
        _end_generation(cancel)

    set_done(True, reason=f"{board.placed_count} placed, {board.empty_count} empty")

    result = _board_result(board, demand_count, decoded, t0)
    LAST_RESULT.clear()
    LAST_RESULT.update(result)
    return jsonify(result)


@app.route("/cancel", methods=["POST"])
def cancel():
    with _ACTIVE_LOCK:
        active = list(_ACTIVE_CANCELS)
    if not active:
        return jsonify({"ok": False, "cancelled": False})
    for evt in active:
        evt.set()
    log_detail("Cancel requested", runs=len(active))
    return jsonify({"ok": True, "cancelled": True})


@app.route("/reset", methods=["POST"])
def reset_board():
    LAST_RESULT.clear()
    LAST_RESULT.update(_EMPTY_RESULT)
    progress_reset()
    return jsonify({"ok": True})


@app.route("/result/latest")
def result_latest():
    return jsonify(LAST_RESULT)


@app.route("/progress")
def progress():
    return jsonify(progress_snapshot())


if __name__ == "__main__":
    app.run(debug=False, threaded=True)
