from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Dict, Optional

from config import CFG

# ------------------------------
# Thread-safe global progress state
# ------------------------------

PROGRESS_LOCK = threading.Lock()


def _log_file_path() -> Path:
    configured = Path(CFG.LOG_FILE)
    if configured.is_absolute():
        return configured
    return Path(__file__).resolve().parent / configured


def _init_logger() -> logging.Logger:
    logger = logging.getLogger("board.generation_log")
    if logger.handlers:
        return logger

    log_path = _log_file_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        logger.propagate = False
    except OSError:
        # An unwritable log directory leaves the generator usable without a log.
        logger.handlers.clear()
    return logger


GENERATION_LOGGER = _init_logger()


def _log_enabled() -> bool:
    return bool(GENERATION_LOGGER.handlers)


def _fmt_seconds(seconds: Optional[float]) -> Optional[str]:
    if seconds is None:
        return None
    try:
        return f"{float(seconds):.2f}s"
    except (TypeError, ValueError):
        return None


def log_detail(event: str, **fields: Any) -> None:
    """Append ``event | key=value ...`` to the generation log, skipping blanks."""
    if not _log_enabled():
        return
    extras = [
        f"{key}={value}"
        for key, value in fields.items()
        if value is not None and value != ""
    ]
    if extras:
        GENERATION_LOGGER.info("%s | %s", event, " ".join(extras))
    else:
        GENERATION_LOGGER.info("%s", event)


# Single source of truth for the progress endpoint
PROGRESS: Dict[str, Any] = {
    "status": "Idle",          # Idle | Generating | Done | Error | Cancelled
    "phase": "",               # pool | search | materialize
    "trials_done": 0,
    "trials_total": 0,
    "percent": 0.0,            # 0..100 float
    "best_score": None,        # best candidate score seen so far
    "grid": "",                # e.g. "5 × 4"
    "elapsed_start": None,     # t0 (float) when generation started
    "elapsed": 0.0,            # seconds snapshot
    "message": "",
    "done": False,
    "ok": None,
    "run_id": 0,               # monotonically increasing identifier
}

_PHASE_START: Dict[str, Optional[float]] = {"t": None}

# ------------------------------
# Helpers
# ------------------------------

def _now() -> float:
    return time.time()


def fmt_elapsed(seconds: float) -> str:
    seconds = max(0.0, float(seconds))
    if seconds < 60:
        return f"{int(seconds)}s"
    m, s = divmod(int(seconds), 60)
    if m < 60:
        return f"{m}m {s}s"
    h, m = divmod(m, 60)
    return f"{h}h {m}m"


def _touch_elapsed_locked() -> None:
    t0 = PROGRESS.get("elapsed_start")
    if t0 is not None:
        PROGRESS["elapsed"] = _now() - float(t0)


def reset() -> None:
    with PROGRESS_LOCK:
        try:
            current_run_id = int(PROGRESS.get("run_id", 0))
        except (TypeError, ValueError):
            current_run_id = 0
        PROGRESS.update({
            "status": "Idle",
            "phase": "",
            "trials_done": 0,
            "trials_total": 0,
            "percent": 0.0,
            "best_score": None,
            "grid": "",
            "elapsed_start": None,
            "elapsed": 0.0,
            "message": "",
            "done": False,
            "ok": None,
            "run_id": current_run_id + 1,
        })
        _PHASE_START["t"] = None
    log_detail("Progress reset")


def start_timer() -> None:
    with PROGRESS_LOCK:
        PROGRESS["elapsed_start"] = _now()
        PROGRESS["elapsed"] = 0.0
    log_detail("Run timer started")


# ------------------------------
# Setters (tolerant)
# ------------------------------

def set_status(v: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["status"] = str(v)


def set_phase(v: Any) -> None:
    phase = "" if v is None else str(v)
    with PROGRESS_LOCK:
        prev = PROGRESS["phase"]
        if phase == prev:
            return
        now = _now()
        started = _PHASE_START["t"]
        PROGRESS["phase"] = phase
        _PHASE_START["t"] = now
    if prev and started is not None:
        log_detail("Phase finished", phase=prev, duration=_fmt_seconds(now - started))
    if phase:
        log_detail("Phase started", phase=phase)


def set_grid(width: Any, height: Any) -> None:
    try:
        label = f"{int(width)} × {int(height)}"
    except (TypeError, ValueError):
        label = ""
    with PROGRESS_LOCK:
        PROGRESS["grid"] = label


def set_trials(done: Any, total: Any, best_score: Any = None) -> None:
    try:
        d = max(0, int(done))
        t = max(0, int(total))
    except (TypeError, ValueError):
        return
    with PROGRESS_LOCK:
        PROGRESS["trials_done"] = d
        PROGRESS["trials_total"] = t
        PROGRESS["percent"] = (100.0 * d / t) if t else 0.0
        if best_score is not None:
            try:
                PROGRESS["best_score"] = round(float(best_score), 4)
            except (TypeError, ValueError):
                pass
        _touch_elapsed_locked()


def set_message(msg: Any) -> None:
    with PROGRESS_LOCK:
        PROGRESS["message"] = "" if msg is None else str(msg)


def set_done(ok: Any = None, *, reason: Any = None, status: Optional[str] = None) -> None:
    """Mark the run complete.

    ``ok`` picks the final status (``"Done"`` or ``"Error"``) unless ``status``
    names one explicitly, as cancellation does. ``reason`` lands in ``message``.
    """
    ok_flag = None if ok is None else bool(ok)
    if status is None:
        status = "Error" if ok_flag is False else "Done"

    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        PROGRESS["status"] = status
        PROGRESS["ok"] = True if ok_flag is None else ok_flag
        PROGRESS["done"] = True
        if PROGRESS["ok"]:
            PROGRESS["percent"] = 100.0
        if reason is not None:
            PROGRESS["message"] = str(reason)
        elapsed = PROGRESS["elapsed"]
        best = PROGRESS["best_score"]
        message = PROGRESS["message"]
        final_ok = PROGRESS["ok"]
        _PHASE_START["t"] = None
    log_detail(
        "Run finished",
        status=status,
        ok=final_ok,
        duration=_fmt_seconds(elapsed),
        best_score=best,
        message=message,
    )


# ------------------------------
# Snapshots for the UI
# ------------------------------

def snapshot() -> Dict[str, Any]:
    with PROGRESS_LOCK:
        _touch_elapsed_locked()
        snap = {k: v for k, v in PROGRESS.items() if k != "elapsed_start"}
    snap["elapsed_str"] = fmt_elapsed(snap["elapsed"])
    return snap
