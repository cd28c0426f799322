import os
from typing import Optional


def _env_seed(raw: Optional[str]) -> Optional[int]:
    text = (raw or "").strip()
    if not text:
        return None
    return int(text)


# ======= Search caps =======
TRIALS         = int(os.getenv("BB_TRIALS", "100000"))
TOP_K          = int(os.getenv("BB_TOP_K", "10"))

# Cancellation is checked (and progress published) once per chunk of trials.
PROGRESS_EVERY = int(os.getenv("BB_PROGRESS_EVERY", "1000"))

# ======= Randomness =======
# Unset means every generation draws a fresh unseeded generator.
SEED = _env_seed(os.getenv("BB_SEED"))

# ======= Web guard =======
MAX_CELLS  = int(os.getenv("BB_MAX_CELLS", "2500"))
# Each trial shuffles the whole pool, so total item count bounds the search cost.
MAX_SUPPLY = int(os.getenv("BB_MAX_SUPPLY", "10000"))

# ======= Output names =======
LOG_FILE = os.getenv("BB_LOG_FILE", os.path.join("logs", "generation.log"))


class CFG:
    TRIALS         = TRIALS
    TOP_K          = TOP_K
    PROGRESS_EVERY = PROGRESS_EVERY

    SEED = SEED

    MAX_CELLS  = MAX_CELLS
    MAX_SUPPLY = MAX_SUPPLY

    LOG_FILE = LOG_FILE


__all__ = ["CFG"]
