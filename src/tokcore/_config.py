import logging
import os
from typing import Final

log = logging.getLogger(__name__)

NUM_WORKERS_ENV: Final[str] = "TOKCORE_NUM_WORKERS"

# u32 ranks cross the wire boundary
MAX_RANK: Final[int] = 0xFFFF_FFFF


def default_num_workers() -> int:
    """Return the batch worker count (respects env var override)."""
    raw = os.environ.get(NUM_WORKERS_ENV, "").strip()
    if raw:
        try:
            # "0" interpreted as 1 worker
            return max(1, int(raw))
        except ValueError:
            log.warning(f"ignoring invalid {NUM_WORKERS_ENV}={raw!r}, using CPU count")
    return os.cpu_count() or 1
