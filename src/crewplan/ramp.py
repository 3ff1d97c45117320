# src/crewplan/ramp.py
from __future__ import annotations

import logging
import math
from typing import Any, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)


# -----------------------------
# Helpers
# -----------------------------
def as_nonneg_int(x: Any) -> int:
    """Coerces x to an int >= 0. Non-numeric, NaN and negative values become 0."""
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(v) or v < 0:
        return 0
    return int(v)


def as_int(x: Any) -> int:
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(v):
        return 0
    return int(v)


def _round_half_up(x: float) -> int:
    # Python's round() is banker's rounding; ramps round 0.5 up
    return int(math.floor(x + 0.5))


def _split_proportionally(up: int, down: int, max_total: int) -> Tuple[int, int]:
    """
    Splits max_total months between two non-zero ramps in the ratio up:down.

    Largest remainder: floor shares first, the leftover month goes to the
    larger remainder (ramp-up on ties). Each share is then floored up to 1
    and, if that overflows max_total, the larger share gives back the
    overflow. Equal shares: the originally shorter ramp gives it back,
    ramp-down if the originals were equal too.
    """
    total = up + down
    up_share, up_rem = divmod(max_total * up, total)
    down_share, down_rem = divmod(max_total * down, total)

    leftover = max_total - up_share - down_share
    if leftover > 0:
        if up_rem >= down_rem:
            up_share += leftover
        else:
            down_share += leftover

    up_share = max(1, up_share)
    down_share = max(1, down_share)

    overflow = up_share + down_share - max_total
    if overflow > 0:
        if up_share > down_share or (up_share == down_share and up < down):
            up_share -= overflow
        else:
            down_share -= overflow

    return up_share, down_share


# -----------------------------
# Public API
# -----------------------------
def ramp_value(current_step: Any, total_steps: Any, max_value: Any) -> int:
    """
    Crew size at a given step of a linear ramp.

    Never rounds a ramp month down to 0: any step of a ramp towards a
    positive max_value yields at least 1.
    """
    m = as_int(max_value)
    if m <= 0:
        return 0

    n = as_int(total_steps)
    if n <= 0:
        return m

    step = as_int(current_step)
    return max(1, _round_half_up(m * step / n))


def normalize_ramp(ramp_up: Any, ramp_down: Any, duration: Any) -> Tuple[int, int]:
    """
    Clamps ramp durations so ramp_up + ramp_down < duration, leaving at least
    one plateau month. A one-month timeframe forces both ramps to 0.

    Returns the normalized (ramp_up, ramp_down) pair. Never raises.
    """
    up = as_nonneg_int(ramp_up)
    down = as_nonneg_int(ramp_down)
    d = max(as_int(duration), 1)

    if up + down < d:
        return up, down

    max_total = d - 1

    if max_total <= 0:
        new_up, new_down = 0, 0
    elif up > 0 and down > 0:
        new_up, new_down = _split_proportionally(up, down, max_total)
    elif up > 0:
        new_up, new_down = max_total, 0
    else:
        new_up, new_down = 0, max_total

    logger.debug(
        "Adjusted ramps for %d-month timeframe: up %d -> %d, down %d -> %d",
        d, up, new_up, down, new_down,
    )
    return new_up, new_down


def build_crew_curve(
    start_month: Any,
    end_month: Any,
    ramp_up: Any,
    ramp_down: Any,
    max_crew: Any,
    total_months: int,
    *,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Per-month crew counts for one department across the whole month axis.

    Layout inside [start_month, end_month]:
      ramp-up   start .. start+ramp_up-1
      plateau   start+ramp_up .. end-ramp_down   (max_crew)
      ramp-down end-ramp_down+1 .. end

    Months outside the timeframe are 0. Months inside are >= 1 when
    max_crew > 0. Indices outside 0..total_months-1 are skipped.

    If out is given it is cleared, rewritten in place and returned.
    """
    n_months = max(as_int(total_months), 0)
    if out is None:
        curve = np.zeros(n_months, dtype=int)
    else:
        if len(out) != n_months:
            raise ValueError(f"out buffer length {len(out)} does not match total_months={n_months}")
        curve = out
        curve[:] = 0

    start = as_int(start_month)
    end = as_int(end_month)
    up = as_nonneg_int(ramp_up)
    down = as_nonneg_int(ramp_down)
    peak = max(as_int(max_crew), 0)

    # un-normalized ramps can overhang the timeframe; those writes are dropped too
    def _put(month: int, value: int) -> None:
        if 0 <= month < n_months and start <= month <= end:
            curve[month] = value

    plateau_start = start + up
    plateau_end = end - down

    for i in range(up):
        _put(start + i, ramp_value(i + 1, up, peak))

    for month in range(plateau_start, plateau_end + 1):
        _put(month, peak)

    for i in range(down):
        _put(plateau_end + 1 + i, ramp_value(down - i - 1, down, peak))

    if peak > 0:
        lo = max(start, 0)
        hi = min(end, n_months - 1)
        if lo <= hi:
            window = curve[lo : hi + 1]
            window[window < 1] = 1

    return curve


__all__ = [
    "as_int",
    "as_nonneg_int",
    "ramp_value",
    "normalize_ramp",
    "build_crew_curve",
]
