from __future__ import annotations

from typing import Iterable, List, Optional

import pandas as pd

from .plan import DEFAULT_RATE, Department, default_rate_for
from .ramp import as_int, as_nonneg_int


REQUIRED_DEPARTMENT_COLUMNS = {
    "name",
    "max_crew",
    "start_month",
    "end_month",
    "ramp_up_duration",
    "ramp_down_duration",
}

DEPARTMENT_COLUMNS = [
    "name",
    "max_crew",
    "start_month",
    "end_month",
    "ramp_up_duration",
    "ramp_down_duration",
    "rate",
]


def _numeric(df: pd.DataFrame, col: str) -> pd.Series:
    return pd.to_numeric(df[col], errors="coerce")


def validate_departments(df: pd.DataFrame, total_months: Optional[int] = None) -> pd.DataFrame:
    """
    Returns a copy of the department table with boolean flag columns.
    Nothing is corrected here; the flags show which rows the planner will adjust.
    """
    missing = REQUIRED_DEPARTMENT_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(
            f"Department table missing required columns: {sorted(missing)}. "
            f"Expected: {sorted(REQUIRED_DEPARTMENT_COLUMNS)}"
        )

    if df.empty:
        raise ValueError("Department table is empty")

    out = df.copy()

    start = _numeric(out, "start_month")
    end = _numeric(out, "end_month")
    up = _numeric(out, "ramp_up_duration")
    down = _numeric(out, "ramp_down_duration")
    crew = _numeric(out, "max_crew")

    # NaN comparisons are False, so garbage cells are caught by the negative/nonpositive flags instead
    out["flag_timeframe_inverted"] = (end <= start) | start.isna() | end.isna()
    out["flag_ramp_negative"] = (up < 0) | (down < 0) | up.isna() | down.isna()
    duration = end - start + 1
    out["flag_ramp_exceeds_timeframe"] = (up.clip(lower=0).fillna(0) + down.clip(lower=0).fillna(0)) >= duration
    out["flag_max_crew_nonpositive"] = ~(crew > 0)

    if total_months is not None:
        out["flag_outside_timeline"] = (start < 0) | (end >= int(total_months))
    else:
        out["flag_outside_timeline"] = start < 0

    flag_cols = [c for c in out.columns if c.startswith("flag_")]
    out[flag_cols] = out[flag_cols].astype(bool)
    return out


def departments_from_frame(df: pd.DataFrame, *, default_rate: float = DEFAULT_RATE) -> List[Department]:
    """
    Builds departments from an edited table. Non-numeric cells become 0;
    a missing or non-positive rate falls back to the role default.
    """
    missing = REQUIRED_DEPARTMENT_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"Department table missing required columns: {sorted(missing)}")

    depts: List[Department] = []
    for _, r in df.iterrows():
        name = str(r["name"]).strip() if pd.notna(r["name"]) else ""
        if not name:
            continue

        rate = pd.to_numeric(pd.Series([r.get("rate", None)]), errors="coerce").iloc[0]
        depts.append(
            Department(
                name=name,
                max_crew=as_nonneg_int(r["max_crew"]),
                start_month=as_nonneg_int(r["start_month"]),
                end_month=as_int(r["end_month"]),
                ramp_up_duration=as_nonneg_int(r["ramp_up_duration"]),
                ramp_down_duration=as_nonneg_int(r["ramp_down_duration"]),
                rate=float(rate) if pd.notna(rate) and float(rate) > 0 else default_rate_for(name, default_rate),
            )
        )
    return depts


def departments_to_frame(departments: Iterable[Department]) -> pd.DataFrame:
    rows = [
        {
            "name": d.name,
            "max_crew": d.max_crew,
            "start_month": d.start_month,
            "end_month": d.end_month,
            "ramp_up_duration": d.ramp_up_duration,
            "ramp_down_duration": d.ramp_down_duration,
            "rate": d.rate,
        }
        for d in departments
    ]
    return pd.DataFrame(rows, columns=DEPARTMENT_COLUMNS)
