# src/crewplan/plan.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .ramp import as_int, as_nonneg_int, build_crew_curve, normalize_ramp

logger = logging.getLogger(__name__)


MONTH_NAMES: Tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

DEFAULT_RATE: float = 8000.0

# Checked in order; first keyword match wins
_ROLE_RATES: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    (("Sup", "Director", "Lead"), 12000.0),
    (("Technical", "Developer"), 10000.0),
    (("Animator", "Animation"), 7000.0),
    (("Lighter", "Lighting"), 7500.0),
    (("VFX", "Effect"), 8000.0),
    (("Composite", "Comp"), 7800.0),
    (("Modeller", "Modeling"), 7500.0),
    (("Rigger", "Rigging"), 8500.0),
    (("Surfacing", "Surface"), 7500.0),
)


# -----------------------------
# Data models
# -----------------------------
@dataclass(frozen=True)
class Phase:
    name: str
    start_month: int
    end_month: int

    def contains(self, month: int) -> bool:
        return self.start_month <= month <= self.end_month


@dataclass(frozen=True)
class Department:
    name: str
    max_crew: int
    start_month: int
    end_month: int
    ramp_up_duration: int = 0
    ramp_down_duration: int = 0
    rate: float = DEFAULT_RATE

    # Index into CrewPlan.phases, None when unassigned
    phase: Optional[int] = None

    @property
    def duration(self) -> int:
        return self.end_month - self.start_month + 1


@dataclass(frozen=True)
class CrewPlan:
    """
    A department timeline plus the crew matrix it owns.

    crew_matrix has shape (len(departments), len(months)); row i is the
    crew curve of departments[i].
    """
    months: Tuple[str, ...]
    departments: Tuple[Department, ...]
    phases: Tuple[Phase, ...] = ()
    crew_matrix: np.ndarray = field(default_factory=lambda: np.zeros((0, 0), dtype=int), compare=False)

    @property
    def total_months(self) -> int:
        return len(self.months)


# -----------------------------
# Helpers
# -----------------------------
def default_rate_for(name: str, default: float = DEFAULT_RATE) -> float:
    """Role-based default monthly rate, keyed off the department name. Unknown roles get `default`."""
    for keywords, rate in _ROLE_RATES:
        if any(k in name for k in keywords):
            return rate
    return float(default)


def build_months(start_year: int, n_years: int) -> List[str]:
    """Month axis labels, e.g. build_months(2025, 1) -> ["Jan 2025", ..., "Dec 2025"]."""
    if n_years < 1:
        raise ValueError("n_years must be >= 1")
    return [f"{m} {start_year + y}" for y in range(int(n_years)) for m in MONTH_NAMES]


def _normalized_ramps(dept: Department) -> Department:
    up, down = normalize_ramp(dept.ramp_up_duration, dept.ramp_down_duration, dept.duration)
    if (up, down) == (dept.ramp_up_duration, dept.ramp_down_duration):
        return dept
    return replace(dept, ramp_up_duration=up, ramp_down_duration=down)


# -----------------------------
# Department edits
# -----------------------------
def update_department_timeframe(dept: Department) -> Department:
    """
    Called after start_month / end_month change.
    Keeps end_month after start_month, then re-fits the ramps.
    """
    start = max(as_int(dept.start_month), 0)
    end = as_int(dept.end_month)
    if end <= start:
        logger.debug("%s: end month %s not after start %s; moved to %s", dept.name, end, start, start + 1)
        end = start + 1

    out = replace(dept, start_month=start, end_month=end)
    return _normalized_ramps(out)


def update_department_ramp(dept: Department) -> Department:
    """Called after ramp durations change. Bad durations become 0, then ramps are re-fit."""
    out = replace(
        dept,
        ramp_up_duration=as_nonneg_int(dept.ramp_up_duration),
        ramp_down_duration=as_nonneg_int(dept.ramp_down_duration),
    )
    return _normalized_ramps(out)


def department_curve(dept: Department, total_months: int, *, out: Optional[np.ndarray] = None) -> np.ndarray:
    return build_crew_curve(
        dept.start_month,
        dept.end_month,
        dept.ramp_up_duration,
        dept.ramp_down_duration,
        dept.max_crew,
        total_months,
        out=out,
    )


# -----------------------------
# Plan construction + edits
# -----------------------------
def build_crew_matrix(departments: Sequence[Department], total_months: int) -> np.ndarray:
    matrix = np.zeros((len(departments), int(total_months)), dtype=int)
    for i, dept in enumerate(departments):
        department_curve(dept, total_months, out=matrix[i])
    return matrix


def new_plan(
    months: Sequence[str],
    departments: Sequence[Department],
    phases: Sequence[Phase] = (),
) -> CrewPlan:
    """Normalizes every department and generates its crew curve."""
    depts = tuple(update_department_ramp(update_department_timeframe(d)) for d in departments)
    return CrewPlan(
        months=tuple(months),
        departments=depts,
        phases=tuple(phases),
        crew_matrix=build_crew_matrix(depts, len(months)),
    )


def replace_department(
    plan: CrewPlan,
    index: int,
    department: Department,
    *,
    timeframe_changed: bool = False,
) -> CrewPlan:
    """
    Returns a new plan with departments[index] swapped for the edited
    department. Only that department's row of the crew matrix is rebuilt.
    """
    if not (0 <= index < len(plan.departments)):
        raise IndexError(f"Department index {index} out of range (0..{len(plan.departments) - 1})")

    if timeframe_changed:
        dept = update_department_timeframe(department)
    else:
        dept = update_department_ramp(department)

    depts = list(plan.departments)
    depts[index] = dept

    matrix = plan.crew_matrix.copy()
    department_curve(dept, plan.total_months, out=matrix[index])

    return replace(plan, departments=tuple(depts), crew_matrix=matrix)


def apply_department_edits(plan: CrewPlan, edited: Sequence[Department]) -> CrewPlan:
    """
    Applies an edited department list (e.g. from a table editor) to the plan.

    Rows are matched to existing departments by name, in order for repeated
    names. Matched departments keep their phase; unchanged ones also keep
    their crew row as-is (imported counts survive). Edited or new
    departments are re-fitted and get a freshly built row. Departments
    missing from `edited` are dropped.
    """
    by_name: Dict[str, List[int]] = {}
    for i, d in enumerate(plan.departments):
        by_name.setdefault(d.name, []).append(i)

    depts: List[Department] = []
    rows: List[np.ndarray] = []
    for dept in edited:
        matches = by_name.get(dept.name)
        if matches:
            i = matches.pop(0)
            old = plan.departments[i]
            dept = replace(dept, phase=old.phase)
            if dept == old:
                depts.append(old)
                rows.append(plan.crew_matrix[i].copy())
                continue
            if (dept.start_month, dept.end_month) != (old.start_month, old.end_month):
                dept = update_department_timeframe(dept)
            else:
                dept = update_department_ramp(dept)
        else:
            dept = update_department_ramp(update_department_timeframe(dept))

        depts.append(dept)
        rows.append(department_curve(dept, plan.total_months))

    matrix = np.vstack(rows).astype(int) if rows else np.zeros((0, plan.total_months), dtype=int)
    return replace(plan, departments=tuple(depts), crew_matrix=matrix)


# -----------------------------
# Views + totals
# -----------------------------
def crew_matrix_frame(plan: CrewPlan) -> pd.DataFrame:
    return pd.DataFrame(
        plan.crew_matrix,
        index=[d.name for d in plan.departments],
        columns=list(plan.months),
    )


def monthly_summary(plan: CrewPlan) -> pd.DataFrame:
    """Per-month total crew, labor cost (crew * monthly rate) and cumulative cost."""
    rates = np.array([float(d.rate) for d in plan.departments], dtype=float)
    if len(plan.departments):
        total_crew = plan.crew_matrix.sum(axis=0)
        labor_cost = rates @ plan.crew_matrix
    else:
        total_crew = np.zeros(plan.total_months, dtype=int)
        labor_cost = np.zeros(plan.total_months, dtype=float)

    return pd.DataFrame(
        {
            "month": list(plan.months),
            "total_crew": total_crew.astype(int),
            "labor_cost": labor_cost.astype(float),
            "cumulative_cost": np.cumsum(labor_cost).astype(float),
        }
    )


def peak_crew(plan: CrewPlan) -> int:
    if plan.crew_matrix.size == 0:
        return 0
    return int(plan.crew_matrix.sum(axis=0).max())


def total_project_cost(plan: CrewPlan) -> float:
    return float(monthly_summary(plan)["labor_cost"].sum())


__all__ = [
    "MONTH_NAMES",
    "DEFAULT_RATE",
    "Phase",
    "Department",
    "CrewPlan",
    "default_rate_for",
    "build_months",
    "update_department_timeframe",
    "update_department_ramp",
    "department_curve",
    "build_crew_matrix",
    "new_plan",
    "replace_department",
    "apply_department_edits",
    "crew_matrix_frame",
    "monthly_summary",
    "peak_crew",
    "total_project_cost",
]
