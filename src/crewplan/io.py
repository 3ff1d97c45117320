from __future__ import annotations

import io
import json
import logging
import os
from dataclasses import asdict
from typing import IO, Any, Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd
from openpyxl.styles import Font, PatternFill

from .plan import (
    DEFAULT_RATE,
    MONTH_NAMES,
    CrewPlan,
    Department,
    Phase,
    default_rate_for,
    monthly_summary,
)

logger = logging.getLogger(__name__)


PHASE_SUFFIX = " (Phase)"
RATE_HEADER = "Rate"

CREW_SHEET = "Crew Plan"
SUMMARY_SHEET = "Monthly Summary"
HEADER_COLOR = "E0E0E0"

# Blue, green, orange, purple, red
PHASE_COLORS: Tuple[str, ...] = ("1976D2", "4CAF50", "FF9800", "9C27B0", "F44336")

PLAN_JSON_VERSION = 1


# -----------------------------
# Helpers
# -----------------------------
def _standard_month(cell: str) -> Optional[str]:
    """'january' / 'JAN' / 'Jan' -> 'Jan'; None if not a month name."""
    key = cell.strip()[:3].title()
    return key if key in MONTH_NAMES else None


def _is_phase_row(name: str) -> bool:
    return name.endswith(":") or "Phase" in name or "Stage" in name


def _phase_name(name: str) -> str:
    if name.endswith(PHASE_SUFFIX):
        return name[: -len(PHASE_SUFFIX)].strip()
    if name.endswith(":"):
        return name[:-1].strip()
    return name


def _parse_header(raw: pd.DataFrame) -> Tuple[List[str], List[int], Optional[int]]:
    """
    Returns (month labels, month column positions, rate column position).

    Row 0 carries the year at the first month of each year, row 1 the month
    names. Without month names, every column between the first and the Rate
    column is a month and names are generated starting from January.
    """
    year_row = [str(c).strip() for c in raw.iloc[0].tolist()]
    month_row = [str(c).strip() for c in raw.iloc[1].tolist()]

    rate_col: Optional[int] = None
    for j, cell in enumerate(year_row):
        if j > 0 and cell.lower() == RATE_HEADER.lower():
            rate_col = j
            break

    last_col = rate_col if rate_col is not None else len(year_row)
    candidate_cols = list(range(1, last_col))

    named = [j for j in candidate_cols if _standard_month(month_row[j]) is not None]

    months: List[str] = []
    current_year = ""
    if named:
        cols = named
        prev_idx = -1
        for j in cols:
            if year_row[j]:
                current_year = year_row[j]
            month = _standard_month(month_row[j]) or ""
            idx = MONTH_NAMES.index(month)
            # month names wrapped around without an explicit year cell
            if year_row[j] == "" and prev_idx >= 0 and idx <= prev_idx and current_year.isdigit():
                current_year = str(int(current_year) + 1)
            prev_idx = idx
            months.append(f"{month} {current_year}".strip())
    else:
        logger.info("No month names found in header; generating default months")
        cols = candidate_cols
        for k, j in enumerate(cols):
            if year_row[j]:
                current_year = year_row[j]
            months.append(f"{MONTH_NAMES[k % 12]} {current_year}".strip())

    return months, cols, rate_col


def _crew_counts(cells: List[str]) -> Tuple[np.ndarray, bool]:
    """Returns (counts as ints with blanks/garbage as 0, whether any cell was numeric)."""
    values = pd.to_numeric(pd.Series(cells, dtype=object), errors="coerce")
    has_numeric = bool(values.notna().any())
    counts = values.fillna(0).clip(lower=0).astype(int).to_numpy()
    return counts, has_numeric


def _department_from_counts(name: str, counts: np.ndarray, rate: float, phase: Optional[int]) -> Optional[Department]:
    nonzero = np.flatnonzero(counts > 0)
    if len(nonzero) == 0:
        return None

    start = int(nonzero[0])
    end = int(nonzero[-1])
    max_crew = int(counts.max())

    at_max = np.flatnonzero(counts == max_crew)
    ramp_up = int(at_max[0]) - start
    ramp_down = end - int(at_max[-1])

    return Department(
        name=name,
        max_crew=max_crew,
        start_month=start,
        end_month=end,
        ramp_up_duration=ramp_up,
        ramp_down_duration=ramp_down,
        rate=rate,
        phase=phase,
    )


# -----------------------------
# Public API
# -----------------------------
def read_crew_plan_csv(
    file: Union[str, os.PathLike, IO[bytes], IO[str]],
    *,
    default_rate: float = DEFAULT_RATE,
) -> CrewPlan:
    """
    Reads a crew plan CSV:
      row 0: Department, <year>, ..., Rate
      row 1: (blank), Jan, Feb, ...
      then phase rows (X marks active months) and department rows (crew per month).

    Imported crew counts are kept as the plan's crew matrix; ramps and
    timeframes are derived from them.
    """
    raw = pd.read_csv(file, header=None, dtype=str, keep_default_na=False, skip_blank_lines=True)
    # short rows are padded with NaN even with keep_default_na=False
    raw = raw.fillna("")
    if len(raw) < 2:
        raise ValueError("Crew plan CSV needs a year header row and a month header row")

    months, month_cols, rate_col = _parse_header(raw)
    if not months:
        raise ValueError("Crew plan CSV has no month columns")

    phases: List[Phase] = []
    departments: List[Department] = []
    rows: List[np.ndarray] = []
    current_phase: Optional[int] = None

    for i in range(2, len(raw)):
        cells = [str(c) for c in raw.iloc[i].tolist()]
        name = cells[0].strip()
        if not name:
            continue

        month_cells = [cells[j].strip() for j in month_cols]

        if _is_phase_row(name):
            marked = [k for k, c in enumerate(month_cells) if c.upper() == "X"]
            if marked:
                start, end = marked[0], marked[-1]
            else:
                start, end = 0, len(months) - 1
            phases.append(Phase(name=_phase_name(name), start_month=start, end_month=end))
            current_phase = len(phases) - 1
            continue

        counts, has_numeric = _crew_counts(month_cells)
        if not has_numeric:
            logger.info("Skipping row with no crew counts: %s", name)
            continue

        rate = default_rate_for(name, default_rate)
        if rate_col is not None and rate_col < len(cells):
            parsed = pd.to_numeric(pd.Series([cells[rate_col].strip()]), errors="coerce").iloc[0]
            if pd.notna(parsed) and float(parsed) > 0:
                rate = float(parsed)

        dept = _department_from_counts(name, counts, rate, current_phase)
        if dept is None:
            logger.info("Skipping department with all zeros: %s", name)
            continue

        departments.append(dept)
        rows.append(counts)

    matrix = np.vstack(rows).astype(int) if rows else np.zeros((0, len(months)), dtype=int)

    return CrewPlan(
        months=tuple(months),
        departments=tuple(departments),
        phases=tuple(phases),
        crew_matrix=matrix,
    )


def _phase_of(dept: Department, phases: Tuple[Phase, ...]) -> Optional[int]:
    if dept.phase is not None and 0 <= dept.phase < len(phases):
        return dept.phase
    for k, phase in enumerate(phases):
        if phase.contains(dept.start_month):
            return k
    return None


def _format_rate(rate: float) -> str:
    return f"{float(rate):g}"


def _sheet_rows(plan: CrewPlan) -> List[Tuple[str, Optional[int], List[Any]]]:
    """
    Rows of the crew plan sheet as (kind, phase index, cells).

    kind is "header", "phase", "department" or "blank". Crew cells are ints
    with 0 as None; the rate cell is a float. Departments are grouped under
    their phase, with unassigned departments after the last phase.
    """
    n = plan.total_months

    year_cells: List[Any] = []
    prev_year: Optional[str] = None
    for label in plan.months:
        parts = label.split()
        year = parts[1] if len(parts) > 1 else ""
        year_cells.append(year if year != prev_year else None)
        prev_year = year

    def dept_row(idx: int) -> List[Any]:
        dept = plan.departments[idx]
        crew = [None if int(v) == 0 else int(v) for v in plan.crew_matrix[idx]]
        return [dept.name, *crew, float(dept.rate)]

    grouped: Dict[Optional[int], List[int]] = {}
    for idx, dept in enumerate(plan.departments):
        grouped.setdefault(_phase_of(dept, plan.phases), []).append(idx)

    rows: List[Tuple[str, Optional[int], List[Any]]] = [
        ("header", None, ["Department", *year_cells, RATE_HEADER]),
        ("header", None, [None, *[label.split()[0] for label in plan.months], None]),
    ]
    for k, phase in enumerate(plan.phases):
        marks = ["X" if phase.contains(m) else None for m in range(n)]
        rows.append(("phase", k, [f"{phase.name}{PHASE_SUFFIX}", *marks, None]))
        rows.extend(("department", k, dept_row(idx)) for idx in grouped.get(k, []))
        rows.append(("blank", None, [None] * (n + 2)))

    rows.extend(("department", None, dept_row(idx)) for idx in grouped.get(None, []))
    return rows


def _csv_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        return _format_rate(value)
    return str(value)


def crew_plan_to_csv(plan: CrewPlan) -> str:
    """
    Writes the plan in the same layout read_crew_plan_csv reads.
    Departments are grouped under their phase; zero crew cells are blank.
    """
    lines = [[_csv_cell(c) for c in cells] for _, _, cells in _sheet_rows(plan)]
    return pd.DataFrame(lines).to_csv(index=False, header=False)


# -----------------------------
# Excel export
# -----------------------------
def phase_color(index: int) -> str:
    """Hex RGB (no '#') for a phase, cycling through PHASE_COLORS."""
    return PHASE_COLORS[index % len(PHASE_COLORS)]


def _tint(rgb: str, alpha: float = 0.2) -> str:
    """rgb blended over white at the given opacity."""
    channels = [int(rgb[i : i + 2], 16) for i in (0, 2, 4)]
    return "".join(f"{round(c * alpha + 255 * (1 - alpha)):02X}" for c in channels)


def _fill(rgb: str) -> PatternFill:
    return PatternFill(fill_type="solid", start_color=f"FF{rgb}", end_color=f"FF{rgb}")


def crew_plan_to_excel(plan: CrewPlan) -> bytes:
    """
    Writes an .xlsx workbook with two sheets:
      "Crew Plan"       the crew plan layout, phase rows in the phase colour,
                        department rows in a light tint of their phase colour
      "Monthly Summary" total crew, labor cost and cumulative cost per month
    """
    rows = _sheet_rows(plan)
    buf = io.BytesIO()

    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame([cells for _, _, cells in rows]).to_excel(
            writer, sheet_name=CREW_SHEET, index=False, header=False
        )
        monthly_summary(plan).to_excel(writer, sheet_name=SUMMARY_SHEET, index=False)

        ws = writer.sheets[CREW_SHEET]
        ws.column_dimensions["A"].width = 30
        ws.freeze_panes = "B3"

        for r, (kind, phase_idx, _) in enumerate(rows, start=1):
            if kind == "header":
                for cell in ws[r]:
                    cell.fill = _fill(HEADER_COLOR)
                    cell.font = Font(bold=True)
            elif kind == "phase" and phase_idx is not None:
                for cell in ws[r]:
                    cell.fill = _fill(phase_color(phase_idx))
                    cell.font = Font(bold=True, italic=True, color="FFFFFFFF")
            elif kind == "department":
                ws.cell(row=r, column=1).font = Font(bold=True)
                if phase_idx is not None:
                    for cell in ws[r]:
                        cell.fill = _fill(_tint(phase_color(phase_idx)))

        writer.sheets[SUMMARY_SHEET].column_dimensions["A"].width = 15

    return buf.getvalue()


# -----------------------------
# Project save / load
# -----------------------------
_PLAN_KEYS = ("months", "phases", "departments", "crew_matrix")


def plan_to_json(plan: CrewPlan) -> str:
    """Whole-project snapshot: months, phases, departments and the crew matrix."""
    payload = {
        "version": PLAN_JSON_VERSION,
        "months": list(plan.months),
        "phases": [asdict(p) for p in plan.phases],
        "departments": [asdict(d) for d in plan.departments],
        "crew_matrix": plan.crew_matrix.astype(int).tolist(),
    }
    return json.dumps(payload, indent=2)


def plan_from_json(text: Union[str, bytes]) -> CrewPlan:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid project JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ValueError("Project JSON must be an object")
    missing = [k for k in _PLAN_KEYS if k not in payload]
    if missing:
        raise ValueError(f"Project JSON missing keys: {missing}. Required: {list(_PLAN_KEYS)}")

    try:
        months = tuple(str(m) for m in payload["months"])
        phases = tuple(Phase(**p) for p in payload["phases"])
        departments = tuple(Department(**d) for d in payload["departments"])
    except TypeError as e:
        raise ValueError(f"Project JSON has malformed phases or departments: {e}") from e

    if departments:
        matrix = np.array(payload["crew_matrix"], dtype=int)
    else:
        matrix = np.zeros((0, len(months)), dtype=int)
    if matrix.shape != (len(departments), len(months)):
        raise ValueError(
            f"crew_matrix shape {matrix.shape} does not match "
            f"{len(departments)} departments x {len(months)} months"
        )

    return CrewPlan(months=months, departments=departments, phases=phases, crew_matrix=matrix)


def read_plan_json(file: Union[str, os.PathLike, IO[bytes], IO[str]]) -> CrewPlan:
    """Loads a project saved with plan_to_json from a path or an open file."""
    if isinstance(file, (str, os.PathLike)):
        with open(file, "rb") as f:
            return plan_from_json(f.read())
    return plan_from_json(file.read())


__all__ = [
    "PHASE_COLORS",
    "read_crew_plan_csv",
    "crew_plan_to_csv",
    "crew_plan_to_excel",
    "phase_color",
    "plan_to_json",
    "plan_from_json",
    "read_plan_json",
]
