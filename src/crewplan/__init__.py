# src/crewplan/__init__.py
from __future__ import annotations

# -----------------------------
# Ramp / crew curve core
# -----------------------------
from .ramp import (
    ramp_value,
    normalize_ramp,
    build_crew_curve,
)

# -----------------------------
# Departments + plan
# -----------------------------
from .plan import (
    Phase,
    Department,
    CrewPlan,
    default_rate_for,
    build_months,
    update_department_timeframe,
    update_department_ramp,
    department_curve,
    new_plan,
    replace_department,
    apply_department_edits,
    crew_matrix_frame,
    monthly_summary,
    peak_crew,
    total_project_cost,
)

from .io import (
    read_crew_plan_csv,
    crew_plan_to_csv,
    crew_plan_to_excel,
    plan_to_json,
    plan_from_json,
    read_plan_json,
)

__all__ = [
    # Core
    "ramp_value",
    "normalize_ramp",
    "build_crew_curve",
    # Plan
    "Phase",
    "Department",
    "CrewPlan",
    "default_rate_for",
    "build_months",
    "update_department_timeframe",
    "update_department_ramp",
    "department_curve",
    "new_plan",
    "replace_department",
    "apply_department_edits",
    "crew_matrix_frame",
    "monthly_summary",
    "peak_crew",
    "total_project_cost",
    # Import / export
    "read_crew_plan_csv",
    "crew_plan_to_csv",
    "crew_plan_to_excel",
    "plan_to_json",
    "plan_from_json",
    "read_plan_json",
]
