# app/pages/1_Crew_Plan.py
from __future__ import annotations

import streamlit as st

from crewplan.plan import (
    CrewPlan,
    Department,
    apply_department_edits,
    build_months,
    crew_matrix_frame,
    monthly_summary,
    new_plan,
    peak_crew,
    total_project_cost,
)
from crewplan.settings import load_settings
from crewplan.validation import departments_from_frame, departments_to_frame, validate_departments


# -----------------------------
# Page config
# -----------------------------
st.set_page_config(page_title="Crew Plan", layout="wide")
st.title("Crew Plan")
st.caption("Edit departments; crew curves are recomputed and ramps re-fitted on every change.")

settings = load_settings()

with st.sidebar:
    st.header("Timeline")
    start_year = st.number_input("Start year", min_value=1900, max_value=2200, value=int(settings.timeline_start_year), step=1)
    n_years = st.number_input("Years", min_value=1, max_value=10, value=int(settings.timeline_years), step=1)

    if st.button("Start a new plan"):
        st.session_state.pop("crew_plan", None)

plan = st.session_state.get("crew_plan")
if not isinstance(plan, CrewPlan):
    months = build_months(int(start_year), int(n_years))
    plan = new_plan(
        months,
        [
            Department("Animation", max_crew=10, start_month=2, end_month=14, ramp_up_duration=3, ramp_down_duration=2, rate=7000.0),
            Department("Lighting", max_crew=6, start_month=6, end_month=18, ramp_up_duration=2, ramp_down_duration=3, rate=7500.0),
            Department("Compositing", max_crew=5, start_month=8, end_month=20, ramp_up_duration=2, ramp_down_duration=2, rate=7800.0),
        ],
    )

st.caption(f"Month axis: {plan.months[0]} .. {plan.months[-1]} ({plan.total_months} months, indexed from 0)")


# -----------------------------
# Department editor
# -----------------------------
st.subheader("Departments")

edited_df = st.data_editor(
    departments_to_frame(plan.departments),
    num_rows="dynamic",
    use_container_width=True,
    key="departments_editor",
)

try:
    flags = validate_departments(edited_df, total_months=plan.total_months)
except Exception as e:
    st.error(str(e))
    st.stop()

flag_cols = [c for c in flags.columns if c.startswith("flag_")]
flagged = flags[flags[flag_cols].any(axis=1)]
if not flagged.empty:
    with st.expander(f"{len(flagged)} department(s) will be adjusted", expanded=False):
        st.dataframe(flagged[["name", *flag_cols]], use_container_width=True)

try:
    edited = departments_from_frame(edited_df, default_rate=settings.default_rate)
    plan = apply_department_edits(plan, edited)
except Exception as e:
    st.error(f"Could not update plan: {e}")
    st.stop()

st.session_state["crew_plan"] = plan


# -----------------------------
# Results
# -----------------------------
c1, c2, c3 = st.columns(3)
c1.metric("Departments", f"{len(plan.departments)}")
c2.metric("Peak crew", f"{peak_crew(plan)}")
c3.metric("Total labor cost", f"{total_project_cost(plan):,.0f}")

st.subheader("Crew matrix")
st.dataframe(crew_matrix_frame(plan), use_container_width=True)

summary = monthly_summary(plan)

st.subheader("Monthly totals")
st.line_chart(summary.set_index("month")[["total_crew"]])
st.dataframe(summary, use_container_width=True)

st.download_button(
    "Download monthly totals (CSV)",
    data=summary.to_csv(index=False).encode("utf-8"),
    file_name="crew_monthly_totals.csv",
    mime="text/csv",
)

with st.expander("Fitted department parameters"):
    st.dataframe(departments_to_frame(plan.departments), use_container_width=True)
