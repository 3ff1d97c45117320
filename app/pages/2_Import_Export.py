from __future__ import annotations

import streamlit as st

from crewplan.io import crew_plan_to_csv, crew_plan_to_excel, plan_to_json, read_crew_plan_csv, read_plan_json
from crewplan.plan import CrewPlan, crew_matrix_frame, peak_crew, total_project_cost
from crewplan.settings import load_settings

st.set_page_config(page_title="Import / Export", layout="wide")
st.title("Crew Plan Import / Export")
st.caption(
    "CSV layout: row 1 = Department + years + Rate, row 2 = month names, then phase rows "
    "(X marks active months) and department rows (crew per month). "
    "Project JSON holds the whole plan (months, phases, departments, crew matrix)."
)

settings = load_settings()

c_csv, c_json = st.columns(2)
with c_csv:
    uploaded = st.file_uploader("Upload crew plan CSV", type=["csv"])
with c_json:
    uploaded_project = st.file_uploader("Open project (JSON)", type=["json"])

loaded = None
if uploaded is not None:
    try:
        loaded = read_crew_plan_csv(uploaded, default_rate=settings.default_rate)
    except Exception as e:
        st.error(f"Could not read crew plan CSV: {e}")
        st.stop()
elif uploaded_project is not None:
    try:
        loaded = read_plan_json(uploaded_project)
    except Exception as e:
        st.error(f"Could not open project: {e}")
        st.stop()

if loaded is not None:
    st.session_state["crew_plan"] = loaded
    st.success(
        f"Loaded {len(loaded.departments)} departments and {len(loaded.phases)} phases "
        f"across {loaded.total_months} months. Saved to session_state as `crew_plan`."
    )

plan = st.session_state.get("crew_plan")
if not isinstance(plan, CrewPlan):
    st.info("Upload a CSV or project file, or build a plan on the Crew Plan page first.")
    st.stop()

c1, c2, c3 = st.columns(3)
c1.metric("Departments", f"{len(plan.departments)}")
c2.metric("Peak crew", f"{peak_crew(plan)}")
c3.metric("Total labor cost", f"{total_project_cost(plan):,.0f}")

st.dataframe(crew_matrix_frame(plan), use_container_width=True)

d1, d2, d3 = st.columns(3)
d1.download_button(
    "Download crew plan (CSV)",
    data=crew_plan_to_csv(plan).encode("utf-8"),
    file_name="crew_plan.csv",
    mime="text/csv",
)
d2.download_button(
    "Download crew plan (Excel)",
    data=crew_plan_to_excel(plan),
    file_name="crew_plan.xlsx",
    mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)
d3.download_button(
    "Save project (JSON)",
    data=plan_to_json(plan).encode("utf-8"),
    file_name="crew_plan_project.json",
    mime="application/json",
)
