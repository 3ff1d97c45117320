import streamlit as st

from crewplan.settings import configure_logging, load_settings

settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title="Crew Ramp Planner", layout="wide")

st.title("Crew Ramp Planner — MVP")
st.write(
    """
This app builds **monthly crew curves per department** from a timeframe, a peak crew size and
ramp-up / ramp-down durations.

Included:
- Department editor with automatic ramp fitting (at least one plateau month is always kept)
- Crew matrix (department x month) + monthly totals and labor cost
- CSV import / export in the crew plan spreadsheet layout
"""
)

st.info("Use the left sidebar to open the crew plan or import/export a CSV.")
