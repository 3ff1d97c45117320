import pandas as pd
import pytest

from crewplan.plan import Department
from crewplan.validation import departments_from_frame, departments_to_frame, validate_departments


def test_validate_departments_flags_expected_columns():
    df = pd.DataFrame(
        {
            "name": ["Animation", "Lighting"],
            "max_crew": [10, 0],
            "start_month": [2, 8],
            "end_month": [14, 6],
            "ramp_up_duration": [3, -1],
            "ramp_down_duration": [2, 4],
        }
    )

    out = validate_departments(df, total_months=12)

    assert len(out) == 2

    # row 0: ok except it runs past a 12-month axis
    assert not out.loc[0, "flag_timeframe_inverted"]
    assert not out.loc[0, "flag_ramp_negative"]
    assert not out.loc[0, "flag_ramp_exceeds_timeframe"]
    assert not out.loc[0, "flag_max_crew_nonpositive"]
    assert out.loc[0, "flag_outside_timeline"]

    # row 1: inverted timeframe, negative ramp, zero crew
    assert out.loc[1, "flag_timeframe_inverted"]
    assert out.loc[1, "flag_ramp_negative"]
    assert out.loc[1, "flag_ramp_exceeds_timeframe"]
    assert out.loc[1, "flag_max_crew_nonpositive"]


def test_validate_departments_missing_columns():
    with pytest.raises(ValueError):
        validate_departments(pd.DataFrame({"name": ["x"]}))


def test_validate_departments_empty():
    cols = ["name", "max_crew", "start_month", "end_month", "ramp_up_duration", "ramp_down_duration"]
    with pytest.raises(ValueError):
        validate_departments(pd.DataFrame(columns=cols))


def test_departments_from_frame_sanitizes_cells():
    df = pd.DataFrame(
        {
            "name": ["Rigging", "", "Lighting"],
            "max_crew": ["5", 3, "abc"],
            "start_month": [0, 1, -4],
            "end_month": [6, 2, 3],
            "ramp_up_duration": [1, 0, None],
            "ramp_down_duration": ["x", 0, 2],
            "rate": [None, 100, 9000],
        }
    )

    depts = departments_from_frame(df)

    assert [d.name for d in depts] == ["Rigging", "Lighting"]
    assert depts[0] == Department("Rigging", 5, 0, 6, 1, 0, 8500.0)
    assert depts[1].max_crew == 0
    assert depts[1].start_month == 0
    assert depts[1].ramp_up_duration == 0
    assert depts[1].rate == 9000.0


def test_departments_frame_round_trip():
    depts = [Department("Animation", 10, 2, 14, 3, 2, 7000.0)]
    assert departments_from_frame(departments_to_frame(depts)) == depts


def test_departments_from_frame_falls_back_to_given_default_rate():
    df = pd.DataFrame(
        [
            {"name": "Editorial", "max_crew": 2, "start_month": 0, "end_month": 4, "ramp_up_duration": 0, "ramp_down_duration": 0, "rate": None},
            {"name": "Rigging", "max_crew": 2, "start_month": 0, "end_month": 4, "ramp_up_duration": 0, "ramp_down_duration": 0, "rate": 0},
        ]
    )

    depts = departments_from_frame(df, default_rate=9500.0)

    assert depts[0].rate == 9500.0
    assert depts[1].rate == 8500.0
