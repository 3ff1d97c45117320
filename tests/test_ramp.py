import numpy as np
import pytest

from crewplan.ramp import as_int, as_nonneg_int, build_crew_curve, normalize_ramp, ramp_value


def test_ramp_value_completes_at_full_value():
    for n in (1, 2, 3, 7, 12):
        for m in (1, 4, 9, 25):
            assert ramp_value(n, n, m) == m


def test_ramp_value_degenerate_inputs():
    assert ramp_value(1, 3, 0) == 0
    assert ramp_value(1, 3, -5) == 0
    assert ramp_value(1, 0, 6) == 6
    assert ramp_value(1, -2, 6) == 6


def test_ramp_value_never_rounds_to_zero():
    # 1 * 1 / 10 = 0.1 would round to 0
    assert ramp_value(1, 10, 1) == 1
    assert ramp_value(0, 4, 8) == 1


def test_ramp_value_rounds_half_up():
    # 5 * 1 / 2 = 2.5
    assert ramp_value(1, 2, 5) == 3
    # 3 * 1 / 2 = 1.5
    assert ramp_value(1, 2, 3) == 2


def test_normalize_ramp_no_change_when_plateau_remains():
    assert normalize_ramp(2, 3, 6) == (2, 3)
    assert normalize_ramp(0, 0, 1) == (0, 0)


def test_normalize_ramp_equal_split_gives_leftover_to_ramp_up():
    assert normalize_ramp(5, 5, 6) == (3, 2)


def test_normalize_ramp_proportional_split():
    # max total 3, ratio 1:9 -> floors (0, 2), leftover to down -> (0, 3) -> min 1 -> (1, 3) -> shrink down
    assert normalize_ramp(1, 9, 4) == (1, 2)
    # max total 9, ratio 2:1 -> (6, 3)
    assert normalize_ramp(8, 4, 10) == (6, 3)


def test_normalize_ramp_two_month_timeframe_with_both_ramps():
    # one ramp month available: it goes to the longer ramp, ramp-up when equal
    assert normalize_ramp(1, 1, 2) == (1, 0)
    assert normalize_ramp(3, 1, 2) == (1, 0)
    assert normalize_ramp(1, 3, 2) == (0, 1)


def test_normalize_ramp_single_ramp_takes_all_available_months():
    assert normalize_ramp(10, 0, 5) == (4, 0)
    assert normalize_ramp(0, 10, 5) == (0, 4)


def test_normalize_ramp_one_month_timeframe_forces_zero():
    assert normalize_ramp(3, 2, 1) == (0, 0)
    assert normalize_ramp(1, 0, 1) == (0, 0)


def test_normalize_ramp_sanitizes_bad_values():
    assert normalize_ramp("abc", -3, 5) == (0, 0)
    assert normalize_ramp(float("nan"), None, 5) == (0, 0)
    assert normalize_ramp("2", 1.0, 5) == (2, 1)


def test_normalize_ramp_invariant_and_idempotent():
    for duration in range(1, 15):
        for up in range(0, 16):
            for down in range(0, 16):
                once = normalize_ramp(up, down, duration)
                assert once[0] >= 0 and once[1] >= 0
                if duration == 1:
                    assert once == (0, 0)
                else:
                    assert once[0] + once[1] < duration
                assert normalize_ramp(once[0], once[1], duration) == once


def test_build_crew_curve_example():
    curve = build_crew_curve(0, 5, 2, 2, 4, 6)
    assert curve.tolist() == [2, 4, 4, 4, 2, 1]


def test_build_crew_curve_zero_outside_timeframe():
    curve = build_crew_curve(3, 8, 2, 1, 6, 12)
    assert curve[:3].tolist() == [0, 0, 0]
    assert curve[9:].tolist() == [0, 0, 0]
    assert curve[3:9].tolist() == [3, 6, 6, 6, 6, 1]


def test_build_crew_curve_at_least_one_inside_timeframe():
    for start in range(0, 4):
        for end in range(start + 1, 10):
            duration = end - start + 1
            for up in range(0, 5):
                for down in range(0, 5):
                    u, d = normalize_ramp(up, down, duration)
                    for crew in (1, 2, 7):
                        curve = build_crew_curve(start, end, u, d, crew, 10)
                        assert (curve[start : end + 1] >= 1).all()
                        assert (curve[start : end + 1] <= crew).all()
                        assert curve[:start].sum() == 0
                        assert curve[end + 1 :].sum() == 0


def test_build_crew_curve_zero_crew_is_all_zero():
    assert build_crew_curve(1, 4, 1, 1, 0, 6).tolist() == [0] * 6


def test_build_crew_curve_skips_months_past_axis():
    curve = build_crew_curve(4, 9, 1, 2, 3, 6)
    assert len(curve) == 6
    assert curve.tolist() == [0, 0, 0, 0, 3, 3]


def test_build_crew_curve_writes_into_caller_buffer():
    buf = np.full(6, 99, dtype=int)
    out = build_crew_curve(0, 5, 2, 2, 4, 6, out=buf)
    assert out is buf
    assert buf.tolist() == [2, 4, 4, 4, 2, 1]


def test_build_crew_curve_sanitizes_bad_ramps():
    assert build_crew_curve(0, 3, "x", -1, 2, 4).tolist() == [2, 2, 2, 2]


def test_build_crew_curve_rejects_wrong_buffer_length():
    with pytest.raises(ValueError, match="total_months=6"):
        build_crew_curve(0, 5, 2, 2, 4, 6, out=np.zeros(5, dtype=int))


def test_public_int_coercion_helpers():
    assert as_nonneg_int("3") == 3
    assert as_nonneg_int(-2) == 0
    assert as_nonneg_int(float("nan")) == 0
    assert as_int("-4") == -4
