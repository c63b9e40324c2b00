import math

import jax
import pytest

from sgdp4.epoch import Epoch

_SEC_TOL = 1e-6


# ──────────────────────────────────────────────
# Construction
# ──────────────────────────────────────────────


class TestEpochConstruction:
    @pytest.mark.parametrize(
        "args, expected",
        [
            ((2000, 1, 1, 12, 0, 0.0), (2000, 1, 1, 12, 0, 0.0)),
            ((2000, 1, 1), (2000, 1, 1, 0, 0, 0.0)),
            ((1999, 12, 31, 23, 59, 59.75), (1999, 12, 31, 23, 59, 59.75)),
            ((2020, 6, 15, 10, 30, 15.123), (2020, 6, 15, 10, 30, 15.123)),
            (("2020-06-15T10:30:15.500Z",), (2020, 6, 15, 10, 30, 15.5)),
            (("2024-02-29",), (2024, 2, 29, 0, 0, 0.0)),
        ],
    )
    def test_caldate(self, args, expected):
        *date, second = Epoch(*args).caldate()
        assert tuple(date) == expected[:5]
        assert second == pytest.approx(expected[5], abs=_SEC_TOL)

    def test_string_matches_components(self):
        assert Epoch("2024-03-15T06:30:45Z") == Epoch(2024, 3, 15, 6, 30, 45.0)

    def test_hour_overflow_rolls_day(self):
        assert Epoch(2000, 1, 1, 24) == Epoch(2000, 1, 2)

    def test_copy_is_equal(self):
        src = Epoch.from_jd(2454729.5, 0.51782528)
        assert Epoch(src) == src
        assert Epoch(src) is not src

    @pytest.mark.parametrize("text", ["not-a-date", "2024-03-15 06:30:45", "2024-3-15", "2024-03-15T06:30Z"])
    def test_rejects_non_iso_string(self, text):
        with pytest.raises(ValueError, match="not ISO 8601"):
            Epoch(text)

    def test_rejects_julian_date_number(self):
        with pytest.raises(ValueError, match="Cannot construct Epoch"):
            Epoch(2451545.0)

    @pytest.mark.parametrize("args", [(2000, 1), (2000, 1, 1, 0, 0, 0.0, 0)])
    def test_rejects_argument_count(self, args):
        with pytest.raises(ValueError, match="3 to 6"):
            Epoch(*args)


class TestEpochFromJD:
    def test_from_jd(self):
        assert Epoch.from_jd(2451545.0) == Epoch(2000, 1, 1, 12)

    def test_from_split_jd(self):
        epc = Epoch.from_jd(2454729.5, 0.51782528)
        year, month, day, hour, minute, second = epc.caldate()
        assert (year, month, day, hour, minute) == (2008, 9, 20, 12, 25)
        assert second == pytest.approx(40.104192, abs=_SEC_TOL)

    def test_from_split_jd_keeps_fraction(self):
        # 1e-8 day
        a = Epoch.from_jd(2454729.5, 0.51782528)
        b = Epoch.from_jd(2454729.5, 0.51782529)
        assert (b - a) == pytest.approx(0.000864, abs=1e-6)

    def test_jd_mjd(self):
        epc = Epoch(2000, 1, 1, 12)
        assert epc.jd() == pytest.approx(2451545.0, abs=1e-9)
        assert epc.mjd() == pytest.approx(51544.5, abs=1e-9)


# ──────────────────────────────────────────────
# Arithmetic
# ──────────────────────────────────────────────


class TestEpochArithmetic:
    def test_add_seconds(self):
        assert Epoch(2000, 1, 1) + 60.0 == Epoch(2000, 1, 1, 0, 1)

    def test_add_day_rollover(self):
        assert Epoch(2000, 1, 1) + 86400.0 == Epoch(2000, 1, 2)

    def test_add_negative(self):
        assert Epoch(2000, 1, 2) + (-86400.0) == Epoch(2000, 1, 1)

    def test_subtract_seconds(self):
        assert Epoch(2000, 1, 1, 1) - 3600.0 == Epoch(2000, 1, 1)

    def test_subtract_epoch(self):
        assert Epoch(2000, 1, 2) - Epoch(2000, 1, 1) == pytest.approx(86400.0)
        assert Epoch(2000, 1, 1) - Epoch(2000, 1, 2) == pytest.approx(-86400.0)

    def test_add_minutes(self):
        assert Epoch(2000, 1, 1).add_minutes(90.0) == Epoch(2000, 1, 1, 1, 30)
        assert Epoch(2000, 1, 1).add_minutes(-1440.0) == Epoch(1999, 12, 31)

    def test_minutes_since(self):
        epc = Epoch(2020, 1, 1)
        assert Epoch(2020, 1, 1, 2, 30).minutes_since(epc) == pytest.approx(150.0)
        assert epc.minutes_since(Epoch(2020, 1, 1, 2, 30)) == pytest.approx(-150.0)

    def test_add_minutes_minutes_since_consistent(self):
        epc = Epoch.from_jd(2454729.5, 0.51782528)
        for minutes in (-10000.0, -0.5, 0.0, 1.25, 43200.0):
            assert epc.add_minutes(minutes).minutes_since(epc) == pytest.approx(minutes, abs=1e-9)

    def test_kahan_many_small_steps(self):
        epc = Epoch(2000, 1, 1)
        for _ in range(86400):
            epc = epc + 1.0
        assert epc - Epoch(2000, 1, 2) == pytest.approx(0.0, abs=1e-6)

    def test_immutable(self):
        epc = Epoch(2000, 1, 1)
        epc + 3600.0
        assert epc == Epoch(2000, 1, 1)


# ──────────────────────────────────────────────
# Comparison and hashing
# ──────────────────────────────────────────────


class TestEpochComparison:
    def test_ordering(self):
        a = Epoch(2000, 1, 1)
        b = Epoch(2000, 1, 1, 0, 0, 1.0)
        assert a < b
        assert a <= b
        assert b > a
        assert b >= a
        assert a != b

    def test_equal_within_tolerance(self):
        a = Epoch(2000, 1, 1)
        assert a == a + 1e-12
        assert a != a + 1e-6

    def test_compare_non_epoch(self):
        assert (Epoch(2000, 1, 1) == 2451544.5) is False

    def test_hash(self):
        assert hash(Epoch(2000, 1, 1)) == hash(Epoch("2000-01-01"))
        assert len({Epoch(2000, 1, 1), Epoch(2000, 1, 1)}) == 1


# ──────────────────────────────────────────────
# Day counts and sidereal time
# ──────────────────────────────────────────────


class TestEpochTimeScales:
    def test_days_since_1900(self):
        assert Epoch(1899, 12, 31, 12).days_since_1900() == pytest.approx(0.0, abs=1e-9)
        assert Epoch(2000, 1, 1, 12).days_since_1900() == pytest.approx(36525.0, abs=1e-9)

    def test_gmst_j2000_noon(self):
        assert Epoch(2000, 1, 1, 12).gmst(use_degrees=True) == pytest.approx(280.46061837, abs=1e-6)

    def test_gmst_radians(self):
        epc = Epoch(2000, 1, 1)
        assert epc.gmst() == pytest.approx(math.radians(epc.gmst(use_degrees=True)))

    def test_gmst_range(self):
        for epc in (Epoch(1980, 6, 1), Epoch(2006, 6, 25, 8), Epoch(2030, 12, 31, 23, 59)):
            assert 0.0 <= epc.gmst() < 2.0 * math.pi


# ──────────────────────────────────────────────
# Representation and pytree
# ──────────────────────────────────────────────


class TestEpochRepresentation:
    def test_str(self):
        assert str(Epoch(2000, 1, 1, 12)) == "2000-01-01T12:00:00.000Z"

    def test_str_tle_epoch(self):
        assert str(Epoch.from_jd(2454729.5, 0.51782528)) == "2008-09-20T12:25:40.104Z"

    def test_repr(self):
        assert repr(Epoch(2000, 1, 1)).startswith("Epoch(_jd=")

    def test_pytree_roundtrip(self):
        epc = Epoch.from_jd(2454729.5, 0.51782528)
        leaves, treedef = jax.tree_util.tree_flatten(epc)
        assert len(leaves) == 3
        assert jax.tree_util.tree_unflatten(treedef, leaves) == epc
