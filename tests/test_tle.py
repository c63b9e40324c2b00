"""Tests for TLE parsing and gravity constants."""

from math import pi, radians, sqrt

import pytest
from sgp4 import earth_gravity
from sgp4.api import WGS72 as SGP4_WGS72
from sgp4.api import Satrec

from sgdp4 import (
    WGS72,
    WGS72OLD,
    WGS84,
    Epoch,
    TLEFormatError,
    compute_checksum,
    parse_tle,
    validate_tle_line,
)
from sgdp4._tle import tle_epoch
from sgdp4.constants import DEG2RAD, MIN_PER_DAY, TWOPI

# ISS TLE from the sgp4 reference test suite
ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

# Polar orbit with a blank international designator and zero drag
POLAR_LINE1 = "1     1U          20  1.00000000  .00000000  00000-0  00000-0 0    07"
POLAR_LINE2 = "2     1  90.0000   0.0000 0010000   0.0000   0.0000 15.21936719    07"

_XPDOTP = 1440.0 / (2.0 * pi)


def _with_checksum(line: str) -> str:
    """Replace the checksum digit of an edited line."""
    return line[:68] + str(compute_checksum(line))


class TestEarthGravityConstants:
    """Gravity constant sets match the reference sgp4 library."""

    @pytest.mark.parametrize(
        "model, reference",
        [(WGS72OLD, earth_gravity.wgs72old), (WGS72, earth_gravity.wgs72), (WGS84, earth_gravity.wgs84)],
        ids=["wgs72old", "wgs72", "wgs84"],
    )
    def test_matches_reference(self, model, reference) -> None:
        for field in ("mu", "radiusearthkm", "j2", "j3", "j4"):
            assert getattr(model, field) == getattr(reference, field), field
        for field in ("xke", "tumin", "j3oj2"):
            assert getattr(model, field) == pytest.approx(getattr(reference, field), rel=1e-12), field

    def test_wgs72old_xke_is_tabulated(self) -> None:
        derived = 60.0 / sqrt(WGS72OLD.radiusearthkm**3 / WGS72OLD.mu)
        assert WGS72OLD.xke == 0.0743669161
        assert WGS72OLD.xke != derived

    def test_derived_harmonics(self) -> None:
        assert WGS72.ck2 == pytest.approx(5.413080e-4, rel=1e-12)
        assert WGS72.ck4 == pytest.approx(0.62098875e-6, rel=1e-8)
        assert WGS72.s == pytest.approx(1.01222928, rel=1e-8)
        assert WGS72.qoms2t == pytest.approx(1.88027916e-9, rel=1e-7)


class TestChecksum:
    def test_iss_checksums(self) -> None:
        assert compute_checksum(ISS_LINE1) == 7
        assert compute_checksum(ISS_LINE2) == 7

    def test_minus_counts_as_one(self) -> None:
        assert compute_checksum("-" * 68) == 68 % 10

    def test_ignores_checksum_column(self) -> None:
        assert compute_checksum(ISS_LINE1[:68] + "0") == compute_checksum(ISS_LINE1)

    def test_valid_lines(self) -> None:
        validate_tle_line(ISS_LINE1, 1)
        validate_tle_line(ISS_LINE2, 2)
        validate_tle_line(POLAR_LINE1 + "   \n", 1)


class TestValidateErrors:
    def test_short_line(self) -> None:
        with pytest.raises(TLEFormatError, match="has 60 characters, expected 69"):
            validate_tle_line(ISS_LINE1[:60], 1)

    def test_wrong_line_number(self) -> None:
        with pytest.raises(TLEFormatError, match="begins with '1', expected '2'"):
            validate_tle_line(ISS_LINE1, 2)

    def test_non_digit_checksum(self) -> None:
        with pytest.raises(TLEFormatError, match="is not a digit"):
            validate_tle_line(ISS_LINE1[:68] + "X", 1)

    def test_checksum_mismatch(self) -> None:
        with pytest.raises(TLEFormatError, match="checksum is 8, computed 7"):
            validate_tle_line(ISS_LINE1[:68] + "8", 1)

    def test_format_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            validate_tle_line("", 1)


class TestParseTLE:
    def test_iss_elements(self) -> None:
        el = parse_tle(ISS_LINE1, ISS_LINE2)
        assert el.satnum == "25544"
        assert el.inclination == pytest.approx(radians(51.6416), rel=1e-14)
        assert el.raan == pytest.approx(radians(247.4627), rel=1e-14)
        assert el.argp == pytest.approx(radians(130.5360), rel=1e-14)
        assert el.mean_anomaly == pytest.approx(radians(325.0288), rel=1e-14)
        assert el.eccentricity == pytest.approx(0.0006703, rel=1e-14)
        assert el.mean_motion == pytest.approx(15.72125391 / _XPDOTP, rel=1e-14)
        assert el.bstar == pytest.approx(-1.1606e-5, rel=1e-12)

    def test_unit_conversions(self) -> None:
        el = parse_tle(ISS_LINE1, ISS_LINE2)
        assert DEG2RAD == pytest.approx(radians(1.0), rel=1e-15)
        assert el.inclination == 51.6416 * DEG2RAD
        assert el.mean_motion == 15.72125391 / (MIN_PER_DAY / TWOPI)

    def test_iss_epoch(self) -> None:
        el = parse_tle(ISS_LINE1, ISS_LINE2)
        assert el.epoch == Epoch.from_jd(2454729.5, 0.51782528)
        assert str(el.epoch) == "2008-09-20T12:25:40.104Z"

    def test_matches_reference_parser(self) -> None:
        el = parse_tle(ISS_LINE1, ISS_LINE2)
        sat = Satrec.twoline2rv(ISS_LINE1, ISS_LINE2, SGP4_WGS72)
        assert el.mean_motion == pytest.approx(sat.no_kozai, rel=1e-14)
        assert el.eccentricity == pytest.approx(sat.ecco, rel=1e-14)
        assert el.inclination == pytest.approx(sat.inclo, rel=1e-14)
        assert el.bstar == pytest.approx(sat.bstar, rel=1e-12)
        assert el.epoch.jd() == pytest.approx(sat.jdsatepoch + sat.jdsatepochF, abs=1e-9)

    def test_polar_elements(self) -> None:
        el = parse_tle(POLAR_LINE1, POLAR_LINE2)
        assert el.satnum == "1"
        assert el.inclination == pytest.approx(pi / 2.0, rel=1e-14)
        assert el.eccentricity == pytest.approx(0.001, rel=1e-14)
        assert el.bstar == 0.0
        assert el.epoch == Epoch(2020, 1, 1)

    def test_satnum_mismatch(self) -> None:
        line2 = _with_checksum(ISS_LINE2.replace("25544", "25545", 1))
        with pytest.raises(TLEFormatError, match="differ"):
            parse_tle(ISS_LINE1, line2)

    def test_unreadable_field(self) -> None:
        line2 = _with_checksum(ISS_LINE2.replace("51.6416", "5A.6416", 1))
        with pytest.raises(TLEFormatError, match="Cannot read TLE inclination field"):
            parse_tle(ISS_LINE1, line2)

    def test_bad_checksum_propagates(self) -> None:
        with pytest.raises(TLEFormatError, match="line 2 checksum"):
            parse_tle(ISS_LINE1, ISS_LINE2[:68] + "0")


class TestTLEEpoch:
    def test_year_pivot(self) -> None:
        assert tle_epoch(57, 1.0) == Epoch(1957, 1, 1)
        assert tle_epoch(99, 1.0) == Epoch(1999, 1, 1)
        assert tle_epoch(0, 1.0) == Epoch(2000, 1, 1)
        assert tle_epoch(56, 1.0) == Epoch(2056, 1, 1)

    def test_fractional_day(self) -> None:
        assert tle_epoch(6, 176.5) == Epoch(2006, 6, 25, 12)

    def test_leap_year_day(self) -> None:
        assert tle_epoch(8, 60.0) == Epoch(2008, 2, 29)
        assert tle_epoch(7, 60.0) == Epoch(2007, 3, 1)
