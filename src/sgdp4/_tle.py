"""
Two-line element (TLE) parsing for the SGP4/SDP4 propagator.

Reads the fixed-column TLE format into ``OrbitalElements`` in the units the
propagator expects: radians, radians per minute, and an ``Epoch`` built from
the split Julian date of the element epoch.
"""

from __future__ import annotations

from sgdp4._types import OrbitalElements
from sgdp4.constants import DEG2RAD, MIN_PER_DAY, TWOPI
from sgdp4.epoch import Epoch
from sgdp4.errors import TLEFormatError

_XPDOTP = MIN_PER_DAY / TWOPI  # rev/day per rad/min

# Two digit years below this are in the 21st century
_YEAR_PIVOT = 57

_LINE_LENGTH = 69

# Columns (0-based, end exclusive) of the fields read from each line
_LINE1_COLUMNS = {
    "satnum": slice(2, 7),
    "epoch year": slice(18, 20),
    "epoch day": slice(20, 32),
    "bstar": slice(53, 61),
}
_LINE2_COLUMNS = {
    "satnum": slice(2, 7),
    "inclination": slice(8, 16),
    "right ascension": slice(17, 25),
    "eccentricity": slice(26, 33),
    "argument of perigee": slice(34, 42),
    "mean anomaly": slice(43, 51),
    "mean motion": slice(52, 63),
}


def compute_checksum(line: str) -> int:
    """Compute the TLE checksum of a line.

    Digits count their value, each minus sign counts one and every other
    character counts zero, summed over the first 68 columns modulo 10.
    """
    body = line[: _LINE_LENGTH - 1]
    return (sum(int(c) for c in body if c.isdigit()) + body.count("-")) % 10


def validate_tle_line(line: str, line_number: int) -> None:
    """Check that ``line`` is TLE line ``line_number`` with a valid checksum.

    Trailing whitespace is ignored.

    Raises:
        TLEFormatError: If the line is shorter than 69 columns, carries the
            wrong line number, or its checksum column does not match.
    """
    text = line.rstrip()
    label = f"TLE line {line_number}"

    if len(text) < _LINE_LENGTH:
        raise TLEFormatError(f"{label} has {len(text)} characters, expected {_LINE_LENGTH}: {text!r}")
    if text[0] != str(line_number):
        raise TLEFormatError(f"{label} begins with {text[0]!r}, expected '{line_number}'")

    found = text[_LINE_LENGTH - 1]
    if not found.isdigit():
        raise TLEFormatError(f"{label} checksum character {found!r} is not a digit")
    if int(found) != compute_checksum(text):
        raise TLEFormatError(f"{label} checksum is {found}, computed {compute_checksum(text)}")


def _implied_decimal(field: str) -> float:
    """Decode a ``" 11606-4"`` style field: sign, implied-decimal mantissa, exponent."""
    field = field.strip()
    if not field:
        return 0.0
    sign = -1.0 if field[0] == "-" else 1.0
    body = field.lstrip("+-")
    mantissa, exponent = body[:-2], body[-2:]
    return sign * float("0." + mantissa.strip()) * 10.0 ** int(exponent)


def _read_fields(line: str, columns: dict[str, slice]) -> dict[str, str]:
    return {name: line[cols] for name, cols in columns.items()}


def _convert(fields: dict[str, str], name: str, convert=float):
    try:
        return convert(fields[name])
    except ValueError:
        raise TLEFormatError(f"Cannot read TLE {name} field {fields[name]!r}") from None


def tle_epoch(two_digit_year: int, epochdays: float) -> Epoch:
    """Epoch of a TLE from its two digit year and fractional day of year.

    Years 57-99 map to 1957-1999, 00-56 to 2000-2056. Day 1.0 is January 1,
    00:00 UTC.
    """
    century = 2000 if two_digit_year < _YEAR_PIVOT else 1900
    whole_days, fraction = divmod(epochdays, 1.0)
    # Epoch.from_jd keeps the day and its fraction apart
    jan0 = Epoch(century + two_digit_year, 1, 1).jd() - 1.0
    return Epoch.from_jd(jan0 + whole_days, round(fraction, 8))


def parse_tle(line1: str, line2: str) -> OrbitalElements:
    """Parse a two-line element set.

    Args:
        line1: First TLE line (69 characters including checksum).
        line2: Second TLE line (69 characters including checksum).

    Returns:
        Mean elements in radians and radians per minute.

    Raises:
        TLEFormatError: If a line fails validation, a field cannot be read,
            or the catalog numbers of the two lines differ.
    """
    validate_tle_line(line1, 1)
    validate_tle_line(line2, 2)

    first = _read_fields(line1, _LINE1_COLUMNS)
    second = _read_fields(line2, _LINE2_COLUMNS)
    if first["satnum"] != second["satnum"]:
        raise TLEFormatError(
            f"Catalog numbers of lines 1 and 2 differ: {first['satnum']!r} != {second['satnum']!r}"
        )

    # Eccentricity has an implied leading decimal point
    second["eccentricity"] = "0." + second["eccentricity"].replace(" ", "0")

    def degrees(name):
        return _convert(second, name) * DEG2RAD

    return OrbitalElements(
        mean_anomaly=degrees("mean anomaly"),
        raan=degrees("right ascension"),
        argp=degrees("argument of perigee"),
        eccentricity=_convert(second, "eccentricity"),
        inclination=degrees("inclination"),
        mean_motion=_convert(second, "mean motion") / _XPDOTP,
        bstar=_convert(first, "bstar", _implied_decimal),
        epoch=tle_epoch(_convert(first, "epoch year", int), _convert(first, "epoch day")),
        satnum=first["satnum"].strip(),
    )
