"""Calendar and Julian date conversions.

Day numbers are computed with the integer Fliegel & Van Flandern
algorithms on the proleptic Gregorian calendar, the time of day is carried
separately as a float. SGP4 epochs need sub-millisecond resolution on Julian
dates near 2.45 million, which a single float32 cannot hold, so nothing here
goes through JAX arrays.
"""

from __future__ import annotations

import math

JD_MJD_OFFSET = 2400000.5
"""Offset between Julian Date and Modified Julian Date [days]."""

JD_J2000 = 2451545.0
"""Julian Date of the J2000.0 epoch."""

JD_1900 = 2415020.0
"""Julian Date of 1900 January 0.5, noon of 1899-12-31 (epoch of the lunar/solar ephemeris)."""

SECONDS_PER_DAY = 86400.0


def day_number(year: int, month: int, day: int) -> int:
    """Julian Day Number, the integer Julian Date at noon of a Gregorian date.

    References:

        1. H. F. Fliegel and T. C. Van Flandern, "A Machine Algorithm for
           Processing Calendar Dates", *Communications of the ACM* 11, 1968.
    """
    # Count years from March so the leap day falls at the end
    shift = (14 - month) // 12
    y = year + 4800 - shift
    m = month + 12 * shift - 3
    return day + (153 * m + 2) // 5 + 365 * y + y // 4 - y // 100 + y // 400 - 32045


def caldate_to_jd(
    year: int,
    month: int,
    day: int,
    hour: int = 0,
    minute: int = 0,
    second: float = 0.0,
) -> float:
    """Convert a calendar date to Julian Date.

    Args:
        year (int): Year of the calendar date.
        month (int): Month of the calendar date.
        day (int): Day of the calendar date.
        hour (int): Hour of the day. Default: ``0``
        minute (int): Minute of the hour. Default: ``0``
        second (float): Second of the minute. Default: ``0.0``

    Returns:
        Julian Date.
    """
    time_of_day = (hour * 3600.0 + minute * 60.0 + second) / SECONDS_PER_DAY
    return (day_number(year, month, day) - 0.5) + time_of_day


def civil_date(jdn: int) -> tuple[int, int, int]:
    """Gregorian date of a Julian Day Number (inverse of :func:`day_number`)."""
    f = jdn + 1401 + (((4 * jdn + 274277) // 146097) * 3) // 4 - 38
    e = 4 * f + 3
    h = 5 * ((e % 1461) // 4) + 2
    day = (h % 153) // 5 + 1
    month = (h // 153 + 2) % 12 + 1
    year = e // 1461 - 4716 + (14 - month) // 12
    return year, month, day


def gstime(jdut1: float) -> float:
    """Greenwich mean sidereal time from a UT1 Julian date.

    IAU 1982 polynomial, as used by SGP4 for the deep-space resonance
    phase.

    Args:
        jdut1: Julian date (UT1, UTC accepted).

    Returns:
        Greenwich mean sidereal time [rad] in ``[0, 2*pi)``.

    References:

        1. D. Vallado, *Fundamentals of Astrodynamics and Applications
           (4th Ed.)*, 2010.
    """
    t = (jdut1 - JD_J2000) / 36525.0
    # Sidereal seconds; 240 of them make one degree
    seconds = 67310.54841 + t * ((876600.0 * 3600.0 + 8640184.812866) + t * (0.093104 - 6.2e-6 * t))
    theta = math.fmod(math.radians(seconds / 240.0), 2.0 * math.pi)
    return theta + 2.0 * math.pi if theta < 0.0 else theta
