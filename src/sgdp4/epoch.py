"""Element-set epochs and the time services the propagator needs.

An :class:`Epoch` stores an instant as a whole Julian day number plus the
seconds elapsed since the start of that Julian day (noon), together with a
Kahan compensation term. Keeping the day count and the seconds apart lets a
TLE epoch keep its eight decimal digits of fractional day, and the
compensation term keeps long runs of small increments (one call per
ephemeris step) from drifting.

Besides calendar access, an Epoch provides what SGP4/SDP4 consumes:
minutes added to an epoch, minutes between two epochs, Greenwich mean
sidereal time and the day counts used by the lunar/solar terms. Epochs are
registered as JAX pytrees so they can sit inside pytrees next to state
arrays.
"""

from __future__ import annotations

import math
import re

import jax

from .time import (
    JD_1900,
    JD_MJD_OFFSET,
    SECONDS_PER_DAY,
    caldate_to_jd,
    civil_date,
    gstime,
)

# Two epochs closer than this are equal [s]
_EQ_TOLERANCE = 1e-9

# YYYY-MM-DD, optionally followed by THH:MM:SS[.fff]Z
_ISO_PATTERN = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})"
    r"(?:T(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2}(?:\.\d+)?)Z)?$"
)


class Epoch:
    """An instant in time (UTC).

    Epochs are immutable. Adding or subtracting a number of seconds yields a
    new Epoch; subtracting two Epochs yields seconds.

    Constructors:
        Epoch(2006, 6, 25)
        Epoch(2006, 6, 25, 8, 30, 12.5)
        Epoch("2006-06-25T08:30:12.500Z")
        Epoch(other_epoch)
        Epoch.from_jd(2453911.5, 0.33215444)
    """

    __slots__ = ("_jd", "_seconds", "_kahan_c")

    def __init__(self, *args: int | float | str | Epoch) -> None:
        """Build an Epoch from date components, an ISO 8601 string or another Epoch.

        Args:
            *args: ``(year, month, day[, hour[, minute[, second]]])``, a
                string ``YYYY-MM-DD`` / ``YYYY-MM-DDTHH:MM:SS[.fff]Z``, or an
                Epoch to copy.

        Raises:
            ValueError: If the arguments match none of these forms.
        """
        if len(args) == 1:
            (arg,) = args
            if isinstance(arg, Epoch):
                self._jd, self._seconds, self._kahan_c = arg._jd, arg._seconds, arg._kahan_c
                return
            if not isinstance(arg, str):
                raise ValueError(f"Cannot construct Epoch from {type(arg)}")
            args = self._parse_iso(arg)
        elif not 3 <= len(args) <= 6:
            raise ValueError("Epoch takes 3 to 6 date components, an ISO 8601 string, or an Epoch")
        self._set_calendar(*args)

    @staticmethod
    def _parse_iso(text: str) -> tuple[int, int, int, int, int, float]:
        match = _ISO_PATTERN.match(text)
        if match is None:
            raise ValueError(f'Invalid Epoch string: "{text}" is not ISO 8601 compliant')
        fields = match.groupdict()
        return (
            int(fields["year"]),
            int(fields["month"]),
            int(fields["day"]),
            int(fields["hour"] or 0),
            int(fields["minute"] or 0),
            float(fields["second"] or 0.0),
        )

    def _set_calendar(self, year, month, day, hour=0, minute=0, second=0.0):
        midnight = caldate_to_jd(year, month, day)
        whole = math.floor(midnight)
        self._jd = int(whole)
        self._seconds = float((midnight - whole) * SECONDS_PER_DAY + hour * 3600.0 + minute * 60.0 + second)
        self._kahan_c = 0.0
        self._wrap_day()

    @classmethod
    def _from_internal(cls, jd, seconds, kahan_c):
        """Assemble an Epoch from its stored components as-is."""
        epc = object.__new__(cls)
        epc._jd = jd
        epc._seconds = seconds
        epc._kahan_c = kahan_c
        return epc

    @classmethod
    def from_jd(cls, jd: float, fraction: float = 0.0) -> Epoch:
        """Epoch at the Julian Date ``jd + fraction``.

        TLE epochs are conventionally held as a whole Julian date plus a
        fraction of a day; passing the two separately keeps every digit of
        the fraction.

        Args:
            jd: Julian Date, or its whole-day part.
            fraction: Fraction of a day added to ``jd``. Default: ``0.0``
        """
        whole = math.floor(jd)
        epc = cls._from_internal(int(whole), ((jd - whole) + fraction) * SECONDS_PER_DAY, 0.0)
        epc._wrap_day()
        return epc

    def _wrap_day(self):
        """Move whole days out of ``_seconds`` so it stays in ``[0, 86400)``."""
        days = math.floor(self._seconds / SECONDS_PER_DAY)
        if days:
            self._seconds -= days * SECONDS_PER_DAY
            self._jd += int(days)

    def _exact_seconds(self):
        return self._seconds - self._kahan_c

    # Arithmetic

    def __add__(self, seconds: float) -> Epoch:
        """Epoch ``seconds`` later, accumulated with Kahan summation."""
        y = float(seconds) - self._kahan_c
        total = self._seconds + y
        epc = Epoch._from_internal(self._jd, total, (total - self._seconds) - y)
        epc._wrap_day()
        return epc

    def __sub__(self, other: Epoch | float) -> Epoch | float:
        """Seconds between two epochs, or the Epoch ``other`` seconds earlier."""
        if isinstance(other, Epoch):
            days = self._jd - other._jd
            return days * SECONDS_PER_DAY + (self._exact_seconds() - other._exact_seconds())
        return self + (-float(other))

    def add_minutes(self, minutes: float) -> Epoch:
        """Epoch ``minutes`` later (earlier if negative)."""
        return self + minutes * 60.0

    def minutes_since(self, other: Epoch) -> float:
        """Minutes from ``other`` to this epoch, negative if this one is earlier."""
        return (self - other) / 60.0

    # Comparison

    def _offset(self, other):
        return self - other if isinstance(other, Epoch) else None

    def __eq__(self, other):
        delta = self._offset(other)
        return NotImplemented if delta is None else abs(delta) < _EQ_TOLERANCE

    def __ne__(self, other):
        delta = self._offset(other)
        return NotImplemented if delta is None else abs(delta) >= _EQ_TOLERANCE

    def __lt__(self, other):
        delta = self._offset(other)
        return NotImplemented if delta is None else delta <= -_EQ_TOLERANCE

    def __le__(self, other):
        delta = self._offset(other)
        return NotImplemented if delta is None else delta < _EQ_TOLERANCE

    def __gt__(self, other):
        delta = self._offset(other)
        return NotImplemented if delta is None else delta >= _EQ_TOLERANCE

    def __ge__(self, other):
        delta = self._offset(other)
        return NotImplemented if delta is None else delta > -_EQ_TOLERANCE

    def __hash__(self):
        return hash((self._jd, round(self._exact_seconds(), 6)))

    # Calendar and day counts

    def caldate(self) -> tuple[int, int, int, int, int, float]:
        """Calendar date and time of day.

        Returns:
            tuple: ``(year, month, day, hour, minute, second)``, the seconds
                including their fractional part.
        """
        # Julian days begin at noon
        days, time_of_day = divmod(self._exact_seconds() + 43200.0, SECONDS_PER_DAY)
        year, month, day = civil_date(self._jd + int(days))
        hour, rest = divmod(time_of_day, 3600.0)
        minute, second = divmod(rest, 60.0)
        return year, month, day, int(hour), int(minute), second

    def jd(self) -> float:
        """Julian Date as one float (resolution of roughly 40 microseconds)."""
        return self._jd + self._exact_seconds() / SECONDS_PER_DAY

    def mjd(self) -> float:
        """Modified Julian Date."""
        return (self._jd - JD_MJD_OFFSET) + self._exact_seconds() / SECONDS_PER_DAY

    def days_since_1900(self) -> float:
        """Days elapsed since 1900 January 0.5, JD 2415020.0 (lunar/solar ephemeris origin)."""
        return (self._jd - JD_1900) + self._exact_seconds() / SECONDS_PER_DAY

    def gmst(self, use_degrees: bool = False) -> float:
        """Greenwich mean sidereal time (IAU 1982), taking UTC as UT1.

        Args:
            use_degrees (bool): Return degrees instead of radians. Default: False

        Returns:
            float: Sidereal angle in ``[0, 2 pi)`` rad, or ``[0, 360)`` deg.
        """
        theta = gstime(self.jd())
        return math.degrees(theta) if use_degrees else theta

    # Representation

    def __str__(self):
        year, month, day, hour, minute, second = self.caldate()
        return f"{year:04d}-{month:02d}-{day:02d}T{hour:02d}:{minute:02d}:{second:06.3f}Z"

    def __repr__(self):
        return f"Epoch(_jd={self._jd}, _seconds={self._seconds}, _kahan_c={self._kahan_c})"


jax.tree_util.register_pytree_node(
    Epoch,
    lambda epc: ((epc._jd, epc._seconds, epc._kahan_c), None),
    lambda _, children: Epoch._from_internal(*children),
)
