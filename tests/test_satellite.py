"""Tests for the stateful SGP4 propagator class."""

import logging
from math import pi, radians

import jax.numpy as jnp
import pytest
from sgp4.api import WGS72 as SGP4_WGS72
from sgp4.api import Satrec

import sgdp4._satellite
from sgdp4 import (
    SGP4,
    WGS84,
    ConfigurationError,
    Epoch,
    IntegratorState,
    OrbitalElements,
    PropagationError,
    Resonance,
    SubOrbitalDecayError,
    TLEFormatError,
    parse_tle,
)

# ISS TLE
ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"

# Molniya 2-14 (deep-space, 12 hour resonance)
MOLNIYA_L1 = "1 08195U 75081A   06176.33215444  .00000099  00000-0  11873-3 0   813"
MOLNIYA_L2 = "2 08195  64.1586 279.0717 6877146 264.7651  20.2257  2.00491383225656"

# ITALSAT 2 (deep-space, 24 hour resonance)
ITALSAT_L1 = "1 24208U 96044A   06177.04061740 -.00000094  00000-0  10000-3 0  1600"
ITALSAT_L2 = "2 24208   3.8536  80.0121 0026640 311.0977  48.3000  1.00778054 36119"

# Vela 5A (deep-space, no resonance)
VELA_L1 = "1 04965U 69046F   06175.83186726  .00000094  00000-0  10000-3 0  4711"
VELA_L2 = "2 04965  32.9048 138.7680 6088834 148.5862 269.3268  2.47283741134637"

_XPDOTP = 1440.0 / (2.0 * pi)
_RE_KM = 6378.135


def _get_reference(line1: str, line2: str, tsince_min: float) -> tuple:
    """Get reference position and velocity from python-sgp4."""
    sat = Satrec.twoline2rv(line1, line2, SGP4_WGS72)
    e, r, v = sat.sgp4_tsince(tsince_min)
    return e, r, v


def _decaying_elements() -> OrbitalElements:
    """Polar LEO with extreme drag: perigee ~267 km, B* = 0.1."""
    return OrbitalElements(
        mean_anomaly=0.0,
        raan=0.0,
        argp=0.0,
        eccentricity=0.001,
        inclination=radians(90.0),
        mean_motion=16.0 / _XPDOTP,
        bstar=0.1,
        epoch=Epoch(2020, 1, 1),
        satnum="99999",
    )


class TestConfiguration:
    def test_unconfigured(self) -> None:
        sat = SGP4()
        assert not sat.configured
        assert sat.integrator is None
        assert repr(sat) == "SGP4(unconfigured)"

    def test_unconfigured_propagate_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="not configured"):
            SGP4().propagate(0.0)

    def test_unconfigured_properties_raise(self) -> None:
        sat = SGP4()
        with pytest.raises(ConfigurationError):
            sat.elements
        with pytest.raises(ConfigurationError):
            sat.deep_space

    def test_configure_later(self) -> None:
        sat = SGP4()
        sat.configure(parse_tle(ISS_LINE1, ISS_LINE2))
        assert sat.configured
        assert sat.elements.satnum == "25544"

    def test_from_tle(self) -> None:
        sat = SGP4.from_tle(ISS_LINE1, ISS_LINE2)
        assert sat.configured
        assert sat.gravity.mu == 398600.8

    def test_from_tle_invalid(self) -> None:
        with pytest.raises(TLEFormatError):
            SGP4.from_tle("bad line 1", ISS_LINE2)

    def test_gravity_by_name(self) -> None:
        assert SGP4.from_tle(ISS_LINE1, ISS_LINE2, gravity="wgs84").gravity is WGS84

    def test_unknown_gravity(self) -> None:
        with pytest.raises(ValueError, match="Unknown gravity model"):
            SGP4(gravity="egm2008")

    def test_failed_configure_keeps_previous(self) -> None:
        sat = SGP4.from_tle(ISS_LINE1, ISS_LINE2)
        bad = OrbitalElements(0.0, 0.0, 0.0, 1.2, 0.5, 0.05, 0.0, Epoch(2020, 1, 1))
        with pytest.raises(ConfigurationError):
            sat.configure(bad)
        assert sat.elements.satnum == "25544"

    def test_reconfigure_resets_integrator(self) -> None:
        sat = SGP4.from_tle(ITALSAT_L1, ITALSAT_L2)
        sat.propagate(5000.0)
        assert sat.integrator is not None
        sat.configure(parse_tle(ITALSAT_L1, ITALSAT_L2))
        assert sat.integrator is None

    def test_configure_logs_branch(self, caplog) -> None:
        with caplog.at_level(logging.DEBUG, logger="sgdp4"):
            SGP4.from_tle(MOLNIYA_L1, MOLNIYA_L2)
        assert "deep-space orbit" in caplog.text
        assert "resonance half-day" in caplog.text


class TestProperties:
    def test_near_earth(self) -> None:
        sat = SGP4.from_tle(ISS_LINE1, ISS_LINE2)
        assert not sat.deep_space
        assert not sat.simple_model
        assert sat.resonance is Resonance.NONE
        assert sat.deep_space_context is None
        assert sat.period == pytest.approx(91.6, abs=0.1)
        assert sat.perigee == pytest.approx(sat.constants.perigee)
        assert sat.epoch == Epoch.from_jd(2454729.5, 0.51782528)

    @pytest.mark.parametrize(
        "lines, resonance",
        [
            ((MOLNIYA_L1, MOLNIYA_L2), Resonance.HALF_DAY),
            ((ITALSAT_L1, ITALSAT_L2), Resonance.SYNCHRONOUS),
            ((VELA_L1, VELA_L2), Resonance.NONE),
        ],
    )
    def test_deep_space(self, lines, resonance) -> None:
        sat = SGP4.from_tle(*lines)
        assert sat.deep_space
        assert sat.resonance is resonance
        assert sat.deep_space_context is sat.model.deep_space

    def test_repr(self) -> None:
        sat = SGP4.from_tle(ISS_LINE1, ISS_LINE2)
        assert repr(sat) == (
            "SGP4(satnum='25544', epoch=2008-09-20T12:25:40.104Z, i=51.6416 deg, near-earth)"
        )
        assert repr(SGP4.from_tle(MOLNIYA_L1, MOLNIYA_L2)).endswith("deep-space)")


class TestPropagate:
    @pytest.mark.parametrize("tsince", [0.0, 45.0, 1440.0, -720.0])
    def test_iss_matches_reference(self, tsince) -> None:
        state = SGP4.from_tle(ISS_LINE1, ISS_LINE2).propagate(tsince)
        e_ref, r_ref, v_ref = _get_reference(ISS_LINE1, ISS_LINE2, tsince)
        assert e_ref == 0
        assert jnp.allclose(state.position, jnp.array(r_ref), rtol=1e-8, atol=1e-6)
        assert jnp.allclose(state.velocity, jnp.array(v_ref), rtol=1e-8, atol=1e-9)

    def test_epoch_input(self) -> None:
        sat = SGP4.from_tle(ISS_LINE1, ISS_LINE2)
        by_minutes = sat.propagate(90.0)
        by_epoch = sat.propagate(sat.epoch.add_minutes(90.0))
        assert by_epoch.tsince == pytest.approx(90.0, abs=1e-9)
        assert by_epoch.epoch == by_minutes.epoch
        assert jnp.allclose(by_epoch.position, by_minutes.position, atol=1e-8)

    def test_epoch_before_element_epoch(self) -> None:
        sat = SGP4.from_tle(ISS_LINE1, ISS_LINE2)
        state = sat.propagate(sat.epoch - 3600.0)
        assert state.tsince == pytest.approx(-60.0, abs=1e-9)

    def test_integer_time(self) -> None:
        sat = SGP4.from_tle(ISS_LINE1, ISS_LINE2)
        assert jnp.array_equal(sat.propagate(60).position, sat.propagate(60.0).position)

    def test_caches_resonance_checkpoint(self) -> None:
        sat = SGP4.from_tle(ITALSAT_L1, ITALSAT_L2)
        sat.propagate(5000.0)
        assert isinstance(sat.integrator, IntegratorState)
        assert sat.integrator.atime == 4320.0

    def test_no_checkpoint_without_resonance(self) -> None:
        sat = SGP4.from_tle(VELA_L1, VELA_L2)
        sat.propagate(5000.0)
        assert sat.integrator is None

    def test_failed_call_keeps_checkpoint(self, monkeypatch) -> None:
        sat = SGP4.from_tle(ITALSAT_L1, ITALSAT_L2)
        sat.propagate(5000.0)
        checkpoint = sat.integrator

        def _fail(model, tsince, integrator=None):
            raise SubOrbitalDecayError(0.9, tsince)

        monkeypatch.setattr(sgdp4._satellite, "sgp4_propagate", _fail)
        with pytest.raises(SubOrbitalDecayError):
            sat.propagate(9000.0)
        assert sat.integrator is checkpoint


class TestDeterminism:
    @pytest.mark.parametrize("lines", [(ITALSAT_L1, ITALSAT_L2), (MOLNIYA_L1, MOLNIYA_L2)])
    def test_monotonic_sequence(self, lines) -> None:
        sat = SGP4.from_tle(*lines)
        for tsince in range(0, 10001, 1000):
            state = sat.propagate(float(tsince))
        fresh = SGP4.from_tle(*lines).propagate(10000.0)
        assert jnp.array_equal(state.position, fresh.position)
        assert jnp.array_equal(state.velocity, fresh.velocity)

    @pytest.mark.parametrize("lines", [(ITALSAT_L1, ITALSAT_L2), (MOLNIYA_L1, MOLNIYA_L2)])
    def test_out_of_order_sequence(self, lines) -> None:
        sat = SGP4.from_tle(*lines)
        for tsince in (5000.0, -3000.0, 8000.0, 100.0, 7000.0):
            state = sat.propagate(tsince)
            fresh = SGP4.from_tle(*lines).propagate(tsince)
            assert jnp.array_equal(state.position, fresh.position), tsince
            assert jnp.array_equal(state.velocity, fresh.velocity), tsince

    def test_restart_is_logged(self, caplog) -> None:
        sat = SGP4.from_tle(ITALSAT_L1, ITALSAT_L2)
        sat.propagate(8000.0)
        with caplog.at_level(logging.DEBUG, logger="sgdp4"):
            sat.propagate(2000.0)
        assert "Restarting resonance integrator" in caplog.text


class TestEphemeris:
    def test_shapes(self) -> None:
        r, v = SGP4.from_tle(ISS_LINE1, ISS_LINE2).ephemeris([0.0, 10.0, 20.0, 30.0])
        assert r.shape == (4, 3)
        assert v.shape == (4, 3)

    def test_empty(self) -> None:
        r, v = SGP4.from_tle(ISS_LINE1, ISS_LINE2).ephemeris([])
        assert r.shape == (0, 3)
        assert v.shape == (0, 3)

    def test_matches_single_calls(self) -> None:
        sat = SGP4.from_tle(MOLNIYA_L1, MOLNIYA_L2)
        times = [0.0, 720.0, sat.epoch.add_minutes(1440.0), -360.0]
        r, v = sat.ephemeris(times)
        for i, t in enumerate(times):
            state = SGP4.from_tle(MOLNIYA_L1, MOLNIYA_L2).propagate(t)
            assert jnp.allclose(r[i], state.position, atol=1e-8)
            assert jnp.allclose(v[i], state.velocity, atol=1e-11)

    def test_generator_input(self) -> None:
        sat = SGP4.from_tle(ISS_LINE1, ISS_LINE2)
        r, _ = sat.ephemeris(float(t) for t in range(5))
        assert r.shape == (5, 3)

    def test_one_scalar_call_per_time(self, monkeypatch) -> None:
        calls = []
        real = sgdp4._satellite.sgp4_propagate

        def counting(model, tsince, integrator=None):
            calls.append(tsince)
            return real(model, tsince, integrator)

        monkeypatch.setattr(sgdp4._satellite, "sgp4_propagate", counting)
        SGP4.from_tle(MOLNIYA_L1, MOLNIYA_L2).ephemeris([720.0, 0.0, 3000.0])
        assert calls == [720.0, 0.0, 3000.0]


class TestDecay:
    def test_decay_raises(self) -> None:
        sat = SGP4(_decaying_elements())
        assert not sat.deep_space
        assert not sat.simple_model

        decayed_at = None
        for step in range(501):
            tsince = 10.0 * step
            try:
                state = sat.propagate(tsince)
            except SubOrbitalDecayError as exc:
                decayed_at = tsince
                assert isinstance(exc, PropagationError)
                assert exc.tsince == tsince
                assert exc.radius < 1.0
                break
            assert float(jnp.linalg.norm(state.position)) >= _RE_KM - 1e-6

        assert decayed_at is not None
        assert 100.0 < decayed_at < 5000.0

    def test_earlier_times_usable_after_decay(self) -> None:
        sat = SGP4(_decaying_elements())
        with pytest.raises(PropagationError):
            for step in range(501):
                sat.propagate(10.0 * step)
        state = sat.propagate(-10.0)
        assert float(jnp.linalg.norm(state.position)) > _RE_KM
