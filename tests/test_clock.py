"""
Tests for the simulation clock: time advance, body state, trails, controls.
"""
import math
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from solar_sim.core.config import PLANETS, SimulationConfig
from solar_sim.core.constants import J2000_EPOCH
from solar_sim.core.frames import norm
from solar_sim.objects.planet import BodyState
from solar_sim.physics.gravity import KeplerSolution
from solar_sim.physics.orbit import OrbitalElements, compute_position
from solar_sim.simulation.clock import SimulationClock, SimulationInitError
from solar_sim.simulation.scenario import Scenario


@pytest.fixture
def config():
    return SimulationConfig(time_speed=1.0, start_at_current_date=False, max_trail_length=5)


@pytest.fixture
def clock(config):
    return SimulationClock.from_config(config)


def body_states(clock):
    return {k: (s.M_rad, s.r_au, s.v_km_s, s.speed_km_s, tuple(s.trail)) for k, s in clock.states.items()}


class TestReset:
    def test_starts_at_perihelion_from_epoch(self, clock):
        assert clock.t_days == 0.0
        assert len(clock.states) == 8
        for key, state in clock.states.items():
            elements = PLANETS[key]
            assert state.M_rad == 0.0
            assert state.r_au == pytest.approx((elements.a_au * (1 - elements.e), 0.0))
            assert state.speed_km_s > 0
            assert state.v_km_s[1] > 0
            assert len(state.trail) == 0

    def test_reset_to_current_date(self):
        config = SimulationConfig(start_at_current_date=True)
        now = J2000_EPOCH + timedelta(days=1000.0)
        clock = SimulationClock.from_config(config, now=now)
        assert clock.t_days == pytest.approx(1000.0)

        earth = clock.state("earth")
        expected_M = (2 * math.pi * 1000.0 / 365.25) % (2 * math.pi)
        assert earth.M_rad == pytest.approx(expected_M)
        assert earth.r_au == pytest.approx(compute_position(PLANETS["earth"], expected_M).value)

    def test_naive_now_treated_as_utc(self):
        config = SimulationConfig(start_at_current_date=True)
        now = datetime(2000, 1, 11, 12, 0, 0)
        clock = SimulationClock.from_config(config, now=now)
        assert clock.t_days == pytest.approx(10.0)

    def test_reset_clears_trails_and_time(self, clock):
        clock.set_show_trails(True)
        for _ in range(3):
            clock.advance(1.0)
        assert clock.t_days == 3.0

        clock.reset_simulation(to_current_date=False)
        assert clock.t_days == 0.0
        assert all(len(s.trail) == 0 for s in clock.states.values())

    def test_reset_keeps_selection_of_surviving_body(self, clock):
        clock.select_body("mars")
        clock.reset_simulation(to_current_date=False)
        assert clock.selected == "mars"

    def test_bad_body_is_skipped(self, config, caplog):
        scenario = Scenario(name="Test")
        scenario.add_body("earth", PLANETS["earth"])
        scenario.add_body("bad", SimpleNamespace(a_au=1.0, e=0.1, period_yr=0.0, mass_kg=0.0, name="Bad"))

        clock = SimulationClock(scenario=scenario, config=config)
        assert list(clock.states) == ["earth"]
        assert "Error initializing body bad" in caplog.text

    def test_no_bodies_is_fatal(self, config):
        scenario = Scenario(name="Empty")
        with pytest.raises(SimulationInitError, match="No bodies were successfully initialized"):
            SimulationClock(scenario=scenario, config=config)

        scenario.add_body("bad", SimpleNamespace(a_au=1.0, e=0.1, period_yr=-1.0, mass_kg=0.0, name="Bad"))
        with pytest.raises(SimulationInitError):
            SimulationClock(scenario=scenario, config=config)


class TestAdvance:
    def test_advance_scales_by_time_speed(self, clock):
        clock.set_time_speed(0.5)
        clock.advance(2.0)
        assert clock.t_days == pytest.approx(1.0)

    def test_advance_updates_mean_anomaly_and_position(self, clock):
        clock.advance(365.25 / 4)
        earth = clock.state("earth")
        assert earth.M_rad == pytest.approx(math.pi / 2)
        assert earth.r_au == pytest.approx(compute_position(PLANETS["earth"], math.pi / 2).value)

    def test_velocity_is_tangential(self, clock):
        clock.advance(40.0)
        for state in clock.states.values():
            r, v = state.r_au, state.v_km_s
            assert abs(r[0] * v[0] + r[1] * v[1]) < 1e-9 * norm(r) * norm(v)
            assert norm(v) == pytest.approx(state.speed_km_s)

    def test_mean_anomaly_stays_wrapped(self, clock):
        clock.advance(365.25 * 10.3)
        for state in clock.states.values():
            assert 0.0 <= state.M_rad < 2 * math.pi

    def test_negative_delta_runs_backwards(self, clock):
        clock.advance(-10.0)
        assert clock.t_days == -10.0
        assert clock.state("earth").r_au[1] < 0

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_delta_is_noop(self, clock, bad):
        clock.set_show_trails(True)
        clock.advance(1.0)
        before = body_states(clock)
        t_before = clock.t_days

        result = clock.advance(bad)

        assert not result.advanced
        assert clock.t_days == t_before
        assert body_states(clock) == before

    def test_paused_clock_does_not_advance(self, clock):
        clock.set_paused(True)
        before = body_states(clock)
        result = clock.advance(10.0)
        assert not result.advanced
        assert clock.t_days == 0.0
        assert body_states(clock) == before

    def test_unusable_period_leaves_state_unchanged(self, clock):
        bad = BodyState(key="bad", elements=SimpleNamespace(a_au=1.0, e=0.1, period_yr=0.0, name="Bad"))
        bad.r_au = (0.5, 0.5)
        clock.states["bad"] = bad

        result = clock.advance(1.0)

        assert result.skipped == ("bad",)
        assert clock.states["bad"].r_au == (0.5, 0.5)
        assert clock.state("earth").M_rad > 0

    def test_tick_failure_pauses_clock(self, clock, monkeypatch):
        def boom(*_args, **_kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("solar_sim.simulation.clock.compute_position", boom)
        result = clock.advance(1.0)

        assert result.error == "Simulation error: boom"
        assert clock.is_paused
        assert clock.last_error == "Simulation error: boom"

        monkeypatch.undo()
        assert not clock.advance(1.0).advanced

    def test_tick_failure_leaves_time_and_bodies_untouched(self, clock, monkeypatch):
        clock.advance(3.0)
        before_t = clock.t_days
        before = body_states(clock)
        calls = []

        def fail_on_third(elements, M_rad):
            calls.append(M_rad)
            if len(calls) == 3:
                raise RuntimeError("boom")
            return compute_position(elements, M_rad)

        monkeypatch.setattr("solar_sim.simulation.clock.compute_position", fail_on_third)
        result = clock.advance(1.0)

        assert not result.advanced
        assert len(calls) == 3
        assert clock.is_paused
        assert clock.t_days == before_t
        assert body_states(clock) == before

    def test_fallback_bodies_are_reported(self, config):
        scenario = Scenario(name="Test")
        scenario.add_body("earth", PLANETS["earth"])
        clock = SimulationClock(scenario=scenario, config=config)
        # Swap in elements that bypass validation
        clock.states["earth"].elements = SimpleNamespace(a_au=1.0, e=1.2, period_yr=1.0, name="Earth")

        result = clock.advance(10.0)

        assert result.fallbacks == ("earth",)
        assert clock.state("earth").r_au == (1.0, 0.0)
        assert all(math.isfinite(c) for c in clock.state("earth").v_km_s)

    def test_unconverged_solve_is_reported(self, clock, monkeypatch):
        def unconverged(M_rad, e):
            return KeplerSolution(E_rad=M_rad, iterations=100, converged=False)

        monkeypatch.setattr("solar_sim.physics.orbit.solve_keplers_equation", unconverged)
        result = clock.advance(1.0)

        assert result.advanced
        assert set(result.fallbacks) == set(clock.states)


class TestTrails:
    def test_trails_disabled_keep_buffer_empty(self, clock):
        for _ in range(10):
            clock.advance(1.0)
        assert all(len(s.trail) == 0 for s in clock.states.values())

    def test_trail_is_bounded_fifo(self, clock):
        clock.set_show_trails(True)
        positions = []
        for _ in range(12):
            clock.advance(1.0)
            positions.append(clock.state("earth").r_au)

        trail = clock.state("earth").trail_points()
        assert len(trail) == 5
        assert trail == positions[-5:]

    def test_disabling_trails_clears_them(self, clock):
        clock.set_show_trails(True)
        clock.advance(1.0)
        clock.set_show_trails(False)
        assert all(len(s.trail) == 0 for s in clock.states.values())

    def test_zero_capacity_trail(self):
        state = BodyState(key="earth", elements=PLANETS["earth"], max_trail_length=0)
        state.push_trail((1.0, 0.0))
        assert state.trail_points() == []

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValueError, match="max_trail_length must be non-negative"):
            BodyState(key="earth", elements=PLANETS["earth"], max_trail_length=-1)


class TestControls:
    def test_set_time_speed_validates(self, clock):
        assert clock.set_time_speed(2.0)
        assert clock.time_speed == 2.0
        for bad in [math.nan, math.inf, -0.1, 100.5]:
            assert not clock.set_time_speed(bad)
            assert clock.time_speed == 2.0

    def test_set_time_speed_from_slider(self, clock):
        assert clock.set_time_speed_from_slider(10.0)
        assert clock.time_speed == pytest.approx(1.0)
        assert not clock.set_time_speed_from_slider(math.nan)
        assert not clock.set_time_speed_from_slider(5000.0)

    def test_pause_toggle(self, clock):
        assert not clock.is_paused
        assert clock.toggle_pause() is True
        assert clock.toggle_pause() is False
        clock.set_paused(True)
        assert clock.is_paused

    def test_select_body(self, clock):
        assert clock.select_body("earth")
        assert clock.selected == "earth"
        assert not clock.select_body("pluto")
        assert clock.selected == "earth"
        assert clock.select_body(None)
        assert clock.selected is None

    def test_snapshot_is_a_copy(self, clock):
        clock.set_show_trails(True)
        clock.advance(1.0)
        clock.select_body("venus")
        snap = clock.snapshot()

        assert snap.t_days == clock.simulation_time_days
        assert snap.paused is False
        assert snap.selected == "venus"
        assert snap.bodies["earth"].name == "Earth"
        assert snap.bodies["earth"].trail == (clock.state("earth").r_au,)

        clock.advance(1.0)
        assert len(snap.bodies["earth"].trail) == 1


def test_independent_clocks(config):
    a = SimulationClock.from_config(config)
    b = SimulationClock.from_config(config)
    a.advance(100.0)
    assert b.t_days == 0.0
    assert a.state("earth").r_au != b.state("earth").r_au


def test_elements_are_never_mutated(clock):
    before = dict(clock.config.bodies)
    clock.advance(500.0)
    assert clock.config.bodies == before
    assert isinstance(clock.state("earth").elements, OrbitalElements)
