"""
Tests for the state recorder system.
"""
import math

from solar_sim.core.config import PLANETS, SimulationConfig
from solar_sim.simulation.clock import SimulationClock
from solar_sim.simulation.engine import Engine, SimulationLog
from solar_sim.simulation.scenario import Scenario
from solar_sim.simulation.systems.state_recorder import StateRecorderSystem


def make_clock(*keys):
    scenario = Scenario(name="Test")
    for key in keys:
        scenario.add_body(key, PLANETS[key])
    return SimulationClock(scenario=scenario, config=SimulationConfig(time_speed=1.0, start_at_current_date=False))


class TestStateRecorderSystem:
    def test_system_creation(self):
        system = StateRecorderSystem()
        assert system.name == "state_recorder"

    def test_records_body_positions(self):
        clock = make_clock("earth")
        log = SimulationLog()
        system = StateRecorderSystem()

        system.on_step(clock, log)
        clock.advance(10.0)
        system.on_step(clock, log)

        assert len(log.body_positions_au["earth"]) == 2
        t0, r0 = log.body_positions_au["earth"][0]
        t1, r1 = log.body_positions_au["earth"][1]
        assert t0 == 0.0
        assert t1 == 10.0
        # Position should be different at different times
        assert r0 != r1

    def test_records_multiple_bodies(self):
        clock = make_clock("earth", "mars")
        log = Engine(delta_days=5.0, systems=[StateRecorderSystem()]).run(clock, n_ticks=4)

        assert set(log.body_positions_au) == {"earth", "mars"}
        assert len(log.body_positions_au["earth"]) == 4
        assert len(log.body_speeds_km_s["mars"]) == 4

    def test_recorded_speed_follows_kepler_second_law(self):
        # Mercury moves fastest near perihelion (t=0) and slowest near aphelion
        clock = make_clock("mercury")
        half_period_days = PLANETS["mercury"].period_days / 2
        log = Engine(delta_days=half_period_days / 50, systems=[StateRecorderSystem()]).run(clock, n_ticks=50)

        speeds = [v for (_t, v) in log.body_speeds_km_s["mercury"]]
        assert all(b <= a for a, b in zip(speeds, speeds[1:]))
        assert math.isclose(log.body_positions_au["mercury"][-1][0], half_period_days)
