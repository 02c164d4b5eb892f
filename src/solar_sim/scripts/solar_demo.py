from solar_sim.core.config import SimulationConfig
from solar_sim.physics.orbit import kepler_third_law_period
from solar_sim.simulation.clock import SimulationClock
from solar_sim.simulation.engine import Engine
from solar_sim.simulation.info import current_date_label, selected_body_info
from solar_sim.simulation.systems.state_recorder import StateRecorderSystem
from solar_sim.visualization.export_log import export_log_to_json
from solar_sim.visualization.plotly_viewer import render_log_tracks, render_snapshot

config = SimulationConfig(time_speed=1.0, show_trails=True, start_at_current_date=True)
clock = SimulationClock.from_config(config)
clock.select_body("earth")

# Kepler's third law vs configured periods
for key, elements in config.bodies.items():
    print(f"{key:8s} configured={elements.period_yr:8.3f} yr  derived={kepler_third_law_period(elements):8.3f} yr")

# One simulated year, one day per tick
engine = Engine(delta_days=1.0, systems=[StateRecorderSystem()])
log = engine.run(clock, n_ticks=365)

print("\nDate:", current_date_label(clock))
info = selected_body_info(clock)
if info is not None:
    print("\n".join(info.lines()))

print("\nRecorded positions:", {k: len(v) for k, v in log.body_positions_au.items()})
print("Events:", len(log.events))

print(render_snapshot(clock.snapshot(), config, show_velocity_vectors=True, show_peri_apo=True))
print(render_log_tracks(log))
print(export_log_to_json(log))
