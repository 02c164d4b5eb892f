from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

import plotly.graph_objects as go

from solar_sim.core.config import SimulationConfig
from solar_sim.physics.orbit import OrbitalElements, aphelion, orbit_ellipse, perihelion
from solar_sim.simulation.clock import ClockSnapshot
from solar_sim.simulation.engine import SimulationLog

# Hex colors per planet key; anything else gets plotly's default cycle
PLANET_COLORS: Dict[str, str] = {
    "mercury": "#8c7753",
    "venus": "#ffc649",
    "earth": "#4a90e2",
    "mars": "#e27b58",
    "jupiter": "#c88b3a",
    "saturn": "#f4d47c",
    "uranus": "#4fd0e7",
    "neptune": "#4166f5",
}


def build_scene_figure(
    snapshot: ClockSnapshot,
    bodies: Dict[str, OrbitalElements],
    show_orbits: bool = True,
    show_labels: bool = True,
    show_velocity_vectors: bool = False,
    show_peri_apo: bool = False,
    velocity_scale_au: float = 0.02,
    title: Optional[str] = None,
) -> go.Figure:
    """
    Builds a 2D figure of one snapshot:
      - Sun at the origin
      - Orbit ellipses (Sun at a focus)
      - Trails and current position per body
      - Optional velocity arrows and perihelion/aphelion markers
    """
    fig = go.Figure()

    fig.add_trace(go.Scatter(
        x=[0.0], y=[0.0],
        mode="markers",
        name="Sun",
        marker=dict(size=14, color="#ffd700"),
    ))

    for key, body in snapshot.bodies.items():
        elements = bodies.get(key)
        color = PLANET_COLORS.get(key)

        if show_orbits and elements is not None:
            pts = orbit_ellipse(elements)
            fig.add_trace(go.Scatter(
                x=[p[0] for p in pts], y=[p[1] for p in pts],
                mode="lines",
                name=f"{body.name} orbit",
                line=dict(width=1, color="rgba(255,255,255,0.2)"),
                showlegend=False,
            ))

        if body.trail:
            fig.add_trace(go.Scatter(
                x=[p[0] for p in body.trail], y=[p[1] for p in body.trail],
                mode="lines",
                name=f"{body.name} trail",
                line=dict(width=2, color=color),
                opacity=0.5,
                showlegend=False,
            ))

        fig.add_trace(go.Scatter(
            x=[body.r_au[0]], y=[body.r_au[1]],
            mode="markers+text" if show_labels else "markers",
            text=[body.name] if show_labels else None,
            textposition="top center",
            name=body.name,
            marker=dict(
                size=10 if key == snapshot.selected else 7,
                color=color,
                line=dict(width=2 if key == snapshot.selected else 0, color="#ffffff"),
            ),
        ))

        if show_velocity_vectors:
            vx, vy = body.v_km_s
            x0, y0 = body.r_au
            fig.add_annotation(
                x=x0 + vx * velocity_scale_au, y=y0 + vy * velocity_scale_au,
                ax=x0, ay=y0,
                xref="x", yref="y", axref="x", ayref="y",
                showarrow=True, arrowhead=2, arrowcolor="#00ff00",
            )

        if show_peri_apo and elements is not None:
            peri = perihelion(elements)
            apo = aphelion(elements)
            fig.add_trace(go.Scatter(
                x=[peri[0], apo[0]], y=[peri[1], apo[1]],
                mode="markers",
                name=f"{body.name} peri/apo",
                marker=dict(size=5, color=["rgba(255,100,100,0.6)", "rgba(100,100,255,0.6)"]),
                showlegend=False,
            ))

    fig.update_layout(
        title=title or f"Solar System, t = {snapshot.t_days:.1f} days",
        xaxis=dict(title="X (AU)", zeroline=False),
        yaxis=dict(title="Y (AU)", zeroline=False, scaleanchor="x", scaleratio=1),
        plot_bgcolor="#000000",
        margin=dict(l=0, r=0, t=40, b=0),
        legend=dict(orientation="h"),
    )
    return fig


def render_snapshot(
    snapshot: ClockSnapshot,
    config: SimulationConfig,
    out_html: str = "out/solar_scene.html",
    **kwargs,
) -> str:
    fig = build_scene_figure(snapshot, config.bodies, **kwargs)
    Path(out_html).parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, auto_open=False)
    return out_html


def render_log_tracks(
    log: SimulationLog,
    out_html: str = "out/solar_tracks.html",
) -> str:
    """
    Renders a static 2D scene:
      - Sun
      - Recorded track for each body
      - Last position marker for each body
    """
    fig = go.Figure()
    fig.add_trace(go.Scatter(x=[0.0], y=[0.0], mode="markers", name="Sun", marker=dict(size=14, color="#ffd700")))

    for key, samples in log.body_positions_au.items():
        if not samples:
            continue
        xs: List[float] = [r[0] for (_t, r) in samples]
        ys: List[float] = [r[1] for (_t, r) in samples]
        color = PLANET_COLORS.get(key)

        fig.add_trace(go.Scatter(x=xs, y=ys, mode="lines", name=f"{key} track", line=dict(color=color)))

        # last point
        fig.add_trace(go.Scatter(
            x=[xs[-1]], y=[ys[-1]],
            mode="markers",
            name=f"{key} now",
            marker=dict(size=7, color=color),
        ))

    fig.update_layout(
        title="Solar System Playback (Static Scene)",
        xaxis=dict(title="X (AU)"),
        yaxis=dict(title="Y (AU)", scaleanchor="x", scaleratio=1),
        margin=dict(l=0, r=0, t=40, b=0),
        legend=dict(orientation="h"),
    )

    Path(out_html).parent.mkdir(parents=True, exist_ok=True)
    fig.write_html(out_html, auto_open=False)
    return out_html
