from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from solar_sim.simulation.engine import SimulationLog


def log_to_dict(log: SimulationLog) -> Dict[str, Any]:
    """
    Playback data:
      {
        "body_positions_au": {"earth": [{"t": 0.0, "r": [x, y]}, ...], ...},
        "body_speeds_km_s": {"earth": [{"t": 0.0, "v": 30.2}, ...], ...},
        "events": [{"type": "fallback", "t_days": 12.0, "body": "mars"}, ...]
      }
    """
    data: Dict[str, Any] = {"body_positions_au": {}, "body_speeds_km_s": {}, "events": list(log.events)}

    for key, samples in log.body_positions_au.items():
        data["body_positions_au"][key] = [{"t": t, "r": [r[0], r[1]]} for (t, r) in samples]

    for key, samples in log.body_speeds_km_s.items():
        data["body_speeds_km_s"][key] = [{"t": t, "v": v} for (t, v) in samples]

    return data


def export_log_to_json(log: SimulationLog, out_path: str = "out/simlog.json") -> str:
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(log_to_dict(log), f)

    return out_path
