from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from solar_sim.core.config import SimulationConfig
from solar_sim.physics.orbit import OrbitalElements

@dataclass
class Scenario:
    """
    Container for all bodies orbiting the central star.
    Keep this pure: just data + lookup, no stepping logic.
    """
    name: str
    bodies: Dict[str, OrbitalElements] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: SimulationConfig, name: str = "Solar System") -> "Scenario":
        scenario = cls(name=name)
        for key, elements in config.bodies.items():
            scenario.add_body(key, elements)
        return scenario

    def add_body(self, key: str, elements: OrbitalElements) -> None:
        if not key or not key.strip():
            raise ValueError("Body key cannot be empty")
        if key in self.bodies:
            raise ValueError(f"Duplicate body key: {key}")
        self.bodies[key] = elements

    def body_items(self) -> List[Tuple[str, OrbitalElements]]:
        return list(self.bodies.items())
