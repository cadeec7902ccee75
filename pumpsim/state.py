from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Dict, List

from pumpsim.core.types import BadgeColor, Source
from pumpsim.discharge import DischargeLine, default_discharges
from pumpsim.governor import GovernorState
from pumpsim.hydrant import HydrantConfig


@dataclass
class Gauges:
    # давления (psi), обороты, вода в цистерне (gal)
    master_intake: float = 0.0
    master_discharge: float = 0.0
    rpm: float = 650.0
    water_gal: float = 720.0


@dataclass
class Totals:
    gpm_total_now: float = 0.0
    gallons_pump_this_engagement: float = 0.0


@dataclass
class HydrantStatus:
    engine_intake_psi: float = 0.0
    hydrant_residual_psi: float = 0.0
    badge: BadgeColor = "green"
    leg_gpm: Dict[str, float] = field(default_factory=dict)
    ceiling_gpm: float = 0.0
    limited: bool = False


@dataclass
class SimulationContext:
    pump_engaged: bool = False
    source: Source | None = None

    gauges: Gauges = field(default_factory=Gauges)
    governor: GovernorState = field(default_factory=GovernorState)
    discharges: List[DischargeLine] = field(default_factory=default_discharges)
    hydrant: HydrantConfig = field(default_factory=HydrantConfig)
    hydrant_status: HydrantStatus = field(default_factory=HydrantStatus)
    totals: Totals = field(default_factory=Totals)

    system_psi: float = 0.0
    target_rpm: float = 650.0
    last_tick_ms: float = 0.0
    tick_count: int = 0

    def line(self, line_id: str) -> DischargeLine:
        for d in self.discharges:
            if d.id == line_id:
                return d
        raise KeyError(f"unknown discharge line: {line_id!r}")

    def copy(self) -> "SimulationContext":
        return copy.deepcopy(self)
