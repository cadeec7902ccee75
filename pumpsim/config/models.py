from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from pumpsim.config.coefficients import INTAKE_AMBER_FLOOR_PSI, NFPA_291_RESIDUAL_FLOOR_PSI
from pumpsim.core.units import NOMINAL_TICK_MS
from pumpsim.core.validation import ensure_in_range, ensure_non_negative, ensure_positive


@dataclass(frozen=True)
class PumpConfig:
    rated_gpm: float = 1500.0        # NFPA 1911 rating @ 150 psi net
    tank_capacity_gal: float = 720.0
    max_discharge_psi: float = 400.0

    # ступени насосной кривой (pdp, доля номинала)
    curve_full_psi: float = 150.0
    curve_mid_psi: float = 200.0
    curve_mid_fraction: float = 0.70
    curve_high_fraction: float = 0.50

    def __post_init__(self) -> None:
        ensure_positive(self.rated_gpm, "rated_gpm")
        ensure_non_negative(self.tank_capacity_gal, "tank_capacity_gal")
        ensure_positive(self.max_discharge_psi, "max_discharge_psi")


@dataclass(frozen=True)
class GovernorConfig:
    idle_rpm: float = 650.0          # двигатель без отбора мощности
    engaged_rpm: float = 750.0       # насос включён, регулятор ещё не активен
    max_rpm: float = 2200.0
    psi_per_rpm: float = 1.0 / 0.6   # ~1.667 psi на каждый rpm выше 750
    rpm_per_psi: float = 0.6
    base_psi: float = 50.0           # P_base = intake + 50
    min_set_psi: float = 50.0
    max_set_psi: float = 300.0
    default_set_psi: float = 50.0
    default_set_rpm: float = 1200.0
    rpm_slew_per_tick: float = 50.0

    def __post_init__(self) -> None:
        ensure_positive(self.idle_rpm, "idle_rpm")
        if not (self.idle_rpm <= self.engaged_rpm <= self.max_rpm):
            raise ValueError("rpm limits must satisfy idle <= engaged <= max")
        ensure_positive(self.rpm_slew_per_tick, "rpm_slew_per_tick")
        ensure_in_range(self.default_set_psi, self.min_set_psi, self.max_set_psi, "default_set_psi")
        ensure_in_range(self.default_set_rpm, self.engaged_rpm, self.max_rpm, "default_set_rpm")


@dataclass(frozen=True)
class SupplyConfig:
    default_static_psi: float = 80.0
    residual_floor_psi: float = NFPA_291_RESIDUAL_FLOOR_PSI
    amber_floor_psi: float = INTAKE_AMBER_FLOOR_PSI

    def __post_init__(self) -> None:
        ensure_non_negative(self.default_static_psi, "default_static_psi")
        ensure_non_negative(self.residual_floor_psi, "residual_floor_psi")
        if self.amber_floor_psi > self.residual_floor_psi:
            raise ValueError("amber_floor_psi must be <= residual_floor_psi")


@dataclass(frozen=True)
class SimulationConfig:
    tick_hz: float = 10.0
    nominal_tick_ms: float = NOMINAL_TICK_MS

    def __post_init__(self) -> None:
        ensure_positive(self.tick_hz, "tick_hz")
        ensure_positive(self.nominal_tick_ms, "nominal_tick_ms")

    @property
    def tick_period_s(self) -> float:
        return 1.0 / float(self.tick_hz)


@dataclass(frozen=True)
class SystemConfig:
    # How limited hydrant supply is shared between open discharges.
    # - "proportional": every line scaled by the same factor
    # - "priority": weighted allocation (master streams and standpipes first)
    flow_sharing_mode: Literal["proportional", "priority"] = "proportional"

    pump: PumpConfig = field(default_factory=PumpConfig)
    governor: GovernorConfig = field(default_factory=GovernorConfig)
    supply: SupplyConfig = field(default_factory=SupplyConfig)
    sim: SimulationConfig = field(default_factory=SimulationConfig)

    def __post_init__(self) -> None:
        if self.flow_sharing_mode not in ("proportional", "priority"):
            raise ValueError(f"unknown flow_sharing_mode: {self.flow_sharing_mode!r}")


DEFAULT_SYSTEM_CONFIG = SystemConfig()
