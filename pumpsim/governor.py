"""Регулятор насоса (governor): уставка + давление на входе -> давление системы и целевые обороты.

Режимы:
- выключен:  system = P_base = intake + 50 (на цистерне intake = 0);
- pressure:  system = clamp(set_psi, P_base, 400),
             rpm    = clamp(750 + max(0, set_psi − P_base) × 0.6, 650, 2200);
- rpm:       rpm    = clamp(set_rpm, 750, 2200),
             system = clamp(P_base + max(0, rpm − 750) / 0.6, 0, 400).

Насос выключен: 650 об/мин (холостой ход), давления системы нет.
Фактические обороты догоняют целевые не быстрее 50 об/мин за тик.
"""

from __future__ import annotations

from dataclasses import dataclass

from pumpsim.config.models import GovernorConfig, PumpConfig
from pumpsim.core.types import GovernorMode, Source
from pumpsim.core.validation import clamp


_DEFAULT_GOVERNOR = GovernorConfig()
_DEFAULT_PUMP = PumpConfig()


@dataclass
class GovernorState:
    enabled: bool = False
    mode: GovernorMode = "pressure"
    set_psi: float = _DEFAULT_GOVERNOR.default_set_psi
    set_rpm: float = _DEFAULT_GOVERNOR.default_set_rpm

    def clamp_setpoints(self, cfg: GovernorConfig = _DEFAULT_GOVERNOR) -> None:
        self.set_psi = clamp(self.set_psi, cfg.min_set_psi, cfg.max_set_psi)
        self.set_rpm = clamp(self.set_rpm, cfg.engaged_rpm, cfg.max_rpm)


@dataclass(frozen=True)
class GovernorOutput:
    system_psi: float
    target_rpm: float
    base_psi: float


def compute_base_psi(
    source: Source | None,
    intake_psi: float,
    cfg: GovernorConfig = _DEFAULT_GOVERNOR,
) -> float:
    intake = max(0.0, float(intake_psi)) if source == "hydrant" else 0.0
    return intake + cfg.base_psi


def compute_governor(
    state: GovernorState,
    *,
    engaged: bool,
    source: Source | None,
    intake_psi: float,
    cfg: GovernorConfig = _DEFAULT_GOVERNOR,
    pump: PumpConfig = _DEFAULT_PUMP,
) -> GovernorOutput:
    p_base = compute_base_psi(source, intake_psi, cfg)
    p_max = pump.max_discharge_psi

    if not engaged:
        return GovernorOutput(system_psi=0.0, target_rpm=cfg.idle_rpm, base_psi=p_base)

    if not state.enabled:
        return GovernorOutput(system_psi=min(p_base, p_max), target_rpm=cfg.engaged_rpm, base_psi=p_base)

    if state.mode == "pressure":
        system = clamp(state.set_psi, p_base, p_max)
        rpm = cfg.engaged_rpm + max(0.0, state.set_psi - p_base) * cfg.rpm_per_psi
        rpm = clamp(rpm, cfg.idle_rpm, cfg.max_rpm)
        return GovernorOutput(system_psi=system, target_rpm=float(round(rpm)), base_psi=p_base)

    rpm = clamp(state.set_rpm, cfg.engaged_rpm, cfg.max_rpm)
    system = clamp(p_base + max(0.0, rpm - cfg.engaged_rpm) * cfg.psi_per_rpm, 0.0, p_max)
    return GovernorOutput(system_psi=system, target_rpm=rpm, base_psi=p_base)


class RpmFollower:
    """Обороты двигателя с ограничением скорости изменения."""

    def __init__(
        self,
        rpm: float = _DEFAULT_GOVERNOR.idle_rpm,
        max_step: float = _DEFAULT_GOVERNOR.rpm_slew_per_tick,
    ) -> None:
        self.rpm = float(rpm)
        self.max_step = float(max_step)

    def step(self, target_rpm: float) -> float:
        delta = float(target_rpm) - self.rpm
        if abs(delta) <= self.max_step:
            self.rpm = float(target_rpm)
        else:
            self.rpm += self.max_step if delta > 0 else -self.max_step
        return self.rpm
