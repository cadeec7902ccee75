"""Конфигурация подключения к гидранту: порты, ноги подачи, HAV, данные испытания."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from pumpsim.config.coefficients import (
    ADAPTER_2_5_TO_STORZ_PSI,
    HAV_BOOST_MAX_PSI,
    INTAKE_AMBER_FLOOR_PSI,
    NFPA_291_RESIDUAL_FLOOR_PSI,
)
from pumpsim.core.types import PORT_ORDER, BadgeColor, HavMode, HoseLeg, PortId, TapMode
from pumpsim.core.validation import clamp, ensure_non_negative, ensure_one_of
from pumpsim.physics.pump_curve import HydrantTestData


_PORTS_BY_TAP: Dict[str, tuple[PortId, ...]] = {
    "single": ("steamer",),
    "double": ("steamer", "sideA"),
    "triple": ("steamer", "sideA", "sideB"),
}


@dataclass
class HavConfig:
    enabled: bool = False
    mode: HavMode = "bypass"
    boost_psi: float = 0.0

    def __post_init__(self) -> None:
        ensure_one_of(self.mode, ("bypass", "boost"), "hav.mode")
        self.boost_psi = clamp(self.boost_psi, 0.0, HAV_BOOST_MAX_PSI)

    @property
    def active_mode(self) -> HavMode | None:
        return self.mode if self.enabled else None


@dataclass
class HydrantConfig:
    tap_mode: TapMode = "single"
    steamer: HoseLeg | None = None
    sideA: HoseLeg | None = None
    sideB: HoseLeg | None = None
    static_psi: float = 80.0
    hav: HavConfig = field(default_factory=HavConfig)
    flow_test: HydrantTestData | None = None

    def __post_init__(self) -> None:
        ensure_one_of(self.tap_mode, _PORTS_BY_TAP.keys(), "tap_mode")
        ensure_non_negative(self.static_psi, "static_psi")

    def leg(self, port: str) -> HoseLeg | None:
        ensure_one_of(port, PORT_ORDER, "port")
        return getattr(self, port)

    def active_legs(self) -> Dict[str, HoseLeg]:
        """Подключённые ноги с открытыми задвижками, в порядке портов."""

        out: Dict[str, HoseLeg] = {}
        for port in _PORTS_BY_TAP[self.tap_mode]:
            leg = getattr(self, port)
            if leg is not None and leg.gate_open:
                out[port] = leg
        return out

    def clear_flows(self) -> None:
        for port in PORT_ORDER:
            leg = getattr(self, port)
            if leg is not None:
                leg.gpm = 0.0


def side_leg(diameter_in: float, length_ft: float, *, storz_adapter: bool = True) -> HoseLeg:
    """Нога на боковой 2½″ порт; LDH подключается через переходник на Storz."""

    appliances = ADAPTER_2_5_TO_STORZ_PSI if storz_adapter else 0.0
    return HoseLeg(diameter_in=diameter_in, length_ft=length_ft, appliances_psi=appliances)


def intake_badge(
    residual_psi: float,
    floor_psi: float = NFPA_291_RESIDUAL_FLOOR_PSI,
    amber_psi: float = INTAKE_AMBER_FLOOR_PSI,
) -> BadgeColor:
    if residual_psi >= floor_psi:
        return "green"
    if residual_psi >= amber_psi:
        return "amber"
    return "red"
