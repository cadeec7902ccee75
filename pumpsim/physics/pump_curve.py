"""Потолки расхода: насосная кривая (NFPA 1911) и доступный расход гидранта (NFPA 291).

Насос номинала rated_gpm:
- pdp ≤ 150 psi  -> 100 % номинала
- pdp ≤ 200 psi  -> 70 %
- pdp > 200 psi  -> 50 %

Кривая ступенчатая, без интерполяции.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from pumpsim.config.coefficients import NFPA_291_EXPONENT, NFPA_291_RESIDUAL_FLOOR_PSI
from pumpsim.config.models import PumpConfig
from pumpsim.core.types import HoseLeg


_DEFAULT_PUMP = PumpConfig()


@dataclass(frozen=True)
class HydrantTestData:
    """Результат испытания гидранта по NFPA 291."""

    static_psi: float
    residual_psi: float
    flow_gpm: float


def pump_curve_max_gpm(rated_gpm: float, pdp_psi: float, cfg: PumpConfig = _DEFAULT_PUMP) -> float:
    rated = float(rated_gpm)
    if not math.isfinite(rated) or rated <= 0.0:
        return 0.0

    pdp = float(pdp_psi)
    if pdp <= cfg.curve_full_psi:
        return rated
    if pdp <= cfg.curve_mid_psi:
        return rated * cfg.curve_mid_fraction
    return rated * cfg.curve_high_fraction


def available_flow_at_residual(
    test: HydrantTestData,
    target_residual_psi: float = NFPA_291_RESIDUAL_FLOOR_PSI,
) -> float:
    """Q2 = Q1 × ((Ps − target) / (Ps − Pr))^0.54.

    Pr ≥ Ps (испытание без падения давления) -> 0.
    """

    ps = float(test.static_psi)
    pr = float(test.residual_psi)
    q1 = float(test.flow_gpm)
    drop_test = ps - pr
    if drop_test <= 0.0 or q1 <= 0.0:
        return 0.0

    base = max(0.0, (ps - float(target_residual_psi)) / drop_test)
    return float(q1 * base ** NFPA_291_EXPONENT)


def compute_truck_max_gpm(
    legs: Sequence[HoseLeg],
    pdp_psi: float,
    current_residual_psi: float,
    rated_gpm: float,
    aff_ceiling_gpm: float | None = None,
    floor_psi: float = NFPA_291_RESIDUAL_FLOOR_PSI,
) -> float:
    """Потолок расхода машины с учётом насоса и гидранта.

    Нет ног подачи или остаточное давление ниже floor_psi (20 psi) -> 0.
    Иначе min(насосная кривая, AFF₂₀), если AFF₂₀ известен.
    """

    if not legs:
        return 0.0
    if float(current_residual_psi) < float(floor_psi):
        return 0.0

    ceiling = pump_curve_max_gpm(rated_gpm, pdp_psi)
    if aff_ceiling_gpm is not None and math.isfinite(aff_ceiling_gpm):
        ceiling = min(ceiling, max(0.0, float(aff_ceiling_gpm)))
    return float(ceiling)
