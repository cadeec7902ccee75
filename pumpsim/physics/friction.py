"""Потери на трение в рукавах и гидростатический напор.

FL = C × (Q/100)² × (L/100) + appliances_psi

Все функции тотальные: некорректные входы (Q ≤ 0, L ≤ 0, NaN) дают 0,
исключения из тика не выходят.

Единицы:
- давление: psi
- расход: gpm
- длина: ft
- диаметр: in
"""

from __future__ import annotations

import logging
import math
from typing import Mapping

from pumpsim.config.coefficients import FRICTION_COEFFICIENTS
from pumpsim.core.types import HoseLeg
from pumpsim.core.units import FT_UNIT, GPM_UNIT, PSI_PER_FOOT


logger = logging.getLogger(__name__)


def _finite_positive(x: float) -> bool:
    return math.isfinite(x) and x > 0.0


def friction_coefficient(
    diameter_in: float,
    table: Mapping[float, float] = FRICTION_COEFFICIENTS,
) -> float:
    """C для диаметра рукава; неизвестный диаметр -> ближайший из таблицы."""

    d = float(diameter_in)
    if d in table:
        return float(table[d])
    if not math.isfinite(d) or d <= 0.0:
        return 0.0

    nearest = min(table.keys(), key=lambda k: abs(k - d))
    logger.warning("unknown hose diameter %.3f in, using C for %.3f in", d, nearest)
    return float(table[nearest])


def hose_friction_psi(
    diameter_in: float,
    length_ft: float,
    gpm: float,
    *,
    coefficient: float | None = None,
) -> float:
    """Потери только в рукаве (без арматуры)."""

    q = float(gpm)
    length = float(length_ft)
    if not (_finite_positive(q) and _finite_positive(length)):
        return 0.0

    c = friction_coefficient(diameter_in) if coefficient is None else float(coefficient)
    qn = q / GPM_UNIT
    return float(c * qn * qn * (length / FT_UNIT))


def friction_loss_psi(leg: HoseLeg, *, coefficient: float | None = None) -> float:
    """Полные потери на ноге: рукав + арматура (appliances_psi).

    coefficient заменяет C из таблицы (например, рукав ручной линии).

    Q ≤ 0 или L ≤ 0 -> 0 (без арматуры: нет потока, нет потерь).
    """

    q = float(leg.gpm)
    length = float(leg.length_ft)
    if not (_finite_positive(q) and _finite_positive(length)):
        return 0.0

    appliances = float(leg.appliances_psi) if math.isfinite(leg.appliances_psi) else 0.0
    return hose_friction_psi(leg.diameter_in, length, q, coefficient=coefficient) + max(0.0, appliances)


def hose_resistance(
    diameter_in: float,
    length_ft: float,
    *,
    coefficient: float | None = None,
) -> float:
    """Сопротивление рукава R (psi/gpm²), FL = R × Q².

    R = C × L / (100² × 100) = C × L / 1e6
    """

    length = float(length_ft)
    if not _finite_positive(length):
        return 0.0
    c = friction_coefficient(diameter_in) if coefficient is None else float(coefficient)
    return float(c * length / (GPM_UNIT * GPM_UNIT * FT_UNIT))


def psi_per_100ft(diameter_in: float, gpm: float) -> float:
    """Потери на 100 ft при заданном расходе (для показаний панели)."""

    return hose_friction_psi(diameter_in, FT_UNIT, gpm)


def coefficient_from_psi_per_100ft(psi_100ft: float, gpm: float) -> float:
    """Обратная конверсия: C из замера psi/100 ft при расходе gpm."""

    q = float(gpm)
    if not _finite_positive(q) or not math.isfinite(psi_100ft):
        return 0.0
    qn = q / GPM_UNIT
    return float(max(0.0, psi_100ft) / (qn * qn))


def elevation_pressure_psi(elevation_ft: float) -> float:
    """Гидростатика: + вверх, − вниз."""

    return float(elevation_ft) * PSI_PER_FOOT


def pressure_to_elevation_ft(pressure_psi: float) -> float:
    return float(pressure_psi) / PSI_PER_FOOT
