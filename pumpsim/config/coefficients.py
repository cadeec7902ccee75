"""Таблицы коэффициентов гидравлики (единственный источник истины).

Этот модуль намеренно data-only:
- коэффициенты потерь на трение по диаметру рукава;
- константы стволов, арматуры и подключений к гидранту;
- веса разделения подачи по портам гидранта (SplitWeights).

Ключевое правило:
- Коэффициенты C откалиброваны по полевым замерам, а не взяты из таблиц IFSTA
  (например, 5″ LDH = 0.025, а не 0.08).
- Любой модуль, которому нужен C, берёт его отсюда. Дублирующих литералов нет,
  тесты сверяются с этой же таблицей.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping

# ---------------------------------------------------------------------------
# Friction loss: FL = C × (Q/100)² × (L/100)
# ---------------------------------------------------------------------------

FRICTION_COEFFICIENTS: Mapping[float, float] = MappingProxyType(
    {
        5.0: 0.025,   # 5″ LDH, field-calibrated
        4.0: 0.2,     # 4″ LDH
        3.0: 0.8,     # 3″ supply / leader
        2.5: 2.0,     # 2½″ attack
        1.75: 15.5,   # 1¾″ attack
    }
)

# 1¾″ Key Combat Ready: ~20.2 psi/100′ @ 175 gpm. Used only by the handline curve.
HANDLINE_HOSE_C: float = 6.59
HANDLINE_HOSE_DIAMETER_IN: float = 1.75

# ---------------------------------------------------------------------------
# Nozzles
# ---------------------------------------------------------------------------

FREEMAN_COEFF: float = 29.7          # Q = 29.7 × d² × √NP

NP_SMOOTHBORE_HAND: float = 50.0
NP_MASTER_STREAM: float = 80.0
NP_FOG_DEFAULT: float = 100.0

# Generic handline nozzle (fog 175 gpm @ 75 psi)
HANDLINE_NOZZLE_RATED_GPM: float = 175.0
HANDLINE_NOZZLE_RATED_NP: float = 75.0

# Smooth bore used by 2½″ assignments when no preset is supplied
DEFAULT_2_5_TIP_IN: float = 1.125

# ---------------------------------------------------------------------------
# Appliances / assignments
# ---------------------------------------------------------------------------

STANDPIPE_ALLOWANCE_PSI: float = 25.0
ADAPTER_2_5_TO_STORZ_PSI: float = 3.0

BLITZ_NP_STD: float = 100.0
BLITZ_NP_LOW: float = 55.0
BLITZ_APPLIANCE_LOSS_500: float = 22.0   # psi at 500 gpm, quadratic
BLITZFIRE_MAX_GPM: float = 500.0
BLITZ_LEADER_DIAMETER_IN: float = 3.0

K_MONITOR: float = 25.0 / (1200.0 * 1200.0)   # psi/gpm², 25 psi @ 1200 gpm
K_PIPED: float = 12.0 / (1000.0 * 1000.0)     # psi/gpm², 12 psi @ 1000 gpm

DECK_GUN_TIPS: Mapping[str, float] = MappingProxyType(
    {
        "1_3/8": 1.375,
        "1_1/2": 1.5,
        "1_3/4": 1.75,
    }
)

# ---------------------------------------------------------------------------
# Hydrant supply
# ---------------------------------------------------------------------------

LOSS_HYDRANT_BODY_PSI: float = 2.0
K_INTAKE_PLUMB: float = 6.4e-6     # psi/gpm², ~26 psi at 2000 gpm
HAV_BYPASS_LOSS_PSI: float = 4.0
HAV_BOOST_MAX_PSI: float = 50.0
NFPA_291_EXPONENT: float = 0.54
NFPA_291_RESIDUAL_FLOOR_PSI: float = 20.0
INTAKE_AMBER_FLOOR_PSI: float = 10.0     # бейдж входа: amber 10..19, red < 10


def _default_port_geometry() -> Dict[str, float]:
    return {"steamer": 2.3, "sideA": 1.0, "sideB": 1.0}


@dataclass(frozen=True)
class SplitWeights:
    """Веса разделения подачи по параллельным ногам.

    port_geometry:
        Геометрический множитель порта. Стимер (4½″/5″ Storz) получает
        дополнительный множитель относительно боковых 2½″ портов.
        Стартовое разбиение: w = port_geometry × d².

    side_port_resistance:
        Сопротивление бокового порта, psi/gpm². Сопротивление порта
        масштабируется как 1/geometry⁴ (как у отверстия ~ 1/d⁴).

    max_iterations / tolerance_gpm / relaxation:
        Параметры fixed-point итерации (≤12 проходов, остановка по max|ΔQ|).
    """

    port_geometry: Mapping[str, float] = field(default_factory=_default_port_geometry)
    side_port_resistance: float = 1.6e-5
    max_iterations: int = 12
    tolerance_gpm: float = 0.5
    relaxation: float = 0.5
    min_resistance: float = 1e-9

    def geometry(self, port: str) -> float:
        return float(self.port_geometry.get(port, 1.0))

    def port_resistance(self, port: str) -> float:
        g = self.geometry(port)
        return float(self.side_port_resistance) / (g ** 4)

    def seed_weight(self, port: str, diameter_in: float) -> float:
        d = max(0.0, float(diameter_in))
        return self.geometry(port) * d * d


DEFAULT_SPLIT_WEIGHTS = SplitWeights()
