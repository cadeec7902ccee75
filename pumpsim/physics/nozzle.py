"""Стволы: формула Фримена (сплошная струя) и распылители (fog).

Сплошная струя: Q = 29.7 × d² × √NP
Fog:            Q = rated_gpm при NP > 0 (ствол работает на номинале)

Для решения «рукав + ствол» в замкнутой форме используется K-фактор:
Q = K × √NP.
"""

from __future__ import annotations

import math

from pumpsim.config.coefficients import (
    FREEMAN_COEFF,
    NP_FOG_DEFAULT,
    NP_MASTER_STREAM,
    NP_SMOOTHBORE_HAND,
)
from pumpsim.core.types import FOG_KINDS, NozzlePreset


def freeman_gpm(tip_diameter_in: float, np_psi: float) -> float:
    d = float(tip_diameter_in)
    if not math.isfinite(d) or d <= 0.0:
        return 0.0
    p = float(np_psi)
    if not math.isfinite(p):
        return 0.0
    return float(FREEMAN_COEFF * d * d * math.sqrt(max(0.0, p)))


def calc_nozzle_flow(preset: NozzlePreset | None, np_psi: float) -> float:
    """Расход ствола (gpm) при давлении на стволе NP (psi).

    Невалидный или отсутствующий пресет -> 0.
    """

    if preset is None or not preset.is_valid:
        return 0.0
    if preset.kind == "smooth_bore":
        return freeman_gpm(preset.tip_diameter_in, np_psi)

    p = float(np_psi)
    if not math.isfinite(p) or p <= 0.0:
        return 0.0
    return float(preset.rated_gpm)


def calc_required_np(preset: NozzlePreset | None, flow_gpm: float) -> float:
    """Давление на стволе, нужное для заданного расхода.

    Сплошная струя: NP = (Q / (29.7 d²))²; fog: номинальное NP (по умолчанию 100).
    """

    if preset is None:
        return 0.0
    if preset.kind == "smooth_bore":
        d = preset.tip_diameter_in
        q = float(flow_gpm)
        if d is None or d <= 0.0 or not math.isfinite(q) or q <= 0.0:
            return 0.0
        return float((q / (FREEMAN_COEFF * d * d)) ** 2)
    if preset.kind in FOG_KINDS:
        np_fog = preset.rated_np_psi_fog
        if np_fog is None or np_fog <= 0.0:
            return NP_FOG_DEFAULT
        return float(np_fog)
    return 0.0


def get_typical_np(kind: str, is_master_stream: bool = False) -> float:
    if kind == "smooth_bore":
        return NP_MASTER_STREAM if is_master_stream else NP_SMOOTHBORE_HAND
    return NP_FOG_DEFAULT


def k_factor(rated_gpm: float, rated_np_psi: float) -> float:
    if rated_gpm <= 0.0 or rated_np_psi <= 0.0:
        return 0.0
    return float(rated_gpm / math.sqrt(rated_np_psi))


def nozzle_k_factor(preset: NozzlePreset | None) -> float:
    """K-фактор ствола (gpm/√psi). Невалидный пресет -> 0."""

    if preset is None or not preset.is_valid:
        return 0.0
    if preset.kind == "smooth_bore":
        d = float(preset.tip_diameter_in)
        return float(FREEMAN_COEFF * d * d)
    return k_factor(float(preset.rated_gpm), float(preset.rated_np_psi_fog))


def nozzle_rated_cap(preset: NozzlePreset | None) -> float | None:
    """Ограничение расхода: fog не даёт больше номинала, у сплошной струи ограничения нет."""

    if preset is None or not preset.is_valid or not preset.is_fog:
        return None
    return float(preset.rated_gpm)
