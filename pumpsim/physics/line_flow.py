"""Расход линии нагнетания по давлению на выходе насоса.

Каждое назначение сводится к цепочке «постоянные потери + последовательные
квадратичные сопротивления + ствол»:

    pdp = fixed + R × Q² + Q² / K²
    Q   = √((pdp − fixed) / (1/K² + R))

fixed: высота (0.433 psi/ft) и допуск сухотруба.
R:     рукава и арматура (psi/gpm²).
K:     K-фактор ствола, Q = K√NP.

Fog-стволы не дают больше номинала, Blitzfire ограничен 500 gpm.

Обратная задача (какое давление насоса нужно линии на номинальном расходе
ствола): PDP = NP + FL + AL + EP, см. required_pdp_psi().
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from pumpsim.config.coefficients import (
    BLITZ_APPLIANCE_LOSS_500,
    BLITZ_LEADER_DIAMETER_IN,
    BLITZ_NP_LOW,
    BLITZ_NP_STD,
    BLITZFIRE_MAX_GPM,
    DEFAULT_2_5_TIP_IN,
    FREEMAN_COEFF,
    HANDLINE_HOSE_C,
    HANDLINE_HOSE_DIAMETER_IN,
    HANDLINE_NOZZLE_RATED_GPM,
    HANDLINE_NOZZLE_RATED_NP,
    K_MONITOR,
    K_PIPED,
    STANDPIPE_ALLOWANCE_PSI,
)
from pumpsim.core.types import HoseLeg, NozzlePreset
from pumpsim.core.units import FEET_PER_FLOOR
from pumpsim.discharge import (
    Blitzfire,
    DeckGun,
    DischargeLine,
    FdcStandpipe,
    Handline,
    HoseConfig,
    PortableStandpipe,
    SkidLeader,
)
from pumpsim.physics.friction import (
    elevation_pressure_psi,
    friction_loss_psi,
    hose_friction_psi,
    hose_resistance,
)
from pumpsim.physics.nozzle import (
    calc_nozzle_flow,
    calc_required_np,
    get_typical_np,
    k_factor,
    nozzle_k_factor,
    nozzle_rated_cap,
)


@dataclass(frozen=True)
class LineHydraulics:
    """Цепочка линии в замкнутой форме."""

    fixed_psi: float = 0.0
    series_resistance: float = 0.0   # psi/gpm²
    k_factor: float = 0.0            # gpm/√psi
    max_gpm: float | None = None


@dataclass(frozen=True)
class LineFlow:
    gpm: float = 0.0
    display_psi: float = 0.0
    nozzle_psi: float = 0.0


def solve_line_flow(pdp_psi: float, hyd: LineHydraulics) -> float:
    """Q = √((pdp − fixed) / (1/K² + R)), с ограничением max_gpm."""

    pdp = float(pdp_psi)
    if not math.isfinite(pdp) or hyd.k_factor <= 0.0:
        return 0.0
    head = pdp - hyd.fixed_psi
    if head <= 0.0:
        return 0.0

    denom = 1.0 / (hyd.k_factor * hyd.k_factor) + max(0.0, hyd.series_resistance)
    q = math.sqrt(head / denom)
    if hyd.max_gpm is not None:
        q = min(q, hyd.max_gpm)
    return float(q)


def _handline_hose_resistance(hose: HoseConfig) -> float:
    if hose.diameter_in == HANDLINE_HOSE_DIAMETER_IN:
        return hose_resistance(hose.diameter_in, hose.length_ft, coefficient=HANDLINE_HOSE_C)
    return hose_resistance(hose.diameter_in, hose.length_ft)


def _default_2_5_preset() -> NozzlePreset:
    return NozzlePreset(kind="smooth_bore", tip_diameter_in=DEFAULT_2_5_TIP_IN, rated_np_psi=50.0)


def _nozzle_terms(preset: NozzlePreset | None) -> tuple[float, float | None]:
    nozzle = preset if preset is not None else _default_2_5_preset()
    return nozzle_k_factor(nozzle), nozzle_rated_cap(nozzle)


def _floors_psi(floors: int) -> float:
    return elevation_pressure_psi(float(floors) * FEET_PER_FLOOR)


def line_hydraulics(line: DischargeLine, preset: NozzlePreset | None = None) -> LineHydraulics:
    """Свести назначение линии к (fixed, R, K, cap)."""

    a = line.assignment
    hose = line.hose

    if isinstance(a, Handline):
        if preset is None:
            k = k_factor(HANDLINE_NOZZLE_RATED_GPM, HANDLINE_NOZZLE_RATED_NP)
        else:
            k = nozzle_k_factor(preset)
        return LineHydraulics(series_resistance=_handline_hose_resistance(hose), k_factor=k)

    if isinstance(a, FdcStandpipe):
        k, cap = _nozzle_terms(preset)
        return LineHydraulics(
            fixed_psi=STANDPIPE_ALLOWANCE_PSI + _floors_psi(a.floors),
            series_resistance=hose_resistance(hose.diameter_in, hose.length_ft),
            k_factor=k,
            max_gpm=cap,
        )

    if isinstance(a, SkidLeader):
        k, cap = _nozzle_terms(preset)
        r = hose_resistance(BLITZ_LEADER_DIAMETER_IN, a.setback_ft)
        r += hose_resistance(hose.diameter_in, hose.length_ft)
        return LineHydraulics(series_resistance=r, k_factor=k, max_gpm=cap)

    if isinstance(a, Blitzfire):
        np_psi = BLITZ_NP_STD if a.mode == "std" else BLITZ_NP_LOW
        r = hose_resistance(BLITZ_LEADER_DIAMETER_IN, a.len_3in_ft)
        r += BLITZ_APPLIANCE_LOSS_500 / (BLITZFIRE_MAX_GPM * BLITZFIRE_MAX_GPM)
        return LineHydraulics(
            series_resistance=r,
            k_factor=k_factor(BLITZFIRE_MAX_GPM, np_psi),
            max_gpm=BLITZFIRE_MAX_GPM,
        )

    if isinstance(a, PortableStandpipe):
        k, cap = _nozzle_terms(preset)
        r = hose_resistance(BLITZ_LEADER_DIAMETER_IN, a.len_3in_ft)
        r += hose_resistance(hose.diameter_in, hose.length_ft)
        return LineHydraulics(
            fixed_psi=STANDPIPE_ALLOWANCE_PSI + _floors_psi(a.floors),
            series_resistance=r,
            k_factor=k,
            max_gpm=cap,
        )

    if isinstance(a, DeckGun):
        d = a.tip_diameter_in
        return LineHydraulics(series_resistance=K_MONITOR + K_PIPED, k_factor=FREEMAN_COEFF * d * d)

    raise TypeError(f"unsupported assignment: {a!r}")


def resolve_line_gpm(
    line: DischargeLine,
    system_psi: float,
    preset: NozzlePreset | None = None,
) -> LineFlow:
    """Расход и показания одной линии при давлении системы system_psi."""

    line_input = line.line_input_psi(system_psi)
    if line_input <= 0.0:
        return LineFlow(display_psi=max(0.0, line_input))

    hyd = line_hydraulics(line, preset)
    q = solve_line_flow(line_input, hyd)
    np_psi = (q / hyd.k_factor) ** 2 if hyd.k_factor > 0.0 else 0.0
    return LineFlow(gpm=q, display_psi=line_input, nozzle_psi=float(np_psi))


def _rated_np(preset: NozzlePreset) -> float:
    np_psi = preset.rated_np_psi if preset.kind == "smooth_bore" else preset.rated_np_psi_fog
    return float(np_psi or 0.0)


def rated_flow_gpm(preset: NozzlePreset | None) -> float:
    """Номинальный расход ствола при его номинальном NP."""

    if preset is None or not preset.is_valid:
        return 0.0
    return calc_nozzle_flow(preset, _rated_np(preset))


def required_pdp_psi(
    preset: NozzlePreset | None,
    hose: HoseConfig,
    elevation_ft: float = 0.0,
    appliances_psi: float = 0.0,
    *,
    flow_gpm: float | None = None,
    coefficient: float | None = None,
) -> float:
    """Давление насоса для ствола на рукаве: PDP = NP + FL + AL + EP.

    flow_gpm по умолчанию = номинальный расход ствола.
    Невалидный пресет или нулевой расход -> 0.
    """

    q = rated_flow_gpm(preset) if flow_gpm is None else float(flow_gpm)
    if not math.isfinite(q) or q <= 0.0:
        return 0.0

    np_psi = calc_required_np(preset, q)
    fl = friction_loss_psi(HoseLeg(hose.diameter_in, hose.length_ft, q), coefficient=coefficient)
    al = max(0.0, float(appliances_psi))
    return float(np_psi + fl + al + elevation_pressure_psi(elevation_ft))


def _nominal_nozzle(line: DischargeLine, preset: NozzlePreset | None) -> NozzlePreset:
    a = line.assignment
    if isinstance(a, Blitzfire):
        np_psi = BLITZ_NP_STD if a.mode == "std" else BLITZ_NP_LOW
        return NozzlePreset(kind="fog_fixed", rated_gpm=BLITZFIRE_MAX_GPM, rated_np_psi_fog=np_psi)
    if isinstance(a, DeckGun):
        return NozzlePreset(
            kind="smooth_bore",
            tip_diameter_in=a.tip_diameter_in,
            rated_np_psi=get_typical_np("smooth_bore", is_master_stream=True),
        )
    if preset is not None:
        return preset
    if isinstance(a, Handline):
        return NozzlePreset(
            kind="fog_fixed",
            rated_gpm=HANDLINE_NOZZLE_RATED_GPM,
            rated_np_psi_fog=HANDLINE_NOZZLE_RATED_NP,
        )
    return _default_2_5_preset()


def line_required_pdp_psi(line: DischargeLine, preset: NozzlePreset | None = None) -> float:
    """Давление насоса, нужное линии для номинального расхода её ствола."""

    a = line.assignment
    hose = line.hose
    nozzle = _nominal_nozzle(line, preset)
    q = rated_flow_gpm(nozzle)
    if q <= 0.0:
        return 0.0

    if isinstance(a, Handline):
        c = HANDLINE_HOSE_C if hose.diameter_in == HANDLINE_HOSE_DIAMETER_IN else None
        return required_pdp_psi(nozzle, hose, flow_gpm=q, coefficient=c)

    if isinstance(a, FdcStandpipe):
        return required_pdp_psi(
            nozzle, hose, a.floors * FEET_PER_FLOOR, STANDPIPE_ALLOWANCE_PSI, flow_gpm=q
        )

    if isinstance(a, SkidLeader):
        setback = hose_friction_psi(BLITZ_LEADER_DIAMETER_IN, a.setback_ft, q)
        return required_pdp_psi(nozzle, hose, 0.0, setback, flow_gpm=q)

    if isinstance(a, Blitzfire):
        leader = HoseConfig(BLITZ_LEADER_DIAMETER_IN, a.len_3in_ft)
        appliance = BLITZ_APPLIANCE_LOSS_500 * (q / BLITZFIRE_MAX_GPM) ** 2
        return required_pdp_psi(nozzle, leader, 0.0, appliance, flow_gpm=q)

    if isinstance(a, PortableStandpipe):
        leader = hose_friction_psi(BLITZ_LEADER_DIAMETER_IN, a.len_3in_ft, q)
        return required_pdp_psi(
            nozzle, hose, a.floors * FEET_PER_FLOOR, STANDPIPE_ALLOWANCE_PSI + leader, flow_gpm=q
        )

    if isinstance(a, DeckGun):
        piping = (K_MONITOR + K_PIPED) * q * q
        return required_pdp_psi(nozzle, hose, 0.0, piping, flow_gpm=q)

    raise TypeError(f"unsupported assignment: {a!r}")
