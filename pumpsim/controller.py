"""Контроллер насосной панели: единственный писатель состояния симуляции.

Сеттеры (действия оператора) меняют контекст напрямую и сразу пересчитывают
давление системы и целевые обороты. Тик `sim_tick()` считает в рабочей копии
контекста и коммитит её одним присваиванием.

Порядок тика:
1. давление системы из регулятора (вход гидранта берётся с прошлого тика);
2. расход каждой линии по назначению;
3. на гидранте: потолок подачи (насос, AFF, пол остаточного давления
   из SupplyConfig), распределение дефицита между линиями, разделение по ногам;
4. интегрирование галлонов (из цистерны не больше остатка), итоги, манометры.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Any, Callable, Dict

from pumpsim.config.coefficients import HAV_BOOST_MAX_PSI
from pumpsim.config.models import SystemConfig
from pumpsim.core.types import GOVERNOR_MODES, PORT_ORDER, SOURCES, HoseLeg, NozzlePreset
from pumpsim.core.units import MS_PER_MINUTE
from pumpsim.core.validation import clamp, ensure_one_of
from pumpsim.discharge import (
    MIN_LARGE_LINE_DIAMETER_IN,
    Assignment,
    DischargeLine,
    HoseConfig,
    requires_large_line,
)
from pumpsim.governor import GovernorOutput, RpmFollower, compute_governor
from pumpsim.hydrant import HydrantConfig, intake_badge
from pumpsim.physics.flow_sharing import allocate_flow, line_priorities
from pumpsim.physics.line_flow import line_required_pdp_psi, resolve_line_gpm
from pumpsim.physics.pump_curve import (
    HydrantTestData,
    available_flow_at_residual,
    compute_truck_max_gpm,
)
from pumpsim.physics.supply_split import SupplySplitSolver
from pumpsim.presets import PresetProvider
from pumpsim.state import HydrantStatus, SimulationContext


logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class PumpPanelController:
    def __init__(
        self,
        cfg: SystemConfig | None = None,
        *,
        presets: PresetProvider | None = None,
        context: SimulationContext | None = None,
        solver: SupplySplitSolver | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.cfg = cfg or SystemConfig()
        self.presets = presets
        self.solver = solver or SupplySplitSolver()
        self.clock = clock or _monotonic_ms

        self._ctx = context if context is not None else SimulationContext()
        if context is None:
            self._ctx.gauges.water_gal = self.cfg.pump.tank_capacity_gal
            self._ctx.gauges.rpm = self.cfg.governor.idle_rpm
            self._ctx.target_rpm = self.cfg.governor.idle_rpm
            self._ctx.hydrant.static_psi = self.cfg.supply.default_static_psi

        self.follower = RpmFollower(self._ctx.gauges.rpm, self.cfg.governor.rpm_slew_per_tick)
        self._warned_presets: set[str] = set()

    @property
    def ctx(self) -> SimulationContext:
        return self._ctx

    # ------------------------------------------------------------------
    # Pump / source
    # ------------------------------------------------------------------

    def engage_pump(self, source: str | None = None) -> None:
        ctx = self._ctx
        if source is not None:
            ensure_one_of(source, SOURCES, "source")
            ctx.source = source

        ctx.pump_engaged = True
        ctx.governor.enabled = False
        ctx.last_tick_ms = 0.0
        self._reset_engagement(ctx)
        ctx.gauges.master_intake = self._static_intake_psi(ctx)
        logger.debug("pump engaged, source=%s", ctx.source)
        self.recompute_masters()

    def disengage_pump(self) -> None:
        ctx = self._ctx
        ctx.pump_engaged = False
        ctx.governor.enabled = False
        self._reset_engagement(ctx)
        ctx.hydrant_status = HydrantStatus()
        logger.debug("pump disengaged")
        self.recompute_masters()

    def set_source(self, source: str | None) -> None:
        if source is not None:
            ensure_one_of(source, SOURCES, "source")
        ctx = self._ctx
        ctx.source = source
        ctx.gauges.master_intake = self._static_intake_psi(ctx)
        logger.debug("source -> %s", source)
        self.recompute_masters()

    def set_intake_psi(self, psi: float) -> None:
        self._ctx.gauges.master_intake = max(0.0, float(psi))
        self.recompute_masters()

    def set_tank_level(self, gallons: float) -> None:
        cap = self.cfg.pump.tank_capacity_gal
        self._ctx.gauges.water_gal = clamp(gallons, 0.0, cap)

    # ------------------------------------------------------------------
    # Governor
    # ------------------------------------------------------------------

    def set_governor_mode(self, mode: str) -> None:
        ensure_one_of(mode, GOVERNOR_MODES, "governor mode")
        gov = self._ctx.governor
        gov.mode = mode
        gov.enabled = True
        logger.debug("governor mode -> %s", mode)
        self.recompute_masters()

    def set_governor_enabled(self, enabled: bool) -> None:
        self._ctx.governor.enabled = bool(enabled)
        self.recompute_masters()

    def set_pressure_setpoint(self, psi: float) -> None:
        gov = self._ctx.governor
        gov.set_psi = float(psi)
        gov.clamp_setpoints(self.cfg.governor)
        self.recompute_masters()

    def set_rpm_setpoint(self, rpm: float) -> None:
        gov = self._ctx.governor
        gov.set_rpm = float(rpm)
        gov.clamp_setpoints(self.cfg.governor)
        self.recompute_masters()

    # ------------------------------------------------------------------
    # Discharges
    # ------------------------------------------------------------------

    def set_line_open(self, line_id: str, is_open: bool) -> None:
        self._ctx.line(line_id).open = bool(is_open)
        self.recompute_masters()

    def set_valve_percent(self, line_id: str, percent: float) -> None:
        self._ctx.line(line_id).valve_percent = clamp(percent, 0.0, 100.0)
        self.recompute_masters()

    def set_line_assignment(self, line_id: str, assignment: Assignment) -> None:
        line = self._ctx.line(line_id)
        self._check_line_fits(line.hose, assignment, line_id)
        line.assignment = assignment

    def set_line_hose(self, line_id: str, hose: HoseConfig) -> None:
        line = self._ctx.line(line_id)
        self._check_line_fits(hose, line.assignment, line_id)
        line.hose = hose

    @staticmethod
    def _check_line_fits(hose: HoseConfig, assignment: Assignment, line_id: str) -> None:
        if requires_large_line(assignment) and hose.diameter_in < MIN_LARGE_LINE_DIAMETER_IN:
            raise ValueError(
                f"{assignment.kind} needs a {MIN_LARGE_LINE_DIAMETER_IN}″ or larger discharge, "
                f"line {line_id!r} is {hose.diameter_in}″"
            )

    # ------------------------------------------------------------------
    # Hydrant
    # ------------------------------------------------------------------

    def set_hydrant(self, hydrant: HydrantConfig) -> None:
        self._ctx.hydrant = hydrant
        self._refresh_supply()

    def set_hydrant_leg(self, port: str, leg: HoseLeg | None) -> None:
        ensure_one_of(port, PORT_ORDER, "port")
        setattr(self._ctx.hydrant, port, leg)
        self._refresh_supply()

    def set_tap_mode(self, tap_mode: str) -> None:
        ensure_one_of(tap_mode, ("single", "double", "triple"), "tap_mode")
        self._ctx.hydrant.tap_mode = tap_mode
        self._refresh_supply()

    def set_hav(self, *, enabled: bool, mode: str = "bypass", boost_psi: float = 0.0) -> None:
        ensure_one_of(mode, ("bypass", "boost"), "hav.mode")
        hav = self._ctx.hydrant.hav
        hav.enabled = bool(enabled)
        hav.mode = mode
        hav.boost_psi = clamp(boost_psi, 0.0, HAV_BOOST_MAX_PSI)
        self._refresh_supply()

    def set_static_psi(self, psi: float) -> None:
        self._ctx.hydrant.static_psi = max(0.0, float(psi))
        self._refresh_supply()

    def set_flow_test(self, test: HydrantTestData | None) -> None:
        self._ctx.hydrant.flow_test = test

    def _refresh_supply(self) -> None:
        # вход насоса пересчитывается как при нулевом расходе
        self._ctx.gauges.master_intake = self._static_intake_psi(self._ctx)
        self.recompute_masters()

    # ------------------------------------------------------------------
    # Masters / RPM
    # ------------------------------------------------------------------

    def _governor(self, ctx: SimulationContext) -> GovernorOutput:
        return compute_governor(
            ctx.governor,
            engaged=ctx.pump_engaged,
            source=ctx.source,
            intake_psi=ctx.gauges.master_intake,
            cfg=self.cfg.governor,
            pump=self.cfg.pump,
        )

    def _apply_masters(self, ctx: SimulationContext, out: GovernorOutput) -> None:
        ctx.system_psi = out.system_psi
        ctx.target_rpm = out.target_rpm

        discharge = 0.0
        for line in ctx.discharges:
            if line.open:
                discharge = max(discharge, line.line_input_psi(out.system_psi))
        ctx.gauges.master_discharge = clamp(discharge, 0.0, self.cfg.pump.max_discharge_psi)

    def recompute_masters(self) -> None:
        self._apply_masters(self._ctx, self._governor(self._ctx))

    def tick_rpm(self) -> float:
        rpm = self.follower.step(self._ctx.target_rpm)
        self._ctx.gauges.rpm = rpm
        return rpm

    # ------------------------------------------------------------------
    # Simulation tick
    # ------------------------------------------------------------------

    def sim_tick(self, now_ms: float | None = None, *, dt_ms: float | None = None) -> None:
        if not self._ctx.pump_engaged:
            return

        now = self.clock() if now_ms is None else float(now_ms)
        work = self._ctx.copy()

        if dt_ms is not None:
            dt = max(0.0, float(dt_ms))
        elif work.last_tick_ms == 0.0:
            dt = self.cfg.sim.nominal_tick_ms
        else:
            dt = max(0.0, now - work.last_tick_ms)

        gov = self._governor(work)
        system_psi = gov.system_psi

        demand: Dict[str, float] = {}
        tank_empty = work.source == "tank" and work.gauges.water_gal <= 0.0
        for line in work.discharges:
            preset = self._preset_for(line)
            flow = resolve_line_gpm(line, system_psi, preset)
            line.display_psi = flow.display_psi
            if work.source is None or tank_empty:
                demand[line.id] = 0.0
            else:
                demand[line.id] = flow.gpm

        if work.source == "hydrant":
            demand = self._supply_hydrant(work, demand, system_psi)

        minutes = dt / MS_PER_MINUTE
        total_gpm = sum(demand.get(line.id, 0.0) for line in work.discharges)
        volume = total_gpm * minutes
        scale = 1.0
        if work.source == "tank" and volume > work.gauges.water_gal:
            # из цистерны не уходит больше, чем в ней было
            scale = work.gauges.water_gal / volume
            volume = work.gauges.water_gal

        for line in work.discharges:
            gpm = demand.get(line.id, 0.0)
            line.gpm_now = gpm
            line.gallons_this_engagement += gpm * minutes * scale

        work.totals.gpm_total_now = total_gpm
        work.totals.gallons_pump_this_engagement += volume
        if work.source == "tank":
            work.gauges.water_gal = max(0.0, work.gauges.water_gal - volume)

        self._apply_masters(work, gov)
        work.last_tick_ms = now
        work.tick_count += 1

        self._ctx = work

    def _supply_hydrant(
        self,
        work: SimulationContext,
        demand: Dict[str, float],
        system_psi: float,
    ) -> Dict[str, float]:
        hyd = work.hydrant
        legs = hyd.active_legs()
        hav_mode = hyd.hav.active_mode
        boost = hyd.hav.boost_psi
        floor = self.cfg.supply.residual_floor_psi

        current_residual = self.solver.residual_at(
            legs, work.totals.gpm_total_now, hyd.static_psi, hav_mode=hav_mode, hav_boost_psi=boost
        )
        aff = None
        if hyd.flow_test is not None:
            aff = available_flow_at_residual(hyd.flow_test, floor)

        truck_max = compute_truck_max_gpm(
            list(legs.values()), system_psi, current_residual, self.cfg.pump.rated_gpm, aff, floor
        )
        floor_max = self.solver.max_total_for_residual(
            legs, hyd.static_psi, floor, hav_mode=hav_mode
        )
        ceiling = min(truck_max, floor_max)

        requested = sum(demand.values())
        limited = requested > ceiling
        if limited:
            kinds = {line.id: line.assignment.kind for line in work.discharges}
            demand = allocate_flow(
                demand, ceiling, self.cfg.flow_sharing_mode, line_priorities(kinds)
            )

        hyd.clear_flows()
        sol = self.solver.solve(
            legs, sum(demand.values()), hyd.static_psi, hav_mode=hav_mode, hav_boost_psi=boost
        )
        work.hydrant_status = HydrantStatus(
            engine_intake_psi=sol.engine_intake_psi,
            hydrant_residual_psi=sol.hydrant_residual_psi,
            badge=intake_badge(sol.hydrant_residual_psi, floor, self.cfg.supply.amber_floor_psi),
            leg_gpm=dict(sol.leg_gpm),
            ceiling_gpm=ceiling,
            limited=limited,
        )
        # вход насоса на следующий тик
        work.gauges.master_intake = sol.engine_intake_psi
        return demand

    def _preset_for(self, line: DischargeLine) -> NozzlePreset | None:
        if self.presets is None:
            return None
        preset = self.presets.get_effective_nozzle(line.context())
        if preset is not None and not preset.is_valid and line.open:
            if line.id not in self._warned_presets:
                logger.warning("malformed nozzle preset %r on line %s, flow is 0", preset.id, line.id)
                self._warned_presets.add(line.id)
        return preset

    def _static_intake_psi(self, ctx: SimulationContext) -> float:
        if ctx.source != "hydrant":
            return 0.0
        hyd = ctx.hydrant
        legs = {
            p: HoseLeg(leg.diameter_in, leg.length_ft, 0.0, leg.gate_open, leg.appliances_psi)
            for p, leg in hyd.active_legs().items()
        }
        sol = self.solver.solve(legs, 0.0, hyd.static_psi)
        return sol.engine_intake_psi

    def _reset_engagement(self, ctx: SimulationContext) -> None:
        for line in ctx.discharges:
            line.reset_engagement()
        ctx.totals.gpm_total_now = 0.0
        ctx.totals.gallons_pump_this_engagement = 0.0
        ctx.hydrant.clear_flows()

    # ------------------------------------------------------------------
    # Readout
    # ------------------------------------------------------------------

    def readout(self) -> Dict[str, Any]:
        ctx = self._ctx
        return {
            "pump_engaged": ctx.pump_engaged,
            "source": ctx.source,
            "system_psi": ctx.system_psi,
            "target_rpm": ctx.target_rpm,
            "gauges": asdict(ctx.gauges),
            "totals": asdict(ctx.totals),
            "hydrant": asdict(ctx.hydrant_status),
            "lines": {
                line.id: {
                    "gpm_now": line.gpm_now,
                    "display_psi": line.display_psi,
                    "gallons_this_engagement": line.gallons_this_engagement,
                    "required_pdp_psi": line_required_pdp_psi(line, self._preset_for(line)),
                }
                for line in ctx.discharges
            },
        }
