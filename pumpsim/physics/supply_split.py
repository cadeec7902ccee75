"""Разделение подачи гидранта по параллельным ногам (steamer / sideA / sideB).

Модель:
- каждая нога = порт гидранта + рукав + арматура, падение давления ~ r × Q²;
- стартовое разбиение ∝ geometry(port) × d²;
- fixed-point итерация: эффективное сопротивление ноги r_eff = ΔP(Q)/Q²,
  новое разбиение ∝ 1/√r_eff (к равным потерям на всех ногах),
  шаг с релаксацией, не более max_iterations проходов;
- остаток от округления уходит на последнюю ногу, Σ Q_i == Q_total точно.

HAV:
- bypass: +4 psi на ноге стимера;
- boost: прибавка 0..50 psi к давлению, движущему ногу стимера. При
  разбиении уменьшает эффективное падение на стимере (стимер тянет больше),
  на вход насоса добавляется с весом доли стимера. Остаточное давление
  магистрали boost не повышает, residual <= static всегда.

Решатель НЕ ограничивает расход по полу 20 psi. Ограничение сверху
(max_total_for_residual) применяет цикл симуляции до вызова solve().
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Mapping

from scipy.optimize import brentq

from pumpsim.config.coefficients import (
    DEFAULT_SPLIT_WEIGHTS,
    HAV_BYPASS_LOSS_PSI,
    HAV_BOOST_MAX_PSI,
    K_INTAKE_PLUMB,
    LOSS_HYDRANT_BODY_PSI,
    NFPA_291_RESIDUAL_FLOOR_PSI,
    SplitWeights,
)
from pumpsim.core.types import HoseLeg
from pumpsim.core.validation import clamp
from pumpsim.physics.friction import friction_loss_psi, hose_resistance


@dataclass
class SupplySolution:
    leg_gpm: Dict[str, float] = field(default_factory=dict)
    leg_loss_psi: Dict[str, float] = field(default_factory=dict)
    total_gpm: float = 0.0
    weighted_loss_psi: float = 0.0
    hydrant_residual_psi: float = 0.0
    engine_intake_psi: float = 0.0
    iterations: int = 0
    converged: bool = True

    def share(self, port: str) -> float:
        if self.total_gpm <= 0.0:
            return 0.0
        return float(self.leg_gpm.get(port, 0.0) / self.total_gpm)


def intake_plumbing_loss_psi(total_gpm: float) -> float:
    q = max(0.0, float(total_gpm))
    return float(K_INTAKE_PLUMB * q * q)


def _boost_psi(hav_mode: str | None, boost_psi: float) -> float:
    if hav_mode != "boost":
        return 0.0
    return clamp(boost_psi, 0.0, HAV_BOOST_MAX_PSI)


class SupplySplitSolver:
    def __init__(self, weights: SplitWeights | None = None) -> None:
        self.weights = weights or DEFAULT_SPLIT_WEIGHTS

    # -- per-leg hydraulics -------------------------------------------------

    def _leg_drop_psi(self, port: str, leg: HoseLeg, q: float, hav_mode: str | None) -> float:
        if q <= 0.0:
            return 0.0
        at_flow = HoseLeg(
            diameter_in=leg.diameter_in,
            length_ft=leg.length_ft,
            gpm=q,
            gate_open=leg.gate_open,
            appliances_psi=leg.appliances_psi,
        )
        drop = self.weights.port_resistance(port) * q * q + friction_loss_psi(at_flow)
        if port == "steamer" and hav_mode == "bypass":
            drop += HAV_BYPASS_LOSS_PSI
        return float(drop)

    def _static_resistance(self, port: str, leg: HoseLeg) -> float:
        # r при Q -> 0: порт + рукав, без постоянных потерь арматуры
        r = self.weights.port_resistance(port) + hose_resistance(leg.diameter_in, leg.length_ft)
        return max(self.weights.min_resistance, float(r))

    def _effective_resistance(
        self,
        port: str,
        leg: HoseLeg,
        q: float,
        hav_mode: str | None,
        boost_psi: float = 0.0,
    ) -> float:
        if q <= 0.0:
            return self._static_resistance(port, leg)
        drop = self._leg_drop_psi(port, leg, q, hav_mode)
        if port == "steamer":
            drop -= boost_psi
        return max(self.weights.min_resistance, float(drop / (q * q)))

    # -- split ----------------------------------------------------------------

    def split(
        self,
        legs: Mapping[str, HoseLeg],
        total_gpm: float,
        *,
        hav_mode: str | None = None,
        hav_boost_psi: float = 0.0,
    ) -> tuple[Dict[str, float], int, bool]:
        ports = list(legs.keys())
        q_total = float(total_gpm)
        if not math.isfinite(q_total) or q_total <= 0.0:
            return {p: 0.0 for p in ports}, 0, True
        if not ports:
            return {}, 0, True
        if len(ports) == 1:
            return {ports[0]: q_total}, 0, True

        w = self.weights
        boost = _boost_psi(hav_mode, hav_boost_psi)
        seed = {p: w.seed_weight(p, legs[p].diameter_in) for p in ports}
        seed_sum = sum(seed.values())
        if seed_sum <= 0.0:
            flows = {p: q_total / len(ports) for p in ports}
        else:
            flows = {p: q_total * seed[p] / seed_sum for p in ports}

        iterations = 0
        converged = False
        for _ in range(int(w.max_iterations)):
            iterations += 1
            inv = {
                p: 1.0 / math.sqrt(self._effective_resistance(p, legs[p], flows[p], hav_mode, boost))
                for p in ports
            }
            inv_sum = sum(inv.values())
            max_delta = 0.0
            new_flows: Dict[str, float] = {}
            for p in ports:
                target = q_total * inv[p] / inv_sum
                q_new = flows[p] + w.relaxation * (target - flows[p])
                max_delta = max(max_delta, abs(q_new - flows[p]))
                new_flows[p] = q_new
            flows = new_flows
            if max_delta < w.tolerance_gpm:
                converged = True
                break

        # остаток на последнюю ногу
        head = sum(flows[p] for p in ports[:-1])
        flows[ports[-1]] = q_total - head
        return flows, iterations, converged

    def solve(
        self,
        legs: Mapping[str, HoseLeg],
        total_gpm: float,
        static_psi: float,
        *,
        hav_mode: str | None = None,
        hav_boost_psi: float = 0.0,
    ) -> SupplySolution:
        """Разделить total_gpm по ногам и посчитать давления на гидранте и входе.

        Записывает gpm в каждую HoseLeg из legs.
        """

        static = max(0.0, float(static_psi))
        if not legs:
            return SupplySolution(hydrant_residual_psi=static, engine_intake_psi=0.0)

        q_total = max(0.0, float(total_gpm)) if math.isfinite(total_gpm) else 0.0
        flows, iterations, converged = self.split(
            legs, q_total, hav_mode=hav_mode, hav_boost_psi=hav_boost_psi
        )
        boost = _boost_psi(hav_mode, hav_boost_psi)

        losses: Dict[str, float] = {}
        weighted = 0.0
        for port, leg in legs.items():
            q = flows[port]
            leg.gpm = q
            drop = self._leg_drop_psi(port, leg, q, hav_mode)
            losses[port] = drop
            if q_total > 0.0:
                weighted += q * drop / q_total

        body = LOSS_HYDRANT_BODY_PSI if q_total > 0.0 else 0.0
        residual = max(0.0, static - body - weighted)
        # boost действует только после гидранта, с весом доли стимера
        boost_gain = boost * flows.get("steamer", 0.0) / q_total if q_total > 0.0 else 0.0
        intake = max(0.0, residual + boost_gain - intake_plumbing_loss_psi(q_total))

        return SupplySolution(
            leg_gpm=dict(flows),
            leg_loss_psi=losses,
            total_gpm=q_total,
            weighted_loss_psi=float(weighted),
            hydrant_residual_psi=float(residual),
            engine_intake_psi=float(intake),
            iterations=iterations,
            converged=converged,
        )

    def residual_at(
        self,
        legs: Mapping[str, HoseLeg],
        total_gpm: float,
        static_psi: float,
        *,
        hav_mode: str | None = None,
        hav_boost_psi: float = 0.0,
    ) -> float:
        """Остаточное давление гидранта без записи в ноги."""

        copies = {
            p: HoseLeg(leg.diameter_in, leg.length_ft, 0.0, leg.gate_open, leg.appliances_psi)
            for p, leg in legs.items()
        }
        sol = self.solve(copies, total_gpm, static_psi, hav_mode=hav_mode, hav_boost_psi=hav_boost_psi)
        return sol.hydrant_residual_psi

    def max_total_for_residual(
        self,
        legs: Mapping[str, HoseLeg],
        static_psi: float,
        floor_psi: float = NFPA_291_RESIDUAL_FLOOR_PSI,
        *,
        hav_mode: str | None = None,
        upper_gpm: float = 1000.0,
        max_upper_gpm: float = 20000.0,
    ) -> float:
        """Наибольший суммарный расход, при котором остаточное давление ≥ floor_psi.

        Считается без boost: прибавка HAV после гидранта не ослабляет пол.
        """

        if not legs:
            return 0.0

        if hav_mode == "boost":
            hav_mode = None

        def margin(q: float) -> float:
            return self.residual_at(legs, q, static_psi, hav_mode=hav_mode) - float(floor_psi)

        if margin(0.0) < 0.0:
            return 0.0

        hi = float(upper_gpm)
        while margin(hi) >= 0.0:
            if hi >= max_upper_gpm:
                return float(max_upper_gpm)
            hi = min(hi * 2.0, max_upper_gpm)

        root = brentq(margin, 0.0, hi, xtol=0.5)
        q = max(0.0, float(root) - 1.0)
        for _ in range(16):
            if q <= 0.0 or margin(q) >= 0.0:
                break
            q = max(0.0, q - 1.0)
        return float(q)
