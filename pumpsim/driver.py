"""Кооперативный цикл 10 Гц: сначала обороты, затем тик симуляции.

`run()` идёт в реальном времени, `run_simulated()` на виртуальных часах
(детерминированно, без sleep), что удобно для тестов и записи сессий.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from pumpsim.controller import PumpPanelController
from pumpsim.core.units import MS_PER_SECOND
from pumpsim.logger import SessionRecorder


logger = logging.getLogger(__name__)

TickHook = Callable[[float, PumpPanelController], None]


class SimulationDriver:
    def __init__(
        self,
        controller: PumpPanelController,
        *,
        recorder: SessionRecorder | None = None,
        on_tick: TickHook | None = None,
    ) -> None:
        self.controller = controller
        self.recorder = recorder
        self.on_tick = on_tick

        self.period_ms = controller.cfg.sim.tick_period_s * MS_PER_SECOND
        self.virtual_ms = 0.0
        self.ticks = 0

    def step(self, now_ms: float, t_s: float) -> None:
        if self.on_tick is not None:
            self.on_tick(t_s, self.controller)
        self.controller.tick_rpm()
        self.controller.sim_tick(now_ms)
        if self.recorder is not None:
            self.recorder.record(t_s, self.controller.ctx)
        self.ticks += 1

    def run_simulated(self, duration_s: float) -> int:
        """Прогнать duration_s секунд на виртуальных часах. Возвращает число тиков."""

        n = int(round(float(duration_s) * MS_PER_SECOND / self.period_ms))
        start = self.ticks
        for _ in range(n):
            self.virtual_ms += self.period_ms
            t_s = self.virtual_ms / MS_PER_SECOND
            self.step(self.virtual_ms, t_s)
        logger.debug("simulated %d ticks (%.1f s)", self.ticks - start, duration_s)
        return self.ticks - start

    def run(self, duration_s: float) -> int:
        """Реальное время: тик раз в period_ms, часы контроллера."""

        period_s = self.period_ms / MS_PER_SECOND
        t0 = time.monotonic()
        deadline = t0 + float(duration_s)
        start = self.ticks
        next_tick = t0
        while True:
            now = time.monotonic()
            if now >= deadline:
                break
            if now < next_tick:
                time.sleep(min(next_tick - now, period_s))
                continue
            self.step(now * MS_PER_SECOND, now - t0)
            next_tick += period_s
        return self.ticks - start
