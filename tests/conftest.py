"""Pytest configuration.

Goal: make `import pumpsim` work reliably when running tests without installing
package (editable install).

This repo uses a flat layout (pumpsim/ at repo root). Some environments run
pytest with a working directory where repo root isn't on sys.path, leading to
`ModuleNotFoundError: pumpsim`.

This conftest ensures repo root is on sys.path.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))


from pumpsim.controller import PumpPanelController  # noqa: E402


@pytest.fixture()
def controller() -> PumpPanelController:
    return PumpPanelController(clock=lambda: 0.0)


def _run_ticks(ctl: PumpPanelController, n: int, period_ms: float = 100.0, start_ms: float = 0.0) -> float:
    """n тиков по period_ms на виртуальных часах, возвращает последнее now_ms."""

    now = start_ms
    for _ in range(n):
        now += period_ms
        ctl.tick_rpm()
        ctl.sim_tick(now)
    return now


@pytest.fixture()
def run_ticks():
    return _run_ticks
