"""pumpsim package.

Важно: пакет не должен иметь побочных эффектов при импорте.
Поэтому здесь нет eager-import'ов (контроллер/решатель/регистратор).

Импортируй нужное напрямую:
- from pumpsim.controller import PumpPanelController
- from pumpsim.physics.supply_split import SupplySplitSolver
- from pumpsim.config import SystemConfig
"""

from __future__ import annotations

__all__: list[str] = []
