"""Конфиги симулятора насосной панели.

- `pumpsim.config.models`: параметры насоса, регулятора, подачи и тика;
- `pumpsim.config.coefficients`: таблицы коэффициентов гидравлики.
"""

from __future__ import annotations

from .coefficients import (  # noqa: F401
    DEFAULT_SPLIT_WEIGHTS,
    FRICTION_COEFFICIENTS,
    SplitWeights,
)
from .models import (  # noqa: F401
    DEFAULT_SYSTEM_CONFIG,
    GovernorConfig,
    PumpConfig,
    SimulationConfig,
    SupplyConfig,
    SystemConfig,
)


__all__ = [
    "FRICTION_COEFFICIENTS",
    "SplitWeights",
    "DEFAULT_SPLIT_WEIGHTS",
    "PumpConfig",
    "GovernorConfig",
    "SupplyConfig",
    "SimulationConfig",
    "SystemConfig",
    "DEFAULT_SYSTEM_CONFIG",
]
