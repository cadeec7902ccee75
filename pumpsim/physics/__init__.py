"""Пакет гидравлики (трение, стволы, насосная кривая, подача гидранта)."""

from __future__ import annotations

from .friction import elevation_pressure_psi, friction_loss_psi, pressure_to_elevation_ft
from .nozzle import calc_nozzle_flow, calc_required_np, get_typical_np
from .pump_curve import (
    HydrantTestData,
    available_flow_at_residual,
    compute_truck_max_gpm,
    pump_curve_max_gpm,
)
from .supply_split import SupplySolution, SupplySplitSolver

__all__ = [
    "friction_loss_psi",
    "elevation_pressure_psi",
    "pressure_to_elevation_ft",
    "calc_nozzle_flow",
    "calc_required_np",
    "get_typical_np",
    "HydrantTestData",
    "available_flow_at_residual",
    "compute_truck_max_gpm",
    "pump_curve_max_gpm",
    "SupplySolution",
    "SupplySplitSolver",
]
