"""pumpsim.core.units

Единицы и множители пожарной гидравлики (US customary: psi, gpm, ft, in).

Принцип: везде, где есть числа, должна быть явная единица (например, 10 * FEET_PER_FLOOR).
"""

from __future__ import annotations

# Hydrostatic head. One constant for both directions (psi <-> ft).
PSI_PER_FOOT: float = 0.433

FEET_PER_FLOOR: float = 10.0

# Time
MS_PER_SECOND: float = 1000.0
MS_PER_MINUTE: float = 60.0 * MS_PER_SECOND

# Nominal simulation tick (10 Hz driver)
NOMINAL_TICK_MS: float = 100.0

# Normalisation used by the C × (Q/100)² × (L/100) friction formula
GPM_UNIT: float = 100.0
FT_UNIT: float = 100.0
