"""pumpsim.core.types

Базовые типы данных гидравлического ядра.

Важно: NozzlePreset приходит извне (провайдер пресетов) и здесь только читается.
HoseLeg изменяемый: поле gpm записывает решатель разделения подачи.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple


Source = Literal["tank", "hydrant"]
GovernorMode = Literal["pressure", "rpm"]

NozzleKind = Literal["smooth_bore", "fog_fixed", "fog_selectable", "fog_automatic"]
NozzleCategory = Literal["crosslay", "trash", "leader", "highrise", "other"]

PortId = Literal["steamer", "sideA", "sideB"]
TapMode = Literal["single", "double", "triple"]
HavMode = Literal["bypass", "boost"]

BadgeColor = Literal["green", "amber", "red"]

SOURCES: Tuple[str, ...] = ("tank", "hydrant")
GOVERNOR_MODES: Tuple[str, ...] = ("pressure", "rpm")
NOZZLE_KINDS: Tuple[str, ...] = ("smooth_bore", "fog_fixed", "fog_selectable", "fog_automatic")
FOG_KINDS: Tuple[str, ...] = ("fog_fixed", "fog_selectable", "fog_automatic")
NOZZLE_CATEGORIES: Tuple[str, ...] = ("crosslay", "trash", "leader", "highrise", "other")
PORT_ORDER: Tuple[PortId, ...] = ("steamer", "sideA", "sideB")
TAP_MODES: Tuple[str, ...] = ("single", "double", "triple")
HAV_MODES: Tuple[str, ...] = ("bypass", "boost")


@dataclass
class HoseLeg:
    """Один отрезок рукава (нога подачи от гидранта или линия)."""

    diameter_in: float
    length_ft: float
    gpm: float = 0.0
    gate_open: bool = True
    appliances_psi: float = 0.0


@dataclass(frozen=True)
class NozzlePreset:
    """Пресет ствола.

    smooth_bore: нужны tip_diameter_in + rated_np_psi.
    fog_*: нужны rated_gpm + rated_np_psi_fog.

    Невалидный пресет не бросает исключение: в тике он даёт расход 0.
    """

    kind: NozzleKind
    tip_diameter_in: float | None = None
    rated_np_psi: float | None = None
    rated_gpm: float | None = None
    rated_np_psi_fog: float | None = None

    id: str = ""
    name: str = ""
    category: NozzleCategory = "other"
    notes: str = ""

    @property
    def is_fog(self) -> bool:
        return self.kind in FOG_KINDS

    @property
    def is_valid(self) -> bool:
        if self.kind == "smooth_bore":
            return (
                self.tip_diameter_in is not None
                and self.tip_diameter_in > 0.0
                and self.rated_np_psi is not None
                and self.rated_np_psi > 0.0
            )
        if self.kind in FOG_KINDS:
            return (
                self.rated_gpm is not None
                and self.rated_gpm > 0.0
                and self.rated_np_psi_fog is not None
                and self.rated_np_psi_fog > 0.0
            )
        return False
