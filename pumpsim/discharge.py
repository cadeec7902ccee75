"""Линии нагнетания панели и их назначения.

Назначение линии (assignment) — закрытый набор вариантов:
Handline | FdcStandpipe | SkidLeader | Blitzfire | PortableStandpipe | DeckGun.
Расчёт расхода по назначению — в `pumpsim.physics.line_flow`.

Все назначения, кроме Handline, требуют линию 2½″ и больше.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Union

from pumpsim.config.coefficients import DECK_GUN_TIPS
from pumpsim.core.types import NozzleCategory
from pumpsim.core.validation import clamp, ensure_non_negative, ensure_positive


BlitzMode = Literal["std", "low"]

MIN_LARGE_LINE_DIAMETER_IN = 2.5


@dataclass(frozen=True)
class Handline:
    kind = "handline"


@dataclass(frozen=True)
class FdcStandpipe:
    floors: int = 0
    kind = "fdc_standpipe"

    def __post_init__(self) -> None:
        ensure_non_negative(self.floors, "floors")


@dataclass(frozen=True)
class SkidLeader:
    setback_ft: float = 0.0
    kind = "skid_leader"

    def __post_init__(self) -> None:
        ensure_non_negative(self.setback_ft, "setback_ft")


@dataclass(frozen=True)
class Blitzfire:
    mode: BlitzMode = "std"
    len_3in_ft: float = 100.0
    kind = "blitzfire"

    def __post_init__(self) -> None:
        if self.mode not in ("std", "low"):
            raise ValueError(f"blitzfire mode must be 'std' or 'low', got {self.mode!r}")
        ensure_non_negative(self.len_3in_ft, "len_3in_ft")


@dataclass(frozen=True)
class PortableStandpipe:
    floors: int = 0
    len_3in_ft: float = 100.0
    kind = "portable_standpipe"

    def __post_init__(self) -> None:
        ensure_non_negative(self.floors, "floors")
        ensure_non_negative(self.len_3in_ft, "len_3in_ft")


@dataclass(frozen=True)
class DeckGun:
    tip: str = "1_3/8"
    kind = "deck_gun"

    def __post_init__(self) -> None:
        if self.tip not in DECK_GUN_TIPS:
            raise ValueError(f"unknown deck gun tip {self.tip!r}, expected one of {tuple(DECK_GUN_TIPS)}")

    @property
    def tip_diameter_in(self) -> float:
        return float(DECK_GUN_TIPS[self.tip])


Assignment = Union[Handline, FdcStandpipe, SkidLeader, Blitzfire, PortableStandpipe, DeckGun]


def requires_large_line(assignment: Assignment) -> bool:
    return not isinstance(assignment, Handline)


@dataclass(frozen=True)
class HoseConfig:
    diameter_in: float
    length_ft: float

    def __post_init__(self) -> None:
        ensure_positive(self.diameter_in, "diameter_in")
        ensure_non_negative(self.length_ft, "length_ft")


@dataclass(frozen=True)
class LineContext:
    """То, что видит провайдер пресетов при выборе ствола для линии."""

    line_id: str
    category: NozzleCategory
    assignment_kind: str
    hose_diameter_in: float


@dataclass
class DischargeLine:
    id: str
    label: str
    hose: HoseConfig
    category: NozzleCategory = "other"
    open: bool = False
    valve_percent: float = 0.0
    assignment: Assignment = field(default_factory=Handline)

    gpm_now: float = 0.0
    display_psi: float = 0.0
    gallons_this_engagement: float = 0.0

    def line_input_psi(self, system_psi: float) -> float:
        if not self.open:
            return 0.0
        return clamp(self.valve_percent, 0.0, 100.0) / 100.0 * float(system_psi)

    def context(self) -> LineContext:
        return LineContext(
            line_id=self.id,
            category=self.category,
            assignment_kind=self.assignment.kind,
            hose_diameter_in=self.hose.diameter_in,
        )

    def reset_engagement(self) -> None:
        self.gpm_now = 0.0
        self.display_psi = 0.0
        self.gallons_this_engagement = 0.0


def default_discharges() -> List[DischargeLine]:
    """Типовая компоновка панели: три перекрёстки, трэшлайн, 2½″ и лафет."""

    return [
        DischargeLine("xlay1", "Crosslay 1", HoseConfig(1.75, 200.0), category="crosslay"),
        DischargeLine("xlay2", "Crosslay 2", HoseConfig(1.75, 200.0), category="crosslay"),
        DischargeLine("xlay3", "Crosslay 3", HoseConfig(1.75, 200.0), category="crosslay"),
        DischargeLine("trash", "Front Trashline", HoseConfig(1.75, 100.0), category="trash"),
        DischargeLine("twohalfA", "2½″ A", HoseConfig(2.5, 200.0), category="leader"),
        DischargeLine(
            "deckgun",
            "Deck Gun",
            HoseConfig(3.0, 0.0),
            category="other",
            assignment=DeckGun("1_3/8"),
        ),
    ]
