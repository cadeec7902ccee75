"""Пресеты стволов: набор по умолчанию, простой провайдер, экспорт/импорт JSON.

Логика приоритета (вкладка / категория / линия) живёт снаружи симулятора.
Здесь только контракт `get_effective_nozzle(ctx)` и его статическая реализация.

Формат пакета (version 1):
    {"version": 1, "exported_at": <ms>, "presets": [{...}, ...]}

Битый конверт пакета -> PresetImportError. Ошибки отдельных пресетов
собираются в ImportResult.errors и не прерывают импорт.
"""

from __future__ import annotations

import json
import logging
import math
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Protocol

from pumpsim.core.types import NOZZLE_CATEGORIES, NOZZLE_KINDS, NozzlePreset
from pumpsim.discharge import LineContext


logger = logging.getLogger(__name__)

BUNDLE_VERSION = 1


class PresetImportError(ValueError):
    """Пакет пресетов нельзя разобрать целиком."""


class PresetProvider(Protocol):
    def get_effective_nozzle(self, ctx: LineContext) -> NozzlePreset | None: ...


DEFAULT_PRESETS: tuple[NozzlePreset, ...] = (
    NozzlePreset(
        kind="fog_fixed", rated_gpm=150.0, rated_np_psi_fog=100.0,
        id="fog-150-100", name="1¾″ Fog 150 GPM @ 100 psi", category="crosslay",
        notes="Standard crosslay fog nozzle",
    ),
    NozzlePreset(
        kind="smooth_bore", tip_diameter_in=15.0 / 16.0, rated_np_psi=50.0,
        id="sb-15-16", name="SB 15/16″ @ 50 psi", category="crosslay",
        notes="Classic smooth bore handline",
    ),
    NozzlePreset(
        kind="smooth_bore", tip_diameter_in=1.125, rated_np_psi=50.0,
        id="sb-1-1-8", name="2½″ SB 1⅛″ @ 50 psi", category="leader",
        notes="Medium smooth bore for leader lines",
    ),
    NozzlePreset(
        kind="smooth_bore", tip_diameter_in=1.25, rated_np_psi=50.0,
        id="sb-1-1-4", name="2½″ SB 1¼″ @ 50 psi", category="trash",
        notes="Trash line / large handline",
    ),
    NozzlePreset(
        kind="fog_fixed", rated_gpm=250.0, rated_np_psi_fog=100.0,
        id="fdc-250-100", name="2½″ FDC 250 GPM @ 100 psi", category="highrise",
        notes="Standpipe / FDC",
    ),
    NozzlePreset(
        kind="smooth_bore", tip_diameter_in=1.5, rated_np_psi=80.0,
        id="deck-1-1-2", name="Deck Gun 1½″ SB @ 80 psi", category="other",
        notes="Master stream deck gun",
    ),
)


class StaticPresetProvider:
    """Пресет по id линии, иначе по категории линии, иначе None."""

    def __init__(
        self,
        by_line: Mapping[str, NozzlePreset] | None = None,
        by_category: Mapping[str, NozzlePreset] | None = None,
    ) -> None:
        self.by_line: Dict[str, NozzlePreset] = dict(by_line or {})
        self.by_category: Dict[str, NozzlePreset] = dict(by_category or {})

    def get_effective_nozzle(self, ctx: LineContext) -> NozzlePreset | None:
        preset = self.by_line.get(ctx.line_id)
        if preset is not None:
            return preset
        return self.by_category.get(ctx.category)


# ---------------------------------------------------------------------------
# Export / import
# ---------------------------------------------------------------------------


def preset_to_dict(preset: NozzlePreset) -> Dict[str, Any]:
    return {k: v for k, v in asdict(preset).items() if v is not None}


def export_presets(presets: Iterable[NozzlePreset], exported_at_ms: int | None = None) -> str:
    bundle = {
        "version": BUNDLE_VERSION,
        "exported_at": int(time.time() * 1000) if exported_at_ms is None else int(exported_at_ms),
        "presets": [preset_to_dict(p) for p in presets],
    }
    return json.dumps(bundle, ensure_ascii=False, indent=2)


@dataclass
class ImportResult:
    presets: List[NozzlePreset] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.presets)


_NUMERIC_FIELDS = ("tip_diameter_in", "rated_np_psi", "rated_gpm", "rated_np_psi_fog")


def _optional_number(raw: Mapping[str, Any], key: str) -> float | None:
    value = raw.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{key} must be finite")
    return float(value)


def preset_from_dict(raw: Mapping[str, Any]) -> NozzlePreset:
    if not isinstance(raw, Mapping):
        raise ValueError("preset must be an object")

    kind = raw.get("kind")
    if kind not in NOZZLE_KINDS:
        raise ValueError(f"unknown nozzle kind {kind!r}")

    category = raw.get("category", "other")
    if category not in NOZZLE_CATEGORIES:
        raise ValueError(f"unknown category {category!r}")

    numbers = {key: _optional_number(raw, key) for key in _NUMERIC_FIELDS}
    preset = NozzlePreset(
        kind=kind,
        id=str(raw.get("id") or uuid.uuid4()),
        name=str(raw.get("name", "")),
        category=category,
        notes=str(raw.get("notes", "")),
        **numbers,
    )
    if not preset.is_valid:
        raise ValueError(f"missing rating fields for {kind}")
    return preset


def parse_preset_bundle(text: str) -> ImportResult:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PresetImportError(f"Import failed: {e}") from e

    if not isinstance(data, dict):
        raise PresetImportError("Invalid format: bundle must be an object")
    version = data.get("version", BUNDLE_VERSION)
    if version != BUNDLE_VERSION:
        raise PresetImportError(f"Unsupported bundle version: {version!r}")
    items = data.get("presets")
    if not isinstance(items, list):
        raise PresetImportError("Invalid format: missing presets array")

    result = ImportResult()
    for i, raw in enumerate(items):
        name = raw.get("name", f"#{i}") if isinstance(raw, dict) else f"#{i}"
        try:
            result.presets.append(preset_from_dict(raw))
        except ValueError as e:
            result.errors.append(f'Failed to import "{name}": {e}')

    if result.errors:
        logger.warning("preset import: %d imported, %d rejected", result.imported, len(result.errors))
    return result
