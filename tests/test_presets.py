import json

import pytest

from pumpsim.core.types import NozzlePreset
from pumpsim.discharge import LineContext
from pumpsim.presets import (
    DEFAULT_PRESETS,
    PresetImportError,
    StaticPresetProvider,
    export_presets,
    parse_preset_bundle,
)


def test_default_presets_are_valid() -> None:
    assert DEFAULT_PRESETS
    assert all(p.is_valid for p in DEFAULT_PRESETS)
    assert len({p.id for p in DEFAULT_PRESETS}) == len(DEFAULT_PRESETS)


class TestProvider:
    ctx = LineContext(line_id="xlay1", category="crosslay", assignment_kind="handline", hose_diameter_in=1.75)

    def test_line_override_wins(self) -> None:
        by_cat = NozzlePreset(kind="fog_fixed", rated_gpm=150.0, rated_np_psi_fog=100.0, id="cat")
        by_line = NozzlePreset(kind="fog_fixed", rated_gpm=185.0, rated_np_psi_fog=75.0, id="line")
        provider = StaticPresetProvider(by_line={"xlay1": by_line}, by_category={"crosslay": by_cat})
        assert provider.get_effective_nozzle(self.ctx).id == "line"

    def test_category_fallback(self) -> None:
        by_cat = NozzlePreset(kind="fog_fixed", rated_gpm=150.0, rated_np_psi_fog=100.0, id="cat")
        provider = StaticPresetProvider(by_category={"crosslay": by_cat})
        assert provider.get_effective_nozzle(self.ctx).id == "cat"

    def test_nothing(self) -> None:
        assert StaticPresetProvider().get_effective_nozzle(self.ctx) is None


class TestBundle:
    def test_export_import(self) -> None:
        text = export_presets(DEFAULT_PRESETS, exported_at_ms=1700000000000)
        data = json.loads(text)
        assert data["version"] == 1
        assert data["exported_at"] == 1700000000000

        result = parse_preset_bundle(text)
        assert result.errors == []
        assert tuple(result.presets) == DEFAULT_PRESETS

    @pytest.mark.parametrize(
        "text",
        [
            "{not json",
            "[]",
            json.dumps({"version": 1}),
            json.dumps({"version": 1, "presets": {}}),
            json.dumps({"version": 2, "presets": []}),
        ],
    )
    def test_corrupt_envelope(self, text: str) -> None:
        with pytest.raises(PresetImportError):
            parse_preset_bundle(text)

    def test_bad_presets_are_collected(self) -> None:
        text = json.dumps(
            {
                "version": 1,
                "presets": [
                    {"kind": "smooth_bore", "tip_diameter_in": 1.0, "rated_np_psi": 50, "name": "ok"},
                    {"kind": "water_cannon", "name": "weird"},
                    {"kind": "fog_fixed", "rated_gpm": 150, "name": "no np"},
                    {"kind": "smooth_bore", "tip_diameter_in": "big", "rated_np_psi": 50, "name": "typed"},
                    "garbage",
                ],
            }
        )
        result = parse_preset_bundle(text)
        assert result.imported == 1
        assert result.presets[0].name == "ok"
        assert result.presets[0].id
        assert len(result.errors) == 4
        assert any('"weird"' in e for e in result.errors)

    def test_import_error_is_value_error(self) -> None:
        assert issubclass(PresetImportError, ValueError)
