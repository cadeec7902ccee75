import pytest

from pumpsim.physics.flow_sharing import (
    allocate_flow,
    allocate_flow_priority,
    allocate_flow_proportional,
    line_priorities,
)


class TestProportional:
    def test_under_ceiling_unchanged(self) -> None:
        req = {"a": 150.0, "b": 200.0}
        assert allocate_flow_proportional(req, 1000.0) == req

    def test_scaled(self) -> None:
        out = allocate_flow_proportional({"a": 300.0, "b": 100.0}, 200.0)
        assert out["a"] == pytest.approx(150.0)
        assert out["b"] == pytest.approx(50.0)
        assert sum(out.values()) == pytest.approx(200.0)

    def test_zero_ceiling(self) -> None:
        out = allocate_flow_proportional({"a": 300.0, "b": 100.0}, 0.0)
        assert out == {"a": 0.0, "b": 0.0}


class TestPriority:
    def test_respects_ceiling(self) -> None:
        out = allocate_flow_priority({"a": 500.0, "b": 500.0, "c": 200.0}, 600.0, {"a": 1.0, "b": 0.5})
        assert sum(out.values()) <= 600.0 + 1e-9
        assert all(out[k] <= v for k, v in {"a": 500.0, "b": 500.0, "c": 200.0}.items())

    def test_prefers_high_priority(self) -> None:
        out = allocate_flow_priority({"deck": 500.0, "xlay": 500.0}, 600.0, {"deck": 1.0, "xlay": 0.5})
        assert out["deck"] > out["xlay"]

    def test_never_over_demand(self) -> None:
        out = allocate_flow_priority({"small": 50.0, "big": 1000.0}, 600.0, {"small": 100.0, "big": 1.0})
        assert out["small"] == pytest.approx(50.0)
        assert out["big"] <= 550.0 + 1e-9

    def test_dispatch(self) -> None:
        req = {"a": 300.0, "b": 100.0}
        assert allocate_flow(req, 200.0) == allocate_flow_proportional(req, 200.0)
        pri = {"a": 1.0, "b": 0.1}
        assert allocate_flow(req, 200.0, "priority", pri) == allocate_flow_priority(req, 200.0, pri)


def test_line_priorities() -> None:
    pri = line_priorities({"deckgun": "deck_gun", "xlay1": "handline", "x": "unknown"})
    assert pri["deckgun"] > pri["xlay1"]
    assert pri["x"] == 1.0
