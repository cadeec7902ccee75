import pytest

from pumpsim.config import GovernorConfig, PumpConfig, SplitWeights, SystemConfig
from pumpsim.core.validation import clamp, ensure_in_range, ensure_one_of, ensure_positive


def test_ensure_positive_ok():
    ensure_positive(1.0, "x")


def test_ensure_positive_raises():
    with pytest.raises(ValueError):
        ensure_positive(0.0, "x")


def test_ensure_in_range():
    ensure_in_range(50.0, 50.0, 300.0, "set_psi")
    with pytest.raises(ValueError):
        ensure_in_range(301.0, 50.0, 300.0, "set_psi")


def test_ensure_one_of():
    ensure_one_of("tank", ("tank", "hydrant"), "source")
    with pytest.raises(ValueError, match="source"):
        ensure_one_of("draft", ("tank", "hydrant"), "source")


def test_clamp():
    assert clamp(5.0, 0.0, 1.0) == 1.0
    assert clamp(-5.0, 0.0, 1.0) == 0.0
    assert clamp(0.5, 0.0, 1.0) == 0.5


class TestConfigs:
    def test_defaults(self) -> None:
        cfg = SystemConfig()
        assert cfg.pump.rated_gpm == 1500.0
        assert cfg.pump.tank_capacity_gal == 720.0
        assert cfg.sim.tick_period_s == pytest.approx(0.1)
        assert cfg.flow_sharing_mode == "proportional"

    def test_bad_flow_sharing_mode(self) -> None:
        with pytest.raises(ValueError):
            SystemConfig(flow_sharing_mode="random")

    def test_bad_pump(self) -> None:
        with pytest.raises(ValueError):
            PumpConfig(rated_gpm=0.0)

    def test_bad_rpm_limits(self) -> None:
        with pytest.raises(ValueError):
            GovernorConfig(idle_rpm=800.0, engaged_rpm=750.0)

    def test_split_weights_steamer_has_lower_port_resistance(self) -> None:
        w = SplitWeights()
        assert w.port_resistance("steamer") < w.port_resistance("sideA")
        assert w.port_resistance("sideA") == w.port_resistance("sideB")
        assert w.seed_weight("steamer", 5.0) == pytest.approx(2.3 * 25.0)
