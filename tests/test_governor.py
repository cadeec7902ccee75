import pytest

from pumpsim.governor import GovernorState, RpmFollower, compute_base_psi, compute_governor


def _gov(mode: str = "pressure", enabled: bool = True, set_psi: float = 50.0, set_rpm: float = 1200.0):
    return GovernorState(enabled=enabled, mode=mode, set_psi=set_psi, set_rpm=set_rpm)


class TestBase:
    def test_tank_ignores_intake(self) -> None:
        assert compute_base_psi("tank", 40.0) == 50.0

    def test_hydrant_adds_intake(self) -> None:
        assert compute_base_psi("hydrant", 40.0) == 90.0

    def test_no_source(self) -> None:
        assert compute_base_psi(None, 40.0) == 50.0


class TestPressureMode:
    def test_example(self) -> None:
        out = compute_governor(_gov(set_psi=110.0), engaged=True, source="tank", intake_psi=0.0)
        assert out.system_psi == pytest.approx(110.0)
        assert out.target_rpm == 786.0

    def test_setpoint_below_base(self) -> None:
        out = compute_governor(_gov(set_psi=50.0), engaged=True, source="hydrant", intake_psi=30.0)
        assert out.system_psi == pytest.approx(80.0)
        assert out.target_rpm == 750.0

    def test_rpm_capped(self) -> None:
        out = compute_governor(_gov(set_psi=3000.0), engaged=True, source="tank", intake_psi=0.0)
        assert out.system_psi == 400.0
        assert out.target_rpm == 2200.0


class TestRpmMode:
    def test_example(self) -> None:
        out = compute_governor(_gov(mode="rpm", set_rpm=900.0), engaged=True, source="tank", intake_psi=0.0)
        assert out.target_rpm == 900.0
        assert out.system_psi == pytest.approx(300.0)

    def test_system_capped(self) -> None:
        out = compute_governor(_gov(mode="rpm", set_rpm=2200.0), engaged=True, source="tank", intake_psi=0.0)
        assert out.system_psi == 400.0

    def test_rpm_clamped(self) -> None:
        low = compute_governor(_gov(mode="rpm", set_rpm=100.0), engaged=True, source="tank", intake_psi=0.0)
        high = compute_governor(_gov(mode="rpm", set_rpm=5000.0), engaged=True, source="tank", intake_psi=0.0)
        assert low.target_rpm == 750.0
        assert low.system_psi == pytest.approx(50.0)
        assert high.target_rpm == 2200.0


class TestStates:
    def test_disabled(self) -> None:
        out = compute_governor(_gov(enabled=False, set_psi=200.0), engaged=True, source="hydrant", intake_psi=25.0)
        assert out.system_psi == pytest.approx(75.0)
        assert out.target_rpm == 750.0

    def test_not_engaged(self) -> None:
        out = compute_governor(_gov(set_psi=200.0), engaged=False, source="tank", intake_psi=0.0)
        assert out.target_rpm == 650.0
        assert out.system_psi == 0.0

    def test_clamp_setpoints(self) -> None:
        g = _gov(set_psi=10.0, set_rpm=9000.0)
        g.clamp_setpoints()
        assert g.set_psi == 50.0
        assert g.set_rpm == 2200.0


class TestRpmFollower:
    def test_slew_limited(self) -> None:
        f = RpmFollower(650.0)
        assert f.step(786.0) == 700.0
        assert f.step(786.0) == 750.0
        assert f.step(786.0) == 786.0
        assert f.step(786.0) == 786.0

    def test_down(self) -> None:
        f = RpmFollower(1000.0)
        assert f.step(650.0) == 950.0
