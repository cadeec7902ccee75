import pytest

from pumpsim.core.types import HoseLeg
from pumpsim.physics.pump_curve import (
    HydrantTestData,
    available_flow_at_residual,
    compute_truck_max_gpm,
    pump_curve_max_gpm,
)


@pytest.mark.parametrize(
    "pdp,expected",
    [
        (0.0, 1500.0),
        (100.0, 1500.0),
        (150.0, 1500.0),
        (175.0, 1050.0),
        (200.0, 1050.0),
        (250.0, 750.0),
        (300.0, 750.0),
    ],
)
def test_pump_curve_steps(pdp: float, expected: float) -> None:
    assert pump_curve_max_gpm(1500.0, pdp) == pytest.approx(expected)


def test_pump_curve_bad_rating() -> None:
    assert pump_curve_max_gpm(0.0, 100.0) == 0.0


class TestNfpa291:
    def test_available_flow(self) -> None:
        test = HydrantTestData(static_psi=65.0, residual_psi=30.0, flow_gpm=500.0)
        assert available_flow_at_residual(test, 20.0) == pytest.approx(572.7, abs=0.5)

    def test_more_drop_more_flow(self) -> None:
        test = HydrantTestData(static_psi=80.0, residual_psi=60.0, flow_gpm=1000.0)
        assert available_flow_at_residual(test, 20.0) > available_flow_at_residual(test, 40.0)
        assert available_flow_at_residual(test, 60.0) == pytest.approx(1000.0)

    def test_no_drop_in_test(self) -> None:
        assert available_flow_at_residual(HydrantTestData(60.0, 60.0, 800.0)) == 0.0
        assert available_flow_at_residual(HydrantTestData(60.0, 70.0, 800.0)) == 0.0

    def test_target_above_static(self) -> None:
        assert available_flow_at_residual(HydrantTestData(60.0, 40.0, 800.0), 70.0) == 0.0


class TestTruckMax:
    legs = [HoseLeg(5.0, 100.0)]

    def test_no_legs(self) -> None:
        assert compute_truck_max_gpm([], 150.0, 60.0, 1500.0) == 0.0

    def test_residual_below_floor(self) -> None:
        assert compute_truck_max_gpm(self.legs, 150.0, 19.9, 1500.0) == 0.0

    def test_pump_curve_ceiling(self) -> None:
        assert compute_truck_max_gpm(self.legs, 150.0, 20.0, 1500.0) == pytest.approx(1500.0)
        assert compute_truck_max_gpm(self.legs, 220.0, 50.0, 1500.0) == pytest.approx(750.0)

    def test_aff_ceiling(self) -> None:
        assert compute_truck_max_gpm(self.legs, 150.0, 50.0, 1500.0, aff_ceiling_gpm=900.0) == pytest.approx(900.0)
        assert compute_truck_max_gpm(self.legs, 150.0, 50.0, 1500.0, aff_ceiling_gpm=2500.0) == pytest.approx(1500.0)

    def test_configured_floor(self) -> None:
        assert compute_truck_max_gpm(self.legs, 150.0, 25.0, 1500.0, floor_psi=30.0) == 0.0
        assert compute_truck_max_gpm(self.legs, 150.0, 30.0, 1500.0, floor_psi=30.0) == pytest.approx(1500.0)
