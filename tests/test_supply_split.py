import pytest

from pumpsim.config.coefficients import K_INTAKE_PLUMB, LOSS_HYDRANT_BODY_PSI
from pumpsim.core.types import HoseLeg
from pumpsim.physics.supply_split import SupplySplitSolver


@pytest.fixture()
def solver() -> SupplySplitSolver:
    return SupplySplitSolver()


def _legs(**kw):
    return {port: HoseLeg(d, length) for port, (d, length) in kw.items()}


class TestSplit:
    def test_steamer_and_side_5in_100ft(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(steamer=(5.0, 100.0), sideA=(5.0, 100.0)), 1500.0, 80.0)
        assert sol.share("steamer") == pytest.approx(0.71, abs=0.01)

    def test_steamer_and_side_5in_200ft(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(steamer=(5.0, 200.0), sideA=(5.0, 200.0)), 1500.0, 80.0)
        assert sol.share("steamer") == pytest.approx(0.66, abs=0.01)

    def test_5in_steamer_3in_side(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(steamer=(5.0, 100.0), sideA=(3.0, 100.0)), 1200.0, 80.0)
        assert sol.share("steamer") == pytest.approx(0.848, abs=0.01)

    def test_identical_side_legs(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(sideA=(5.0, 100.0), sideB=(5.0, 100.0)), 1000.0, 80.0)
        assert sol.leg_gpm["sideA"] == pytest.approx(500.0, abs=1e-6)
        assert sol.leg_gpm["sideB"] == pytest.approx(500.0, abs=1e-6)

    @pytest.mark.parametrize("total", [1.0, 250.0, 1337.7, 2400.0])
    def test_flows_sum_to_total(self, solver: SupplySplitSolver, total: float) -> None:
        legs = _legs(steamer=(5.0, 100.0), sideA=(4.0, 150.0), sideB=(3.0, 50.0))
        sol = solver.solve(legs, total, 80.0)
        assert sum(sol.leg_gpm.values()) == pytest.approx(total, abs=1e-9)
        assert sum(leg.gpm for leg in legs.values()) == pytest.approx(total, abs=1e-9)

    def test_iteration_cap(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(steamer=(5.0, 100.0), sideA=(3.0, 500.0)), 2000.0, 80.0)
        assert 1 <= sol.iterations <= solver.weights.max_iterations

    def test_single_leg(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(sideA=(4.0, 100.0)), 900.0, 70.0)
        assert sol.leg_gpm == {"sideA": 900.0}
        assert sol.iterations == 0

    def test_zero_legs(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve({}, 900.0, 70.0)
        assert sol.total_gpm == 0.0
        assert sol.hydrant_residual_psi == 70.0
        assert sol.engine_intake_psi == 0.0

    def test_zero_flow(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(steamer=(5.0, 100.0), sideA=(5.0, 100.0)), 0.0, 70.0)
        assert sol.hydrant_residual_psi == 70.0
        assert sol.engine_intake_psi == 70.0
        assert all(q == 0.0 for q in sol.leg_gpm.values())


class TestPressures:
    def test_residual_and_intake(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(steamer=(5.0, 100.0)), 1000.0, 80.0)
        expected = 80.0 - LOSS_HYDRANT_BODY_PSI - sol.weighted_loss_psi
        assert sol.hydrant_residual_psi == pytest.approx(expected)
        assert sol.engine_intake_psi == pytest.approx(expected - K_INTAKE_PLUMB * 1000.0 ** 2)

    def test_residual_decreases_with_flow(self, solver: SupplySplitSolver) -> None:
        legs = _legs(steamer=(5.0, 300.0), sideA=(3.0, 100.0))
        residuals = [solver.solve(legs, q, 80.0).hydrant_residual_psi for q in (200.0, 600.0, 1000.0, 1400.0)]
        assert residuals == sorted(residuals, reverse=True)

    def test_never_negative(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(sideA=(3.0, 500.0)), 3000.0, 50.0)
        assert sol.hydrant_residual_psi == 0.0
        assert sol.engine_intake_psi == 0.0

    def test_hav_bypass_costs_4psi(self, solver: SupplySplitSolver) -> None:
        plain = solver.solve(_legs(steamer=(5.0, 100.0)), 1000.0, 80.0)
        bypass = solver.solve(_legs(steamer=(5.0, 100.0)), 1000.0, 80.0, hav_mode="bypass")
        assert bypass.hydrant_residual_psi == pytest.approx(plain.hydrant_residual_psi - 4.0)

    def test_hav_boost_raises_intake(self, solver: SupplySplitSolver) -> None:
        plain = solver.solve(_legs(steamer=(5.0, 100.0)), 1000.0, 80.0)
        boost = solver.solve(_legs(steamer=(5.0, 100.0)), 1000.0, 80.0, hav_mode="boost", hav_boost_psi=25.0)
        assert boost.engine_intake_psi == pytest.approx(plain.engine_intake_psi + 25.0)

    def test_hav_boost_is_clamped(self, solver: SupplySplitSolver) -> None:
        plain = solver.solve(_legs(steamer=(5.0, 100.0)), 1000.0, 80.0)
        boost = solver.solve(_legs(steamer=(5.0, 100.0)), 1000.0, 80.0, hav_mode="boost", hav_boost_psi=90.0)
        assert boost.engine_intake_psi == pytest.approx(plain.engine_intake_psi + 50.0)


class TestResidualFloor:
    def test_max_total_keeps_floor(self, solver: SupplySplitSolver) -> None:
        legs = _legs(steamer=(3.0, 300.0))
        q = solver.max_total_for_residual(legs, 40.0, 20.0)
        assert q > 0.0
        assert solver.residual_at(legs, q, 40.0) >= 20.0
        assert solver.residual_at(legs, q + 5.0, 40.0) < 20.0

    def test_static_below_floor(self, solver: SupplySplitSolver) -> None:
        assert solver.max_total_for_residual(_legs(steamer=(5.0, 100.0)), 15.0, 20.0) == 0.0

    def test_no_legs(self, solver: SupplySplitSolver) -> None:
        assert solver.max_total_for_residual({}, 80.0, 20.0) == 0.0

    def test_does_not_write_legs(self, solver: SupplySplitSolver) -> None:
        legs = _legs(steamer=(5.0, 100.0), sideA=(5.0, 100.0))
        solver.max_total_for_residual(legs, 80.0, 20.0)
        assert all(leg.gpm == 0.0 for leg in legs.values())


class TestHavBoostDoubleTap:
    legs_kw = dict(steamer=(5.0, 100.0), sideA=(5.0, 100.0))

    def test_residual_never_above_static(self, solver: SupplySplitSolver) -> None:
        for boost in (0.0, 25.0, 50.0):
            sol = solver.solve(_legs(**self.legs_kw), 1500.0, 80.0, hav_mode="boost", hav_boost_psi=boost)
            assert sol.hydrant_residual_psi <= 80.0

    def test_steamer_share_rises(self, solver: SupplySplitSolver) -> None:
        plain = solver.solve(_legs(**self.legs_kw), 1500.0, 80.0)
        boost = solver.solve(_legs(**self.legs_kw), 1500.0, 80.0, hav_mode="boost", hav_boost_psi=50.0)
        assert boost.share("steamer") > plain.share("steamer")
        assert sum(boost.leg_gpm.values()) == pytest.approx(1500.0, abs=1e-9)

    def test_boost_on_intake_weighted_by_steamer_flow(self, solver: SupplySplitSolver) -> None:
        sol = solver.solve(_legs(**self.legs_kw), 1500.0, 80.0, hav_mode="boost", hav_boost_psi=50.0)
        plumbing = K_INTAKE_PLUMB * 1500.0 ** 2
        expected = sol.hydrant_residual_psi + 50.0 * sol.share("steamer") - plumbing
        assert sol.engine_intake_psi == pytest.approx(expected)

    def test_floor_search_ignores_boost(self, solver: SupplySplitSolver) -> None:
        legs = _legs(**self.legs_kw)
        plain = solver.max_total_for_residual(legs, 40.0, 20.0)
        boosted = solver.max_total_for_residual(legs, 40.0, 20.0, hav_mode="boost")
        assert boosted == pytest.approx(plain)
