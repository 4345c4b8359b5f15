"""Pytest configuration and shared fixtures."""

import pytest

from blending.models import (
    CoffeeBatch,
    BlendingTarget,
    OptimizationMode,
    OptimizerParams,
)
from blending.optimization.solver_config import get_global_config
from tests.fixtures.solver_mocks import create_mock_solver_config


@pytest.fixture
def old_robusta():
    """Fixture for old-crop Robusta close to expiry."""
    return CoffeeBatch(
        id="B01_ROB_OLD",
        name="Robusta Dak Lak (Old Crop)",
        price=115000,
        acid=4.0,
        bitter=8.0,
        sweet=3.0,
        caffeine=2.5,
        available_stock=1000,
        days_to_expiry=30,
    )


@pytest.fixture
def new_robusta():
    """Fixture for new-crop Robusta with long shelf life."""
    return CoffeeBatch(
        id="B02_ROB_NEW",
        name="Robusta Dak Lak (New Crop)",
        price=135000,
        acid=4.5,
        bitter=7.5,
        sweet=4.0,
        caffeine=2.4,
        available_stock=5000,
        days_to_expiry=300,
    )


@pytest.fixture
def arabica():
    """Fixture for Arabica Cau Dat."""
    return CoffeeBatch(
        id="B03_ARA_DL",
        name="Arabica Cau Dat",
        price=220000,
        acid=8.0,
        bitter=3.0,
        sweet=7.0,
        caffeine=1.2,
        available_stock=500,
        days_to_expiry=200,
    )


@pytest.fixture
def culi():
    """Fixture for Culi Robusta."""
    return CoffeeBatch(
        id="B04_CULI",
        name="Culi Robusta",
        price=140000,
        acid=5.0,
        bitter=9.0,
        sweet=3.5,
        caffeine=3.0,
        available_stock=800,
        days_to_expiry=150,
    )


@pytest.fixture
def demo_batches(old_robusta, new_robusta, arabica, culi):
    """Fixture for the four-batch demo inventory."""
    return [old_robusta, new_robusta, arabica, culi]


@pytest.fixture
def pour_over_target():
    """Fixture for a balanced pour-over blend target."""
    return BlendingTarget(
        mode=OptimizationMode.BALANCED,
        target_price=160000,
        target_acid=5.5,
        target_bitter=6.0,
        target_sweet=5.0,
        target_caffeine=2.0,
        total_output_kg=100,
        min_ratio=0.05,
        max_batch_types=3,
    )


@pytest.fixture
def demo_params():
    """Fixture for default parameters with the demo expiry push."""
    return OptimizerParams.defaults().model_copy(update={'expiry_penalty_per_day': 100.0})


@pytest.fixture
def mock_solver_config():
    """Fixture for mock solver config that returns a half/half blend."""
    return create_mock_solver_config(
        fractions={"B01_ROB_OLD": 0.5, "B02_ROB_NEW": 0.5}
    )


@pytest.fixture(scope="session")
def solver_available():
    """True when at least one MILP solver can be reached."""
    return bool(get_global_config().get_available_solvers())


@pytest.fixture
def require_solver(solver_available):
    """Skip a test when no MILP solver is installed."""
    if not solver_available:
        pytest.skip("No MILP solver available (pip install highspy)")
