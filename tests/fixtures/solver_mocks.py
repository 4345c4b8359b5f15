"""Reusable solver mocks for blend model tests.

The mock solver speaks the APPSI interface the base model drives
(``config``, ``solve``, ``termination_condition``, ``solution_loader``), so
model building, status mapping and extraction run for real while no
solver binary is needed.
"""

from typing import Dict, Optional
from unittest.mock import Mock

from pyomo.contrib.appsi.base import TerminationCondition as AppsiTC


def create_mock_solver_config(
    fractions: Optional[Dict[str, float]] = None,
    termination_condition=AppsiTC.optimal,
    objective_value: Optional[float] = 123.4,
):
    """
    Create a mock SolverConfig that bypasses actual solver detection.

    Args:
        fractions: Batch id -> fraction written into ``model.fraction`` on
            solve; batches not listed get 0. Also sets ``selected``.
        termination_condition: APPSI termination condition to report
        objective_value: Reported best feasible objective (None = no incumbent)

    Returns:
        Mock SolverConfig whose solvers record every solved model in
        ``mock_config.solved_models``
    """
    fractions = fractions or {}
    mock_config = Mock()
    mock_config.solved_models = []

    def mock_create_solver(solver_name=None, options=None):
        mock_solver = Mock()

        def mock_solve(pyomo_model, **kwargs):
            mock_config.solved_models.append(pyomo_model)

            if hasattr(pyomo_model, 'fraction'):
                for batch_id in pyomo_model.batch_ids:
                    share = fractions.get(batch_id, 0.0)
                    pyomo_model.fraction[batch_id].set_value(share, skip_validation=True)
                    pyomo_model.selected[batch_id].set_value(
                        1 if share > 0 else 0, skip_validation=True
                    )

            results = Mock()
            results.termination_condition = termination_condition
            results.best_feasible_objective = objective_value
            results.best_objective_bound = objective_value
            results.solution_loader.load_vars = Mock()
            return results

        mock_solver.solve = mock_solve
        return mock_solver

    mock_config.create_solver = mock_create_solver
    mock_config.get_best_available_solver = Mock(return_value="appsi_highs")
    mock_config.get_available_solvers = Mock(return_value=["appsi_highs"])

    return mock_config


def create_missing_solver_config():
    """Create a mock SolverConfig on a machine with no MILP solver."""
    mock_config = Mock()
    mock_config.get_available_solvers = Mock(return_value=[])
    mock_config.get_best_available_solver = Mock(
        side_effect=RuntimeError("No optimization solver available.")
    )
    mock_config.create_solver = Mock(
        side_effect=RuntimeError("No optimization solver available.")
    )
    return mock_config
