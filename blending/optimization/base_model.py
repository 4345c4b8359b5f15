"""Base class for optimization models.

This module provides an abstract base class for Pyomo models, providing
common functionality for model building, solving, and result extraction.
It is also the solver boundary: a built model plus a time budget goes in,
a status, an objective value and loaded variable values come out.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, TYPE_CHECKING
from dataclasses import dataclass, field
import logging
import math
import time

from pyomo.environ import ConcreteModel, Var, value
from pyomo.opt import TerminationCondition
from pyomo.contrib.appsi.base import TerminationCondition as AppsiTC
from pyomo.contrib.appsi.solvers import Highs
from pydantic import ValidationError

from .constants import (
    DEFAULT_MIP_GAP,
    STATUS_OPTIMAL,
    STATUS_FEASIBLE,
    STATUS_INFEASIBLE,
    STATUS_UNBOUNDED,
    STATUS_TIMEOUT,
    STATUS_UNKNOWN,
    STATUS_SOLVER_NOT_FOUND,
)
from .solver_config import SolverConfig, SolverType, get_global_config

if TYPE_CHECKING:
    from .result_schema import BlendingResult

logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    """
    Results from optimization model solve.

    Attributes:
        success: Whether the solver produced a usable solution
        status: Normalized status (OPTIMAL, FEASIBLE, INFEASIBLE, TIMEOUT, ...)
        objective_value: Objective value of the loaded solution
        solve_time_seconds: Time taken to solve (seconds)
        solver_name: Name of solver used
        gap: MIP gap (if applicable)
        num_variables: Number of decision variables
        num_constraints: Number of constraints
        num_integer_vars: Number of integer/binary variables
        infeasibility_message: Message explaining a failed solve
        metadata: Additional result metadata
    """
    success: bool
    status: str = STATUS_UNKNOWN
    objective_value: Optional[float] = None
    solve_time_seconds: Optional[float] = None
    solver_name: Optional[str] = None
    gap: Optional[float] = None
    num_variables: int = 0
    num_constraints: int = 0
    num_integer_vars: int = 0
    infeasibility_message: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def is_optimal(self) -> bool:
        """Check if solution is optimal."""
        return self.success and self.status == STATUS_OPTIMAL

    def is_feasible(self) -> bool:
        """Check if solution is feasible (optimal, or stopped with an incumbent)."""
        return self.success and self.status in (STATUS_OPTIMAL, STATUS_FEASIBLE)

    def is_infeasible(self) -> bool:
        """Check if model is infeasible."""
        return self.status == STATUS_INFEASIBLE

    def __str__(self) -> str:
        """String representation."""
        result = f"OptimizationResult: {self.status}"
        if self.objective_value is not None:
            result += f", objective = {self.objective_value:,.4f}"
        if self.solve_time_seconds is not None:
            result += f", time = {self.solve_time_seconds:.2f}s"
        return result


class BaseOptimizationModel(ABC):
    """
    Abstract base class for optimization models.

    Subclasses implement:
    - build_model(): Construct the Pyomo model (must define ``obj``)
    - extract_solution(): Turn a solved model into a result object

    This base class provides:
    - Solver creation through SolverConfig
    - A mandatory time budget on every solve
    - Normalized status mapping for APPSI and legacy solver interfaces
    """

    def __init__(self, solver_config: Optional[SolverConfig] = None):
        """
        Initialize optimization model.

        Args:
            solver_config: SolverConfig instance. If None, uses the process-wide config.
        """
        self.solver_config = solver_config or get_global_config()
        self.model: Optional[ConcreteModel] = None
        self.result: Optional[OptimizationResult] = None
        self.solution: Optional['BlendingResult'] = None
        self._build_time: Optional[float] = None

    @abstractmethod
    def build_model(self) -> ConcreteModel:
        """Build and return the Pyomo optimization model."""
        raise NotImplementedError("Subclass must implement build_model()")

    @abstractmethod
    def extract_solution(self, model: ConcreteModel) -> 'BlendingResult':
        """
        Extract solution values from the solved model.

        Called only after a feasible solve, with ``self.result`` already set.

        Raises:
            ValidationError: If solution data doesn't conform to schema
        """
        raise NotImplementedError("Subclass must implement extract_solution()")

    def solve(
        self,
        time_limit_seconds: float,
        solver_name: Optional[str] = None,
        mip_gap: Optional[float] = DEFAULT_MIP_GAP,
        tee: bool = False,
    ) -> OptimizationResult:
        """
        Build and solve the optimization model.

        Args:
            time_limit_seconds: Wall-clock budget for the solver (required)
            solver_name: Name of solver to use (None = best available)
            mip_gap: MIP relative gap tolerance
            tee: If True, stream solver output

        Returns:
            OptimizationResult with normalized status and objective value
        """
        if time_limit_seconds is None or time_limit_seconds <= 0:
            raise ValueError("A positive time limit is required for every solve")

        build_start = time.time()
        self.model = self.build_model()
        self._build_time = time.time() - build_start

        try:
            if solver_name is None:
                solver_name = self.solver_config.get_best_available_solver(test_if_needed=False)
            solver = self.solver_config.create_solver(solver_name)
        except RuntimeError as e:
            logger.error(f"CRITICAL: no usable MILP solver: {e}")
            self.result = OptimizationResult(
                success=False,
                status=STATUS_SOLVER_NOT_FOUND,
                solver_name=solver_name,
                infeasibility_message=str(e),
                num_variables=self.model.nvariables(),
                num_constraints=self.model.nconstraints(),
            )
            return self.result

        logger.info(
            f"Solving with {solver_name}: {self.model.nvariables()} variables, "
            f"{self.model.nconstraints()} constraints, limit {time_limit_seconds}s"
        )

        if solver_name == SolverType.APPSI_HIGHS.value:
            result = self._solve_with_appsi_highs(solver, time_limit_seconds, mip_gap, tee)
        else:
            result = self._solve_with_legacy_solver(solver, solver_name, time_limit_seconds, mip_gap, tee)

        self.result = result
        logger.info(str(result))

        if result.is_feasible():
            try:
                self.solution = self.extract_solution(self.model)
            except ValidationError as ve:
                # Schema violations are bugs in extract_solution(); fail fast
                logger.error(f"CRITICAL: Model violates BlendingResult schema: {ve}")
                raise

        return result

    def _solve_with_appsi_highs(
        self,
        solver: Highs,
        time_limit_seconds: float,
        mip_gap: Optional[float],
        tee: bool,
    ) -> OptimizationResult:
        """
        Solve model using APPSI HiGHS solver (modern Pyomo interface).

        Solutions are loaded manually so infeasible outcomes do not raise.
        """
        solver.config.time_limit = time_limit_seconds
        solver.config.load_solution = False
        if mip_gap is not None:
            solver.config.mip_gap = mip_gap
        if tee:
            solver.config.stream_solver = True

        solve_start = time.time()
        results = solver.solve(self.model)
        solve_time = time.time() - solve_start

        best_objective = getattr(results, 'best_feasible_objective', None)
        has_incumbent = best_objective is not None and math.isfinite(best_objective)

        appsi_tc = results.termination_condition
        if appsi_tc == AppsiTC.optimal:
            status = STATUS_OPTIMAL
        elif appsi_tc in (AppsiTC.infeasible, AppsiTC.infeasibleOrUnbounded):
            status = STATUS_INFEASIBLE
        elif appsi_tc == AppsiTC.unbounded:
            status = STATUS_UNBOUNDED
        elif appsi_tc == AppsiTC.maxTimeLimit:
            # Time limit with an incumbent still yields a usable blend
            status = STATUS_FEASIBLE if has_incumbent else STATUS_TIMEOUT
        else:
            status = STATUS_UNKNOWN

        success = status in (STATUS_OPTIMAL, STATUS_FEASIBLE)
        if success:
            results.solution_loader.load_vars()

        gap = None
        bound = getattr(results, 'best_objective_bound', None)
        if has_incumbent and bound is not None and math.isfinite(bound) and abs(best_objective) > 1e-10:
            gap = abs((best_objective - bound) / best_objective)

        return OptimizationResult(
            success=success,
            status=status,
            objective_value=best_objective if has_incumbent else None,
            solve_time_seconds=solve_time,
            solver_name=SolverType.APPSI_HIGHS.value,
            gap=gap,
            num_variables=self.model.nvariables(),
            num_constraints=self.model.nconstraints(),
            num_integer_vars=self._count_integer_vars(),
            infeasibility_message=None if success else f"Termination: {appsi_tc}",
        )

    def _solve_with_legacy_solver(
        self,
        solver,
        solver_name: str,
        time_limit_seconds: float,
        mip_gap: Optional[float],
        tee: bool,
    ) -> OptimizationResult:
        """Solve model through a SolverFactory solver (CBC, GLPK)."""
        if solver_name == SolverType.CBC.value:
            solver.options['seconds'] = time_limit_seconds
            if mip_gap is not None:
                solver.options['ratio'] = mip_gap
        elif solver_name == SolverType.GLPK.value:
            # GLPK only accepts whole seconds
            solver.options['tmlim'] = max(1, int(math.ceil(time_limit_seconds)))
            if mip_gap is not None:
                solver.options['mipgap'] = mip_gap

        solve_start = time.time()
        results = solver.solve(self.model, tee=tee, load_solutions=False)
        solve_time = time.time() - solve_start

        termination_condition = results.solver.termination_condition
        has_solution = len(getattr(results, 'solution', [])) > 0

        if termination_condition == TerminationCondition.optimal:
            status = STATUS_OPTIMAL
        elif termination_condition == TerminationCondition.feasible:
            status = STATUS_FEASIBLE
        elif termination_condition == TerminationCondition.maxTimeLimit:
            status = STATUS_FEASIBLE if has_solution else STATUS_TIMEOUT
        elif termination_condition in (
            TerminationCondition.infeasible,
            TerminationCondition.infeasibleOrUnbounded,
        ):
            status = STATUS_INFEASIBLE
        elif termination_condition == TerminationCondition.unbounded:
            status = STATUS_UNBOUNDED
        else:
            status = STATUS_UNKNOWN

        success = status in (STATUS_OPTIMAL, STATUS_FEASIBLE) and has_solution
        objective_value = None
        if success:
            self.model.solutions.load_from(results)
            objective_value = value(self.model.obj)
        elif status in (STATUS_OPTIMAL, STATUS_FEASIBLE):
            status = STATUS_UNKNOWN

        return OptimizationResult(
            success=success,
            status=status,
            objective_value=objective_value,
            solve_time_seconds=solve_time,
            solver_name=solver_name,
            num_variables=self.model.nvariables(),
            num_constraints=self.model.nconstraints(),
            num_integer_vars=self._count_integer_vars(),
            infeasibility_message=None if success else (
                f"Status: {results.solver.status}, Termination: {termination_condition}"
            ),
        )

    def _count_integer_vars(self) -> int:
        if self.model is None:
            return 0
        return sum(
            1 for var in self.model.component_data_objects(Var, active=True)
            if var.is_integer() or var.is_binary()
        )

    def get_solution(self) -> Optional['BlendingResult']:
        """Get extracted solution from last solve (None if not solved or infeasible)."""
        return self.solution

    def get_model_statistics(self) -> Dict[str, Any]:
        """
        Get statistics about the model.

        Returns:
            Dictionary with model statistics
        """
        if self.model is None:
            return {
                'built': False,
                'num_variables': 0,
                'num_constraints': 0,
                'num_integer_vars': 0,
            }

        return {
            'built': True,
            'build_time_seconds': self._build_time,
            'num_variables': self.model.nvariables(),
            'num_constraints': self.model.nconstraints(),
            'num_integer_vars': self._count_integer_vars(),
        }

    def reset(self):
        """Clear the built model, results, and solution."""
        self.model = None
        self.result = None
        self.solution = None
        self._build_time = None
