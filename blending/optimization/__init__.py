"""Optimization module for coffee blend planning.

This module provides the Pyomo MILP blend model, its objective, result
extraction, and the engine that wraps single solves and smart-retry
relaxation behind one interface. APPSI HiGHS is the default solver.
"""

from .solver_config import (
    SolverConfig,
    SolverType,
    SolverInfo,
    get_global_config,
    get_solver,
    initialize_solvers,
)
from .base_model import (
    BaseOptimizationModel,
    OptimizationResult,
)
from .result_schema import BlendingResult
from .blend_model import BlendModel
from .relaxation import (
    RelaxationStrategy,
    NoRelaxation,
    ModeRelaxation,
)
from .engine import (
    BlendingEngine,
    OptimizerAlgorithm,
    create_engine,
)

__all__ = [
    # Solver configuration
    "SolverConfig",
    "SolverType",
    "SolverInfo",
    "get_global_config",
    "get_solver",
    "initialize_solvers",
    # Base model
    "BaseOptimizationModel",
    "OptimizationResult",
    # Blend model
    "BlendModel",
    "BlendingResult",
    # Relaxation engine
    "RelaxationStrategy",
    "NoRelaxation",
    "ModeRelaxation",
    "BlendingEngine",
    "OptimizerAlgorithm",
    "create_engine",
]
