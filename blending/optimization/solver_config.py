"""Solver detection and configuration.

Detects which MILP solvers Pyomo can reach on this machine, ranks them by
preference and creates configured solver instances. The APPSI HiGHS
interface (backed by the ``highspy`` wheel) is preferred because it ships
with pip and needs no external binary; CBC and GLPK are used when their
executables are on PATH.

Process bootstrap should call ``initialize_solvers()`` once. Detection is
cached in a module-level SolverConfig, so later calls are no-ops.
"""

import logging
import platform
import sys
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pyomo.environ import (
    ConcreteModel,
    Constraint,
    NonNegativeReals,
    Objective,
    SolverFactory,
    Var,
    minimize,
    value,
)
from pyomo.contrib.appsi.solvers import Highs

logger = logging.getLogger(__name__)


class SolverType(str, Enum):
    """Solvers the blend model knows how to drive."""
    APPSI_HIGHS = "appsi_highs"
    CBC = "cbc"
    GLPK = "glpk"


@dataclass
class SolverInfo:
    """Detection and smoke-test state of a single solver."""
    name: str
    available: bool
    version: Optional[str] = None
    path: Optional[str] = None
    tested: bool = False
    works: bool = False

    def __str__(self) -> str:
        if not self.available:
            return f"{self.name.upper()}: ✗ unavailable"
        status = f"{self.name.upper()}: ✓ available"
        if self.tested:
            status += " (tested)" if self.works else " (test failed)"
        if self.version:
            status += f" v{self.version}"
        return status


class SolverConfig:
    """
    Cross-platform solver detection and creation.

    Example:
        config = SolverConfig()
        print(config.get_available_solvers())   # ['appsi_highs', 'cbc']
        solver = config.create_solver()          # best available
    """

    #: Preference order when no solver is requested explicitly
    SOLVER_PREFERENCE = [
        SolverType.APPSI_HIGHS,
        SolverType.CBC,
        SolverType.GLPK,
    ]

    def __init__(self):
        self._solver_info: Dict[str, SolverInfo] = {}
        self._detect_solvers()

    @staticmethod
    def _make_solver(solver_name: str):
        """Instantiate a solver object without checking availability."""
        if solver_name == SolverType.APPSI_HIGHS.value:
            return Highs()
        return SolverFactory(solver_name)

    @staticmethod
    def _format_version(raw) -> Optional[str]:
        if raw is None:
            return None
        if isinstance(raw, tuple):
            return ".".join(str(part) for part in raw)
        return str(raw)

    def _detect_solvers(self) -> None:
        """Probe every known solver and record its availability."""
        for solver_type in SolverType:
            name = solver_type.value
            available = False
            version = None
            path = None
            try:
                solver = self._make_solver(name)
                if name == SolverType.APPSI_HIGHS.value:
                    available = bool(solver.available())
                else:
                    available = bool(solver.available(exception_flag=False))
                if available:
                    version = self._format_version(solver.version())
                    if hasattr(solver, 'executable'):
                        path = solver.executable()
            except Exception as e:
                # Missing executables and plugins surface as assorted errors
                logger.debug(f"Solver {name} detection failed: {e}")
                available = False

            self._solver_info[name] = SolverInfo(
                name=name,
                available=available,
                version=version if isinstance(version, str) else None,
                path=path if isinstance(path, str) else None,
            )
            logger.debug(str(self._solver_info[name]))

    def get_solver_info(self, solver_name: str) -> Optional[SolverInfo]:
        return self._solver_info.get(solver_name)

    def get_available_solvers(self) -> List[str]:
        """Names of detected solvers, in preference order."""
        return [
            solver_type.value
            for solver_type in self.SOLVER_PREFERENCE
            if self._solver_info.get(solver_type.value)
            and self._solver_info[solver_type.value].available
        ]

    def get_working_solvers(self) -> List[str]:
        """Names of solvers that passed test_solver()."""
        return [
            name for name, info in self._solver_info.items()
            if info.tested and info.works
        ]

    def get_best_available_solver(self, test_if_needed: bool = True) -> str:
        """
        Pick the most preferred solver that is available.

        Args:
            test_if_needed: Smoke-test candidates that were not yet tested and
                skip the ones that fail

        Returns:
            Solver name

        Raises:
            RuntimeError: If no solver is available
        """
        for solver_name in self.get_available_solvers():
            info = self._solver_info[solver_name]
            if test_if_needed and not info.tested:
                self.test_solver(solver_name)
            if test_if_needed and not info.works:
                continue
            return solver_name

        raise RuntimeError(
            "No optimization solver available. Install highspy "
            "(pip install highspy) or put cbc/glpk on PATH."
        )

    def create_solver(
        self,
        solver_name: Optional[str] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        """
        Create a configured solver instance.

        Args:
            solver_name: Solver to create (None = best available)
            options: Solver-specific options (HiGHS options for APPSI HiGHS)

        Returns:
            Pyomo solver object (APPSI Highs or legacy SolverFactory solver)

        Raises:
            RuntimeError: If the solver is unknown or not available
        """
        if solver_name is None:
            solver_name = self.get_best_available_solver(test_if_needed=False)

        info = self._solver_info.get(solver_name)
        if info is None:
            raise RuntimeError(
                f"Unknown solver '{solver_name}'. "
                f"Known solvers: {[s.value for s in SolverType]}"
            )
        if not info.available:
            raise RuntimeError(f"Solver '{solver_name}' is not available on this system")

        solver = self._make_solver(solver_name)
        if options:
            if solver_name == SolverType.APPSI_HIGHS.value:
                solver.highs_options.update(options)
            else:
                for key, option_value in options.items():
                    solver.options[key] = option_value
        return solver

    def test_solver(self, solver_name: str) -> bool:
        """
        Smoke-test a solver on a one-variable LP (min x s.t. x >= 1).

        Returns:
            True if the solver returned x == 1
        """
        info = self._solver_info.get(solver_name)
        if info is None or not info.available:
            return False

        model = ConcreteModel()
        model.x = Var(within=NonNegativeReals)
        model.c = Constraint(expr=model.x >= 1)
        model.obj = Objective(expr=model.x, sense=minimize)

        works = False
        try:
            solver = self._make_solver(solver_name)
            solver.solve(model)
            works = abs(value(model.x) - 1.0) < 1e-6
        except Exception as e:
            logger.warning(f"Solver {solver_name} failed smoke test: {e}")
            works = False

        info.tested = True
        info.works = works
        return works

    def get_platform_info(self) -> Dict[str, str]:
        return {
            'system': platform.system(),
            'machine': platform.machine(),
            'python_version': sys.version.split()[0],
        }

    def describe(self) -> str:
        """Human-readable solver status summary."""
        lines = ["Solver status:"]
        for solver_type in self.SOLVER_PREFERENCE:
            info = self._solver_info.get(solver_type.value)
            if info is not None:
                lines.append(f"  {info}")
        return "\n".join(lines)


_global_config: Optional[SolverConfig] = None
_global_config_lock = threading.Lock()


def get_global_config() -> SolverConfig:
    """Return the process-wide SolverConfig, creating it on first use."""
    global _global_config
    if _global_config is None:
        with _global_config_lock:
            if _global_config is None:
                _global_config = SolverConfig()
    return _global_config


def get_solver(solver_name: Optional[str] = None, options: Optional[Dict[str, Any]] = None):
    """Create a solver from the process-wide configuration."""
    return get_global_config().create_solver(solver_name, options)


def initialize_solvers(smoke_test: bool = False) -> SolverConfig:
    """
    Detect solvers once at process startup.

    Idempotent: repeated calls return the same configuration without
    re-probing. With smoke_test=True every available solver is also
    test-solved once.

    Args:
        smoke_test: Run test_solver() on available solvers not yet tested

    Returns:
        The process-wide SolverConfig
    """
    config = get_global_config()
    if smoke_test:
        for solver_name in config.get_available_solvers():
            info = config.get_solver_info(solver_name)
            if not info.tested:
                config.test_solver(solver_name)

    available = config.get_available_solvers()
    if available:
        logger.info(f"MILP solvers available: {', '.join(available)}")
    else:
        logger.error("No MILP solver available; blend requests will report SOLVER_NOT_FOUND")
    return config
