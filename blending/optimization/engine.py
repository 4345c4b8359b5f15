"""Blend optimization engine with pluggable relaxation.

Both the single-solve path and the smart-retry path run through
BlendingEngine; they differ only in the RelaxationStrategy. The model
formulation lives in BlendModel and is shared by every attempt.

State machine per request:

    ATTEMPT(0) -> SUCCESS                  feasible and price acceptable
    ATTEMPT(k) -> ATTEMPT(k+1)             k < max_retries, params relaxed
    ATTEMPT(k) -> EXHAUSTED                k == max_retries, or terminal status
"""

import logging
import time
from enum import Enum
from typing import List, Optional, Sequence

from ..models.batch import CoffeeBatch
from ..models.params import OptimizerParams, default_params_for_mode
from ..models.target import BlendingTarget
from .blend_model import BlendModel
from .constants import TERMINAL_STATUSES
from .relaxation import ModeRelaxation, NoRelaxation, RelaxationStrategy
from .result_schema import BlendingResult
from .solver_config import SolverConfig

logger = logging.getLogger(__name__)

TRACE_START = "Start: Standard Constraints."
TRACE_EXHAUSTED = "\nFailed after max retries."


class OptimizerAlgorithm(str, Enum):
    """Engine selector carried by a blend request."""
    DEFAULT = "DEFAULT"
    HYBRID = "HYBRID"

    @classmethod
    def parse(cls, raw) -> "OptimizerAlgorithm":
        """Case-insensitive lookup; anything unrecognized selects DEFAULT."""
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str) and raw.strip().upper() == cls.HYBRID.value:
            return cls.HYBRID
        return cls.DEFAULT


class BlendingEngine:
    """
    Runs blend attempts until one is accepted or the strategy gives up.

    Example:
        engine = BlendingEngine(ModeRelaxation())
        result = engine.optimize(batches, target)
        print(result.retry_count, result.relaxation_trace)
    """

    def __init__(
        self,
        strategy: Optional[RelaxationStrategy] = None,
        solver_config: Optional[SolverConfig] = None,
    ):
        self.strategy = strategy or NoRelaxation()
        self.solver_config = solver_config

    @staticmethod
    def is_acceptable(result: BlendingResult, target: BlendingTarget) -> bool:
        """Feasible, and within the accepted band above target price (if any)."""
        return result.feasible and not result.is_over_budget(target.target_price)

    def _attempt(
        self,
        batches: Sequence[CoffeeBatch],
        target: BlendingTarget,
        params: OptimizerParams,
    ) -> BlendingResult:
        return BlendModel(batches, target, params, self.solver_config).optimize()

    def optimize(
        self,
        batches: Sequence[CoffeeBatch],
        target: BlendingTarget,
        params: Optional[OptimizerParams] = None,
    ) -> BlendingResult:
        """
        Optimize a blend, relaxing parameters between attempts.

        Args:
            batches: Candidate batches
            target: Blend target profile
            params: Caller parameters; None selects the mode's default profile

        Returns:
            Final BlendingResult annotated with retry count, trace and total time
        """
        start = time.time()

        base_params = params if params is not None else default_params_for_mode(target.mode)
        current_params = base_params

        trace: List[str] = [TRACE_START]
        retry = 0

        while True:
            result = self._attempt(batches, target, current_params)

            if self.is_acceptable(result, target):
                break

            if result.status in TERMINAL_STATUSES:
                logger.warning(f"Attempt {retry} ended with {result.status}; not retrying")
                trace.append(f"\nStopped: {result.status} cannot be relaxed.")
                break

            if retry < self.strategy.max_retries:
                retry += 1
                current_params, description = self.strategy.relax(
                    current_params, base_params, target.mode, retry
                )
                trace.append(f"\nRetry #{retry}: {description}")
                logger.info(f"Smart Retry #{retry} after {result.status}: {description}")
            else:
                if self.strategy.max_retries > 0:
                    trace.append(TRACE_EXHAUSTED)
                    logger.warning(f"Blend not accepted after {retry} relaxations")
                break

        update = {
            'retry_count': retry,
            'relaxation_trace': "".join(trace),
            'computation_time_ms': int((time.time() - start) * 1000),
        }
        if retry > 0 and not result.feasible:
            update['status'] = f"{result.status} (Relaxed {retry} times)"
        elif retry > 0 and result.is_over_budget(target.target_price):
            update['status'] = f"{result.status} (Over budget, relaxed {retry} times)"

        return result.model_copy(update=update)


def create_engine(
    algorithm=OptimizerAlgorithm.DEFAULT,
    solver_config: Optional[SolverConfig] = None,
) -> BlendingEngine:
    """
    Build the engine for an algorithm selector.

    Args:
        algorithm: OptimizerAlgorithm or its name ("DEFAULT", "HYBRID")
        solver_config: Solver configuration shared by all attempts

    Returns:
        Single-solve engine for DEFAULT, smart-retry engine for HYBRID
    """
    if OptimizerAlgorithm.parse(algorithm) == OptimizerAlgorithm.HYBRID:
        return BlendingEngine(ModeRelaxation(), solver_config)
    return BlendingEngine(NoRelaxation(), solver_config)
