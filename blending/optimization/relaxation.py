"""Parameter relaxation strategies for the smart-retry loop.

When an attempt is infeasible or too expensive, the engine asks its
strategy for a loosened parameter set. Each mode gives up what matters
least to it:

- PRICE_OPTIMIZED (mass market) sacrifices flavor first.
- QUALITY_OPTIMIZED (specialty) sacrifices price and freshness.
- BALANCED loosens flavor and price evenly.

Relaxations are cumulative: step k starts from the parameters produced by
step k-1.
"""

from abc import ABC, abstractmethod
from typing import Tuple

from ..models.params import OptimizerParams
from ..models.target import OptimizationMode
from .constants import MAX_RETRIES


class RelaxationStrategy(ABC):
    """Produces loosened parameters between solve attempts."""

    #: Number of relaxed re-solves allowed after the first attempt
    max_retries: int = 0

    @abstractmethod
    def relax(
        self,
        current: OptimizerParams,
        base: OptimizerParams,
        mode: OptimizationMode,
        attempt: int,
    ) -> Tuple[OptimizerParams, str]:
        """
        Loosen parameters for a retry.

        Args:
            current: Parameters used by the previous attempt
            base: Parameters of the first attempt
            mode: Target optimization mode
            attempt: Retry number, starting at 1

        Returns:
            (relaxed parameters, human-readable description of the change)
        """
        raise NotImplementedError


class NoRelaxation(RelaxationStrategy):
    """Single-solve strategy: the first attempt is final."""

    max_retries = 0

    def relax(self, current, base, mode, attempt):
        raise RuntimeError("NoRelaxation does not allow retries")


class ModeRelaxation(RelaxationStrategy):
    """Mode-specific three-step relaxation policy."""

    max_retries = MAX_RETRIES

    def relax(
        self,
        current: OptimizerParams,
        base: OptimizerParams,
        mode: OptimizationMode,
        attempt: int,
    ) -> Tuple[OptimizerParams, str]:
        if not 1 <= attempt <= self.max_retries:
            raise ValueError(f"Relaxation step {attempt} outside 1..{self.max_retries}")

        if mode == OptimizationMode.PRICE_OPTIMIZED:
            return self._relax_price_optimized(current, attempt)
        elif mode == OptimizationMode.QUALITY_OPTIMIZED:
            return self._relax_quality_optimized(current, base, attempt)
        return self._relax_balanced(current, attempt)

    @staticmethod
    def _relax_price_optimized(current: OptimizerParams, attempt: int) -> Tuple[OptimizerParams, str]:
        if attempt == 1:
            return (
                current.model_copy(update={'flavor_tolerance': current.flavor_tolerance + 1.0}),
                "Relax Flavor Tol (+1.0).",
            )
        if attempt == 2:
            return (
                current.model_copy(update={'price_tolerance': current.price_tolerance * 1.05}),
                "Relax Price Tol (+5%).",
            )
        return (
            current.model_copy(update={
                'flavor_penalty_per_unit': current.flavor_penalty_per_unit * 0.8,
            }),
            "Reduce Flavor Importance (-20%).",
        )

    @staticmethod
    def _relax_quality_optimized(
        current: OptimizerParams,
        base: OptimizerParams,
        attempt: int,
    ) -> Tuple[OptimizerParams, str]:
        if attempt == 1:
            return (
                current.model_copy(update={'price_tolerance': current.price_tolerance * 1.10}),
                "Relax Price Tol (+10%).",
            )
        if attempt == 2:
            return (
                current.model_copy(update={'flavor_tolerance': current.flavor_tolerance + 0.2}),
                "Relax Flavor Tol (+0.2).",
            )
        # Price widening is taken from the first attempt's tolerance
        return (
            current.model_copy(update={
                'price_tolerance': base.price_tolerance * 1.20,
                'expiry_penalty_per_day': current.expiry_penalty_per_day * 0.5,
            }),
            "Relax Price (+20% of base) & Expiry (-50%).",
        )

    @staticmethod
    def _relax_balanced(current: OptimizerParams, attempt: int) -> Tuple[OptimizerParams, str]:
        if attempt == 1:
            return (
                current.model_copy(update={'flavor_tolerance': current.flavor_tolerance + 0.5}),
                "Relax Flavor (+0.5).",
            )
        if attempt == 2:
            return (
                current.model_copy(update={'price_tolerance': current.price_tolerance * 1.05}),
                "Relax Price (+5%).",
            )
        return (
            current.model_copy(update={
                'flavor_tolerance': current.flavor_tolerance + 0.5,
                'price_tolerance': current.price_tolerance * 1.05,
            }),
            "Relax All Constraints (Flavor +0.5, Price +5%).",
        )
