"""Coffee blend MILP model.

Decision Variables:
- fraction[batch]: Share of the output taken from a batch (continuous)
- selected[batch]: 1 if the batch is part of the blend (binary)
- dev_over[attr], dev_under[attr]: Deviation of the blend from target

Constraints:
- Fractions sum to exactly 1
- A batch contributes only if selected
- A selected batch carries at least min_ratio of the output
- At most max_batch_types batches selected
- Stock: fraction upper bound = min(1, stock / total_output)
- Attribute balance: sum(fraction * attr) - dev_over + dev_under = target,
  for every tracked attribute (a negative sensory target opts out)
- Price cap: sum(fraction * price) <= target_price + price_tolerance
- Caffeine deviation hard-capped in every mode
- Acid/bitter/sweet deviations hard-capped in PRICE_OPTIMIZED mode only

Objective:
- See objective.py (scaled shadow cost + weighted deviation penalty)
"""

import logging
import time
from typing import List, Optional, Sequence

from pyomo.environ import (
    ConcreteModel,
    Var,
    Constraint,
    Objective,
    NonNegativeReals,
    Binary,
    minimize,
    value,
)

from ..models.batch import CoffeeBatch
from ..models.params import OptimizerParams
from ..models.target import BlendingTarget, OptimizationMode
from .base_model import BaseOptimizationModel
from .constants import (
    CAFFEINE_HARD_TOLERANCE,
    MIN_USABLE_STOCK_KG,
    STATUS_OUT_OF_STOCK,
)
from .extraction import build_result, infeasible_result
from .objective import compose_objective
from .result_schema import BlendingResult
from .solver_config import SolverConfig

logger = logging.getLogger(__name__)


class BlendModel(BaseOptimizationModel):
    """
    Single-attempt blend optimization model.

    One instance is one attempt: it holds a batch snapshot, a target and
    one parameter set. The relaxation engine builds a fresh instance for
    every retry.

    Example:
        model = BlendModel(batches, target, OptimizerParams.for_balanced_market())
        result = model.optimize()
        if result.feasible:
            print(result.composition)
    """

    def __init__(
        self,
        batches: Sequence[CoffeeBatch],
        target: BlendingTarget,
        params: OptimizerParams,
        solver_config: Optional[SolverConfig] = None,
    ):
        """
        Initialize blend model.

        Args:
            batches: Candidate batches (negligible-stock batches are dropped)
            target: Blend target profile
            params: Active optimizer parameters
            solver_config: Solver configuration (optional)
        """
        super().__init__(solver_config)

        batch_ids = [b.id for b in batches]
        if len(batch_ids) != len(set(batch_ids)):
            raise ValueError("Batch ids must be unique within a blend request")

        self.target = target
        self.params = params

        self.batches: List[CoffeeBatch] = [
            b for b in batches if b.available_stock > MIN_USABLE_STOCK_KG
        ]
        self.dropped_batch_ids: List[str] = [
            b.id for b in batches if b.available_stock <= MIN_USABLE_STOCK_KG
        ]
        if self.dropped_batch_ids:
            logger.info(f"Dropping batches without usable stock: {self.dropped_batch_ids}")

    @property
    def has_usable_stock(self) -> bool:
        return bool(self.batches)

    @property
    def uses_hard_flavor_bounds(self) -> bool:
        """Price-driven blends cap flavor drift instead of only penalizing it."""
        return self.target.mode == OptimizationMode.PRICE_OPTIMIZED

    def deviation_cap(self, attribute: str) -> Optional[float]:
        """
        Upper bound on each deviation variable of an attribute.

        Returns:
            Bound value, or None for an unbounded (soft) deviation
        """
        if attribute == "caffeine":
            return CAFFEINE_HARD_TOLERANCE
        if attribute == "price":
            return None
        if self.uses_hard_flavor_bounds and self.params.flavor_tolerance > 0:
            return self.params.flavor_tolerance
        return None

    def build_model(self) -> ConcreteModel:
        """
        Build the blend MILP.

        Returns:
            Pyomo ConcreteModel

        Raises:
            ValueError: If no batch has usable stock
        """
        if not self.batches:
            raise ValueError("Cannot build blend model: no batch has usable stock")

        target = self.target
        batch_by_id = {b.id: b for b in self.batches}

        model = ConcreteModel(name="CoffeeBlend")

        # Sets
        model.batch_ids = [b.id for b in self.batches]
        model.attributes = list(target.balanced_attributes)

        # Decision variables
        def fraction_bounds(model, i):
            return (0.0, batch_by_id[i].max_fraction(target.total_output_kg))

        model.fraction = Var(
            model.batch_ids,
            within=NonNegativeReals,
            bounds=fraction_bounds,
            doc="Share of output taken from each batch"
        )

        model.selected = Var(
            model.batch_ids,
            within=Binary,
            doc="1 if the batch is used in the blend"
        )

        def deviation_bounds(model, a):
            return (0.0, self.deviation_cap(a))

        model.dev_over = Var(
            model.attributes,
            within=NonNegativeReals,
            bounds=deviation_bounds,
            doc="Blend attribute above target"
        )

        model.dev_under = Var(
            model.attributes,
            within=NonNegativeReals,
            bounds=deviation_bounds,
            doc="Blend attribute below target"
        )

        # Structural constraints
        model.sum_to_one = Constraint(
            expr=sum(model.fraction[i] for i in model.batch_ids) == 1,
            doc="Whole output accounted for"
        )

        def link_selected_rule(model, i):
            return model.fraction[i] - model.selected[i] <= 0

        model.link_selected = Constraint(
            model.batch_ids,
            rule=link_selected_rule,
            doc="Batch contributes only if selected"
        )

        if target.min_ratio > 0:
            def min_inclusion_rule(model, i):
                return model.fraction[i] - target.min_ratio * model.selected[i] >= 0

            model.min_inclusion = Constraint(
                model.batch_ids,
                rule=min_inclusion_rule,
                doc="Selected batch carries at least min_ratio"
            )

        model.max_batch_types = Constraint(
            expr=sum(model.selected[i] for i in model.batch_ids) <= target.max_batch_types,
            doc="Cardinality cap on distinct batches"
        )

        # Attribute balance (linearized absolute deviation)
        def balance_rule(model, a):
            blend_value = sum(
                model.fraction[i] * batch_by_id[i].attribute(a) for i in model.batch_ids
            )
            return blend_value - model.dev_over[a] + model.dev_under[a] == target.attribute(a)

        model.attribute_balance = Constraint(
            model.attributes,
            rule=balance_rule,
            doc="Blend attribute = target + over - under"
        )

        # Price is capped, never forced upward
        if target.has_price_target:
            max_price = target.target_price + self.params.price_tolerance
            model.price_cap = Constraint(
                expr=sum(
                    model.fraction[i] * batch_by_id[i].price for i in model.batch_ids
                ) <= max_price,
                doc="Blend price within tolerance of target"
            )

        model.obj = Objective(
            expr=compose_objective(model, self.batches, self.params),
            sense=minimize,
        )

        logger.info(
            f"Built blend model: {len(self.batches)} batches, mode {target.mode.value}, "
            f"hard flavor bounds {'on' if self.uses_hard_flavor_bounds else 'off'}"
        )
        return model

    def extract_solution(self, model: ConcreteModel) -> BlendingResult:
        """Convert loaded fractions into a validated BlendingResult."""
        raw_fractions = {
            i: value(model.fraction[i], exception=False) for i in model.batch_ids
        }
        objective_value = self.result.objective_value
        if objective_value is None:
            objective_value = value(model.obj)

        return build_result(
            raw_fractions=raw_fractions,
            batches=self.batches,
            target=self.target,
            status=self.result.status,
            objective_value=objective_value,
        )

    def optimize(self) -> BlendingResult:
        """
        Run one attempt: short-circuit, build, solve, extract.

        Returns:
            BlendingResult (non-feasible with OUT_OF_STOCK when nothing is
            usable; with the solver status otherwise)
        """
        start = time.time()

        if not self.has_usable_stock:
            logger.warning("All batches have negligible stock; skipping solve")
            return infeasible_result(STATUS_OUT_OF_STOCK)

        result = self.solve(time_limit_seconds=self.params.solver_timeout_sec)
        elapsed_ms = int((time.time() - start) * 1000)

        if result.is_feasible() and self.solution is not None:
            return self.solution.model_copy(update={'computation_time_ms': elapsed_ms})

        return infeasible_result(result.status, computation_time_ms=elapsed_ms)
