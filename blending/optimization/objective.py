"""Objective composition for the blend model.

Minimize (all coefficients scaled by OBJECTIVE_SCALE):

    sum_i (price_i + days_to_expiry_i * expiry_penalty) * fraction[i]
  + sum_a flavor_penalty * weight_a * (dev_over[a] + dev_under[a])

The expiry term is a shadow cost: fresh stock looks more expensive to the
solver, so older stock is used first (FEFO). A high expiry penalty (mass
profile) pushes hard toward old stock; a low one (specialty profile)
leaves the choice to price and flavor.

Deviation pairs share one coefficient, so only the magnitude of a sensory
miss is penalized, never its sign. Price carries zero weight here; it is
controlled by the hard price cap instead.
"""

from typing import Dict, Sequence

from pyomo.environ import ConcreteModel

from ..models.batch import CoffeeBatch
from ..models.params import OptimizerParams
from .constants import OBJECTIVE_SCALE


def shadow_cost(batch: CoffeeBatch, params: OptimizerParams) -> float:
    """Unscaled per-unit cost of a batch: price plus FEFO expiry penalty."""
    return batch.price + batch.days_to_expiry * params.expiry_penalty_per_day


def deviation_penalty(attribute: str, params: OptimizerParams) -> float:
    """Unscaled cost per unit of deviation on one attribute."""
    return params.flavor_penalty_per_unit * params.weight_for(attribute)


def objective_coefficients(
    batches: Sequence[CoffeeBatch],
    attributes: Sequence[str],
    params: OptimizerParams,
    scale: float = OBJECTIVE_SCALE,
) -> Dict[str, Dict[str, float]]:
    """
    Scaled coefficients handed to the solver.

    Returns:
        {'fraction': {batch_id: coeff}, 'deviation': {attribute: coeff}}
        where the deviation coefficient applies to both dev_over and dev_under
    """
    return {
        'fraction': {b.id: shadow_cost(b, params) * scale for b in batches},
        'deviation': {a: deviation_penalty(a, params) * scale for a in attributes},
    }


def compose_objective(
    model: ConcreteModel,
    batches: Sequence[CoffeeBatch],
    params: OptimizerParams,
    scale: float = OBJECTIVE_SCALE,
):
    """
    Build the objective expression for a blend model.

    Args:
        model: Model with ``fraction``, ``dev_over``, ``dev_under`` and ``attributes``
        batches: Batches indexing ``fraction`` (by id)
        params: Active optimizer parameters
        scale: Coefficient scaling factor

    Returns:
        Pyomo expression to minimize
    """
    coeffs = objective_coefficients(batches, model.attributes, params, scale)

    batch_cost = sum(
        coeffs['fraction'][b.id] * model.fraction[b.id]
        for b in batches
    )
    deviation_cost = sum(
        coeffs['deviation'][a] * (model.dev_over[a] + model.dev_under[a])
        for a in model.attributes
    )
    return batch_cost + deviation_cost
