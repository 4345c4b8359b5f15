"""Turn solver fractions into a BlendingResult.

Predicted blend attributes are always recomputed from the retained
fractions and the batch records, never read back from the deviation
variables, so the reported composition and the reported attributes agree.
"""

import logging
from typing import Dict, Mapping, Optional, Sequence

import pandas as pd

from ..models.batch import CoffeeBatch, TRACKED_ATTRIBUTES
from ..models.target import BlendingTarget
from .constants import FRACTION_ZERO_THRESHOLD, MAX_SIMILARITY_SCORE
from .result_schema import BlendingResult

logger = logging.getLogger(__name__)

#: Attributes that count toward the similarity score
SIMILARITY_ATTRIBUTES = ("acid", "bitter", "sweet")


def retained_fractions(
    raw_fractions: Mapping[str, Optional[float]],
    threshold: float = FRACTION_ZERO_THRESHOLD,
) -> Dict[str, float]:
    """Drop fractions at or below the noise threshold (None counts as zero)."""
    return {
        batch_id: fraction
        for batch_id, fraction in raw_fractions.items()
        if fraction is not None and fraction > threshold
    }


def predict_attributes(
    fractions: Mapping[str, float],
    batches: Sequence[CoffeeBatch],
) -> Dict[str, float]:
    """Weighted attribute values of the blend, one entry per tracked attribute."""
    batch_by_id = {b.id: b for b in batches}
    predicted = {attribute: 0.0 for attribute in TRACKED_ATTRIBUTES}
    for batch_id, fraction in fractions.items():
        batch = batch_by_id[batch_id]
        for attribute in TRACKED_ATTRIBUTES:
            predicted[attribute] += fraction * batch.attribute(attribute)
    return predicted


def similarity_score(predicted: Mapping[str, float], target: BlendingTarget) -> float:
    """
    Sensory similarity of a blend to its target, 0-100.

    score = max(0, 100 - sum|pred - target| / sum(target) * 100) over
    acid, bitter and sweet. Price and caffeine are not part of the score.
    A target whose sensory values are all zero scores 100 only on an exact
    match.
    """
    total_deviation = sum(
        abs(predicted[a] - target.attribute(a)) for a in SIMILARITY_ATTRIBUTES
    )
    total_target = sum(target.attribute(a) for a in SIMILARITY_ATTRIBUTES)

    if total_target <= 0:
        return MAX_SIMILARITY_SCORE if total_deviation <= 1e-9 else 0.0

    score = MAX_SIMILARITY_SCORE - total_deviation / total_target * 100.0
    return min(MAX_SIMILARITY_SCORE, max(0.0, score))


def build_result(
    raw_fractions: Mapping[str, Optional[float]],
    batches: Sequence[CoffeeBatch],
    target: BlendingTarget,
    status: str,
    objective_value: float,
    computation_time_ms: int = 0,
) -> BlendingResult:
    """
    Build a feasible BlendingResult from raw solver fractions.

    Args:
        raw_fractions: Batch id -> fraction as loaded from the solver
        batches: Batches that were modeled
        target: Request target (output weight, sensory targets)
        status: Solver status (OPTIMAL or FEASIBLE)
        objective_value: Scaled objective value
        computation_time_ms: Elapsed time of this attempt

    Returns:
        Validated BlendingResult
    """
    fractions = retained_fractions(raw_fractions)
    predicted = predict_attributes(fractions, batches)

    total = sum(fractions.values())
    if abs(total - 1.0) > 1e-3:
        logger.warning(f"Retained fractions sum to {total:.6f}, expected 1.0")

    return BlendingResult(
        feasible=True,
        status=status,
        composition=fractions,
        weight_distribution={
            batch_id: fraction * target.total_output_kg
            for batch_id, fraction in fractions.items()
        },
        predicted_price=predicted["price"],
        predicted_acid=predicted["acid"],
        predicted_bitter=predicted["bitter"],
        predicted_sweet=predicted["sweet"],
        predicted_caffeine=predicted["caffeine"],
        similarity_score=similarity_score(predicted, target),
        objective_value=objective_value,
        computation_time_ms=computation_time_ms,
    )


def infeasible_result(
    status: str,
    objective_value: float = 0.0,
    computation_time_ms: int = 0,
) -> BlendingResult:
    """Non-feasible result with an empty composition."""
    return BlendingResult(
        feasible=False,
        status=status,
        objective_value=objective_value,
        computation_time_ms=computation_time_ms,
    )


def composition_frame(result: BlendingResult, batches: Sequence[CoffeeBatch]) -> pd.DataFrame:
    """
    Tabulate a blend for reporting.

    Returns:
        DataFrame with one row per included batch (largest share first) and
        columns batch_id, name, fraction, weight_kg, price, days_to_expiry
    """
    columns = ['batch_id', 'name', 'fraction', 'weight_kg', 'price', 'days_to_expiry']
    batch_by_id = {b.id: b for b in batches}

    rows = []
    for batch_id, fraction in result.composition.items():
        batch = batch_by_id.get(batch_id)
        rows.append({
            'batch_id': batch_id,
            'name': batch.name if batch else '',
            'fraction': fraction,
            'weight_kg': result.weight_distribution.get(batch_id, 0.0),
            'price': batch.price if batch else float('nan'),
            'days_to_expiry': batch.days_to_expiry if batch else None,
        })

    df = pd.DataFrame(rows, columns=columns)
    if not df.empty:
        df = df.sort_values('fraction', ascending=False).reset_index(drop=True)
    return df
