"""Pydantic schema for blend optimization results.

This module defines the interface contract between the optimization engine
and its callers. Every engine path (single solve, smart retry, short-circuit
outcomes) returns a BlendingResult.

Design Principles:
1. Fail Fast: Invalid data raises ValidationError at the engine boundary
2. Immutable: Results are frozen; annotations produce a new copy
3. Self-consistent: Predicted attributes are recomputed from the composition
"""

from __future__ import annotations

from typing import Dict
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import PRICE_ACCEPTANCE_FACTOR


class BlendingResult(BaseModel):
    """Outcome of a blend optimization request.

    Composition maps batch id to its share of the blend (0.0-1.0); the
    weight distribution maps batch id to kg of the required output.
    """
    feasible: bool = Field(..., description="Whether a usable blend was found")
    status: str = Field(..., description="Solver or short-circuit status code")

    composition: Dict[str, float] = Field(
        default_factory=dict,
        description="Batch ID -> fraction of output"
    )
    weight_distribution: Dict[str, float] = Field(
        default_factory=dict,
        description="Batch ID -> kg in output"
    )

    predicted_price: float = Field(default=0.0, ge=0)
    predicted_acid: float = Field(default=0.0, ge=0)
    predicted_bitter: float = Field(default=0.0, ge=0)
    predicted_sweet: float = Field(default=0.0, ge=0)
    predicted_caffeine: float = Field(default=0.0, ge=0)

    similarity_score: float = Field(default=0.0, ge=0, le=100)

    objective_value: float = Field(default=0.0, description="Scaled solver objective")
    computation_time_ms: int = Field(default=0, ge=0)

    retry_count: int = Field(default=0, ge=0)
    relaxation_trace: str = Field(default="")

    model_config = ConfigDict(frozen=True)

    @field_validator('composition')
    @classmethod
    def fractions_in_unit_interval(cls, v):
        """Validate every fraction lies in (0, 1] (with rounding slack)."""
        for batch_id, fraction in v.items():
            if fraction <= 0 or fraction > 1.0 + 1e-6:
                raise ValueError(f"fraction for {batch_id} out of range: {fraction}")
        return v

    def predicted(self, attribute: str) -> float:
        """Predicted blend value of a tracked attribute."""
        return getattr(self, f"predicted_{attribute}")

    def is_over_budget(self, target_price: float) -> bool:
        """True when the blend price exceeds the accepted band above target."""
        if target_price <= 0:
            return False
        return self.predicted_price > target_price * PRICE_ACCEPTANCE_FACTOR

    def total_fraction(self) -> float:
        return sum(self.composition.values())

    def __str__(self) -> str:
        """String representation."""
        result = f"BlendingResult: {self.status}"
        if self.feasible:
            result += (
                f", {len(self.composition)} batches"
                f", price = {self.predicted_price:,.0f}"
                f", similarity = {self.similarity_score:.1f}%"
            )
        if self.retry_count:
            result += f", retries = {self.retry_count}"
        return result
