"""Blend target profile data model."""

from enum import Enum
from pydantic import BaseModel, ConfigDict, Field

from .batch import SENSORY_ATTRIBUTES, TRACKED_ATTRIBUTES

#: Sensory target value meaning "do not constrain this attribute"
UNTRACKED_TARGET = -1.0


class OptimizationMode(str, Enum):
    """Trade-off the optimizer should favor."""
    PRICE_OPTIMIZED = "PRICE_OPTIMIZED"
    QUALITY_OPTIMIZED = "QUALITY_OPTIMIZED"
    BALANCED = "BALANCED"


class BlendingTarget(BaseModel):
    """
    Target cost/sensory profile for a blend request.

    Attributes:
        mode: Optimization mode (drives default profile and relaxation policy)
        target_price: Target price per kg (0 = no price target)
        target_acid: Target acidity score (negative = not tracked)
        target_bitter: Target bitterness score (negative = not tracked)
        target_sweet: Target sweetness score (negative = not tracked)
        target_caffeine: Target caffeine content (negative = not tracked)
        total_output_kg: Required blend weight (kg)
        max_batch_types: Maximum number of distinct batches in the blend
        min_ratio: Minimum share for any selected batch (e.g. 0.05 for 5%)
    """
    mode: OptimizationMode = Field(
        default=OptimizationMode.BALANCED,
        description="Optimization mode"
    )
    target_price: float = Field(default=0.0, description="Target price per kg", ge=0)
    target_acid: float = Field(default=0.0, description="Target acidity", ge=UNTRACKED_TARGET)
    target_bitter: float = Field(default=0.0, description="Target bitterness", ge=UNTRACKED_TARGET)
    target_sweet: float = Field(default=0.0, description="Target sweetness", ge=UNTRACKED_TARGET)
    target_caffeine: float = Field(default=0.0, description="Target caffeine", ge=UNTRACKED_TARGET)
    total_output_kg: float = Field(..., description="Required output weight (kg)", gt=0)
    max_batch_types: int = Field(default=3, description="Max distinct batches", ge=1)
    min_ratio: float = Field(
        default=0.0,
        description="Minimum share of a selected batch",
        ge=0,
        lt=1
    )

    model_config = ConfigDict(frozen=True)

    @property
    def has_price_target(self) -> bool:
        """True when a positive target price was supplied."""
        return self.target_price > 0

    def attribute(self, name: str) -> float:
        """Get the target value for a tracked attribute."""
        if name not in TRACKED_ATTRIBUTES:
            raise KeyError(f"Unknown blend attribute: {name}")
        return getattr(self, f"target_{name}")

    def tracks(self, name: str) -> bool:
        """
        Whether the blend model constrains and penalizes an attribute.

        Price is always tracked (its cap is handled separately); a sensory
        attribute is tracked unless its target is negative.
        """
        if name in SENSORY_ATTRIBUTES:
            return self.attribute(name) >= 0
        return name in TRACKED_ATTRIBUTES

    @property
    def balanced_attributes(self) -> tuple:
        """Tracked attributes in model order."""
        return tuple(a for a in TRACKED_ATTRIBUTES if self.tracks(a))
