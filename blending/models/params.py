"""Optimizer tuning parameters and calibrated market profiles.

Prices are in VND/kg. The profiles reflect the Vietnamese roaster market
(2024-2025), where Robusta trades around 120k-140k VND/kg:

- Mass market: cheapest possible blend, loose flavor, aggressively clears
  old stock.
- Balanced market: mainstream cafe blend, price and flavor weighted evenly.
- Specialty market: flavor first, price may run high, fresh stock welcome.
"""

from pydantic import BaseModel, ConfigDict, Field

from .target import OptimizationMode


class OptimizerParams(BaseModel):
    """
    Tunable parameters of the blend model.

    Attributes:
        price_tolerance: Allowed price overshoot above target (absolute, per kg)
        flavor_tolerance: Hard cap on sensory deviation in price-driven mode
        flavor_penalty_per_unit: Objective cost per unit of sensory deviation
        expiry_penalty_per_day: Shadow cost per day of remaining shelf life
        weight_acid: Relative importance of acidity deviation
        weight_bitter: Relative importance of bitterness deviation
        weight_sweet: Relative importance of sweetness deviation
        weight_caffeine: Relative importance of caffeine deviation
        solver_timeout_sec: Wall-clock budget for each solve
    """
    price_tolerance: float = Field(default=5000.0, ge=0)
    flavor_tolerance: float = Field(default=0.5, ge=0)
    flavor_penalty_per_unit: float = Field(default=20000.0, ge=0)
    expiry_penalty_per_day: float = Field(default=100.0, ge=0)
    weight_acid: float = Field(default=1.0, ge=0)
    weight_bitter: float = Field(default=2.0, ge=0)
    weight_sweet: float = Field(default=1.0, ge=0)
    weight_caffeine: float = Field(default=1.0, ge=0)
    solver_timeout_sec: float = Field(default=5.0, gt=0)

    model_config = ConfigDict(frozen=True)

    def weight_for(self, attribute: str) -> float:
        """Sensory weight of an attribute; price carries no flavor weight."""
        if attribute == "price":
            return 0.0
        return getattr(self, f"weight_{attribute}")

    @classmethod
    def for_mass_market(cls) -> "OptimizerParams":
        """Mass profile: tight price, loose flavor, strong FEFO push."""
        return cls(
            price_tolerance=1000.0,
            flavor_tolerance=1.5,
            flavor_penalty_per_unit=5000.0,
            expiry_penalty_per_day=200.0,
            weight_acid=0.5,
            weight_bitter=1.5,
            weight_sweet=0.5,
            weight_caffeine=1.0,
            solver_timeout_sec=5.0,
        )

    @classmethod
    def for_balanced_market(cls) -> "OptimizerParams":
        """Balanced profile: mainstream cafe blend."""
        return cls(
            price_tolerance=5000.0,
            flavor_tolerance=0.5,
            flavor_penalty_per_unit=20000.0,
            expiry_penalty_per_day=100.0,
            weight_acid=1.0,
            weight_bitter=2.0,
            weight_sweet=1.0,
            weight_caffeine=1.0,
            solver_timeout_sec=5.0,
        )

    @classmethod
    def for_specialty_market(cls) -> "OptimizerParams":
        """Specialty profile: flavor dominates, acid/sweet notes weighted up."""
        return cls(
            price_tolerance=20000.0,
            flavor_tolerance=0.2,
            flavor_penalty_per_unit=100000.0,
            expiry_penalty_per_day=20.0,
            weight_acid=2.0,
            weight_bitter=1.0,
            weight_sweet=2.0,
            weight_caffeine=0.5,
            solver_timeout_sec=10.0,
        )

    @classmethod
    def defaults(cls) -> "OptimizerParams":
        return cls.for_balanced_market()


def default_params_for_mode(mode: OptimizationMode) -> OptimizerParams:
    """
    Select the calibrated profile for an optimization mode.

    Args:
        mode: Target optimization mode

    Returns:
        Mass profile for PRICE_OPTIMIZED, specialty for QUALITY_OPTIMIZED,
        balanced otherwise
    """
    if mode == OptimizationMode.PRICE_OPTIMIZED:
        return OptimizerParams.for_mass_market()
    elif mode == OptimizationMode.QUALITY_OPTIMIZED:
        return OptimizerParams.for_specialty_market()
    return OptimizerParams.for_balanced_market()
