"""Coffee batch data model for blend optimization."""

from pydantic import BaseModel, ConfigDict, Field


#: Attributes tracked in the blend balance constraints, in model order
TRACKED_ATTRIBUTES = ("price", "acid", "bitter", "sweet", "caffeine")

#: Sensory attributes (everything except price)
SENSORY_ATTRIBUTES = ("acid", "bitter", "sweet", "caffeine")


class CoffeeBatch(BaseModel):
    """
    Represents one discrete lot of coffee available for blending.

    Sensory attributes must share a consistent scale across all batches
    of a request (e.g. 0-10 cupping scores); caffeine is usually a
    percentage.

    Attributes:
        id: Unique batch identifier
        name: Display name
        price: Price per kg
        acid: Acidity score
        bitter: Bitterness score
        sweet: Sweetness score
        caffeine: Caffeine content
        available_stock: Stock on hand (kg)
        days_to_expiry: Days until the batch expires (lower = older stock)
    """
    id: str = Field(..., description="Unique batch identifier", min_length=1)
    name: str = Field(default="", description="Display name")
    price: float = Field(..., description="Price per kg", ge=0)
    acid: float = Field(default=0.0, description="Acidity score", ge=0)
    bitter: float = Field(default=0.0, description="Bitterness score", ge=0)
    sweet: float = Field(default=0.0, description="Sweetness score", ge=0)
    caffeine: float = Field(default=0.0, description="Caffeine content", ge=0)
    available_stock: float = Field(..., description="Available stock (kg)", ge=0)
    days_to_expiry: int = Field(default=0, description="Days until expiry")

    model_config = ConfigDict(frozen=True)

    def attribute(self, name: str) -> float:
        """
        Get the value of a tracked attribute.

        Args:
            name: One of TRACKED_ATTRIBUTES

        Returns:
            Attribute value for this batch
        """
        if name not in TRACKED_ATTRIBUTES:
            raise KeyError(f"Unknown blend attribute: {name}")
        return getattr(self, name)

    def max_fraction(self, total_output_kg: float) -> float:
        """Largest share of the blend this batch can cover from stock."""
        return min(1.0, self.available_stock / total_output_kg)

    def __str__(self) -> str:
        """String representation."""
        return f"{self.name or self.id} ({self.available_stock:,.1f} kg @ {self.price:,.0f})"
