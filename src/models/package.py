"""Package model with unit conversion at construction.

Weight is held in ounces and dimensions in inches regardless of the unit
system the caller used. Dimensions are sorted so that length is always
the longest side, matching USPS convention.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.services.usps_constants import CM_PER_INCH, GRAMS_PER_OUNCE, OUNCES_PER_LB


class Package(BaseModel):
    """A physical package to be rated.

    Build with ``Package(weight=..., dimensions=[...], units=...)``.
    Imperial input is ounces and inches; metric input is grams and
    centimetres.

    Attributes:
        ounces: Weight in ounces.
        inches: (length, width, height) in inches, longest first.
    """

    model_config = ConfigDict(frozen=True)

    ounces: float = Field(..., ge=0, description="Weight in ounces")
    inches: tuple[float, float, float] = Field(
        default=(0.0, 0.0, 0.0),
        description="Dimensions in inches, sorted longest first",
    )

    @model_validator(mode="before")
    @classmethod
    def _convert_units(cls, data: Any) -> Any:
        """Convert weight/dimensions/units input to ounces and sorted inches."""
        if not isinstance(data, dict) or "weight" not in data:
            return data

        units: Literal["imperial", "metric"] = data.get("units", "imperial")
        if units not in ("imperial", "metric"):
            raise ValueError(f"Unknown unit system: '{units}'")

        weight = float(data["weight"])
        raw_dimensions = data.get("dimensions") or []
        if isinstance(raw_dimensions, (int, float)):
            raw_dimensions = [raw_dimensions]
        dimensions = [float(d) for d in raw_dimensions][:3]
        dimensions += [0.0] * (3 - len(dimensions))

        if weight < 0 or any(d < 0 for d in dimensions):
            raise ValueError("Package weight and dimensions must not be negative")

        if units == "metric":
            weight = weight / GRAMS_PER_OUNCE
            dimensions = [d / CM_PER_INCH for d in dimensions]

        return {
            "ounces": weight,
            "inches": tuple(sorted(dimensions, reverse=True)),
        }

    @property
    def pounds(self) -> float:
        return self.ounces / OUNCES_PER_LB

    @property
    def length(self) -> float:
        return self.inches[0]

    @property
    def width(self) -> float:
        return self.inches[1]

    @property
    def height(self) -> float:
        return self.inches[2]

    @property
    def max_dimension(self) -> float:
        return self.inches[0]

    @property
    def girth(self) -> float:
        """Twice the sum of the two shorter sides."""
        return 2 * (self.width + self.height)

    @property
    def length_plus_girth(self) -> float:
        return self.length + self.girth

    @property
    def length_plus_width_plus_height(self) -> float:
        return self.length + self.width + self.height
