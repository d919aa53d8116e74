"""Size-limit constraint models.

A ConstraintSet holds the numeric limits read from one USPS size-limit
sentence. A sentence can be ambiguous, so the parser returns a spec that
is either a Single set or AnyOf several alternative sets; a package is
valid for AnyOf when it fits at least one alternative.
"""

from pydantic import BaseModel, ConfigDict, Field

CONSTRAINT_KEYS: tuple[str, ...] = (
    "length",
    "width",
    "height",
    "weight",
    "length_plus_girth",
    "length_plus_width_plus_height",
)


class ConstraintSet(BaseModel):
    """Upper bounds on package measurements, inches and pounds.

    A field left as None means that axis is unconstrained.
    """

    model_config = ConfigDict(frozen=True)

    length: float | None = Field(default=None, gt=0)
    width: float | None = Field(default=None, gt=0)
    height: float | None = Field(default=None, gt=0)
    weight: float | None = Field(default=None, gt=0)
    length_plus_girth: float | None = Field(default=None, gt=0)
    length_plus_width_plus_height: float | None = Field(default=None, gt=0)

    def as_dict(self) -> dict[str, float]:
        """Return only the constrained keys."""
        return self.model_dump(exclude_none=True)


class Single(BaseModel):
    """Exactly one constraint set applies."""

    model_config = ConfigDict(frozen=True)

    constraints: ConstraintSet
    label: str | None = None

    @property
    def sets(self) -> tuple[ConstraintSet, ...]:
        return (self.constraints,)


class AnyOf(BaseModel):
    """The package must satisfy at least one of several constraint sets."""

    model_config = ConfigDict(frozen=True)

    alternatives: tuple[ConstraintSet, ...] = Field(..., min_length=1)
    label: str | None = None

    @property
    def sets(self) -> tuple[ConstraintSet, ...]:
        return self.alternatives


ConstraintSpec = Single | AnyOf


def with_weight(spec: ConstraintSpec, weight: float | None) -> ConstraintSpec:
    """Return a copy of spec with a weight limit applied to every set.

    Args:
        spec: Parsed constraint spec.
        weight: Weight limit in pounds, or None to leave the spec as is.

    Returns:
        A new spec of the same shape.
    """
    if weight is None:
        return spec
    if isinstance(spec, AnyOf):
        return spec.model_copy(update={
            "alternatives": tuple(
                s.model_copy(update={"weight": weight}) for s in spec.alternatives
            ),
        })
    return spec.model_copy(update={
        "constraints": spec.constraints.model_copy(update={"weight": weight}),
    })
