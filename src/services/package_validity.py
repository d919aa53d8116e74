"""Package validity checks and size classification.

Bounds are inclusive: a package exactly at a stated limit is valid.
"""

from collections.abc import Mapping, Sequence

from src.models.constraints import (
    CONSTRAINT_KEYS,
    AnyOf,
    ConstraintSet,
    ConstraintSpec,
    Single,
)
from src.models.package import Package
from src.services.usps_constants import (
    LARGE_LENGTH_PLUS_GIRTH_IN,
    LARGE_MAX_DIMENSION_IN,
    SizeCode,
)


def _measurements(package: Package) -> dict[str, float]:
    """Package quantities keyed like ConstraintSet fields."""
    # Constraint weights are pounds
    return {
        key: getattr(package, "pounds" if key == "weight" else key)
        for key in CONSTRAINT_KEYS
    }


def package_valid_for_max_dimensions(
    package: Package,
    constraints: ConstraintSet | Mapping[str, float],
) -> bool:
    """Check a package against one constraint set.

    Args:
        package: Package to check.
        constraints: ConstraintSet, or a dict using the same keys.

    Returns:
        True if every present bound is >= the package's measurement.
    """
    if isinstance(constraints, ConstraintSet):
        limits = constraints.as_dict()
    else:
        limits = {k: v for k, v in constraints.items() if v is not None}

    measured = _measurements(package)
    for key, limit in limits.items():
        if key not in measured:
            raise KeyError(f"Unknown constraint key: '{key}'")
        if measured[key] > float(limit):
            return False
    return True


def is_valid(
    package: Package,
    constraints: ConstraintSpec | ConstraintSet | Sequence[ConstraintSet],
    weight_limit: float | None = None,
) -> bool:
    """Check a package against a spec, a set, or alternative sets.

    Args:
        package: Package to check.
        constraints: Single/AnyOf spec, one ConstraintSet, or a list of
            ConstraintSets treated as alternatives.
        weight_limit: Extra weight limit in pounds applied on top of any
            weight bound in the sets.

    Returns:
        True if the package is within the weight limit and satisfies at
        least one constraint set.
    """
    if weight_limit is not None and package.pounds > weight_limit:
        return False

    if isinstance(constraints, Single):
        return package_valid_for_max_dimensions(package, constraints.constraints)
    if isinstance(constraints, AnyOf):
        alternatives = constraints.alternatives
    elif isinstance(constraints, ConstraintSet):
        return package_valid_for_max_dimensions(package, constraints)
    else:
        alternatives = tuple(constraints)

    return any(package_valid_for_max_dimensions(package, c) for c in alternatives)


def size_code_for(package: Package) -> SizeCode:
    """Classify a package as REGULAR or LARGE for the rate request.

    Args:
        package: Package to classify.

    Returns:
        LARGE if the longest side exceeds 12" or length plus girth
        exceeds 84"; REGULAR otherwise.
    """
    # The girth test never fires unless the longest-side test already has
    if (
        package.max_dimension > LARGE_MAX_DIMENSION_IN
        or package.length_plus_girth > LARGE_LENGTH_PLUS_GIRTH_IN
    ):
        return SizeCode.LARGE
    return SizeCode.REGULAR
