"""Parse USPS size-limit sentences into constraint specs.

USPS describes international (and some domestic) size limits as English
sentences inside <MaxDimensions>, for example:

    'Max. length 46", width 35", height 46" and max. length plus girth 108"'
    'Max. length 24", Max. length, height, depth combined 36"'
    'Maximum length and girth combined 108"'
    'USPS-supplied Priority Mail flat-rate envelope 9 1/2" x 12 1/2." Maximum weight 4 pounds.'

The sentence is split at inch marks and each piece is classified by the
axis words it contains. An ordered tuple of matchers then looks at the
classified pieces; flat-rate products are checked first, after that the
first matcher to recognize the pieces wins.

Example:
    spec = parse_max_dimensions('Maximum length and girth combined 108"')
    spec.constraints.as_dict()  # {'length_plus_girth': 108.0}
"""

import html
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from src.errors.domain import MalformedConstraintSentence
from src.models.constraints import AnyOf, ConstraintSet, ConstraintSpec, Single
from src.services.usps_constants import (
    DEFAULT_FLAT_RATE_ENVELOPE,
    FLAT_RATE_BOX_LABEL,
    FLAT_RATE_BOXES,
    FLAT_RATE_ENVELOPE_HEIGHT_IN,
    FLAT_RATE_ENVELOPE_LABEL,
)

logger = logging.getLogger(__name__)

_INCH_MARK = re.compile(r'["”″]')
_TRAILING_INCHES = re.compile(
    r"(?:(?P<whole>\d+(?:\.\d+)?)(?:[\s-]+(?P<num>\d+)/(?P<den>\d+))?"
    r"|(?P<bare_num>\d+)/(?P<bare_den>\d+))\s*\.?\s*$"
)
_AXIS_WORDS = tuple(
    re.compile(rf"\b{word}\b") for word in ("length", "width", "height", "depth")
)
_GIRTH = re.compile(r"\bgirth\b")
_FLAT_RATE_BOX = re.compile(r"flat.rate.box", re.IGNORECASE)
_FLAT_RATE_ENVELOPE = re.compile(r"flat.rate.envelope", re.IGNORECASE)

SINGLE = "single"
GIRTH = "length_plus_girth"
COMBINED = "length_plus_width_plus_height"
BARE = "bare"


@dataclass(frozen=True)
class Bound:
    """One inch-marked value from a sentence and what it limits."""

    kind: str
    value: float


def parse_inches(text: str) -> float | None:
    """Read the number that ends text, allowing mixed fractions.

    Examples:
        >>> parse_inches("9 1/2")
        9.5
        >>> parse_inches(" x 12 1/2.")
        12.5
        >>> parse_inches("Max. length 46")
        46.0
    """
    match = _TRAILING_INCHES.search(text)
    if not match:
        return None
    if match.group("bare_num"):
        return int(match.group("bare_num")) / int(match.group("bare_den"))
    value = float(match.group("whole"))
    if match.group("num"):
        value += int(match.group("num")) / int(match.group("den"))
    return value


def _classify(token: str) -> Bound | None:
    """Classify one inch-terminated piece of a sentence."""
    value = parse_inches(token)
    if value is None:
        return None
    lower = token.lower()
    axis_count = sum(1 for pattern in _AXIS_WORDS if pattern.search(lower))
    if _GIRTH.search(lower):
        return Bound(GIRTH, value)
    if axis_count >= 3:
        return Bound(COMBINED, value)
    if axis_count:
        return Bound(SINGLE, value)
    return Bound(BARE, value)


def tokenize(sentence: str) -> list[Bound]:
    """Split a sentence at inch marks and classify each piece."""
    pieces = _INCH_MARK.split(sentence)
    # The text after the last inch mark has no inch value of its own
    bounds = (_classify(piece) for piece in pieces[:-1])
    return [b for b in bounds if b is not None]


def _values(bounds: list[Bound], kind: str) -> list[float]:
    return [b.value for b in bounds if b.kind == kind]


def _only(bounds: list[Bound], *kinds: str) -> bool:
    return all(b.kind in kinds for b in bounds)


# ---------------------------------------------------------------------------
# Matchers, tried in order. Each returns a spec or None.
# ---------------------------------------------------------------------------


def _match_flat_rate_box(
    sentence: str, bounds: list[Bound], service_name: str | None
) -> ConstraintSpec | None:
    if not (_FLAT_RATE_BOX.search(sentence) or (service_name and _FLAT_RATE_BOX.search(service_name))):
        return None
    return AnyOf(
        alternatives=tuple(ConstraintSet(**box) for box in FLAT_RATE_BOXES),
        label=FLAT_RATE_BOX_LABEL,
    )


def _match_flat_rate_envelope(
    sentence: str, bounds: list[Bound], service_name: str | None
) -> ConstraintSpec | None:
    bare = _values(bounds, BARE)
    named = bool(
        _FLAT_RATE_ENVELOPE.search(sentence)
        or (service_name and _FLAT_RATE_ENVELOPE.search(service_name))
    )
    bare_pair = len(bare) == 2 and _only(bounds, BARE)
    if not (named or bare_pair):
        return None
    if len(bare) >= 2:
        first, second = bare[:2]
        dimensions = {
            "length": max(first, second),
            "width": min(first, second),
            "height": FLAT_RATE_ENVELOPE_HEIGHT_IN,
        }
    else:
        dimensions = dict(DEFAULT_FLAT_RATE_ENVELOPE)
    return Single(constraints=ConstraintSet(**dimensions), label=FLAT_RATE_ENVELOPE_LABEL)


def _match_three_bounds(
    sentence: str, bounds: list[Bound], service_name: str | None
) -> ConstraintSpec | None:
    singles = _values(bounds, SINGLE)
    girth = _values(bounds, GIRTH)
    if len(singles) != 3 or len(girth) != 1 or not _only(bounds, SINGLE, GIRTH):
        return None
    length, width, height = sorted(singles, reverse=True)
    return Single(constraints=ConstraintSet(
        length=length, width=width, height=height, length_plus_girth=girth[0],
    ))


def _match_length_and_girth(
    sentence: str, bounds: list[Bound], service_name: str | None
) -> ConstraintSpec | None:
    singles = _values(bounds, SINGLE)
    girth = _values(bounds, GIRTH)
    if len(singles) != 1 or len(girth) != 1 or not _only(bounds, SINGLE, GIRTH):
        return None
    return Single(constraints=ConstraintSet(length=singles[0], length_plus_girth=girth[0]))


def _match_combined_girth(
    sentence: str, bounds: list[Bound], service_name: str | None
) -> ConstraintSpec | None:
    girth = _values(bounds, GIRTH)
    if len(girth) != 1 or not _only(bounds, GIRTH):
        return None
    return Single(constraints=ConstraintSet(length_plus_girth=girth[0]))


def _match_combined_dimensions(
    sentence: str, bounds: list[Bound], service_name: str | None
) -> ConstraintSpec | None:
    singles = _values(bounds, SINGLE)
    combined = _values(bounds, COMBINED)
    if len(singles) > 1 or len(combined) != 1 or not _only(bounds, SINGLE, COMBINED):
        return None
    constraints = {"length_plus_width_plus_height": combined[0]}
    if singles:
        constraints["length"] = singles[0]
    return Single(constraints=ConstraintSet(**constraints))


def _match_single_axis_bounds(
    sentence: str, bounds: list[Bound], service_name: str | None
) -> ConstraintSpec | None:
    singles = _values(bounds, SINGLE)
    if not singles or len(singles) > 3 or not _only(bounds, SINGLE):
        return None
    axes = ("length", "width", "height")
    return Single(constraints=ConstraintSet(
        **dict(zip(axes, sorted(singles, reverse=True)))
    ))


Matcher = Callable[[str, list[Bound], str | None], ConstraintSpec | None]

MATCHERS: tuple[Matcher, ...] = (
    _match_flat_rate_box,
    _match_flat_rate_envelope,
    _match_three_bounds,
    _match_length_and_girth,
    _match_combined_girth,
    _match_combined_dimensions,
    _match_single_axis_bounds,
)


def normalize_sentence(sentence: str) -> str:
    """Undo HTML escaping; USPS double-escapes quotes in MaxDimensions."""
    previous = None
    text = sentence
    while text != previous:
        previous, text = text, html.unescape(text)
    return " ".join(text.split())


def parse_max_dimensions(
    sentence: str, service_name: str | None = None
) -> ConstraintSpec:
    """Parse a USPS size-limit sentence.

    Args:
        sentence: MaxDimensions text (may still be HTML-escaped).
        service_name: Service description; flat-rate products are
            recognized from the name as well as the sentence.

    Returns:
        Single or AnyOf constraint spec, without a weight limit.

    Raises:
        MalformedConstraintSentence: If no known grammar applies.
    """
    text = normalize_sentence(sentence or "")
    bounds = tokenize(text)
    for matcher in MATCHERS:
        spec = matcher(text, bounds, service_name)
        if spec is not None:
            logger.debug("Size limit %r parsed by %s", text, matcher.__name__)
            return spec
    raise MalformedConstraintSentence(text)
