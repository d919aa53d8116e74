"""Typed domain exceptions for parsing-level failures.

These are degradable failures: the caller decides whether to skip a
service, null a field, or escalate. Protocol-level failures live in
src.services.errors.ResponseError instead.

Usage:
    try:
        spec = parse_max_dimensions(sentence)
    except MalformedConstraintSentence as e:
        logger.warning("Unrecognized size limit: %s", e.sentence)
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ValidationError(DomainError):
    """Input failed validation."""

    def __init__(self, message: str, code: str = "E-2001") -> None:
        super().__init__(message)
        self.code = code


class MalformedConstraintSentence(ValidationError):
    """Size-limit sentence matched none of the known grammars."""

    def __init__(self, sentence: str) -> None:
        super().__init__(
            f"Unrecognized size-limit sentence: '{sentence}'", code="E-2006"
        )
        self.sentence = sentence
