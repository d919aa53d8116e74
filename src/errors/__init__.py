"""Error handling framework for the USPS response core.

This package provides:
- Error code registry with E-XXXX format codes
- USPS error translation to registry codes
- Typed domain exceptions for parsing-level failures

Error categories:
- E-2xxx: Validation errors
- E-3xxx: USPS API errors
"""

from src.errors.domain import (
    DomainError,
    MalformedConstraintSentence,
    ValidationError,
)
from src.errors.registry import (
    ErrorCategory,
    ErrorCode,
    ERROR_REGISTRY,
    get_error,
    get_errors_by_category,
)
from src.errors.usps_translation import (
    USPS_ERROR_MAP,
    extract_usps_error,
    translate_usps_error,
)

__all__ = [
    # Registry
    "ErrorCode",
    "ErrorCategory",
    "ERROR_REGISTRY",
    "get_error",
    "get_errors_by_category",
    # USPS translation
    "translate_usps_error",
    "extract_usps_error",
    "USPS_ERROR_MAP",
    # Domain
    "DomainError",
    "ValidationError",
    "MalformedConstraintSentence",
]
