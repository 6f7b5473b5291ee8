"""
Failure classification.

Components:
- error_codes: catalogue of error codes with category, severity and retryability
- classifier: maps any failure to a Classification
"""

from resilience_layer.classification.classifier import (
    Classification,
    classify,
    is_retryable,
)
from resilience_layer.classification.error_codes import (
    ERROR_MAPPINGS,
    ErrorMapping,
    get_error_mapping,
    is_retryable_code,
    map_status_to_error_code,
)

__all__ = [
    "Classification",
    "classify",
    "is_retryable",
    "ERROR_MAPPINGS",
    "ErrorMapping",
    "get_error_mapping",
    "is_retryable_code",
    "map_status_to_error_code",
]
