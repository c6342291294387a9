"""Validation and safety gating for language-model SQL and chart proposals."""

from nl2sql_guard.config import ConfigError, ValidationOptions, load_options
from nl2sql_guard.gateway import (
    ResponseRejectedError,
    Verdict,
    VerdictState,
    ensure_valid_query_response,
    ensure_valid_visualization_response,
    validate_query_response,
    validate_visualization_response,
)
from nl2sql_guard.models import (
    DecodeViolation,
    PaginationPolicyViolation,
    Profile,
    SafetyInvariantViolation,
    SchemaViolation,
    ValidationWarning,
    Violation,
    VisualizationBindingError,
)
from nl2sql_guard.response.decoder import DecodeError

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "DecodeError",
    "DecodeViolation",
    "PaginationPolicyViolation",
    "Profile",
    "ResponseRejectedError",
    "SafetyInvariantViolation",
    "SchemaViolation",
    "ValidationOptions",
    "ValidationWarning",
    "Verdict",
    "VerdictState",
    "Violation",
    "VisualizationBindingError",
    "__version__",
    "ensure_valid_query_response",
    "ensure_valid_visualization_response",
    "load_options",
    "validate_query_response",
    "validate_visualization_response",
]
