"""Decoding and structural validation of raw model responses."""

from nl2sql_guard.response.decoder import DecodeError, decode_response
from nl2sql_guard.response.structure import (
    StructureReport,
    schema_violations,
    validate_structure,
)

__all__ = [
    "DecodeError",
    "StructureReport",
    "decode_response",
    "schema_violations",
    "validate_structure",
]
