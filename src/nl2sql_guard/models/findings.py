"""Violations and warnings collected while validating a model response."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar


class Profile(str, Enum):
    """Response contract being validated."""

    QUERY = "query"
    VISUALIZATION = "visualization"


@dataclass(frozen=True)
class Violation:
    """A fatal finding tied to a field path in the decoded document."""

    path: str
    message: str

    kind: ClassVar[str] = "violation"

    def __str__(self) -> str:
        return f"{self.kind} at {self.path}: {self.message}"


@dataclass(frozen=True)
class DecodeViolation(Violation):
    kind: ClassVar[str] = "decode"


@dataclass(frozen=True)
class SchemaViolation(Violation):
    kind: ClassVar[str] = "schema"


@dataclass(frozen=True)
class SafetyInvariantViolation(Violation):
    kind: ClassVar[str] = "safety"


@dataclass(frozen=True)
class PaginationPolicyViolation(Violation):
    kind: ClassVar[str] = "pagination"


@dataclass(frozen=True)
class VisualizationBindingError(Violation):
    """A chart binding whose data key is not a result column."""

    data_key: str = ""
    binding: str = ""

    kind: ClassVar[str] = "visualization_binding"


@dataclass(frozen=True)
class ValidationWarning:
    """A non-fatal finding that must be surfaced next to an accepted response."""

    code: str
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.code} at {self.path}: {self.message}"


def format_path(loc: tuple[str | int, ...]) -> str:
    """Render a location tuple as ``queries[0].isCritical``."""
    rendered = ""
    for item in loc:
        if isinstance(item, int):
            rendered += f"[{item}]"
        elif rendered:
            rendered += f".{item}"
        else:
            rendered = str(item)
    return rendered or "$"
