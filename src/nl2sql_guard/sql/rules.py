"""Declarative rule tables and the runner shared by the safety and pagination checks.

A rule pairs a predicate over a subject with the field states it then
requires. Subjects are plain objects; requirements read them by attribute.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Generic, Protocol, TypeVar

S = TypeVar("S")


class FieldState(str, Enum):
    EMPTY = "empty"
    NON_EMPTY = "non-empty"
    TRUE = "true"
    FALSE = "false"


class Severity(str, Enum):
    FATAL = "fatal"
    WARNING = "warning"


class Requirement(Protocol):
    field: str

    def failure(self, subject: object) -> str | None:
        """Return a message when ``subject`` does not meet the requirement."""


def _holds(value: object, state: FieldState) -> bool:
    if state is FieldState.EMPTY:
        return not value
    if state is FieldState.NON_EMPTY:
        return bool(value)
    if state is FieldState.TRUE:
        return value is True
    return value is False


@dataclass(frozen=True)
class FieldIs:
    """Requires attribute ``attribute`` (wire name ``field``) to be in ``state``."""

    attribute: str
    field: str
    state: FieldState
    message: str | None = None

    def failure(self, subject: object) -> str | None:
        if _holds(getattr(subject, self.attribute), self.state):
            return None
        return self.message or f"{self.field} must be {self.state.value}."


@dataclass(frozen=True)
class ExactlyOneNonEmpty:
    attributes: tuple[str, ...]
    fields: tuple[str, ...]

    @property
    def field(self) -> str:
        return self.fields[0]

    def failure(self, subject: object) -> str | None:
        filled = [
            name
            for attribute, name in zip(self.attributes, self.fields)
            if getattr(subject, attribute)
        ]
        if len(filled) == 1:
            return None
        if not filled:
            return f"exactly one of {', '.join(self.fields)} must be non-empty, none is."
        return f"exactly one of {', '.join(self.fields)} must be non-empty, got {', '.join(filled)}."


@dataclass(frozen=True)
class Rule(Generic[S]):
    name: str
    applies: Callable[[S], bool]
    requires: tuple[Requirement, ...]
    severity: Severity = Severity.FATAL


@dataclass(frozen=True)
class RuleFailure:
    rule: str
    field: str
    message: str
    severity: Severity


def run_rules(
    rules: Sequence[Rule[S]],
    subject: S,
    *,
    first_match: bool = False,
) -> list[RuleFailure]:
    """Evaluate ``rules`` in order against ``subject``.

    With ``first_match`` only the first applicable rule is checked, which makes
    the table an ordered decision list.
    """
    failures: list[RuleFailure] = []
    for rule in rules:
        if not rule.applies(subject):
            continue
        for requirement in rule.requires:
            message = requirement.failure(subject)
            if message is not None:
                failures.append(
                    RuleFailure(
                        rule=rule.name,
                        field=requirement.field,
                        message=message,
                        severity=rule.severity,
                    )
                )
        if first_match:
            break
    return failures
