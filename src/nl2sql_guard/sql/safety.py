"""Critical/rollback invariants for proposed queries.

INSERT, UPDATE, DELETE and DDL must be flagged critical and SELECT must not.
OTHER is the one kind whose declared flag is not compared: its text may be a
maintenance command or a read, so the model's flag stands. A critical OTHER
query still gets the rollback warning like any mutating kind.
"""

from __future__ import annotations

from dataclasses import dataclass

from nl2sql_guard.models.findings import SafetyInvariantViolation, ValidationWarning
from nl2sql_guard.models.query import CRITICAL_QUERY_KINDS, QueryKind, QuerySuggestion
from nl2sql_guard.sql.rules import (
    ExactlyOneNonEmpty,
    FieldIs,
    FieldState,
    Rule,
    Severity,
    run_rules,
)


def expected_critical(kind: QueryKind) -> bool | None:
    """Criticality implied by the query kind, ``None`` when the kind cannot tell."""
    if kind in CRITICAL_QUERY_KINDS:
        return True
    if kind is QueryKind.SELECT:
        return False
    return None


@dataclass(frozen=True)
class SafetySubject:
    kind: QueryKind
    is_critical: bool
    can_rollback: bool
    rollback_query: str
    rollback_dependent_query: str

    @classmethod
    def from_suggestion(cls, suggestion: QuerySuggestion) -> SafetySubject:
        return cls(
            kind=suggestion.query_type,
            is_critical=suggestion.is_critical,
            can_rollback=suggestion.can_rollback,
            rollback_query=(suggestion.rollback_query or "").strip(),
            rollback_dependent_query=(suggestion.rollback_dependent_query or "").strip(),
        )

    @property
    def effectively_critical(self) -> bool:
        # Either side claiming critical wins.
        return self.is_critical or bool(expected_critical(self.kind))


SAFETY_RULES: tuple[Rule[SafetySubject], ...] = (
    Rule(
        name="mutating-kind-is-critical",
        applies=lambda subject: subject.kind in CRITICAL_QUERY_KINDS,
        requires=(
            FieldIs(
                "is_critical",
                "isCritical",
                FieldState.TRUE,
                message="INSERT, UPDATE, DELETE and DDL queries must be marked isCritical.",
            ),
        ),
    ),
    Rule(
        name="read-kind-is-not-critical",
        applies=lambda subject: subject.kind is QueryKind.SELECT,
        requires=(
            FieldIs(
                "is_critical",
                "isCritical",
                FieldState.FALSE,
                message="SELECT queries must not be marked isCritical.",
            ),
        ),
    ),
    Rule(
        name="rollback-has-one-source",
        applies=lambda subject: subject.can_rollback,
        requires=(
            ExactlyOneNonEmpty(
                ("rollback_query", "rollback_dependent_query"),
                ("rollbackQuery", "rollbackDependentQuery"),
            ),
        ),
    ),
    Rule(
        name="critical-without-rollback",
        applies=lambda subject: subject.effectively_critical,
        requires=(
            FieldIs(
                "can_rollback",
                "canRollback",
                FieldState.TRUE,
                message=(
                    "Critical query cannot be rolled back; "
                    "the user must confirm before it is executed."
                ),
            ),
        ),
        severity=Severity.WARNING,
    ),
)


def check_query_safety(
    suggestion: QuerySuggestion,
    path: str,
) -> tuple[list[SafetyInvariantViolation], list[ValidationWarning]]:
    """Check criticality and rollback invariants without rewriting anything."""
    violations: list[SafetyInvariantViolation] = []
    warnings: list[ValidationWarning] = []
    for failure in run_rules(SAFETY_RULES, SafetySubject.from_suggestion(suggestion)):
        field_path = f"{path}.{failure.field}"
        if failure.severity is Severity.WARNING:
            warnings.append(
                ValidationWarning(
                    code=failure.rule.replace("-", "_"),
                    path=field_path,
                    message=failure.message,
                )
            )
        else:
            violations.append(
                SafetyInvariantViolation(path=field_path, message=failure.message)
            )
    return violations, warnings
