"""Fail-closed verdicts for raw model responses."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from nl2sql_guard.config import ValidationOptions, resolve_options
from nl2sql_guard.models.findings import (
    DecodeViolation,
    Profile,
    ValidationWarning,
    Violation,
)
from nl2sql_guard.models.query import AssistantResponse
from nl2sql_guard.models.visualization import VisualizationResponse
from nl2sql_guard.response.decoder import DecodeError, decode_response
from nl2sql_guard.response.structure import CHART_RENDER_PATH, validate_structure
from nl2sql_guard.sql.pagination import check_pagination
from nl2sql_guard.sql.safety import check_query_safety
from nl2sql_guard.visualization.bindings import check_bindings

logger = logging.getLogger(__name__)


class VerdictState(str, Enum):
    RECEIVED = "received"
    DECODED = "decoded"
    STRUCTURALLY_VALID = "structurally_valid"
    SAFETY_CHECKED = "safety_checked"
    POLICY_CHECKED = "policy_checked"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


_TRANSITIONS: dict[VerdictState, frozenset[VerdictState]] = {
    VerdictState.RECEIVED: frozenset({VerdictState.DECODED, VerdictState.REJECTED}),
    VerdictState.DECODED: frozenset(
        {VerdictState.STRUCTURALLY_VALID, VerdictState.REJECTED}
    ),
    # Visualization responses carry no queries and skip the safety stage.
    VerdictState.STRUCTURALLY_VALID: frozenset(
        {
            VerdictState.SAFETY_CHECKED,
            VerdictState.POLICY_CHECKED,
            VerdictState.REJECTED,
        }
    ),
    VerdictState.SAFETY_CHECKED: frozenset(
        {VerdictState.POLICY_CHECKED, VerdictState.REJECTED}
    ),
    VerdictState.POLICY_CHECKED: frozenset(
        {VerdictState.ACCEPTED, VerdictState.REJECTED}
    ),
    VerdictState.ACCEPTED: frozenset(),
    VerdictState.REJECTED: frozenset(),
}


class ResponseRejectedError(RuntimeError):
    """Raised when a model response fails validation."""

    def __init__(self, violations: Sequence[Violation], failed_stage: VerdictState):
        self.violations = tuple(violations)
        self.failed_stage = failed_stage
        super().__init__("\n".join(f"- {item}" for item in self.violations))


@dataclass(frozen=True)
class Verdict:
    """Terminal outcome of validating one model response.

    ``response`` is only set for accepted responses. ``failed_stage`` names the
    first stage that found a fatal condition; later stages still ran so that
    ``violations`` is a complete report.
    """

    profile: Profile
    state: VerdictState
    response: AssistantResponse | VisualizationResponse | None
    warnings: tuple[ValidationWarning, ...]
    violations: tuple[Violation, ...]
    trail: tuple[VerdictState, ...]
    failed_stage: VerdictState | None = None

    @property
    def accepted(self) -> bool:
        return self.state is VerdictState.ACCEPTED

    @property
    def error(self) -> ResponseRejectedError | None:
        if self.accepted:
            return None
        if self.failed_stage is None:
            raise RuntimeError(
                f"Verdict in state {self.state.value} has no failed stage."
            )
        return ResponseRejectedError(self.violations, self.failed_stage)


class _VerdictTracker:
    def __init__(self, profile: Profile):
        self.profile = profile
        self.state = VerdictState.RECEIVED
        self.trail = [VerdictState.RECEIVED]
        self.violations: list[Violation] = []
        self.warnings: list[ValidationWarning] = []
        self.failed_stage: VerdictState | None = None

    def _move(self, target: VerdictState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"Illegal verdict transition {self.state.value} -> {target.value}."
            )
        self.state = target
        self.trail.append(target)

    def stage(
        self,
        target: VerdictState,
        violations: Iterable[Violation] = (),
        warnings: Iterable[ValidationWarning] = (),
    ) -> None:
        found = list(violations)
        self.violations.extend(found)
        self.warnings.extend(warnings)
        if found and self.failed_stage is None:
            self.failed_stage = target
        if self.failed_stage is None:
            self._move(target)

    def finish(
        self, response: AssistantResponse | VisualizationResponse | None
    ) -> Verdict:
        if self.failed_stage is None:
            self._move(VerdictState.ACCEPTED)
            logger.info(
                "Accepted %s response with %d warning(s).",
                self.profile.value,
                len(self.warnings),
            )
        else:
            self._move(VerdictState.REJECTED)
            response = None
            logger.warning(
                "Rejected %s response at %s with %d violation(s).",
                self.profile.value,
                self.failed_stage.value,
                len(self.violations),
            )
        return Verdict(
            profile=self.profile,
            state=self.state,
            response=response,
            warnings=tuple(self.warnings),
            violations=tuple(self.violations),
            trail=tuple(self.trail),
            failed_stage=self.failed_stage,
        )


def _decode(
    tracker: _VerdictTracker, raw_text: str, options: ValidationOptions
) -> dict[str, Any] | None:
    try:
        document = decode_response(raw_text, tracker.profile, options=options)
    except DecodeError as exc:
        tracker.stage(
            VerdictState.DECODED, [DecodeViolation(path="$", message=str(exc))]
        )
        return None
    tracker.stage(VerdictState.DECODED)
    return document


def validate_query_response(
    raw_text: str,
    options: ValidationOptions | dict[str, object] | None = None,
) -> Verdict:
    """Validate a query-profile model response and return its verdict."""
    options = resolve_options(options)
    tracker = _VerdictTracker(Profile.QUERY)

    document = _decode(tracker, raw_text, options)
    if document is None:
        return tracker.finish(None)

    report = validate_structure(document, Profile.QUERY, options=options)
    tracker.stage(VerdictState.STRUCTURALLY_VALID, report.violations, report.warnings)

    safety_violations: list[Violation] = []
    safety_warnings: list[ValidationWarning] = []
    for path, suggestion in report.suggestions:
        violations, warnings = check_query_safety(suggestion, path)
        safety_violations.extend(violations)
        safety_warnings.extend(warnings)
    tracker.stage(VerdictState.SAFETY_CHECKED, safety_violations, safety_warnings)

    policy_violations: list[Violation] = []
    policy_warnings: list[ValidationWarning] = []
    for path, suggestion in report.suggestions:
        violations, warnings = check_pagination(suggestion, path, options=options)
        policy_violations.extend(violations)
        policy_warnings.extend(warnings)
    tracker.stage(VerdictState.POLICY_CHECKED, policy_violations, policy_warnings)

    return tracker.finish(report.document)


def validate_visualization_response(
    raw_text: str,
    result_columns: Iterable[str],
    options: ValidationOptions | dict[str, object] | None = None,
) -> Verdict:
    """Validate a visualization-profile model response against result columns."""
    options = resolve_options(options)
    if isinstance(result_columns, str):
        raise TypeError("result_columns must be a collection of column names.")
    columns = frozenset(result_columns)
    tracker = _VerdictTracker(Profile.VISUALIZATION)

    document = _decode(tracker, raw_text, options)
    if document is None:
        return tracker.finish(None)

    report = validate_structure(document, Profile.VISUALIZATION, options=options)
    tracker.stage(VerdictState.STRUCTURALLY_VALID, report.violations, report.warnings)

    binding_errors: list[Violation] = []
    if report.chart_render is not None:
        binding_errors.extend(
            check_bindings(report.chart_render, columns, path=CHART_RENDER_PATH)
        )
    tracker.stage(VerdictState.POLICY_CHECKED, binding_errors)

    return tracker.finish(report.document)


def ensure_valid_query_response(
    raw_text: str,
    options: ValidationOptions | dict[str, object] | None = None,
) -> Verdict:
    """Validate a query-profile response and raise when it is rejected."""
    verdict = validate_query_response(raw_text, options)
    if verdict.error is not None:
        raise verdict.error
    return verdict


def ensure_valid_visualization_response(
    raw_text: str,
    result_columns: Iterable[str],
    options: ValidationOptions | dict[str, object] | None = None,
) -> Verdict:
    """Validate a visualization-profile response and raise when it is rejected."""
    verdict = validate_visualization_response(raw_text, result_columns, options)
    if verdict.error is not None:
        raise verdict.error
    return verdict
