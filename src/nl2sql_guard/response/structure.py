"""Structural validation of decoded documents against a response profile."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from pydantic import ValidationError

from nl2sql_guard.config import DEFAULT_OPTIONS, ValidationOptions
from nl2sql_guard.models.findings import (
    Profile,
    SchemaViolation,
    ValidationWarning,
    format_path,
)
from nl2sql_guard.models.query import AssistantResponse, QueryKind, QuerySuggestion
from nl2sql_guard.models.visualization import ChartRender, VisualizationResponse

CHART_RENDER_PATH = "chart_configuration.chart_render"


@dataclass(frozen=True)
class StructureReport:
    """Typed document plus every structural finding for one response.

    ``suggestions`` and ``chart_render`` hold the parts that validated on
    their own, so later stages can still report on them when a sibling
    field is broken.
    """

    profile: Profile
    document: AssistantResponse | VisualizationResponse | None
    violations: list[SchemaViolation] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)
    suggestions: list[tuple[str, QuerySuggestion]] = field(default_factory=list)
    chart_render: ChartRender | None = None

    @property
    def is_valid(self) -> bool:
        return self.document is not None and not self.violations


def schema_violations(
    exc: ValidationError,
    prefix: tuple[str | int, ...] = (),
) -> list[SchemaViolation]:
    """Convert a pydantic error report into path-tagged violations."""
    return [
        SchemaViolation(
            path=format_path(prefix + tuple(err["loc"])),
            message=err["msg"],
        )
        for err in exc.errors()
    ]


def _salvage_suggestions(document: dict[str, Any]) -> list[tuple[str, QuerySuggestion]]:
    raw_queries = document.get("queries")
    if not isinstance(raw_queries, list):
        return []

    salvaged: list[tuple[str, QuerySuggestion]] = []
    for index, item in enumerate(raw_queries):
        try:
            suggestion = QuerySuggestion.model_validate(item)
        except ValidationError:
            continue
        salvaged.append((f"queries[{index}]", suggestion))
    return salvaged


def _validate_query(
    document: dict[str, Any],
    options: ValidationOptions,
) -> StructureReport:
    try:
        response = AssistantResponse.model_validate(document)
    except ValidationError as exc:
        return StructureReport(
            profile=Profile.QUERY,
            document=None,
            violations=schema_violations(exc),
            suggestions=_salvage_suggestions(document),
        )

    warnings: list[ValidationWarning] = []
    if len(response.action_buttons) > options.max_action_buttons:
        warnings.append(
            ValidationWarning(
                code="too_many_action_buttons",
                path="actionButtons",
                message=(
                    f"{len(response.action_buttons)} action buttons proposed, "
                    f"at most {options.max_action_buttons} should be shown."
                ),
            )
        )

    suggestions = [
        (f"queries[{index}]", suggestion)
        for index, suggestion in enumerate(response.queries)
    ]
    for path, suggestion in suggestions:
        hints = suggestion.ddl_hints
        if hints and suggestion.query_type is not QueryKind.DDL:
            warnings.append(
                ValidationWarning(
                    code="ddl_hint_on_non_ddl",
                    path=path,
                    message=(
                        f"{', '.join(sorted(hints))} only apply to DDL queries "
                        f"and are ignored for {suggestion.query_type.value}."
                    ),
                )
            )

    return StructureReport(
        profile=Profile.QUERY,
        document=response,
        warnings=warnings,
        suggestions=suggestions,
    )


def _lookup(document: Any, *names: str) -> Any:
    if not isinstance(document, dict):
        return None
    for name in names:
        if name in document:
            return document[name]
    return None


def _validate_visualization(
    document: dict[str, Any],
    options: ValidationOptions,
) -> StructureReport:
    try:
        response = VisualizationResponse.model_validate(document)
    except ValidationError as exc:
        configuration = _lookup(document, "chart_configuration", "chartConfiguration")
        raw_render = _lookup(configuration, "chart_render", "chartRender")
        chart_render = None
        if raw_render is not None:
            try:
                chart_render = ChartRender.model_validate(raw_render)
            except ValidationError:
                chart_render = None
        return StructureReport(
            profile=Profile.VISUALIZATION,
            document=None,
            violations=schema_violations(exc),
            chart_render=chart_render,
        )

    configuration = response.chart_configuration
    return StructureReport(
        profile=Profile.VISUALIZATION,
        document=response,
        chart_render=configuration.chart_render if configuration else None,
    )


_PROFILE_VALIDATORS: dict[
    Profile, Callable[[dict[str, Any], ValidationOptions], StructureReport]
] = {
    Profile.QUERY: _validate_query,
    Profile.VISUALIZATION: _validate_visualization,
}


def validate_structure(
    document: dict[str, Any],
    profile: Profile,
    *,
    options: ValidationOptions = DEFAULT_OPTIONS,
) -> StructureReport:
    """Validate field presence and primitive types for ``profile``.

    All violations are collected before returning. Unknown fields are ignored.
    """
    return _PROFILE_VALIDATORS[profile](document, options)
