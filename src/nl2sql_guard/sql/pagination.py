"""Pagination policy for SELECT queries and their companion queries.

The count-query filter check is a token-level containment heuristic. It
catches a count query that drops or rewrites a filter of the original query,
but it does not prove the two queries count the same rows.
"""

from __future__ import annotations

from dataclasses import dataclass

from nl2sql_guard.config import DEFAULT_OPTIONS, ValidationOptions
from nl2sql_guard.models.findings import PaginationPolicyViolation, ValidationWarning
from nl2sql_guard.models.query import QueryKind, QuerySuggestion
from nl2sql_guard.sql.rules import FieldIs, FieldState, Rule, run_rules
from nl2sql_guard.sql.tokens import SQLTokenizeError, describe_query


@dataclass(frozen=True)
class PaginationSubject:
    row_limit: int | None
    count_only: bool
    threshold: int
    paginated_query: str
    count_query: str
    count_covers_filters: bool

    @property
    def has_small_limit(self) -> bool:
        return self.row_limit is not None and self.row_limit < self.threshold


PAGINATION_RULES: tuple[Rule[PaginationSubject], ...] = (
    Rule(
        name="small-explicit-limit",
        applies=lambda subject: subject.has_small_limit,
        requires=(
            FieldIs(
                "paginated_query",
                "paginatedQuery",
                FieldState.EMPTY,
                message=(
                    "paginatedQuery must be empty when the query limits rows "
                    "below the pagination threshold."
                ),
            ),
            FieldIs(
                "count_query",
                "countQuery",
                FieldState.EMPTY,
                message=(
                    "countQuery must be empty when the query limits rows "
                    "below the pagination threshold."
                ),
            ),
        ),
    ),
    Rule(
        name="count-only-projection",
        applies=lambda subject: subject.count_only,
        requires=(
            FieldIs(
                "paginated_query",
                "paginatedQuery",
                FieldState.EMPTY,
                message=(
                    "paginatedQuery must be empty for a query that only "
                    "selects COUNT(...)."
                ),
            ),
        ),
    ),
    Rule(
        name="paginate-open-result",
        applies=lambda subject: True,
        requires=(
            FieldIs("paginated_query", "paginatedQuery", FieldState.NON_EMPTY),
            FieldIs("count_query", "countQuery", FieldState.NON_EMPTY),
            FieldIs(
                "count_covers_filters",
                "countQuery",
                FieldState.TRUE,
                message=(
                    "countQuery must repeat every filter condition of the "
                    "original query."
                ),
            ),
        ),
    ),
)


def check_pagination(
    suggestion: QuerySuggestion,
    path: str,
    *,
    options: ValidationOptions = DEFAULT_OPTIONS,
) -> tuple[list[PaginationPolicyViolation], list[ValidationWarning]]:
    """Apply the pagination rule table to a SELECT suggestion.

    Other query kinds are left alone.
    """
    if suggestion.query_type is not QueryKind.SELECT:
        return [], []

    violations: list[PaginationPolicyViolation] = []
    warnings: list[ValidationWarning] = []
    pagination = suggestion.pagination
    paginated_query = ((pagination.paginated_query if pagination else None) or "").strip()
    count_query = ((pagination.count_query if pagination else None) or "").strip()

    try:
        shape = describe_query(suggestion.query, options.sql_dialect)
    except SQLTokenizeError as exc:
        return [PaginationPolicyViolation(path=f"{path}.query", message=str(exc))], []

    count_covers_filters = True
    if count_query:
        try:
            count_covers_filters = describe_query(
                count_query, options.sql_dialect
            ).covers_filters_of(shape)
        except SQLTokenizeError as exc:
            violations.append(
                PaginationPolicyViolation(
                    path=f"{path}.pagination.countQuery", message=str(exc)
                )
            )

    paginated_has_offset = True
    if paginated_query:
        try:
            paginated_has_offset = describe_query(
                paginated_query, options.sql_dialect
            ).has_offset
        except SQLTokenizeError as exc:
            violations.append(
                PaginationPolicyViolation(
                    path=f"{path}.pagination.paginatedQuery", message=str(exc)
                )
            )

    subject = PaginationSubject(
        row_limit=shape.row_limit,
        count_only=shape.count_only,
        threshold=options.pagination_row_threshold,
        paginated_query=paginated_query,
        count_query=count_query,
        count_covers_filters=count_covers_filters,
    )
    failures = run_rules(PAGINATION_RULES, subject, first_match=True)
    violations.extend(
        PaginationPolicyViolation(
            path=f"{path}.pagination.{failure.field}", message=failure.message
        )
        for failure in failures
    )

    if paginated_query and not paginated_has_offset and not failures:
        warnings.append(
            ValidationWarning(
                code="paginated_query_without_offset",
                path=f"{path}.pagination.paginatedQuery",
                message="paginatedQuery has no OFFSET clause to page with.",
            )
        )
    return violations, warnings
