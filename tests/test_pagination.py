from nl2sql_guard.config import ValidationOptions
from nl2sql_guard.models import PaginationPolicyViolation, QuerySuggestion
from nl2sql_guard.sql.pagination import check_pagination


def _check(raw, **options):
    suggestion = QuerySuggestion.model_validate(raw)
    return check_pagination(
        suggestion, "queries[0]", options=ValidationOptions(**options)
    )


def _paths(violations):
    return [violation.path for violation in violations]


def test_open_select_with_companions_passes(select_query):
    violations, warnings = _check(select_query())
    assert violations == []
    assert warnings == []


def test_small_limit_requires_empty_companions(select_query):
    """LIMIT 5 means the user asked for a handful of rows; nothing to page."""
    violations, _ = _check(
        select_query(
            query="SELECT * FROM users LIMIT 5",
            pagination={
                "paginatedQuery": "SELECT * FROM users LIMIT 50 OFFSET :offset",
                "countQuery": "",
            },
        )
    )
    assert all(isinstance(v, PaginationPolicyViolation) for v in violations)
    assert _paths(violations) == ["queries[0].pagination.paginatedQuery"]


def test_small_limit_with_both_companions(select_query):
    violations, _ = _check(
        select_query(
            query="SELECT * FROM users ORDER BY created_at DESC LIMIT 10",
            pagination={
                "paginatedQuery": "SELECT * FROM users LIMIT 50 OFFSET :offset",
                "countQuery": "SELECT COUNT(*) FROM users",
            },
        )
    )
    assert _paths(violations) == [
        "queries[0].pagination.paginatedQuery",
        "queries[0].pagination.countQuery",
    ]


def test_small_limit_without_pagination_block(select_query):
    violations, _ = _check(
        select_query(query="SELECT * FROM users LIMIT 5", pagination=None)
    )
    assert violations == []


def test_limit_at_threshold_needs_companions(select_query):
    violations, _ = _check(
        select_query(query="SELECT * FROM users LIMIT 50", pagination=None)
    )
    assert _paths(violations) == [
        "queries[0].pagination.paginatedQuery",
        "queries[0].pagination.countQuery",
    ]


def test_threshold_is_configurable(select_query):
    raw = select_query(query="SELECT * FROM users LIMIT 20", pagination=None)
    assert _check(raw)[0] == []
    assert _check(raw, pagination_row_threshold=25)[0] == []
    assert len(_check(raw, pagination_row_threshold=10)[0]) == 2


def test_count_only_query_must_not_paginate(select_query):
    violations, _ = _check(
        select_query(
            query="SELECT COUNT(*) FROM users WHERE status = 'active'",
            pagination={
                "paginatedQuery": "SELECT COUNT(*) FROM users LIMIT 50 OFFSET :offset",
                "countQuery": "",
            },
        )
    )
    assert _paths(violations) == ["queries[0].pagination.paginatedQuery"]


def test_count_only_query_without_companions(select_query):
    violations, _ = _check(
        select_query(
            query="SELECT COUNT(*) FROM users",
            pagination={"paginatedQuery": "", "countQuery": ""},
        )
    )
    assert violations == []


def test_open_select_needs_companions(select_query):
    violations, _ = _check(select_query(pagination=None))
    assert _paths(violations) == [
        "queries[0].pagination.paginatedQuery",
        "queries[0].pagination.countQuery",
    ]


def test_count_query_must_keep_filters(select_query):
    """A count over the whole table would misreport the page total."""
    raw = select_query()
    raw["pagination"]["countQuery"] = "SELECT COUNT(*) FROM users"
    violations, _ = _check(raw)
    assert _paths(violations) == ["queries[0].pagination.countQuery"]
    assert "filter" in violations[0].message


def test_count_query_may_add_filters(select_query):
    raw = select_query()
    raw["pagination"]["countQuery"] = (
        "SELECT COUNT(*) FROM users WHERE deleted_at IS NULL AND status = 'active'"
    )
    assert _check(raw)[0] == []


def test_paginated_query_without_offset_warns(select_query):
    raw = select_query()
    raw["pagination"]["paginatedQuery"] = (
        "SELECT id, email FROM users WHERE status = 'active' LIMIT 50"
    )
    violations, warnings = _check(raw)
    assert violations == []
    assert [w.code for w in warnings] == ["paginated_query_without_offset"]


def test_untokenizable_query(select_query):
    violations, _ = _check(
        select_query(query="SELECT * FROM users WHERE name = 'abc", pagination=None)
    )
    assert _paths(violations) == ["queries[0].query"]


def test_non_select_is_skipped(select_query):
    raw = select_query(
        query="DELETE FROM users WHERE id = 1",
        queryType="DELETE",
        isCritical=True,
        pagination=None,
    )
    assert _check(raw) == ([], [])


def test_fetch_first_counts_as_small_limit(select_query):
    violations, _ = _check(
        select_query(
            query="SELECT * FROM users ORDER BY id FETCH FIRST 10 ROWS ONLY",
            pagination=None,
        )
    )
    assert violations == []
