"""Query-text checks: tokenization, safety invariants and pagination policy."""

from nl2sql_guard.sql.pagination import PAGINATION_RULES, check_pagination
from nl2sql_guard.sql.rules import Rule, RuleFailure, run_rules
from nl2sql_guard.sql.safety import SAFETY_RULES, check_query_safety, expected_critical
from nl2sql_guard.sql.tokens import (
    QueryShape,
    SQLTokenizeError,
    describe_query,
    tokenize_sql,
)

__all__ = [
    "PAGINATION_RULES",
    "SAFETY_RULES",
    "QueryShape",
    "Rule",
    "RuleFailure",
    "SQLTokenizeError",
    "check_pagination",
    "check_query_safety",
    "describe_query",
    "expected_critical",
    "run_rules",
    "tokenize_sql",
]
