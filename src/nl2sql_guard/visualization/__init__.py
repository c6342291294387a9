"""Visualization binding checks."""

from nl2sql_guard.visualization.bindings import check_bindings, iter_bindings

__all__ = ["check_bindings", "iter_bindings"]
