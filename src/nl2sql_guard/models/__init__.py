"""Typed response contracts and validation findings."""

from nl2sql_guard.models.findings import (
    DecodeViolation,
    PaginationPolicyViolation,
    Profile,
    SafetyInvariantViolation,
    SchemaViolation,
    ValidationWarning,
    Violation,
    VisualizationBindingError,
)
from nl2sql_guard.models.query import (
    CRITICAL_QUERY_KINDS,
    ActionButton,
    AssistantResponse,
    PaginationSpec,
    QueryKind,
    QuerySuggestion,
)
from nl2sql_guard.models.visualization import (
    AxisBinding,
    AxisType,
    BubbleBinding,
    ChartConfiguration,
    ChartKind,
    ChartRender,
    DataFetch,
    FunnelBinding,
    HeatmapBinding,
    PieBinding,
    QueryStrategy,
    RenderingHints,
    SeriesBinding,
    VisualizationResponse,
    WaterfallBinding,
)

__all__ = [
    "CRITICAL_QUERY_KINDS",
    "ActionButton",
    "AssistantResponse",
    "AxisBinding",
    "AxisType",
    "BubbleBinding",
    "ChartConfiguration",
    "ChartKind",
    "ChartRender",
    "DataFetch",
    "DecodeViolation",
    "FunnelBinding",
    "HeatmapBinding",
    "PaginationPolicyViolation",
    "PaginationSpec",
    "PieBinding",
    "Profile",
    "QueryKind",
    "QueryStrategy",
    "QuerySuggestion",
    "RenderingHints",
    "SafetyInvariantViolation",
    "SchemaViolation",
    "SeriesBinding",
    "ValidationWarning",
    "Violation",
    "VisualizationBindingError",
    "VisualizationResponse",
    "WaterfallBinding",
]
