"""Chart data-key checks against the columns of the actual result set."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from nl2sql_guard.models.findings import VisualizationBindingError
from nl2sql_guard.models.visualization import ChartRender


def iter_bindings(render: ChartRender) -> Iterator[tuple[str, str]]:
    """Yield ``(binding, data_key)`` for every column reference in ``render``."""
    if render.x_axis is not None:
        yield "x_axis.data_key", render.x_axis.data_key
    if render.y_axis is not None:
        yield "y_axis.data_key", render.y_axis.data_key
    for index, series in enumerate(render.series):
        yield f"series[{index}].data_key", series.data_key
    if render.pie is not None:
        yield "pie.data_key", render.pie.data_key
        yield "pie.name_key", render.pie.name_key
    if render.heatmap is not None:
        yield "heatmap.x_key", render.heatmap.x_key
        yield "heatmap.y_key", render.heatmap.y_key
        yield "heatmap.value_key", render.heatmap.value_key
    if render.funnel is not None:
        yield "funnel.stage_key", render.funnel.stage_key
        yield "funnel.value_key", render.funnel.value_key
    if render.bubble is not None:
        yield "bubble.x_key", render.bubble.x_key
        yield "bubble.y_key", render.bubble.y_key
        yield "bubble.size_key", render.bubble.size_key
        if render.bubble.category_key is not None:
            yield "bubble.category_key", render.bubble.category_key
    if render.waterfall is not None:
        yield "waterfall.category_key", render.waterfall.category_key
        yield "waterfall.value_key", render.waterfall.value_key


def check_bindings(
    render: ChartRender,
    result_columns: Iterable[str],
    *,
    path: str = "chart_render",
) -> list[VisualizationBindingError]:
    """Report every data key that is not, case-sensitively, a result column."""
    if isinstance(result_columns, str):
        raise TypeError("result_columns must be a collection of column names.")
    columns = frozenset(result_columns)

    errors: list[VisualizationBindingError] = []
    for binding, data_key in iter_bindings(render):
        if data_key in columns:
            continue
        errors.append(
            VisualizationBindingError(
                path=f"{path}.{binding}",
                message=(
                    f"Data key {data_key!r} in {binding} is not a result column; "
                    f"available: {', '.join(sorted(columns)) or '(none)'}."
                ),
                data_key=data_key,
                binding=binding,
            )
        )
    return errors
