"""Typed visualization-response contract proposed by the language model."""

from __future__ import annotations

from enum import Enum

from pydantic import (
    AliasChoices,
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictInt,
    StrictStr,
    model_validator,
)
from pydantic.alias_generators import to_camel


class ChartKind(str, Enum):
    LINE = "line"
    BAR = "bar"
    PIE = "pie"
    AREA = "area"
    SCATTER = "scatter"
    HEATMAP = "heatmap"
    FUNNEL = "funnel"
    BUBBLE = "bubble"
    WATERFALL = "waterfall"
    COMBO = "combo"


class AxisType(str, Enum):
    DATE = "date"
    CATEGORY = "category"
    NUMBER = "number"


class QueryStrategy(str, Enum):
    ORIGINAL_QUERY = "original_query"
    AGGREGATED_QUERY = "aggregated_query"
    SAMPLED_QUERY = "sampled_query"


def _snake_or_camel(field_name: str) -> AliasChoices:
    return AliasChoices(field_name, to_camel(field_name))


class _WireModel(BaseModel):
    # The prompt asks for snake_case keys; camelCase replies are accepted too.
    model_config = ConfigDict(
        alias_generator=AliasGenerator(validation_alias=_snake_or_camel),
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class AxisBinding(_WireModel):
    data_key: StrictStr
    label: StrictStr = ""
    type: AxisType
    format: StrictStr | None = None


class SeriesBinding(_WireModel):
    data_key: StrictStr
    name: StrictStr = ""
    type: StrictStr | None = None
    stroke: StrictStr | None = None
    fill: StrictStr | None = None
    area: StrictBool = False


class PieBinding(_WireModel):
    data_key: StrictStr
    name_key: StrictStr
    inner_radius: StrictInt | None = None


class HeatmapBinding(_WireModel):
    x_key: StrictStr
    y_key: StrictStr
    value_key: StrictStr
    colors: list[StrictStr] = Field(default_factory=list)


class FunnelBinding(_WireModel):
    stage_key: StrictStr
    value_key: StrictStr
    colors: list[StrictStr] = Field(default_factory=list)


class BubbleBinding(_WireModel):
    x_key: StrictStr
    y_key: StrictStr
    size_key: StrictStr
    category_key: StrictStr | None = None
    colors: list[StrictStr] = Field(default_factory=list)


class WaterfallColors(_WireModel):
    increase: StrictStr | None = None
    decrease: StrictStr | None = None
    total: StrictStr | None = None


class WaterfallBinding(_WireModel):
    category_key: StrictStr
    value_key: StrictStr
    colors: WaterfallColors | None = None


class ChartFeatures(_WireModel):
    tooltip: StrictBool = True
    legend: StrictBool = True
    grid: StrictBool = True
    responsive: StrictBool = True
    zoom_enabled: StrictBool = False


class ChartRender(_WireModel):
    """Axis and series bindings for the chart renderer."""

    type: ChartKind | None = None
    x_axis: AxisBinding | None = None
    y_axis: AxisBinding | None = None
    series: list[SeriesBinding] = Field(default_factory=list)
    pie: PieBinding | None = None
    heatmap: HeatmapBinding | None = None
    funnel: FunnelBinding | None = None
    bubble: BubbleBinding | None = None
    waterfall: WaterfallBinding | None = None
    colors: list[StrictStr] = Field(default_factory=list)
    features: ChartFeatures = Field(default_factory=ChartFeatures)

    @model_validator(mode="after")
    def validate_has_binding(self) -> ChartRender:
        blocks = (
            self.x_axis,
            self.pie,
            self.heatmap,
            self.funnel,
            self.bubble,
            self.waterfall,
        )
        if all(block is None for block in blocks):
            raise ValueError(
                "chart_render needs an x_axis or a pie, heatmap, funnel, "
                "bubble or waterfall binding."
            )
        return self


class DataFetch(_WireModel):
    query_strategy: QueryStrategy = QueryStrategy.ORIGINAL_QUERY
    optimized_query: StrictStr | None = None
    limit: StrictInt | None = Field(default=None, ge=0)
    sample_every_n: StrictInt | None = Field(default=None, ge=1)
    projected_rows: StrictInt | None = Field(default=None, ge=0)
    transformation: StrictStr | None = None
    transformation_details: StrictStr | None = None


class RenderingHints(_WireModel):
    chart_height: StrictInt | StrictStr | None = None
    chart_width: StrictInt | StrictStr | None = None
    color_scheme: StrictStr | None = None
    should_aggregate_beyond: StrictInt | None = Field(default=None, ge=0)
    projected_row_count: StrictInt | None = Field(default=None, ge=0)
    data_density: StrictStr | None = None


class ChartConfiguration(_WireModel):
    chart_type: ChartKind
    title: StrictStr
    description: StrictStr = ""
    data_fetch: DataFetch = Field(default_factory=DataFetch)
    chart_render: ChartRender
    rendering_hints: RenderingHints | None = None


class VisualizationResponse(_WireModel):
    """Validated model reply for the visualization profile."""

    can_visualize: StrictBool
    reason: StrictStr = ""
    chart_configuration: ChartConfiguration | None = None

    @model_validator(mode="after")
    def validate_configuration_presence(self) -> VisualizationResponse:
        if self.can_visualize and self.chart_configuration is None:
            raise ValueError(
                "chart_configuration is required when can_visualize is true."
            )
        if not self.can_visualize and self.chart_configuration is not None:
            raise ValueError(
                "chart_configuration must be absent when can_visualize is false."
            )
        return self
