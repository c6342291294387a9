from nl2sql_guard.config import ValidationOptions
from nl2sql_guard.models import (
    AssistantResponse,
    Profile,
    QueryKind,
    SchemaViolation,
    VisualizationResponse,
)
from nl2sql_guard.response.structure import validate_structure


def _paths(report):
    return [violation.path for violation in report.violations]


def test_valid_query_document(select_query):
    """A well-formed reply yields a typed document and no findings."""
    document = {"assistantMessage": "Done.", "queries": [select_query()]}
    report = validate_structure(document, Profile.QUERY)

    assert report.is_valid
    assert isinstance(report.document, AssistantResponse)
    suggestion = report.document.queries[0]
    assert suggestion.query_type is QueryKind.SELECT
    assert suggestion.table_names == ["users"]
    assert report.suggestions == [("queries[0]", suggestion)]
    assert report.warnings == []


def test_message_only_reply_is_valid():
    """A clarification question without queries is still a valid reply."""
    report = validate_structure({"assistantMessage": "Which table?"}, Profile.QUERY)
    assert report.is_valid
    assert report.document.queries == []


def test_all_violations_are_collected(select_query):
    """Every broken field is reported, each with its own path."""
    document = {
        "queries": [
            select_query(isCritical="false"),
            select_query(queryType="select"),
        ],
        "actionButtons": [{"label": "Refresh", "isPrimary": True}],
    }
    report = validate_structure(document, Profile.QUERY)

    assert report.document is None
    assert all(isinstance(v, SchemaViolation) for v in report.violations)
    assert set(_paths(report)) == {
        "assistantMessage",
        "queries[0].isCritical",
        "queries[1].queryType",
        "actionButtons[0].action",
    }


def test_salvaged_suggestions_survive_sibling_errors(select_query):
    """Queries that validate on their own are kept for later checks."""
    document = {"queries": [select_query(), {"query": "DROP TABLE orders"}]}
    report = validate_structure(document, Profile.QUERY)

    assert [path for path, _ in report.suggestions] == ["queries[0]"]


def test_unknown_fields_are_ignored(select_query):
    document = {
        "assistantMessage": "ok",
        "queries": [select_query(confidence=0.9)],
        "followUps": ["more?"],
    }
    assert validate_structure(document, Profile.QUERY).is_valid


def test_example_result_must_be_json(select_query):
    document = {
        "assistantMessage": "ok",
        "queries": [select_query(exampleResultString="id=1, email=a@example.com")],
    }
    report = validate_structure(document, Profile.QUERY)
    assert _paths(report) == ["queries[0].exampleResultString"]


def test_pagination_only_for_select(select_query):
    """A non-empty pagination block on a write query is a contract breach."""
    insert = select_query(
        query="INSERT INTO users (email) VALUES ('a@example.com')",
        queryType="INSERT",
        isCritical=True,
    )
    report = validate_structure({"assistantMessage": "ok", "queries": [insert]}, Profile.QUERY)
    assert _paths(report) == ["queries[0]"]
    assert "only allowed for SELECT" in report.violations[0].message


def test_empty_pagination_on_write_is_allowed(select_query):
    insert = select_query(
        query="INSERT INTO users (email) VALUES ('a@example.com')",
        queryType="INSERT",
        isCritical=True,
        pagination={"paginatedQuery": "", "countQuery": ""},
    )
    report = validate_structure({"assistantMessage": "ok", "queries": [insert]}, Profile.QUERY)
    assert report.is_valid


def test_null_queries_means_none():
    report = validate_structure({"assistantMessage": "ok", "queries": None}, Profile.QUERY)
    assert report.is_valid
    assert report.document.queries == []


def test_too_many_action_buttons_warns():
    buttons = [
        {"label": f"Button {index}", "action": "refresh_schema", "isPrimary": index == 0}
        for index in range(3)
    ]
    report = validate_structure(
        {"assistantMessage": "ok", "actionButtons": buttons}, Profile.QUERY
    )
    assert report.is_valid
    assert [w.code for w in report.warnings] == ["too_many_action_buttons"]


def test_action_button_limit_is_configurable():
    buttons = [{"label": "Refresh", "action": "refresh_schema", "isPrimary": True}]
    report = validate_structure(
        {"assistantMessage": "ok", "actionButtons": buttons},
        Profile.QUERY,
        options=ValidationOptions(max_action_buttons=0),
    )
    assert [w.code for w in report.warnings] == ["too_many_action_buttons"]


def test_ddl_hints_on_select_warn(select_query):
    document = {"assistantMessage": "ok", "queries": [select_query(engineType="MergeTree")]}
    report = validate_structure(document, Profile.QUERY)
    assert report.is_valid
    assert [(w.code, w.path) for w in report.warnings] == [
        ("ddl_hint_on_non_ddl", "queries[0]")
    ]


def test_valid_visualization_document(chart_document):
    report = validate_structure(chart_document(), Profile.VISUALIZATION)
    assert report.is_valid
    assert isinstance(report.document, VisualizationResponse)
    assert report.chart_render.x_axis.data_key == "hour"


def test_camel_case_visualization_keys(chart_document):
    """camelCase replies are read the same as the prompt's snake_case."""
    document = {
        "canVisualize": True,
        "reason": "Trend over time.",
        "chartConfiguration": {
            "chartType": "bar",
            "title": "Events",
            "chartRender": {
                "xAxis": {"dataKey": "hour", "type": "category"},
                "series": [{"dataKey": "events"}],
            },
        },
    }
    report = validate_structure(document, Profile.VISUALIZATION)
    assert report.is_valid
    assert report.chart_render.series[0].data_key == "events"


def test_can_visualize_requires_configuration():
    report = validate_structure(
        {"can_visualize": True, "reason": "ok"}, Profile.VISUALIZATION
    )
    assert report.document is None
    assert "required when can_visualize is true" in report.violations[0].message


def test_cannot_visualize_forbids_configuration(chart_document):
    document = chart_document()
    document["can_visualize"] = False
    report = validate_structure(document, Profile.VISUALIZATION)
    assert "must be absent" in report.violations[0].message


def test_cannot_visualize_with_null_configuration():
    document = {
        "can_visualize": False,
        "reason": "Single row result.",
        "chart_configuration": None,
    }
    report = validate_structure(document, Profile.VISUALIZATION)
    assert report.is_valid
    assert report.chart_render is None


def test_unknown_chart_kind(chart_document):
    document = chart_document()
    document["chart_configuration"]["chart_type"] = "sunburst"
    report = validate_structure(document, Profile.VISUALIZATION)
    assert _paths(report) == ["chart_configuration.chart_type"]
    assert report.chart_render is not None


def test_rendering_hints_are_read(chart_document):
    document = chart_document()
    document["chart_configuration"]["rendering_hints"] = {
        "chart_height": 400,
        "chart_width": "100%",
        "color_scheme": "neobase_primary",
        "should_aggregate_beyond": 1000,
    }
    report = validate_structure(document, Profile.VISUALIZATION)
    assert report.is_valid
    hints = report.document.chart_configuration.rendering_hints
    assert hints.chart_width == "100%"
    assert hints.should_aggregate_beyond == 1000
