import json

import pytest

ACTIVE_USERS = (
    "SELECT id, email FROM users WHERE status = 'active' ORDER BY created_at DESC"
)


@pytest.fixture
def select_query():
    """Factory for a well-formed SELECT suggestion as the model would send it."""

    def build(**overrides):
        query = {
            "query": ACTIVE_USERS,
            "queryType": "SELECT",
            "tables": "users",
            "explanation": "Active users, newest first.",
            "isCritical": False,
            "canRollback": False,
            "estimateResponseTime": 40,
            "exampleResultString": '[{"id": "1", "email": "a@example.com"}]',
            "pagination": {
                "paginatedQuery": ACTIVE_USERS + " LIMIT 50 OFFSET offset_size",
                "countQuery": "SELECT COUNT(*) FROM users WHERE status = 'active'",
            },
        }
        query.update(overrides)
        return query

    return build


@pytest.fixture
def query_payload():
    """Factory for raw query-profile model text."""

    def build(*queries, **fields):
        document = {"assistantMessage": "Here is what I found.", "queries": list(queries)}
        document.update(fields)
        return json.dumps(document)

    return build


@pytest.fixture
def chart_document():
    """Factory for a visualization document over hour/events/errors columns."""

    def build(**render_overrides):
        render = {
            "type": "line",
            "x_axis": {"data_key": "hour", "label": "Hour", "type": "date"},
            "y_axis": {"data_key": "events", "label": "Events", "type": "number"},
            "series": [
                {"data_key": "events", "name": "Events", "stroke": "#8884d8"},
                {"data_key": "errors", "name": "Errors", "stroke": "#82ca9d"},
            ],
            "colors": ["#8884d8", "#82ca9d"],
            "features": {"tooltip": True, "legend": True, "grid": True},
        }
        render.update(render_overrides)
        return {
            "can_visualize": True,
            "reason": "Hourly counts plot well as a line chart.",
            "chart_configuration": {
                "chart_type": "line",
                "title": "Events per hour",
                "description": "Event and error volume by hour.",
                "data_fetch": {"query_strategy": "original_query", "projected_rows": 24},
                "chart_render": render,
            },
        }

    return build
