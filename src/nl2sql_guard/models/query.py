"""Typed query-response contract proposed by the language model."""

from __future__ import annotations

import json
from enum import Enum

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class QueryKind(str, Enum):
    """Wire values of ``queryType``."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    DDL = "DDL"
    OTHER = "OTHER"


CRITICAL_QUERY_KINDS = frozenset(
    {QueryKind.INSERT, QueryKind.UPDATE, QueryKind.DELETE, QueryKind.DDL}
)


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class ActionButton(_WireModel):
    label: StrictStr
    action: StrictStr
    is_primary: StrictBool = False


class PaginationSpec(_WireModel):
    """Companion queries for paging through a large SELECT result."""

    paginated_query: StrictStr | None = None
    count_query: StrictStr | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.paginated_query or self.count_query)


class QuerySuggestion(_WireModel):
    """One query proposed by the model, still untrusted text."""

    query: StrictStr = Field(min_length=1)
    query_type: QueryKind
    is_critical: StrictBool
    can_rollback: StrictBool = False
    rollback_query: StrictStr | None = None
    rollback_dependent_query: StrictStr | None = None
    pagination: PaginationSpec | None = None
    tables: StrictStr = ""
    explanation: StrictStr = ""
    engine_type: StrictStr | None = None
    partition_key: StrictStr | None = None
    order_by_key: StrictStr | None = None
    estimate_response_time: float | None = Field(default=None, strict=True, ge=0)
    example_result_string: StrictStr | None = None

    @field_validator("example_result_string")
    @classmethod
    def validate_example_result(cls, value: str | None) -> str | None:
        if value and value.strip():
            try:
                json.loads(value)
            except json.JSONDecodeError as exc:
                raise ValueError(
                    f"exampleResultString must be valid JSON text ({exc.msg})."
                ) from exc
        return value

    @model_validator(mode="after")
    def validate_pagination_kind(self) -> QuerySuggestion:
        if (
            self.pagination is not None
            and not self.pagination.is_empty
            and self.query_type is not QueryKind.SELECT
        ):
            raise ValueError(
                f"pagination is only allowed for SELECT queries, got {self.query_type.value}."
            )
        return self

    @property
    def table_names(self) -> list[str]:
        return [name.strip() for name in self.tables.split(",") if name.strip()]

    @property
    def ddl_hints(self) -> dict[str, str]:
        hints = {
            "engineType": self.engine_type,
            "partitionKey": self.partition_key,
            "orderByKey": self.order_by_key,
        }
        return {name: value for name, value in hints.items() if value}


class AssistantResponse(_WireModel):
    """Validated model reply for the query profile."""

    assistant_message: StrictStr = Field(min_length=1)
    action_buttons: list[ActionButton] = Field(default_factory=list)
    queries: list[QuerySuggestion] = Field(default_factory=list)

    @field_validator("action_buttons", "queries", mode="before")
    @classmethod
    def validate_null_as_empty(cls, value: object) -> object:
        return [] if value is None else value
