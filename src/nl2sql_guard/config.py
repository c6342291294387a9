"""Validation options loading and validation."""

from __future__ import annotations

import os

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)


class ConfigError(ValueError):
    """Raised when validation options cannot be loaded safely."""


class ValidationOptions(BaseModel):
    """Read-only thresholds shared by every validation call."""

    model_config = ConfigDict(frozen=True)

    max_document_bytes: int = Field(
        default=262_144,
        gt=0,
        validation_alias=AliasChoices("max_document_bytes", "maxDocumentBytes"),
    )
    max_nesting_depth: int = Field(
        default=32,
        gt=0,
        validation_alias=AliasChoices("max_nesting_depth", "maxNestingDepth"),
    )
    pagination_row_threshold: int = Field(
        default=50,
        ge=1,
        validation_alias=AliasChoices(
            "pagination_row_threshold", "paginationRowThreshold"
        ),
    )
    max_action_buttons: int = Field(
        default=2,
        ge=0,
        validation_alias=AliasChoices("max_action_buttons", "maxActionButtons"),
    )
    sql_dialect: str = Field(
        default="postgres",
        validation_alias=AliasChoices("sql_dialect", "sqlDialect"),
    )

    @field_validator("sql_dialect")
    @classmethod
    def validate_non_empty(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError("value cannot be empty.")
        return normalized


DEFAULT_OPTIONS = ValidationOptions()

_ENV_FIELDS = {
    "max_document_bytes": "NL2SQL_GUARD_MAX_DOCUMENT_BYTES",
    "max_nesting_depth": "NL2SQL_GUARD_MAX_NESTING_DEPTH",
    "pagination_row_threshold": "NL2SQL_GUARD_PAGINATION_ROW_THRESHOLD",
    "max_action_buttons": "NL2SQL_GUARD_MAX_ACTION_BUTTONS",
    "sql_dialect": "NL2SQL_GUARD_SQL_DIALECT",
}


def _env_value(name: str) -> str | None:
    value = os.getenv(name)
    if value is None:
        return None
    return value.strip()


def load_options() -> ValidationOptions:
    """Load validation options from environment variables.

    Unset variables keep their defaults.
    """
    payload: dict[str, str] = {}
    for field, env_name in _ENV_FIELDS.items():
        value = _env_value(env_name)
        if value is not None:
            payload[field] = value

    try:
        return ValidationOptions.model_validate(payload)
    except ValidationError as exc:
        messages = []
        for err in exc.errors():
            field = ".".join(str(item) for item in err["loc"])
            env_name = _ENV_FIELDS.get(field, field)
            messages.append(f"- {env_name}: {err['msg']}")
        raise ConfigError(
            "Invalid validation options:\n" + "\n".join(messages)
        ) from exc


def resolve_options(
    options: ValidationOptions | dict[str, object] | None,
) -> ValidationOptions:
    """Accept an options object, a plain mapping, or ``None`` for defaults."""
    if options is None:
        return DEFAULT_OPTIONS
    if isinstance(options, ValidationOptions):
        return options
    try:
        return ValidationOptions.model_validate(options)
    except ValidationError as exc:
        messages = [
            f"- {'.'.join(str(item) for item in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ConfigError(
            "Invalid validation options:\n" + "\n".join(messages)
        ) from exc
