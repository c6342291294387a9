"""Decode raw model text into a single JSON document."""

from __future__ import annotations

import json
import logging
from typing import Any

from nl2sql_guard.config import DEFAULT_OPTIONS, ValidationOptions
from nl2sql_guard.models.findings import Profile

logger = logging.getLogger(__name__)


class DecodeError(ValueError):
    """Raised when model output cannot be isolated as exactly one JSON object."""


def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    document: dict[str, Any] = {}
    for key, value in pairs:
        if key in document:
            raise DecodeError(f"Duplicate key {key!r} makes the document ambiguous.")
        document[key] = value
    return document


def _reject_constant(name: str) -> Any:
    raise DecodeError(f"Non-standard JSON constant {name!r} is not allowed.")


_DECODER = json.JSONDecoder(
    object_pairs_hook=_reject_duplicate_keys,
    parse_constant=_reject_constant,
)


def _nesting_depth(document: Any) -> int:
    deepest = 0
    stack: list[tuple[Any, int]] = [(document, 1)]
    while stack:
        node, depth = stack.pop()
        if isinstance(node, dict):
            children = node.values()
        elif isinstance(node, list):
            children = node
        else:
            continue
        deepest = max(deepest, depth)
        stack.extend((child, depth + 1) for child in children)
    return deepest


def _span_end(text: str, start: int) -> int:
    """Index just past the brace that closes the one at ``start``."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return len(text)


def _isolate_objects(text: str) -> tuple[list[Any], json.JSONDecodeError | None]:
    """Return every top-level JSON object embedded in surrounding text.

    Braces nested inside a span that failed to parse are never tried on their
    own, so a malformed payload cannot yield one of its inner objects.
    """
    found: list[Any] = []
    first_error: json.JSONDecodeError | None = None
    index = 0
    while True:
        start = text.find("{", index)
        if start == -1:
            return found, first_error
        try:
            document, end = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError as exc:
            if first_error is None:
                first_error = exc
            index = _span_end(text, start)
            continue
        found.append(document)
        index = end


def decode_response(
    raw_text: str,
    profile: Profile,
    *,
    options: ValidationOptions = DEFAULT_OPTIONS,
) -> dict[str, Any]:
    """Decode model output for ``profile`` into a JSON object.

    Code fences or prose around the payload are tolerated only when exactly
    one JSON object can be isolated from the text.
    """
    if not isinstance(raw_text, str):
        raise DecodeError(
            f"{profile.value} response must be text, got {type(raw_text).__name__}."
        )

    size = len(raw_text.encode("utf-8"))
    if size > options.max_document_bytes:
        raise DecodeError(
            f"{profile.value} response is {size} bytes, "
            f"limit is {options.max_document_bytes}."
        )

    text = raw_text.strip()
    if not text:
        raise DecodeError(f"{profile.value} response is empty.")

    try:
        try:
            document = _DECODER.decode(text)
        except json.JSONDecodeError:
            candidates, parse_error = _isolate_objects(text)
            if not candidates:
                detail = ""
                if parse_error is not None:
                    detail = (
                        f": {parse_error.msg} at line {parse_error.lineno} "
                        f"column {parse_error.colno}"
                    )
                raise DecodeError(
                    f"No JSON object found in {profile.value} response{detail}."
                ) from None
            if len(candidates) > 1:
                raise DecodeError(
                    f"Found {len(candidates)} JSON objects in {profile.value} "
                    "response; expected exactly one."
                ) from None
            document = candidates[0]
            logger.debug("Stripped text surrounding %s response JSON.", profile.value)
    except RecursionError as exc:
        raise DecodeError(
            f"{profile.value} response nesting exceeds "
            f"{options.max_nesting_depth} levels."
        ) from exc

    if not isinstance(document, dict):
        raise DecodeError(
            f"{profile.value} response must be a JSON object, "
            f"got {type(document).__name__}."
        )

    depth = _nesting_depth(document)
    if depth > options.max_nesting_depth:
        raise DecodeError(
            f"{profile.value} response nesting depth {depth} exceeds "
            f"{options.max_nesting_depth} levels."
        )
    return document
