"""Reduce transport error values of any shape to a short display string.

Errors reach the conversation view as exceptions, plain strings, API error
objects like ``{type, code, message, param}``, or provider responses whose
message embeds a JSON body. None of these paths may raise: a malformed value
degrades to its string form.
"""
import json
import logging
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

# Widest {...} span on a single line, e.g. 'Request failed: {"error":"bad key"}'.
_EMBEDDED_JSON = re.compile(r"\{.*\}")


def _to_json(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), default=str)
    except (TypeError, ValueError, RecursionError):
        return repr(type(value))


def _field_text(value: Any) -> str:
    """Stringify a ``message``/``error`` field that may not be a string."""
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping) and isinstance(value.get("message"), str):
        return value["message"]
    return _to_json(value)


def _candidate_message(error: Any) -> str:
    if isinstance(error, BaseException):
        # KeyError and friends quote their argument in str().
        if len(error.args) == 1 and isinstance(error.args[0], str):
            return error.args[0]
        return str(error)
    if isinstance(error, str):
        return error
    if isinstance(error, Mapping):
        field = error.get("message") or error.get("error")
        return _field_text(field) if field else _to_json(error)

    # Structured objects (SDK error types, pydantic models) expose the same
    # fields as attributes.
    field = getattr(error, "message", None) or getattr(error, "error", None)
    if field:
        return _field_text(field)
    return str(error)


def _unwrap_embedded_error(message: str) -> str:
    match = _EMBEDDED_JSON.search(message)
    if not match:
        return message
    try:
        parsed = json.loads(match.group(0))
    except (ValueError, RecursionError):
        return message
    if isinstance(parsed, dict) and parsed.get("error"):
        logger.debug("Unwrapped embedded JSON error from %r", message[:100])
        return _field_text(parsed["error"])
    return message


def normalize_error(error: Any) -> str | None:
    """Return a user-facing message for ``error``, or None when there is no error.

    The candidate text is taken from the exception message, the string itself,
    or the ``message``/``error`` field of a structured value (falling back to
    its JSON serialization). If that text embeds a JSON object carrying an
    ``error`` field, the field's value is returned instead.
    """
    if error is None:
        return None
    try:
        message = _candidate_message(error)
    except Exception as exc:
        logger.warning("Could not read error value of type %s: %s", type(error).__name__, exc)
        message = repr(error)
    return _unwrap_embedded_error(message)
