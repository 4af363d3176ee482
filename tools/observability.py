"""Structured start/finish logging around stylist tools."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Any, Callable, Mapping, ParamSpec, TypeVar

from pydantic import BaseModel, ValidationError

from stylist_app.logging_config import ensure_correlation_id, get_logger, log_event, redact_for_log

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")

_PLAIN_TYPES = (str, int, float, bool, list, dict, type(None))


def summarize_arguments(arguments: Mapping[str, Any], limit: int = 6) -> dict:
    """Redacted view of call arguments; rich objects collapse to their type name."""

    names = list(arguments)
    summary = {
        name: arguments[name] if isinstance(arguments[name], _PLAIN_TYPES) else type(arguments[name]).__name__
        for name in names[:limit]
    }
    if len(names) > limit:
        summary["truncated"] = True
    return redact_for_log(summary)


def instrument_tool(
    tool_name: str,
    input_model: type[BaseModel] | None = None,
    on_validation_error: Callable[[ValidationError], Any] | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log ``tool_call_started``/``completed``/``failed`` events around a tool.

    With ``input_model`` the keyword arguments are coerced through the model
    before the call. Invalid input is logged, then either passed to
    ``on_validation_error`` or re-raised.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            started = time.perf_counter()

            def emit(level: int, event: str, **fields: Any) -> None:
                log_event(LOGGER, level, event, tool=tool_name, correlation_id=correlation_id, **fields)

            def elapsed() -> float:
                return round((time.perf_counter() - started) * 1000, 2)

            if input_model is not None:
                try:
                    kwargs = input_model.model_validate(kwargs).model_dump()
                except ValidationError as exc:
                    emit(logging.WARNING, "tool_validation_failed", errors=exc.errors(include_url=False, include_context=False))
                    if on_validation_error is None:
                        raise
                    return on_validation_error(exc)

            emit(logging.INFO, "tool_call_started", kwargs=summarize_arguments(kwargs))
            try:
                result = func(*args, **kwargs)
            except Exception:
                emit(logging.ERROR, "tool_call_failed", duration_ms=elapsed(), exc_info=True)
                raise
            emit(logging.INFO, "tool_call_completed", duration_ms=elapsed())
            return result

        return wrapper

    return decorator


__all__ = ["instrument_tool", "summarize_arguments"]
