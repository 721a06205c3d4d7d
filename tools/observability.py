"""Timing and outcome logging around language-backend calls."""

from __future__ import annotations

import logging
import time
from functools import wraps
from typing import Callable, ParamSpec, TypeVar

from stylist_app.logging_config import ensure_correlation_id, get_logger, log_event, tracing_span

LOGGER = get_logger(__name__)
P = ParamSpec("P")
R = TypeVar("R")


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


def _result_fields(result: object) -> dict:
    """Pull the outcome of a JSON call result without depending on its type."""

    fields: dict = {}
    if hasattr(result, "ok"):
        fields["outcome"] = "ok" if result.ok else "degraded"
    error = getattr(result, "error", None)
    if error:
        fields["error"] = str(error).split(":", 1)[0]
    attempts = getattr(result, "attempts", None)
    if attempts is not None:
        fields["attempts"] = attempts
    return fields


def instrument_backend_call(call_name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Log start, duration and outcome of a backend call inside a tracing span.

    Degraded results are logged at WARNING; exceptions are logged and re-raised.
    Prompts are never logged, only their length.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            correlation_id = ensure_correlation_id()
            prompt = next((arg for arg in args if isinstance(arg, str)), kwargs.get("prompt", ""))
            log_event(
                LOGGER,
                logging.DEBUG,
                "backend_call_started",
                call=call_name,
                prompt_chars=len(prompt) if isinstance(prompt, str) else 0,
                correlation_id=correlation_id,
            )
            start = time.perf_counter()
            with tracing_span(f"backend:{call_name}", correlation_id=correlation_id):
                try:
                    result = func(*args, **kwargs)
                except Exception:
                    log_event(
                        LOGGER,
                        logging.ERROR,
                        "backend_call_failed",
                        call=call_name,
                        duration_ms=_elapsed_ms(start),
                        correlation_id=correlation_id,
                        exc_info=True,
                    )
                    raise
            fields = _result_fields(result)
            log_event(
                LOGGER,
                logging.WARNING if fields.get("outcome") == "degraded" else logging.INFO,
                "backend_call_completed",
                call=call_name,
                duration_ms=_elapsed_ms(start),
                correlation_id=correlation_id,
                **fields,
            )
            return result

        return wrapper

    return decorator


__all__ = ["instrument_backend_call"]
