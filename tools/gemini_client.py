"""Gemini-backed JSON port used by the classifier and the state analyzer.

Calls never raise: every outcome is a :class:`JSONCallResult` that either holds
a parsed JSON object or an error string. Rate limits and server errors are
retried with exponential backoff before giving up.
"""

from __future__ import annotations

import json
import logging
import random
import re
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from stylist_app.config import DEFAULT_GEMINI_MODEL
from stylist_app.errors import UpstreamParseError
from stylist_app.logging_config import get_logger, log_event
from tools.observability import instrument_backend_call

LOGGER = get_logger(__name__)

RETRYABLE_ERRORS = (google_exceptions.ResourceExhausted, google_exceptions.ServerError)
_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_OBJECT_PATTERN = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True)
class JSONCallResult:
    """Success or failure of one backend call."""

    payload: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    raw_text: str = ""
    attempts: int = 0

    @property
    def ok(self) -> bool:
        return self.payload is not None

    @classmethod
    def success(cls, payload: Dict[str, Any], raw_text: str = "", attempts: int = 1) -> "JSONCallResult":
        return cls(payload=payload, raw_text=raw_text, attempts=attempts)

    @classmethod
    def failure(cls, error: str, raw_text: str = "", attempts: int = 0) -> "JSONCallResult":
        return cls(error=error, raw_text=raw_text, attempts=attempts)


class JSONBackend(Protocol):
    """Anything that turns a prompt into a JSON call result."""

    def generate_json(self, prompt: str) -> JSONCallResult:
        ...


def parse_json_payload(text: str) -> Dict[str, Any]:
    """Extract a JSON object from model output, tolerating code fences."""

    cleaned = _FENCE_PATTERN.sub("", (text or "").strip()).strip()
    if not cleaned:
        raise UpstreamParseError("empty response", raw_text=text)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _OBJECT_PATTERN.search(cleaned)
        if not match:
            raise UpstreamParseError("response is not JSON", raw_text=text) from None
        try:
            parsed = json.loads(match.group())
        except json.JSONDecodeError as exc:
            raise UpstreamParseError(f"malformed JSON: {exc.msg}", raw_text=text) from exc
    if not isinstance(parsed, dict):
        raise UpstreamParseError("expected a JSON object", raw_text=text)
    return parsed


class GeminiJSONClient:
    """Thin wrapper over ``genai.GenerativeModel`` asking for JSON output."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_GEMINI_MODEL,
        system_instruction: Optional[str] = None,
        max_retries: int = 5,
        backoff_s: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
        generative_model: Optional[Any] = None,
    ) -> None:
        self.api_key = api_key
        self.model_name = model
        self.system_instruction = system_instruction
        self.max_retries = max(0, max_retries)
        self.backoff_s = backoff_s
        self._sleep = sleep
        self._model = generative_model

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_model(self) -> genai.GenerativeModel:
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                model_name=self.model_name,
                system_instruction=self.system_instruction,
                generation_config=genai.types.GenerationConfig(
                    temperature=0.0,
                    response_mime_type="application/json",
                ),
            )
        return self._model

    def _backoff_delay(self, attempt: int) -> float:
        return self.backoff_s * (2**attempt) + random.uniform(0, self.backoff_s)

    @instrument_backend_call("gemini.generate_json")
    def generate_json(self, prompt: str) -> JSONCallResult:
        if not self.configured:
            return JSONCallResult.failure("backend_not_configured")

        model = self._get_model()
        for attempt in range(self.max_retries + 1):
            try:
                response = model.generate_content(prompt)
                text = response.text
            except RETRYABLE_ERRORS as exc:
                if attempt >= self.max_retries:
                    return JSONCallResult.failure(f"retries_exhausted: {exc}", attempts=attempt + 1)
                delay = self._backoff_delay(attempt)
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "gemini_retry_scheduled",
                    attempt=attempt + 1,
                    delay_s=round(delay, 2),
                    error_type=type(exc).__name__,
                )
                self._sleep(delay)
                continue
            except google_exceptions.GoogleAPIError as exc:
                return JSONCallResult.failure(f"backend_error: {exc}", attempts=attempt + 1)
            except ValueError as exc:
                # response.text raises when the candidate was blocked or empty.
                return JSONCallResult.failure(f"no_text: {exc}", attempts=attempt + 1)

            try:
                payload = parse_json_payload(text)
            except UpstreamParseError as exc:
                return JSONCallResult.failure(f"parse_error: {exc}", raw_text=text, attempts=attempt + 1)
            return JSONCallResult.success(payload, raw_text=text, attempts=attempt + 1)

        return JSONCallResult.failure("retries_exhausted", attempts=self.max_retries + 1)


__all__ = ["JSONCallResult", "JSONBackend", "GeminiJSONClient", "parse_json_payload", "RETRYABLE_ERRORS"]
