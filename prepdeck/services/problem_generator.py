"""AI problem generation through Gemini.

The generator only returns the model's JSON object. Callers stamp the
server-owned fields (id, owner, source, visibility, timestamps) and run the
result through ``validate_problem`` before it is stored.
"""

import asyncio
import json
import logging
import time
from typing import Optional

from google import genai

from prepdeck.config import GEMINI_API_KEY, GEMINI_MODEL
from prepdeck.errors import InternalError

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "Server is currently busy due to high demand. Please try again in a few moments."
TIMEOUT_MESSAGE = "Request timed out. The server is experiencing high load. Please try again in a few moments."


def extract_first_json_object(text: str) -> dict:
    """Extract the first JSON object from a model response."""
    if not isinstance(text, str):
        raise ValueError("Model response was not text")
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end < 0 or end <= start:
        raise ValueError("No JSON object found in model response")
    return json.loads(text[start : end + 1])


def _classify(e: Exception) -> tuple[bool, bool]:
    """Return (retryable, rate_limited) for a Gemini error."""
    error_str = str(e).lower()
    rate_limited = (
        "429" in error_str or "resource exhausted" in error_str
        or "quota" in error_str or "rate limit" in error_str
    )
    retryable = rate_limited or "503" in error_str or "unavailable" in error_str or "overloaded" in error_str

    status_code = getattr(e, "status_code", None) or getattr(e, "code", None)
    if status_code in (429, 503):
        retryable = True
        rate_limited = status_code == 429
    return retryable, rate_limited


def call_gemini_with_retry(client, model, contents, max_retries=3, initial_delay=1, timeout=60, sleep=time.sleep):
    """
    Call Gemini with retry on 429/503 and an overall timeout.

    Rate-limit errors back off twice as long as unavailability errors; the
    delay doubles per attempt and is capped at 10 seconds.
    """
    start_time = time.monotonic()

    for attempt in range(max_retries + 1):
        if time.monotonic() - start_time > timeout:
            raise InternalError(TIMEOUT_MESSAGE)

        try:
            return client.models.generate_content(model=model, contents=contents)
        except Exception as e:
            retryable, rate_limited = _classify(e)
            if not retryable:
                raise
            if attempt >= max_retries:
                if rate_limited:
                    raise InternalError(BUSY_MESSAGE) from e
                raise InternalError("Service temporarily unavailable. Please try again in a few moments.") from e

            base_delay = initial_delay * 2 if rate_limited else initial_delay
            delay = min(base_delay * (2 ** attempt), 10)
            if time.monotonic() - start_time + delay > timeout:
                raise InternalError(TIMEOUT_MESSAGE) from e

            logger.warning(
                "Gemini call failed, retrying in %ss (attempt %d/%d): %s",
                delay, attempt + 1, max_retries, str(e)[:100],
            )
            sleep(delay)


class ProblemGenerator:
    def __init__(self, api_key: str = GEMINI_API_KEY, model: str = GEMINI_MODEL, client=None):
        self.model = model
        if client is None and api_key:
            client = genai.Client(api_key=api_key)
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None

    def build_prompt(
        self,
        kind: str,
        role: Optional[str] = None,
        company: Optional[str] = None,
        difficulty: Optional[str] = None,
        context: Optional[str] = None,
    ) -> str:
        return (
            f"Generate one {kind} interview problem as a single JSON object (no markdown).\n"
            f"Top-level keys: kind, title, content. kind must be \"{kind}\".\n"
            "content must include prompt, difficulty, requirements, constraints, hints, tags"
            + (", inputFormat and outputFormat" if kind == "dsa" else "")
            + (", questions (each with type mcq|short|long and question)" if kind == "theory" else "")
            + ".\n"
            f"- content.difficulty={difficulty or 'medium'}\n"
            f"- Role: {role or ''}\n"
            f"- Company: {company or ''}\n"
            f"- Context: {context or ''}"
        )

    def generate(self, kind: str, **prompt_args) -> dict:
        """Return the raw problem map produced by the model."""
        if not self.configured:
            raise InternalError("Problem generation is not configured (GEMINI_API_KEY missing)")

        response = call_gemini_with_retry(
            self._client, self.model, self.build_prompt(kind, **prompt_args)
        )
        try:
            payload = extract_first_json_object(response.text or "")
        except ValueError as e:
            logger.warning("Gemini returned no usable JSON: %s", e)
            raise InternalError("AI response did not contain a problem") from e
        payload.setdefault("kind", kind)
        return payload

    async def generate_async(self, kind: str, **prompt_args) -> dict:
        """Async wrapper for ``generate`` to avoid blocking the event loop."""
        return await asyncio.to_thread(self.generate, kind, **prompt_args)
