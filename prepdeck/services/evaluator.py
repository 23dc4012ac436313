"""AI review of candidate submissions through Gemini.

Two flavours: a free-text review of code or a system-design drawing, and a
scored evaluation of a mock-interview submission whose JSON reply is checked
against ``EvaluationResult`` before anyone sees it.
"""

import asyncio
import json
import logging
from typing import Any, Optional

from google import genai
from pydantic import ValidationError

from prepdeck.config import GEMINI_API_KEY, GEMINI_MODEL
from prepdeck.errors import BadRequest, InternalError
from prepdeck.schemas.evaluation import EvaluationResult
from prepdeck.services.problem_generator import call_gemini_with_retry, extract_first_json_object

logger = logging.getLogger(__name__)

# What the reviewer looks at for each problem kind
FOCUS_BY_KIND = {
    "dsa": "correctness, time and space complexity, edge cases and code quality",
    "machine_coding": "working functionality, component structure, state handling and code organisation",
    "system_design": "architecture, scalability, component relationships, trade-offs and completeness",
    "theory": "accuracy, depth of understanding and clarity of each answer",
}


def _image_part(image: str) -> dict:
    # Accept data URLs from canvas exports as well as bare base64
    if image.startswith("data:") and "," in image:
        image = image.split(",", 1)[1]
    return {"inline_data": {"mime_type": "image/png", "data": image}}


def _kind_of(problem: dict) -> str:
    kind = problem.get("kind") or problem.get("type") or "dsa"
    # Older clients call theory rounds theory_and_debugging
    return "theory" if kind == "theory_and_debugging" else kind


def _statement_of(problem: dict) -> str:
    content = problem.get("content") if isinstance(problem.get("content"), dict) else {}
    return (
        content.get("prompt")
        or problem.get("problemStatement")
        or problem.get("description")
        or ""
    )


class SubmissionEvaluator:
    def __init__(self, api_key: str = GEMINI_API_KEY, model: str = GEMINI_MODEL, client=None):
        self.model = model
        if client is None and api_key:
            client = genai.Client(api_key=api_key)
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client is not None

    def _require_client(self):
        if not self.configured:
            raise InternalError("Submission evaluation is not configured (GEMINI_API_KEY missing)")
        return self._client

    def review(self, designation: str, code: Optional[str] = None, drawing_image: Optional[str] = None) -> str:
        """Free-text review of code, a design drawing, or both."""
        if not code and not drawing_image:
            raise BadRequest("Either code or a drawing is required for evaluation")
        client = self._require_client()

        if drawing_image and not code:
            subject = (
                "a system design diagram (attached as an image). Evaluate the architectural decisions, "
                "scalability considerations, component relationships and design completeness"
            )
        elif code and not drawing_image:
            subject = f"the following code:\n\n{code}"
        else:
            subject = f"the following code together with the attached design diagram:\n\n{code}"

        prompt = (
            f"You are a senior interviewer hiring for the role of {designation}.\n"
            f"Review {subject}\n\n"
            "Give concise, constructive feedback: what works, what is missing and how to improve it."
        )
        contents = [{"text": prompt}, _image_part(drawing_image)] if drawing_image else prompt

        response = call_gemini_with_retry(client, self.model, contents)
        feedback = (response.text or "").strip()
        if not feedback:
            raise InternalError("AI response did not contain any feedback")
        return feedback

    def build_prompt(self, problem: dict, submission: dict) -> str:
        kind = _kind_of(problem)
        answer = {k: v for k, v in submission.items() if k != "drawingImage"}
        return (
            f"You are an expert technical interviewer evaluating a {kind} interview submission.\n"
            f"Focus on {FOCUS_BY_KIND.get(kind, FOCUS_BY_KIND['dsa'])}.\n\n"
            f"Problem: {problem.get('title', '')}\n"
            f"{_statement_of(problem)}\n\n"
            f"Submission:\n{json.dumps(answer, indent=2, default=str)}\n\n"
            "Respond with a single JSON object (no markdown) with keys: problemId, score (0-100), "
            "feedback, strengths (list), areasForImprovement (list), suggestions (list)."
        )

    def evaluate(self, problem: dict, submission: dict) -> EvaluationResult:
        """Score a mock-interview submission."""
        client = self._require_client()

        prompt = self.build_prompt(problem, submission)
        drawing = submission.get("drawingImage")
        if _kind_of(problem) == "system_design" and isinstance(drawing, str) and drawing:
            contents: Any = [{"text": prompt}, _image_part(drawing)]
        else:
            contents = prompt

        response = call_gemini_with_retry(client, self.model, contents)
        try:
            payload = extract_first_json_object(response.text or "")
            if problem.get("id") and not payload.get("problemId"):
                payload["problemId"] = problem["id"]
            return EvaluationResult.model_validate(payload)
        except (ValueError, ValidationError) as e:
            logger.warning("Gemini returned no usable evaluation: %s", str(e)[:200])
            raise InternalError("AI response did not contain a valid evaluation") from e

    async def review_async(self, designation: str, code: Optional[str] = None,
                           drawing_image: Optional[str] = None) -> str:
        return await asyncio.to_thread(self.review, designation, code, drawing_image)

    async def evaluate_async(self, problem: dict, submission: dict) -> EvaluationResult:
        """Async wrapper for ``evaluate`` to avoid blocking the event loop."""
        return await asyncio.to_thread(self.evaluate, problem, submission)
