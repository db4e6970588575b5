"""Request classifier collaborators.

The stylist core consumes a :class:`RequestClassification` and never does
language understanding itself. ``GeminiRequestClassifier`` asks a Gemini model
for the structured classification; ``StaticRequestClassifier`` returns canned
results for tests, evaluation runs and offline demos.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
import json
import logging
import random
import re
import time
from typing import Any, Callable, Dict, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions
from pydantic import ValidationError

from logic.validation import parse_classification
from models.decision import ExtractedEntities, RequestClassification
from stylist_app.config import DEFAULT_BASE_DELAY, DEFAULT_CLASSIFIER_MODEL, DEFAULT_MAX_RETRIES
from stylist_app.logging_config import get_logger, log_event

LOGGER = get_logger(__name__)

RETRYABLE_ERRORS = (google_exceptions.ResourceExhausted, google_exceptions.ServerError)
_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$")

CLASSIFIER_PROMPT = """You are an AI fashion stylist. Classify the user's request into one of the
following types and extract the garments it mentions.

Request Types:
- type_a_complete_outfit: several items in one request ("a white t-shirt and blue jeans")
- type_b_single_item: one specific garment ("a leather jacket")
- type_c_attribute_modification: change color, pattern or style of a worn item ("make the jeans black")
- type_d_style_mood: overall aesthetic without items ("make it more formal")
- type_e_layering: add without removing ("add", "layer", "put on", "over", "with", "on top")
- type_f_removal: remove without replacement ("remove", "take off", "without")

Garment categories: top, bottom, one_piece, outerwear, footwear, accessories.

Output format (JSON):
{{
  "type": "type_b_single_item",
  "confidence": 0.85,
  "extractedEntities": {{
    "garments": [{{"name": "white t-shirt", "category": "top", "brand": "", "color": "white", "style": []}}],
    "colors": ["white"],
    "brands": [],
    "styleDescriptors": [],
    "categories": ["top"],
    "attributes": {{}}
  }},
  "intent": "User wants a white t-shirt",
  "layeringKeywords": [],
  "removalKeywords": [],
  "needsClarification": false,
  "clarificationReason": ""
}}

User Message: "{message}"

Return ONLY valid JSON. No prose."""


def default_classification(confidence: float, intent: str, reason: str) -> RequestClassification:
    """Single-item classification that asks the user to clarify."""

    return RequestClassification(
        type="type_b_single_item",
        confidence=confidence,
        intent=intent,
        extracted_entities=ExtractedEntities(),
        needs_clarification=True,
        clarification_reason=reason,
    )


def parse_model_output(text: str) -> Optional[RequestClassification]:
    """Parse the model's JSON reply; ``None`` when it is not a valid classification."""

    cleaned = _CODE_FENCE.sub("", (text or "").strip())
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    try:
        return parse_classification(payload)
    except ValidationError:
        return None


class RequestClassifier(ABC):
    """Interface for request classification collaborators."""

    @abstractmethod
    def classify(self, message: str) -> RequestClassification:
        """Return the structured classification for ``message``."""


class StaticRequestClassifier(RequestClassifier):
    """Looks classifications up by exact message, with an optional fallback."""

    def __init__(
        self,
        responses: Dict[str, RequestClassification] | None = None,
        fallback: RequestClassification | None = None,
    ) -> None:
        self.responses = dict(responses or {})
        self.fallback = fallback

    def classify(self, message: str) -> RequestClassification:
        if message in self.responses:
            return self.responses[message]
        if self.fallback is not None:
            return self.fallback
        return default_classification(0.5, "Could not determine specific intent.", "No canned classification.")


class GeminiRequestClassifier(RequestClassifier):
    """Classifies requests with a Gemini model, retrying rate limits and 5xx errors.

    Retries back off exponentially from ``base_delay`` seconds with up to one
    second of jitter. ``model`` and ``sleep`` can be injected for tests.
    """

    def __init__(
        self,
        model_name: str = DEFAULT_CLASSIFIER_MODEL,
        api_key: Optional[str] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY,
        model: Any = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.model_name = model_name
        self.api_key = api_key
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.sleep = sleep
        self.rng = rng or random.Random()
        self._model = model

    @property
    def model(self) -> Any:
        if self._model is None:
            if self.api_key:
                genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
        return self._model

    def _backoff(self, attempt: int) -> float:
        return self.base_delay * (2**attempt) + self.rng.random()

    def _generate(self, prompt: str) -> str:
        attempt = 0
        while True:
            try:
                response = self.model.generate_content(prompt)
                return getattr(response, "text", "") or ""
            except RETRYABLE_ERRORS as exc:
                if attempt >= self.max_retries:
                    raise
                delay = self._backoff(attempt)
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "classifier_retry",
                    attempt=attempt + 1,
                    max_retries=self.max_retries,
                    delay_s=round(delay, 3),
                    error=type(exc).__name__,
                )
                self.sleep(delay)
                attempt += 1

    def classify(self, message: str) -> RequestClassification:
        prompt = CLASSIFIER_PROMPT.format(message=message.replace('"', "'"))
        try:
            text = self._generate(prompt)
        except google_exceptions.GoogleAPICallError as exc:
            log_event(LOGGER, logging.ERROR, "classifier_failed", error=type(exc).__name__, exc_info=True)
            return default_classification(
                0.0, "Error during classification.", "An error occurred during request classification."
            )

        classification = parse_model_output(text)
        if classification is None:
            log_event(LOGGER, logging.WARNING, "classifier_unparseable", preview=text[:200])
            return default_classification(
                0.5, "Could not determine specific intent.", "Could not parse request classification."
            )
        log_event(
            LOGGER,
            logging.INFO,
            "classifier_completed",
            request_type=classification.type,
            confidence=classification.confidence,
        )
        return classification


__all__ = [
    "CLASSIFIER_PROMPT",
    "GeminiRequestClassifier",
    "RequestClassifier",
    "StaticRequestClassifier",
    "default_classification",
    "parse_model_output",
]
