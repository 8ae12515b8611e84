"""Meal classification for digestive irritants."""

import base64
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Protocol

from pydantic import ValidationError

from gastro_log.domain.analysis import (
    AnalysisMessage,
    AnalysisResult,
    IngredientExtract,
    MessageType,
)

logger = logging.getLogger(__name__)

INGREDIENT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "ingredients": {"type": "array", "items": {"type": "string"}},
    },
    "required": ["ingredients"],
    "additionalProperties": False,
}

CLASSIFICATION_PROMPT = (
    "You are an expert in the low-FODMAP diet. "
    "From the meal photo and/or memo, list the high-FODMAP or otherwise "
    "irritating ingredients. "
    'Answer only with JSON of the form {"ingredients": ["name", ...]}. '
    'Return {"ingredients": []} when nothing needs attention. '
    "Write ingredient names in Japanese and be specific, for example: "
    "高FODMAP, グルテン, 乳糖, フルクトース, ガーリック, オニオン, カフェイン."
)

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


class IngredientClassifier(Protocol):
    """Interface for the AI service that flags ingredients."""

    async def classify(
        self, *, image: str | None, memo: str | None, model: str | None
    ) -> list[str]:
        """Return flagged ingredient names for a meal."""


@dataclass
class ClassificationService:
    """Validates input, calls the classifier and phrases the outcome."""

    classifier: IngredientClassifier
    model: str | None = None
    _analyzing: bool = field(default=False, init=False)

    @property
    def is_analyzing(self) -> bool:
        """True while a classification call is outstanding."""
        return self._analyzing

    async def analyze(self, image: str | None, memo: str | None) -> AnalysisResult:
        """Classify a meal; failures come back as an error message."""
        memo = (memo or "").strip() or None
        if not image and not memo:
            return _failure("Add a photo or a memo before analyzing.")
        if self._analyzing:
            return AnalysisResult(success=False, ingredients=[])

        self._analyzing = True
        try:
            ingredients = await self.classifier.classify(
                image=image, memo=memo, model=self.model
            )
        except Exception as exc:
            logger.exception("Meal classification failed")
            return _failure(f"Analysis failed: {str(exc) or type(exc).__name__}")
        finally:
            self._analyzing = False

        if ingredients:
            message = AnalysisMessage(
                MessageType.WARNING, "Ingredients to watch were detected."
            )
        else:
            message = AnalysisMessage(
                MessageType.SUCCESS, "Nothing to watch was detected. Logged."
            )
        return AnalysisResult(success=True, ingredients=ingredients, message=message)


def build_memo_text(memo: str) -> str:
    """Format the meal memo as a prompt part."""
    return f"Meal memo: {memo}"


def parse_ingredients(text: str) -> list[str]:
    """Extract the ingredient list from a model reply.

    The first JSON object in the text is used; anything unparsable yields an
    empty list.
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        return []
    try:
        extract = IngredientExtract.model_validate(json.loads(match.group(0)))
    except (json.JSONDecodeError, ValidationError):
        logger.warning("Classifier reply was not valid ingredient JSON")
        return []
    return [name.strip() for name in extract.ingredients if name.strip()]


def to_data_url(image: str | bytes) -> str:
    """Return the image as a base64 data URL."""
    if isinstance(image, str):
        if image.startswith("data:"):
            return image
        return f"data:image/jpeg;base64,{image}"
    mime_type = _detect_mime_type(image)
    encoded = base64.b64encode(image).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"


def _failure(text: str) -> AnalysisResult:
    return AnalysisResult(
        success=False,
        ingredients=[],
        message=AnalysisMessage(MessageType.ERROR, text),
    )
