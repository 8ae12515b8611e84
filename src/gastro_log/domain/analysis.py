"""Models for meal classification results."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, Field


class IngredientExtract(BaseModel):
    """Structured output returned by the classifier."""

    ingredients: list[str] = Field(default_factory=list)


class MessageType(str, Enum):
    """Severity of a message shown after analysis."""

    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class AnalysisMessage:
    """User-facing message describing an analysis outcome."""

    type: MessageType
    text: str


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of classifying a meal."""

    success: bool
    ingredients: list[str]
    message: AnalysisMessage | None = None
