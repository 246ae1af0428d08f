import logging
import math
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger("analysis_schemas")


def clamp_percentage(value) -> int:
    """Coerce a score to an integer in [0, 100], rounding half up."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ValueError("score must be a number")
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise ValueError("score must be finite")
    return max(0, min(100, int(math.floor(number + 0.5))))


class SegmentKind(str, Enum):
    ORIGINAL = "original"
    PLAGIARISM = "plagiarism"
    GRAMMAR = "grammar"


class Segment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    kind: SegmentKind = Field(alias="type")
    suggestions: List[str] = Field(default_factory=list)
    sourceUrl: Optional[str] = None
    explanation: Optional[str] = None
    citation: Optional[str] = None

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("suggestions", mode="before")
    @classmethod
    def _drop_blank_suggestions(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            value = [value]
        if not isinstance(value, list):
            return value
        return [s for s in value if isinstance(s, str) and s.strip()]

    @field_validator("sourceUrl", "explanation", "citation", mode="before")
    @classmethod
    def _optional_text(cls, value):
        if value is not None and not isinstance(value, str):
            logger.warning(f"Ignoring non-text optional segment field: {value!r}")
            return None
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @property
    def is_flagged(self) -> bool:
        return self.kind != SegmentKind.ORIGINAL


class Subtopic(BaseModel):
    title: str
    segmentIndex: int


class AnalysisResult(BaseModel):
    plagiarismPercentage: int
    grammarScore: int
    aiLikelihood: Optional[int] = None
    writingTone: Optional[str] = None
    overallSummary: str = ""
    subtopics: List[Subtopic] = Field(default_factory=list)
    segments: List[Segment]
    citations: List[str]

    @field_validator("plagiarismPercentage", "grammarScore", mode="before")
    @classmethod
    def _score(cls, value):
        return clamp_percentage(value)

    @field_validator("aiLikelihood", mode="before")
    @classmethod
    def _optional_score(cls, value):
        if value is None:
            return None
        try:
            return clamp_percentage(value)
        except ValueError:
            logger.warning(f"Ignoring unusable aiLikelihood: {value!r}")
            return None

    @field_validator("writingTone", mode="before")
    @classmethod
    def _optional_tone(cls, value):
        if value is None:
            return None
        if not isinstance(value, str):
            logger.warning(f"Ignoring unusable writingTone: {value!r}")
            return None
        return value.strip() or None

    @field_validator("overallSummary", mode="before")
    @classmethod
    def _summary(cls, value):
        return "" if value is None else value

    @field_validator("subtopics", mode="before")
    @classmethod
    def _subtopics(cls, value):
        return [] if value is None else value

    @field_validator("citations", mode="before")
    @classmethod
    def _citations(cls, value):
        if isinstance(value, list):
            return [c for c in value if isinstance(c, str) and c.strip()]
        return value

    def document_text(self) -> str:
        return "".join(seg.text for seg in self.segments)


class GroundingReference(BaseModel):
    uri: str


# ---- Transport envelope ----

class AnalysisRequest(BaseModel):
    documentText: str
    instructions: str
    groundingEnabled: bool = True
    truncated: bool = False
    originalLength: int = 0


class ServiceResponse(BaseModel):
    rawText: str = ""
    groundingReferences: List[GroundingReference] = Field(default_factory=list)
