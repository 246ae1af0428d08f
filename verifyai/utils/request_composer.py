"""
Builds the outbound analysis request for the grounded AI service.

The document is capped at MAX_INPUT_CHARS characters (first N kept). Truncation is
logged and flagged on the request so the session can surface it to the user.
"""
import logging

from verifyai.config import GROUNDING_ENABLED, MAX_INPUT_CHARS
from verifyai.schemas.analysis_schemas import AnalysisRequest

logger = logging.getLogger("request_composer")

SYSTEM_INSTRUCTIONS = """
You are a high-speed academic integrity engine.
Task: Analyze the text for plagiarism (using Google Search), grammar, and quality.

Output Requirements:
- MUST return ONLY a JSON object.
- 'segments' must reconstruct the original text exactly: concatenating every
  segment's "text" in order must give back the input character for character,
  including whitespace and punctuation. Do not skip, repeat or overlap text.
- Provide 2-3 high-quality rewrite suggestions for flagged parts.
- Give a web source URL for plagiarism segments whenever one is known.
- All scores are integers from 0 to 100.

JSON Schema:
{
  "plagiarismPercentage": number,
  "grammarScore": number,
  "aiLikelihood": number,
  "writingTone": "string",
  "overallSummary": "string",
  "subtopics": [{ "title": "string", "segmentIndex": number }],
  "segments": [{
    "text": "original text",
    "type": "original" | "plagiarism" | "grammar",
    "suggestions": ["string"],
    "sourceUrl": "URL",
    "explanation": "why flagged",
    "citation": "formatted citation for the source"
  }],
  "citations": ["string"]
}
"""


def truncate_document(text: str, limit: int = MAX_INPUT_CHARS) -> str:
    return text[:limit]


def compose_request(text: str, grounding: bool = GROUNDING_ENABLED) -> AnalysisRequest:
    document = truncate_document(text)
    truncated = len(document) < len(text)
    if truncated:
        logger.warning(
            f"⚠️  Input truncated from {len(text)} to {MAX_INPUT_CHARS} characters before analysis"
        )

    return AnalysisRequest(
        documentText=document,
        instructions=SYSTEM_INSTRUCTIONS,
        groundingEnabled=grounding,
        truncated=truncated,
        originalLength=len(text),
    )


def render_contents(request: AnalysisRequest) -> str:
    """User turn sent alongside the system instructions."""
    return f'Analyze: "{request.documentText}"'
