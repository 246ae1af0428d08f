"""
Turns the raw text returned by the AI service into a structurally valid AnalysisResult.

The service is asked for bare JSON but in practice may wrap it in markdown fences,
prefix it with chatter ("Sure! Here is..."), or get cut off mid-object. Parsing
goes: strip fences -> direct json.loads -> first balanced top-level {...} object.
Nothing is retried here; failures propagate as EmptyResponse / MalformedResponse.
"""
import json
import logging
import re
from typing import Iterator, Optional

from pydantic import ValidationError

from verifyai.exceptions import EmptyResponse, MalformedResponse
from verifyai.schemas.analysis_schemas import AnalysisResult

logger = logging.getLogger("response_validator")

_LEADING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\r?\n?")
_TRAILING_FENCE = re.compile(r"\r?\n?```\s*$")


def strip_fences(raw: str) -> str:
    text = raw.strip()
    text = _LEADING_FENCE.sub("", text, count=1)
    text = _TRAILING_FENCE.sub("", text, count=1)
    return text.strip()


def _closing_brace(text: str, start: int) -> Optional[int]:
    """Index of the brace closing the one at ``start``, or None if it never closes.

    Braces inside JSON string literals (and escaped quotes) are ignored.
    """
    depth = 0
    in_string = False
    escaped = False

    for idx in range(start, len(text)):
        ch = text[idx]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return idx
    return None


def iter_balanced_objects(text: str) -> Iterator[str]:
    """Yield each balanced top-level {...} substring, left to right.

    A brace that never closes (say one quoted in leading prose) is skipped and the
    scan resumes just after it.
    """
    pos = 0
    while True:
        start = text.find("{", pos)
        if start < 0:
            return
        end = _closing_brace(text, start)
        if end is None:
            pos = start + 1
            continue
        yield text[start:end + 1]
        pos = end + 1


def extract_json_object(raw: str) -> Optional[dict]:
    text = strip_fences(raw)

    try:
        parsed = json.loads(text)
        if isinstance(parsed, dict):
            return parsed
    except ValueError:
        pass

    for candidate in iter_balanced_objects(text):
        try:
            parsed = json.loads(candidate)
        except ValueError:
            continue
        if isinstance(parsed, dict):
            logger.info(f"Recovered JSON object ({len(candidate)} chars) from surrounding text")
            return parsed

    return None


def _prune_subtopics(result: AnalysisResult) -> AnalysisResult:
    count = len(result.segments)
    kept = [t for t in result.subtopics if 0 <= t.segmentIndex < count]
    if len(kept) != len(result.subtopics):
        logger.warning(
            f"Dropped {len(result.subtopics) - len(kept)} subtopic(s) pointing outside {count} segments"
        )
        result.subtopics = kept
    return result


def parse_analysis_response(raw: Optional[str]) -> AnalysisResult:
    if raw is None or not raw.strip():
        raise EmptyResponse("The AI service returned an empty response.")

    payload = extract_json_object(raw)
    if payload is None:
        logger.error(f"❌ No JSON object found in response ({len(raw)} chars)")
        raise MalformedResponse("Format Error: the AI response was interrupted or not JSON.")

    try:
        result = AnalysisResult.model_validate(payload)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        logger.error(f"❌ Response failed schema validation on: {', '.join(fields)}")
        raise MalformedResponse(f"Response is missing or has invalid fields: {', '.join(fields)}") from e

    return _prune_subtopics(result)
