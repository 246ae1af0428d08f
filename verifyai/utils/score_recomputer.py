"""
Score maintenance for user-driven edits.

plagiarismPercentage is always character-weighted:

    round(100 * len(plagiarised text) / len(all text))

No edit here calls back to the AI service.
"""
import logging
from typing import Sequence

from verifyai.schemas.analysis_schemas import AnalysisResult, Segment, SegmentKind, clamp_percentage

logger = logging.getLogger("score_recomputer")


def plagiarism_percentage(segments: Sequence[Segment]) -> int:
    total = sum(len(s.text) for s in segments)
    if total == 0:
        return 0
    flagged = sum(len(s.text) for s in segments if s.kind == SegmentKind.PLAGIARISM)
    return clamp_percentage(100 * flagged / total)


def _resolve(segment: Segment, text: str) -> None:
    segment.text = text
    segment.kind = SegmentKind.ORIGINAL
    segment.suggestions = []
    segment.explanation = None
    segment.sourceUrl = None
    segment.citation = None


def apply_suggestion(result: AnalysisResult, segment_index: int, suggestion: str) -> Segment:
    """Replace one segment with accepted text and refresh plagiarismPercentage.

    grammarScore is left as reported; the segment list keeps its length and order.
    """
    if not 0 <= segment_index < len(result.segments):
        raise IndexError(f"segment index {segment_index} out of range")

    segment = result.segments[segment_index]
    _resolve(segment, suggestion)
    result.plagiarismPercentage = plagiarism_percentage(result.segments)
    logger.info(f"Applied suggestion to segment {segment_index}, plagiarism now {result.plagiarismPercentage}%")
    return segment


def apply_all_suggestions(result: AnalysisResult) -> int:
    changed = 0
    for seg in result.segments:
        if seg.kind == SegmentKind.ORIGINAL or not seg.suggestions:
            continue
        _resolve(seg, seg.suggestions[0])
        changed += 1

    # every resolvable flag is gone, so scores go to their ceiling rather than being recomputed
    result.plagiarismPercentage = 0
    result.grammarScore = 100
    logger.info(f"Applied first suggestion to {changed} segment(s)")
    return changed
