import logging
from typing import List, Sequence, Union

from verifyai.schemas.analysis_schemas import AnalysisResult, GroundingReference, SegmentKind

logger = logging.getLogger("segment_reconciler")


def _uris(references: Sequence[Union[GroundingReference, str]]) -> List[str]:
    out = []
    for ref in references:
        uri = ref.uri if isinstance(ref, GroundingReference) else ref
        if uri:
            out.append(uri)
    return out


def reconcile_sources(result: AnalysisResult, references: Sequence[Union[GroundingReference, str]]) -> int:
    """
    Fill sourceUrl on plagiarism segments that have none, round-robin over the
    grounding references. Segments that already carry a source are left alone,
    so running this twice changes nothing the second time.

    Returns:
        int: number of segments that received a source
    """
    uris = _uris(references)
    if not uris:
        logger.info("No grounding references returned, leaving segments unattributed")
        return 0

    cursor = 0
    for seg in result.segments:
        if seg.kind != SegmentKind.PLAGIARISM or seg.sourceUrl:
            continue
        seg.sourceUrl = uris[cursor % len(uris)]
        cursor += 1

    if cursor > len(uris):
        logger.info(f"Reused {len(uris)} reference(s) cyclically across {cursor} segments")
    elif cursor:
        logger.info(f"Attributed {cursor} plagiarism segment(s) from grounding references")
    return cursor
