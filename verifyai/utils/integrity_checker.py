"""
Reconstruction check: the segments of a result must partition the analyzed text
with no gaps, overlaps or rewrites. Scoring and reconciliation both rely on it.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from verifyai.config import STRICT_RECONSTRUCTION
from verifyai.exceptions import IntegrityError
from verifyai.schemas.analysis_schemas import AnalysisResult

logger = logging.getLogger("integrity_checker")


@dataclass(frozen=True)
class IntegrityReport:
    ok: bool
    expected_length: int
    actual_length: int
    first_mismatch: Optional[int] = None

    def describe(self) -> str:
        if self.ok:
            return f"segments reconstruct all {self.expected_length} characters"
        return (
            f"segments diverge from input at offset {self.first_mismatch} "
            f"(expected {self.expected_length} chars, got {self.actual_length})"
        )


def _first_difference(a: str, b: str) -> Optional[int]:
    for idx, (x, y) in enumerate(zip(a, b)):
        if x != y:
            return idx
    if len(a) != len(b):
        return min(len(a), len(b))
    return None


def check_reconstruction(result: AnalysisResult, original: str) -> IntegrityReport:
    rebuilt = result.document_text()
    mismatch = _first_difference(original, rebuilt)
    return IntegrityReport(
        ok=mismatch is None,
        expected_length=len(original),
        actual_length=len(rebuilt),
        first_mismatch=mismatch,
    )


def enforce_reconstruction(result: AnalysisResult, original: str, strict: bool = STRICT_RECONSTRUCTION) -> IntegrityReport:
    """Raise IntegrityError on mismatch in strict mode, otherwise warn and return the report."""
    report = check_reconstruction(result, original)
    if report.ok:
        logger.info(f"✅ Integrity check passed: {report.describe()}")
        return report

    if strict:
        logger.error(f"❌ Integrity check failed: {report.describe()}")
        raise IntegrityError(f"Analysis result does not reproduce the input: {report.describe()}")

    logger.warning(f"⚠️  Integrity check failed, result kept as suspect: {report.describe()}")
    return report
