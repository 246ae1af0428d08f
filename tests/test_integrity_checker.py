import pytest

from conftest import SKY_TEXT, make_payload
from verifyai.exceptions import IntegrityError
from verifyai.schemas.analysis_schemas import AnalysisResult
from verifyai.utils.integrity_checker import check_reconstruction, enforce_reconstruction


def _result(*texts):
    return AnalysisResult.model_validate(make_payload(
        segments=[{"text": t, "type": "original"} for t in texts]
    ))


class TestCheckReconstruction:
    def test_exact_partition_passes(self, sky_result):
        report = check_reconstruction(sky_result, SKY_TEXT)
        assert report.ok
        assert report.expected_length == report.actual_length == 30
        assert report.first_mismatch is None

    def test_gap_detected(self):
        report = check_reconstruction(_result("The sky is blue.", "Water is wet."), SKY_TEXT)
        assert not report.ok
        assert report.first_mismatch == 16

    def test_overlap_detected(self):
        report = check_reconstruction(_result("The sky is blue. ", "blue. Water is wet."), SKY_TEXT)
        assert not report.ok
        assert report.actual_length > report.expected_length

    def test_missing_tail_detected(self):
        report = check_reconstruction(_result("The sky is blue. "), SKY_TEXT)
        assert not report.ok
        assert report.first_mismatch == 17

    def test_whitespace_is_significant(self):
        report = check_reconstruction(_result("The sky is blue.  ", "Water is wet."), SKY_TEXT)
        assert not report.ok


class TestEnforceReconstruction:
    def test_strict_mismatch_raises(self):
        with pytest.raises(IntegrityError):
            enforce_reconstruction(_result("Something else entirely."), SKY_TEXT, strict=True)

    def test_lenient_mismatch_returns_report(self):
        report = enforce_reconstruction(_result("Something else entirely."), SKY_TEXT, strict=False)
        assert not report.ok
        assert "offset 0" in report.describe()

    def test_match_passes_in_strict_mode(self, sky_result):
        assert enforce_reconstruction(sky_result, SKY_TEXT, strict=True).ok
