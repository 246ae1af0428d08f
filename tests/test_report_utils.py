from datetime import datetime

from conftest import make_payload
from verifyai.schemas.analysis_schemas import AnalysisResult
from verifyai.utils.report_utils import build_integrity_report, flagged_passage_lines


def test_report_is_pdf(sky_result):
    pdf = build_integrity_report(sky_result, generated_at=datetime(2024, 5, 1))
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_report_handles_markup_characters():
    result = AnalysisResult.model_validate(make_payload(
        aiLikelihood=12,
        writingTone="Academic & formal",
        overallSummary="Uses <b>tags</b> & ampersands\nacross lines",
        segments=[
            {"text": "a < b & c > d\n", "type": "grammar", "suggestions": ["a<b"]},
            {"text": "Quoted text", "type": "plagiarism", "sourceUrl": "https://x.test/?a=1&b=2"},
        ],
        citations=["Smith & Jones <2020>"],
    ))
    assert build_integrity_report(result).startswith(b"%PDF")


def test_report_without_flags_or_citations():
    result = AnalysisResult.model_validate(make_payload(
        overallSummary="",
        segments=[{"text": "Clean text.", "type": "original"}],
        citations=[],
    ))
    assert build_integrity_report(result).startswith(b"%PDF")


def test_flagged_passages_show_source_and_citation():
    result = AnalysisResult.model_validate(make_payload(segments=[
        {"text": "Clean text. ", "type": "original"},
        {
            "text": "Water is wet.",
            "type": "plagiarism",
            "sourceUrl": "https://x.test/a?b=1&c=2",
            "citation": "Smith & Jones (2020)",
        },
        {"text": " Bad grammer.", "type": "grammar"},
    ]))
    lines = flagged_passage_lines(result)
    assert len(lines) == 2
    assert "Source: https://x.test/a?b=1&amp;c=2" in lines[0]
    assert "Citation: Smith &amp; Jones (2020)" in lines[0]
    assert "Citation" not in lines[1]
