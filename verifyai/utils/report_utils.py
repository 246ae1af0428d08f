import io
import logging
from datetime import datetime
from typing import List, Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from verifyai.schemas.analysis_schemas import AnalysisResult, SegmentKind

logger = logging.getLogger("report_utils")

_HIGHLIGHT = {
    SegmentKind.PLAGIARISM: "#fde2e7",
    SegmentKind.GRAMMAR: "#fef3c7",
}


def _marked_up_text(result: AnalysisResult) -> str:
    parts = []
    for seg in result.segments:
        text = escape(seg.text).replace("\n", "<br/>")
        color = _HIGHLIGHT.get(seg.kind)
        parts.append(f'<font backColor="{color}">{text}</font>' if color else text)
    return "".join(parts)


def flagged_passage_lines(result: AnalysisResult) -> List[str]:
    lines = []
    for seg in result.segments:
        if not seg.is_flagged:
            continue
        line = f"<b>{seg.kind.value.title()}:</b> <i>{escape(seg.text)}</i>"
        if seg.explanation:
            line += f" ({escape(seg.explanation)})"
        if seg.sourceUrl:
            line += f"<br/>Source: {escape(seg.sourceUrl)}"
        if seg.citation:
            line += f"<br/>Citation: {escape(seg.citation)}"
        lines.append(line)
    return lines


def build_integrity_report(result: AnalysisResult, generated_at: Optional[datetime] = None) -> bytes:
    """Render the analysis (scores, highlighted text, flagged passages, citations) as PDF bytes."""
    generated_at = generated_at or datetime.utcnow()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=letter, title="VerifyAI Integrity Report")
    styles = getSampleStyleSheet()
    story = []

    story.append(Paragraph("<b>VerifyAI Integrity Report</b>", styles["Title"]))
    story.append(Paragraph(f"Date: {generated_at.strftime('%Y-%m-%d')}", styles["Normal"]))
    story.append(Spacer(1, 0.15 * inch))

    data = [
        ["Metric", "Value"],
        ["Originality", f"{100 - result.plagiarismPercentage}%"],
        ["Similarity", f"{result.plagiarismPercentage}%"],
        ["Grammar", f"{result.grammarScore}%"],
    ]
    if result.aiLikelihood is not None:
        data.append(["AI Likelihood", f"{result.aiLikelihood}%"])
    if result.writingTone:
        data.append(["Style", result.writingTone])

    table = Table(data, colWidths=[2.5 * inch, 3.5 * inch])
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.grey),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("ALIGN", (0, 0), (-1, -1), "CENTER"),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.black),
    ]))
    story.append(table)
    story.append(Spacer(1, 0.2 * inch))

    if result.overallSummary:
        story.append(Paragraph("<b>Summary</b>", styles["Heading3"]))
        story.append(Paragraph(escape(result.overallSummary).replace("\n", "<br/>"), styles["Normal"]))
        story.append(Spacer(1, 0.15 * inch))

    story.append(Paragraph("<b>Document</b>", styles["Heading3"]))
    story.append(Paragraph(_marked_up_text(result), styles["BodyText"]))

    flagged = [s for s in result.segments if s.is_flagged]
    if flagged:
        story.append(Spacer(1, 0.15 * inch))
        story.append(Paragraph("<b>Flagged Passages</b>", styles["Heading3"]))
        for line in flagged_passage_lines(result):
            story.append(Paragraph(line, styles["Normal"]))

    if result.citations:
        story.append(Spacer(1, 0.15 * inch))
        story.append(Paragraph("<b>Recommended Citations</b>", styles["Heading3"]))
        for cite in result.citations:
            story.append(Paragraph(escape(cite), styles["Normal"]))

    doc.build(story)
    pdf = buffer.getvalue()
    logger.info(f"🧾 Built integrity report ({len(pdf)} bytes, {len(flagged)} flagged passages)")
    return pdf
