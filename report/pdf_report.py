import io
import logging
from html import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from schemas import ReportData
from .html_report import MISSING_DATA

logger = logging.getLogger(__name__)

NAVY = colors.HexColor("#002B5C")
GOLD = colors.HexColor("#FFC20E")

TABLE_STYLE = TableStyle([
    ("BACKGROUND", (0, 0), (-1, 0), NAVY),
    ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
    ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
    ("FONTSIZE", (0, 0), (-1, -1), 8),
    ("GRID", (0, 0), (-1, -1), 0.5, colors.lightgrey),
    ("VALIGN", (0, 0), (-1, -1), "TOP"),
])


def _p(text, style, escaped=False):
    text = str(text or "")
    return Paragraph(text if escaped else escape(text), style)


def render_pdf(report: ReportData) -> bytes:
    """A4 export of the report tables. The radar chart is HTML-only."""
    styles = getSampleStyleSheet()
    body, h1, h2 = styles["BodyText"], styles["Title"], styles["Heading2"]
    story = []

    title = f"{report.role_title} Assessment" if report.role_title else "Candidate Assessment Report"
    story.append(_p(title, h1))
    story.append(_p(f"Ref: {report.reference} - Generated on {report.generated_at:%Y-%m-%d}", body))
    if report.client_name:
        story.append(_p(f"Client: {report.client_name}", body))
    story.append(Spacer(1, 0.5 * cm))

    if report.executive_summary:
        story.append(_p("Executive Summary", h2))
        story.append(_p(report.executive_summary, body))

    if report.kec_items:
        story.append(_p("Key Evaluation Criteria", h2))
        rows = [["Criterion", "Minimum", "Weight", "Description"]]
        for item in report.kec_items:
            rows.append([
                _p(item.name, body),
                f"{item.requirement_level:g}%",
                f"{item.weight:g}%" if item.weight else "-",
                _p(item.description, body),
            ])
        table = Table(rows, colWidths=[4 * cm, 2 * cm, 2 * cm, 9 * cm], repeatRows=1)
        table.setStyle(TABLE_STYLE)
        story.append(table)

    if report.candidates:
        story.append(_p("Calibration Profiles", h2))
        for c in report.candidates:
            story.append(_p(c.name, styles["Heading3"]))
            for key, value in c.fields.items():
                if value not in (None, ""):
                    story.append(_p(f"{key}: {value}", body))
            if c.overall_assessment:
                story.append(_p(c.overall_assessment, body))

    comparison = report.comparison
    if comparison.matrix:
        story.append(_p("Weighted Scoring Matrix", h2))
        names = [t.candidate_name for t in comparison.totals]
        rows = [["Competency", "Weight"] + names]
        highlights = []
        for r, row in enumerate(comparison.matrix, start=1):
            line = [_p(row.parameter_name, body), f"{row.weight:g}%"]
            for c, cell in enumerate(row.cells, start=2):
                if not cell.has_data:
                    line.append(MISSING_DATA)
                    continue
                line.append(f"{cell.raw_score:.1f} ({cell.weighted_contribution:.2f})")
                if cell.rank.value == "top":
                    highlights.append((c, r))
            rows.append(line)
        total_row = ["Weighted Total", "100%"]
        for c, t in enumerate(comparison.totals, start=2):
            total_row.append(f"{t.display_total:.2f}" + (" (1st)" if t.is_winner else ""))
            if t.is_winner:
                highlights.append((c, len(rows)))
        rows.append(total_row)

        table = Table(rows, repeatRows=1)
        style = TableStyle(TABLE_STYLE.getCommands())
        for col, row in highlights:
            style.add("BACKGROUND", (col, row), (col, row), GOLD)
        table.setStyle(style)
        story.append(table)

    if comparison.gaps and comparison.totals:
        story.append(_p("Gap Analysis vs. Ideal Profile", h2))
        rows = [["Competency", "Ideal"] + [t.candidate_name for t in comparison.totals]]
        for item, gap_row in zip(report.kec_items, comparison.gaps):
            line = [_p(item.name, body), f"{item.requirement_level:g}%"]
            for cell in gap_row:
                if not cell.has_data:
                    line.append(MISSING_DATA)
                else:
                    sign = "+" if cell.difference > 0 else ""
                    line.append(f"{cell.score:g}% ({sign}{cell.difference:g}, {cell.level.value})")
            rows.append(line)
        table = Table(rows, repeatRows=1)
        table.setStyle(TABLE_STYLE)
        story.append(table)

    if report.strengths_table and report.candidates:
        story.append(_p("Strengths & Limitations", h2))
        rows = [["Factor"] + [c.name for c in report.candidates]]
        for row in report.strengths_table:
            line = [_p(row.parameter_name, body)]
            for cell in row.cells:
                if not cell.has_data:
                    line.append(MISSING_DATA)
                    continue
                items = [f"+ {s}" for s in cell.strengths] + [f"- {s}" for s in cell.limitations]
                line.append(_p("<br/>".join(escape(i) for i in items), body, escaped=True))
            rows.append(line)
        table = Table(rows, repeatRows=1)
        table.setStyle(TABLE_STYLE)
        story.append(table)

    ki = report.key_insights
    insights = [(label, i) for label, i in (("Top Performer", ki.top_performer),
                                            ("Technical Edge", ki.technical_edge),
                                            ("Fastest Onboarding", ki.fastest_onboarding)) if i is not None]
    if insights:
        story.append(_p("Key Insights", h2))
        rows = [["Insight", "Candidate", "Why"]]
        for label, item in insights:
            rows.append([_p(item.title or label, body), _p(item.candidate, body), _p(item.description, body)])
        table = Table(rows, colWidths=[4 * cm, 4 * cm, 9 * cm], repeatRows=1)
        table.setStyle(TABLE_STYLE)
        story.append(table)

    for probe in report.probes:
        story.append(_p(f"Areas to Probe: {probe.candidate_name}", h2))
        for s in probe.strengths or ["Strong overall performance across multiple areas"]:
            story.append(_p(f"+ {s}", body))
        if probe.focus_areas:
            for f in probe.focus_areas:
                story.append(_p(f"? {f.area}: {f.question}", body))
        else:
            story.append(_p("No significant areas of concern identified", body))

    if report.decision_factors:
        story.append(_p("Decision Factors", h2))
        for factor in report.decision_factors:
            story.append(_p(f"- {factor}", body))

    if report.next_steps:
        story.append(_p("Recommended Next Steps", h2))
        for step in report.next_steps:
            story.append(_p(f"- {step}", body))

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4,
        leftMargin=2 * cm, rightMargin=2 * cm, topMargin=2 * cm, bottomMargin=2 * cm,
        title=title,
    )
    doc.build(story)
    logger.info(f"Rendered PDF for report {report.reference}")
    return buffer.getvalue()
