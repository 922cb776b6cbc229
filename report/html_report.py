"""
Self-contained HTML rendering of a stored assessment report.

Everything is inlined (CSS and the SVG radar chart) so the page can be
shared as a single file or printed to PDF from a browser.
"""
from html import escape
from typing import List

from schemas import ComparisonOut, ReportData

MISSING_DATA = "No data available"

RADAR_SIZE = 400
RADAR_RINGS = (150, 100, 50)

PALETTE = [
    {"fill": "rgba(0, 43, 92, 0.2)", "stroke": "rgba(0, 43, 92, 0.8)"},      # navy
    {"fill": "rgba(255, 194, 14, 0.2)", "stroke": "rgba(255, 194, 14, 0.8)"},  # gold
    {"fill": "rgba(91, 33, 182, 0.2)", "stroke": "rgba(91, 33, 182, 0.8)"},    # purple
]

STYLE = """
body { font-family: Helvetica, Arial, sans-serif; color: #282828; margin: 0; background: #f4f6f9; }
.page { max-width: 1000px; margin: 0 auto; padding: 32px; background: #fff; }
.report-header { border-bottom: 3px solid #002b5c; margin-bottom: 24px; }
.report-title { color: #002b5c; margin: 0 0 4px 0; }
.reference { color: #666; font-size: 13px; }
h2 { color: #002b5c; border-bottom: 1px solid #e0e0e0; padding-bottom: 6px; margin-top: 32px; }
table { border-collapse: collapse; width: 100%; margin: 12px 0; font-size: 14px; }
th, td { border: 1px solid #e0e0e0; padding: 8px; text-align: left; vertical-align: top; }
th { background: #002b5c; color: #fff; }
.weight-cell { text-align: center; color: #666; }
.score-cell { text-align: center; }
.top-score { background: #e6f4ea; font-weight: bold; }
.second-score { background: #fff8e1; }
.winner-badge { background: #ffc20e; color: #002b5c; border-radius: 8px; padding: 1px 6px; font-size: 11px; }
.weighted-value { color: #666; font-size: 12px; }
.no-data { color: #999; font-style: italic; }
.gap-none { color: #1e8e3e; font-weight: bold; }
.gap-minor { color: #c79100; font-weight: bold; }
.gap-major { color: #c5221f; font-weight: bold; }
.strength-item::before { content: "+ "; color: #1e8e3e; }
.limitation-item::before { content: "- "; color: #c5221f; }
.cards { display: flex; gap: 16px; flex-wrap: wrap; }
.card { flex: 1 1 280px; border: 1px solid #e0e0e0; border-radius: 8px; padding: 12px 16px; }
.card h3 { margin-top: 0; }
.legend { display: flex; gap: 16px; justify-content: center; }
.legend-color { display: inline-block; width: 12px; height: 12px; border-radius: 2px; margin-right: 4px; }
.spider-chart { text-align: center; }
"""


def _e(value) -> str:
    return escape(str(value if value is not None else ""))


def _num(value: float) -> str:
    return f"{value:g}"


def _signed(value: float) -> str:
    return f"+{_num(value)}" if value > 0 else _num(value)


def _color(index: int) -> dict:
    return PALETTE[index] if index < len(PALETTE) else PALETTE[0]


# -------------------------------------------------------------------
# Sections
# -------------------------------------------------------------------
def _header(report: ReportData) -> str:
    title = f"{report.role_title} Assessment" if report.role_title else "Candidate Assessment"
    return (
        '<div class="report-header">'
        f'<h1 class="report-title">{_e(title)}</h1>'
        f'<div class="reference">Ref: {_e(report.reference)}'
        f"{' &middot; ' + _e(report.client_name) if report.client_name else ''}"
        f" &middot; {report.generated_at:%Y-%m-%d}</div>"
        "</div>"
    )


def _summary(report: ReportData) -> str:
    if not report.executive_summary:
        return ""
    return f"<h2>Executive Summary</h2><p>{_e(report.executive_summary)}</p>"


def _kec(report: ReportData) -> str:
    if not report.kec_items:
        return ""
    items = []
    for item in report.kec_items:
        weight = f", weight {_num(item.weight)}%" if item.weight else ""
        items.append(
            f"<li><strong>{_e(item.icon)} {_e(item.name)}</strong> "
            f"(minimum {_num(item.requirement_level)}%{weight})"
            f"{'<br>' + _e(item.description) if item.description else ''}</li>"
        )
    intro = f"<p>{_e(report.kec_description)}</p>" if report.kec_description else ""
    return f"<h2>Key Evaluation Criteria (KEC)</h2>{intro}<ul>{''.join(items)}</ul>"


def _profiles(report: ReportData) -> str:
    if not report.candidates:
        return ""
    cards = []
    for c in report.candidates:
        fields = "".join(
            f"<li><strong>{_e(k)}:</strong> {_e(v)}</li>" for k, v in c.fields.items() if v not in (None, "")
        )
        cards.append(
            f'<div class="card"><h3>{_e(c.name)}</h3>'
            f"{'<ul>' + fields + '</ul>' if fields else ''}"
            f"<p>{_e(c.overall_assessment)}</p></div>"
        )
    return f'<h2>Calibration Profiles</h2><div class="cards">{"".join(cards)}</div>'


def render_matrix(comparison: ComparisonOut) -> str:
    """Weighted scoring matrix: raw score out of 10 with weighted contribution."""
    if not comparison.matrix:
        return f'<p class="no-data">{MISSING_DATA}</p>'

    names = [t.candidate_name for t in comparison.totals]
    head = "".join(f"<th>{_e(n)}</th>" for n in names)
    rows = []
    for row in comparison.matrix:
        cells = []
        for cell in row.cells:
            css = {"top": "top-score", "second": "second-score"}.get(cell.rank.value, "")
            body = f'{cell.raw_score:.1f} <span class="weighted-value">({cell.weighted_contribution:.2f})</span>'
            if not cell.has_data:
                body = f'<span class="no-data">{MISSING_DATA}</span>'
            cells.append(f'<td class="score-cell {css}">{body}</td>')
        rows.append(
            f"<tr><td>{_e(row.parameter_name)}</td>"
            f'<td class="weight-cell">{_num(row.weight)}%</td>{"".join(cells)}</tr>'
        )

    totals = []
    for t in comparison.totals:
        badge = ' <span class="winner-badge">1st</span>' if t.is_winner else ""
        css = "top-score winner-score" if t.is_winner else ""
        totals.append(f'<td class="score-cell {css}">{t.display_total:.2f}{badge}</td>')
    rows.append(
        '<tr class="total-row"><td>Weighted Total</td><td class="weight-cell">100%</td>'
        f"{''.join(totals)}</tr>"
    )
    return (
        f"<table><thead><tr><th>Competency</th><th>Weight</th>{head}</tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        '<p class="weighted-note"><strong>Note:</strong> Scores shown as raw score (out of 10) '
        "with weighted contribution in parentheses.</p>"
    )


def render_radar_svg(comparison: ComparisonOut) -> str:
    """Spider chart from the projected points. Assumes the default 400x400 layout."""
    center = RADAR_SIZE / 2
    parts = [
        f'<svg viewBox="0 -20 {RADAR_SIZE} {RADAR_SIZE + 40}" width="{RADAR_SIZE}" '
        'preserveAspectRatio="xMidYMid meet" overflow="visible" xmlns="http://www.w3.org/2000/svg">',
        f'<rect x="0" y="0" width="{RADAR_SIZE}" height="{RADAR_SIZE}" fill="#f9f9f9" rx="8" ry="8" />',
    ]
    for r in RADAR_RINGS:
        parts.append(f'<circle cx="{center:g}" cy="{center:g}" r="{r}" fill="none" stroke="#e0e0e0" stroke-width="0.7" />')
    for axis in comparison.axes:
        parts.append(
            f'<line x1="{center:g}" y1="{center:g}" x2="{axis.x:.2f}" y2="{axis.y:.2f}" '
            'stroke="#ccc" stroke-width="0.8" />'
        )
        parts.append(
            f'<text x="{axis.label_x:.2f}" y="{axis.label_y:.2f}" text-anchor="middle" '
            f'font-size="10" font-weight="bold" fill="#333">{_e(axis.parameter_name)}</text>'
        )
    for i, polygon in enumerate(comparison.radar):
        if not polygon.points:
            continue
        color = _color(i)
        points = " ".join(f"{p.x:.2f},{p.y:.2f}" for p in polygon.points)
        parts.append(f'<g data-candidate="{_e(polygon.candidate_name)}">')
        parts.append(f'<polygon points="{points}" fill="{color["fill"]}" stroke="{color["stroke"]}" stroke-width="2" />')
        for p in polygon.points:
            parts.append(f'<circle cx="{p.x:.2f}" cy="{p.y:.2f}" r="4" fill="{color["stroke"]}" />')
        parts.append("</g>")
    parts.append("</svg>")
    return "".join(parts)


def _legend(comparison: ComparisonOut) -> str:
    items = [
        f'<span><span class="legend-color" style="background:{_color(i)["stroke"]}"></span>{_e(p.candidate_name)}</span>'
        for i, p in enumerate(comparison.radar)
    ]
    return f'<div class="legend">{"".join(items)}</div>'


def render_gap_table(comparison: ComparisonOut, report: ReportData) -> str:
    if not comparison.gaps or not comparison.totals:
        return ""
    names = [t.candidate_name for t in comparison.totals]
    head = "".join(f"<th>{_e(n)}</th>" for n in names)
    rows = []
    for item, row in zip(report.kec_items, comparison.gaps):
        cells = []
        for cell in row:
            if not cell.has_data:
                cells.append(f'<td><span class="no-data">{MISSING_DATA}</span></td>')
                continue
            cells.append(
                f"<td>{_num(cell.score)}% "
                f'<span class="gap-indicator gap-{cell.level.value}">{_signed(cell.difference)}</span></td>'
            )
        rows.append(f"<tr><td>{_e(item.name)}</td><td>{_num(item.requirement_level)}%</td>{''.join(cells)}</tr>")
    return (
        "<h2>Gap Analysis vs. Ideal Profile</h2>"
        f"<table><thead><tr><th>Competency</th><th>Ideal Profile</th>{head}</tr></thead>"
        f"<tbody>{''.join(rows)}</tbody></table>"
        '<p><strong>Gap Indicators:</strong> <span class="gap-none">Green (+)</span> = exceeds requirements, '
        '<span class="gap-minor">Yellow (-)</span> = minor development needs, '
        '<span class="gap-major">Red (-)</span> = significant development needs</p>'
    )


def _strengths(report: ReportData) -> str:
    if not report.strengths_table or not report.candidates:
        return ""
    head = "".join(f"<th>{_e(c.name)}</th>" for c in report.candidates)
    rows = []
    for row in report.strengths_table:
        cells = []
        for cell in row.cells:
            if not cell.has_data:
                cells.append(f"<td>{MISSING_DATA}</td>")
                continue
            items = [f'<li class="strength-item">{_e(s)}</li>' for s in cell.strengths]
            items += [f'<li class="limitation-item">{_e(s)}</li>' for s in cell.limitations]
            cells.append(f'<td><ul class="sw-list">{"".join(items)}</ul></td>')
        rows.append(f"<tr><td>{_e(row.parameter_name)}</td>{''.join(cells)}</tr>")
    return (
        "<h2>Strengths &amp; Limitations</h2>"
        f"<table><thead><tr><th>Factor</th>{head}</tr></thead><tbody>{''.join(rows)}</tbody></table>"
    )


def _probes(report: ReportData) -> str:
    if not report.probes:
        return ""
    cards = []
    for probe in report.probes:
        strengths = "".join(f"<li>{_e(s)}</li>" for s in probe.strengths) or \
            "<li>Strong overall performance across multiple areas</li>"
        focus = "".join(
            f"<li><strong>{_e(f.area)}:</strong> {_e(f.question)}</li>" for f in probe.focus_areas
        ) or "<li>No significant areas of concern identified</li>"
        cards.append(
            f'<div class="card"><h3>{_e(probe.candidate_name)}</h3>'
            f"<h4>Key Validated Strengths</h4><ul>{strengths}</ul>"
            f"<h4>Interview Focus Areas</h4><ul>{focus}</ul></div>"
        )
    return f'<h2>Areas to Probe</h2><div class="cards">{"".join(cards)}</div>'


def _insights(report: ReportData) -> str:
    ki = report.key_insights
    items = [i for i in (ki.top_performer, ki.technical_edge, ki.fastest_onboarding) if i is not None]
    parts = []
    if items:
        cards = "".join(
            f'<div class="card"><h3>{_e(i.title)}</h3><strong>{_e(i.candidate)}</strong>'
            f"<p>{_e(i.description)}</p></div>"
            for i in items
        )
        parts.append(f'<h2>Key Insights</h2><div class="cards">{cards}</div>')
    if report.decision_factors:
        factors = "".join(f"<li>{_e(f)}</li>" for f in report.decision_factors)
        parts.append(f"<h2>Decision Factors</h2><ul>{factors}</ul>")
    return "".join(parts)


def _next_steps(steps: List[str]) -> str:
    if not steps:
        return ""
    return f"<h2>Recommended Next Steps</h2><ul>{''.join(f'<li>{_e(s)}</li>' for s in steps)}</ul>"


def render_html(report: ReportData) -> str:
    comparison = report.comparison
    competency = (
        "<h2>Candidate Competency Analysis</h2>"
        "<h3>Weighted Scoring Matrix</h3>"
        f"{render_matrix(comparison)}"
    )
    if comparison.radar:
        competency += (
            "<h3>Competency Radar</h3>"
            f'{_legend(comparison)}<div class="spider-chart">{render_radar_svg(comparison)}</div>'
        )
    body = "".join([
        _header(report),
        _summary(report),
        _kec(report),
        _profiles(report),
        competency,
        render_gap_table(comparison, report),
        _strengths(report),
        _insights(report),
        _probes(report),
        _next_steps(report.next_steps),
    ])
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        f"<title>{_e(report.role_title or 'Candidate')} Assessment - {_e(report.reference)}</title>"
        f"<style>{STYLE}</style></head><body><div class=\"page\">{body}</div></body></html>"
    )
