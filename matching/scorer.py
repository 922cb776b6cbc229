"""
Weighted multi-candidate scoring: matrix cells, totals and winners,
gap classification and radar-chart projection.

Pure functions over small in-memory lists. Nothing here raises for
missing weights or scores; they fall back to the defaults below.
"""
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from numbers import Real
from typing import List, Mapping, Optional, Sequence

DEFAULT_WEIGHT = 20
DEFAULT_AXIS_COUNT = 5
DEFAULT_RADIUS = 150.0
DEFAULT_CENTER = 200.0
MINOR_GAP_LIMIT = -10


class Rank(str, Enum):
    TOP = "top"
    SECOND = "second"
    NONE = "none"


class GapLevel(str, Enum):
    NONE = "none"
    MINOR = "minor"
    MAJOR = "major"


@dataclass(frozen=True)
class Parameter:
    name: str
    weight: Optional[float] = None
    requirement_level: float = 0
    id: Optional[str] = None


@dataclass(frozen=True)
class CandidateScoreSet:
    candidate_name: str
    scores: Mapping[str, float] = field(default_factory=dict)
    id: Optional[str] = None


@dataclass(frozen=True)
class WeightedCell:
    candidate_name: str
    parameter_name: str
    score: float
    raw_score: float
    weighted_contribution: float
    rank: Rank
    has_data: bool


@dataclass(frozen=True)
class MatrixRow:
    parameter_name: str
    weight: float
    cells: List[WeightedCell]


@dataclass(frozen=True)
class CandidateTotal:
    candidate_name: str
    total: float
    display_total: float
    is_winner: bool


@dataclass(frozen=True)
class GapCell:
    candidate_name: str
    parameter_name: str
    score: float
    requirement_level: float
    difference: float
    level: GapLevel
    has_data: bool


@dataclass(frozen=True)
class RadarPoint:
    axis_index: int
    parameter_name: str
    angle: float
    normalized: float
    x: float
    y: float


@dataclass(frozen=True)
class RadarPolygon:
    candidate_name: str
    points: List[RadarPoint]


@dataclass(frozen=True)
class RadarAxis:
    axis_index: int
    parameter_name: str
    angle: float
    x: float
    y: float
    label_x: float
    label_y: float


@dataclass(frozen=True)
class Comparison:
    matrix: List[MatrixRow]
    totals: List[CandidateTotal]
    gaps: List[List[GapCell]]
    radar: List[RadarPolygon]
    axes: List[RadarAxis]

    @property
    def winners(self) -> List[str]:
        return [t.candidate_name for t in self.totals if t.is_winner]


# -------------------------------------------------------------------
# Input normalisation
# -------------------------------------------------------------------
def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and not math.isnan(value)


def weight_for(parameter: Parameter) -> float:
    """Parameter weight, or DEFAULT_WEIGHT when missing, zero or out of 0-100."""
    w = parameter.weight
    if not _is_number(w) or w <= 0 or w > 100:
        return DEFAULT_WEIGHT
    return w


def has_score(candidate: CandidateScoreSet, parameter_name: str) -> bool:
    return _is_number(candidate.scores.get(parameter_name))


def score_for(candidate: CandidateScoreSet, parameter_name: str) -> float:
    """Candidate score on a parameter; missing or non-numeric counts as 0."""
    value = candidate.scores.get(parameter_name)
    return value if _is_number(value) else 0


def requirement_for(parameter: Parameter) -> float:
    """Minimum requirement level; missing or non-numeric counts as 0."""
    level = parameter.requirement_level
    return level if _is_number(level) else 0


def _round_half_up(value: float, places: str = "0.01") -> float:
    # exact halves go up (2.5 -> 3), not to the even digit
    return float(Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP))


# -------------------------------------------------------------------
# Weighted matrix
# -------------------------------------------------------------------
def _rank_column(scores: Sequence[float]) -> List[Rank]:
    if not scores:
        return []
    top = max(scores)
    lower = [s for s in scores if s < top]
    second = max(lower) if lower else None

    ranks = []
    for s in scores:
        if s == top and top > 0:
            ranks.append(Rank.TOP)
        elif second is not None and s == second and second > 0:
            ranks.append(Rank.SECOND)
        else:
            ranks.append(Rank.NONE)
    return ranks


def compute_matrix(parameters: Sequence[Parameter],
                   candidates: Sequence[CandidateScoreSet]) -> List[MatrixRow]:
    """
    One row per parameter, one WeightedCell per candidate.

    Every candidate tying on a column maximum is marked top; the second
    distinct value below it is marked second.
    """
    if not candidates:
        return []

    rows = []
    for param in parameters:
        weight = weight_for(param)
        scores = [score_for(c, param.name) for c in candidates]
        ranks = _rank_column(scores)
        cells = [
            WeightedCell(
                candidate_name=c.candidate_name,
                parameter_name=param.name,
                score=s,
                raw_score=_round_half_up(s / 10, "0.1"),
                weighted_contribution=_round_half_up(s * weight / 1000),
                rank=r,
                has_data=has_score(c, param.name),
            )
            for c, s, r in zip(candidates, scores, ranks)
        ]
        rows.append(MatrixRow(parameter_name=param.name, weight=weight, cells=cells))
    return rows


# -------------------------------------------------------------------
# Totals & winners
# -------------------------------------------------------------------
def weighted_total(parameters: Sequence[Parameter], candidate: CandidateScoreSet) -> float:
    return sum(score_for(candidate, p.name) * weight_for(p) / 100 for p in parameters)


def compute_totals(parameters: Sequence[Parameter],
                   candidates: Sequence[CandidateScoreSet]) -> List[CandidateTotal]:
    """Weighted total per candidate. All candidates sharing the maximum win."""
    if not candidates:
        return []

    totals = [weighted_total(parameters, c) for c in candidates]
    best = max(totals)
    return [
        CandidateTotal(
            candidate_name=c.candidate_name,
            total=t,
            display_total=_round_half_up(t / 10),
            is_winner=t == best,
        )
        for c, t in zip(candidates, totals)
    ]


# -------------------------------------------------------------------
# Gap analysis
# -------------------------------------------------------------------
def classify_gap(difference: float) -> GapLevel:
    if difference >= 0:
        return GapLevel.NONE
    if difference >= MINOR_GAP_LIMIT:
        return GapLevel.MINOR
    return GapLevel.MAJOR


def compute_gap(parameter: Parameter, candidate_score: Optional[float]) -> GapLevel:
    """Classify ``candidate_score - requirement_level`` as none/minor/major.

    A missing score counts as 0, a missing requirement level as 0.
    """
    score = candidate_score if _is_number(candidate_score) else 0
    return classify_gap(score - requirement_for(parameter))


def compute_gap_table(parameters: Sequence[Parameter],
                      candidates: Sequence[CandidateScoreSet]) -> List[List[GapCell]]:
    table = []
    for param in parameters:
        requirement = requirement_for(param)
        row = []
        for c in candidates:
            score = score_for(c, param.name)
            difference = score - requirement
            row.append(GapCell(
                candidate_name=c.candidate_name,
                parameter_name=param.name,
                score=score,
                requirement_level=requirement,
                difference=difference,
                level=classify_gap(difference),
                has_data=has_score(c, param.name),
            ))
        table.append(row)
    return table


# -------------------------------------------------------------------
# Radar projection
# -------------------------------------------------------------------
def axis_angle(index: int, axis_count: int) -> float:
    """Axis 0 points up, the rest follow clockwise in screen coordinates."""
    return index * 2 * math.pi / axis_count - math.pi / 2


def compute_radar_projection(parameters: Sequence[Parameter],
                             candidates: Sequence[CandidateScoreSet],
                             axis_count: int = DEFAULT_AXIS_COUNT,
                             radius: float = DEFAULT_RADIUS,
                             center_x: float = DEFAULT_CENTER,
                             center_y: float = DEFAULT_CENTER,
                             scale: float = 1.0) -> List[RadarPolygon]:
    """
    Polygon vertices per candidate, in parameter order.

    Only the first ``axis_count`` parameters are charted. The polygon is
    closed by the caller; the first point is not repeated.
    """
    axes = list(parameters[:axis_count]) if axis_count >= 1 else []

    projection = []
    for c in candidates:
        points = []
        for i, param in enumerate(axes):
            angle = axis_angle(i, axis_count)
            normalized = score_for(c, param.name) / 100
            distance = radius * scale * normalized
            points.append(RadarPoint(
                axis_index=i,
                parameter_name=param.name,
                angle=angle,
                normalized=normalized,
                x=center_x + distance * math.cos(angle),
                y=center_y + distance * math.sin(angle),
            ))
        projection.append(RadarPolygon(candidate_name=c.candidate_name, points=points))
    return projection


def compute_radar_axes(parameters: Sequence[Parameter],
                       axis_count: int = DEFAULT_AXIS_COUNT,
                       radius: float = DEFAULT_RADIUS,
                       center_x: float = DEFAULT_CENTER,
                       center_y: float = DEFAULT_CENTER,
                       label_offset: float = 30.0) -> List[RadarAxis]:
    """Axis end points and label anchors for the charted parameters."""
    if axis_count < 1:
        return []
    axes = []
    for i, param in enumerate(parameters[:axis_count]):
        angle = axis_angle(i, axis_count)
        cos, sin = math.cos(angle), math.sin(angle)
        axes.append(RadarAxis(
            axis_index=i,
            parameter_name=param.name,
            angle=angle,
            x=center_x + radius * cos,
            y=center_y + radius * sin,
            label_x=center_x + (radius + label_offset) * cos,
            label_y=center_y + (radius + label_offset) * sin,
        ))
    return axes


def build_comparison(parameters: Sequence[Parameter],
                     candidates: Sequence[CandidateScoreSet],
                     axis_count: int = DEFAULT_AXIS_COUNT,
                     radius: float = DEFAULT_RADIUS,
                     center_x: float = DEFAULT_CENTER,
                     center_y: float = DEFAULT_CENTER,
                     scale: float = 1.0) -> Comparison:
    return Comparison(
        matrix=compute_matrix(parameters, candidates),
        totals=compute_totals(parameters, candidates),
        gaps=compute_gap_table(parameters, candidates),
        radar=compute_radar_projection(parameters, candidates, axis_count,
                                       radius, center_x, center_y, scale),
        axes=compute_radar_axes(parameters, axis_count, radius, center_x, center_y),
    )
