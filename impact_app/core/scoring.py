from __future__ import annotations
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence
import logging
import math

from .catalog import Catalog, default_catalog, domain_question_count

logger = logging.getLogger(__name__)

SCALE_MAX = 10

# Label thresholds on the 0-10 scale. UI colours reuse the same boundaries.
EXCELLENT_MIN = 8
GOOD_MIN = 6
FAIR_MIN = 4

SCORE_COLORS = {
    "Excellent": "green",
    "Good": "blue",
    "Fair": "orange",
    "Needs Improvement": "red",
}


@dataclass(frozen=True)
class Answer:
    assessment_id: str
    domain_id: str
    question_id: str
    score: Optional[int]
    notes: Optional[str] = None


@dataclass(frozen=True)
class DomainScoreSummary:
    domain_id: str
    average_score: float
    completed_count: int
    total_count: int
    completion_percent: int


@dataclass(frozen=True)
class ScoreBreakdown:
    domain_summaries: List[DomainScoreSummary]
    overall_score: float
    overall_label: str


def _round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_domain_summary(
    domain_id: str,
    answers: Iterable[Answer],
    catalog: Optional[Catalog] = None,
) -> DomainScoreSummary:
    """
    Summarize one domain from the full (unfiltered) answer list.

    Unanswered domains come back as zeros; nothing here raises for missing data.
    """
    catalog = catalog or default_catalog()
    scores = [a.score for a in answers if a.domain_id == domain_id and a.score is not None]

    total = domain_question_count(catalog, domain_id)
    if total == 0:
        logger.warning(f"Unknown domain '{domain_id}', using total_count=1")
        total = 1

    completed = len(scores)
    average = sum(scores) / completed if completed > 0 else 0

    return DomainScoreSummary(
        domain_id=domain_id,
        average_score=average,
        completed_count=completed,
        total_count=total,
        completion_percent=_round_half_up(completed / total * 100),
    )


def compute_domain_summaries(
    answers: Sequence[Answer],
    catalog: Optional[Catalog] = None,
) -> List[DomainScoreSummary]:
    catalog = catalog or default_catalog()
    return [compute_domain_summary(d.id, answers, catalog) for d in catalog.domains]


def compute_overall_score(domain_summaries: Iterable[DomainScoreSummary]) -> float:
    # untouched domains are left out rather than counted as zero
    started = [s.average_score for s in domain_summaries if s.completed_count > 0]
    if not started:
        return 0
    return sum(started) / len(started)


def classify_score(score: float) -> str:
    if score >= EXCELLENT_MIN:
        return "Excellent"
    if score >= GOOD_MIN:
        return "Good"
    if score >= FAIR_MIN:
        return "Fair"
    return "Needs Improvement"


def score_color(score: float) -> str:
    return SCORE_COLORS[classify_score(score)]


def apply_inversion(raw_display_value: int, inverted: bool) -> int:
    """Map a displayed value to the stored value for negatively phrased questions."""
    return SCALE_MAX - raw_display_value if inverted else raw_display_value


def display_value(stored_value: int, inverted: bool) -> int:
    return SCALE_MAX - stored_value if inverted else stored_value


def percentage_to_score(percentage: float) -> int:
    """
    Bucket a 0-100 % slider value into the 0-10 scale.

    0 % is its own bucket; above that each decile maps to the next integer:
    1-10 -> 1, 11-20 -> 2, ... 91-100 -> 10.
    """
    if percentage <= 0:
        return 0
    return min(SCALE_MAX, int(math.ceil(percentage / 10)))


def score_to_percentage_label(score: int) -> str:
    if score <= 0:
        return "0"
    return f"{(score - 1) * 10 + 1}-{score * 10}"


def score_assessment(answers: Sequence[Answer], catalog: Optional[Catalog] = None) -> ScoreBreakdown:
    summaries = compute_domain_summaries(answers, catalog)
    overall = compute_overall_score(summaries)
    return ScoreBreakdown(
        domain_summaries=summaries,
        overall_score=overall,
        overall_label=classify_score(overall),
    )
