from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .catalog import Catalog, default_catalog
from .scoring import GOOD_MIN, Answer, classify_score
from .store import Assessment, Project


@dataclass(frozen=True)
class PortfolioMetrics:
    total_projects: int
    total_assessments: int
    completed_assessments: int
    average_score: float
    organizations: int


@dataclass(frozen=True)
class ProjectRow:
    name: str
    organization_name: str
    created_date: str
    assessments: int
    average_score: float


@dataclass(frozen=True)
class DomainStat:
    domain_id: str
    domain_name: str
    average_score: float
    answer_count: int
    performance: str


def _mean(scores: Sequence[int]) -> float:
    return sum(scores) / len(scores) if scores else 0


def _scored(answers: Sequence[Answer]) -> List[int]:
    return [a.score for a in answers if a.score is not None]


def portfolio_metrics(
    projects: Sequence[Project],
    assessments: Sequence[Assessment],
    answers: Sequence[Answer],
) -> PortfolioMetrics:
    return PortfolioMetrics(
        total_projects=len(projects),
        total_assessments=len(assessments),
        completed_assessments=sum(1 for a in assessments if a.is_completed),
        average_score=_mean(_scored(answers)),
        organizations=len({p.organization_name for p in projects}),
    )


def project_rows(
    projects: Sequence[Project],
    assessments: Sequence[Assessment],
    answers: Sequence[Answer],
) -> List[ProjectRow]:
    rows: List[ProjectRow] = []
    for p in projects:
        assessment_ids = {a.id for a in assessments if a.project_id == p.id}
        scores = _scored([a for a in answers if a.assessment_id in assessment_ids])
        rows.append(ProjectRow(
            name=p.name,
            organization_name=p.organization_name or "Unknown",
            created_date=p.created_at.date().isoformat(),
            assessments=len(assessment_ids),
            average_score=_mean(scores),
        ))
    return rows


def domain_analysis(
    projects: Sequence[Project],
    assessments: Sequence[Assessment],
    answers: Sequence[Answer],
    catalog: Optional[Catalog] = None,
) -> List[DomainStat]:
    """Per-domain averages over completed projects only."""
    catalog = catalog or default_catalog()
    completed_ids = {p.id for p in projects if p.status == "completed"}
    assessment_ids = {a.id for a in assessments if a.project_id in completed_ids}

    by_domain: Dict[str, List[int]] = {d.id: [] for d in catalog.domains}
    for a in answers:
        if a.assessment_id in assessment_ids and a.score is not None and a.domain_id in by_domain:
            by_domain[a.domain_id].append(a.score)

    stats: List[DomainStat] = []
    for d in catalog.domains:
        scores = by_domain[d.id]
        stats.append(DomainStat(
            domain_id=d.id,
            domain_name=d.name,
            average_score=_mean(scores),
            answer_count=len(scores),
            performance=classify_score(_mean(scores)) if scores else "Not Assessed",
        ))
    return stats


def strengths(stats: Sequence[DomainStat], limit: int = 3) -> List[DomainStat]:
    top = [s for s in stats if s.answer_count > 0 and s.average_score >= GOOD_MIN]
    return sorted(top, key=lambda s: (-s.average_score, s.domain_id))[:limit]


def improvement_areas(stats: Sequence[DomainStat], limit: int = 3) -> List[DomainStat]:
    low = [s for s in stats if s.answer_count > 0 and s.average_score < GOOD_MIN]
    return sorted(low, key=lambda s: (s.average_score, s.domain_id))[:limit]


def filter_projects(projects: Sequence[Project], status: str) -> List[Project]:
    if status == "all":
        return list(projects)
    return [p for p in projects if p.status == status]
