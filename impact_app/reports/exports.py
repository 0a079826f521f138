from __future__ import annotations
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence
import logging
import re

import pandas as pd

from impact_app.core.analytics import ProjectRow
from impact_app.core.catalog import Catalog, default_catalog
from impact_app.core.scoring import SCALE_MAX, Answer, DomainScoreSummary, ScoreBreakdown, classify_score
from impact_app.core.store import Project

logger = logging.getLogger(__name__)

RESULTS_COLUMNS = [
    "Domain", "Score", "MaxScore", "CompletedQuestions", "TotalQuestions",
    "Progress", "QuestionID", "QuestionScore", "QuestionNotes",
]


def export_filename(project_name: str, kind: str, ext: str, on: Optional[date] = None) -> str:
    on = on or date.today()
    slug = re.sub(r"\s+", "-", project_name.strip())
    return f"{slug}-assessment-{kind}-{on.isoformat()}.{ext}"


def _ordered_answers(domain_id: str, answers: Sequence[Answer], catalog: Catalog) -> List[Answer]:
    order = {q.id: i for d in catalog.domains for i, q in enumerate(d.questions)}
    picked = [a for a in answers if a.domain_id == domain_id and a.score is not None]
    return sorted(picked, key=lambda a: order.get(a.question_id, len(order)))


def results_csv(
    project: Project,
    summaries: Sequence[DomainScoreSummary],
    answers: Sequence[Answer],
    overall_score: float,
    catalog: Optional[Catalog] = None,
    export_date: Optional[date] = None,
) -> str:
    catalog = catalog or default_catalog()
    names = {d.id: d.name for d in catalog.domains}
    rows: List[Dict[str, Any]] = []

    for s in summaries:
        base = {
            "Domain": names.get(s.domain_id, s.domain_id),
            "Score": f"{s.average_score:.1f}",
            "MaxScore": SCALE_MAX,
            "CompletedQuestions": s.completed_count,
            "TotalQuestions": s.total_count,
            "Progress": f"{float(s.completion_percent):.1f}",
        }
        domain_answers = _ordered_answers(s.domain_id, answers, catalog)
        for a in domain_answers:
            rows.append({**base, "QuestionID": a.question_id, "QuestionScore": a.score, "QuestionNotes": a.notes or ""})
        if not domain_answers:
            rows.append({**base, "CompletedQuestions": 0, "QuestionID": "N/A", "QuestionScore": "N/A", "QuestionNotes": "N/A"})

    body = pd.DataFrame(rows, columns=RESULTS_COLUMNS).to_csv(index=False, lineterminator="\n")

    pad = ["N/A"] * (len(RESULTS_COLUMNS) - 2)
    export_date = export_date or date.today()
    footer = pd.DataFrame([
        ["Overall Score:", f"{overall_score:.1f}", *pad],
        ["Project:", project.name, *pad],
        ["Organization:", project.organization_name, *pad],
        ["Export Date:", export_date.isoformat(), *pad],
    ]).to_csv(index=False, header=False, lineterminator="\n")
    return body + "\n\n" + footer


def notes_text(
    project: Project,
    answers: Sequence[Answer],
    catalog: Optional[Catalog] = None,
    export_date: Optional[date] = None,
) -> str:
    """Plain-text notes grouped by domain. Empty string when nothing has notes."""
    catalog = catalog or default_catalog()
    noted = [a for a in answers if a.notes and a.notes.strip()]
    if not noted:
        return ""

    export_date = export_date or date.today()
    lines = [
        "Assessment Notes Export",
        "=" * 24,
        "",
        f"Project: {project.name}",
        f"Organization: {project.organization_name}",
        f"Export Date: {export_date.isoformat()}",
        "",
    ]
    for d in catalog.domains:
        domain_notes = _ordered_answers(d.id, noted, catalog)
        if not domain_notes:
            continue
        lines += ["", "=" * 50, f"DOMAIN: {d.name.upper()}", "=" * 50, ""]
        for i, a in enumerate(domain_notes, start=1):
            lines += [f"{i}. Question {a.question_id} (Score: {a.score})", "-" * 50, a.notes, ""]
    return "\n".join(lines) + "\n"


def analytics_frame(rows: Sequence[ProjectRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Project Name": r.name,
                "Organization": r.organization_name,
                "Created Date": r.created_date,
                "Assessments": r.assessments,
                "Average Score": round(r.average_score, 1),
            }
            for r in rows
        ],
        columns=["Project Name", "Organization", "Created Date", "Assessments", "Average Score"],
    )


def analytics_csv(rows: Sequence[ProjectRow]) -> str:
    return analytics_frame(rows).to_csv(index=False, lineterminator="\n")


def build_report(
    project: Project,
    breakdown: ScoreBreakdown,
    answers: Sequence[Answer],
    catalog: Optional[Catalog] = None,
    generated_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    catalog = catalog or default_catalog()
    names = {d.id: d.name for d in catalog.domains}
    generated_at = generated_at or datetime.now()

    return {
        "generated_at": generated_at.isoformat(timespec="seconds"),
        "project": {
            "id": project.id,
            "name": project.name,
            "organization_name": project.organization_name,
            "status": project.status,
            "lead_consultant": project.lead_consultant,
            "research_consultant": project.research_consultant,
            "data_consultant": project.data_consultant,
        },
        "overall_score": round(breakdown.overall_score, 1),
        "overall_label": breakdown.overall_label,
        "domain_scores_named": [
            (names.get(s.domain_id, s.domain_id), round(s.average_score, 1), s.completion_percent)
            for s in breakdown.domain_summaries
        ],
        "domains": [
            {
                "domain_id": s.domain_id,
                "name": names.get(s.domain_id, s.domain_id),
                "average_score": s.average_score,
                "label": classify_score(s.average_score) if s.completed_count else "Not Started",
                "completed_count": s.completed_count,
                "total_count": s.total_count,
                "completion_percent": s.completion_percent,
            }
            for s in breakdown.domain_summaries
        ],
        "answers": [
            {
                "domain_id": a.domain_id,
                "question_id": a.question_id,
                "score": a.score,
                "notes": a.notes,
            }
            for a in answers
        ],
    }
