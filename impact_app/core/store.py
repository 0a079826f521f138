"""
In-process store for projects, assessments and answers.

Answers are keyed by (assessment_id, domain_id, question_id); a second
submission for the same key replaces the first. Assessments are created
lazily on the first answer for a project.
"""
from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple
from uuid import uuid4
import logging
import threading

from .catalog import Catalog, default_catalog, get_domain_by_id
from .exceptions import EntityNotFoundException, ValidationError
from .scoring import SCALE_MAX, Answer

logger = logging.getLogger(__name__)

PROJECT_STATUSES = ("active", "completed", "on_hold")

AnswerKey = Tuple[str, str, str]


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    organization_name: str
    description: Optional[str]
    owner_id: Optional[str]
    status: str
    created_at: datetime
    updated_at: datetime
    lead_consultant: Optional[str] = None
    research_consultant: Optional[str] = None
    data_consultant: Optional[str] = None


@dataclass(frozen=True)
class Assessment:
    id: str
    project_id: str
    created_at: datetime
    updated_at: datetime

    @property
    def is_completed(self) -> bool:
        return self.updated_at != self.created_at


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def validate_score(score: object) -> int:
    if isinstance(score, bool) or not isinstance(score, int):
        raise ValidationError("score", f"must be an integer, got {score!r}")
    if not 0 <= score <= SCALE_MAX:
        raise ValidationError("score", f"must be between 0 and {SCALE_MAX}, got {score}")
    return score


def _clean_notes(notes: Optional[str]) -> Optional[str]:
    if notes is None or not notes.strip():
        return None
    return notes.strip()


def _require_text(field: str, value: Optional[str], min_length: int = 2) -> str:
    cleaned = (value or "").strip()
    if len(cleaned) < min_length:
        raise ValidationError(field, f"must be at least {min_length} characters")
    return cleaned


class AssessmentStore:
    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.catalog = catalog or default_catalog()
        self._clock = clock
        self._lock = threading.RLock()
        self._projects: Dict[str, Project] = {}
        self._assessments: Dict[str, Assessment] = {}
        self._assessment_by_project: Dict[str, str] = {}
        self._answers: Dict[AnswerKey, Answer] = {}

    # ---- Projects ----
    def create_project(
        self,
        name: str,
        organization_name: str,
        description: Optional[str] = None,
        owner_id: Optional[str] = None,
    ) -> Project:
        if not name or not name.strip():
            raise ValidationError("name", "is required")
        if not organization_name or not organization_name.strip():
            raise ValidationError("organization_name", "is required")

        now = self._clock()
        project = Project(
            id=str(uuid4()),
            name=name.strip(),
            organization_name=organization_name.strip(),
            description=_clean_notes(description),
            owner_id=owner_id,
            status="active",
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._projects[project.id] = project
        logger.info(f"Created project {project.id} ({project.name})")
        return project

    def get_project(self, project_id: str) -> Project:
        with self._lock:
            project = self._projects.get(project_id)
        if project is None:
            raise EntityNotFoundException("Project", project_id)
        return project

    def list_projects(self, status: Optional[str] = None) -> List[Project]:
        with self._lock:
            projects = list(self._projects.values())
        if status is not None:
            projects = [p for p in projects if p.status == status]
        return sorted(projects, key=lambda p: p.created_at, reverse=True)

    def update_project_status(self, project_id: str, status: str) -> Project:
        if status not in PROJECT_STATUSES:
            raise ValidationError("status", f"must be one of {', '.join(PROJECT_STATUSES)}")
        with self._lock:
            project = replace(self.get_project(project_id), status=status, updated_at=self._clock())
            self._projects[project_id] = project
        logger.info(f"Project {project_id} status -> {status}")
        return project

    def update_project_details(
        self,
        project_id: str,
        organization_name: str,
        lead_consultant: str,
        research_consultant: Optional[str] = None,
        data_consultant: Optional[str] = None,
    ) -> Project:
        """Organization and consultant team; blank optional consultants are cleared."""
        organization_name = _require_text("organization_name", organization_name)
        lead_consultant = _require_text("lead_consultant", lead_consultant)
        with self._lock:
            project = replace(
                self.get_project(project_id),
                organization_name=organization_name,
                lead_consultant=lead_consultant,
                research_consultant=_clean_notes(research_consultant),
                data_consultant=_clean_notes(data_consultant),
                updated_at=self._clock(),
            )
            self._projects[project_id] = project
        logger.info(f"Updated details for project {project_id}")
        return project

    # ---- Assessments ----
    def get_assessment(self, project_id: str) -> Optional[Assessment]:
        with self._lock:
            assessment_id = self._assessment_by_project.get(project_id)
            return self._assessments.get(assessment_id) if assessment_id else None

    def get_or_create_assessment(self, project_id: str) -> Assessment:
        with self._lock:
            self.get_project(project_id)
            existing = self.get_assessment(project_id)
            if existing is not None:
                return existing
            now = self._clock()
            assessment = Assessment(id=str(uuid4()), project_id=project_id, created_at=now, updated_at=now)
            self._assessments[assessment.id] = assessment
            self._assessment_by_project[project_id] = assessment.id
        logger.info(f"Created assessment {assessment.id} for project {project_id}")
        return assessment

    def all_assessments(self) -> List[Assessment]:
        with self._lock:
            return list(self._assessments.values())

    # ---- Answers ----
    def submit_answer(
        self,
        project_id: str,
        domain_id: str,
        question_id: str,
        score: int,
        notes: Optional[str] = None,
    ) -> Answer:
        """Validate and upsert one answer; score and notes are written together."""
        domain = get_domain_by_id(self.catalog, domain_id)
        if domain is None:
            raise ValidationError("domain_id", f"unknown domain {domain_id!r}")
        if question_id not in {q.id for q in domain.questions}:
            raise ValidationError("question_id", f"{question_id!r} is not part of {domain_id}")
        validate_score(score)

        with self._lock:
            existed = self.get_assessment(project_id) is not None
            assessment = self.get_or_create_assessment(project_id)
            answer = Answer(
                assessment_id=assessment.id,
                domain_id=domain_id,
                question_id=question_id,
                score=score,
                notes=_clean_notes(notes),
            )
            self._answers[(assessment.id, domain_id, question_id)] = answer
            if existed:
                self._assessments[assessment.id] = replace(assessment, updated_at=self._clock())
        logger.debug(f"Saved {domain_id}/{question_id}={score} for assessment {assessment.id}")
        return answer

    def answers_for(self, assessment_id: str) -> List[Answer]:
        with self._lock:
            return [a for a in self._answers.values() if a.assessment_id == assessment_id]

    def answers_for_project(self, project_id: str) -> List[Answer]:
        assessment = self.get_assessment(project_id)
        return self.answers_for(assessment.id) if assessment else []

    def all_answers(self) -> List[Answer]:
        with self._lock:
            return list(self._answers.values())


def seed_demo_data(store: AssessmentStore) -> Project:
    """Populate a store with one partially answered project."""
    project = store.create_project(
        "Community Outreach Review",
        "Example Foundation",
        description="Sample project loaded at startup",
    )
    for question_id, score in (("li_1", 6), ("li_2", 8), ("li_3", 10)):
        store.submit_answer(project.id, "leadership_for_impact", question_id, score)
    store.submit_answer(project.id, "purpose_alignment", "pa_1", 7, notes="Survey run in Q2")
    return project
