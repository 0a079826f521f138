from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import json


QUESTION_KINDS = ("scale", "percentage")


@dataclass(frozen=True)
class ScoreOption:
    label: str
    score: int


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    options: Tuple[ScoreOption, ...]
    guidance: str = ""
    inverted: bool = False
    kind: str = "scale"


@dataclass(frozen=True)
class Domain:
    id: str
    name: str
    description: str
    questions: Tuple[Question, ...]

    @property
    def question_count(self) -> int:
        return len(self.questions)


@dataclass(frozen=True)
class Catalog:
    version: str
    title: str
    scale_min: int
    scale_max: int
    domains: Tuple[Domain, ...]


def _parse_options(raw: List[Dict[str, object]]) -> Tuple[ScoreOption, ...]:
    return tuple(ScoreOption(label=str(o["label"]), score=int(o["score"])) for o in raw)


def parse_catalog(raw: Dict[str, object]) -> Catalog:
    scale = raw.get("scale", {})
    scale_min = int(scale.get("min", 0))
    scale_max = int(scale.get("max", 10))
    default_options = _parse_options(raw.get("default_options", []))

    domains: List[Domain] = []
    seen_questions = set()
    for d in raw.get("domains", []):
        questions: List[Question] = []
        for q in d.get("questions", []):
            kind = q.get("kind", "scale")
            if kind not in QUESTION_KINDS:
                raise ValueError(f"Question {q['id']} has unknown kind {kind!r}")
            if q["id"] in seen_questions:
                raise ValueError(f"Duplicate question id {q['id']}")
            seen_questions.add(q["id"])
            opts = _parse_options(q["options"]) if "options" in q else default_options
            questions.append(Question(
                id=q["id"],
                text=q["text"],
                options=opts,
                guidance=q.get("guidance", ""),
                inverted=bool(q.get("inverted", False)),
                kind=kind,
            ))
        if not questions:
            raise ValueError(f"Domain {d['id']} must define at least one question")
        domains.append(Domain(
            id=d["id"],
            name=d["name"],
            description=d.get("description", ""),
            questions=tuple(questions),
        ))

    # basic validation
    ids = [d.id for d in domains]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Domain ids must be unique; got {ids}")

    return Catalog(
        version=str(raw.get("version", "")),
        title=str(raw.get("title", "")),
        scale_min=scale_min,
        scale_max=scale_max,
        domains=tuple(domains),
    )


def load_catalog(path: Union[str, Path]) -> Catalog:
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return parse_catalog(raw)


@lru_cache
def default_catalog() -> Catalog:
    """The catalog named by settings, loaded once per process."""
    from impact_app.config import get_settings
    return load_catalog(get_settings().CATALOG_PATH)


def list_all_questions(catalog: Catalog) -> List[Question]:
    out: List[Question] = []
    for d in catalog.domains:
        out.extend(d.questions)
    return out


def get_domain_by_id(catalog: Catalog, domain_id: str) -> Optional[Domain]:
    for d in catalog.domains:
        if d.id == domain_id:
            return d
    return None


def get_question_by_id(catalog: Catalog, question_id: str) -> Optional[Question]:
    for d in catalog.domains:
        for q in d.questions:
            if q.id == question_id:
                return q
    return None


def domain_question_count(catalog: Catalog, domain_id: str) -> int:
    """Static question count for a domain; 0 when the id is unknown."""
    d = get_domain_by_id(catalog, domain_id)
    return d.question_count if d else 0
