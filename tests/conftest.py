# tests/conftest.py

"""
Pytest Fixtures - shared catalog, store and answer builders.
"""

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from impact_app.config import CATALOG_PATH
from impact_app.core.catalog import load_catalog, parse_catalog
from impact_app.core.scoring import Answer
from impact_app.core.store import AssessmentStore


# =============================================================================
# CATALOG FIXTURES
# =============================================================================

@pytest.fixture(scope="session")
def catalog():
    """The shipped seven-domain catalog."""
    return load_catalog(CATALOG_PATH)


@pytest.fixture
def small_catalog_data():
    """Minimal two-domain catalog as raw JSON data."""
    return {
        "version": "test",
        "title": "Test Catalog",
        "scale": {"min": 0, "max": 10},
        "default_options": [{"label": str(i), "score": i} for i in range(11)],
        "domains": [
            {
                "id": "alpha",
                "name": "Alpha",
                "questions": [
                    {"id": "a_1", "text": "First?"},
                    {"id": "a_2", "text": "Second?", "inverted": True},
                ],
            },
            {
                "id": "beta",
                "name": "Beta",
                "questions": [{"id": "b_1", "text": "Only?"}],
            },
        ],
    }


@pytest.fixture
def small_catalog(small_catalog_data):
    return parse_catalog(small_catalog_data)


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def clock():
    """Deterministic clock: each call is one minute after the previous."""
    start = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)
    ticks = count()
    return lambda: start + timedelta(minutes=next(ticks))


@pytest.fixture
def store(catalog, clock):
    return AssessmentStore(catalog, clock=clock)


@pytest.fixture
def project(store):
    return store.create_project("Youth Mentoring", "Bright Futures Trust")


# =============================================================================
# ANSWER BUILDERS
# =============================================================================

@pytest.fixture
def make_answer():
    def _make(domain_id, question_id, score, notes=None, assessment_id="assess-1"):
        return Answer(
            assessment_id=assessment_id,
            domain_id=domain_id,
            question_id=question_id,
            score=score,
            notes=notes,
        )
    return _make
