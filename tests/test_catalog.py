# tests/test_catalog.py
import json

import pytest

from impact_app.core.catalog import (
    default_catalog,
    domain_question_count,
    get_domain_by_id,
    get_question_by_id,
    list_all_questions,
    load_catalog,
    parse_catalog,
)


EXPECTED_DOMAINS = [
    ("purpose_alignment", 1),
    ("purpose_statement", 5),
    ("leadership_for_impact", 6),
    ("theory_of_change", 5),
    ("measurement_framework", 7),
    ("status_of_data", 8),
    ("systems_capabilities", 5),
]


class TestShippedCatalog:
    def test_seven_domains_in_order(self, catalog):
        assert [(d.id, d.question_count) for d in catalog.domains] == EXPECTED_DOMAINS

    def test_scale(self, catalog):
        assert (catalog.scale_min, catalog.scale_max) == (0, 10)

    def test_inverted_questions(self, catalog):
        inverted = sorted(q.id for q in list_all_questions(catalog) if q.inverted)
        assert inverted == ["mf_2", "mf_3", "ps_2"]

    def test_default_options(self, catalog):
        q = get_question_by_id(catalog, "li_1")
        assert [o.score for o in q.options] == list(range(11))
        assert q.options[0].label == "0 - Not at all"
        assert q.options[-1].label == "10 - Extremely"

    def test_only_purpose_alignment_is_percentage(self, catalog):
        kinds = {q.id: q.kind for q in list_all_questions(catalog)}
        assert [qid for qid, kind in kinds.items() if kind == "percentage"] == ["pa_1"]

    def test_lookups(self, catalog):
        assert get_domain_by_id(catalog, "status_of_data").name == "Status of Data"
        assert get_domain_by_id(catalog, "details") is None
        assert get_question_by_id(catalog, "nope") is None
        assert domain_question_count(catalog, "leadership_for_impact") == 6
        assert domain_question_count(catalog, "details") == 0

    def test_default_catalog_is_cached(self):
        assert default_catalog() is default_catalog()
        assert len(default_catalog().domains) == 7


class TestParseCatalog:
    def test_custom_options_kept(self, small_catalog_data):
        small_catalog_data["domains"][1]["questions"][0]["options"] = [
            {"label": "No", "score": 0},
            {"label": "Yes", "score": 10},
        ]
        catalog = parse_catalog(small_catalog_data)
        assert [o.label for o in get_question_by_id(catalog, "b_1").options] == ["No", "Yes"]

    def test_empty_domain_rejected(self, small_catalog_data):
        small_catalog_data["domains"][1]["questions"] = []
        with pytest.raises(ValueError, match="at least one question"):
            parse_catalog(small_catalog_data)

    def test_duplicate_domain_rejected(self, small_catalog_data):
        small_catalog_data["domains"][1]["id"] = "alpha"
        with pytest.raises(ValueError, match="unique"):
            parse_catalog(small_catalog_data)

    def test_duplicate_question_rejected(self, small_catalog_data):
        small_catalog_data["domains"][1]["questions"][0]["id"] = "a_1"
        with pytest.raises(ValueError, match="Duplicate question"):
            parse_catalog(small_catalog_data)

    def test_unknown_kind_rejected(self, small_catalog_data):
        small_catalog_data["domains"][0]["questions"][0]["kind"] = "slider"
        with pytest.raises(ValueError, match="unknown kind"):
            parse_catalog(small_catalog_data)

    def test_load_from_file(self, tmp_path, small_catalog_data):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(small_catalog_data), encoding="utf-8")
        catalog = load_catalog(path)
        assert [d.id for d in catalog.domains] == ["alpha", "beta"]
        assert get_question_by_id(catalog, "a_2").inverted is True
