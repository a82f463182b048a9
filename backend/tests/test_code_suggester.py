"""Tests for ICD-10 and CPT code suggestions."""

import pytest

from app.schemas.base import CodeType
from app.services.code_suggester import CodeSuggestion, best_suggestion, suggest_cpt, suggest_icd10
from app.services.knowledge_base import ICD10_ENTRIES, KnowledgeBase, build_default_knowledge_base


@pytest.fixture
def knowledge_base() -> KnowledgeBase:
    return build_default_knowledge_base()


class TestICD10Suggestions:
    """Test keyword-based ICD-10 suggestions."""

    def test_lower_back_pain(self, knowledge_base):
        """Back pain maps to M54.5 at confidence 85."""
        suggestions = suggest_icd10(knowledge_base, "Patient reports lower back pain for six weeks")

        assert len(suggestions) == 1
        suggestion = suggestions[0]
        assert suggestion.code == "M54.5"
        assert suggestion.confidence == 85
        assert suggestion.type == CodeType.ICD10
        assert suggestion.description == "Low back pain"
        assert "Pain scale rating (0-10)" in suggestion.documentation_requirements

    @pytest.mark.parametrize("keyword", ["annual", "physical", "checkup", "preventive"])
    def test_preventive_keywords(self, knowledge_base, keyword):
        """Preventive visit keywords map to Z00.00 at confidence 90."""
        suggestions = suggest_icd10(knowledge_base, f"Here for {keyword.upper()} visit")
        assert [(s.code, s.confidence) for s in suggestions] == [("Z00.00", 90)]

    def test_multiple_matches_in_table_order(self, knowledge_base):
        """All matching entries are returned."""
        suggestions = suggest_icd10(knowledge_base, "Annual checkup, also mentions lower back stiffness")
        assert [s.code for s in suggestions] == ["M54.5", "Z00.00"]

    def test_no_match(self, knowledge_base):
        """Unmatched text yields an empty list."""
        assert suggest_icd10(knowledge_base, "Sore throat and fever") == []
        assert suggest_icd10(knowledge_base, "") == []

    def test_missing_reference_entry_is_skipped(self):
        """Keywords pointing at codes absent from the catalog are ignored."""
        knowledge_base = KnowledgeBase.create(icd10_codes=[e for e in ICD10_ENTRIES if e.code != "M54.5"])
        assert suggest_icd10(knowledge_base, "lower back pain") == []


class TestCPTSuggestions:
    """Test encounter-type CPT suggestions."""

    @pytest.mark.parametrize("encounter_type", ["Follow-up", "Office Visit"])
    def test_office_visit(self, knowledge_base, make_encounter, encounter_type):
        """Office and follow-up visits map to 99213 at confidence 80."""
        suggestions = suggest_cpt(knowledge_base, make_encounter(encounter_type=encounter_type), "")

        assert len(suggestions) == 1
        assert suggestions[0].code == "99213"
        assert suggestions[0].confidence == 80
        assert suggestions[0].type == CodeType.CPT
        assert "Chief complaint" in suggestions[0].documentation_requirements

    @pytest.mark.parametrize("encounter_type", ["Annual Physical", "Preventive"])
    def test_preventive_visit(self, knowledge_base, make_encounter, encounter_type):
        """Preventive visits map to 99395 at confidence 95."""
        suggestions = suggest_cpt(knowledge_base, make_encounter(encounter_type=encounter_type), "")
        assert [(s.code, s.confidence) for s in suggestions] == [("99395", 95)]

    def test_encounter_type_must_match_exactly(self, knowledge_base, make_encounter):
        """Encounter type matching is exact."""
        assert suggest_cpt(knowledge_base, make_encounter(encounter_type="office visit"), "") == []
        assert suggest_cpt(knowledge_base, make_encounter(encounter_type="Telehealth"), "") == []


class TestBestSuggestion:
    """Test picking the highest-confidence suggestion."""

    def test_highest_confidence_wins(self):
        suggestions = [
            CodeSuggestion(code="A", description="a", type=CodeType.ICD10, confidence=85),
            CodeSuggestion(code="B", description="b", type=CodeType.ICD10, confidence=90),
        ]
        assert best_suggestion(suggestions).code == "B"

    def test_tie_keeps_first(self):
        suggestions = [
            CodeSuggestion(code="A", description="a", type=CodeType.CPT, confidence=80),
            CodeSuggestion(code="B", description="b", type=CodeType.CPT, confidence=80),
        ]
        assert best_suggestion(suggestions).code == "A"

    def test_empty(self):
        assert best_suggestion([]) is None
