"""Tests for the medical knowledge base."""

import pytest

from app.schemas.base import CodeType, Severity
from app.services.compliance_rules import DEFAULT_RULES, ComplianceRule
from app.services.knowledge_base import (
    CMS_GUIDELINES,
    CPTEntry,
    ICD10Entry,
    KnowledgeBase,
    build_default_knowledge_base,
)


class TestDefaultKnowledgeBase:
    """Test the bundled reference catalogs."""

    def setup_method(self):
        self.knowledge_base = build_default_knowledge_base()

    def test_stats(self):
        assert self.knowledge_base.get_stats() == {
            "icd10_codes": 3,
            "cpt_codes": 2,
            "guidelines": 2,
            "rules": 3,
        }

    def test_icd10_entries(self):
        entry = self.knowledge_base.get_entry("M54.5", CodeType.ICD10)
        assert isinstance(entry, ICD10Entry)
        assert entry.excluded_codes == ("M54.9",)
        assert self.knowledge_base.get_entry("Z00.00", CodeType.ICD10).category == "Preventive Care"

    def test_cpt_entries(self):
        entry = self.knowledge_base.get_entry("99213", CodeType.CPT)
        assert isinstance(entry, CPTEntry)
        assert entry.modifiers == ("25", "57")
        assert entry.time_requirements == "Typically 15 minutes"
        assert "Z00.00" in self.knowledge_base.get_entry("99395", CodeType.CPT).typical_icd10_combinations

    def test_code_system_is_respected(self):
        """An ICD-10 code is not found as a CPT code."""
        assert self.knowledge_base.get_entry("M54.5", CodeType.CPT) is None
        assert self.knowledge_base.get_entry("99999", CodeType.CPT) is None

    def test_rules_are_default_catalog(self):
        assert self.knowledge_base.rules == DEFAULT_RULES

    def test_guideline_ids(self):
        assert [g.id for g in CMS_GUIDELINES] == ["cms-eval-mgmt-2023", "cms-pain-mgmt-2024"]


class TestImmutability:
    """Test that catalogs cannot be changed after construction."""

    def test_code_maps_are_read_only(self):
        knowledge_base = build_default_knowledge_base()
        with pytest.raises(TypeError):
            knowledge_base.icd10_codes["X00"] = ICD10Entry(code="X00", description="x", category="x")

    def test_knowledge_base_is_frozen(self):
        knowledge_base = build_default_knowledge_base()
        with pytest.raises(AttributeError):
            knowledge_base.rules = ()

    def test_source_mapping_is_copied(self):
        """Changing the input list after construction has no effect."""
        entries = [CPTEntry(code="99211", description="Nurse visit", category="Evaluation and Management")]
        knowledge_base = KnowledgeBase.create(cpt_codes=entries)
        entries.clear()
        assert knowledge_base.get_entry("99211", CodeType.CPT) is not None


class TestCreate:
    """Test building custom knowledge bases."""

    def test_empty(self):
        knowledge_base = KnowledgeBase.create()
        assert knowledge_base.get_stats() == {"icd10_codes": 0, "cpt_codes": 0, "guidelines": 0, "rules": 0}

    def test_duplicate_rule_ids_rejected(self):
        rule = ComplianceRule(
            id="dup",
            name="Dup",
            category="Test",
            severity=Severity.LOW,
            description="",
            check=lambda encounter, transcript: False,
            message="",
            explanation="",
        )
        with pytest.raises(ValueError, match="Duplicate"):
            KnowledgeBase.create(rules=[rule, rule])
