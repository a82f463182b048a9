"""Medical Knowledge Base.

Immutable reference data used by the compliance engine:

- ICD-10-CM diagnosis entries with documentation requirements
- CPT procedure entries with documentation requirements and modifiers
- CMS documentation guidelines
- The compliance rule catalog

A KnowledgeBase is built once and handed to the engine. It holds only
tuples and read-only mappings, so one instance can be shared across
threads without locking.

Note: CPT codes are owned by the American Medical Association (AMA).
Code suggestions should be verified by qualified medical coders.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from types import MappingProxyType

from app.schemas.base import CodeType
from app.services.compliance_rules import DEFAULT_RULES, ComplianceRule


@dataclass(frozen=True)
class ICD10Entry:
    """An ICD-10-CM code with documentation metadata."""

    code: str
    description: str
    category: str
    required_documentation: tuple[str, ...] = ()
    excluded_codes: tuple[str, ...] = ()
    common_combinations: tuple[str, ...] = ()
    billability_requirements: tuple[str, ...] = ()


@dataclass(frozen=True)
class CPTEntry:
    """A CPT code with documentation metadata."""

    code: str
    description: str
    category: str
    required_elements: tuple[str, ...] = ()
    time_requirements: str | None = None
    documentation_requirements: tuple[str, ...] = ()
    modifiers: tuple[str, ...] = ()
    typical_icd10_combinations: tuple[str, ...] = ()


@dataclass(frozen=True)
class Guideline:
    """A CMS documentation guideline."""

    id: str
    title: str
    category: str
    description: str
    requirements: tuple[str, ...] = ()
    audit_risks: tuple[str, ...] = ()
    effective_date: str = ""
    last_updated: str = ""


@dataclass(frozen=True)
class KnowledgeBase:
    """Read-only catalogs consulted by the engine."""

    icd10_codes: Mapping[str, ICD10Entry]
    cpt_codes: Mapping[str, CPTEntry]
    guidelines: tuple[Guideline, ...]
    rules: tuple[ComplianceRule, ...]

    @classmethod
    def create(
        cls,
        icd10_codes: Iterable[ICD10Entry] = (),
        cpt_codes: Iterable[CPTEntry] = (),
        guidelines: Iterable[Guideline] = (),
        rules: Sequence[ComplianceRule] = (),
    ) -> "KnowledgeBase":
        """Build a knowledge base from entry lists, indexing codes by value."""
        rule_ids = [rule.id for rule in rules]
        if len(rule_ids) != len(set(rule_ids)):
            raise ValueError(f"Duplicate compliance rule ids: {rule_ids}")

        return cls(
            icd10_codes=MappingProxyType({entry.code: entry for entry in icd10_codes}),
            cpt_codes=MappingProxyType({entry.code: entry for entry in cpt_codes}),
            guidelines=tuple(guidelines),
            rules=tuple(rules),
        )

    def get_entry(self, code: str, kind: CodeType) -> ICD10Entry | CPTEntry | None:
        """Look up a reference entry by code and code system."""
        if kind == CodeType.ICD10:
            return self.icd10_codes.get(code)
        return self.cpt_codes.get(code)

    def get_stats(self) -> dict:
        """Get statistics about the loaded catalogs."""
        return {
            "icd10_codes": len(self.icd10_codes),
            "cpt_codes": len(self.cpt_codes),
            "guidelines": len(self.guidelines),
            "rules": len(self.rules),
        }


# ============================================================================
# Default Reference Data
# ============================================================================

ICD10_ENTRIES: tuple[ICD10Entry, ...] = (
    ICD10Entry(
        code="M54.5",
        description="Low back pain",
        category="Musculoskeletal",
        required_documentation=(
            "Pain location (specific region of back)",
            "Pain duration (acute vs chronic)",
            "Pain characteristics (sharp, dull, radiating)",
            "Aggravating and alleviating factors",
            "Pain scale rating (0-10)",
            "Impact on daily activities",
        ),
        excluded_codes=("M54.9",),
        common_combinations=("M79.3", "M25.511"),
        billability_requirements=(
            "Physical examination findings required",
            "Documentation of treatment plan",
            "Assessment of pain severity",
        ),
    ),
    ICD10Entry(
        code="M54.9",
        description="Dorsalgia, unspecified",
        category="Musculoskeletal",
        required_documentation=(
            "General back pain documentation",
            "Duration of symptoms",
            "Physical examination findings",
        ),
        excluded_codes=("M54.5",),
        common_combinations=("M79.3",),
        billability_requirements=(
            "Physical examination required",
            "Documentation of symptoms",
        ),
    ),
    ICD10Entry(
        code="Z00.00",
        description="Encounter for general adult medical examination without abnormal findings",
        category="Preventive Care",
        required_documentation=(
            "Comprehensive history",
            "Complete physical examination",
            "Review of systems",
            "Assessment of health status",
            "Preventive counseling",
            "Age-appropriate screening recommendations",
        ),
        common_combinations=("Z87.891", "Z23"),
        billability_requirements=(
            "Complete physical examination documented",
            "Review of systems documented",
            "Age-appropriate counseling provided",
        ),
    ),
)

CPT_ENTRIES: tuple[CPTEntry, ...] = (
    CPTEntry(
        code="99213",
        description="Office/outpatient visit, established patient, level 3",
        category="Evaluation and Management",
        required_elements=(
            "Detailed history",
            "Detailed examination",
            "Medical decision making of low complexity",
        ),
        time_requirements="Typically 15 minutes",
        documentation_requirements=(
            "Chief complaint",
            "History of present illness (4+ elements)",
            "Review of systems (2-9 systems)",
            "Examination of affected body area and other symptomatic systems",
            "Assessment and plan with multiple treatment options",
        ),
        modifiers=("25", "57"),
        typical_icd10_combinations=("M54.5", "M54.9", "I10"),
    ),
    CPTEntry(
        code="99395",
        description="Periodic comprehensive preventive medicine, established patient, 18-39 years",
        category="Preventive Medicine",
        required_elements=(
            "Comprehensive history",
            "Comprehensive examination",
            "Counseling/anticipatory guidance",
            "Risk factor reduction interventions",
        ),
        documentation_requirements=(
            "Complete medical history",
            "Family and social history",
            "Complete physical examination",
            "Age and gender appropriate screening",
            "Health counseling and education",
        ),
        typical_icd10_combinations=("Z00.00", "Z01.419"),
    ),
)

CMS_GUIDELINES: tuple[Guideline, ...] = (
    Guideline(
        id="cms-eval-mgmt-2023",
        title="Evaluation and Management Documentation Guidelines",
        category="Documentation",
        description="CMS requirements for E/M service documentation and billing",
        requirements=(
            "Medical necessity must be clearly documented",
            "Level of service must match documentation",
            "Chief complaint must be documented",
            "History of present illness required for levels 2-5",
            "Physical examination must match service level",
        ),
        audit_risks=(
            "Upcoding - billing higher level than documented",
            "Missing medical necessity justification",
            "Insufficient documentation for billed level",
        ),
        effective_date="2023-01-01",
        last_updated="2024-12-01",
    ),
    Guideline(
        id="cms-pain-mgmt-2024",
        title="Chronic Pain Management Documentation",
        category="Clinical",
        description="CMS guidelines for chronic pain documentation and opioid prescribing",
        requirements=(
            "Pain assessment using standardized scale",
            "Functional assessment and impact documentation",
            "Prior treatment attempts documented",
            "Non-pharmacological interventions considered",
            "Risk assessment for controlled substances",
        ),
        audit_risks=(
            "Inadequate pain assessment documentation",
            "Missing functional impact assessment",
            "Insufficient justification for treatment plan",
        ),
        effective_date="2024-01-01",
        last_updated="2024-12-01",
    ),
)


def build_default_knowledge_base() -> KnowledgeBase:
    """Build the knowledge base with the bundled reference catalogs."""
    return KnowledgeBase.create(
        icd10_codes=ICD10_ENTRIES,
        cpt_codes=CPT_ENTRIES,
        guidelines=CMS_GUIDELINES,
        rules=DEFAULT_RULES,
    )
