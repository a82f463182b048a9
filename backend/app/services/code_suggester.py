"""ICD-10 and CPT Code Suggester.

Proposes diagnosis codes from transcript keywords and procedure codes from
the encounter type. Each suggestion carries a confidence score (0-100) and
the documentation a coder still has to confirm.

Matching is keyword containment on the lower-cased transcript. All matching
entries are returned in table order; use best_suggestion() to pick the
highest-confidence one. No match is an empty list, never an error.
"""

from dataclasses import dataclass, field

from app.schemas.base import CodeType
from app.schemas.encounter import Encounter
from app.services.knowledge_base import KnowledgeBase


@dataclass
class CodeSuggestion:
    """A suggested ICD-10 or CPT code."""

    code: str
    description: str
    type: CodeType
    confidence: int  # 0-100
    documentation_requirements: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class KeywordMapping:
    """Keywords that point to a diagnosis code."""

    code: str
    keywords: tuple[str, ...]
    confidence: int


@dataclass(frozen=True)
class EncounterTypeMapping:
    """Encounter types that point to a procedure code."""

    code: str
    encounter_types: tuple[str, ...]
    confidence: int


ICD10_KEYWORD_MAPPINGS: tuple[KeywordMapping, ...] = (
    KeywordMapping(code="M54.5", keywords=("back pain", "lower back"), confidence=85),
    KeywordMapping(code="Z00.00", keywords=("annual", "physical", "checkup", "preventive"), confidence=90),
)

CPT_ENCOUNTER_TYPE_MAPPINGS: tuple[EncounterTypeMapping, ...] = (
    EncounterTypeMapping(code="99213", encounter_types=("Follow-up", "Office Visit"), confidence=80),
    EncounterTypeMapping(code="99395", encounter_types=("Annual Physical", "Preventive"), confidence=95),
)


def suggest_icd10(knowledge_base: KnowledgeBase, transcript: str) -> list[CodeSuggestion]:
    """Suggest ICD-10 codes from transcript keywords."""
    text = transcript.lower()
    suggestions: list[CodeSuggestion] = []

    for mapping in ICD10_KEYWORD_MAPPINGS:
        if not any(keyword in text for keyword in mapping.keywords):
            continue
        entry = knowledge_base.icd10_codes.get(mapping.code)
        if entry is None:
            continue
        suggestions.append(
            CodeSuggestion(
                code=entry.code,
                description=entry.description,
                type=CodeType.ICD10,
                confidence=mapping.confidence,
                documentation_requirements=list(entry.required_documentation),
            )
        )

    return suggestions


def suggest_cpt(knowledge_base: KnowledgeBase, encounter: Encounter, transcript: str) -> list[CodeSuggestion]:
    """Suggest CPT codes from the encounter type.

    The transcript is accepted for parity with suggest_icd10 but the
    current table keys only on the encounter type.
    """
    suggestions: list[CodeSuggestion] = []

    for mapping in CPT_ENCOUNTER_TYPE_MAPPINGS:
        if encounter.encounter_type not in mapping.encounter_types:
            continue
        entry = knowledge_base.cpt_codes.get(mapping.code)
        if entry is None:
            continue
        suggestions.append(
            CodeSuggestion(
                code=entry.code,
                description=entry.description,
                type=CodeType.CPT,
                confidence=mapping.confidence,
                documentation_requirements=list(entry.documentation_requirements),
            )
        )

    return suggestions


def best_suggestion(suggestions: list[CodeSuggestion]) -> CodeSuggestion | None:
    """Highest-confidence suggestion; the earliest wins a tie."""
    best: CodeSuggestion | None = None
    for suggestion in suggestions:
        if best is None or suggestion.confidence > best.confidence:
            best = suggestion
    return best
