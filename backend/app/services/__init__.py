"""Services for the Encounter Compliance Risk Engine.

Services implement the scoring logic:
- compliance_rules: rule catalog and evaluator
- knowledge_base: ICD-10/CPT reference data and CMS guidelines
- code_suggester: ICD-10/CPT code suggestions
- risk_factors: documentation, coding, compliance and historical scorers
- risk_aggregator: weighted risk, recommendations, portfolio analytics
- compliance_engine: facade used by the API layer
"""

from app.services.code_suggester import CodeSuggestion, best_suggestion, suggest_cpt, suggest_icd10
from app.services.compliance_engine import (
    ComplianceCheckResult,
    ComplianceEngine,
    get_compliance_engine,
    reset_compliance_engine,
)
from app.services.compliance_rules import DEFAULT_RULES, ComplianceRule, Flag, evaluate_rules
from app.services.knowledge_base import (
    CPTEntry,
    Guideline,
    ICD10Entry,
    KnowledgeBase,
    build_default_knowledge_base,
)
from app.services.risk_aggregator import PortfolioReport, Recommendation, RiskAssessment, RiskFactors
from app.services.risk_factors import RiskFactor

__all__ = [
    "CodeSuggestion",
    "best_suggestion",
    "suggest_cpt",
    "suggest_icd10",
    "ComplianceCheckResult",
    "ComplianceEngine",
    "get_compliance_engine",
    "reset_compliance_engine",
    "DEFAULT_RULES",
    "ComplianceRule",
    "Flag",
    "evaluate_rules",
    "CPTEntry",
    "Guideline",
    "ICD10Entry",
    "KnowledgeBase",
    "build_default_knowledge_base",
    "PortfolioReport",
    "Recommendation",
    "RiskAssessment",
    "RiskFactors",
    "RiskFactor",
]
