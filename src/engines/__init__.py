"""
Risk scoring and guidance engines.
"""

from .risk import (
    DRUG_RISK_RULES,
    DrugRiskRule,
    assess_risk,
    calculate_drug_risk_percentage,
    classify_procedure,
)
from .guidance import (
    GuidanceCatalog,
    get_pre_treatment_checklist,
    get_treatment_guidance,
    is_about_to_start,
)

__all__ = [
    "DRUG_RISK_RULES",
    "DrugRiskRule",
    "assess_risk",
    "calculate_drug_risk_percentage",
    "classify_procedure",
    "GuidanceCatalog",
    "get_pre_treatment_checklist",
    "get_treatment_guidance",
    "is_about_to_start",
]
