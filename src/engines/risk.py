"""
MRONJ risk scoring engine.

Maps a patient's medications and personal risk factors to a risk tier,
recommendation and citation list for each dental procedure. Scoring is a
weighted formula with threshold cutoffs; it reads its input and never
modifies it.
"""

from __future__ import annotations

import logging
from typing import Sequence

from pydantic import BaseModel

from knowledge.citations import citations_for_drug
from knowledge.recommendations import NO_MEDICATION_RECOMMENDATION, get_recommendation
from src.exceptions import InputContractError
from src.models import (
    PROCEDURE_ORDER,
    AdministrationRoute,
    DentalProcedure,
    MedicationContribution,
    MedicationRecord,
    PatientProfile,
    RiskAssessment,
    RiskLevel,
)

logger = logging.getLogger(__name__)


class DrugRiskRule(BaseModel):
    """Base risk percentage for drugs whose name contains one of the substrings."""
    substrings: tuple[str, ...]
    oral: float
    injection: float

    def matches(self, drug_name: str) -> bool:
        return any(s in drug_name for s in self.substrings)

    def base_risk(self, route: AdministrationRoute | None) -> float:
        return self.oral if route == AdministrationRoute.ORAL else self.injection


# Checked in order; the first matching rule wins
DRUG_RISK_RULES: tuple[DrugRiskRule, ...] = (
    DrugRiskRule(substrings=("Zoledronate", "Denosumab"), oral=0.5, injection=2.0),
    DrugRiskRule(substrings=("Alendronate", "Risedronate"), oral=0.1, injection=0.1),
    DrugRiskRule(substrings=("Ibandronate",), oral=0.1, injection=0.2),
    DrugRiskRule(substrings=("Bevacizumab",), oral=0.2, injection=0.2),
)
DEFAULT_BASE_RISK = 0.1

CANCER_MULTIPLIER = 3.0

# (months exceeded, multiplier), longest first
DURATION_MULTIPLIERS: tuple[tuple[int, float], ...] = (
    (48, 2.5),
    (24, 1.5),
)

# Patient attribute -> multiplier; applicable ones compound
PATIENT_MULTIPLIERS: tuple[tuple[str, float], ...] = (
    ("diabetes", 1.8),
    ("steroid_use", 1.4),
    ("anemia", 1.3),
    ("heavy_smoker", 1.3),
    ("periodontal_issues", 1.5),
)

# Thresholds on the maximum medication risk percentage
NON_INVASIVE_MODERATE = 2.0
INVASIVE_HIGH = 3.0
INVASIVE_MODERATE = 1.0


def base_risk_percentage(medication: MedicationRecord) -> float:
    """Base risk from the drug-name rule list and route."""
    name = medication.drug_name.value
    for rule in DRUG_RISK_RULES:
        if rule.matches(name):
            return rule.base_risk(medication.route)
    return DEFAULT_BASE_RISK


def duration_multiplier(duration_months: int) -> float:
    for months, multiplier in DURATION_MULTIPLIERS:
        if duration_months > months:
            return multiplier
    return 1.0


def patient_multiplier(patient: PatientProfile) -> float:
    """Product of the multipliers for every risk factor the patient has."""
    multiplier = 1.0
    for attribute, factor in PATIENT_MULTIPLIERS:
        if getattr(patient, attribute):
            multiplier *= factor
    return multiplier


def calculate_drug_risk_percentage(
    medication: MedicationRecord,
    patient: PatientProfile,
) -> float:
    """
    Estimated MRONJ risk percentage attributable to one medication.

    Raises:
        InputContractError: if the medication's duration was never computed
    """
    if medication.duration_months is None:
        raise InputContractError(
            f"duration was not computed for {medication.drug_name.value}",
            field="duration_months",
        )

    risk = base_risk_percentage(medication)
    if medication.indication.is_cancer_related:
        risk *= CANCER_MULTIPLIER
    risk *= duration_multiplier(medication.duration_months)
    return risk * patient_multiplier(patient)


def classify_procedure(
    procedure: DentalProcedure,
    max_risk_percentage: float,
    has_systemic_risk_factor: bool,
) -> RiskLevel:
    """Risk tier for a procedure given the highest medication risk."""
    if procedure.is_invasive:
        if max_risk_percentage > INVASIVE_HIGH or has_systemic_risk_factor:
            return RiskLevel.HIGH
        if max_risk_percentage > INVASIVE_MODERATE:
            return RiskLevel.MODERATE
        return RiskLevel.LOW

    if max_risk_percentage > NON_INVASIVE_MODERATE:
        return RiskLevel.MODERATE
    return RiskLevel.LOW


def assess_risk(
    patient: PatientProfile,
    medications: Sequence[MedicationRecord] | None = None,
) -> list[RiskAssessment]:
    """
    Assess MRONJ risk for every dental procedure.

    Args:
        patient: Snapshot of the patient's profile and risk factors
        medications: Medications to score; defaults to the patient's own list

    Returns:
        One assessment per procedure, in canonical procedure order
    """
    if medications is None:
        medications = patient.medications

    if not medications and not patient.has_antiresorptive_med:
        return [
            RiskAssessment(
                procedure=procedure,
                risk_level=RiskLevel.LOW,
                recommendation=NO_MEDICATION_RECOMMENDATION,
            )
            for procedure in PROCEDURE_ORDER
        ]

    contributions = []
    citations: list[str] = []
    for medication in medications:
        risk = calculate_drug_risk_percentage(medication, patient)
        logger.debug("%s: %.3f%%", medication.drug_name.value, risk)
        contributions.append(MedicationContribution(
            drug_name=medication.drug_name.value,
            risk_percentage=risk,
        ))
        for citation in citations_for_drug(medication.drug_name.value):
            if citation not in citations:
                citations.append(citation)

    # The antiresorptive flag alone, with no recorded medication, scores as zero risk
    max_risk = max((c.risk_percentage for c in contributions), default=0.0)
    systemic = patient.has_systemic_risk_factor

    assessments = []
    for procedure in PROCEDURE_ORDER:
        risk_level = classify_procedure(procedure, max_risk, systemic)
        assessments.append(RiskAssessment(
            procedure=procedure,
            risk_level=risk_level,
            recommendation=get_recommendation(
                procedure, risk_level, patient.periodontal_issues
            ),
            medication_contributions=list(contributions),
            citations=list(citations),
        ))

    logger.info(
        "Assessed %d medication(s): max risk %.2f%%, systemic factors %s",
        len(contributions), max_risk, "present" if systemic else "absent",
    )
    return assessments
