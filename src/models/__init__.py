"""
Data models for MRONJ Risk.
"""

from .patient import (
    Sex,
    TransgenderType,
    HormoneTherapyDuration,
    MedicationStatus,
    DrugClass,
    DrugSubType,
    DrugName,
    AdministrationRoute,
    Indication,
    Frequency,
    DentalProcedure,
    PROCEDURE_ORDER,
    RiskLevel,
    ChecklistPriority,
    MedicationRecord,
    FutureMedicationPlan,
    PatientProfile,
    MedicationContribution,
    RiskAssessment,
    TreatmentGuidance,
    ChecklistItem,
    months_between,
)

__all__ = [
    "Sex",
    "TransgenderType",
    "HormoneTherapyDuration",
    "MedicationStatus",
    "DrugClass",
    "DrugSubType",
    "DrugName",
    "AdministrationRoute",
    "Indication",
    "Frequency",
    "DentalProcedure",
    "PROCEDURE_ORDER",
    "RiskLevel",
    "ChecklistPriority",
    "MedicationRecord",
    "FutureMedicationPlan",
    "PatientProfile",
    "MedicationContribution",
    "RiskAssessment",
    "TreatmentGuidance",
    "ChecklistItem",
    "months_between",
]
