"""
Core data models for MRONJ Risk.

These Pydantic models define the patient snapshot handed to the risk scorer,
the medication records it reads, and the assessments it produces. Patient and
medication models are frozen: the store replaces them instead of mutating.
"""

from __future__ import annotations

import math
from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


# =============================================================================
# ENUMS
# =============================================================================


class Sex(str, Enum):
    MALE = "male"
    FEMALE = "female"
    TRANSGENDER = "transgender"


class TransgenderType(str, Enum):
    MALE_TO_FEMALE = "male-to-female"
    FEMALE_TO_MALE = "female-to-male"
    OTHER = "other"


class HormoneTherapyDuration(str, Enum):
    UNDER_5_YEARS = "under-5-years"
    FIVE_TO_10_YEARS = "5-10-years"
    OVER_10_YEARS = "over-10-years"


class MedicationStatus(str, Enum):
    """Where the patient stands with antiresorptive therapy."""
    CURRENT_OR_PAST = "current-or-past"  # Using now, or used before
    ABOUT_TO_START = "about-to-start"  # Never used, starting soon


class DrugClass(str, Enum):
    ANTIRESORPTIVE = "antiresorptive"
    ANTIANGIOGENIC = "antiangiogenic"


class DrugSubType(str, Enum):
    BISPHOSPHONATE_IV = "bisphosphonate-iv"
    BISPHOSPHONATE_ORAL = "bisphosphonate-oral"
    RANKL_INHIBITOR = "rank-l-inhibitor"
    MONOCLONAL_ANTIBODY = "monoclonal-antibody"
    ANTIANGIOGENIC_AGENT = "antiangiogenic-agent"


class DrugName(str, Enum):
    # Bisphosphonates - IV
    ZOLEDRONATE_ZOMETA = "Zoledronate (Zometa)"
    ZOLEDRONATE_RECLAST = "Zoledronate (Reclast)"
    PAMIDRONATE_AREDIA = "Pamidronate (Aredia)"
    IBANDRONATE_BONIVA_IV = "Ibandronate (Boniva IV)"

    # Bisphosphonates - Oral
    ALENDRONATE_FOSAMAX = "Alendronate (Fosamax)"
    RISEDRONATE_ACTONEL = "Risedronate (Actonel)"
    IBANDRONATE_BONIVA = "Ibandronate (Boniva)"

    # RANK-L inhibitors
    DENOSUMAB_PROLIA_XGEVA = "Denosumab (Prolia/Xgeva)"
    DENOSUMAB_PROLIA = "Denosumab (Prolia)"
    DENOSUMAB_XGEVA = "Denosumab (Xgeva)"

    # Monoclonal antibodies
    ROMOSOZUMAB_EVENITY = "Romosozumab (Evenity)"

    # Antiangiogenic
    BEVACIZUMAB_AVASTIN = "Bevacizumab (Avastin)"
    SUNITINIB_SUTENT = "Sunitinib (Sutent)"
    CABOZANTINIB_CABOMETYX = "Cabozantinib (Cabometyx)"

    @property
    def sub_type(self) -> DrugSubType:
        return DRUG_SUB_TYPES[self]

    @property
    def drug_class(self) -> DrugClass:
        if self.sub_type == DrugSubType.ANTIANGIOGENIC_AGENT:
            return DrugClass.ANTIANGIOGENIC
        return DrugClass.ANTIRESORPTIVE


DRUG_SUB_TYPES: dict[DrugName, DrugSubType] = {
    DrugName.ZOLEDRONATE_ZOMETA: DrugSubType.BISPHOSPHONATE_IV,
    DrugName.ZOLEDRONATE_RECLAST: DrugSubType.BISPHOSPHONATE_IV,
    DrugName.PAMIDRONATE_AREDIA: DrugSubType.BISPHOSPHONATE_IV,
    DrugName.IBANDRONATE_BONIVA_IV: DrugSubType.BISPHOSPHONATE_IV,
    DrugName.ALENDRONATE_FOSAMAX: DrugSubType.BISPHOSPHONATE_ORAL,
    DrugName.RISEDRONATE_ACTONEL: DrugSubType.BISPHOSPHONATE_ORAL,
    DrugName.IBANDRONATE_BONIVA: DrugSubType.BISPHOSPHONATE_ORAL,
    DrugName.DENOSUMAB_PROLIA_XGEVA: DrugSubType.RANKL_INHIBITOR,
    DrugName.DENOSUMAB_PROLIA: DrugSubType.RANKL_INHIBITOR,
    DrugName.DENOSUMAB_XGEVA: DrugSubType.RANKL_INHIBITOR,
    DrugName.ROMOSOZUMAB_EVENITY: DrugSubType.MONOCLONAL_ANTIBODY,
    DrugName.BEVACIZUMAB_AVASTIN: DrugSubType.ANTIANGIOGENIC_AGENT,
    DrugName.SUNITINIB_SUTENT: DrugSubType.ANTIANGIOGENIC_AGENT,
    DrugName.CABOZANTINIB_CABOMETYX: DrugSubType.ANTIANGIOGENIC_AGENT,
}


class AdministrationRoute(str, Enum):
    ORAL = "oral"
    INJECTION = "injection"


class Indication(str, Enum):
    OSTEOPOROSIS = "osteoporosis"
    MALIGNANCY = "malignancy/bone-metastasis"
    MULTIPLE_MYELOMA = "multiple-myeloma"
    OTHER = "other"

    @property
    def is_cancer_related(self) -> bool:
        return self in (Indication.MALIGNANCY, Indication.MULTIPLE_MYELOMA)


class Frequency(str, Enum):
    DAILY = "daily"
    MONTHLY = "monthly"
    BIANNUAL = "biannual"


class DentalProcedure(str, Enum):
    NON_INVASIVE = "non-invasive"  # Cleaning, fillings, check-ups
    EXTRACTION = "extraction"
    PERIODONTAL_SURGERY = "periodontal-surgery"
    IMPLANT = "implant"
    ROOT_CANAL = "root-canal"

    @property
    def label(self) -> str:
        return PROCEDURE_LABELS[self]

    @property
    def is_invasive(self) -> bool:
        return self in (
            DentalProcedure.EXTRACTION,
            DentalProcedure.PERIODONTAL_SURGERY,
            DentalProcedure.IMPLANT,
        )


PROCEDURE_LABELS: dict[DentalProcedure, str] = {
    DentalProcedure.NON_INVASIVE: "Non-invasive treatment",
    DentalProcedure.EXTRACTION: "Tooth extraction",
    DentalProcedure.PERIODONTAL_SURGERY: "Periodontal surgery",
    DentalProcedure.IMPLANT: "Dental implant",
    DentalProcedure.ROOT_CANAL: "Root canal treatment",
}

# Canonical order in which assessments are produced and reported
PROCEDURE_ORDER: tuple[DentalProcedure, ...] = (
    DentalProcedure.NON_INVASIVE,
    DentalProcedure.EXTRACTION,
    DentalProcedure.PERIODONTAL_SURGERY,
    DentalProcedure.IMPLANT,
    DentalProcedure.ROOT_CANAL,
)


class RiskLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"

    @property
    def label(self) -> str:
        return f"{self.value.title()} risk"


class ChecklistPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    STANDARD = "standard"


# =============================================================================
# MEDICATIONS
# =============================================================================


class MedicationRecord(BaseModel):
    """One antiresorptive or antiangiogenic drug entry in the patient's history."""
    model_config = ConfigDict(frozen=True)

    drug_name: DrugName
    route: AdministrationRoute | None = Field(
        default=None,
        description="Administration route; treated as injection when unknown"
    )
    indication: Indication
    start_year: int = Field(ge=1900, le=2200)
    start_month: int = Field(ge=1, le=12)
    frequency: Frequency
    is_stopped: bool = False
    stop_year: int | None = Field(default=None, ge=1900, le=2200)
    stop_month: int | None = Field(default=None, ge=1, le=12)
    duration_months: int | None = Field(
        default=None,
        ge=0,
        description="Months between start and stop (or now); computed when saved"
    )

    @property
    def drug_class(self) -> DrugClass:
        return self.drug_name.drug_class

    @property
    def sub_type(self) -> DrugSubType:
        return self.drug_name.sub_type

    @property
    def start_date(self) -> date:
        return date(self.start_year, self.start_month, 1)

    @property
    def stop_date(self) -> date | None:
        if not self.is_stopped or self.stop_year is None or self.stop_month is None:
            return None
        return date(self.stop_year, self.stop_month, 1)


class FutureMedicationPlan(BaseModel):
    """A drug the patient has not used yet but is scheduled to start."""
    model_config = ConfigDict(frozen=True)

    reason: str = ""
    drug_name: str = ""
    start_year: int | None = None
    start_month: int | None = Field(default=None, ge=1, le=12)
    route: AdministrationRoute | None = None


# =============================================================================
# PATIENT
# =============================================================================


class PatientProfile(BaseModel):
    """Everything the questionnaire records about one patient."""
    model_config = ConfigDict(frozen=True)

    # Personal info
    name: str = ""
    birth_year: int | None = None
    birth_month: int | None = Field(default=None, ge=1, le=12)
    birth_day: int | None = Field(default=None, ge=1, le=31)
    id_number: str = ""
    age: int | None = Field(default=None, ge=0, le=150)

    # Medical history
    sex: Sex | None = None
    transgender_type: TransgenderType | None = None
    has_hormone_therapy: bool = False
    hormone_therapy_duration: HormoneTherapyDuration | None = None
    systemic_diseases: tuple[str, ...] = ()
    has_radiotherapy: bool = False
    radiotherapy_details: str = ""
    has_cancer: bool = False
    cancer_history: str = ""
    other_conditions: str = ""

    # Medication history
    has_antiresorptive_med: bool = False
    medication_status: MedicationStatus | None = None
    future_medication: FutureMedicationPlan | None = None
    medications: tuple[MedicationRecord, ...] = ()

    # MRONJ-specific risk factors
    steroid_use: bool = False
    diabetes: bool = False  # HbA1c >= 7.0%
    anemia: bool = False  # Hb < 10 g/dL
    heavy_smoker: bool = False  # > 10 cigarettes/day
    periodontal_issues: bool = False  # Periodontal disease or spontaneous tooth pain

    # Physical measurements
    height_cm: float | None = Field(default=None, gt=0)
    weight_kg: float | None = Field(default=None, gt=0)

    def _exact_bmi(self) -> float | None:
        if not self.height_cm or not self.weight_kg:
            return None
        height_m = self.height_cm / 100
        return self.weight_kg / (height_m * height_m)

    @computed_field
    @property
    def bmi(self) -> float | None:
        """BMI rounded to one decimal, for display."""
        exact = self._exact_bmi()
        return round(exact, 1) if exact is not None else None

    @computed_field
    @property
    def is_obese(self) -> bool:
        # Compared before rounding
        exact = self._exact_bmi()
        return exact is not None and exact >= OBESITY_BMI

    @computed_field
    @property
    def age_years(self) -> int | None:
        if self.age is not None:
            return self.age
        if self.birth_year is None:
            return None
        today = date.today()
        birthday = (self.birth_month or 1, self.birth_day or 1)
        return today.year - self.birth_year - ((today.month, today.day) < birthday)

    @property
    def birth_date_label(self) -> str:
        parts = [str(p) for p in (self.birth_year, self.birth_month, self.birth_day) if p]
        return "-".join(parts) if parts else "Not provided"

    @property
    def has_diabetes(self) -> bool:
        """Diabetes flag, or diabetes listed among systemic diseases."""
        return self.diabetes or any(
            "diabetes" in disease.lower() for disease in self.systemic_diseases
        )

    @property
    def systemic_risk_factors(self) -> dict[str, bool]:
        return {
            "diabetes": self.has_diabetes,
            "steroid_use": self.steroid_use,
            "anemia": self.anemia,
            "smoking": self.heavy_smoker,
            "obesity": self.is_obese,
        }

    @property
    def has_systemic_risk_factor(self) -> bool:
        return any(self.systemic_risk_factors.values())


OBESITY_BMI = 30.0


# =============================================================================
# ASSESSMENT OUTPUT
# =============================================================================


class MedicationContribution(BaseModel):
    """Risk percentage computed for one medication."""
    model_config = ConfigDict(frozen=True)

    drug_name: str
    risk_percentage: float


class RiskAssessment(BaseModel):
    """Risk tier and recommendation for one dental procedure."""
    model_config = ConfigDict(frozen=True)

    procedure: DentalProcedure
    risk_level: RiskLevel
    recommendation: str
    medication_contributions: list[MedicationContribution] | None = None
    citations: list[str] | None = None

    @property
    def max_risk_percentage(self) -> float:
        if not self.medication_contributions:
            return 0.0
        return max(c.risk_percentage for c in self.medication_contributions)


# =============================================================================
# GUIDANCE SCHEMA (for knowledge/guidance/*.yaml)
# =============================================================================


class TreatmentGuidance(BaseModel):
    """Detailed steps for one procedure at one risk tier."""
    procedure: DentalProcedure
    risk_level: RiskLevel
    title: str
    steps: list[str] = Field(min_length=1)


class ChecklistItem(BaseModel):
    """Dental work to finish before antiresorptive therapy begins."""
    title: str
    description: str
    priority: ChecklistPriority


def months_between(start: date, end: date) -> int:
    """Whole 30-day months between two dates, rounded up."""
    return math.ceil(abs((end - start).days) / 30)
