"""
Markdown exporter for MRONJ Risk.

Builds the narrative risk assessment report for a patient.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path

from knowledge.citations import GUIDELINE_CITATION
from knowledge.education import (
    DENTIST_ROLE,
    DISCLAIMER,
    DRUG_HOLIDAY_NOTE,
    MRONJ_CRITERIA,
    MRONJ_DEFINITION,
    RISK_REDUCTION,
    WARNING_SIGNS,
    drug_education,
    risk_factor_explanations,
)
from src.engines import GuidanceCatalog, assess_risk, is_about_to_start
from src.exceptions import OutputError
from src.models import PatientProfile, RiskAssessment, Sex


def export_markdown(
    patient: PatientProfile,
    output_path: Path | None = None,
    today: date | None = None,
    catalog: GuidanceCatalog | None = None,
) -> str:
    """
    Export the MRONJ risk assessment report in Markdown format.

    Args:
        patient: The patient to report on
        output_path: Optional path to write the Markdown file
        today: Assessment date shown in the header (defaults to today)
        catalog: Guidance catalog for the pre-treatment checklist

    Returns:
        Markdown string of the report
    """
    today = today or date.today()
    lines = []

    # Header
    lines.append("# MRONJ Risk Assessment Report")
    lines.append("")
    lines.append(f"**Assessment Date:** {today.strftime('%Y-%m-%d')}")
    lines.append("")

    _basic_data(lines, patient)
    _medical_history(lines, patient)
    _medication_record(lines, patient)

    if is_about_to_start(patient):
        _pre_treatment(lines, catalog or GuidanceCatalog())
    else:
        _risk_assessment(lines, patient, assess_risk(patient))

    _education(lines, patient)

    lines.append("---")
    lines.append("")
    lines.append(f"*{DISCLAIMER}*")
    lines.append("")

    md = "\n".join(lines)

    if output_path:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(md, encoding="utf-8")
        except OSError as e:
            raise OutputError(f"Cannot write {output_path}: {e}") from e

    return md


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def _basic_data(lines: list[str], p: PatientProfile) -> None:
    lines.append("## Basic Data")
    lines.append("")
    lines.append(f"- **Name:** {p.name or 'Not provided'}")
    lines.append(f"- **Date of Birth:** {p.birth_date_label}")
    lines.append(f"- **Age:** {p.age_years if p.age_years is not None else 'Unknown'}")
    lines.append(f"- **ID Number:** {p.id_number or 'Not provided'}")
    lines.append(f"- **Sex:** {p.sex.value.title() if p.sex else 'Not provided'}")
    if p.sex == Sex.TRANSGENDER:
        if p.transgender_type:
            lines.append(f"- **Transgender Type:** {p.transgender_type.value}")
        lines.append(f"- **Hormone Therapy:** {_yes_no(p.has_hormone_therapy)}")
        if p.has_hormone_therapy and p.hormone_therapy_duration:
            lines.append(f"- **Therapy Duration:** {p.hormone_therapy_duration.value}")
    lines.append("")

    lines.append("### Physical Information")
    lines.append("")
    lines.append(f"- **Height:** {p.height_cm if p.height_cm else '-'} cm")
    lines.append(f"- **Weight:** {p.weight_kg if p.weight_kg else '-'} kg")
    if p.bmi is not None:
        obese = " (obese)" if p.is_obese else ""
        lines.append(f"- **BMI:** {p.bmi:.1f}{obese}")
    else:
        lines.append("- **BMI:** -")
    lines.append("")


def _medical_history(lines: list[str], p: PatientProfile) -> None:
    lines.append("## Medical History")
    lines.append("")
    diseases = ", ".join(p.systemic_diseases) if p.systemic_diseases else "None"
    lines.append(f"- **Systemic Diseases:** {diseases}")
    lines.append(f"- **Radiotherapy:** {_yes_no(p.has_radiotherapy)}")
    if p.has_radiotherapy and p.radiotherapy_details:
        lines.append(f"  - {p.radiotherapy_details}")
    lines.append(f"- **Cancer History:** {_yes_no(p.has_cancer)}")
    if p.has_cancer and p.cancer_history:
        lines.append(f"  - {p.cancer_history}")
    lines.append(f"- **Other Conditions:** {p.other_conditions or 'None'}")
    lines.append("")

    lines.append("### MRONJ-Specific Risk Factors")
    lines.append("")
    lines.append(f"- **Long-term Steroid Use:** {_yes_no(p.steroid_use)}")
    lines.append(f"- **Diabetes:** {_yes_no(p.diabetes)}")
    lines.append(f"- **Anemia:** {_yes_no(p.anemia)}")
    lines.append(f"- **Heavy Smoker:** {_yes_no(p.heavy_smoker)}")
    lines.append(f"- **Periodontal Disease or Spontaneous Tooth Pain:** {_yes_no(p.periodontal_issues)}")
    lines.append("")


def _medication_record(lines: list[str], p: PatientProfile) -> None:
    lines.append("## Medication Record")
    lines.append("")

    if p.medications:
        for i, med in enumerate(p.medications, 1):
            route = med.route.value if med.route else "unspecified"
            lines.append(f"### Medication {i}: {med.drug_name.value}")
            lines.append("")
            lines.append(f"- **Route:** {route}")
            lines.append(f"- **Indication:** {med.indication.value}")
            lines.append(f"- **Started:** {med.start_year}-{med.start_month:02d}")
            lines.append(f"- **Frequency:** {med.frequency.value}")
            if med.is_stopped and med.stop_year and med.stop_month:
                lines.append(f"- **Stopped:** {med.stop_year}-{med.stop_month:02d}")
            else:
                lines.append("- **Status:** Currently in use")
            if med.duration_months is not None:
                lines.append(f"- **Duration:** about {med.duration_months} months")
            lines.append("")
    elif p.has_antiresorptive_med:
        lines.append("*Antiresorptive medication reported, no details recorded*")
        lines.append("")
    else:
        lines.append("*No related medication*")
        lines.append("")

    if p.future_medication and p.future_medication.drug_name:
        plan = p.future_medication
        lines.append("### Planned Medication")
        lines.append("")
        lines.append(f"- **Drug:** {plan.drug_name}")
        if plan.reason:
            lines.append(f"- **Reason:** {plan.reason}")
        if plan.start_year and plan.start_month:
            lines.append(f"- **Planned Start:** {plan.start_year}-{plan.start_month:02d}")
        if plan.route:
            lines.append(f"- **Route:** {plan.route.value}")
        lines.append("")


def _risk_assessment(
    lines: list[str],
    p: PatientProfile,
    assessments: list[RiskAssessment],
) -> None:
    lines.append("## Risk Assessment Results")
    lines.append("")

    for assessment in assessments:
        lines.append(f"### {assessment.procedure.label}")
        lines.append("")
        lines.append(f"**Risk Level:** {assessment.risk_level.label}")
        lines.append("")
        if assessment.medication_contributions:
            lines.append("Medication risk contributions:")
            lines.append("")
            for c in assessment.medication_contributions:
                lines.append(f"- {c.drug_name}: {c.risk_percentage:.2f}%")
            lines.append("")
        lines.append("**Recommendation:**")
        lines.append("")
        lines.append(assessment.recommendation)
        lines.append("")

    explanations = risk_factor_explanations(p)
    if explanations:
        lines.append("### Your Personal Risk Factors")
        lines.append("")
        for factor, explanation in explanations:
            lines.append(f"- **{factor}:** {explanation}")
        lines.append("")

    # Citations are identical across procedures; the guideline closes the list
    citations = []
    for assessment in assessments:
        for citation in assessment.citations or []:
            if citation not in citations:
                citations.append(citation)
    if GUIDELINE_CITATION not in citations:
        citations.append(GUIDELINE_CITATION)

    lines.append("### References")
    lines.append("")
    for i, citation in enumerate(citations, 1):
        lines.append(f"{i}. {citation}")
    lines.append("")


def _pre_treatment(lines: list[str], catalog: GuidanceCatalog) -> None:
    intro, reminder = catalog.get_pre_treatment_text()
    lines.append("## Oral Evaluation Before Starting Antiresorptive Therapy")
    lines.append("")
    if intro:
        lines.append(intro)
        lines.append("")
    for item in catalog.get_pre_treatment_checklist():
        lines.append(f"- **{item.title}** ({item.priority.value} priority): {item.description}")
    lines.append("")
    if reminder:
        lines.append(f"> **Important:** {reminder}")
        lines.append("")


def _education(lines: list[str], p: PatientProfile) -> None:
    lines.append("## About MRONJ")
    lines.append("")
    lines.append("### What is MRONJ?")
    lines.append("")
    lines.append(MRONJ_DEFINITION)
    lines.append("")
    lines.append("The 2022 AAOMS definition requires all of the following:")
    lines.append("")
    for i, criterion in enumerate(MRONJ_CRITERIA, 1):
        lines.append(f"{i}. {criterion}")
    lines.append("")

    for med in p.medications:
        lines.append(f"### {med.drug_name.value}")
        lines.append("")
        for paragraph in drug_education(med):
            lines.append(paragraph)
            lines.append("")

    lines.append("### How to Lower the Risk")
    lines.append("")
    for title, detail in RISK_REDUCTION:
        lines.append(f"- **{title}:** {detail}")
    lines.append("")

    lines.append("### The Dentist's Role")
    lines.append("")
    for item in DENTIST_ROLE:
        lines.append(f"- {item}")
    lines.append("")
    lines.append(DRUG_HOLIDAY_NOTE)
    lines.append("")

    lines.append("### Warning Signs")
    lines.append("")
    lines.append("See a doctor promptly if you notice:")
    lines.append("")
    for sign in WARNING_SIGNS:
        lines.append(f"- {sign}")
    lines.append("")
