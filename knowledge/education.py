"""
Patient education text for the narrative report.
"""

from __future__ import annotations

from src.models import AdministrationRoute, Indication, MedicationRecord, PatientProfile

MRONJ_DEFINITION = (
    "Medication-related osteonecrosis of the jaw (MRONJ) is a rare but serious side "
    "effect that can occur in patients taking certain drugs. These drugs are mainly "
    "used to treat osteoporosis, multiple myeloma and bone metastases."
)

# AAOMS 2022 case definition
MRONJ_CRITERIA = [
    "Current or previous treatment with antiresorptive or antiangiogenic agents",
    "Exposed bone, or bone that can be probed through an intraoral or extraoral "
    "fistula, in the maxillofacial region that has persisted for more than 8 weeks",
    "No history of radiation therapy to the jaws or metastatic disease to the jaws",
]

RISK_REDUCTION = [
    ("Keep up good oral hygiene", "brush twice a day, floss and have regular cleanings"),
    ("Regular dental check-ups", "at least every six months"),
    ("Tell your dentist", "mention these medications before any dental treatment"),
    ("Avoid unnecessary invasive dental surgery", "especially for high-risk patients"),
    ("Stop smoking", "smoking increases MRONJ risk"),
    ("Keep chronic diseases under control", "for example diabetes"),
]

DENTIST_ROLE = [
    "Identify high-risk patients and provide personalised prevention strategies",
    "Perform a full oral assessment and any necessary treatment before antiresorptive "
    "therapy begins",
    "Design an appropriate dental treatment plan for high-risk patients",
    "Keep in close contact with the physician prescribing the antiresorptive drug",
]

DRUG_HOLIDAY_NOTE = (
    "If you need dental surgery, your dentist may discuss a temporary pause of the "
    "medication (drug holiday) with your physician."
)

WARNING_SIGNS = [
    "Pain or swelling in the mouth",
    "Red, swollen or bleeding gums",
    "Exposed bone in the mouth",
    "Loose teeth",
    "Bad breath",
    "Numbness or a heavy feeling in the jaw",
]

DISCLAIMER = (
    "This report is a decision-support aid for MRONJ risk and is not a diagnosis, "
    "treatment or prescription. Consult a healthcare professional about any symptoms "
    "or concerns."
)


def drug_education(medication: MedicationRecord) -> list[str]:
    """Paragraphs describing one medication and its MRONJ risk."""
    name = medication.drug_name.value
    osteoporosis = medication.indication == Indication.OSTEOPOROSIS

    if "Denosumab" in name:
        return [
            "Monoclonal antibody that reduces bone loss by inhibiting the RANK-L protein. "
            "Unlike bisphosphonates, its effect wears off relatively quickly after stopping.",
            "MRONJ risk in osteoporosis is about 0.01-0.1%." if osteoporosis
            else "MRONJ risk in cancer treatment is about 1-2%.",
        ]
    if "Zoledronate" in name:
        return [
            "The most potent intravenous bisphosphonate, used mainly for bone metastases, "
            "hypercalcaemia of malignancy and osteoporosis.",
            "MRONJ risk in osteoporosis is about 0.017%." if osteoporosis
            else "MRONJ risk in cancer treatment is about 1-10%.",
            "It can remain in the body for more than 10 years.",
        ]
    if "Alendronate" in name:
        return [
            "The most common oral bisphosphonate, used to treat and prevent osteoporosis.",
            "With long-term use (more than 4 years) MRONJ risk is about 0.05-0.2%.",
            "Take it with a full glass of water and stay upright for at least 30 minutes "
            "afterwards.",
        ]

    route = "oral" if medication.route == AdministrationRoute.ORAL else "injectable"
    return [
        f"An {route} medication used for {medication.indication.value}.",
        "This type of medication may increase the risk of osteonecrosis of the jaw, "
        "particularly around dental surgery.",
    ]


def risk_factor_explanations(patient: PatientProfile) -> list[tuple[str, str]]:
    """(factor, explanation) pairs for each personal risk factor the patient has."""
    explanations = []
    if patient.diabetes:
        explanations.append((
            "Poorly controlled diabetes",
            "With HbA1c of 7.0% or more, blood supply to bone and healing capacity may be "
            "impaired, raising MRONJ risk about 1.7-fold.",
        ))
    if patient.steroid_use:
        explanations.append((
            "Long-term steroid use",
            "Steroids can slow bone healing and suppress the immune system, raising MRONJ "
            "risk about 1.4-fold.",
        ))
    if patient.anemia:
        explanations.append((
            "Anemia",
            "Hemoglobin below 10 g/dL can reduce tissue oxygenation, raising MRONJ risk "
            "about 1.3-fold.",
        ))
    if patient.heavy_smoker:
        explanations.append((
            "Heavy smoking",
            "Smoking more than 10 cigarettes a day can reduce blood supply to bone, raising "
            "MRONJ risk about 1.3-fold.",
        ))
    if patient.periodontal_issues:
        explanations.append((
            "Periodontal disease or spontaneous tooth pain",
            "Periodontal inflammation is an important trigger of MRONJ, raising risk about "
            "1.5-fold.",
        ))
    if patient.is_obese:
        explanations.append((
            "Obesity",
            "A BMI of 30 or more can increase systemic inflammation and impair bone healing.",
        ))
    return explanations
