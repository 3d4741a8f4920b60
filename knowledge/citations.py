"""
Literature citations attached to risk assessments.
"""

from __future__ import annotations

SAAD_2012 = (
    "Saad F, et al. Incidence, risk factors, and outcomes of osteonecrosis of the jaw: "
    "integrated analysis from three blinded active-controlled phase III trials in cancer "
    "patients with bone metastases. Ann Oncol. 2012;23(5):1341-1347."
)
RUGGIERO_2022 = (
    "Ruggiero SL, et al. American Association of Oral and Maxillofacial Surgeons position "
    "paper on medication-related osteonecrosis of the jaw - 2022 update. "
    "J Oral Maxillofac Surg. 2022;80(5):920-943."
)
KHAN_2015 = (
    "Khan AA, et al. Diagnosis and management of osteonecrosis of the jaw: a systematic "
    "review and international consensus. J Bone Miner Res. 2015;30(1):3-23."
)
PALASKA_2009 = (
    "Palaska PK, et al. Bisphosphonates and time to osteonecrosis development. "
    "Oncologist. 2009;14(11):1154-1166."
)

# First matching drug-name substring wins
DRUG_CITATION_RULES: tuple[tuple[str, str], ...] = (
    ("Denosumab", SAAD_2012),
    ("Zoledronate", RUGGIERO_2022),
    ("Alendronate", KHAN_2015),
)

# Attached for every medication
COMMON_CITATION = PALASKA_2009

# Always closes the report's reference list
GUIDELINE_CITATION = RUGGIERO_2022


def citations_for_drug(drug_name: str) -> list[str]:
    """Citations contributed by one medication: at most one specific, plus the common one."""
    citations = []
    for substring, citation in DRUG_CITATION_RULES:
        if substring in drug_name:
            citations.append(citation)
            break
    citations.append(COMMON_CITATION)
    return citations
