"""
Recommendation catalog.

Fixed recommendation text for every (procedure, risk tier) pair. The three
invasive procedures share one set of templates. The catalog is checked for
completeness when the module is imported.
"""

from __future__ import annotations

from src.models import DentalProcedure, RiskLevel

NO_MEDICATION_RECOMMENDATION = (
    "General dental treatment may proceed. No special precautions are required."
)

PERIODONTAL_WARNING = (
    "\n\nWarning: the patient has periodontal disease, which significantly "
    "increases MRONJ risk. Control periodontal inflammation before surgery."
)

_INVASIVE: dict[RiskLevel, str] = {
    RiskLevel.HIGH: (
        "Recommendations:\n"
        "1. Consider alternative treatment options\n"
        "2. If surgery is necessary:\n"
        "   - Prophylactic antibiotics before surgery\n"
        "   - Minimize surgical trauma\n"
        "   - Avoid leaving open wounds\n"
        "3. Close follow-up for at least 6 months"
    ),
    RiskLevel.MODERATE: (
        "Recommendations:\n"
        "1. Discuss a short drug holiday with the prescribing physician\n"
        "2. Take additional precautions:\n"
        "   - Thorough oral cleaning before surgery\n"
        "   - Minimize surgical trauma\n"
        "3. Regular follow-up"
    ),
    RiskLevel.LOW: (
        "Routine treatment may proceed, provided that:\n"
        "1. The risk is explained and informed consent is signed\n"
        "2. Good oral hygiene is maintained\n"
        "3. Regular follow-up is scheduled"
    ),
}

RECOMMENDATIONS: dict[tuple[DentalProcedure, RiskLevel], str] = {
    # Non-invasive tiers above moderate are not produced by the scorer
    (DentalProcedure.NON_INVASIVE, RiskLevel.HIGH): (
        "Treatment may proceed with extra care:\n"
        "1. Use conservative techniques\n"
        "2. Consider an antibacterial rinse before and after treatment\n"
        "3. Professional cleaning every 2-3 months"
    ),
    (DentalProcedure.NON_INVASIVE, RiskLevel.MODERATE): (
        "Treatment may proceed, with attention to oral hygiene and regular follow-up."
    ),
    (DentalProcedure.NON_INVASIVE, RiskLevel.LOW): (
        "Routine treatment may proceed. No special precautions are required."
    ),
    (DentalProcedure.ROOT_CANAL, RiskLevel.HIGH): (
        "Reassess whether root canal treatment is necessary. If it proceeds, "
        "strictly control working length and avoid aggressive irrigants."
    ),
    (DentalProcedure.ROOT_CANAL, RiskLevel.MODERATE): (
        "Treatment may proceed, but avoid enlarging the apical foramen and use "
        "root canal irrigants with caution."
    ),
    (DentalProcedure.ROOT_CANAL, RiskLevel.LOW): (
        "Routine treatment may proceed, with attention to canal disinfection and cleaning."
    ),
}

for _procedure in DentalProcedure:
    if _procedure.is_invasive:
        for _level, _text in _INVASIVE.items():
            RECOMMENDATIONS[(_procedure, _level)] = _text

_missing = [
    (p.value, r.value) for p in DentalProcedure for r in RiskLevel
    if (p, r) not in RECOMMENDATIONS
]
if _missing:
    raise RuntimeError(f"Recommendation catalog is incomplete: {_missing}")


def get_recommendation(
    procedure: DentalProcedure,
    risk_level: RiskLevel,
    periodontal_issues: bool = False,
) -> str:
    """Look up the recommendation, adding the periodontal warning for invasive work."""
    text = RECOMMENDATIONS[(procedure, risk_level)]
    if periodontal_issues and procedure.is_invasive:
        text += PERIODONTAL_WARNING
    return text
