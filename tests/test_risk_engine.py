"""
Tests for the MRONJ risk scoring engine.
"""

import sys
from itertools import permutations
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest

from knowledge.citations import KHAN_2015, PALASKA_2009, RUGGIERO_2022, SAAD_2012
from knowledge.recommendations import NO_MEDICATION_RECOMMENDATION, PERIODONTAL_WARNING
from src.engines import assess_risk, calculate_drug_risk_percentage, classify_procedure
from src.exceptions import InputContractError
from src.models import (
    PROCEDURE_ORDER,
    AdministrationRoute,
    DentalProcedure,
    DrugName,
    Frequency,
    FutureMedicationPlan,
    Indication,
    MedicationRecord,
    MedicationStatus,
    PatientProfile,
    RiskLevel,
)

INVASIVE = {
    DentalProcedure.EXTRACTION,
    DentalProcedure.PERIODONTAL_SURGERY,
    DentalProcedure.IMPLANT,
}


def make_med(
    drug=DrugName.ALENDRONATE_FOSAMAX,
    route=AdministrationRoute.ORAL,
    indication=Indication.OSTEOPOROSIS,
    duration=12,
):
    return MedicationRecord(
        drug_name=drug,
        route=route,
        indication=indication,
        start_year=2020,
        start_month=1,
        frequency=Frequency.MONTHLY,
        duration_months=duration,
    )


def make_patient(*medications, **flags):
    return PatientProfile(
        medications=medications,
        has_antiresorptive_med=bool(medications),
        **flags,
    )


def levels(assessments):
    return {a.procedure: a.risk_level for a in assessments}


class TestNoMedication:
    """The no-medication short circuit."""

    def test_empty_list_is_all_low(self):
        assessments = assess_risk(PatientProfile())

        assert [a.procedure for a in assessments] == list(PROCEDURE_ORDER)
        for a in assessments:
            assert a.risk_level == RiskLevel.LOW
            assert a.recommendation == NO_MEDICATION_RECOMMENDATION
            assert a.citations is None
            assert a.medication_contributions is None

    def test_risk_factors_do_not_matter_without_medication(self):
        patient = PatientProfile(diabetes=True, steroid_use=True, heavy_smoker=True)

        assert set(levels(assess_risk(patient)).values()) == {RiskLevel.LOW}

    def test_future_plan_is_ignored(self):
        patient = PatientProfile(
            has_antiresorptive_med=False,
            medication_status=MedicationStatus.ABOUT_TO_START,
            future_medication=FutureMedicationPlan(
                reason="osteoporosis",
                drug_name="Denosumab (Prolia)",
                start_year=2026,
                start_month=12,
                route=AdministrationRoute.INJECTION,
            ),
        )

        assessments = assess_risk(patient)

        assert len(assessments) == 5
        assert all(a.risk_level == RiskLevel.LOW for a in assessments)
        assert all(a.citations is None for a in assessments)

    def test_flag_without_records_skips_short_circuit(self):
        patient = PatientProfile(has_antiresorptive_med=True)

        assessments = assess_risk(patient)

        assert all(a.risk_level == RiskLevel.LOW for a in assessments)
        assert all(a.citations == [] for a in assessments)
        assert all(a.medication_contributions == [] for a in assessments)
        assert assessments[1].recommendation != NO_MEDICATION_RECOMMENDATION


class TestScenarios:
    """Worked examples."""

    def test_zoledronate_for_cancer_over_five_years(self):
        med = make_med(
            DrugName.ZOLEDRONATE_ZOMETA,
            AdministrationRoute.INJECTION,
            Indication.MALIGNANCY,
            duration=60,
        )
        assessments = assess_risk(make_patient(med))

        assert assessments[0].medication_contributions[0].risk_percentage == pytest.approx(15.0)
        for procedure, level in levels(assessments).items():
            if procedure in INVASIVE:
                assert level == RiskLevel.HIGH
            else:
                assert level == RiskLevel.MODERATE

    def test_alendronate_for_osteoporosis_one_year(self):
        assessments = assess_risk(make_patient(make_med()))

        assert assessments[0].max_risk_percentage == pytest.approx(0.1)
        assert set(levels(assessments).values()) == {RiskLevel.LOW}

    def test_diabetes_forces_invasive_high(self):
        assessments = assess_risk(make_patient(make_med(), diabetes=True))

        assert assessments[0].max_risk_percentage == pytest.approx(0.18)
        for procedure, level in levels(assessments).items():
            if procedure in INVASIVE:
                assert level == RiskLevel.HIGH
            else:
                assert level == RiskLevel.LOW


class TestDrugRisk:
    """Per-medication risk percentage."""

    @pytest.mark.parametrize("drug,route,expected", [
        (DrugName.ZOLEDRONATE_ZOMETA, AdministrationRoute.INJECTION, 2.0),
        (DrugName.ZOLEDRONATE_RECLAST, AdministrationRoute.ORAL, 0.5),
        (DrugName.DENOSUMAB_XGEVA, AdministrationRoute.INJECTION, 2.0),
        (DrugName.DENOSUMAB_PROLIA_XGEVA, None, 2.0),
        (DrugName.RISEDRONATE_ACTONEL, AdministrationRoute.INJECTION, 0.1),
        (DrugName.IBANDRONATE_BONIVA, AdministrationRoute.ORAL, 0.1),
        (DrugName.IBANDRONATE_BONIVA_IV, AdministrationRoute.INJECTION, 0.2),
        (DrugName.BEVACIZUMAB_AVASTIN, AdministrationRoute.INJECTION, 0.2),
        (DrugName.PAMIDRONATE_AREDIA, AdministrationRoute.INJECTION, 0.1),
        (DrugName.ROMOSOZUMAB_EVENITY, AdministrationRoute.INJECTION, 0.1),
        (DrugName.SUNITINIB_SUTENT, AdministrationRoute.ORAL, 0.1),
    ])
    def test_base_risk(self, drug, route, expected):
        med = make_med(drug, route)
        risk = calculate_drug_risk_percentage(med, PatientProfile())

        assert risk == pytest.approx(expected)

    @pytest.mark.parametrize("duration,expected", [
        (0, 0.1),
        (24, 0.1),
        (25, 0.15),
        (48, 0.15),
        (49, 0.25),
    ])
    def test_duration_buckets(self, duration, expected):
        risk = calculate_drug_risk_percentage(make_med(duration=duration), PatientProfile())

        assert risk == pytest.approx(expected)

    def test_all_patient_factors_compound(self):
        patient = PatientProfile(
            diabetes=True,
            steroid_use=True,
            anemia=True,
            heavy_smoker=True,
            periodontal_issues=True,
        )
        risk = calculate_drug_risk_percentage(make_med(), patient)

        assert risk == pytest.approx(0.1 * 1.8 * 1.4 * 1.3 * 1.3 * 1.5)

    def test_obesity_and_listed_diabetes_are_not_multipliers(self):
        patient = PatientProfile(
            height_cm=170,
            weight_kg=95,
            systemic_diseases=("Diabetes mellitus",),
        )
        assert patient.is_obese

        risk = calculate_drug_risk_percentage(make_med(), patient)

        assert risk == pytest.approx(0.1)

    def test_missing_duration_is_a_contract_violation(self):
        med = make_med(duration=None)

        with pytest.raises(InputContractError) as exc_info:
            assess_risk(make_patient(med))

        assert exc_info.value.field == "duration_months"


class TestMonotonicity:
    """Risk never drops when a risk input worsens."""

    @pytest.mark.parametrize("drug", list(DrugName))
    def test_cancer_indication(self, drug):
        patient = PatientProfile()
        for other in (Indication.OSTEOPOROSIS, Indication.OTHER):
            benign = calculate_drug_risk_percentage(make_med(drug, indication=other), patient)
            for cancer in (Indication.MALIGNANCY, Indication.MULTIPLE_MYELOMA):
                malignant = calculate_drug_risk_percentage(
                    make_med(drug, indication=cancer), patient
                )
                assert malignant >= benign

    @pytest.mark.parametrize("drug", list(DrugName))
    def test_duration(self, drug):
        patient = PatientProfile()
        risks = [
            calculate_drug_risk_percentage(make_med(drug, duration=d), patient)
            for d in (6, 24, 36, 48, 60, 120)
        ]

        assert risks == sorted(risks)

    def test_risk_factor_count(self):
        factors = ["diabetes", "steroid_use", "anemia", "heavy_smoker", "periodontal_issues"]
        med = make_med(DrugName.DENOSUMAB_XGEVA, AdministrationRoute.INJECTION)

        risks = []
        for n in range(len(factors) + 1):
            patient = PatientProfile(**{f: True for f in factors[:n]})
            risks.append(calculate_drug_risk_percentage(med, patient))

        assert risks == sorted(risks)


class TestAggregation:
    """Combining several medications."""

    def test_order_independent(self):
        meds = [
            make_med(),
            make_med(DrugName.IBANDRONATE_BONIVA_IV, AdministrationRoute.INJECTION, duration=30),
            make_med(DrugName.DENOSUMAB_PROLIA, AdministrationRoute.INJECTION, duration=6),
        ]

        results = []
        for order in permutations(meds):
            assessments = assess_risk(make_patient(*order))
            results.append((
                levels(assessments),
                assessments[0].max_risk_percentage,
            ))

        assert all(r == results[0] for r in results)

    def test_max_not_sum(self):
        # Four drugs at 1.5% each: the sum would cross 3.0, the max does not
        meds = [
            make_med(DrugName.ZOLEDRONATE_ZOMETA, indication=Indication.MALIGNANCY)
            for _ in range(4)
        ]
        assessments = assess_risk(make_patient(*meds))
        result = levels(assessments)

        assert assessments[0].max_risk_percentage == pytest.approx(1.5)
        assert result[DentalProcedure.EXTRACTION] == RiskLevel.MODERATE
        assert result[DentalProcedure.NON_INVASIVE] == RiskLevel.LOW

    def test_contributions_keep_medication_order(self):
        meds = [
            make_med(DrugName.RISEDRONATE_ACTONEL),
            make_med(DrugName.ZOLEDRONATE_ZOMETA, AdministrationRoute.INJECTION),
        ]
        assessments = assess_risk(make_patient(*meds))

        for a in assessments:
            assert [c.drug_name for c in a.medication_contributions] == [
                "Risedronate (Actonel)",
                "Zoledronate (Zometa)",
            ]

    def test_scorer_does_not_change_input(self):
        patient = make_patient(make_med(), diabetes=True)
        before = patient.model_dump()

        assess_risk(patient)

        assert patient.model_dump() == before


class TestTiers:
    """Threshold boundaries."""

    @pytest.mark.parametrize("risk,expected", [
        (0.5, RiskLevel.LOW),
        (2.0, RiskLevel.LOW),
        (2.01, RiskLevel.MODERATE),
        (40.0, RiskLevel.MODERATE),
    ])
    def test_non_invasive_and_root_canal(self, risk, expected):
        for procedure in (DentalProcedure.NON_INVASIVE, DentalProcedure.ROOT_CANAL):
            assert classify_procedure(procedure, risk, False) == expected
            # Systemic factors never raise non-invasive tiers
            assert classify_procedure(procedure, risk, True) == expected

    @pytest.mark.parametrize("risk,expected", [
        (1.0, RiskLevel.LOW),
        (1.01, RiskLevel.MODERATE),
        (3.0, RiskLevel.MODERATE),
        (3.01, RiskLevel.HIGH),
    ])
    def test_invasive(self, risk, expected):
        for procedure in INVASIVE:
            assert classify_procedure(procedure, risk, False) == expected
            assert classify_procedure(procedure, risk, True) == RiskLevel.HIGH

    def test_exactly_three_percent_is_moderate(self):
        med = make_med(DrugName.DENOSUMAB_XGEVA, AdministrationRoute.INJECTION, duration=30)
        result = levels(assess_risk(make_patient(med)))

        assert result[DentalProcedure.EXTRACTION] == RiskLevel.MODERATE
        assert result[DentalProcedure.NON_INVASIVE] == RiskLevel.MODERATE

    @pytest.mark.parametrize("flags", [
        {"steroid_use": True},
        {"anemia": True},
        {"heavy_smoker": True},
        {"height_cm": 160, "weight_kg": 90},
        {"systemic_diseases": ("Hypertension", "Type 2 diabetes")},
    ])
    def test_any_systemic_factor_makes_invasive_high(self, flags):
        result = levels(assess_risk(make_patient(make_med(), **flags)))

        for procedure in INVASIVE:
            assert result[procedure] == RiskLevel.HIGH
        assert result[DentalProcedure.NON_INVASIVE] == RiskLevel.LOW

    def test_periodontal_disease_alone_is_not_systemic(self):
        result = levels(assess_risk(make_patient(make_med(), periodontal_issues=True)))

        assert set(result.values()) == {RiskLevel.LOW}


class TestRecommendations:
    """Recommendation text."""

    def test_periodontal_warning_only_on_invasive(self):
        assessments = assess_risk(make_patient(make_med(), periodontal_issues=True))

        for a in assessments:
            if a.procedure in INVASIVE:
                assert a.recommendation.endswith(PERIODONTAL_WARNING)
            else:
                assert PERIODONTAL_WARNING not in a.recommendation

    def test_invasive_procedures_share_text(self):
        med = make_med(DrugName.DENOSUMAB_XGEVA, AdministrationRoute.INJECTION)
        assessments = assess_risk(make_patient(med))
        texts = {a.recommendation for a in assessments if a.procedure in INVASIVE}

        assert len(texts) == 1
        assert "drug holiday" in texts.pop()


class TestCitations:
    """Citation lists."""

    def test_identical_across_procedures(self):
        meds = [
            make_med(DrugName.DENOSUMAB_XGEVA, AdministrationRoute.INJECTION),
            make_med(),
        ]
        assessments = assess_risk(make_patient(*meds))

        first = assessments[0].citations
        assert all(a.citations == first for a in assessments)

    def test_deduplicated_in_first_appearance_order(self):
        meds = [
            make_med(DrugName.DENOSUMAB_XGEVA, AdministrationRoute.INJECTION),
            make_med(DrugName.ZOLEDRONATE_ZOMETA, AdministrationRoute.INJECTION),
            make_med(DrugName.DENOSUMAB_PROLIA, AdministrationRoute.INJECTION),
        ]
        citations = assess_risk(make_patient(*meds))[0].citations

        assert citations == [SAAD_2012, PALASKA_2009, RUGGIERO_2022]

    def test_unmatched_drug_gets_common_citation_only(self):
        med = make_med(DrugName.BEVACIZUMAB_AVASTIN, AdministrationRoute.INJECTION)

        assert assess_risk(make_patient(med))[0].citations == [PALASKA_2009]

    def test_alendronate(self):
        meds = [make_med(), make_med(duration=60)]

        assert assess_risk(make_patient(*meds))[0].citations == [KHAN_2015, PALASKA_2009]
