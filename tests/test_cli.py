"""
Tests for the mronj command-line interface.
"""

import json
import sys
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from click.testing import CliRunner
from rich.console import Console

import cli as cli_module
from cli import cli
from src.config import get_settings
from src.models import MedicationStatus, PatientProfile
from src.store import PatientStore


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    # Keep rich from wrapping long drug names, recommendations and file paths
    monkeypatch.setattr(cli_module, "console", Console(width=300))
    monkeypatch.setattr(cli_module, "err_console", Console(stderr=True, width=300))


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def patient_file(tmp_path):
    store = PatientStore()
    store.update_patient_info(name="Zhang Wei", height_cm=170, weight_kg=60)
    store.add_medication({
        "drug_name": "Denosumab (Xgeva)",
        "route": "injection",
        "indication": "malignancy/bone-metastasis",
        "start_year": 2015,
        "start_month": 1,
        "frequency": "monthly",
    })
    return store.save(tmp_path / "patient.yaml")


class TestAddMedication:
    """The add-medication command."""

    def test_creates_file(self, runner, tmp_path):
        path = tmp_path / "new.yaml"

        result = runner.invoke(cli, [
            "add-medication", str(path),
            "--drug", "Alendronate (Fosamax)",
            "--route", "oral",
            "--indication", "osteoporosis",
            "--start", "2021-03",
            "--frequency", "daily",
        ])

        assert result.exit_code == 0, result.output
        assert "Added Alendronate (Fosamax)" in result.output
        patient = PatientStore.load(path).snapshot()
        assert len(patient.medications) == 1
        assert patient.has_antiresorptive_med
        assert patient.medication_status == MedicationStatus.CURRENT_OR_PAST
        assert patient.medications[0].duration_months > 0

    def test_appends_to_existing_file(self, runner, patient_file):
        result = runner.invoke(cli, [
            "add-medication", str(patient_file),
            "--drug", "Bevacizumab (Avastin)",
            "--indication", "other",
            "--start", "2023-01",
            "--frequency", "monthly",
            "--stop", "2023-09",
        ])

        assert result.exit_code == 0, result.output
        patient = PatientStore.load(patient_file).snapshot()
        assert [m.drug_name.value for m in patient.medications] == [
            "Denosumab (Xgeva)",
            "Bevacizumab (Avastin)",
        ]
        assert patient.medications[1].is_stopped
        assert patient.name == "Zhang Wei"

    def test_stop_before_start(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"

        result = runner.invoke(cli, [
            "add-medication", str(path),
            "--drug", "Alendronate (Fosamax)",
            "--indication", "osteoporosis",
            "--start", "2021-03",
            "--frequency", "daily",
            "--stop", "2020-01",
        ])

        assert result.exit_code == 3
        assert "earlier than the start date" in result.output
        assert not path.exists()

    def test_malformed_start(self, runner, tmp_path):
        result = runner.invoke(cli, [
            "add-medication", str(tmp_path / "p.yaml"),
            "--drug", "Alendronate (Fosamax)",
            "--indication", "osteoporosis",
            "--start", "March 2021",
            "--frequency", "daily",
        ])

        assert result.exit_code == 2
        assert "YYYY-MM" in result.output

    def test_unknown_drug(self, runner, tmp_path):
        result = runner.invoke(cli, [
            "add-medication", str(tmp_path / "p.yaml"),
            "--drug", "Aspirin",
            "--indication", "osteoporosis",
            "--start", "2021-03",
            "--frequency", "daily",
        ])

        assert result.exit_code == 2


class TestAssess:
    """The assess command."""

    def test_table_output(self, runner, patient_file):
        result = runner.invoke(cli, ["assess", str(patient_file)])

        assert result.exit_code == 0, result.output
        assert "Zhang Wei" in result.output
        assert "Denosumab (Xgeva)" in result.output
        assert "15.00%" in result.output
        assert "High risk" in result.output
        assert "Tooth extraction" in result.output

    def test_json_output(self, runner, patient_file):
        result = runner.invoke(cli, ["assess", str(patient_file), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [a["procedure"] for a in data["assessments"]] == [
            "non-invasive", "extraction", "periodontal-surgery", "implant", "root-canal",
        ]
        assert data["assessments"][1]["risk_level"] == "high"
        assert data["assessments"][0]["risk_level"] == "moderate"

    def test_about_to_start_shows_checklist(self, runner, tmp_path):
        path = PatientStore(
            PatientProfile(medication_status=MedicationStatus.ABOUT_TO_START)
        ).save(tmp_path / "starting.yaml")

        result = runner.invoke(cli, ["assess", str(path)])

        assert result.exit_code == 0, result.output
        assert "Before Starting Antiresorptive Therapy" in result.output
        assert "Extract non-restorable teeth" in result.output

    def test_invalid_patient_file(self, runner, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("medications: [{drug_name: Aspirin}]\n")

        result = runner.invoke(cli, ["assess", str(path)])

        assert result.exit_code == 4
        assert "Error:" in result.output

    def test_duration_written_in_file_is_recomputed(self, runner, tmp_path):
        path = tmp_path / "raw.json"
        path.write_text(json.dumps({
            "has_antiresorptive_med": True,
            "medications": [{
                "drug_name": "Zoledronate (Zometa)",
                "route": "injection",
                "indication": "malignancy/bone-metastasis",
                "start_year": 2023,
                "start_month": 1,
                "frequency": "monthly",
                "is_stopped": True,
                "stop_year": 2023,
                "stop_month": 6,
                "duration_months": 120,
            }],
        }))

        result = runner.invoke(cli, ["assess", str(path), "--json"])

        assert result.exit_code == 0, result.output
        # 6.0% from 6 months of use, not 15.0% from the 120 months in the file
        contributions = json.loads(result.stdout)["assessments"][0]["medication_contributions"]
        assert contributions[0]["risk_percentage"] == pytest.approx(6.0)

    def test_stop_before_start_in_file(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(
            "medications:\n"
            "  - drug_name: Zoledronate (Zometa)\n"
            "    route: injection\n"
            "    indication: malignancy/bone-metastasis\n"
            "    start_year: 2024\n"
            "    start_month: 1\n"
            "    frequency: monthly\n"
            "    is_stopped: true\n"
            "    stop_year: 2020\n"
            "    stop_month: 1\n"
            "    duration_months: 70\n"
        )

        result = runner.invoke(cli, ["assess", str(path)])

        assert result.exit_code == 4
        assert "earlier than the start date" in result.output


class TestReport:
    """The report command."""

    def test_markdown_report(self, runner, patient_file, tmp_path):
        output = tmp_path / "out" / "report.md"

        result = runner.invoke(cli, ["report", str(patient_file), "-o", str(output)])

        assert result.exit_code == 0, result.output
        md = output.read_text(encoding="utf-8")
        assert md.startswith("# MRONJ Risk Assessment Report")
        assert f"**Assessment Date:** {date.today():%Y-%m-%d}" in md

    def test_json_report_default_path(self, runner, patient_file, tmp_path, monkeypatch):
        monkeypatch.setenv("MRONJ_OUTPUT_DIR", str(tmp_path / "reports"))
        get_settings.cache_clear()
        try:
            result = runner.invoke(cli, ["report", str(patient_file), "--format", "json"])
        finally:
            get_settings.cache_clear()

        assert result.exit_code == 0, result.output
        data = json.loads((tmp_path / "reports" / "patient_report.json").read_text())
        assert data["patient"]["name"] == "Zhang Wei"


class TestReferenceCommands:
    """guidance, checklist, drugs and info."""

    def test_guidance(self, runner):
        result = runner.invoke(cli, ["guidance", "extraction", "high"])

        assert result.exit_code == 0, result.output
        assert "High-risk extraction" in result.output
        assert "1. " in result.output

    def test_guidance_rejects_unknown_procedure(self, runner):
        result = runner.invoke(cli, ["guidance", "surgery", "high"])

        assert result.exit_code == 2

    def test_checklist(self, runner):
        result = runner.invoke(cli, ["checklist"])

        assert result.exit_code == 0, result.output
        assert "Treat periodontal disease" in result.output
        assert "Important" in result.output

    def test_drugs(self, runner):
        result = runner.invoke(cli, ["drugs"])

        assert result.exit_code == 0, result.output
        assert "Zoledronate (Zometa)" in result.output
        assert "antiangiogenic-agent" in result.output

    def test_info(self, runner):
        result = runner.invoke(cli, ["info"])

        assert result.exit_code == 0
        assert "MRONJ Risk" in result.output

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output
