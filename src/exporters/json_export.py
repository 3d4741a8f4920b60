"""
JSON exporter for MRONJ Risk.

Exports the patient together with the computed assessment as JSON.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from pathlib import Path
from typing import Any

from src.engines import GuidanceCatalog, assess_risk, is_about_to_start
from src.exceptions import OutputError
from src.models import PatientProfile

SCHEMA_VERSION = "1.0"


class DateTimeEncoder(json.JSONEncoder):
    """JSON encoder that handles dates and datetimes."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (date, datetime)):
            return obj.isoformat()
        return super().default(obj)


def build_report_data(
    patient: PatientProfile,
    catalog: GuidanceCatalog | None = None,
    include_nulls: bool = False,
) -> dict[str, Any]:
    """
    Assemble the report as plain data.

    Patients about to start therapy get the pre-treatment checklist instead of
    per-procedure assessments.
    """
    data: dict[str, Any] = {
        "_schema_version": SCHEMA_VERSION,
        "generated_at": datetime.now().isoformat(timespec="seconds"),
        "patient": patient.model_dump(mode="json", exclude_none=not include_nulls),
    }

    if is_about_to_start(patient):
        catalog = catalog or GuidanceCatalog()
        data["pre_treatment_checklist"] = [
            item.model_dump(mode="json") for item in catalog.get_pre_treatment_checklist()
        ]
    else:
        data["assessments"] = [
            a.model_dump(mode="json", exclude_none=not include_nulls)
            for a in assess_risk(patient)
        ]
    return data


def export_json(
    patient: PatientProfile,
    output_path: Path | None = None,
    indent: int = 2,
    include_nulls: bool = False,
) -> str:
    """
    Export a patient report to JSON format.

    Args:
        patient: The patient to export
        output_path: Optional path to write the JSON file
        indent: JSON indentation level
        include_nulls: Whether to include null values in output

    Returns:
        JSON string of the report
    """
    data = build_report_data(patient, include_nulls=include_nulls)
    json_str = json.dumps(data, indent=indent, cls=DateTimeEncoder, ensure_ascii=False)

    if output_path:
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_text(json_str, encoding="utf-8")
        except OSError as e:
            raise OutputError(f"Cannot write {output_path}: {e}") from e

    return json_str


def export_json_summary(patient: PatientProfile) -> dict[str, Any]:
    """
    Short summary of the patient and the highest tier per procedure.

    Useful for listings and previews.
    """
    summary: dict[str, Any] = {
        "name": patient.name,
        "age_years": patient.age_years,
        "medications": [m.drug_name.value for m in patient.medications],
        "about_to_start": is_about_to_start(patient),
    }
    if not summary["about_to_start"]:
        summary["risk_levels"] = {
            a.procedure.value: a.risk_level.value for a in assess_risk(patient)
        }
    return summary
