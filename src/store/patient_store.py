"""
In-memory patient data store.

Holds one patient profile and applies merge-style updates by building a new
frozen profile each time, so snapshots handed out earlier never change.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from src.exceptions import MedicationValidationError, StoreError
from src.models import MedicationRecord, MedicationStatus, PatientProfile
from src.store.validation import build_medication, validate_medication, with_duration

logger = logging.getLogger(__name__)

COMPUTED_FIELDS = {"bmi", "is_obese", "age_years"}


class PatientStore:
    """Holds the patient being assessed."""

    def __init__(self, patient: PatientProfile | None = None):
        self._patient = patient or PatientProfile()

    def snapshot(self) -> PatientProfile:
        """The current profile. It is frozen and safe to hand to the scorer."""
        return self._patient

    @property
    def medications(self) -> tuple[MedicationRecord, ...]:
        return self._patient.medications

    def _replace(self, changes: dict[str, Any]) -> PatientProfile:
        data = self._patient.model_dump(exclude=COMPUTED_FIELDS)
        data.update(changes)
        try:
            self._patient = PatientProfile.model_validate(data)
        except ValidationError as e:
            raise StoreError(f"Invalid patient data: {e}") from e
        return self._patient

    def update_patient_info(self, **changes: Any) -> PatientProfile:
        """Merge the given fields into the profile."""
        unknown = sorted(set(changes) - set(PatientProfile.model_fields))
        if unknown:
            raise StoreError(f"Unknown patient field(s): {', '.join(unknown)}")
        if "medications" in changes:
            raise StoreError(
                "Medications cannot be set directly; use add_medication or update_medication"
            )
        return self._replace(changes)

    def reset(self) -> PatientProfile:
        self._patient = PatientProfile()
        return self._patient

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._patient.medications):
            raise StoreError(
                f"No medication at index {index} "
                f"({len(self._patient.medications)} recorded)"
            )

    def add_medication(
        self,
        medication: MedicationRecord | dict[str, Any],
        today: date | None = None,
    ) -> MedicationRecord:
        """
        Validate a medication, compute its duration and append it.

        Saving a medication also marks the patient as a current or past user.
        """
        record = build_medication(medication)
        validate_medication(record, today)
        record = with_duration(record, today)

        self._replace({
            "medications": [*self._patient.medications, record],
            "has_antiresorptive_med": True,
            "medication_status": MedicationStatus.CURRENT_OR_PAST,
        })
        logger.info("Added %s (%d months)", record.drug_name.value, record.duration_months)
        return record

    def update_medication(
        self,
        index: int,
        today: date | None = None,
        **changes: Any,
    ) -> MedicationRecord:
        """Merge changes into the medication at index and recompute its duration."""
        self._check_index(index)
        unknown = sorted(set(changes) - set(MedicationRecord.model_fields))
        if unknown:
            raise StoreError(f"Unknown medication field(s): {', '.join(unknown)}")
        current = self._patient.medications[index]
        data = current.model_dump(exclude={"duration_months"})
        data.update(changes)

        record = build_medication(data)
        validate_medication(record, today)
        record = with_duration(record, today)

        medications = list(self._patient.medications)
        medications[index] = record
        self._replace({"medications": medications})
        return record

    def remove_medication(self, index: int) -> MedicationRecord:
        self._check_index(index)
        medications = list(self._patient.medications)
        removed = medications.pop(index)
        self._replace({"medications": medications})
        return removed

    # -------------------------------------------------------------------------
    # Patient files
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path, today: date | None = None) -> PatientStore:
        """
        Load a patient from a YAML or JSON file.

        Medications are validated and their durations recomputed, so a
        duration written in the file is never trusted.

        Raises:
            StoreError: if the file cannot be read or holds invalid data
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot read {path}: {e}") from e

        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise StoreError(f"Cannot parse {path}: {e}") from e

        try:
            patient = PatientProfile.model_validate(data or {})
        except ValidationError as e:
            raise StoreError(f"Invalid patient data in {path}: {e}") from e

        medications = []
        for i, record in enumerate(patient.medications):
            try:
                validate_medication(record, today)
            except MedicationValidationError as e:
                raise StoreError(f"Invalid medication {i + 1} in {path}: {e}") from e
            medications.append(with_duration(record, today))

        store = cls(patient)
        if medications:
            store._replace({"medications": medications})
        return store

    def save(self, path: Path) -> Path:
        """Write the patient to a YAML or JSON file, chosen by suffix."""
        path = Path(path)
        data = self._patient.model_dump(mode="json", exclude=COMPUTED_FIELDS, exclude_none=True)
        if path.suffix.lower() == ".json":
            text = json.dumps(data, indent=2, ensure_ascii=False)
        else:
            text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Cannot write {path}: {e}") from e
        return path
