"""
Detailed treatment guidance and the pre-treatment checklist.

Both are loaded from YAML files under knowledge/guidance and cached per
knowledge directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from src.config import get_settings
from src.exceptions import KnowledgeBaseError
from src.models import (
    ChecklistItem,
    DentalProcedure,
    MedicationStatus,
    PatientProfile,
    RiskLevel,
    TreatmentGuidance,
)

logger = logging.getLogger(__name__)


class GuidanceCatalog:
    """Treatment guidance for every (procedure, risk tier) pair."""

    # Class-level cache keyed by guidance directory
    _yaml_cache: dict[Path, dict[str, Any]] = {}

    def __init__(self, guidance_dir: Path | None = None):
        self.guidance_dir = guidance_dir or get_settings().guidance_dir
        self._guidance: dict[tuple[DentalProcedure, RiskLevel], TreatmentGuidance] | None = None
        self._checklist: list[ChecklistItem] | None = None

    @classmethod
    def _load_yaml(cls, path: Path) -> dict[str, Any]:
        """Load a YAML file, with caching."""
        if path in cls._yaml_cache:
            return cls._yaml_cache[path]

        if not path.exists():
            raise KnowledgeBaseError("file not found", source=str(path))
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise KnowledgeBaseError(f"invalid YAML: {e}", source=str(path)) from e
        if not isinstance(data, dict):
            raise KnowledgeBaseError("expected a mapping at the top level", source=str(path))

        logger.debug("Loaded guidance data from %s", path)
        cls._yaml_cache[path] = data
        return data

    @classmethod
    def clear_cache(cls) -> None:
        cls._yaml_cache.clear()

    def _load_guidance(self) -> dict[tuple[DentalProcedure, RiskLevel], TreatmentGuidance]:
        path = self.guidance_dir / "treatment_guidance.yaml"
        data = self._load_yaml(path)

        guidance = {}
        for procedure in DentalProcedure:
            tiers = data.get(procedure.value) or {}
            for level in RiskLevel:
                entry = tiers.get(level.value)
                if entry is None:
                    raise KnowledgeBaseError(
                        f"no guidance for {procedure.value}/{level.value}", source=str(path)
                    )
                try:
                    guidance[(procedure, level)] = TreatmentGuidance(
                        procedure=procedure, risk_level=level, **entry
                    )
                except (TypeError, ValidationError) as e:
                    raise KnowledgeBaseError(
                        f"malformed guidance for {procedure.value}/{level.value}: {e}",
                        source=str(path),
                    ) from e
        return guidance

    def get_treatment_guidance(
        self,
        procedure: DentalProcedure,
        risk_level: RiskLevel,
    ) -> TreatmentGuidance:
        """Detailed guidance for a procedure at a given risk tier."""
        if self._guidance is None:
            self._guidance = self._load_guidance()
        return self._guidance[(DentalProcedure(procedure), RiskLevel(risk_level))]

    def get_pre_treatment_checklist(self) -> list[ChecklistItem]:
        """Dental work to complete before antiresorptive therapy starts."""
        if self._checklist is None:
            path = self.guidance_dir / "pre_treatment.yaml"
            data = self._load_yaml(path)
            try:
                self._checklist = [ChecklistItem(**item) for item in data.get("items", [])]
            except (TypeError, ValidationError) as e:
                raise KnowledgeBaseError(f"malformed checklist: {e}", source=str(path)) from e
        return list(self._checklist)

    def get_pre_treatment_text(self) -> tuple[str, str]:
        """The checklist's introduction and closing reminder."""
        data = self._load_yaml(self.guidance_dir / "pre_treatment.yaml")
        return data.get("intro", ""), data.get("reminder", "")


def is_about_to_start(patient: PatientProfile) -> bool:
    """True when the patient has never used the drug but is about to start it."""
    return (
        not patient.has_antiresorptive_med
        and patient.medication_status == MedicationStatus.ABOUT_TO_START
    )


def get_treatment_guidance(
    procedure: DentalProcedure,
    risk_level: RiskLevel,
) -> TreatmentGuidance:
    return GuidanceCatalog().get_treatment_guidance(procedure, risk_level)


def get_pre_treatment_checklist() -> list[ChecklistItem]:
    return GuidanceCatalog().get_pre_treatment_checklist()
