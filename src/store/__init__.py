"""
Patient data store and medication validation.
"""

from src.store.patient_store import PatientStore
from src.store.validation import (
    build_medication,
    calculate_duration_months,
    validate_medication,
    with_duration,
)

__all__ = [
    "PatientStore",
    "build_medication",
    "calculate_duration_months",
    "validate_medication",
    "with_duration",
]
