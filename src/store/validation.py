"""
Medication record validation and duration calculation.

These are the checks the questionnaire runs before a medication is saved.
The risk scorer itself performs no validation.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import ValidationError

from src.exceptions import MedicationValidationError
from src.models import MedicationRecord, months_between


def calculate_duration_months(
    start_year: int,
    start_month: int,
    stop_year: int | None = None,
    stop_month: int | None = None,
    today: date | None = None,
) -> int:
    """
    Months of use between the start month and the stop month (or today).

    Months are counted as 30-day blocks, rounded up.
    """
    start = date(start_year, start_month, 1)
    if stop_year is not None and stop_month is not None:
        end = date(stop_year, stop_month, 1)
    else:
        end = today or date.today()
    return months_between(start, end)


def validate_medication(record: MedicationRecord, today: date | None = None) -> None:
    """
    Check a medication record's dates.

    Raises:
        MedicationValidationError: listing every problem found
    """
    today = today or date.today()
    current_month = date(today.year, today.month, 1)
    problems = []

    if record.start_date > current_month:
        problems.append("start date cannot be in the future")

    if record.is_stopped:
        if record.stop_year is None or record.stop_month is None:
            problems.append("stop year and month are required for a stopped medication")
        else:
            stop = date(record.stop_year, record.stop_month, 1)
            if stop < record.start_date:
                problems.append("stop date cannot be earlier than the start date")
            if stop > current_month:
                problems.append("stop date cannot be later than the current month")

    if problems:
        raise MedicationValidationError(problems)


def build_medication(data: dict[str, Any] | MedicationRecord) -> MedicationRecord:
    """
    Build a medication record from form data.

    Raises:
        MedicationValidationError: if required fields are missing or invalid
    """
    if isinstance(data, MedicationRecord):
        return data
    try:
        return MedicationRecord.model_validate(data)
    except ValidationError as e:
        problems = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        ]
        raise MedicationValidationError(problems) from e


def with_duration(record: MedicationRecord, today: date | None = None) -> MedicationRecord:
    """Copy of the record with duration_months recomputed."""
    stop_year = record.stop_year if record.is_stopped else None
    stop_month = record.stop_month if record.is_stopped else None
    duration = calculate_duration_months(
        record.start_year, record.start_month, stop_year, stop_month, today
    )
    return record.model_copy(update={"duration_months": duration})
