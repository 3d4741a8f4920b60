"""
Exceptions for MRONJ Risk.

Every error carries the exit code the CLI terminates with.
"""

from __future__ import annotations


class MronjError(Exception):
    """Base exception for all MRONJ Risk errors."""

    exit_code: int = 1


class InputContractError(MronjError):
    """Malformed input reached the risk scorer."""

    exit_code: int = 2

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(f"{field}: {message}" if field else message)


class MedicationValidationError(MronjError):
    """A medication record failed validation before being stored."""

    exit_code: int = 3

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class StoreError(MronjError):
    """Invalid patient store operation or unreadable patient file."""

    exit_code: int = 4


class KnowledgeBaseError(MronjError):
    """Guidance data is missing or malformed."""

    exit_code: int = 5

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class OutputError(MronjError):
    """Failed to write a report."""

    exit_code: int = 6
