"""Exceptions raised by Focus Flow."""
from __future__ import annotations


class FocusFlowError(Exception):
    """Base class for all Focus Flow errors."""


class ScheduleError(FocusFlowError):
    """A work or notification schedule failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ValidationError(FocusFlowError):
    """A custom exercise failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class TransferError(FocusFlowError):
    """An export target could not be written."""
