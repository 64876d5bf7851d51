"""
Custom exceptions and error categories for the application.
Following SOLID principles - centralized error handling.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Category of a rejected service operation.

    The HTTP layer picks the response status from the kind, never from
    the message text.
    """

    NOT_FOUND = "not_found"
    UNKNOWN_REFERENCE = "unknown_reference"
    CONFLICT = "conflict"
    INVARIANT_VIOLATION = "invariant_violation"
    REFERENTIAL_GUARD = "referential_guard"


class DuplicateRecordError(Exception):
    """
    Raised by repositories when the database rejects a write because of a
    uniqueness constraint.

    Services translate it into a CONFLICT result; it is the backstop for
    the check-then-insert window between a pre-check and the commit.
    """

    def __init__(self, message: str, constraint: str = ""):
        super().__init__(message)
        self.message = message
        self.constraint = constraint


SLOT_TAKEN_MESSAGE = "Doctor already has a consultation at this date and hour"
DUPLICATE_LINE_MESSAGE = "Prescription already contains an identical line"
DUPLICATE_MEDICATION_MESSAGE = (
    "A medication with the same name, dosage form and strength already exists"
)
