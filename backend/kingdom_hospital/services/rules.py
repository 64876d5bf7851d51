"""
Business rules shared by several services.

Every helper returns a lazy ``Rule`` for ``first_failure``; nothing touches
the repositories until the rule is evaluated.
"""

from datetime import date
from typing import List, Optional, Sequence

from kingdom_hospital.core.exceptions import ErrorKind
from kingdom_hospital.core.result import ServiceResult
from kingdom_hospital.core.validation import Rule, check, reject


def not_found(entity: str, entity_id: int) -> ServiceResult:
    return reject(ErrorKind.NOT_FOUND, f"{entity} {entity_id} not found")


def must_exist(reader, entity_id: int, entity: str) -> Rule:
    """The addressed resource (path id) exists, else NOT_FOUND."""
    return check(
        lambda: reader.exists(entity_id),
        ErrorKind.NOT_FOUND,
        f"{entity} {entity_id} not found",
    )


def must_reference(reader, entity_id: int, entity: str) -> Rule:
    """A referenced id from the payload exists, else UNKNOWN_REFERENCE."""
    return check(
        lambda: reader.exists(entity_id),
        ErrorKind.UNKNOWN_REFERENCE,
        f"{entity} {entity_id} does not exist",
    )


def date_range(date_from: Optional[date], date_to: Optional[date]) -> Rule:
    return check(
        lambda: date_from is None or date_to is None or date_from <= date_to,
        ErrorKind.INVARIANT_VIOLATION,
        "'from' must be on or before 'to'",
    )


def filter_rules(
    doctors,
    patients,
    doctor_id: Optional[int],
    patient_id: Optional[int],
    date_from: Optional[date],
    date_to: Optional[date],
) -> List[Rule]:
    """
    Rules for list filters: a date window needs a doctor or a patient, and
    every supplied id must exist.
    """
    rules = [
        check(
            lambda: doctor_id is not None
            or patient_id is not None
            or (date_from is None and date_to is None),
            ErrorKind.INVARIANT_VIOLATION,
            "Filtering requires doctorId or patientId",
        ),
        date_range(date_from, date_to),
    ]
    if doctor_id is not None:
        rules.append(must_reference(doctors, doctor_id, "Doctor"))
    if patient_id is not None:
        rules.append(must_reference(patients, patient_id, "Patient"))
    return rules


def line_rules(medications, lines: Sequence) -> List[Rule]:
    """Every line references an existing medication and has quantity > 0."""

    def _medications_exist() -> Optional[ServiceResult]:
        missing = medications.missing_ids([line.medication_id for line in lines])
        if not missing:
            return None
        return reject(
            ErrorKind.UNKNOWN_REFERENCE, f"Medication {missing[0]} does not exist"
        )

    return [
        _medications_exist,
        check(
            lambda: all(line.quantity > 0 for line in lines),
            ErrorKind.INVARIANT_VIOLATION,
            "Quantity must be greater than zero",
        ),
    ]
