"""
Domain entities - pure business objects.

Entities carry plain foreign keys plus the display names resolved by the
repositories (``doctor_name``, ``medication_name``...). They never hold
references to other entities.
"""

import datetime as dt
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class Specialty:
    """Domain entity representing a medical specialty."""

    name: str = ""
    id: Optional[int] = None


@dataclass
class Doctor:
    """Domain entity representing a doctor."""

    first_name: str = ""
    last_name: str = ""
    specialty_id: Optional[int] = None
    id: Optional[int] = None
    specialty_name: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class Patient:
    """Domain entity representing a patient."""

    first_name: str = ""
    last_name: str = ""
    birth_date: Optional[dt.date] = None
    id: Optional[int] = None
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def age_on(self, day: dt.date) -> Optional[int]:
        """Age in whole years on ``day``; the birthday itself counts."""
        if self.birth_date is None:
            return None
        before_birthday = (day.month, day.day) < (
            self.birth_date.month,
            self.birth_date.day,
        )
        return day.year - self.birth_date.year - int(before_birthday)


@dataclass
class Consultation:
    """
    Domain entity for a consultation.

    A doctor holds at most one consultation per (date, hour) slot.
    """

    doctor_id: int = 0
    patient_id: int = 0
    date: Optional[dt.date] = None
    hour: Optional[dt.time] = None
    reason: Optional[str] = None
    id: Optional[int] = None
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
    created_at: Optional[dt.datetime] = None


@dataclass
class Medication:
    """Domain entity for a medication (name + dosage form + strength)."""

    name: str = ""
    dosage_form: str = ""
    strength: str = ""
    atc_code: Optional[str] = None
    id: Optional[int] = None


@dataclass
class PrescriptionLine:
    """One medication entry of a prescription."""

    medication_id: int = 0
    dosage: str = ""
    frequency: str = ""
    duration: str = ""
    quantity: int = 0
    instructions: Optional[str] = None
    prescription_id: Optional[int] = None
    id: Optional[int] = None
    medication_name: Optional[str] = None


@dataclass
class Prescription:
    """
    Domain entity for a prescription.

    When ``consultation_id`` is set, doctor and patient are the ones of
    that consultation.
    """

    doctor_id: int = 0
    patient_id: int = 0
    date: Optional[dt.date] = None
    consultation_id: Optional[int] = None
    notes: Optional[str] = None
    id: Optional[int] = None
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
    lines: List[PrescriptionLine] = field(default_factory=list)
    created_at: Optional[dt.datetime] = None
