"""
Abstract interfaces for repositories following Interface Segregation Principle.

Each aggregate exposes a reader (lookups, existence checks, filtered lists)
and a writer (mutations plus the dependent-record counters used by the
deletion guards). Services depend on these contracts, never on SQLAlchemy.
"""

from abc import ABC, abstractmethod
from datetime import date, time
from typing import List, Optional, Sequence

from .entities import (
    Consultation,
    Doctor,
    Medication,
    Patient,
    Prescription,
    PrescriptionLine,
    Specialty,
)


class ISpecialtyRepository(ABC):
    """Specialties are reference data: read operations plus create."""

    @abstractmethod
    def exists(self, specialty_id: int) -> bool:
        pass

    @abstractmethod
    def get_by_id(self, specialty_id: int) -> Optional[Specialty]:
        pass

    @abstractmethod
    def list_all(self) -> List[Specialty]:
        pass

    @abstractmethod
    def name_exists(self, name: str) -> bool:
        """Case-insensitive lookup by name."""
        pass

    @abstractmethod
    def create(self, specialty: Specialty) -> Specialty:
        pass


class IDoctorReader(ABC):
    """Interface for doctor read operations."""

    @abstractmethod
    def exists(self, doctor_id: int) -> bool:
        pass

    @abstractmethod
    def get_by_id(self, doctor_id: int) -> Optional[Doctor]:
        pass

    @abstractmethod
    def list_all(self) -> List[Doctor]:
        pass

    @abstractmethod
    def list_by_specialty(self, specialty_id: int) -> List[Doctor]:
        pass


class IDoctorWriter(ABC):
    """Interface for doctor write operations."""

    @abstractmethod
    def create(self, doctor: Doctor) -> Doctor:
        pass

    @abstractmethod
    def update(self, doctor: Doctor) -> Doctor:
        pass

    @abstractmethod
    def delete(self, doctor_id: int) -> bool:
        pass

    @abstractmethod
    def count_consultations(self, doctor_id: int) -> int:
        pass

    @abstractmethod
    def count_prescriptions(self, doctor_id: int) -> int:
        pass


class IDoctorRepository(IDoctorReader, IDoctorWriter):
    """Complete doctor repository interface combining read/write operations."""

    pass


class IPatientReader(ABC):
    """Interface for patient read operations."""

    @abstractmethod
    def exists(self, patient_id: int) -> bool:
        pass

    @abstractmethod
    def get_by_id(self, patient_id: int) -> Optional[Patient]:
        pass

    @abstractmethod
    def list_all(self) -> List[Patient]:
        pass

    @abstractmethod
    def list_by_doctor(self, doctor_id: int) -> List[Patient]:
        """Distinct patients who had at least one consultation with the doctor."""
        pass


class IPatientWriter(ABC):
    """Interface for patient write operations."""

    @abstractmethod
    def create(self, patient: Patient) -> Patient:
        pass

    @abstractmethod
    def update(self, patient: Patient) -> Patient:
        pass

    @abstractmethod
    def delete(self, patient_id: int) -> bool:
        pass

    @abstractmethod
    def count_consultations(self, patient_id: int) -> int:
        pass

    @abstractmethod
    def count_prescriptions(self, patient_id: int) -> int:
        pass


class IPatientRepository(IPatientReader, IPatientWriter):
    """Complete patient repository interface combining read/write operations."""

    pass


class IConsultationReader(ABC):
    """Interface for consultation read operations."""

    @abstractmethod
    def exists(self, consultation_id: int) -> bool:
        pass

    @abstractmethod
    def get_by_id(self, consultation_id: int) -> Optional[Consultation]:
        pass

    @abstractmethod
    def list_all(self) -> List[Consultation]:
        pass

    @abstractmethod
    def filter(
        self,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Consultation]:
        """Consultations matching every supplied criterion, newest first."""
        pass

    @abstractmethod
    def has_conflict(
        self,
        doctor_id: int,
        day: date,
        hour: time,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """True if the doctor already holds the (day, hour) slot."""
        pass


class IConsultationWriter(ABC):
    """Interface for consultation write operations."""

    @abstractmethod
    def create(self, consultation: Consultation) -> Consultation:
        pass

    @abstractmethod
    def update(self, consultation: Consultation) -> Consultation:
        pass

    @abstractmethod
    def delete(self, consultation_id: int) -> bool:
        pass

    @abstractmethod
    def count_prescriptions(self, consultation_id: int) -> int:
        pass


class IConsultationRepository(IConsultationReader, IConsultationWriter):
    """Complete consultation repository interface."""

    pass


class IMedicationReader(ABC):
    """Interface for medication read operations."""

    @abstractmethod
    def exists(self, medication_id: int) -> bool:
        pass

    @abstractmethod
    def get_by_id(self, medication_id: int) -> Optional[Medication]:
        pass

    @abstractmethod
    def list_all(self) -> List[Medication]:
        pass

    @abstractmethod
    def missing_ids(self, medication_ids: Sequence[int]) -> List[int]:
        """Ids from ``medication_ids`` with no stored medication, in input order."""
        pass

    @abstractmethod
    def duplicate_exists(
        self,
        name: str,
        dosage_form: str,
        strength: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """Case-insensitive match on (name, dosage_form, strength)."""
        pass


class IMedicationWriter(ABC):
    """Interface for medication write operations."""

    @abstractmethod
    def create(self, medication: Medication) -> Medication:
        pass

    @abstractmethod
    def update(self, medication: Medication) -> Medication:
        pass

    @abstractmethod
    def delete(self, medication_id: int) -> bool:
        pass

    @abstractmethod
    def count_prescription_lines(self, medication_id: int) -> int:
        pass


class IMedicationRepository(IMedicationReader, IMedicationWriter):
    """Complete medication repository interface."""

    pass


class IPrescriptionReader(ABC):
    """Interface for prescription read operations."""

    @abstractmethod
    def exists(self, prescription_id: int) -> bool:
        pass

    @abstractmethod
    def get_by_id(self, prescription_id: int) -> Optional[Prescription]:
        """Prescription with its lines and resolved display names."""
        pass

    @abstractmethod
    def list_all(self) -> List[Prescription]:
        pass

    @abstractmethod
    def filter(
        self,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        consultation_id: Optional[int] = None,
        medication_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Prescription]:
        """Prescriptions matching every supplied criterion, newest first."""
        pass


class IPrescriptionWriter(ABC):
    """Interface for prescription write operations."""

    @abstractmethod
    def create(self, prescription: Prescription) -> Prescription:
        """Persist the header and its lines in one transaction."""
        pass

    @abstractmethod
    def update_header(self, prescription: Prescription) -> Prescription:
        """Replace header fields; lines are left untouched."""
        pass

    @abstractmethod
    def set_consultation(
        self, prescription_id: int, consultation_id: Optional[int]
    ) -> Prescription:
        pass

    @abstractmethod
    def delete(self, prescription_id: int) -> bool:
        pass


class IPrescriptionRepository(IPrescriptionReader, IPrescriptionWriter):
    """Complete prescription repository interface."""

    pass


class IPrescriptionLineRepository(ABC):
    """Lines are always addressed through their parent prescription."""

    @abstractmethod
    def get_by_id(self, line_id: int) -> Optional[PrescriptionLine]:
        pass

    @abstractmethod
    def list_for_prescription(self, prescription_id: int) -> List[PrescriptionLine]:
        pass

    @abstractmethod
    def add_many(
        self, prescription_id: int, lines: Sequence[PrescriptionLine]
    ) -> List[PrescriptionLine]:
        """Insert every line in one transaction and return them hydrated."""
        pass

    @abstractmethod
    def update(self, line: PrescriptionLine) -> PrescriptionLine:
        pass

    @abstractmethod
    def delete(self, line_id: int) -> bool:
        pass
