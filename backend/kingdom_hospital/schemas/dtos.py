"""
Data Transfer Objects (DTOs).

Request DTOs are built from the cleaned data of the payload validators in
``core.validation`` (snake_case, typed values). Response DTOs are built from
domain entities and serialized with camelCase keys, ISO dates and HH:MM
hours.
"""

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any, Dict, List, Optional

from kingdom_hospital.domain.entities import (
    Consultation,
    Doctor,
    Medication,
    Patient,
    Prescription,
    PrescriptionLine,
    Specialty,
)


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def _hour(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M") if value else None


# ------------------- REQUESTS -------------------


@dataclass
class SpecialtyRequest:
    name: str


@dataclass
class DoctorRequest:
    first_name: str
    last_name: str
    specialty_id: int


@dataclass
class PatientRequest:
    first_name: str
    last_name: str
    birth_date: date


@dataclass
class ConsultationRequest:
    doctor_id: int
    patient_id: int
    date: date
    hour: time
    reason: Optional[str] = None


@dataclass
class MedicationRequest:
    name: str
    dosage_form: str
    strength: str
    atc_code: Optional[str] = None


@dataclass
class PrescriptionLineRequest:
    medication_id: int
    dosage: str
    frequency: str
    duration: str
    quantity: int
    instructions: Optional[str] = None

    def to_domain(self) -> PrescriptionLine:
        return PrescriptionLine(
            medication_id=self.medication_id,
            dosage=self.dosage,
            frequency=self.frequency,
            duration=self.duration,
            quantity=self.quantity,
            instructions=self.instructions,
        )


@dataclass
class PrescriptionRequest:
    """
    DTO for prescription creation and header updates.

    ``doctor_id`` and ``patient_id`` may be missing when the prescription is
    created for a consultation; they are then copied from it.
    """

    date: date
    doctor_id: Optional[int] = None
    patient_id: Optional[int] = None
    consultation_id: Optional[int] = None
    notes: Optional[str] = None
    lines: List[PrescriptionLineRequest] = field(default_factory=list)

    @classmethod
    def from_cleaned(cls, cleaned: Dict[str, Any]) -> "PrescriptionRequest":
        values = dict(cleaned)
        values["lines"] = [
            PrescriptionLineRequest(**line) for line in values.get("lines", [])
        ]
        return cls(**values)


# ------------------- RESPONSES -------------------


@dataclass
class SpecialtyResponse:
    id: int
    name: str

    @classmethod
    def from_domain(cls, specialty: Specialty) -> "SpecialtyResponse":
        return cls(id=specialty.id, name=specialty.name)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass
class DoctorResponse:
    id: int
    first_name: str
    last_name: str
    full_name: str
    specialty_id: int
    specialty_name: Optional[str]

    @classmethod
    def from_domain(cls, doctor: Doctor) -> "DoctorResponse":
        return cls(
            id=doctor.id,
            first_name=doctor.first_name,
            last_name=doctor.last_name,
            full_name=doctor.full_name,
            specialty_id=doctor.specialty_id,
            specialty_name=doctor.specialty_name,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "fullName": self.full_name,
            "specialtyId": self.specialty_id,
            "specialtyName": self.specialty_name,
        }


@dataclass
class PatientResponse:
    id: int
    first_name: str
    last_name: str
    full_name: str
    birth_date: date
    age: Optional[int]

    @classmethod
    def from_domain(cls, patient: Patient, today: date) -> "PatientResponse":
        """Age is computed against ``today`` (application timezone)."""
        return cls(
            id=patient.id,
            first_name=patient.first_name,
            last_name=patient.last_name,
            full_name=patient.full_name,
            birth_date=patient.birth_date,
            age=patient.age_on(today),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "fullName": self.full_name,
            "birthDate": _iso(self.birth_date),
            "age": self.age,
        }


@dataclass
class ConsultationResponse:
    id: int
    doctor_id: int
    doctor_name: Optional[str]
    patient_id: int
    patient_name: Optional[str]
    date: date
    hour: time
    reason: Optional[str]

    @classmethod
    def from_domain(cls, consultation: Consultation) -> "ConsultationResponse":
        return cls(
            id=consultation.id,
            doctor_id=consultation.doctor_id,
            doctor_name=consultation.doctor_name,
            patient_id=consultation.patient_id,
            patient_name=consultation.patient_name,
            date=consultation.date,
            hour=consultation.hour,
            reason=consultation.reason,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "doctorId": self.doctor_id,
            "doctorName": self.doctor_name,
            "patientId": self.patient_id,
            "patientName": self.patient_name,
            "date": _iso(self.date),
            "hour": _hour(self.hour),
            "reason": self.reason,
        }


@dataclass
class MedicationResponse:
    id: int
    name: str
    dosage_form: str
    strength: str
    atc_code: Optional[str]

    @classmethod
    def from_domain(cls, medication: Medication) -> "MedicationResponse":
        return cls(
            id=medication.id,
            name=medication.name,
            dosage_form=medication.dosage_form,
            strength=medication.strength,
            atc_code=medication.atc_code,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "dosageForm": self.dosage_form,
            "strength": self.strength,
            "atcCode": self.atc_code,
        }


@dataclass
class PrescriptionLineResponse:
    id: int
    prescription_id: int
    medication_id: int
    medication_name: Optional[str]
    dosage: str
    frequency: str
    duration: str
    quantity: int
    instructions: Optional[str]

    @classmethod
    def from_domain(cls, line: PrescriptionLine) -> "PrescriptionLineResponse":
        return cls(
            id=line.id,
            prescription_id=line.prescription_id,
            medication_id=line.medication_id,
            medication_name=line.medication_name,
            dosage=line.dosage,
            frequency=line.frequency,
            duration=line.duration,
            quantity=line.quantity,
            instructions=line.instructions,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "prescriptionId": self.prescription_id,
            "medicationId": self.medication_id,
            "medicationName": self.medication_name,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "duration": self.duration,
            "quantity": self.quantity,
            "instructions": self.instructions,
        }


@dataclass
class PrescriptionResponse:
    id: int
    doctor_id: int
    doctor_name: Optional[str]
    patient_id: int
    patient_name: Optional[str]
    consultation_id: Optional[int]
    date: date
    notes: Optional[str]
    lines: List[PrescriptionLineResponse]

    @classmethod
    def from_domain(cls, prescription: Prescription) -> "PrescriptionResponse":
        return cls(
            id=prescription.id,
            doctor_id=prescription.doctor_id,
            doctor_name=prescription.doctor_name,
            patient_id=prescription.patient_id,
            patient_name=prescription.patient_name,
            consultation_id=prescription.consultation_id,
            date=prescription.date,
            notes=prescription.notes,
            lines=[
                PrescriptionLineResponse.from_domain(line) for line in prescription.lines
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "doctorId": self.doctor_id,
            "doctorName": self.doctor_name,
            "patientId": self.patient_id,
            "patientName": self.patient_name,
            "consultationId": self.consultation_id,
            "date": _iso(self.date),
            "notes": self.notes,
            "lines": [line.to_dict() for line in self.lines],
        }
