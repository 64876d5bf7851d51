"""Doctor use-cases: registration, specialty changes and relation lookups."""

import logging
from datetime import date
from typing import Optional

from kingdom_hospital.core.config import today as app_today
from kingdom_hospital.core.exceptions import ErrorKind
from kingdom_hospital.core.result import ServiceResult
from kingdom_hospital.core.validation import check, first_failure
from kingdom_hospital.domain.entities import Doctor
from kingdom_hospital.domain.interfaces import (
    IConsultationReader,
    IDoctorRepository,
    IPatientReader,
    IPrescriptionReader,
    ISpecialtyRepository,
)
from kingdom_hospital.schemas.dtos import (
    ConsultationResponse,
    DoctorRequest,
    DoctorResponse,
    PatientResponse,
    PrescriptionResponse,
    SpecialtyResponse,
)

from .rules import date_range, must_exist, must_reference, not_found

logger = logging.getLogger(__name__)


class DoctorService:
    """Application service for doctor-related use-cases.

    Business Rules:
    - A doctor always belongs to an existing specialty
    - A doctor referenced by a consultation or a prescription cannot be deleted
    """

    def __init__(
        self,
        doctors: IDoctorRepository,
        specialties: ISpecialtyRepository,
        patients: IPatientReader,
        consultations: IConsultationReader,
        prescriptions: IPrescriptionReader,
        today=app_today,
    ) -> None:
        self.doctors = doctors
        self.specialties = specialties
        self.patients = patients
        self.consultations = consultations
        self.prescriptions = prescriptions
        self._today = today

    def list_all(self) -> ServiceResult:
        return ServiceResult.ok(
            [DoctorResponse.from_domain(d) for d in self.doctors.list_all()]
        )

    def get(self, doctor_id: int) -> ServiceResult:
        doctor = self.doctors.get_by_id(doctor_id)
        if doctor is None:
            return not_found("Doctor", doctor_id)
        return ServiceResult.ok(DoctorResponse.from_domain(doctor))

    def create(self, request: DoctorRequest) -> ServiceResult:
        logger.info(
            "Creating doctor",
            extra={"context": {"specialty_id": request.specialty_id}},
        )
        failure = first_failure(
            [must_reference(self.specialties, request.specialty_id, "Specialty")]
        )
        if failure is not None:
            return failure

        created = self.doctors.create(
            Doctor(
                first_name=request.first_name,
                last_name=request.last_name,
                specialty_id=request.specialty_id,
            )
        )
        return ServiceResult.ok(DoctorResponse.from_domain(created))

    def update(self, doctor_id: int, request: DoctorRequest) -> ServiceResult:
        logger.info(
            "Updating doctor",
            extra={"context": {"doctor_id": doctor_id, "specialty_id": request.specialty_id}},
        )
        failure = first_failure(
            [
                must_exist(self.doctors, doctor_id, "Doctor"),
                must_reference(self.specialties, request.specialty_id, "Specialty"),
            ]
        )
        if failure is not None:
            return failure

        updated = self.doctors.update(
            Doctor(
                id=doctor_id,
                first_name=request.first_name,
                last_name=request.last_name,
                specialty_id=request.specialty_id,
            )
        )
        return ServiceResult.ok(DoctorResponse.from_domain(updated))

    def delete(self, doctor_id: int) -> ServiceResult:
        """Delete a doctor that no consultation or prescription references."""
        logger.info("Deleting doctor", extra={"context": {"doctor_id": doctor_id}})
        failure = first_failure(
            [
                must_exist(self.doctors, doctor_id, "Doctor"),
                check(
                    lambda: self.doctors.count_consultations(doctor_id) == 0,
                    ErrorKind.REFERENTIAL_GUARD,
                    f"Doctor {doctor_id} has consultations and cannot be deleted",
                ),
                check(
                    lambda: self.doctors.count_prescriptions(doctor_id) == 0,
                    ErrorKind.REFERENTIAL_GUARD,
                    f"Doctor {doctor_id} has prescriptions and cannot be deleted",
                ),
            ]
        )
        if failure is not None:
            return failure

        self.doctors.delete(doctor_id)
        return ServiceResult.ok()

    def get_specialty(self, doctor_id: int) -> ServiceResult:
        doctor = self.doctors.get_by_id(doctor_id)
        if doctor is None:
            return not_found("Doctor", doctor_id)
        specialty = self.specialties.get_by_id(doctor.specialty_id)
        if specialty is None:
            return not_found("Specialty", doctor.specialty_id)
        return ServiceResult.ok(SpecialtyResponse.from_domain(specialty))

    def change_specialty(self, doctor_id: int, specialty_id: int) -> ServiceResult:
        """Move a doctor to another specialty; both ids come from the path."""
        logger.info(
            "Changing doctor specialty",
            extra={"context": {"doctor_id": doctor_id, "specialty_id": specialty_id}},
        )
        failure = first_failure(
            [
                must_exist(self.doctors, doctor_id, "Doctor"),
                must_exist(self.specialties, specialty_id, "Specialty"),
            ]
        )
        if failure is not None:
            return failure

        doctor = self.doctors.get_by_id(doctor_id)
        doctor.specialty_id = specialty_id
        updated = self.doctors.update(doctor)
        return ServiceResult.ok(DoctorResponse.from_domain(updated))

    def consultations_of(
        self,
        doctor_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> ServiceResult:
        failure = first_failure(
            [must_exist(self.doctors, doctor_id, "Doctor"), date_range(date_from, date_to)]
        )
        if failure is not None:
            return failure
        consultations = self.consultations.filter(
            doctor_id=doctor_id, date_from=date_from, date_to=date_to
        )
        return ServiceResult.ok(
            [ConsultationResponse.from_domain(c) for c in consultations]
        )

    def patients_of(self, doctor_id: int) -> ServiceResult:
        """Distinct patients the doctor has already consulted."""
        failure = first_failure([must_exist(self.doctors, doctor_id, "Doctor")])
        if failure is not None:
            return failure
        day = self._today()
        return ServiceResult.ok(
            [
                PatientResponse.from_domain(p, day)
                for p in self.patients.list_by_doctor(doctor_id)
            ]
        )

    def prescriptions_of(
        self,
        doctor_id: int,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> ServiceResult:
        failure = first_failure(
            [must_exist(self.doctors, doctor_id, "Doctor"), date_range(date_from, date_to)]
        )
        if failure is not None:
            return failure
        prescriptions = self.prescriptions.filter(
            doctor_id=doctor_id, date_from=date_from, date_to=date_to
        )
        return ServiceResult.ok(
            [PrescriptionResponse.from_domain(p) for p in prescriptions]
        )
