"""Patient use-cases.

Business Rules:
- Birth date lies in [1900-01-01, today), "today" being the current date in
  the application timezone
- A patient with consultations or prescriptions cannot be deleted
"""

import logging
from datetime import date
from typing import Callable

from kingdom_hospital.core.config import today as app_today
from kingdom_hospital.core.exceptions import ErrorKind
from kingdom_hospital.core.result import ServiceResult
from kingdom_hospital.core.validation import Rule, check, first_failure
from kingdom_hospital.domain.entities import Patient
from kingdom_hospital.domain.interfaces import (
    IConsultationReader,
    IPatientRepository,
    IPrescriptionReader,
)
from kingdom_hospital.schemas.dtos import (
    ConsultationResponse,
    PatientRequest,
    PatientResponse,
    PrescriptionResponse,
)

from .rules import must_exist, not_found

logger = logging.getLogger(__name__)

MIN_BIRTH_DATE = date(1900, 1, 1)


class PatientService:
    def __init__(
        self,
        patients: IPatientRepository,
        consultations: IConsultationReader,
        prescriptions: IPrescriptionReader,
        today: Callable[[], date] = app_today,
    ) -> None:
        self.patients = patients
        self.consultations = consultations
        self.prescriptions = prescriptions
        self._today = today

    def _birth_date_rule(self, birth_date: date) -> Rule:
        return check(
            lambda: MIN_BIRTH_DATE <= birth_date < self._today(),
            ErrorKind.INVARIANT_VIOLATION,
            f"Birth date must be on or after {MIN_BIRTH_DATE.isoformat()} and before today",
        )

    def list_all(self) -> ServiceResult:
        """All patients with their age computed for today."""
        day = self._today()
        return ServiceResult.ok(
            [PatientResponse.from_domain(p, day) for p in self.patients.list_all()]
        )

    def get(self, patient_id: int) -> ServiceResult:
        patient = self.patients.get_by_id(patient_id)
        if patient is None:
            return not_found("Patient", patient_id)
        return ServiceResult.ok(PatientResponse.from_domain(patient, self._today()))

    def create(self, request: PatientRequest) -> ServiceResult:
        logger.info(
            "Creating patient",
            extra={"context": {"birth_date": request.birth_date.isoformat()}},
        )
        failure = first_failure([self._birth_date_rule(request.birth_date)])
        if failure is not None:
            return failure

        created = self.patients.create(
            Patient(
                first_name=request.first_name,
                last_name=request.last_name,
                birth_date=request.birth_date,
            )
        )
        return ServiceResult.ok(PatientResponse.from_domain(created, self._today()))

    def update(self, patient_id: int, request: PatientRequest) -> ServiceResult:
        logger.info("Updating patient", extra={"context": {"patient_id": patient_id}})
        failure = first_failure(
            [
                must_exist(self.patients, patient_id, "Patient"),
                self._birth_date_rule(request.birth_date),
            ]
        )
        if failure is not None:
            return failure

        updated = self.patients.update(
            Patient(
                id=patient_id,
                first_name=request.first_name,
                last_name=request.last_name,
                birth_date=request.birth_date,
            )
        )
        return ServiceResult.ok(PatientResponse.from_domain(updated, self._today()))

    def delete(self, patient_id: int) -> ServiceResult:
        logger.info("Deleting patient", extra={"context": {"patient_id": patient_id}})
        failure = first_failure(
            [
                must_exist(self.patients, patient_id, "Patient"),
                check(
                    lambda: self.patients.count_consultations(patient_id) == 0,
                    ErrorKind.REFERENTIAL_GUARD,
                    f"Patient {patient_id} has consultations and cannot be deleted",
                ),
                check(
                    lambda: self.patients.count_prescriptions(patient_id) == 0,
                    ErrorKind.REFERENTIAL_GUARD,
                    f"Patient {patient_id} has prescriptions and cannot be deleted",
                ),
            ]
        )
        if failure is not None:
            return failure

        self.patients.delete(patient_id)
        return ServiceResult.ok()

    def consultations_of(self, patient_id: int) -> ServiceResult:
        failure = first_failure([must_exist(self.patients, patient_id, "Patient")])
        if failure is not None:
            return failure
        return ServiceResult.ok(
            [
                ConsultationResponse.from_domain(c)
                for c in self.consultations.filter(patient_id=patient_id)
            ]
        )

    def prescriptions_of(self, patient_id: int) -> ServiceResult:
        failure = first_failure([must_exist(self.patients, patient_id, "Patient")])
        if failure is not None:
            return failure
        return ServiceResult.ok(
            [
                PrescriptionResponse.from_domain(p)
                for p in self.prescriptions.filter(patient_id=patient_id)
            ]
        )
