"""
Prescriptions and their link to consultations.

Business Rules:
- A prescription is created with at least one line
- Doctor and patient exist; when a consultation is given it exists and has
  the same doctor and patient
- Every line references an existing medication with quantity > 0
- Deleting a prescription deletes its lines
"""

import dataclasses
import logging
from datetime import date
from typing import List, Optional

from kingdom_hospital.core.exceptions import (
    DUPLICATE_LINE_MESSAGE,
    DuplicateRecordError,
    ErrorKind,
)
from kingdom_hospital.core.result import ServiceResult
from kingdom_hospital.core.validation import Rule, check, first_failure, reject
from kingdom_hospital.domain.entities import Prescription
from kingdom_hospital.domain.interfaces import (
    IConsultationReader,
    IDoctorReader,
    IMedicationReader,
    IPatientReader,
    IPrescriptionRepository,
)
from kingdom_hospital.schemas.dtos import PrescriptionRequest, PrescriptionResponse

from .rules import filter_rules, line_rules, must_exist, must_reference, not_found

logger = logging.getLogger(__name__)


class PrescriptionService:
    def __init__(
        self,
        prescriptions: IPrescriptionRepository,
        doctors: IDoctorReader,
        patients: IPatientReader,
        consultations: IConsultationReader,
        medications: IMedicationReader,
    ) -> None:
        self.prescriptions = prescriptions
        self.doctors = doctors
        self.patients = patients
        self.consultations = consultations
        self.medications = medications

    # ------------------- rules -------------------

    def _matches_consultation(
        self, consultation_id: int, doctor_id: int, patient_id: int
    ) -> bool:
        consultation = self.consultations.get_by_id(consultation_id)
        return (
            consultation is not None
            and consultation.doctor_id == doctor_id
            and consultation.patient_id == patient_id
        )

    def _consistency_rule(
        self, consultation_id: int, doctor_id: int, patient_id: int
    ) -> Rule:
        return check(
            lambda: self._matches_consultation(consultation_id, doctor_id, patient_id),
            ErrorKind.INVARIANT_VIOLATION,
            f"Prescription doctor and patient must match consultation {consultation_id}",
        )

    def _header_rules(self, request: PrescriptionRequest) -> List[Rule]:
        rules = [
            must_reference(self.doctors, request.doctor_id, "Doctor"),
            must_reference(self.patients, request.patient_id, "Patient"),
        ]
        if request.consultation_id is not None:
            rules += [
                must_reference(self.consultations, request.consultation_id, "Consultation"),
                self._consistency_rule(
                    request.consultation_id, request.doctor_id, request.patient_id
                ),
            ]
        return rules

    # ------------------- queries -------------------

    def list_all(self) -> ServiceResult:
        return ServiceResult.ok(
            [PrescriptionResponse.from_domain(p) for p in self.prescriptions.list_all()]
        )

    def get(self, prescription_id: int) -> ServiceResult:
        prescription = self.prescriptions.get_by_id(prescription_id)
        if prescription is None:
            return not_found("Prescription", prescription_id)
        return ServiceResult.ok(PrescriptionResponse.from_domain(prescription))

    def filter(
        self,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> ServiceResult:
        failure = first_failure(
            filter_rules(
                self.doctors, self.patients, doctor_id, patient_id, date_from, date_to
            )
        )
        if failure is not None:
            return failure

        prescriptions = self.prescriptions.filter(
            doctor_id=doctor_id,
            patient_id=patient_id,
            date_from=date_from,
            date_to=date_to,
        )
        return ServiceResult.ok(
            [PrescriptionResponse.from_domain(p) for p in prescriptions]
        )

    # ------------------- commands -------------------

    def create(self, request: PrescriptionRequest) -> ServiceResult:
        logger.info(
            "Creating prescription",
            extra={
                "context": {
                    "doctor_id": request.doctor_id,
                    "patient_id": request.patient_id,
                    "consultation_id": request.consultation_id,
                    "lines": len(request.lines),
                }
            },
        )
        failure = first_failure(
            [
                check(
                    lambda: len(request.lines) > 0,
                    ErrorKind.INVARIANT_VIOLATION,
                    "A prescription needs at least one line",
                )
            ]
            + self._header_rules(request)
            + line_rules(self.medications, request.lines)
        )
        if failure is not None:
            return failure

        prescription = Prescription(
            doctor_id=request.doctor_id,
            patient_id=request.patient_id,
            consultation_id=request.consultation_id,
            date=request.date,
            notes=request.notes,
            lines=[line.to_domain() for line in request.lines],
        )
        try:
            created = self.prescriptions.create(prescription)
        except DuplicateRecordError:
            return reject(ErrorKind.CONFLICT, DUPLICATE_LINE_MESSAGE)
        return ServiceResult.ok(PrescriptionResponse.from_domain(created))

    def create_for_consultation(
        self, consultation_id: int, request: PrescriptionRequest
    ) -> ServiceResult:
        """Create a prescription whose doctor and patient come from the consultation.

        Whatever doctor, patient or consultation the payload carried is
        overwritten before the regular creation rules run.
        """
        consultation = self.consultations.get_by_id(consultation_id)
        if consultation is None:
            return not_found("Consultation", consultation_id)

        request = dataclasses.replace(
            request,
            doctor_id=consultation.doctor_id,
            patient_id=consultation.patient_id,
            consultation_id=consultation.id,
        )
        return self.create(request)

    def update(self, prescription_id: int, request: PrescriptionRequest) -> ServiceResult:
        """Replace the header fields; lines are managed separately."""
        logger.info(
            "Updating prescription",
            extra={
                "context": {
                    "prescription_id": prescription_id,
                    "consultation_id": request.consultation_id,
                }
            },
        )
        failure = first_failure(
            [must_exist(self.prescriptions, prescription_id, "Prescription")]
            + self._header_rules(request)
        )
        if failure is not None:
            return failure

        updated = self.prescriptions.update_header(
            Prescription(
                id=prescription_id,
                doctor_id=request.doctor_id,
                patient_id=request.patient_id,
                consultation_id=request.consultation_id,
                date=request.date,
                notes=request.notes,
            )
        )
        return ServiceResult.ok(PrescriptionResponse.from_domain(updated))

    def attach_to_consultation(
        self, prescription_id: int, consultation_id: int
    ) -> ServiceResult:
        logger.info(
            "Attaching prescription to consultation",
            extra={
                "context": {
                    "prescription_id": prescription_id,
                    "consultation_id": consultation_id,
                }
            },
        )
        prescription = self.prescriptions.get_by_id(prescription_id)
        if prescription is None:
            return not_found("Prescription", prescription_id)

        failure = first_failure(
            [
                must_exist(self.consultations, consultation_id, "Consultation"),
                self._consistency_rule(
                    consultation_id, prescription.doctor_id, prescription.patient_id
                ),
            ]
        )
        if failure is not None:
            return failure

        updated = self.prescriptions.set_consultation(prescription_id, consultation_id)
        return ServiceResult.ok(PrescriptionResponse.from_domain(updated))

    def detach_from_consultation(self, prescription_id: int) -> ServiceResult:
        logger.info(
            "Detaching prescription from consultation",
            extra={"context": {"prescription_id": prescription_id}},
        )
        failure = first_failure(
            [must_exist(self.prescriptions, prescription_id, "Prescription")]
        )
        if failure is not None:
            return failure

        updated = self.prescriptions.set_consultation(prescription_id, None)
        return ServiceResult.ok(PrescriptionResponse.from_domain(updated))

    def delete(self, prescription_id: int) -> ServiceResult:
        logger.info(
            "Deleting prescription",
            extra={"context": {"prescription_id": prescription_id}},
        )
        failure = first_failure(
            [must_exist(self.prescriptions, prescription_id, "Prescription")]
        )
        if failure is not None:
            return failure

        self.prescriptions.delete(prescription_id)
        return ServiceResult.ok()
