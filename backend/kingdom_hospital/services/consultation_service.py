"""
Consultation booking.

A doctor holds at most one consultation per (date, hour): the conflict
check is exact equality on the slot, there is no duration window. The
database unique constraint backs the pre-check when two bookings race.
"""

import logging
from datetime import date
from typing import List, Optional

from kingdom_hospital.core.exceptions import (
    SLOT_TAKEN_MESSAGE,
    DuplicateRecordError,
    ErrorKind,
)
from kingdom_hospital.core.result import ServiceResult
from kingdom_hospital.core.validation import Rule, check, first_failure, reject
from kingdom_hospital.domain.entities import Consultation
from kingdom_hospital.domain.interfaces import (
    IConsultationRepository,
    IDoctorReader,
    IPatientReader,
    IPrescriptionReader,
)
from kingdom_hospital.schemas.dtos import (
    ConsultationRequest,
    ConsultationResponse,
    PrescriptionResponse,
)

from .rules import filter_rules, must_exist, must_reference, not_found

logger = logging.getLogger(__name__)


class ConsultationService:
    def __init__(
        self,
        consultations: IConsultationRepository,
        doctors: IDoctorReader,
        patients: IPatientReader,
        prescriptions: IPrescriptionReader,
    ) -> None:
        self.consultations = consultations
        self.doctors = doctors
        self.patients = patients
        self.prescriptions = prescriptions

    def _booking_rules(
        self, request: ConsultationRequest, exclude_id: Optional[int] = None
    ) -> List[Rule]:
        return [
            must_reference(self.doctors, request.doctor_id, "Doctor"),
            must_reference(self.patients, request.patient_id, "Patient"),
            check(
                lambda: not self.consultations.has_conflict(
                    request.doctor_id, request.date, request.hour, exclude_id=exclude_id
                ),
                ErrorKind.CONFLICT,
                SLOT_TAKEN_MESSAGE,
            ),
        ]

    def list_all(self) -> ServiceResult:
        return ServiceResult.ok(
            [ConsultationResponse.from_domain(c) for c in self.consultations.list_all()]
        )

    def get(self, consultation_id: int) -> ServiceResult:
        consultation = self.consultations.get_by_id(consultation_id)
        if consultation is None:
            return not_found("Consultation", consultation_id)
        return ServiceResult.ok(ConsultationResponse.from_domain(consultation))

    def filter(
        self,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> ServiceResult:
        """Consultations by doctor and/or patient within an optional date window.

        With no criterion at all every consultation is returned. Results are
        ordered by date then hour, newest first.
        """
        failure = first_failure(
            filter_rules(
                self.doctors, self.patients, doctor_id, patient_id, date_from, date_to
            )
        )
        if failure is not None:
            return failure

        consultations = self.consultations.filter(
            doctor_id=doctor_id,
            patient_id=patient_id,
            date_from=date_from,
            date_to=date_to,
        )
        return ServiceResult.ok(
            [ConsultationResponse.from_domain(c) for c in consultations]
        )

    def create(self, request: ConsultationRequest) -> ServiceResult:
        logger.info(
            "Booking consultation",
            extra={
                "context": {
                    "doctor_id": request.doctor_id,
                    "patient_id": request.patient_id,
                    "date": request.date.isoformat(),
                    "hour": request.hour.strftime("%H:%M"),
                }
            },
        )
        failure = first_failure(self._booking_rules(request))
        if failure is not None:
            return failure

        try:
            created = self.consultations.create(self._to_entity(request))
        except DuplicateRecordError:
            return reject(ErrorKind.CONFLICT, SLOT_TAKEN_MESSAGE)
        return ServiceResult.ok(ConsultationResponse.from_domain(created))

    def update(self, consultation_id: int, request: ConsultationRequest) -> ServiceResult:
        """Full replace; the consultation's own slot does not count as a conflict."""
        logger.info(
            "Updating consultation",
            extra={
                "context": {
                    "consultation_id": consultation_id,
                    "doctor_id": request.doctor_id,
                    "date": request.date.isoformat(),
                    "hour": request.hour.strftime("%H:%M"),
                }
            },
        )
        failure = first_failure(
            [must_exist(self.consultations, consultation_id, "Consultation")]
            + self._booking_rules(request, exclude_id=consultation_id)
        )
        if failure is not None:
            return failure

        try:
            updated = self.consultations.update(
                self._to_entity(request, consultation_id)
            )
        except DuplicateRecordError:
            return reject(ErrorKind.CONFLICT, SLOT_TAKEN_MESSAGE)
        return ServiceResult.ok(ConsultationResponse.from_domain(updated))

    def delete(self, consultation_id: int) -> ServiceResult:
        """Delete a consultation no prescription refers to."""
        logger.info(
            "Deleting consultation",
            extra={"context": {"consultation_id": consultation_id}},
        )
        failure = first_failure(
            [
                must_exist(self.consultations, consultation_id, "Consultation"),
                check(
                    lambda: self.consultations.count_prescriptions(consultation_id) == 0,
                    ErrorKind.REFERENTIAL_GUARD,
                    f"Consultation {consultation_id} is referenced by prescriptions "
                    "and cannot be deleted (historical traceability)",
                ),
            ]
        )
        if failure is not None:
            return failure

        self.consultations.delete(consultation_id)
        return ServiceResult.ok()

    def prescriptions_for(self, consultation_id: int) -> ServiceResult:
        failure = first_failure(
            [must_exist(self.consultations, consultation_id, "Consultation")]
        )
        if failure is not None:
            return failure
        return ServiceResult.ok(
            [
                PrescriptionResponse.from_domain(p)
                for p in self.prescriptions.filter(consultation_id=consultation_id)
            ]
        )

    @staticmethod
    def _to_entity(
        request: ConsultationRequest, consultation_id: Optional[int] = None
    ) -> Consultation:
        return Consultation(
            id=consultation_id,
            doctor_id=request.doctor_id,
            patient_id=request.patient_id,
            date=request.date,
            hour=request.hour,
            reason=request.reason,
        )
