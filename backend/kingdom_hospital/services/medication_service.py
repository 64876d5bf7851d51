import logging

from kingdom_hospital.core.exceptions import (
    DUPLICATE_MEDICATION_MESSAGE,
    DuplicateRecordError,
    ErrorKind,
)
from kingdom_hospital.core.result import ServiceResult
from kingdom_hospital.core.validation import check, first_failure, reject
from kingdom_hospital.domain.entities import Medication
from kingdom_hospital.domain.interfaces import (
    IMedicationRepository,
    IPrescriptionReader,
)
from kingdom_hospital.schemas.dtos import (
    MedicationRequest,
    MedicationResponse,
    PrescriptionResponse,
)

from .rules import must_exist, not_found

logger = logging.getLogger(__name__)


class MedicationService:
    """Medication catalogue.

    (name, dosage_form, strength) is unique, compared case-insensitively.
    A medication used by any prescription line cannot be deleted.
    """

    def __init__(
        self, medications: IMedicationRepository, prescriptions: IPrescriptionReader
    ) -> None:
        self.medications = medications
        self.prescriptions = prescriptions

    def list_all(self) -> ServiceResult:
        return ServiceResult.ok(
            [MedicationResponse.from_domain(m) for m in self.medications.list_all()]
        )

    def get(self, medication_id: int) -> ServiceResult:
        medication = self.medications.get_by_id(medication_id)
        if medication is None:
            return not_found("Medication", medication_id)
        return ServiceResult.ok(MedicationResponse.from_domain(medication))

    def create(self, request: MedicationRequest) -> ServiceResult:
        logger.info("Creating medication", extra={"context": {"name": request.name}})
        failure = first_failure(
            [
                check(
                    lambda: not self.medications.duplicate_exists(
                        request.name, request.dosage_form, request.strength
                    ),
                    ErrorKind.CONFLICT,
                    DUPLICATE_MEDICATION_MESSAGE,
                )
            ]
        )
        if failure is not None:
            return failure

        try:
            created = self.medications.create(self._to_entity(request))
        except DuplicateRecordError:
            return reject(ErrorKind.CONFLICT, DUPLICATE_MEDICATION_MESSAGE)
        return ServiceResult.ok(MedicationResponse.from_domain(created))

    def update(self, medication_id: int, request: MedicationRequest) -> ServiceResult:
        logger.info(
            "Updating medication", extra={"context": {"medication_id": medication_id}}
        )
        failure = first_failure(
            [
                must_exist(self.medications, medication_id, "Medication"),
                check(
                    lambda: not self.medications.duplicate_exists(
                        request.name,
                        request.dosage_form,
                        request.strength,
                        exclude_id=medication_id,
                    ),
                    ErrorKind.CONFLICT,
                    DUPLICATE_MEDICATION_MESSAGE,
                ),
            ]
        )
        if failure is not None:
            return failure

        try:
            updated = self.medications.update(self._to_entity(request, medication_id))
        except DuplicateRecordError:
            return reject(ErrorKind.CONFLICT, DUPLICATE_MEDICATION_MESSAGE)
        return ServiceResult.ok(MedicationResponse.from_domain(updated))

    def delete(self, medication_id: int) -> ServiceResult:
        logger.info(
            "Deleting medication", extra={"context": {"medication_id": medication_id}}
        )
        failure = first_failure(
            [
                must_exist(self.medications, medication_id, "Medication"),
                check(
                    lambda: self.medications.count_prescription_lines(medication_id) == 0,
                    ErrorKind.REFERENTIAL_GUARD,
                    f"Medication {medication_id} is used by prescriptions and cannot be deleted",
                ),
            ]
        )
        if failure is not None:
            return failure

        self.medications.delete(medication_id)
        return ServiceResult.ok()

    def prescriptions_of(self, medication_id: int) -> ServiceResult:
        """Prescriptions with at least one line for the medication."""
        failure = first_failure([must_exist(self.medications, medication_id, "Medication")])
        if failure is not None:
            return failure
        return ServiceResult.ok(
            [
                PrescriptionResponse.from_domain(p)
                for p in self.prescriptions.filter(medication_id=medication_id)
            ]
        )

    @staticmethod
    def _to_entity(request: MedicationRequest, medication_id=None) -> Medication:
        return Medication(
            id=medication_id,
            name=request.name,
            dosage_form=request.dosage_form,
            strength=request.strength,
            atc_code=request.atc_code,
        )
