import logging
from typing import List

from kingdom_hospital.core.exceptions import (
    DUPLICATE_LINE_MESSAGE,
    DuplicateRecordError,
    ErrorKind,
)
from kingdom_hospital.core.result import ServiceResult
from kingdom_hospital.core.validation import Rule, check, first_failure, reject
from kingdom_hospital.domain.interfaces import (
    IMedicationReader,
    IPrescriptionLineRepository,
    IPrescriptionReader,
)
from kingdom_hospital.schemas.dtos import (
    PrescriptionLineRequest,
    PrescriptionLineResponse,
)

from .rules import line_rules, must_exist

logger = logging.getLogger(__name__)


class PrescriptionLineService:
    """Lines of an existing prescription.

    A line is only reachable through the prescription that owns it; a line id
    belonging to another prescription is reported as not found.
    """

    def __init__(
        self,
        lines: IPrescriptionLineRepository,
        prescriptions: IPrescriptionReader,
        medications: IMedicationReader,
    ) -> None:
        self.lines = lines
        self.prescriptions = prescriptions
        self.medications = medications

    def _owned_line_rules(self, prescription_id: int, line_id: int) -> List[Rule]:
        def _owned() -> bool:
            line = self.lines.get_by_id(line_id)
            return line is not None and line.prescription_id == prescription_id

        return [
            must_exist(self.prescriptions, prescription_id, "Prescription"),
            check(
                _owned,
                ErrorKind.NOT_FOUND,
                f"Line {line_id} not found on prescription {prescription_id}",
            ),
        ]

    def list_for(self, prescription_id: int) -> ServiceResult:
        failure = first_failure(
            [must_exist(self.prescriptions, prescription_id, "Prescription")]
        )
        if failure is not None:
            return failure
        return ServiceResult.ok(
            [
                PrescriptionLineResponse.from_domain(line)
                for line in self.lines.list_for_prescription(prescription_id)
            ]
        )

    def get(self, prescription_id: int, line_id: int) -> ServiceResult:
        failure = first_failure(self._owned_line_rules(prescription_id, line_id))
        if failure is not None:
            return failure
        return ServiceResult.ok(
            PrescriptionLineResponse.from_domain(self.lines.get_by_id(line_id))
        )

    def add(
        self, prescription_id: int, requests: List[PrescriptionLineRequest]
    ) -> ServiceResult:
        """Add a batch of lines; all of them are stored or none."""
        logger.info(
            "Adding prescription lines",
            extra={
                "context": {"prescription_id": prescription_id, "lines": len(requests)}
            },
        )
        failure = first_failure(
            [
                must_exist(self.prescriptions, prescription_id, "Prescription"),
                check(
                    lambda: len(requests) > 0,
                    ErrorKind.INVARIANT_VIOLATION,
                    "At least one line is required",
                ),
            ]
            + line_rules(self.medications, requests)
        )
        if failure is not None:
            return failure

        try:
            created = self.lines.add_many(
                prescription_id, [request.to_domain() for request in requests]
            )
        except DuplicateRecordError:
            return reject(ErrorKind.CONFLICT, DUPLICATE_LINE_MESSAGE)
        return ServiceResult.ok(
            [PrescriptionLineResponse.from_domain(line) for line in created]
        )

    def update(
        self, prescription_id: int, line_id: int, request: PrescriptionLineRequest
    ) -> ServiceResult:
        logger.info(
            "Updating prescription line",
            extra={"context": {"prescription_id": prescription_id, "line_id": line_id}},
        )
        failure = first_failure(
            self._owned_line_rules(prescription_id, line_id)
            + line_rules(self.medications, [request])
        )
        if failure is not None:
            return failure

        line = request.to_domain()
        line.id = line_id
        line.prescription_id = prescription_id
        try:
            updated = self.lines.update(line)
        except DuplicateRecordError:
            return reject(ErrorKind.CONFLICT, DUPLICATE_LINE_MESSAGE)
        return ServiceResult.ok(PrescriptionLineResponse.from_domain(updated))

    def delete(self, prescription_id: int, line_id: int) -> ServiceResult:
        logger.info(
            "Deleting prescription line",
            extra={"context": {"prescription_id": prescription_id, "line_id": line_id}},
        )
        failure = first_failure(self._owned_line_rules(prescription_id, line_id))
        if failure is not None:
            return failure

        self.lines.delete(line_id)
        return ServiceResult.ok()
