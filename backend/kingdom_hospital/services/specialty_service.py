import logging

from kingdom_hospital.core.exceptions import DuplicateRecordError, ErrorKind
from kingdom_hospital.core.result import ServiceResult
from kingdom_hospital.core.validation import check, first_failure, reject
from kingdom_hospital.domain.entities import Specialty
from kingdom_hospital.domain.interfaces import IDoctorReader, ISpecialtyRepository
from kingdom_hospital.schemas.dtos import (
    DoctorResponse,
    SpecialtyRequest,
    SpecialtyResponse,
)

from .rules import must_exist, not_found

logger = logging.getLogger(__name__)


class SpecialtyService:
    """Specialties are reference data for doctors: read access plus create."""

    def __init__(self, specialties: ISpecialtyRepository, doctors: IDoctorReader) -> None:
        self.specialties = specialties
        self.doctors = doctors

    def list_all(self) -> ServiceResult:
        return ServiceResult.ok(
            [SpecialtyResponse.from_domain(s) for s in self.specialties.list_all()]
        )

    def get(self, specialty_id: int) -> ServiceResult:
        specialty = self.specialties.get_by_id(specialty_id)
        if specialty is None:
            return not_found("Specialty", specialty_id)
        return ServiceResult.ok(SpecialtyResponse.from_domain(specialty))

    def doctors_of(self, specialty_id: int) -> ServiceResult:
        failure = first_failure([must_exist(self.specialties, specialty_id, "Specialty")])
        if failure is not None:
            return failure
        doctors = self.doctors.list_by_specialty(specialty_id)
        return ServiceResult.ok([DoctorResponse.from_domain(d) for d in doctors])

    def create(self, request: SpecialtyRequest) -> ServiceResult:
        """Create a specialty; names are unique regardless of case."""
        name = request.name.strip()
        logger.info("Creating specialty", extra={"context": {"name": name}})

        duplicate = f"Specialty '{name}' already exists"
        failure = first_failure(
            [
                check(lambda: bool(name), ErrorKind.INVARIANT_VIOLATION, "Name is required"),
                check(
                    lambda: not self.specialties.name_exists(name),
                    ErrorKind.CONFLICT,
                    duplicate,
                ),
            ]
        )
        if failure is not None:
            return failure

        try:
            created = self.specialties.create(Specialty(name=name))
        except DuplicateRecordError:
            return reject(ErrorKind.CONFLICT, duplicate)
        return ServiceResult.ok(SpecialtyResponse.from_domain(created))
