"""Unit tests for DoctorService."""

from datetime import date
from unittest.mock import Mock

import pytest

from kingdom_hospital.core.exceptions import ErrorKind
from kingdom_hospital.schemas.dtos import DoctorRequest
from kingdom_hospital.services.doctor_service import DoctorService
from tests.factories.domain_factories import make_doctor, make_patient, make_specialty
from tests.factories.repository_factories import (
    ConsultationRepositoryFactory,
    DoctorRepositoryFactory,
    PatientRepositoryFactory,
    PrescriptionRepositoryFactory,
    SpecialtyRepositoryFactory,
)


@pytest.fixture
def doctors() -> Mock:
    return DoctorRepositoryFactory.create_mock_full()


@pytest.fixture
def specialties() -> Mock:
    return SpecialtyRepositoryFactory.create_mock_full()


@pytest.fixture
def patients() -> Mock:
    return PatientRepositoryFactory.create_mock_full()


@pytest.fixture
def consultations() -> Mock:
    return ConsultationRepositoryFactory.create_mock_full()


@pytest.fixture
def prescriptions() -> Mock:
    return PrescriptionRepositoryFactory.create_mock_full()


@pytest.fixture
def service(doctors, specialties, patients, consultations, prescriptions):
    return DoctorService(
        doctors,
        specialties,
        patients,
        consultations,
        prescriptions,
        today=lambda: date(2024, 1, 1),
    )


def _request(specialty_id: int = 1) -> DoctorRequest:
    return DoctorRequest(first_name="Gregory", last_name="House", specialty_id=specialty_id)


@pytest.mark.unit
@pytest.mark.services
class TestDoctorWrites:
    def test_create(self, service, doctors):
        doctors.create.return_value = make_doctor(id=4)

        result = service.create(_request())

        assert result.success
        assert result.data.full_name == "Gregory House"
        assert result.data.specialty_name == "Cardiology"

    def test_create_unknown_specialty(self, service, specialties, doctors):
        specialties.exists.return_value = False

        result = service.create(_request(specialty_id=9))

        assert result.error_kind == ErrorKind.UNKNOWN_REFERENCE
        assert result.error == "Specialty 9 does not exist"
        doctors.create.assert_not_called()

    def test_update_missing_doctor(self, service, doctors, specialties):
        doctors.exists.return_value = False

        result = service.update(4, _request())

        assert result.error_kind == ErrorKind.NOT_FOUND
        specialties.exists.assert_not_called()

    def test_delete_guarded_by_consultations(self, service, doctors):
        doctors.count_consultations.return_value = 1

        result = service.delete(4)

        assert result.error_kind == ErrorKind.REFERENTIAL_GUARD
        doctors.delete.assert_not_called()

    def test_delete_guarded_by_prescriptions(self, service, doctors):
        doctors.count_prescriptions.return_value = 1

        result = service.delete(4)

        assert result.error_kind == ErrorKind.REFERENTIAL_GUARD
        assert "prescriptions" in result.error

    def test_delete(self, service, doctors):
        assert service.delete(4).success
        doctors.delete.assert_called_once_with(4)


@pytest.mark.unit
@pytest.mark.services
class TestDoctorSpecialty:
    def test_get_specialty(self, service, doctors, specialties):
        doctors.get_by_id.return_value = make_doctor(specialty_id=2)
        specialties.get_by_id.return_value = make_specialty(id=2, name="Neurology")

        result = service.get_specialty(1)

        assert result.data.name == "Neurology"
        specialties.get_by_id.assert_called_once_with(2)

    def test_get_specialty_of_missing_doctor(self, service):
        assert service.get_specialty(1).error_kind == ErrorKind.NOT_FOUND

    def test_change_specialty(self, service, doctors):
        doctors.get_by_id.return_value = make_doctor(specialty_id=1)
        doctors.update.return_value = make_doctor(specialty_id=2, specialty_name="Neurology")

        result = service.change_specialty(1, 2)

        assert result.success
        assert doctors.update.call_args[0][0].specialty_id == 2

    def test_change_to_missing_specialty_is_not_found(self, service, specialties, doctors):
        specialties.exists.return_value = False

        result = service.change_specialty(1, 99)

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error == "Specialty 99 not found"
        doctors.update.assert_not_called()


@pytest.mark.unit
@pytest.mark.services
class TestDoctorRelations:
    def test_patients_of_uses_injected_today(self, service, patients):
        patients.list_by_doctor.return_value = [make_patient(birth_date=date(1990, 1, 2))]

        result = service.patients_of(1)

        assert result.data[0].age == 33

    def test_consultations_of_with_window(self, service, consultations):
        service.consultations_of(1, date(2024, 1, 1), date(2024, 1, 31))

        consultations.filter.assert_called_once_with(
            doctor_id=1, date_from=date(2024, 1, 1), date_to=date(2024, 1, 31)
        )

    def test_consultations_of_reversed_window(self, service, consultations):
        result = service.consultations_of(1, date(2024, 2, 1), date(2024, 1, 1))

        assert result.error_kind == ErrorKind.INVARIANT_VIOLATION
        consultations.filter.assert_not_called()

    def test_prescriptions_of_missing_doctor(self, service, doctors, prescriptions):
        doctors.exists.return_value = False

        assert service.prescriptions_of(1).error_kind == ErrorKind.NOT_FOUND
        prescriptions.filter.assert_not_called()
