"""
Unit tests for ConsultationService.

Covers:
- Booking rules (references, slot conflicts) and their evaluation order
- Updates excluding the consultation's own slot
- The traceability guard on deletion
- Filter criteria
"""

from datetime import date, time
from unittest.mock import Mock

import pytest

from kingdom_hospital.core.exceptions import (
    SLOT_TAKEN_MESSAGE,
    DuplicateRecordError,
    ErrorKind,
)
from kingdom_hospital.services.consultation_service import ConsultationService
from tests.factories.domain_factories import consultation_request, make_consultation
from tests.factories.repository_factories import (
    ConsultationRepositoryFactory,
    DoctorRepositoryFactory,
    PatientRepositoryFactory,
    PrescriptionRepositoryFactory,
)


@pytest.fixture
def consultations() -> Mock:
    return ConsultationRepositoryFactory.create_mock_full()


@pytest.fixture
def doctors() -> Mock:
    return DoctorRepositoryFactory.create_mock_full()


@pytest.fixture
def patients() -> Mock:
    return PatientRepositoryFactory.create_mock_full()


@pytest.fixture
def prescriptions() -> Mock:
    return PrescriptionRepositoryFactory.create_mock_full()


@pytest.fixture
def service(consultations, doctors, patients, prescriptions):
    return ConsultationService(consultations, doctors, patients, prescriptions)


@pytest.mark.unit
@pytest.mark.services
class TestConsultationBooking:
    def test_create_success_returns_hydrated_consultation(self, service, consultations):
        consultations.create.return_value = make_consultation(id=7)

        result = service.create(consultation_request())

        assert result.success
        assert result.data.id == 7
        assert result.data.doctor_name == "Gregory House"
        created = consultations.create.call_args[0][0]
        assert created.id is None
        assert created.hour == time(9, 0)

    def test_create_unknown_doctor(self, service, doctors, consultations):
        doctors.exists.return_value = False

        result = service.create(consultation_request(doctor_id=99))

        assert not result.success
        assert result.error_kind == ErrorKind.UNKNOWN_REFERENCE
        assert result.error == "Doctor 99 does not exist"
        consultations.create.assert_not_called()

    def test_unknown_doctor_is_reported_before_unknown_patient(
        self, service, doctors, patients
    ):
        doctors.exists.return_value = False
        patients.exists.return_value = False

        result = service.create(consultation_request())

        assert result.error == "Doctor 1 does not exist"
        patients.exists.assert_not_called()

    def test_create_unknown_patient(self, service, patients):
        patients.exists.return_value = False

        result = service.create(consultation_request(patient_id=42))

        assert result.error_kind == ErrorKind.UNKNOWN_REFERENCE
        assert result.error == "Patient 42 does not exist"

    def test_create_slot_taken(self, service, consultations):
        consultations.has_conflict.return_value = True

        result = service.create(consultation_request())

        assert result.error_kind == ErrorKind.CONFLICT
        assert result.error == SLOT_TAKEN_MESSAGE
        consultations.has_conflict.assert_called_once_with(
            1, date(2024, 1, 10), time(9, 0), exclude_id=None
        )
        consultations.create.assert_not_called()

    def test_create_race_on_unique_constraint_is_a_conflict(self, service, consultations):
        consultations.create.side_effect = DuplicateRecordError(SLOT_TAKEN_MESSAGE)

        result = service.create(consultation_request())

        assert result.error_kind == ErrorKind.CONFLICT
        assert result.error == SLOT_TAKEN_MESSAGE


@pytest.mark.unit
@pytest.mark.services
class TestConsultationUpdate:
    def test_update_excludes_own_slot(self, service, consultations):
        consultations.update.return_value = make_consultation(id=3)

        result = service.update(3, consultation_request())

        assert result.success
        consultations.has_conflict.assert_called_once_with(
            1, date(2024, 1, 10), time(9, 0), exclude_id=3
        )
        assert consultations.update.call_args[0][0].id == 3

    def test_update_missing_consultation_is_not_found(self, service, consultations, doctors):
        consultations.exists.return_value = False

        result = service.update(404, consultation_request())

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error == "Consultation 404 not found"
        doctors.exists.assert_not_called()

    def test_update_into_taken_slot(self, service, consultations):
        consultations.has_conflict.return_value = True

        result = service.update(3, consultation_request(hour=time(10, 0)))

        assert result.error_kind == ErrorKind.CONFLICT
        consultations.update.assert_not_called()


@pytest.mark.unit
@pytest.mark.services
class TestConsultationDeletion:
    def test_delete_without_prescriptions(self, service, consultations):
        result = service.delete(5)

        assert result.success
        assert result.data is None
        consultations.delete.assert_called_once_with(5)

    def test_delete_referenced_by_prescription_is_guarded(self, service, consultations):
        consultations.count_prescriptions.return_value = 1

        result = service.delete(5)

        assert result.error_kind == ErrorKind.REFERENTIAL_GUARD
        assert "historical traceability" in result.error
        consultations.delete.assert_not_called()

    def test_delete_missing(self, service, consultations):
        consultations.exists.return_value = False

        result = service.delete(5)

        assert result.error_kind == ErrorKind.NOT_FOUND
        consultations.count_prescriptions.assert_not_called()


@pytest.mark.unit
@pytest.mark.services
class TestConsultationQueries:
    def test_get_missing(self, service):
        result = service.get(12)

        assert result.error_kind == ErrorKind.NOT_FOUND
        assert result.error == "Consultation 12 not found"

    def test_filter_without_criteria_lists_everything(self, service, consultations):
        consultations.filter.return_value = [make_consultation(), make_consultation(id=2)]

        result = service.filter()

        assert result.success
        assert [c.id for c in result.data] == [1, 2]
        consultations.filter.assert_called_once_with(
            doctor_id=None, patient_id=None, date_from=None, date_to=None
        )

    def test_filter_date_window_alone_is_rejected(self, service, consultations):
        result = service.filter(date_from=date(2024, 1, 1))

        assert result.error_kind == ErrorKind.INVARIANT_VIOLATION
        consultations.filter.assert_not_called()

    def test_filter_reversed_window(self, service):
        result = service.filter(
            doctor_id=1, date_from=date(2024, 2, 1), date_to=date(2024, 1, 1)
        )

        assert result.error_kind == ErrorKind.INVARIANT_VIOLATION
        assert result.error == "'from' must be on or before 'to'"

    def test_filter_unknown_patient(self, service, patients):
        patients.exists.return_value = False

        result = service.filter(patient_id=8)

        assert result.error_kind == ErrorKind.UNKNOWN_REFERENCE

    def test_prescriptions_for_missing_consultation(self, service, consultations, prescriptions):
        consultations.exists.return_value = False

        result = service.prescriptions_for(9)

        assert result.error_kind == ErrorKind.NOT_FOUND
        prescriptions.filter.assert_not_called()

    def test_prescriptions_for_filters_on_consultation(self, service, prescriptions):
        service.prescriptions_for(9)

        prescriptions.filter.assert_called_once_with(consultation_id=9)
