"""
Repository test factories following Interface Segregation Principle.

Each factory returns a ``Mock(spec=...)`` of a domain interface with
permissive defaults: every id exists, nothing conflicts and nothing is
referenced. Tests override only the answer they are about.
"""

from unittest.mock import Mock

from kingdom_hospital.domain.interfaces import (
    IConsultationRepository,
    IDoctorRepository,
    IMedicationRepository,
    IPatientRepository,
    IPrescriptionLineRepository,
    IPrescriptionRepository,
    ISpecialtyRepository,
)


class SpecialtyRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=ISpecialtyRepository)
        mock_repo.exists.return_value = True
        mock_repo.get_by_id.return_value = None
        mock_repo.list_all.return_value = []
        mock_repo.name_exists.return_value = False
        return mock_repo


class DoctorRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IDoctorRepository)
        mock_repo.exists.return_value = True
        mock_repo.get_by_id.return_value = None
        mock_repo.list_all.return_value = []
        mock_repo.list_by_specialty.return_value = []
        mock_repo.count_consultations.return_value = 0
        mock_repo.count_prescriptions.return_value = 0
        mock_repo.delete.return_value = True
        return mock_repo


class PatientRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IPatientRepository)
        mock_repo.exists.return_value = True
        mock_repo.get_by_id.return_value = None
        mock_repo.list_all.return_value = []
        mock_repo.list_by_doctor.return_value = []
        mock_repo.count_consultations.return_value = 0
        mock_repo.count_prescriptions.return_value = 0
        mock_repo.delete.return_value = True
        return mock_repo


class ConsultationRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IConsultationRepository)
        mock_repo.exists.return_value = True
        mock_repo.get_by_id.return_value = None
        mock_repo.list_all.return_value = []
        mock_repo.filter.return_value = []
        mock_repo.has_conflict.return_value = False
        mock_repo.count_prescriptions.return_value = 0
        mock_repo.delete.return_value = True
        return mock_repo


class MedicationRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IMedicationRepository)
        mock_repo.exists.return_value = True
        mock_repo.get_by_id.return_value = None
        mock_repo.list_all.return_value = []
        mock_repo.missing_ids.return_value = []
        mock_repo.duplicate_exists.return_value = False
        mock_repo.count_prescription_lines.return_value = 0
        mock_repo.delete.return_value = True
        return mock_repo


class PrescriptionRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IPrescriptionRepository)
        mock_repo.exists.return_value = True
        mock_repo.get_by_id.return_value = None
        mock_repo.list_all.return_value = []
        mock_repo.filter.return_value = []
        mock_repo.delete.return_value = True
        return mock_repo


class PrescriptionLineRepositoryFactory:
    @staticmethod
    def create_mock_full() -> Mock:
        mock_repo = Mock(spec=IPrescriptionLineRepository)
        mock_repo.get_by_id.return_value = None
        mock_repo.list_for_prescription.return_value = []
        mock_repo.delete.return_value = True
        return mock_repo
