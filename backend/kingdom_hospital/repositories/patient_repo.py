from typing import List, Optional

from sqlalchemy import func

from kingdom_hospital.db.base import Consultation as DbConsultation
from kingdom_hospital.db.base import Patient as DbPatient
from kingdom_hospital.db.base import Prescription as DbPrescription
from kingdom_hospital.domain.entities import Patient
from kingdom_hospital.domain.interfaces import IPatientRepository


class PatientRepository(IPatientRepository):
    """Repository for Patient persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def exists(self, patient_id: int) -> bool:
        return self.db.get(DbPatient, patient_id) is not None

    def get_by_id(self, patient_id: int) -> Optional[Patient]:
        db_patient = self.db.get(DbPatient, patient_id)
        return self._to_domain(db_patient) if db_patient else None

    def list_all(self) -> List[Patient]:
        rows = (
            self.db.query(DbPatient)
            .order_by(DbPatient.last_name, DbPatient.first_name, DbPatient.birth_date)
            .all()
        )
        return [self._to_domain(p) for p in rows]

    def list_by_doctor(self, doctor_id: int) -> List[Patient]:
        consulted = (
            self.db.query(DbConsultation.patient_id)
            .filter(DbConsultation.doctor_id == doctor_id)
            .distinct()
        )
        rows = (
            self.db.query(DbPatient)
            .filter(DbPatient.id.in_(consulted))
            .order_by(DbPatient.last_name, DbPatient.first_name)
            .all()
        )
        return [self._to_domain(p) for p in rows]

    def create(self, patient: Patient) -> Patient:
        db_patient = DbPatient(
            first_name=patient.first_name,
            last_name=patient.last_name,
            birth_date=patient.birth_date,
        )
        self.db.add(db_patient)
        self.db.commit()
        self.db.refresh(db_patient)
        return self._to_domain(db_patient)

    def update(self, patient: Patient) -> Patient:
        db_patient = self.db.get(DbPatient, patient.id)
        if not db_patient:
            raise ValueError(f"Patient with ID {patient.id} not found")

        db_patient.first_name = patient.first_name
        db_patient.last_name = patient.last_name
        db_patient.birth_date = patient.birth_date
        self.db.commit()
        self.db.refresh(db_patient)
        return self._to_domain(db_patient)

    def delete(self, patient_id: int) -> bool:
        db_patient = self.db.get(DbPatient, patient_id)
        if not db_patient:
            return False
        self.db.delete(db_patient)
        self.db.commit()
        return True

    def count_consultations(self, patient_id: int) -> int:
        return (
            self.db.query(func.count(DbConsultation.id))
            .filter(DbConsultation.patient_id == patient_id)
            .scalar()
            or 0
        )

    def count_prescriptions(self, patient_id: int) -> int:
        return (
            self.db.query(func.count(DbPrescription.id))
            .filter(DbPrescription.patient_id == patient_id)
            .scalar()
            or 0
        )

    def _to_domain(self, db_patient: DbPatient) -> Patient:
        return Patient(
            id=db_patient.id,
            first_name=db_patient.first_name,
            last_name=db_patient.last_name,
            birth_date=db_patient.birth_date,
            created_at=db_patient.created_at,
            updated_at=db_patient.updated_at,
        )
