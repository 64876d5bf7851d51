"""Doctor repository implementation.

Reads join the specialty so the specialty name is available without a
second lookup.
"""

from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from kingdom_hospital.db.base import Consultation as DbConsultation
from kingdom_hospital.db.base import Doctor as DbDoctor
from kingdom_hospital.db.base import Prescription as DbPrescription
from kingdom_hospital.domain.entities import Doctor
from kingdom_hospital.domain.interfaces import IDoctorRepository


class DoctorRepository(IDoctorRepository):
    """Repository for Doctor persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def _query(self):
        return self.db.query(DbDoctor).options(joinedload(DbDoctor.specialty))

    def exists(self, doctor_id: int) -> bool:
        return self.db.get(DbDoctor, doctor_id) is not None

    def get_by_id(self, doctor_id: int) -> Optional[Doctor]:
        db_doctor = self._query().filter(DbDoctor.id == doctor_id).first()
        return self._to_domain(db_doctor) if db_doctor else None

    def list_all(self) -> List[Doctor]:
        rows = self._query().order_by(DbDoctor.last_name, DbDoctor.first_name).all()
        return [self._to_domain(d) for d in rows]

    def list_by_specialty(self, specialty_id: int) -> List[Doctor]:
        rows = (
            self._query()
            .filter(DbDoctor.specialty_id == specialty_id)
            .order_by(DbDoctor.last_name, DbDoctor.first_name)
            .all()
        )
        return [self._to_domain(d) for d in rows]

    def create(self, doctor: Doctor) -> Doctor:
        db_doctor = DbDoctor(
            first_name=doctor.first_name,
            last_name=doctor.last_name,
            specialty_id=doctor.specialty_id,
        )
        self.db.add(db_doctor)
        self.db.commit()
        created = self.get_by_id(db_doctor.id)
        if created is None:
            raise ValueError("Failed to reload created doctor")
        return created

    def update(self, doctor: Doctor) -> Doctor:
        db_doctor = self.db.get(DbDoctor, doctor.id)
        if not db_doctor:
            raise ValueError(f"Doctor with ID {doctor.id} not found")

        db_doctor.first_name = doctor.first_name
        db_doctor.last_name = doctor.last_name
        db_doctor.specialty_id = doctor.specialty_id
        self.db.commit()
        # Drop the cached relationship so the new specialty name is loaded
        self.db.expire(db_doctor)
        updated = self.get_by_id(doctor.id)
        if updated is None:
            raise ValueError("Failed to reload updated doctor")
        return updated

    def delete(self, doctor_id: int) -> bool:
        db_doctor = self.db.get(DbDoctor, doctor_id)
        if not db_doctor:
            return False
        self.db.delete(db_doctor)
        self.db.commit()
        return True

    def count_consultations(self, doctor_id: int) -> int:
        return (
            self.db.query(func.count(DbConsultation.id))
            .filter(DbConsultation.doctor_id == doctor_id)
            .scalar()
            or 0
        )

    def count_prescriptions(self, doctor_id: int) -> int:
        return (
            self.db.query(func.count(DbPrescription.id))
            .filter(DbPrescription.doctor_id == doctor_id)
            .scalar()
            or 0
        )

    def _to_domain(self, db_doctor: DbDoctor) -> Doctor:
        specialty = db_doctor.specialty
        return Doctor(
            id=db_doctor.id,
            first_name=db_doctor.first_name,
            last_name=db_doctor.last_name,
            specialty_id=db_doctor.specialty_id,
            specialty_name=specialty.name if specialty else None,
            created_at=db_doctor.created_at,
            updated_at=db_doctor.updated_at,
        )
