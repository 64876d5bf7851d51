"""Consultation repository implementation.

Every read joins doctor and patient so list views get display names in a
single query.
"""

from datetime import date, time
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from kingdom_hospital.core.exceptions import SLOT_TAKEN_MESSAGE
from kingdom_hospital.db.base import Consultation as DbConsultation
from kingdom_hospital.db.base import Prescription as DbPrescription
from kingdom_hospital.domain.entities import Consultation
from kingdom_hospital.domain.interfaces import IConsultationRepository

from .base import commit_or_raise_duplicate


class ConsultationRepository(IConsultationRepository):
    """Repository for Consultation persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def _query(self):
        return self.db.query(DbConsultation).options(
            joinedload(DbConsultation.doctor), joinedload(DbConsultation.patient)
        )

    def exists(self, consultation_id: int) -> bool:
        return self.db.get(DbConsultation, consultation_id) is not None

    def get_by_id(self, consultation_id: int) -> Optional[Consultation]:
        db_consultation = (
            self._query().filter(DbConsultation.id == consultation_id).first()
        )
        return self._to_domain(db_consultation) if db_consultation else None

    def list_all(self) -> List[Consultation]:
        return self.filter()

    def filter(
        self,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Consultation]:
        query = self._query()
        if doctor_id is not None:
            query = query.filter(DbConsultation.doctor_id == doctor_id)
        if patient_id is not None:
            query = query.filter(DbConsultation.patient_id == patient_id)
        if date_from is not None:
            query = query.filter(DbConsultation.date >= date_from)
        if date_to is not None:
            query = query.filter(DbConsultation.date <= date_to)

        rows = query.order_by(
            DbConsultation.date.desc(), DbConsultation.hour.desc()
        ).all()
        return [self._to_domain(c) for c in rows]

    def has_conflict(
        self,
        doctor_id: int,
        day: date,
        hour: time,
        exclude_id: Optional[int] = None,
    ) -> bool:
        query = self.db.query(DbConsultation.id).filter(
            DbConsultation.doctor_id == doctor_id,
            DbConsultation.date == day,
            DbConsultation.hour == hour,
        )
        if exclude_id is not None:
            query = query.filter(DbConsultation.id != exclude_id)
        return query.first() is not None

    def create(self, consultation: Consultation) -> Consultation:
        db_consultation = DbConsultation(
            doctor_id=consultation.doctor_id,
            patient_id=consultation.patient_id,
            date=consultation.date,
            hour=consultation.hour,
            reason=consultation.reason,
        )
        self.db.add(db_consultation)
        commit_or_raise_duplicate(self.db, SLOT_TAKEN_MESSAGE)
        return self._reload(db_consultation.id)

    def update(self, consultation: Consultation) -> Consultation:
        db_consultation = self.db.get(DbConsultation, consultation.id)
        if not db_consultation:
            raise ValueError(f"Consultation with ID {consultation.id} not found")

        db_consultation.doctor_id = consultation.doctor_id
        db_consultation.patient_id = consultation.patient_id
        db_consultation.date = consultation.date
        db_consultation.hour = consultation.hour
        db_consultation.reason = consultation.reason
        commit_or_raise_duplicate(self.db, SLOT_TAKEN_MESSAGE)
        self.db.expire(db_consultation)
        return self._reload(consultation.id)

    def delete(self, consultation_id: int) -> bool:
        db_consultation = self.db.get(DbConsultation, consultation_id)
        if not db_consultation:
            return False
        self.db.delete(db_consultation)
        self.db.commit()
        return True

    def count_prescriptions(self, consultation_id: int) -> int:
        return (
            self.db.query(func.count(DbPrescription.id))
            .filter(DbPrescription.consultation_id == consultation_id)
            .scalar()
            or 0
        )

    def _reload(self, consultation_id: int) -> Consultation:
        consultation = self.get_by_id(consultation_id)
        if consultation is None:
            raise ValueError(f"Consultation {consultation_id} vanished after write")
        return consultation

    def _to_domain(self, db_consultation: DbConsultation) -> Consultation:
        doctor = db_consultation.doctor
        patient = db_consultation.patient
        return Consultation(
            id=db_consultation.id,
            doctor_id=db_consultation.doctor_id,
            patient_id=db_consultation.patient_id,
            date=db_consultation.date,
            hour=db_consultation.hour,
            reason=db_consultation.reason,
            doctor_name=doctor.full_name if doctor else None,
            patient_name=patient.full_name if patient else None,
            created_at=db_consultation.created_at,
        )
