"""Prescription repository implementation.

A prescription is loaded together with its lines (and their medication
names) plus the doctor and patient names.
"""

from datetime import date
from typing import List, Optional

from sqlalchemy.orm import joinedload, selectinload

from kingdom_hospital.core.exceptions import DUPLICATE_LINE_MESSAGE
from kingdom_hospital.db.base import Prescription as DbPrescription
from kingdom_hospital.db.base import PrescriptionLine as DbPrescriptionLine
from kingdom_hospital.domain.entities import Prescription
from kingdom_hospital.domain.interfaces import IPrescriptionRepository

from .base import commit_or_raise_duplicate
from .prescription_line_repo import line_to_domain


class PrescriptionRepository(IPrescriptionRepository):
    """Repository for Prescription persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def _query(self):
        # Lines may have been written through another repository on this session
        return (
            self.db.query(DbPrescription)
            .options(
                joinedload(DbPrescription.doctor),
                joinedload(DbPrescription.patient),
                selectinload(DbPrescription.lines).joinedload(
                    DbPrescriptionLine.medication
                ),
            )
            .populate_existing()
        )

    def exists(self, prescription_id: int) -> bool:
        return self.db.get(DbPrescription, prescription_id) is not None

    def get_by_id(self, prescription_id: int) -> Optional[Prescription]:
        db_prescription = (
            self._query().filter(DbPrescription.id == prescription_id).first()
        )
        return self._to_domain(db_prescription) if db_prescription else None

    def list_all(self) -> List[Prescription]:
        return self.filter()

    def filter(
        self,
        doctor_id: Optional[int] = None,
        patient_id: Optional[int] = None,
        consultation_id: Optional[int] = None,
        medication_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> List[Prescription]:
        query = self._query()
        if doctor_id is not None:
            query = query.filter(DbPrescription.doctor_id == doctor_id)
        if patient_id is not None:
            query = query.filter(DbPrescription.patient_id == patient_id)
        if consultation_id is not None:
            query = query.filter(DbPrescription.consultation_id == consultation_id)
        if medication_id is not None:
            query = query.filter(
                DbPrescription.lines.any(DbPrescriptionLine.medication_id == medication_id)
            )
        if date_from is not None:
            query = query.filter(DbPrescription.date >= date_from)
        if date_to is not None:
            query = query.filter(DbPrescription.date <= date_to)

        rows = query.order_by(DbPrescription.date.desc(), DbPrescription.id.desc()).all()
        return [self._to_domain(p) for p in rows]

    def create(self, prescription: Prescription) -> Prescription:
        db_prescription = DbPrescription(
            doctor_id=prescription.doctor_id,
            patient_id=prescription.patient_id,
            consultation_id=prescription.consultation_id,
            date=prescription.date,
            notes=prescription.notes,
            lines=[
                DbPrescriptionLine(
                    medication_id=line.medication_id,
                    dosage=line.dosage,
                    frequency=line.frequency,
                    duration=line.duration,
                    quantity=line.quantity,
                    instructions=line.instructions,
                )
                for line in prescription.lines
            ],
        )
        self.db.add(db_prescription)
        commit_or_raise_duplicate(self.db, DUPLICATE_LINE_MESSAGE)
        return self._reload(db_prescription)

    def update_header(self, prescription: Prescription) -> Prescription:
        db_prescription = self.db.get(DbPrescription, prescription.id)
        if not db_prescription:
            raise ValueError(f"Prescription with ID {prescription.id} not found")

        db_prescription.doctor_id = prescription.doctor_id
        db_prescription.patient_id = prescription.patient_id
        db_prescription.consultation_id = prescription.consultation_id
        db_prescription.date = prescription.date
        db_prescription.notes = prescription.notes
        self.db.commit()
        return self._reload(db_prescription)

    def set_consultation(
        self, prescription_id: int, consultation_id: Optional[int]
    ) -> Prescription:
        db_prescription = self.db.get(DbPrescription, prescription_id)
        if not db_prescription:
            raise ValueError(f"Prescription with ID {prescription_id} not found")

        db_prescription.consultation_id = consultation_id
        self.db.commit()
        return self._reload(db_prescription)

    def delete(self, prescription_id: int) -> bool:
        db_prescription = self.db.get(DbPrescription, prescription_id)
        if not db_prescription:
            return False
        # Lines go with it (delete-orphan cascade)
        self.db.delete(db_prescription)
        self.db.commit()
        return True

    def _reload(self, db_prescription: DbPrescription) -> Prescription:
        prescription_id = db_prescription.id
        self.db.expire(db_prescription)
        prescription = self.get_by_id(prescription_id)
        if prescription is None:
            raise ValueError(f"Prescription {prescription_id} vanished after write")
        return prescription

    def _to_domain(self, db_prescription: DbPrescription) -> Prescription:
        doctor = db_prescription.doctor
        patient = db_prescription.patient
        return Prescription(
            id=db_prescription.id,
            doctor_id=db_prescription.doctor_id,
            patient_id=db_prescription.patient_id,
            consultation_id=db_prescription.consultation_id,
            date=db_prescription.date,
            notes=db_prescription.notes,
            doctor_name=doctor.full_name if doctor else None,
            patient_name=patient.full_name if patient else None,
            lines=[line_to_domain(line) for line in db_prescription.lines],
            created_at=db_prescription.created_at,
        )
