from typing import List, Optional, Sequence

from sqlalchemy.orm import joinedload

from kingdom_hospital.core.exceptions import DUPLICATE_LINE_MESSAGE
from kingdom_hospital.db.base import PrescriptionLine as DbPrescriptionLine
from kingdom_hospital.domain.entities import PrescriptionLine
from kingdom_hospital.domain.interfaces import IPrescriptionLineRepository

from .base import commit_or_raise_duplicate


def line_to_domain(db_line: DbPrescriptionLine) -> PrescriptionLine:
    medication = db_line.medication
    return PrescriptionLine(
        id=db_line.id,
        prescription_id=db_line.prescription_id,
        medication_id=db_line.medication_id,
        dosage=db_line.dosage,
        frequency=db_line.frequency,
        duration=db_line.duration,
        quantity=db_line.quantity,
        instructions=db_line.instructions,
        medication_name=medication.name if medication else None,
    )


class PrescriptionLineRepository(IPrescriptionLineRepository):
    """Repository for PrescriptionLine persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def _query(self):
        return self.db.query(DbPrescriptionLine).options(
            joinedload(DbPrescriptionLine.medication)
        )

    def get_by_id(self, line_id: int) -> Optional[PrescriptionLine]:
        db_line = self._query().filter(DbPrescriptionLine.id == line_id).first()
        return line_to_domain(db_line) if db_line else None

    def list_for_prescription(self, prescription_id: int) -> List[PrescriptionLine]:
        rows = (
            self._query()
            .filter(DbPrescriptionLine.prescription_id == prescription_id)
            .order_by(DbPrescriptionLine.id)
            .all()
        )
        return [line_to_domain(line) for line in rows]

    def add_many(
        self, prescription_id: int, lines: Sequence[PrescriptionLine]
    ) -> List[PrescriptionLine]:
        db_lines = [
            DbPrescriptionLine(
                prescription_id=prescription_id,
                medication_id=line.medication_id,
                dosage=line.dosage,
                frequency=line.frequency,
                duration=line.duration,
                quantity=line.quantity,
                instructions=line.instructions,
            )
            for line in lines
        ]
        self.db.add_all(db_lines)
        commit_or_raise_duplicate(self.db, DUPLICATE_LINE_MESSAGE)

        # Reload with medication names resolved
        created_ids = [db_line.id for db_line in db_lines]
        rows = (
            self._query()
            .filter(DbPrescriptionLine.id.in_(created_ids))
            .order_by(DbPrescriptionLine.id)
            .all()
        )
        return [line_to_domain(line) for line in rows]

    def update(self, line: PrescriptionLine) -> PrescriptionLine:
        db_line = self.db.get(DbPrescriptionLine, line.id)
        if not db_line:
            raise ValueError(f"Prescription line with ID {line.id} not found")

        db_line.medication_id = line.medication_id
        db_line.dosage = line.dosage
        db_line.frequency = line.frequency
        db_line.duration = line.duration
        db_line.quantity = line.quantity
        db_line.instructions = line.instructions
        commit_or_raise_duplicate(self.db, DUPLICATE_LINE_MESSAGE)
        self.db.expire(db_line)
        updated = self.get_by_id(line.id)
        if updated is None:
            raise ValueError(f"Prescription line {line.id} vanished after update")
        return updated

    def delete(self, line_id: int) -> bool:
        db_line = self.db.get(DbPrescriptionLine, line_id)
        if not db_line:
            return False
        self.db.delete(db_line)
        self.db.commit()
        return True
