from typing import List, Optional, Sequence

from sqlalchemy import func

from kingdom_hospital.core.exceptions import DUPLICATE_MEDICATION_MESSAGE
from kingdom_hospital.db.base import Medication as DbMedication
from kingdom_hospital.db.base import PrescriptionLine as DbPrescriptionLine
from kingdom_hospital.domain.entities import Medication
from kingdom_hospital.domain.interfaces import IMedicationRepository

from .base import commit_or_raise_duplicate


class MedicationRepository(IMedicationRepository):
    """Repository for Medication persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def exists(self, medication_id: int) -> bool:
        return self.db.get(DbMedication, medication_id) is not None

    def get_by_id(self, medication_id: int) -> Optional[Medication]:
        db_medication = self.db.get(DbMedication, medication_id)
        return self._to_domain(db_medication) if db_medication else None

    def list_all(self) -> List[Medication]:
        rows = (
            self.db.query(DbMedication)
            .order_by(DbMedication.name, DbMedication.dosage_form, DbMedication.strength)
            .all()
        )
        return [self._to_domain(m) for m in rows]

    def missing_ids(self, medication_ids: Sequence[int]) -> List[int]:
        if not medication_ids:
            return []
        found = {
            row_id
            for (row_id,) in self.db.query(DbMedication.id)
            .filter(DbMedication.id.in_(set(medication_ids)))
            .all()
        }
        return [m_id for m_id in medication_ids if m_id not in found]

    def duplicate_exists(
        self,
        name: str,
        dosage_form: str,
        strength: str,
        exclude_id: Optional[int] = None,
    ) -> bool:
        query = self.db.query(DbMedication.id).filter(
            func.lower(DbMedication.name) == name.strip().lower(),
            func.lower(DbMedication.dosage_form) == dosage_form.strip().lower(),
            func.lower(DbMedication.strength) == strength.strip().lower(),
        )
        if exclude_id is not None:
            query = query.filter(DbMedication.id != exclude_id)
        return query.first() is not None

    def create(self, medication: Medication) -> Medication:
        db_medication = DbMedication(
            name=medication.name,
            dosage_form=medication.dosage_form,
            strength=medication.strength,
            atc_code=medication.atc_code,
        )
        self.db.add(db_medication)
        commit_or_raise_duplicate(self.db, DUPLICATE_MEDICATION_MESSAGE)
        self.db.refresh(db_medication)
        return self._to_domain(db_medication)

    def update(self, medication: Medication) -> Medication:
        db_medication = self.db.get(DbMedication, medication.id)
        if not db_medication:
            raise ValueError(f"Medication with ID {medication.id} not found")

        db_medication.name = medication.name
        db_medication.dosage_form = medication.dosage_form
        db_medication.strength = medication.strength
        db_medication.atc_code = medication.atc_code
        commit_or_raise_duplicate(self.db, DUPLICATE_MEDICATION_MESSAGE)
        self.db.refresh(db_medication)
        return self._to_domain(db_medication)

    def delete(self, medication_id: int) -> bool:
        db_medication = self.db.get(DbMedication, medication_id)
        if not db_medication:
            return False
        self.db.delete(db_medication)
        self.db.commit()
        return True

    def count_prescription_lines(self, medication_id: int) -> int:
        return (
            self.db.query(func.count(DbPrescriptionLine.id))
            .filter(DbPrescriptionLine.medication_id == medication_id)
            .scalar()
            or 0
        )

    def _to_domain(self, db_medication: DbMedication) -> Medication:
        return Medication(
            id=db_medication.id,
            name=db_medication.name,
            dosage_form=db_medication.dosage_form,
            strength=db_medication.strength,
            atc_code=db_medication.atc_code,
        )
