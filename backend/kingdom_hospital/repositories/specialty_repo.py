from typing import List, Optional

from sqlalchemy import func

from kingdom_hospital.db.base import Specialty as DbSpecialty
from kingdom_hospital.domain.entities import Specialty
from kingdom_hospital.domain.interfaces import ISpecialtyRepository

from .base import commit_or_raise_duplicate


class SpecialtyRepository(ISpecialtyRepository):
    def __init__(self, db_session) -> None:
        self.db = db_session

    def exists(self, specialty_id: int) -> bool:
        return self.db.get(DbSpecialty, specialty_id) is not None

    def get_by_id(self, specialty_id: int) -> Optional[Specialty]:
        db_specialty = self.db.get(DbSpecialty, specialty_id)
        return self._to_domain(db_specialty) if db_specialty else None

    def list_all(self) -> List[Specialty]:
        rows = self.db.query(DbSpecialty).order_by(DbSpecialty.name).all()
        return [self._to_domain(s) for s in rows]

    def name_exists(self, name: str) -> bool:
        query = self.db.query(DbSpecialty.id).filter(
            func.lower(DbSpecialty.name) == name.strip().lower()
        )
        return query.first() is not None

    def create(self, specialty: Specialty) -> Specialty:
        db_specialty = DbSpecialty(name=specialty.name)
        self.db.add(db_specialty)
        commit_or_raise_duplicate(
            self.db, f"Specialty '{specialty.name}' already exists"
        )
        self.db.refresh(db_specialty)
        return self._to_domain(db_specialty)

    def _to_domain(self, db_specialty: DbSpecialty) -> Specialty:
        return Specialty(id=db_specialty.id, name=db_specialty.name)
