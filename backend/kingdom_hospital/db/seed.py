"""
Database seeding and initialization functions.

This module ensures reference data exists in the database. Specialties are
required before any doctor can be registered, so they are seeded on startup
(see SEED_ON_STARTUP) and from the management CLI. Demo data is only loaded
on request.
"""

import logging
from datetime import date, time
from typing import Iterable, List

from sqlalchemy import func

from kingdom_hospital.db.base import (
    Consultation,
    Doctor,
    Medication,
    Patient,
    Specialty,
)
from kingdom_hospital.db.session import SessionLocal

logger = logging.getLogger(__name__)

DEFAULT_SPECIALTIES = (
    "Cardiology",
    "Dermatology",
    "General Medicine",
    "Neurology",
    "Pediatrics",
)

DEMO_MEDICATIONS = (
    ("Paracetamol", "Tablet", "500 mg", "N02BE01"),
    ("Amoxicillin", "Capsule", "500 mg", "J01CA04"),
    ("Ibuprofen", "Tablet", "400 mg", "M01AE01"),
)


def ensure_default_specialties(names: Iterable[str] = DEFAULT_SPECIALTIES) -> int:
    """
    Ensure the reference specialties exist.

    Idempotent: names already present (compared case-insensitively) are
    skipped. Returns the number of specialties created.
    """
    created = 0
    with SessionLocal() as db:
        existing = {
            name.lower()
            for (name,) in db.query(func.lower(Specialty.name)).all()
        }
        for name in names:
            if name.lower() in existing:
                continue
            db.add(Specialty(name=name))
            existing.add(name.lower())
            created += 1
        if created:
            db.commit()

    logger.info(
        "Default specialties ensured",
        extra={"context": {"created": created}},
    )
    return created


def seed_demo_data() -> bool:
    """
    Load a small demo dataset (doctors, patients, medications, one booking).

    Skipped when any doctor already exists. Returns True if data was added.
    """
    ensure_default_specialties()

    with SessionLocal() as db:
        if db.query(Doctor.id).first() is not None:
            logger.info("Demo data skipped: doctors already present")
            return False

        specialties = {s.name: s for s in db.query(Specialty).all()}
        doctors: List[Doctor] = [
            Doctor(
                first_name="Gregory",
                last_name="House",
                specialty=specialties["General Medicine"],
            ),
            Doctor(
                first_name="Meredith",
                last_name="Grey",
                specialty=specialties["Cardiology"],
            ),
        ]
        patients: List[Patient] = [
            Patient(first_name="Alice", last_name="Martin", birth_date=date(1985, 4, 12)),
            Patient(first_name="Bruno", last_name="Lefevre", birth_date=date(2012, 9, 3)),
        ]
        db.add_all(doctors + patients)
        db.add_all(
            Medication(name=name, dosage_form=form, strength=strength, atc_code=atc)
            for name, form, strength, atc in DEMO_MEDICATIONS
        )
        db.flush()

        db.add(
            Consultation(
                doctor_id=doctors[0].id,
                patient_id=patients[0].id,
                date=date.today(),
                hour=time(9, 0),
                reason="Annual check-up",
            )
        )
        db.commit()

    logger.info(
        "Demo data loaded",
        extra={
            "context": {
                "doctors": len(doctors),
                "patients": len(patients),
                "medications": len(DEMO_MEDICATIONS),
            }
        },
    )
    return True
