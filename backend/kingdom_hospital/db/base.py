from __future__ import annotations

import datetime as dt
from typing import List, Optional

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .session import Base


class Specialty(Base):
    """Medical specialty (cardiology, pediatrics, ...)"""

    __tablename__ = "specialties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)

    doctors: Mapped[List["Doctor"]] = relationship(back_populates="specialty")


class Doctor(Base):
    __tablename__ = "doctors"
    __table_args__ = (Index("ix_doctor_last_name_first_name", "last_name", "first_name"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    first_name: Mapped[str] = mapped_column(String(30), nullable=False)
    last_name: Mapped[str] = mapped_column(String(30), nullable=False)
    specialty_id: Mapped[int] = mapped_column(
        ForeignKey("specialties.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    created_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    specialty: Mapped[Specialty] = relationship(back_populates="doctors")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Patient(Base):
    __tablename__ = "patients"
    __table_args__ = (
        Index(
            "ix_patient_last_name_first_name_birth_date",
            "last_name",
            "first_name",
            "birth_date",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    first_name: Mapped[str] = mapped_column(String(30), nullable=False)
    last_name: Mapped[str] = mapped_column(String(30), nullable=False)
    birth_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    created_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), onupdate=func.now()
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


# ------------------- CONSULTATIONS -------------------
class Consultation(Base):
    """A doctor/patient appointment at a single point in time.

    The (doctor_id, date, hour) unique constraint is the storage backstop
    against double-booking.
    """

    __tablename__ = "consultations"
    __table_args__ = (
        UniqueConstraint(
            "doctor_id", "date", "hour", name="uq_consultation_doctor_date_hour"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    doctor_id: Mapped[int] = mapped_column(
        ForeignKey("doctors.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    hour: Mapped[dt.time] = mapped_column(Time, nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    created_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    doctor: Mapped[Doctor] = relationship()
    patient: Mapped[Patient] = relationship()


# ------------------- MEDICATIONS -------------------
class Medication(Base):
    __tablename__ = "medications"
    __table_args__ = (
        UniqueConstraint(
            "name", "dosage_form", "strength", name="uq_medication_name_form_strength"
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    dosage_form: Mapped[str] = mapped_column(String(30), nullable=False)
    strength: Mapped[str] = mapped_column(String(30), nullable=False)
    atc_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)


# ------------------- PRESCRIPTIONS -------------------
class Prescription(Base):
    __tablename__ = "prescriptions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    doctor_id: Mapped[int] = mapped_column(
        ForeignKey("doctors.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    patient_id: Mapped[int] = mapped_column(
        ForeignKey("patients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    # Prescription keeps its data if the consultation goes away
    consultation_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("consultations.id", ondelete="SET NULL"), nullable=True, index=True
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    created_at: Mapped[Optional[dt.datetime]] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    doctor: Mapped[Doctor] = relationship()
    patient: Mapped[Patient] = relationship()
    lines: Mapped[List["PrescriptionLine"]] = relationship(
        back_populates="prescription",
        cascade="all, delete-orphan",
        order_by="PrescriptionLine.id",
    )


class PrescriptionLine(Base):
    __tablename__ = "prescription_lines"
    __table_args__ = (
        UniqueConstraint(
            "prescription_id",
            "medication_id",
            "dosage",
            "frequency",
            "duration",
            name="uq_prescription_line",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    prescription_id: Mapped[int] = mapped_column(
        ForeignKey("prescriptions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    medication_id: Mapped[int] = mapped_column(
        ForeignKey("medications.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    dosage: Mapped[str] = mapped_column(String(50), nullable=False)
    frequency: Mapped[str] = mapped_column(String(50), nullable=False)
    duration: Mapped[str] = mapped_column(String(30), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    instructions: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    prescription: Mapped[Prescription] = relationship(back_populates="lines")
    medication: Mapped[Medication] = relationship()
