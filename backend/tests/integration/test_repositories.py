"""
Repository integration tests against the in-memory SQLite database.

Each test gets an empty schema from the ``db_session`` fixture.
"""

from datetime import date, time

import pytest
from sqlalchemy.exc import IntegrityError

from kingdom_hospital.core.exceptions import DuplicateRecordError
from kingdom_hospital.db.seed import DEFAULT_SPECIALTIES, ensure_default_specialties
from kingdom_hospital.domain.entities import (
    Consultation,
    Doctor,
    Medication,
    Patient,
    Prescription,
    PrescriptionLine,
    Specialty,
)
from kingdom_hospital.repositories import (
    ConsultationRepository,
    DoctorRepository,
    MedicationRepository,
    PatientRepository,
    PrescriptionLineRepository,
    PrescriptionRepository,
    SpecialtyRepository,
)


def _line(medication_id: int, dosage: str = "1 tablet") -> PrescriptionLine:
    return PrescriptionLine(
        medication_id=medication_id,
        dosage=dosage,
        frequency="twice a day",
        duration="5 days",
        quantity=1,
    )


@pytest.fixture
def records(db_session):
    """A specialty, a doctor, two patients and a medication."""
    specialty = SpecialtyRepository(db_session).create(Specialty(name="Cardiology"))
    doctor = DoctorRepository(db_session).create(
        Doctor(first_name="Gregory", last_name="House", specialty_id=specialty.id)
    )
    patients = PatientRepository(db_session)
    alice = patients.create(
        Patient(first_name="Alice", last_name="Martin", birth_date=date(1990, 1, 1))
    )
    bruno = patients.create(
        Patient(first_name="Bruno", last_name="Lefevre", birth_date=date(1975, 6, 30))
    )
    medication = MedicationRepository(db_session).create(
        Medication(name="Paracetamol", dosage_form="Tablet", strength="500 mg")
    )
    return {
        "specialty": specialty,
        "doctor": doctor,
        "alice": alice,
        "bruno": bruno,
        "medication": medication,
    }


def _book(db_session, records, patient, day, hour) -> Consultation:
    return ConsultationRepository(db_session).create(
        Consultation(
            doctor_id=records["doctor"].id,
            patient_id=patient.id,
            date=day,
            hour=hour,
        )
    )


@pytest.mark.integration
@pytest.mark.repositories
class TestReferenceRepositories:
    def test_doctor_carries_specialty_name(self, db_session, records):
        doctor = DoctorRepository(db_session).get_by_id(records["doctor"].id)

        assert doctor.specialty_name == "Cardiology"
        assert doctor.full_name == "Gregory House"

    def test_specialty_name_lookup_ignores_case(self, db_session, records):
        assert SpecialtyRepository(db_session).name_exists("CARDIOLOGY")
        assert not SpecialtyRepository(db_session).name_exists("Oncology")

    def test_duplicate_medication_raises(self, db_session, records):
        repo = MedicationRepository(db_session)

        with pytest.raises(DuplicateRecordError):
            repo.create(Medication(name="Paracetamol", dosage_form="Tablet", strength="500 mg"))

        # Session stays usable after the rollback
        assert repo.exists(records["medication"].id)

    def test_duplicate_exists_is_case_insensitive_and_excludes_self(
        self, db_session, records
    ):
        repo = MedicationRepository(db_session)
        own_id = records["medication"].id

        assert repo.duplicate_exists("paracetamol", "TABLET", "500 mg")
        assert not repo.duplicate_exists("paracetamol", "tablet", "500 mg", exclude_id=own_id)

    def test_missing_ids_keeps_input_order(self, db_session, records):
        known = records["medication"].id

        missing = MedicationRepository(db_session).missing_ids([99, known, 42])

        assert missing == [99, 42]

    def test_seeding_specialties_is_idempotent(self, db_session):
        assert ensure_default_specialties() == len(DEFAULT_SPECIALTIES)
        assert ensure_default_specialties() == 0
        assert len(SpecialtyRepository(db_session).list_all()) == len(DEFAULT_SPECIALTIES)


@pytest.mark.integration
@pytest.mark.repositories
class TestConsultationRepository:
    def test_same_slot_raises_duplicate(self, db_session, records):
        _book(db_session, records, records["alice"], date(2024, 1, 10), time(9, 0))

        with pytest.raises(DuplicateRecordError):
            _book(db_session, records, records["bruno"], date(2024, 1, 10), time(9, 0))

    def test_missing_doctor_is_not_reported_as_duplicate(self, db_session, records):
        repo = ConsultationRepository(db_session)

        with pytest.raises(IntegrityError):
            repo.create(
                Consultation(
                    doctor_id=999,
                    patient_id=records["alice"].id,
                    date=date(2024, 1, 10),
                    hour=time(9, 0),
                )
            )

        assert repo.filter() == []

    def test_has_conflict_excludes_given_id(self, db_session, records):
        booked = _book(db_session, records, records["alice"], date(2024, 1, 10), time(9, 0))
        repo = ConsultationRepository(db_session)
        doctor_id = records["doctor"].id

        assert repo.has_conflict(doctor_id, date(2024, 1, 10), time(9, 0))
        assert not repo.has_conflict(
            doctor_id, date(2024, 1, 10), time(9, 0), exclude_id=booked.id
        )
        assert not repo.has_conflict(doctor_id, date(2024, 1, 10), time(9, 30))

    def test_filter_orders_newest_first(self, db_session, records):
        alice = records["alice"]
        _book(db_session, records, alice, date(2024, 1, 10), time(9, 0))
        _book(db_session, records, alice, date(2024, 1, 12), time(8, 0))
        _book(db_session, records, alice, date(2024, 1, 10), time(15, 0))

        rows = ConsultationRepository(db_session).filter(patient_id=alice.id)

        assert [(c.date.day, c.hour.hour) for c in rows] == [(12, 8), (10, 15), (10, 9)]
        assert rows[0].patient_name == "Alice Martin"

    def test_filter_window_is_inclusive(self, db_session, records):
        alice = records["alice"]
        _book(db_session, records, alice, date(2024, 1, 1), time(9, 0))
        _book(db_session, records, alice, date(2024, 1, 31), time(9, 0))
        _book(db_session, records, alice, date(2024, 2, 1), time(9, 0))

        rows = ConsultationRepository(db_session).filter(
            doctor_id=records["doctor"].id,
            date_from=date(2024, 1, 1),
            date_to=date(2024, 1, 31),
        )

        assert len(rows) == 2

    def test_patients_of_doctor_are_distinct(self, db_session, records):
        alice = records["alice"]
        _book(db_session, records, alice, date(2024, 1, 10), time(9, 0))
        _book(db_session, records, alice, date(2024, 1, 11), time(9, 0))

        patients = PatientRepository(db_session).list_by_doctor(records["doctor"].id)

        assert [p.id for p in patients] == [alice.id]


@pytest.mark.integration
@pytest.mark.repositories
class TestPrescriptionRepositories:
    def _prescribe(self, db_session, records, lines, day=date(2024, 1, 10)):
        return PrescriptionRepository(db_session).create(
            Prescription(
                doctor_id=records["doctor"].id,
                patient_id=records["alice"].id,
                date=day,
                lines=lines,
            )
        )

    def test_create_returns_lines_with_medication_names(self, db_session, records):
        prescription = self._prescribe(
            db_session, records, [_line(records["medication"].id)]
        )

        assert prescription.id is not None
        assert prescription.doctor_name == "Gregory House"
        assert prescription.lines[0].medication_name == "Paracetamol"
        assert prescription.lines[0].prescription_id == prescription.id

    def test_identical_lines_raise_duplicate(self, db_session, records):
        medication_id = records["medication"].id

        with pytest.raises(DuplicateRecordError):
            self._prescribe(
                db_session, records, [_line(medication_id), _line(medication_id)]
            )

        assert PrescriptionRepository(db_session).list_all() == []

    def test_delete_removes_lines(self, db_session, records):
        prescription = self._prescribe(
            db_session, records, [_line(records["medication"].id)]
        )
        line_id = prescription.lines[0].id

        assert PrescriptionRepository(db_session).delete(prescription.id)
        assert PrescriptionLineRepository(db_session).get_by_id(line_id) is None

    def test_filter_by_medication(self, db_session, records):
        other = MedicationRepository(db_session).create(
            Medication(name="Ibuprofen", dosage_form="Tablet", strength="400 mg")
        )
        first = self._prescribe(db_session, records, [_line(records["medication"].id)])
        self._prescribe(db_session, records, [_line(other.id)], day=date(2024, 1, 11))

        rows = PrescriptionRepository(db_session).filter(
            medication_id=records["medication"].id
        )

        assert [p.id for p in rows] == [first.id]

    def test_set_and_clear_consultation(self, db_session, records):
        consultation = _book(
            db_session, records, records["alice"], date(2024, 1, 10), time(9, 0)
        )
        prescription = self._prescribe(
            db_session, records, [_line(records["medication"].id)]
        )
        repo = PrescriptionRepository(db_session)

        attached = repo.set_consultation(prescription.id, consultation.id)
        assert attached.consultation_id == consultation.id
        assert ConsultationRepository(db_session).count_prescriptions(consultation.id) == 1

        detached = repo.set_consultation(prescription.id, None)
        assert detached.consultation_id is None

    def test_add_many_and_medication_usage(self, db_session, records):
        medication_id = records["medication"].id
        prescription = self._prescribe(db_session, records, [_line(medication_id)])

        added = PrescriptionLineRepository(db_session).add_many(
            prescription.id, [_line(medication_id, dosage="2 tablets")]
        )

        assert [line.dosage for line in added] == ["2 tablets"]
        assert MedicationRepository(db_session).count_prescription_lines(medication_id) == 2
        assert len(PrescriptionRepository(db_session).get_by_id(prescription.id).lines) == 2
