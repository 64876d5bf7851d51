"""
Doctor controller for handling HTTP requests.

This controller:
- Parses and validates JSON payloads and query parameters
- Delegates every business rule to DoctorService
- Maps service results to the standard response envelope
"""

from flask import Blueprint

from kingdom_hospital.core.api_utils import query_date, result_response, validated_body
from kingdom_hospital.core.limiter_config import WRITE_LIMIT, limiter
from kingdom_hospital.core.validation import DoctorValidator
from kingdom_hospital.db.session import SessionLocal
from kingdom_hospital.repositories import (
    ConsultationRepository,
    DoctorRepository,
    PatientRepository,
    PrescriptionRepository,
    SpecialtyRepository,
)
from kingdom_hospital.schemas.dtos import DoctorRequest
from kingdom_hospital.services import DoctorService

doctor_bp = Blueprint("doctors", __name__, url_prefix="/api/doctors")


def _service(db) -> DoctorService:
    return DoctorService(
        DoctorRepository(db),
        SpecialtyRepository(db),
        PatientRepository(db),
        ConsultationRepository(db),
        PrescriptionRepository(db),
    )


@doctor_bp.route("", methods=["GET"])
def list_doctors():
    db = SessionLocal()
    try:
        return result_response(_service(db).list_all(), "Doctors retrieved")
    finally:
        db.close()


@doctor_bp.route("", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def create_doctor():
    request_dto = DoctorRequest(**validated_body(DoctorValidator()))
    db = SessionLocal()
    try:
        result = _service(db).create(request_dto)
        return result_response(result, "Doctor created", status_code=201)
    finally:
        db.close()


@doctor_bp.route("/<id:doctor_id>", methods=["GET"])
def get_doctor(doctor_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).get(doctor_id), "Doctor retrieved")
    finally:
        db.close()


@doctor_bp.route("/<id:doctor_id>", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def update_doctor(doctor_id: int):
    request_dto = DoctorRequest(**validated_body(DoctorValidator()))
    db = SessionLocal()
    try:
        return result_response(_service(db).update(doctor_id, request_dto), "Doctor updated")
    finally:
        db.close()


@doctor_bp.route("/<id:doctor_id>", methods=["DELETE"])
@limiter.limit(WRITE_LIMIT)
def delete_doctor(doctor_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).delete(doctor_id), "Doctor deleted")
    finally:
        db.close()


@doctor_bp.route("/<id:doctor_id>/specialty", methods=["GET"])
def get_doctor_specialty(doctor_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).get_specialty(doctor_id), "Specialty retrieved")
    finally:
        db.close()


@doctor_bp.route("/<id:doctor_id>/specialty/<id:specialty_id>", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def change_doctor_specialty(doctor_id: int, specialty_id: int):
    db = SessionLocal()
    try:
        result = _service(db).change_specialty(doctor_id, specialty_id)
        return result_response(result, "Specialty changed")
    finally:
        db.close()


@doctor_bp.route("/<id:doctor_id>/consultations", methods=["GET"])
def list_doctor_consultations(doctor_id: int):
    """Consultations of the doctor, optionally within ?from=&to=."""
    date_from, date_to = query_date("from"), query_date("to")
    db = SessionLocal()
    try:
        result = _service(db).consultations_of(doctor_id, date_from, date_to)
        return result_response(result, "Consultations retrieved")
    finally:
        db.close()


@doctor_bp.route("/<id:doctor_id>/patients", methods=["GET"])
def list_doctor_patients(doctor_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).patients_of(doctor_id), "Patients retrieved")
    finally:
        db.close()


@doctor_bp.route("/<id:doctor_id>/prescriptions", methods=["GET"])
def list_doctor_prescriptions(doctor_id: int):
    date_from, date_to = query_date("from"), query_date("to")
    db = SessionLocal()
    try:
        result = _service(db).prescriptions_of(doctor_id, date_from, date_to)
        return result_response(result, "Prescriptions retrieved")
    finally:
        db.close()
