"""
Prescription controller - prescriptions, their lines and the link to a
consultation.
"""

from typing import List

from flask import Blueprint

from kingdom_hospital.core.api_utils import (
    get_json_body,
    query_date,
    query_int,
    result_response,
    validated_body,
)
from kingdom_hospital.core.limiter_config import WRITE_LIMIT, limiter
from kingdom_hospital.core.validation import (
    PrescriptionLineValidator,
    PrescriptionValidator,
    ValidationResult,
)
from kingdom_hospital.db.session import SessionLocal
from kingdom_hospital.repositories import (
    ConsultationRepository,
    DoctorRepository,
    MedicationRepository,
    PatientRepository,
    PrescriptionLineRepository,
    PrescriptionRepository,
)
from kingdom_hospital.schemas.dtos import PrescriptionLineRequest, PrescriptionRequest
from kingdom_hospital.services import PrescriptionLineService, PrescriptionService

prescription_bp = Blueprint("prescriptions", __name__, url_prefix="/api/prescriptions")


def _service(db) -> PrescriptionService:
    return PrescriptionService(
        PrescriptionRepository(db),
        DoctorRepository(db),
        PatientRepository(db),
        ConsultationRepository(db),
        MedicationRepository(db),
    )


def _line_service(db) -> PrescriptionLineService:
    return PrescriptionLineService(
        PrescriptionLineRepository(db), PrescriptionRepository(db), MedicationRepository(db)
    )


def _line_batch() -> List[PrescriptionLineRequest]:
    """Lines from a JSON list, or from the ``lines`` key of a JSON object."""
    body = get_json_body()
    raw_lines = body.get("lines") if isinstance(body, dict) else body
    result = ValidationResult()
    cleaned = PrescriptionLineValidator().validate_batch(raw_lines, result)
    result.raise_if_invalid()
    return [PrescriptionLineRequest(**line) for line in cleaned]


# ------------------- prescriptions -------------------


@prescription_bp.route("", methods=["GET"])
def list_prescriptions():
    """
    List prescriptions.

    Query parameters (all optional): doctorId, patientId, from, to.
    A date window requires doctorId or patientId.
    """
    doctor_id = query_int("doctorId")
    patient_id = query_int("patientId")
    date_from, date_to = query_date("from"), query_date("to")
    db = SessionLocal()
    try:
        result = _service(db).filter(doctor_id, patient_id, date_from, date_to)
        return result_response(result, "Prescriptions retrieved")
    finally:
        db.close()


@prescription_bp.route("", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def create_prescription():
    request_dto = PrescriptionRequest.from_cleaned(validated_body(PrescriptionValidator()))
    db = SessionLocal()
    try:
        result = _service(db).create(request_dto)
        return result_response(result, "Prescription created", status_code=201)
    finally:
        db.close()


@prescription_bp.route("/<id:prescription_id>", methods=["GET"])
def get_prescription(prescription_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).get(prescription_id), "Prescription retrieved")
    finally:
        db.close()


@prescription_bp.route("/<id:prescription_id>", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def update_prescription(prescription_id: int):
    """Update the header; lines are managed through /lines."""
    cleaned = validated_body(PrescriptionValidator(with_lines=False))
    request_dto = PrescriptionRequest.from_cleaned(cleaned)
    db = SessionLocal()
    try:
        result = _service(db).update(prescription_id, request_dto)
        return result_response(result, "Prescription updated")
    finally:
        db.close()


@prescription_bp.route("/<id:prescription_id>", methods=["DELETE"])
@limiter.limit(WRITE_LIMIT)
def delete_prescription(prescription_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).delete(prescription_id), "Prescription deleted")
    finally:
        db.close()


@prescription_bp.route(
    "/<id:prescription_id>/consultation/<id:consultation_id>", methods=["PUT"]
)
@limiter.limit(WRITE_LIMIT)
def attach_prescription(prescription_id: int, consultation_id: int):
    db = SessionLocal()
    try:
        result = _service(db).attach_to_consultation(prescription_id, consultation_id)
        return result_response(result, "Prescription attached to consultation")
    finally:
        db.close()


@prescription_bp.route("/<id:prescription_id>/consultation", methods=["DELETE"])
@limiter.limit(WRITE_LIMIT)
def detach_prescription(prescription_id: int):
    db = SessionLocal()
    try:
        result = _service(db).detach_from_consultation(prescription_id)
        return result_response(result, "Prescription detached from consultation")
    finally:
        db.close()


# ------------------- lines -------------------


@prescription_bp.route("/<id:prescription_id>/lines", methods=["GET"])
def list_lines(prescription_id: int):
    db = SessionLocal()
    try:
        return result_response(_line_service(db).list_for(prescription_id), "Lines retrieved")
    finally:
        db.close()


@prescription_bp.route("/<id:prescription_id>/lines", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def add_lines(prescription_id: int):
    lines = _line_batch()
    db = SessionLocal()
    try:
        result = _line_service(db).add(prescription_id, lines)
        return result_response(result, "Lines added", status_code=201)
    finally:
        db.close()


@prescription_bp.route("/<id:prescription_id>/lines/<id:line_id>", methods=["GET"])
def get_line(prescription_id: int, line_id: int):
    db = SessionLocal()
    try:
        result = _line_service(db).get(prescription_id, line_id)
        return result_response(result, "Line retrieved")
    finally:
        db.close()


@prescription_bp.route("/<id:prescription_id>/lines/<id:line_id>", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def update_line(prescription_id: int, line_id: int):
    request_dto = PrescriptionLineRequest(**validated_body(PrescriptionLineValidator()))
    db = SessionLocal()
    try:
        result = _line_service(db).update(prescription_id, line_id, request_dto)
        return result_response(result, "Line updated")
    finally:
        db.close()


@prescription_bp.route("/<id:prescription_id>/lines/<id:line_id>", methods=["DELETE"])
@limiter.limit(WRITE_LIMIT)
def delete_line(prescription_id: int, line_id: int):
    db = SessionLocal()
    try:
        result = _line_service(db).delete(prescription_id, line_id)
        return result_response(result, "Line deleted")
    finally:
        db.close()
