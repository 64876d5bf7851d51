"""
Consultation controller - booking endpoints.

Double-booking, unknown references and the deletion guard are decided by
ConsultationService; this module only parses input and shapes responses.
"""

from flask import Blueprint

from kingdom_hospital.core.api_utils import (
    query_date,
    query_int,
    result_response,
    validated_body,
)
from kingdom_hospital.core.limiter_config import WRITE_LIMIT, limiter
from kingdom_hospital.core.validation import ConsultationValidator, PrescriptionValidator
from kingdom_hospital.db.session import SessionLocal
from kingdom_hospital.repositories import (
    ConsultationRepository,
    DoctorRepository,
    MedicationRepository,
    PatientRepository,
    PrescriptionRepository,
)
from kingdom_hospital.schemas.dtos import ConsultationRequest, PrescriptionRequest
from kingdom_hospital.services import ConsultationService, PrescriptionService

consultation_bp = Blueprint("consultations", __name__, url_prefix="/api/consultations")


def _service(db) -> ConsultationService:
    return ConsultationService(
        ConsultationRepository(db),
        DoctorRepository(db),
        PatientRepository(db),
        PrescriptionRepository(db),
    )


def _prescription_service(db) -> PrescriptionService:
    return PrescriptionService(
        PrescriptionRepository(db),
        DoctorRepository(db),
        PatientRepository(db),
        ConsultationRepository(db),
        MedicationRepository(db),
    )


@consultation_bp.route("", methods=["GET"])
def list_consultations():
    """
    List consultations.

    Query parameters (all optional): doctorId, patientId, from, to.
    A date window requires doctorId or patientId.
    """
    doctor_id = query_int("doctorId")
    patient_id = query_int("patientId")
    date_from, date_to = query_date("from"), query_date("to")
    db = SessionLocal()
    try:
        result = _service(db).filter(doctor_id, patient_id, date_from, date_to)
        return result_response(result, "Consultations retrieved")
    finally:
        db.close()


@consultation_bp.route("", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def create_consultation():
    request_dto = ConsultationRequest(**validated_body(ConsultationValidator()))
    db = SessionLocal()
    try:
        result = _service(db).create(request_dto)
        return result_response(result, "Consultation created", status_code=201)
    finally:
        db.close()


@consultation_bp.route("/<id:consultation_id>", methods=["GET"])
def get_consultation(consultation_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).get(consultation_id), "Consultation retrieved")
    finally:
        db.close()


@consultation_bp.route("/<id:consultation_id>", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def update_consultation(consultation_id: int):
    request_dto = ConsultationRequest(**validated_body(ConsultationValidator()))
    db = SessionLocal()
    try:
        result = _service(db).update(consultation_id, request_dto)
        return result_response(result, "Consultation updated")
    finally:
        db.close()


@consultation_bp.route("/<id:consultation_id>", methods=["DELETE"])
@limiter.limit(WRITE_LIMIT)
def delete_consultation(consultation_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).delete(consultation_id), "Consultation deleted")
    finally:
        db.close()


@consultation_bp.route("/<id:consultation_id>/prescriptions", methods=["GET"])
def list_consultation_prescriptions(consultation_id: int):
    db = SessionLocal()
    try:
        result = _service(db).prescriptions_for(consultation_id)
        return result_response(result, "Prescriptions retrieved")
    finally:
        db.close()


@consultation_bp.route("/<id:consultation_id>/prescriptions", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def create_consultation_prescription(consultation_id: int):
    """Create a prescription; doctor and patient are taken from the consultation."""
    cleaned = validated_body(PrescriptionValidator(require_parties=False))
    request_dto = PrescriptionRequest.from_cleaned(cleaned)
    db = SessionLocal()
    try:
        result = _prescription_service(db).create_for_consultation(
            consultation_id, request_dto
        )
        return result_response(result, "Prescription created", status_code=201)
    finally:
        db.close()
