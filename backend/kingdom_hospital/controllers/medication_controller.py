from flask import Blueprint

from kingdom_hospital.core.api_utils import result_response, validated_body
from kingdom_hospital.core.limiter_config import WRITE_LIMIT, limiter
from kingdom_hospital.core.validation import MedicationValidator
from kingdom_hospital.db.session import SessionLocal
from kingdom_hospital.repositories import MedicationRepository, PrescriptionRepository
from kingdom_hospital.schemas.dtos import MedicationRequest
from kingdom_hospital.services import MedicationService

medication_bp = Blueprint("medications", __name__, url_prefix="/api/medications")


def _service(db) -> MedicationService:
    return MedicationService(MedicationRepository(db), PrescriptionRepository(db))


@medication_bp.route("", methods=["GET"])
def list_medications():
    db = SessionLocal()
    try:
        return result_response(_service(db).list_all(), "Medications retrieved")
    finally:
        db.close()


@medication_bp.route("", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def create_medication():
    request_dto = MedicationRequest(**validated_body(MedicationValidator()))
    db = SessionLocal()
    try:
        result = _service(db).create(request_dto)
        return result_response(result, "Medication created", status_code=201)
    finally:
        db.close()


@medication_bp.route("/<id:medication_id>", methods=["GET"])
def get_medication(medication_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).get(medication_id), "Medication retrieved")
    finally:
        db.close()


@medication_bp.route("/<id:medication_id>", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def update_medication(medication_id: int):
    request_dto = MedicationRequest(**validated_body(MedicationValidator()))
    db = SessionLocal()
    try:
        result = _service(db).update(medication_id, request_dto)
        return result_response(result, "Medication updated")
    finally:
        db.close()


@medication_bp.route("/<id:medication_id>", methods=["DELETE"])
@limiter.limit(WRITE_LIMIT)
def delete_medication(medication_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).delete(medication_id), "Medication deleted")
    finally:
        db.close()


@medication_bp.route("/<id:medication_id>/prescriptions", methods=["GET"])
def list_medication_prescriptions(medication_id: int):
    """Prescriptions containing the medication."""
    db = SessionLocal()
    try:
        result = _service(db).prescriptions_of(medication_id)
        return result_response(result, "Prescriptions retrieved")
    finally:
        db.close()
