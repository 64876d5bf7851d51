from flask import Blueprint

from kingdom_hospital.core.api_utils import result_response, validated_body
from kingdom_hospital.core.limiter_config import WRITE_LIMIT, limiter
from kingdom_hospital.core.validation import PatientValidator
from kingdom_hospital.db.session import SessionLocal
from kingdom_hospital.repositories import (
    ConsultationRepository,
    PatientRepository,
    PrescriptionRepository,
)
from kingdom_hospital.schemas.dtos import PatientRequest
from kingdom_hospital.services import PatientService

patient_bp = Blueprint("patients", __name__, url_prefix="/api/patients")


def _service(db) -> PatientService:
    return PatientService(
        PatientRepository(db), ConsultationRepository(db), PrescriptionRepository(db)
    )


@patient_bp.route("", methods=["GET"])
def list_patients():
    """List patients with their current age."""
    db = SessionLocal()
    try:
        return result_response(_service(db).list_all(), "Patients retrieved")
    finally:
        db.close()


@patient_bp.route("", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def create_patient():
    request_dto = PatientRequest(**validated_body(PatientValidator()))
    db = SessionLocal()
    try:
        result = _service(db).create(request_dto)
        return result_response(result, "Patient created", status_code=201)
    finally:
        db.close()


@patient_bp.route("/<id:patient_id>", methods=["GET"])
def get_patient(patient_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).get(patient_id), "Patient retrieved")
    finally:
        db.close()


@patient_bp.route("/<id:patient_id>", methods=["PUT"])
@limiter.limit(WRITE_LIMIT)
def update_patient(patient_id: int):
    request_dto = PatientRequest(**validated_body(PatientValidator()))
    db = SessionLocal()
    try:
        return result_response(
            _service(db).update(patient_id, request_dto), "Patient updated"
        )
    finally:
        db.close()


@patient_bp.route("/<id:patient_id>", methods=["DELETE"])
@limiter.limit(WRITE_LIMIT)
def delete_patient(patient_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).delete(patient_id), "Patient deleted")
    finally:
        db.close()


@patient_bp.route("/<id:patient_id>/consultations", methods=["GET"])
def list_patient_consultations(patient_id: int):
    db = SessionLocal()
    try:
        result = _service(db).consultations_of(patient_id)
        return result_response(result, "Consultations retrieved")
    finally:
        db.close()


@patient_bp.route("/<id:patient_id>/prescriptions", methods=["GET"])
def list_patient_prescriptions(patient_id: int):
    db = SessionLocal()
    try:
        result = _service(db).prescriptions_of(patient_id)
        return result_response(result, "Prescriptions retrieved")
    finally:
        db.close()
