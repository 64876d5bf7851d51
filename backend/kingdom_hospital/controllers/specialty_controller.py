"""
Specialty controller - reference data for doctors.
"""

from flask import Blueprint

from kingdom_hospital.core.api_utils import result_response, validated_body
from kingdom_hospital.core.limiter_config import WRITE_LIMIT, limiter
from kingdom_hospital.core.validation import SpecialtyValidator
from kingdom_hospital.db.session import SessionLocal
from kingdom_hospital.repositories import DoctorRepository, SpecialtyRepository
from kingdom_hospital.schemas.dtos import SpecialtyRequest
from kingdom_hospital.services import SpecialtyService

specialty_bp = Blueprint("specialties", __name__, url_prefix="/api/specialties")


def _service(db) -> SpecialtyService:
    return SpecialtyService(SpecialtyRepository(db), DoctorRepository(db))


@specialty_bp.route("", methods=["GET"])
def list_specialties():
    db = SessionLocal()
    try:
        return result_response(_service(db).list_all(), "Specialties retrieved")
    finally:
        db.close()


@specialty_bp.route("/<id:specialty_id>", methods=["GET"])
def get_specialty(specialty_id: int):
    db = SessionLocal()
    try:
        return result_response(_service(db).get(specialty_id), "Specialty retrieved")
    finally:
        db.close()


@specialty_bp.route("/<id:specialty_id>/doctors", methods=["GET"])
def list_specialty_doctors(specialty_id: int):
    """Doctors practising the specialty."""
    db = SessionLocal()
    try:
        return result_response(_service(db).doctors_of(specialty_id), "Doctors retrieved")
    finally:
        db.close()


@specialty_bp.route("", methods=["POST"])
@limiter.limit(WRITE_LIMIT)
def create_specialty():
    request_dto = SpecialtyRequest(**validated_body(SpecialtyValidator()))
    db = SessionLocal()
    try:
        result = _service(db).create(request_dto)
        return result_response(result, "Specialty created", status_code=201)
    finally:
        db.close()
