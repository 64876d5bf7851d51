# Controllers package initialization
# Every blueprint is registered by create_app() under /api.

from .consultation_controller import consultation_bp
from .doctor_controller import doctor_bp
from .health_controller import health_bp
from .medication_controller import medication_bp
from .patient_controller import patient_bp
from .prescription_controller import prescription_bp
from .specialty_controller import specialty_bp

ALL_BLUEPRINTS = (
    specialty_bp,
    doctor_bp,
    patient_bp,
    consultation_bp,
    medication_bp,
    prescription_bp,
    health_bp,
)

__all__ = ["ALL_BLUEPRINTS"]
