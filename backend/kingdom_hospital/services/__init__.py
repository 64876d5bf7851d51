# Services package initialization
# One service per aggregate; each runs its business rules in order and
# returns a ServiceResult.

from .consultation_service import ConsultationService
from .doctor_service import DoctorService
from .medication_service import MedicationService
from .patient_service import PatientService
from .prescription_line_service import PrescriptionLineService
from .prescription_service import PrescriptionService
from .specialty_service import SpecialtyService

__all__ = [
    "ConsultationService",
    "DoctorService",
    "MedicationService",
    "PatientService",
    "PrescriptionLineService",
    "PrescriptionService",
    "SpecialtyService",
]
