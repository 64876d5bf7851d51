# SQLAlchemy implementations of the domain repository interfaces.

from .consultation_repo import ConsultationRepository
from .doctor_repo import DoctorRepository
from .medication_repo import MedicationRepository
from .patient_repo import PatientRepository
from .prescription_line_repo import PrescriptionLineRepository
from .prescription_repo import PrescriptionRepository
from .specialty_repo import SpecialtyRepository

__all__ = [
    "ConsultationRepository",
    "DoctorRepository",
    "MedicationRepository",
    "PatientRepository",
    "PrescriptionLineRepository",
    "PrescriptionRepository",
    "SpecialtyRepository",
]
