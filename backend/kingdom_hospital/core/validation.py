"""
Common validation utilities for the hospital API.

Two layers live here:

- Payload validators (``BaseValidator`` subclasses) turn raw JSON bodies into
  cleaned, typed values and collect every field error at once.
- ``first_failure`` runs the ordered business-rule checks of a service and
  stops at the first rejected rule.
"""

import logging
from datetime import date, datetime, time
from typing import Any, Callable, Dict, Iterable, List, Optional

from .exceptions import ErrorKind
from .result import ServiceResult

logger = logging.getLogger(__name__)

# A rule returns None when it passes, or the failed result.
Rule = Callable[[], Optional[ServiceResult]]

# Largest value an INTEGER column holds (PostgreSQL int4)
MAX_DB_INTEGER = 2**31 - 1


def first_failure(rules: Iterable[Rule]) -> Optional[ServiceResult]:
    """Evaluate rules in order and return the first failure, if any.

    Rules are zero-argument callables so that later (possibly expensive)
    lookups are skipped once an earlier rule has rejected the operation.
    """
    for rule in rules:
        failure = rule()
        if failure is not None:
            return failure
    return None


def reject(kind: ErrorKind, message: str) -> ServiceResult:
    """Log a rejected business rule and return the failed result."""
    logger.warning(
        "Business rule rejected operation",
        extra={"context": {"kind": kind.value, "reason": message}},
    )
    return ServiceResult.fail(kind, message)


def check(
    passed: Callable[[], bool], kind: ErrorKind, message: str
) -> Rule:
    """Build a rule that fails with ``kind``/``message`` when ``passed()`` is false."""

    def _rule() -> Optional[ServiceResult]:
        if passed():
            return None
        return reject(kind, message)

    return _rule


class ValidationError(Exception):
    """Custom exception for validation errors."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class ValidationResult:
    """Container for validation results."""

    def __init__(self):
        self.errors: List[str] = []
        self.is_valid: bool = True
        self.cleaned_data: Dict[str, Any] = {}

    def add_error(self, message: str, field: Optional[str] = None):
        """Add validation error."""
        error_msg = f"{field}: {message}" if field else message
        self.errors.append(error_msg)
        self.is_valid = False
        logger.warning(f"Validation error: {error_msg}")

    @property
    def message(self) -> str:
        return "; ".join(self.errors)

    def raise_if_invalid(self) -> None:
        if not self.is_valid:
            raise ValidationError(self.message)


class BaseValidator:
    """Base validator with common validation methods."""

    def validate(
        self, data: Dict[str, Any]
    ) -> ValidationResult:  # pragma: no cover - interface definition
        """Validate data for a specific entity type."""
        raise NotImplementedError("Subclasses must implement validate")

    @staticmethod
    def validate_required_field(
        value: Any, field_name: str, result: ValidationResult
    ) -> bool:
        """Validate that a required field is present and not empty."""
        if (
            value is None
            or value == ""
            or (isinstance(value, str) and value.strip() == "")
        ):
            result.add_error("is required", field_name)
            return False
        return True

    @staticmethod
    def validate_date(
        value: Any, field_name: str, result: ValidationResult
    ) -> Optional[date]:
        """Validate and convert date field."""
        if value is None or value == "":
            return None

        if isinstance(value, datetime):
            return value.date()

        if isinstance(value, date):
            return value

        if isinstance(value, str):
            try:
                return datetime.strptime(value.strip(), "%Y-%m-%d").date()
            except ValueError:
                result.add_error("invalid date, use YYYY-MM-DD", field_name)
                return None

        result.add_error("invalid date format", field_name)
        return None

    @staticmethod
    def validate_time(
        value: Any, field_name: str, result: ValidationResult
    ) -> Optional[time]:
        """Validate and convert a time-of-day field (HH:MM or HH:MM:SS)."""
        if value is None or value == "":
            return None

        if isinstance(value, time):
            return value

        if isinstance(value, str):
            for fmt in ("%H:%M", "%H:%M:%S"):
                try:
                    return datetime.strptime(value.strip(), fmt).time()
                except ValueError:
                    continue
            result.add_error("invalid time, use HH:MM", field_name)
            return None

        result.add_error("invalid time format", field_name)
        return None

    @staticmethod
    def validate_integer(
        value: Any,
        field_name: str,
        result: ValidationResult,
        min_value: Optional[int] = None,
        max_value: Optional[int] = None,
    ) -> Optional[int]:
        """Validate and convert integer field."""
        if value is None or value == "":
            return None

        if isinstance(value, bool):
            result.add_error("must be an integer", field_name)
            return None

        if isinstance(value, float) and not value.is_integer():
            result.add_error("must be an integer", field_name)
            return None

        try:
            int_value = int(value)
        except (ValueError, TypeError, OverflowError):
            result.add_error("must be an integer", field_name)
            return None

        if min_value is not None and int_value < min_value:
            result.add_error(f"must be at least {min_value}", field_name)
            return None

        if max_value is not None and int_value > max_value:
            result.add_error(f"must be at most {max_value}", field_name)
            return None

        return int_value

    @staticmethod
    def validate_string(
        value: Any,
        field_name: str,
        result: ValidationResult,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
    ) -> Optional[str]:
        """Validate string field."""
        if value is None:
            return None

        if not isinstance(value, str):
            value = str(value)

        value = value.strip()

        if min_length is not None and len(value) < min_length:
            result.add_error(f"must have at least {min_length} characters", field_name)
            return None

        if max_length is not None and len(value) > max_length:
            result.add_error(f"must have at most {max_length} characters", field_name)
            return None

        return value if value else None

    def _required_string(
        self,
        data: Dict[str, Any],
        key: str,
        field_name: str,
        result: ValidationResult,
        max_length: int,
    ) -> None:
        if self.validate_required_field(data.get(key), key, result):
            value = self.validate_string(
                data.get(key), key, result, min_length=1, max_length=max_length
            )
            if value is not None:
                result.cleaned_data[field_name] = value

    def _optional_string(
        self,
        data: Dict[str, Any],
        key: str,
        field_name: str,
        result: ValidationResult,
        max_length: int,
    ) -> None:
        value = self.validate_string(data.get(key), key, result, max_length=max_length)
        result.cleaned_data[field_name] = value

    def _required_id(
        self,
        data: Dict[str, Any],
        key: str,
        field_name: str,
        result: ValidationResult,
    ) -> None:
        if self.validate_required_field(data.get(key), key, result):
            value = self.validate_integer(
                data.get(key), key, result, min_value=1, max_value=MAX_DB_INTEGER
            )
            if value is not None:
                result.cleaned_data[field_name] = value

    def _required_date(
        self,
        data: Dict[str, Any],
        key: str,
        field_name: str,
        result: ValidationResult,
    ) -> None:
        if self.validate_required_field(data.get(key), key, result):
            value = self.validate_date(data.get(key), key, result)
            if value is not None:
                result.cleaned_data[field_name] = value


class SpecialtyValidator(BaseValidator):
    """Validator for specialty payloads."""

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        self._required_string(data, "name", "name", result, max_length=30)
        return result


class PersonValidator(BaseValidator):
    """Shared first/last name rules for doctors and patients."""

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        self._required_string(data, "firstName", "first_name", result, max_length=30)
        self._required_string(data, "lastName", "last_name", result, max_length=30)
        return result


class DoctorValidator(PersonValidator):
    """Validator for doctor payloads."""

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = super().validate(data)
        self._required_id(data, "specialtyId", "specialty_id", result)
        return result


class PatientValidator(PersonValidator):
    """Validator for patient payloads.

    Only the shape of ``birthDate`` is checked here; the allowed range is a
    business rule enforced by the patient service.
    """

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = super().validate(data)
        self._required_date(data, "birthDate", "birth_date", result)
        return result


class ConsultationValidator(BaseValidator):
    """Validator for consultation payloads."""

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        self._required_id(data, "doctorId", "doctor_id", result)
        self._required_id(data, "patientId", "patient_id", result)
        self._required_date(data, "date", "date", result)
        if self.validate_required_field(data.get("hour"), "hour", result):
            hour = self.validate_time(data.get("hour"), "hour", result)
            if hour is not None:
                result.cleaned_data["hour"] = hour
        self._optional_string(data, "reason", "reason", result, max_length=100)
        return result


class MedicationValidator(BaseValidator):
    """Validator for medication payloads."""

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        self._required_string(data, "name", "name", result, max_length=100)
        self._required_string(data, "dosageForm", "dosage_form", result, max_length=30)
        self._required_string(data, "strength", "strength", result, max_length=30)
        self._optional_string(data, "atcCode", "atc_code", result, max_length=20)
        return result


class PrescriptionLineValidator(BaseValidator):
    """Validator for a single prescription line payload.

    Quantity is only checked for being an integer; ``quantity > 0`` is a
    business rule reported by the services.
    """

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        if not isinstance(data, dict):
            result.add_error("each line must be an object", "lines")
            return result
        self._required_id(data, "medicationId", "medication_id", result)
        self._required_string(data, "dosage", "dosage", result, max_length=50)
        self._required_string(data, "frequency", "frequency", result, max_length=50)
        self._required_string(data, "duration", "duration", result, max_length=30)
        if self.validate_required_field(data.get("quantity"), "quantity", result):
            quantity = self.validate_integer(
                data.get("quantity"), "quantity", result, max_value=MAX_DB_INTEGER
            )
            if quantity is not None:
                result.cleaned_data["quantity"] = quantity
        self._optional_string(
            data, "instructions", "instructions", result, max_length=255
        )
        return result

    def validate_batch(
        self, raw_lines: Any, result: ValidationResult
    ) -> List[Dict[str, Any]]:
        """Validate a list of line payloads, reporting errors as ``lines[i]``."""
        if not isinstance(raw_lines, list):
            result.add_error("must be a list", "lines")
            return []
        lines = []
        for index, raw_line in enumerate(raw_lines):
            line_result = self.validate(raw_line)
            for error in line_result.errors:
                result.add_error(error, f"lines[{index}]")
            lines.append(line_result.cleaned_data)
        return lines


class PrescriptionValidator(BaseValidator):
    """Validator for prescription payloads.

    ``with_lines`` is False for header-only updates. ``require_parties`` is
    False when doctor and patient are taken from a consultation instead of
    the body.
    """

    def __init__(self, with_lines: bool = True, require_parties: bool = True):
        self.with_lines = with_lines
        self.require_parties = require_parties

    def validate(self, data: Dict[str, Any]) -> ValidationResult:
        result = ValidationResult()
        if self.require_parties:
            self._required_id(data, "doctorId", "doctor_id", result)
            self._required_id(data, "patientId", "patient_id", result)
        consultation_id = self.validate_integer(
            data.get("consultationId"),
            "consultationId",
            result,
            min_value=1,
            max_value=MAX_DB_INTEGER,
        )
        result.cleaned_data["consultation_id"] = consultation_id
        self._required_date(data, "date", "date", result)
        self._optional_string(data, "notes", "notes", result, max_length=255)

        if self.with_lines:
            raw_lines = data.get("lines")
            if raw_lines is None:
                raw_lines = []
            result.cleaned_data["lines"] = PrescriptionLineValidator().validate_batch(
                raw_lines, result
            )
        return result
