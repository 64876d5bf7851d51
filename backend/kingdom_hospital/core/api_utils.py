"""
Common API utilities for consistent response formatting across all controllers.
"""

from datetime import date
from typing import Any, Callable, Dict, Optional

from flask import jsonify, request
from werkzeug.routing import IntegerConverter

from .exceptions import ErrorKind
from .result import ServiceResult
from .validation import (
    MAX_DB_INTEGER,
    BaseValidator,
    ValidationError,
    ValidationResult,
)

_STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.REFERENTIAL_GUARD: 409,
    ErrorKind.UNKNOWN_REFERENCE: 400,
    ErrorKind.INVARIANT_VIOLATION: 400,
}


class IdConverter(IntegerConverter):
    """`<id:...>` route segment: a record id the database can hold."""

    def __init__(self, map):
        super().__init__(map, max=MAX_DB_INTEGER)


def api_response(
    success: bool, message: str, data: Optional[Any] = None, status_code: int = 200
) -> tuple:
    """
    Standardized API response format for all endpoints.

    Args:
        success: Whether the operation was successful
        message: Human-readable message about the operation
        data: Optional data payload
        status_code: HTTP status code

    Returns:
        Tuple of (json_response, status_code)
    """
    response = {"success": success, "message": message}

    if data is not None:
        response["data"] = data

    return jsonify(response), status_code


def status_for(result: ServiceResult) -> int:
    """HTTP status code for a failed service result."""
    if result.error_kind is None:
        return 400
    return _STATUS_BY_KIND.get(result.error_kind, 400)


def to_json(payload: Any) -> Any:
    """Serialize a response DTO or a list of response DTOs."""
    if isinstance(payload, list):
        return [item.to_dict() for item in payload]
    return payload.to_dict()


def result_response(
    result: ServiceResult,
    message: str,
    status_code: int = 200,
    serializer: Callable[[Any], Any] = to_json,
) -> tuple:
    """
    Translate a service result into the standard envelope.

    ``serializer`` converts the payload (a response DTO or a list of them)
    into JSON-ready data.
    """
    if not result.success:
        return api_response(False, result.error or "Request rejected", None, status_for(result))

    data = result.data
    if data is not None:
        data = serializer(data)
    return api_response(True, message, data, status_code)


def get_json_body() -> Any:
    """Return the parsed JSON body or raise ValidationError."""
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationError("Request body must be valid JSON")
    return data


def validated_body(validator: BaseValidator) -> Dict[str, Any]:
    """Validate the JSON object body and return its cleaned data.

    Raises ValidationError listing every field error.
    """
    data = get_json_body()
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    result = validator.validate(data)
    result.raise_if_invalid()
    return result.cleaned_data


def query_int(name: str) -> Optional[int]:
    """Parse an optional positive integer query parameter."""
    result = ValidationResult()
    value = BaseValidator.validate_integer(
        request.args.get(name), name, result, min_value=1, max_value=MAX_DB_INTEGER
    )
    result.raise_if_invalid()
    return value


def query_date(name: str) -> Optional[date]:
    """Parse an optional ISO date query parameter."""
    result = ValidationResult()
    value = BaseValidator.validate_date(request.args.get(name), name, result)
    result.raise_if_invalid()
    return value
