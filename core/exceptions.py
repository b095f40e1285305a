from typing import Any, Dict, Optional

from fastapi import status


class PlantCareException(Exception):
    """
    Base exception of the plant care API.

    Services raise subclasses of this; main.py renders them as
    {"error": {"code", "message", "details"}} with the matching status code.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class ValidationError(PlantCareException):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "VALIDATION_ERROR"


class AuthError(PlantCareException):
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = "AUTHENTICATION_ERROR"

    def __init__(self, message: str = "Could not validate credentials", details=None):
        super().__init__(message, details)


class AuthorizationError(PlantCareException):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "AUTHORIZATION_ERROR"

    def __init__(self, message: str = "You do not have access to this resource", details=None):
        super().__init__(message, details)


class NotFoundError(PlantCareException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        details = {"resource": resource}
        if resource_id is not None:
            details["id"] = resource_id
        super().__init__(message, details)


class ExternalServiceError(PlantCareException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "EXTERNAL_SERVICE_ERROR"

    def __init__(self, service: str, message: str = None, details=None):
        self.service = service
        details = dict(details or {})
        details["service"] = service
        super().__init__(message or f"{service} is unavailable", details)


class InternalError(PlantCareException):
    pass
