"""
Domain failures raised by the workflow layer.

Services raise these; the HTTP status each one maps to is decided in
``teleconsulta.core.exception_handlers``.
"""

from typing import Any


class TeleconsultaError(Exception):
    """Base exception for business failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ResourceNotFoundError(TeleconsultaError):
    """Raised when an entity id (or other key) does not resolve."""

    def __init__(self, resource: str, field: str, value: Any):
        super().__init__(f"{resource} not found with {field}: {value}")
        self.resource = resource
        self.field = field
        self.value = value


class BusinessRuleError(TeleconsultaError):
    """Raised when a request breaks a business rule (wrong role, quota, status...)."""

    pass


class SlotConflictError(BusinessRuleError):
    """Raised when the doctor already has a live appointment at that exact time."""

    pass


class PermissionDeniedError(TeleconsultaError):
    """Raised when the caller may not touch the target record or perform the action."""

    pass
