class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class RequestValidationFailed(AppError):
    """Raised when a request is missing an identifier the operation cannot run without."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class InvalidStatusTransitionError(AppError):
    """Raised when a write would move an entity along an edge its status table does not allow."""
    def __init__(self, message: str, *, entity: str, current: str, requested: str):
        super().__init__(
            message,
            status_code=409,
            details={"entity": entity, "current": current, "requested": requested},
        )

class AssignmentConflictError(AppError):
    """Raised when a coverage shift already has an active substitute assignment."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=409, details=details)

class StaleContactVersionError(AppError):
    """Raised when a substitute response was computed against an outdated contact."""
    def __init__(self, contact_id: str, expected: int, actual: int):
        super().__init__(
            "Substitute contact was modified by another request",
            status_code=409,
            details={"contact_id": contact_id, "expected_version": expected, "current_version": actual},
        )
