class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class ScheduleValidationError(AppError):
    """Raised when a schedule draft or blackout violates its own invariants.

    Every violation found is listed under ``details["errors"]`` so a form can
    highlight all offending fields at once.
    """
    def __init__(self, errors: list[str] | str):
        if isinstance(errors, str):
            errors = [errors]
        super().__init__("; ".join(errors), status_code=422, details={"errors": list(errors)})
        self.errors = list(errors)

class DataAccessError(AppError):
    """Raised when conflict data could not be loaded from storage.

    Callers must treat this as "unknown", never as "no conflicts".
    """
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=503, details=details)

class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""
    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404)

class ConfigurationError(AppError):
    """Raised when system configuration is invalid."""
    def __init__(self, message: str):
        super().__init__(message, status_code=500)

class ScheduleConflictError(AppError):
    """Raised by write paths when a blocking (severity 3) conflict exists."""
    def __init__(self, message: str, conflicts: list[dict]):
        super().__init__(message, status_code=409, details={"conflicts": conflicts})
