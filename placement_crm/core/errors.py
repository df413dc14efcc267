"""
Domain errors.

Services raise these; only the HTTP boundary (placement_crm.main) turns them
into responses. Messages are user-visible and never carry secrets.
"""


class CRMError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(CRMError):
    """Missing or malformed input, including a field missing its companion."""
    status_code = 400


class ConflictError(CRMError):
    """A unique login identifier or business key is already taken."""
    status_code = 409

    @classmethod
    def duplicate(cls, label: str, value) -> "ConflictError":
        return cls(f"{label} '{value}' already exists")


class NotFoundError(CRMError):
    status_code = 404


class StorageError(CRMError):
    status_code = 500


class AuthError(CRMError):
    status_code = 401
