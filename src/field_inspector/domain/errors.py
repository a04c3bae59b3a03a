"""Error taxonomy surfaced by services."""


class FieldInspectorError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class AuthFailureError(FieldInspectorError):
    status_code = 401


class MissingTokenError(AuthFailureError):
    def __init__(self, message: str = "Token required") -> None:
        super().__init__(message)


class InvalidTokenError(AuthFailureError):
    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class DuplicateUserError(FieldInspectorError):
    status_code = 400

    def __init__(self, email: str) -> None:
        super().__init__(f"User already registered: {email}")
        self.email = email


class InvalidCredentialsError(FieldInspectorError):
    status_code = 401

    def __init__(self, message: str = "Invalid login credentials") -> None:
        super().__init__(message)


class RecordNotFoundError(FieldInspectorError):
    status_code = 404

    def __init__(self, record_id: object) -> None:
        super().__init__("Record not found")
        self.record_id = record_id


class MalformedInputError(FieldInspectorError):
    status_code = 400


class PayloadTooLargeError(FieldInspectorError):
    status_code = 413


class BackendUnavailableError(FieldInspectorError):
    """Raised by adapters; absorbed by the owning service's fallback."""

    status_code = 503


class StorageConflictError(BackendUnavailableError):
    """The storage key is already taken."""

    status_code = 409


class RegistrationError(FieldInspectorError):
    status_code = 400


class SubmissionRejectedError(MalformedInputError):
    """Ingestion stopped on invalid input before any backend was called."""

    def __init__(self, message: str, states: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.states = states
