# This project was developed with assistance from AI tools.
"""Service-layer error hierarchy.

Every error carries an ``ErrorCode``; the code decides the HTTP status and
the localized message shown to end users. The descriptive ``message`` is what
operators and reviewers see (it names the exact unmet requirement).
"""

import enum


class ErrorCode(str, enum.Enum):
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DATABASE_ERROR = "DATABASE_ERROR"
    DATABASE_CONSTRAINT_ERROR = "DATABASE_CONSTRAINT_ERROR"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    ALREADY_COMPLETE = "ALREADY_COMPLETE"
    POLICY_INVALID_STATE = "POLICY_INVALID_STATE"
    PAYMENT_FAILED = "PAYMENT_FAILED"


HTTP_STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.VALIDATION_ERROR: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.ALREADY_EXISTS: 409,
    ErrorCode.PERMISSION_DENIED: 403,
    ErrorCode.DATABASE_ERROR: 500,
    ErrorCode.DATABASE_CONSTRAINT_ERROR: 409,
    ErrorCode.INVALID_TOKEN: 401,
    ErrorCode.TOKEN_EXPIRED: 401,
    ErrorCode.ALREADY_COMPLETE: 409,
    ErrorCode.POLICY_INVALID_STATE: 409,
    ErrorCode.PAYMENT_FAILED: 402,
}

USER_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.INTERNAL_ERROR: "Ocurrió un error inesperado. Por favor intenta de nuevo.",
    ErrorCode.VALIDATION_ERROR: "La información proporcionada no es válida.",
    ErrorCode.NOT_FOUND: "El recurso solicitado no existe.",
    ErrorCode.ALREADY_EXISTS: "El registro ya existe.",
    ErrorCode.PERMISSION_DENIED: "No tienes permiso para realizar esta acción.",
    ErrorCode.DATABASE_ERROR: "Error al guardar la información. Por favor intenta de nuevo.",
    ErrorCode.DATABASE_CONSTRAINT_ERROR: "La operación entra en conflicto con datos existentes.",
    ErrorCode.INVALID_TOKEN: "El enlace no es válido.",
    ErrorCode.TOKEN_EXPIRED: "El enlace ha expirado. Solicita uno nuevo.",
    ErrorCode.ALREADY_COMPLETE: "La información ya fue completada y está en proceso de revisión.",
    ErrorCode.POLICY_INVALID_STATE: "La póliza no permite esta operación en su estado actual.",
    ErrorCode.PAYMENT_FAILED: "No se pudo procesar el pago.",
}


class ServiceError(Exception):
    """Base error for domain/application exceptions."""

    default_code = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | None = None,
        context: dict | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.context = context or {}

    @property
    def status_code(self) -> int:
        return HTTP_STATUS_BY_CODE.get(self.code, 500)

    @property
    def user_message(self) -> str:
        return USER_MESSAGES.get(self.code, USER_MESSAGES[ErrorCode.INTERNAL_ERROR])

    def __repr__(self):
        return f"<{type(self).__name__}(code={self.code.value}, message={self.message!r})>"


class NotFoundError(ServiceError):
    """Raised when an entity does not exist."""

    default_code = ErrorCode.NOT_FOUND


class ValidationError(ServiceError):
    """Raised for domain-level validation beyond schema validation.

    ``details`` holds one human-readable entry per problem (e.g. each missing
    field) so callers can render them individually.
    """

    default_code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, *, details: list[str] | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.details = details or []


class InvalidTransitionError(ServiceError):
    """Raised when a policy status change is not allowed or its precondition fails."""

    default_code = ErrorCode.POLICY_INVALID_STATE


class PermissionDeniedError(ServiceError):
    default_code = ErrorCode.PERMISSION_DENIED


class TokenError(ServiceError):
    """Raised for invalid or expired actor access tokens."""

    default_code = ErrorCode.INVALID_TOKEN


class AlreadyCompleteError(ServiceError):
    default_code = ErrorCode.ALREADY_COMPLETE


class DatabaseError(ServiceError):
    """Wraps a driver/ORM failure; the original is kept as ``__cause__``."""

    default_code = ErrorCode.DATABASE_ERROR
