"""
Service-layer errors.

Routes translate these into HTTP responses; services never import FastAPI.
"""


class ServiceError(Exception):
    """Base class for expected business-rule failures."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class PermissionDeniedError(ServiceError):
    status_code = 403


class InvalidStateError(ServiceError):
    status_code = 400


class AuthenticationError(ServiceError):
    status_code = 401


class ExternalServiceError(ServiceError):
    """An upstream API (M-Pesa, Gemini) failed or is not configured."""
    status_code = 503


class MpesaError(ExternalServiceError):
    status_code = 500


class GeminiError(ExternalServiceError):
    status_code = 503
