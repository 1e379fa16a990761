"""HTTP-facing application errors."""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class: an HTTPException with a fixed status code."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str | dict = "Internal error"):
        super().__init__(status_code=self.status_code, detail=detail)


class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST


class QuotaExceededError(AppError):
    status_code = status.HTTP_403_FORBIDDEN


class UpstreamOutputError(AppError):
    """A provider answered but the answer could not be used."""

    status_code = status.HTTP_502_BAD_GATEWAY


class ProviderUnavailableError(AppError):
    """No provider could serve the request right now."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
