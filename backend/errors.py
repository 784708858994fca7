from fastapi import status


class AppError(Exception):
    """Base error rendered by the uniform error formatter."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, detail: str | None = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class RateLimited(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "Too many requests, please try again later"


class UpstreamFault(AppError):
    default_message = "Upstream service failed"


class DatastoreError(UpstreamFault):
    default_message = "Datastore operation failed"


class DuplicateRecordError(DatastoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Record already exists"


class ObjectStoreError(UpstreamFault):
    default_message = "Object store operation failed"


class ClearFailure(AppError):
    default_message = "Failed to clear existing rules before upload"


class SigningFault(AppError):
    default_message = "Upload signing is not configured"


class ConfigurationError(AppError):
    default_message = "Service is not configured"
