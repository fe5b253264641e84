"""Error types raised by the service layer.

Routers never translate these by hand: ``backend.py`` registers a handler
that turns any ``ServiceError`` into a JSON response with its status code.
"""

from fastapi import status


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class AuthorizationError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
