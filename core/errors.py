# core/errors.py
"""
Failure kinds raised by the services and route handlers.

Every error is an ``HTTPException`` so FastAPI renders it directly; the class
carries its own status code and a default message.
"""
from typing import Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "An unexpected error occurred."

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )


# ------------------------
# 401 / 403
# ------------------------
class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class InvalidToken(Unauthenticated):
    default_detail = "Invalid or expired token."


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Invalid permissions."


# ------------------------
# 404
# ------------------------
class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ProjectNotFound(NotFound):
    default_detail = "Project not found."


class UserNotFound(NotFound):
    default_detail = "User not found"


class FeatureNotFound(NotFound):
    default_detail = "Feature not found in the specified project"


class TicketNotFound(NotFound):
    default_detail = "Ticket not found"


class MemberNotFound(NotFound):
    default_detail = "Project member not found."


class TokenNotFound(NotFound):
    default_detail = "Token not found"


class UserNotAMember(NotFound):
    default_detail = "User is not a member of this project"


# ------------------------
# 400 / 409
# ------------------------
class InvalidInput(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class TokenExpired(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Token has expired"


class Conflict(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict"


class AlreadyAssigned(Conflict):
    default_detail = "User is already assigned to this ticket"


# ------------------------
# 500
# ------------------------
class Unexpected(AppError):
    pass
