# taskflow/utils/errors.py
"""
Domain errors raised by services and dependencies.

Each error is an HTTPException carrying its own status code, so FastAPI
converts it at the handler boundary. main.py renders every one of them as
``{"message": detail}``.
"""

from typing import Dict, Optional

from fastapi import HTTPException, status


class AppError(HTTPException):
    code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Server error"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=self.code, detail=detail or self.default_detail, headers=headers)


class ValidationError(AppError):
    code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class InvalidCredentialsError(AppError):
    code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid credentials"


class UnauthorizedError(AppError):
    code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    code = status.HTTP_403_FORBIDDEN
    default_detail = "Not allowed"


class NotFoundError(AppError):
    code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictError(AppError):
    code = status.HTTP_409_CONFLICT
    default_detail = "Already exists"
