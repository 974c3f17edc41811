from enum import Enum
from fastapi import HTTPException, status
from typing import Any, Dict, Optional

class AuthFailureReason(str, Enum):
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    CREDENTIALS = "credentials"

class NotFoundException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_404_NOT_FOUND
        self.detail = detail or "Not found"

class ForbiddenException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_403_FORBIDDEN
        self.detail = detail or "Forbidden"

class InactiveAdminException(ForbiddenException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(detail or "Admin is inactive", headers)

class BadRequestException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_400_BAD_REQUEST
        self.detail = detail or "Bad request"

class UnauthorizedException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_401_UNAUTHORIZED
        self.detail = detail or "Unauthorized"

class InvalidCredentialsException(UnauthorizedException):
    """Login/restore refusal. The detail never says why; `reason` is for logs and tests."""

    def __init__(self, reason: AuthFailureReason = AuthFailureReason.CREDENTIALS, headers: Optional[Dict[str, str]] = None):
        super().__init__("Invalid credentials or session", headers)
        self.reason = reason

class LoginSupersededException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_409_CONFLICT
        self.detail = detail or "Login superseded by a newer session transition"

class InternalServerException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        self.detail = detail or "Internal server error"

class ServiceUnavailableException(HTTPException):
    def __init__(self,detail: Any = None, headers: Optional[Dict[str, str]] = None):
        self.headers = headers
        self.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        self.detail = detail or "Service unavailable error"

def response_to_http_exception(status_code: int, details: Any):
    if status_code == status.HTTP_404_NOT_FOUND:
        return NotFoundException(detail=details)
    elif status_code == status.HTTP_403_FORBIDDEN:
        return ForbiddenException(detail=details)
    elif status_code == status.HTTP_400_BAD_REQUEST:
        return BadRequestException(detail=details)
    elif status_code == status.HTTP_401_UNAUTHORIZED:
        return UnauthorizedException(detail=details)
    elif status_code in (status.HTTP_502_BAD_GATEWAY, status.HTTP_503_SERVICE_UNAVAILABLE, status.HTTP_504_GATEWAY_TIMEOUT):
        return ServiceUnavailableException(detail=details)
    elif status_code >= 400:
        return InternalServerException(detail=details)
    else:
        return None
