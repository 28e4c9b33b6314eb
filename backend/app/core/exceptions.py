"""Custom exception classes"""

from typing import Any, Optional


GENERIC_SIGN_IN_MESSAGE = "Failed to sign in with GitHub. Please try again."
ACCOUNT_EXISTS_MESSAGE = (
    "An account already exists with this email. "
    "Please sign in with your existing account."
)
NOT_REGISTERED_RECRUITER_MESSAGE = "User is not registered as a recruiter"
MISSING_UID_MESSAGE = "User ID not found. Please try logging in again."


class FounderBridgeException(Exception):
    """Base exception for FounderBridge"""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(FounderBridgeException):
    """Exception for validation errors"""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message, status_code=400, details=details)


class AuthenticationException(FounderBridgeException):
    """Exception for authentication errors

    ``code`` carries the provider error code when one is known.
    """

    def __init__(
        self,
        message: str = GENERIC_SIGN_IN_MESSAGE,
        code: Optional[str] = None
    ):
        self.code = code
        super().__init__(message, status_code=401, details={"code": code} if code else None)


class AccountExistsWithDifferentCredentialException(AuthenticationException):
    """The provider email is already linked to another identity"""

    CODE = "auth/account-exists-with-different-credential"

    def __init__(self, email: Optional[str] = None):
        self.email = email
        super().__init__(ACCOUNT_EXISTS_MESSAGE, code=self.CODE)


class AuthorizationException(FounderBridgeException):
    """Exception for authorization errors"""

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


class NotRegisteredException(AuthorizationException):
    """Caller has no profile in the collection an operation requires"""

    def __init__(self, message: str = NOT_REGISTERED_RECRUITER_MESSAGE):
        super().__init__(message)


class MissingContextException(FounderBridgeException):
    """Exception for a required identifier missing from navigation state"""

    def __init__(self, message: str = MISSING_UID_MESSAGE):
        super().__init__(message, status_code=400)


class NotFoundException(FounderBridgeException):
    """Exception for resource not found errors"""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)


class ExternalServiceException(FounderBridgeException):
    """Exception for external service errors"""

    def __init__(self, service: str, message: str):
        self.service = service
        full_message = f"External service error ({service}): {message}"
        super().__init__(full_message, status_code=502)
