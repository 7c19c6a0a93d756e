"""Custom exception hierarchy for docward."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Identity & access
    UNAUTHENTICATED = "UNAUTHENTICATED"
    FORBIDDEN = "FORBIDDEN"
    SHARE_LINK_UNAVAILABLE = "SHARE_LINK_UNAVAILABLE"

    # Missing entities
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    SHARE_LINK_NOT_FOUND = "SHARE_LINK_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Rate limiting (reserved vocabulary; enforced by the request middleware only)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Upstream / infrastructure
    COLLABORATION_SERVICE_ERROR = "COLLABORATION_SERVICE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class DocwardException(Exception):
    """
    Base exception for all docward errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            ``{"error": {"code", "message", "details"}}``
        """
        return {
            "error": {
                "code": self.error_code.value,
                "message": self.message,
                "details": self.details,
            }
        }


class AuthenticationError(DocwardException):
    """Request carries no resolvable principal."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message,
            ErrorCode.UNAUTHENTICATED,
            status_code=401,
        )


class ForbiddenError(DocwardException):
    """Principal is known but its capability is insufficient."""

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message,
            ErrorCode.FORBIDDEN,
            status_code=403,
            details=details,
        )


class ShareLinkUnavailableError(ForbiddenError):
    """The presented share link has expired or was deleted."""

    def __init__(self, document_id: str):
        super().__init__(
            "This share link has expired or been deleted",
            details={"document_id": document_id},
        )
        self.error_code = ErrorCode.SHARE_LINK_UNAVAILABLE


class DocumentNotFoundError(DocwardException):
    """Document not found in database."""

    def __init__(self, document_id: str):
        super().__init__(
            f"Document not found: {document_id}",
            ErrorCode.DOCUMENT_NOT_FOUND,
            status_code=404,
            details={"document_id": document_id}
        )


class VersionNotFoundError(DocwardException):
    """Version not found in database."""

    def __init__(self, version_id: str):
        super().__init__(
            f"Version not found: {version_id}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"version_id": version_id}
        )


class FolderNotFoundError(DocwardException):
    """Folder not found in database."""

    def __init__(self, folder_id: str):
        super().__init__(
            f"Folder not found: {folder_id}",
            ErrorCode.FOLDER_NOT_FOUND,
            status_code=404,
            details={"folder_id": folder_id}
        )


class ShareLinkNotFoundError(DocwardException):
    """Share link is missing or expired. The two cases are deliberately indistinguishable."""

    def __init__(self, message: str = "Share link not found"):
        super().__init__(
            message,
            ErrorCode.SHARE_LINK_NOT_FOUND,
            status_code=404,
        )


class ValidationError(DocwardException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class RateLimitExceededError(DocwardException):
    """Client exceeded its request budget."""

    def __init__(self, retry_after: float):
        super().__init__(
            "Too many requests",
            ErrorCode.RATE_LIMIT_EXCEEDED,
            status_code=429,
            details={"retry_after": round(retry_after, 1)},
        )


class CollaborationServiceError(DocwardException):
    """The real-time collaboration service could not issue a session."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.COLLABORATION_SERVICE_ERROR,
            status_code=500,
            details=details
        )


class DatabaseError(DocwardException):
    """Database operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.DATABASE_ERROR,
            status_code=500,
            details=details
        )
