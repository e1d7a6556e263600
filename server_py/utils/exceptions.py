"""Custom exceptions for the application."""
from typing import Any, Optional
from fastapi import HTTPException, status


class StoryToTestException(Exception):
    """Base exception for StoryToTest application."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(self.message)


class ConfigurationError(StoryToTestException):
    """Required configuration is missing or malformed."""
    pass


class IndexingError(StoryToTestException):
    """Project configuration could not be read while indexing the codebase."""
    pass


class GenerationError(StoryToTestException):
    """The completion service call failed or returned an unusable response."""
    pass


class ExternalServiceError(StoryToTestException):
    """External service error exception."""
    pass


class GitHubAPIError(ExternalServiceError):
    """GitHub REST call returned a non-success status."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Any] = None):
        self.status_code = status_code
        super().__init__(message, details)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def already_exists(self) -> bool:
        if self.status_code not in (409, 422):
            return False
        # 422 is also returned for unrelated validation failures
        return self.status_code == 409 or "already exists" in self.message.lower()


def internal_error(detail: str = "Internal server error") -> HTTPException:
    """Create 500 internal server error exception."""
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail
    )
