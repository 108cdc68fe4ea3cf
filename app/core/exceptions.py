from typing import Optional


class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass


class PlatformServiceError(BaseServiceError):
    """Base exception for platform service errors."""
    pass


class PlatformAPIError(PlatformServiceError):
    """Raised when a remote platform API call fails (non-2xx, network, timeout)."""

    def __init__(self, message: str, status_code: Optional[int] = None, platform: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.platform = platform


class GoogleAuthError(PlatformAPIError):
    """Raised when a Google OAuth token refresh fails."""
    pass


class CredentialError(PlatformServiceError):
    """Base exception for credential resolution failures."""

    def __init__(self, message: str, platform: Optional[str] = None):
        super().__init__(message)
        self.platform = platform


class CredentialNotFoundError(CredentialError):
    """Raised when no active credential applies to a location/platform."""
    pass


class CredentialExpiredError(CredentialError):
    """Raised when the applicable credential is past its expiry."""
    pass


class AmbiguousCredentialError(CredentialError):
    """Raised when several credentials could apply and strict binding is on."""
    pass


class UnsupportedPlatformError(PlatformServiceError):
    """Raised when no adapter is registered for a platform."""
    pass


class ResponsePublishError(PlatformServiceError):
    """Raised when a review response could not be published to its platform."""

    def __init__(self, platform: str, reason, message: Optional[str] = None):
        self.platform = platform
        self.reason = reason
        reason_value = getattr(reason, "value", reason)
        super().__init__(message or f"Failed to publish response to {platform}: {reason_value}")


class InvalidResponseStateError(BaseServiceError):
    """Raised when a review response transition is not allowed from its current state."""
    pass
