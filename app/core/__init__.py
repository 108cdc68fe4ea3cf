"""
Core module exports.
"""
from .enums import (
    PlatformName,
    ListingStatus,
    ResponseStatus,
    PublishFailureReason,
)

from .exceptions import (
    BaseServiceError,
    PlatformServiceError,
    PlatformAPIError,
    GoogleAuthError,
    CredentialError,
    CredentialNotFoundError,
    CredentialExpiredError,
    AmbiguousCredentialError,
    UnsupportedPlatformError,
    ResponsePublishError,
    InvalidResponseStateError,
)

from .utils import (
    upsert,
    parse_timestamp,
    best_effort_id,
)
