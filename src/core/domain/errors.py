"""Error taxonomy and stable error codes.

Purpose:
- predictable codes for logs and the JSON run report
- one exception style across the project

Fatal errors abort the run before a summary is produced. `DeletionError` is
the only recoverable one: it is contained per item by the deletion executor.
"""

from __future__ import annotations

from dataclasses import dataclass


class ErrCode:
    CONFIGURATION = "configuration"

    # Remote service
    AUTHENTICATION = "authentication"
    USER_NOT_FOUND = "user_not_found"
    REMOTE_QUERY = "remote_query"
    DELETION = "deletion"

    # Data contract
    UNSUPPORTED_KIND = "unsupported_kind"


@dataclass(eq=False)
class CleanerError(Exception):
    """
    Base application error.
    - code: stable error code
    - message: safe message (no secrets)
    - details: extra data for logs
    """

    code: str
    message: str
    details: dict | None = None

    def __str__(self) -> str:
        return self.message


class ConfigurationError(CleanerError):
    def __init__(self, message: str = "Invalid configuration", details: dict | None = None) -> None:
        super().__init__(ErrCode.CONFIGURATION, message, details)


class AuthenticationError(CleanerError):
    def __init__(self, message: str = "Authentication failed", details: dict | None = None) -> None:
        super().__init__(ErrCode.AUTHENTICATION, message, details)


class UserNotFoundError(CleanerError):
    def __init__(self, message: str = "User not found", details: dict | None = None) -> None:
        super().__init__(ErrCode.USER_NOT_FOUND, message, details)


class RemoteQueryError(CleanerError):
    def __init__(self, message: str = "Watched items query failed", details: dict | None = None) -> None:
        super().__init__(ErrCode.REMOTE_QUERY, message, details)


class UnsupportedKindError(CleanerError):
    def __init__(self, kind: str, details: dict | None = None) -> None:
        super().__init__(ErrCode.UNSUPPORTED_KIND, f"Unsupported item type: {kind}", details)
        self.kind = kind


class DeletionError(CleanerError):
    def __init__(self, message: str = "Delete failed", details: dict | None = None) -> None:
        super().__init__(ErrCode.DELETION, message, details)
