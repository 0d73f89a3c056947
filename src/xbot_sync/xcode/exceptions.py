"""Xcode Server client exceptions."""


class XcodeServerError(Exception):
    """Base exception for Xcode Server client errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class XcodeAuthenticationError(XcodeServerError):
    """Raised when the server rejects the credentials (401/403)."""

    pass


class XcodeNotFoundError(XcodeServerError):
    """Raised when a bot or integration does not exist (404)."""

    pass
