from typing import Optional


class DebridError(Exception):
    """Base class for all errors raised by the debrid clients."""


class ConfigurationError(DebridError, ValueError):
    pass


# --- Provider reported errors ---

class ProviderStatusError(DebridError):
    """
    Non-2xx HTTP response from a provider.
    Subclasses are the statuses a provider documents; anything else
    is raised as HTTPStatusError.
    """
    message = "bad HTTP response status"

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"{self.message} ({status_code})")


class BadRequestError(ProviderStatusError):
    message = "bad request"


class BadTokenError(ProviderStatusError):
    """Expired or invalid API key / token."""
    message = "bad token"


class PermissionDeniedError(ProviderStatusError):
    """Account locked or not premium."""
    message = "permission denied"


class InvalidIDError(ProviderStatusError):
    """Unknown resource or invalid file id(s)."""
    message = "invalid ID"


class TooManyRequestsError(ProviderStatusError):
    message = "too many requests"


class ServerError(ProviderStatusError):
    message = "server error"


class ServiceUnavailableError(ProviderStatusError):
    message = "service unavailable"


class HTTPStatusError(ProviderStatusError):
    pass


class ProviderError(DebridError):
    """Error embedded in an otherwise successful (2xx) response body."""

    def __init__(self, provider: str, message: str, code: Optional[str] = None):
        self.provider = provider
        self.code = code
        self.message = message
        detail = f"{code}: {message}" if code else message
        super().__init__(f"got error response from {provider}: {detail}")


# --- Workflow errors ---

class TorrentStatusError(DebridError):
    """The torrent reached a permanent failure status."""

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"bad torrent status: {status}")


class WaitTimeoutError(DebridError):
    """The torrent didn't become ready within the wait budget."""

    def __init__(self, status: str, waited: float):
        self.status = status
        self.waited = waited
        super().__init__(f"torrent still {status} after waiting for {waited:g} seconds")


class NoSelectableFileError(DebridError):
    pass
