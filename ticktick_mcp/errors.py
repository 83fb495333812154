"""Error types shared by the TickTick API client and the OAuth flow."""

RATE_LIMIT_MESSAGE = (
    "TickTick API rate limit reached (max 100 requests/min). Please retry after 1 minute."
)


class TickTickError(Exception):
    """Base class for every error raised by this package."""


class AuthenticationError(TickTickError):
    """No usable access token was supplied."""


class NetworkError(TickTickError):
    """The HTTP request never produced a response (DNS, refused connection, ...)."""


class ApiError(TickTickError):
    """TickTick responded with a non-success status."""

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}: {body}")


class RateLimitError(ApiError):
    """TickTick signaled throttling inside an error body."""


class AuthorizationError(TickTickError):
    """The OAuth authorization-code handshake failed."""


class AuthorizationTimeoutError(AuthorizationError):
    """No callback arrived before the deadline."""


class AuthorizationDeniedError(AuthorizationError):
    """The user or provider rejected the consent request."""


def describe_error(error: Exception) -> str:
    """Render an error as a short message for tool output and the CLI.

    Rate limiting is checked before the generic API error because it is a
    subclass of it.
    """
    if isinstance(error, RateLimitError):
        return RATE_LIMIT_MESSAGE
    if isinstance(error, ApiError):
        return f"API error (HTTP {error.status}): {error.body}"
    if isinstance(error, NetworkError):
        return f"Network error: {error}"
    if isinstance(error, (AuthenticationError, AuthorizationError)):
        return str(error)
    return f"API request error: {error}"
