"""TickTick MCP Server Package.

TickTick Open API client, MCP tools, and a local OAuth helper.
"""

from ticktick_mcp.callback_server import CallbackResult, CallbackServer
from ticktick_mcp.client import TickTickClient
from ticktick_mcp.errors import (
    ApiError,
    AuthenticationError,
    AuthorizationDeniedError,
    AuthorizationError,
    AuthorizationTimeoutError,
    NetworkError,
    RateLimitError,
    TickTickError,
    describe_error,
)
from ticktick_mcp.http_connection import TickTickConnection
from ticktick_mcp.oauth_flow import OAuthFlow

__all__ = [
    "ApiError",
    "AuthenticationError",
    "AuthorizationDeniedError",
    "AuthorizationError",
    "AuthorizationTimeoutError",
    "CallbackResult",
    "CallbackServer",
    "NetworkError",
    "OAuthFlow",
    "RateLimitError",
    "TickTickClient",
    "TickTickConnection",
    "TickTickError",
    "describe_error",
]

__version__ = "0.1.0"
