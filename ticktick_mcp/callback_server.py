"""
Local OAuth redirect listener.

A one-shot HTTP endpoint at ``/callback`` that captures the provider's
redirect (either an authorization code or an error) and hands it to the
thread waiting in ``wait_for_result``. The server is a small Starlette app
served by uvicorn in a background thread.
"""

import logging
import threading
import time
from dataclasses import dataclass

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse
from starlette.routing import Route
from uvicorn import Config, Server

from .errors import AuthorizationError

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/callback"
UNKNOWN_ERROR = "unknown_error"

POLL_INTERVAL = 0.1
STARTUP_TIMEOUT = 5.0
SHUTDOWN_GRACE_PERIOD = 5.0

SUCCESS_HTML = """<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>TickTick Authorization</title></head>
  <body>
    <h1>Authorization successful!</h1>
    <p>You can close this browser tab and return to the terminal.</p>
  </body>
</html>
"""

ERROR_HTML = """<!DOCTYPE html>
<html>
  <head><meta charset="utf-8"><title>TickTick Authorization</title></head>
  <body>
    <h1>Authorization failed</h1>
    <p>Access was denied. Please try again.</p>
  </body>
</html>
"""


@dataclass(frozen=True)
class CallbackResult:
    """Either ``code``/``state`` (consent given) or ``error`` (denied)."""

    code: str | None = None
    state: str | None = None
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None


class ResultSlot:
    """Single-assignment cell shared by the request handler and the waiter.

    The first ``offer`` wins; later offers are rejected. ``wait`` sees a value
    offered at any point before its deadline, whether it was offered before
    or during the wait.
    """

    def __init__(self) -> None:
        self._condition = threading.Condition()
        self._result: CallbackResult | None = None

    def offer(self, result: CallbackResult) -> bool:
        with self._condition:
            if self._result is not None:
                return False
            self._result = result
            self._condition.notify_all()
            return True

    def wait(self, timeout: float, poll_interval: float = POLL_INTERVAL) -> CallbackResult | None:
        deadline = time.monotonic() + timeout
        with self._condition:
            while self._result is None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                self._condition.wait(min(remaining, poll_interval))
            return self._result


class CallbackServer:
    def __init__(self, port: int, host: str = "127.0.0.1"):
        self.port = port
        self.host = host
        self.slot = ResultSlot()
        self._server: Server | None = None
        self._thread: threading.Thread | None = None

    def build_app(self) -> Starlette:
        return Starlette(
            routes=[Route(CALLBACK_PATH, endpoint=self._handle_callback, methods=["GET"])]
        )

    async def _handle_callback(self, request: Request) -> HTMLResponse:
        code = request.query_params.get("code")

        if code is not None:
            result = CallbackResult(code=code, state=request.query_params.get("state"))
            page = SUCCESS_HTML
        else:
            result = CallbackResult(error=request.query_params.get("error", UNKNOWN_ERROR))
            page = ERROR_HTML

        if self.slot.offer(result):
            logger.info(f"Authorization callback received ({'error' if result.is_error else 'code'})")
        else:
            logger.warning("Ignoring additional authorization callback; a result was already captured")

        return HTMLResponse(page, status_code=200)

    def start(self) -> None:
        """Bind the listener; returns once the socket accepts connections."""
        config = Config(
            self.build_app(),
            host=self.host,
            port=self.port,
            log_config=None,
            log_level="warning",
            access_log=False,
            lifespan="off",
        )
        self._server = Server(config)
        self._thread = threading.Thread(
            target=self._server.run, name=f"oauth-callback-{self.port}", daemon=True
        )
        self._thread.start()

        deadline = time.monotonic() + STARTUP_TIMEOUT
        while not self._server.started:
            # uvicorn exits the thread when the port cannot be bound
            if not self._thread.is_alive() or time.monotonic() >= deadline:
                self.shutdown()
                raise AuthorizationError(
                    f"Could not start the callback server on {self.host}:{self.port}"
                )
            time.sleep(0.05)

        logger.debug(f"Callback server listening on http://{self.host}:{self.port}{CALLBACK_PATH}")

    def wait_for_result(self, timeout: float) -> CallbackResult | None:
        """Block until a callback arrives; ``None`` if ``timeout`` seconds pass first."""
        return self.slot.wait(timeout)

    def shutdown(self) -> None:
        if self._server is not None:
            self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(SHUTDOWN_GRACE_PERIOD)
            if self._thread.is_alive():
                logger.warning("Callback server did not stop within the grace period")
        self._server = None
        self._thread = None

    def wait_for_code(self, timeout: float) -> CallbackResult | None:
        """Start, wait for one callback, and always shut down."""
        self.start()
        try:
            return self.wait_for_result(timeout)
        finally:
            self.shutdown()
