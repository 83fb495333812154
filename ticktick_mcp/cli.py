import logging

import click
from dotenv import load_dotenv

from .config import get_settings
from .errors import TickTickError, describe_error
from .oauth_flow import DEFAULT_TIMEOUT, OAuthFlow
from .server import create_mcp_server

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    # stderr only: stdout carries the stdio transport
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT)

    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        uv_logger = logging.getLogger(logger_name)
        uv_logger.handlers = []
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        uv_logger.addHandler(handler)


@click.group()
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level",
)
def main(log_level: str) -> None:
    """TickTick MCP server and OAuth helper."""
    load_dotenv()
    configure_logging(log_level)


@main.command()
@click.option("--client-id", help="OAuth client ID. Defaults to TICKTICK_CLIENT_ID")
@click.option("--client-secret", help="OAuth client secret. Defaults to TICKTICK_CLIENT_SECRET")
@click.option("--port", type=int, help="Local callback port. Defaults to TICKTICK_OAUTH_PORT or 8585")
@click.option("--timeout", default=DEFAULT_TIMEOUT, show_default=True, help="Seconds to wait")
def auth(
    client_id: str | None,
    client_secret: str | None,
    port: int | None,
    timeout: int,
) -> None:
    """
    Obtain an access token through the browser authorization flow.

    Register http://localhost:PORT/callback as the redirect URI of your
    TickTick developer app before running this.
    """
    settings = get_settings()
    client_id = client_id or settings.client_id
    client_secret = client_secret or settings.client_secret
    if not client_id or not client_secret:
        raise click.UsageError(
            "Client credentials are required (--client-id/--client-secret or "
            "TICKTICK_CLIENT_ID/TICKTICK_CLIENT_SECRET)"
        )

    flow = OAuthFlow(client_id, client_secret, port=port or settings.oauth_port)
    try:
        token = flow.run(timeout=timeout)
    except TickTickError as e:
        logger.error(f"Authorization failed: {e}")
        raise click.ClickException(describe_error(e)) from e

    click.echo("Authorization complete. Set the token in your environment:", err=True)
    click.echo(f"export TICKTICK_ACCESS_TOKEN={token}")


@main.command()
@click.option(
    "--transport",
    default="stdio",
    type=click.Choice(["stdio", "streamable-http"]),
    show_default=True,
    help="MCP transport",
)
@click.option("--host", default="127.0.0.1", show_default=True, help="Host for HTTP transport")
@click.option("--port", default=8001, show_default=True, help="Port for HTTP transport")
def serve(transport: str, host: str, port: int) -> None:
    """Run the TickTick MCP server."""
    settings = get_settings()
    if not settings.access_token:
        logger.warning("TICKTICK_ACCESS_TOKEN is not set; tools will report authentication errors")

    mcp_server = create_mcp_server(
        settings.access_token, base_url=settings.api_base_url, host=host, port=port
    )

    if transport == "stdio":
        mcp_server.run()
        return

    import uvicorn

    logger.info(f"MCP server running on http://{host}:{port}/mcp")
    uvicorn.run(mcp_server.streamable_http_app(), host=host, port=port, log_level="info")


if __name__ == "__main__":
    main()
