from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .http_connection import API_BASE
from .oauth_flow import DEFAULT_PORT


class TickTickSettings(BaseSettings):
    """
    Settings read from TICKTICK_* environment variables.

    Only the CLI reads these; everything below it receives tokens and
    credentials as arguments.
    """

    model_config = SettingsConfigDict(env_prefix="TICKTICK_", extra="ignore")

    access_token: str | None = None
    client_id: str | None = None
    client_secret: str | None = None
    oauth_port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    api_base_url: str = API_BASE


def get_settings() -> TickTickSettings:
    return TickTickSettings()
