"""Lobby scout configuration via environment variables."""

from pydantic import Field
from pydantic_settings import BaseSettings

from scout.discovery.diff import DiffPolicy
from scout.discovery.filters import BASE_VERSION_CHECKSUM

HOI4_APP_ID = 394360


class ScoutSettings(BaseSettings):
    model_config = {"env_prefix": "SCOUT_"}

    steam_app_id: int = Field(default=HOI4_APP_ID, ge=1)
    steam_api_library: str | None = None  # path to the Steamworks redistributable
    callback_interval_seconds: float = Field(default=0.1, gt=0)
    request_timeout_seconds: float = Field(default=10.0, gt=0)
    base_version_checksum: str = Field(default=BASE_VERSION_CHECKSUM, min_length=1)
    max_name_length: int = Field(default=50, ge=4)
    diff_policy: DiffPolicy = DiffPolicy.LITERAL
    log_dir: str | None = None
