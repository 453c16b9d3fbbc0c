"""Settings loaded from keyword arguments, environment, an optional JSON file and defaults."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

logger = logging.getLogger(__name__)


def flatten_json_config(config: dict[str, Any]) -> dict[str, Any]:
    """Merge nested sections into one flat mapping.

    Sections only group keys for humans, so
    {"render": {"wide_render_cap": 250}} reads as {"wide_render_cap": 250}.
    Keys with a leading underscore ("_comment", "_note") are ignored at any depth.
    """
    flat: dict[str, Any] = {}
    for key, value in config.items():
        if key.startswith("_"):
            continue
        if isinstance(value, dict):
            flat.update(flatten_json_config(value))
        else:
            flat[key] = value
    return flat


def load_json_config(config_file: Optional[str] = None) -> dict[str, Any]:
    """Read the JSON config named by config_file or $CONFIG_FILE.

    Returns an empty mapping when no file is configured or it cannot be used.
    """
    location = config_file or os.getenv("CONFIG_FILE")
    if not location:
        return {}

    path = Path(location)
    if not path.is_file():
        logger.warning(f"[Config] No config file at {location}")
        return {}

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error(f"[Config] Ignoring unreadable config file {location}: {e}")
        return {}

    if not isinstance(raw, dict):
        logger.error(f"[Config] Ignoring {location}: top level must be a JSON object")
        return {}

    logger.info(f"[Config] Loaded {location}")
    return flatten_json_config(raw)


class JsonConfigSource(PydanticBaseSettingsSource):
    """Settings source backed by the flattened JSON config file."""

    def __init__(self, settings_cls: type[BaseSettings]):
        super().__init__(settings_cls)
        self._values: dict[str, Any] = {}

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return self._values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        self._values = {
            key: value
            for key, value in load_json_config().items()
            if key in self.settings_cls.model_fields
        }
        return dict(self._values)


class Settings(BaseSettings):
    """Application configuration.

    Precedence, highest first: keyword arguments, environment variables,
    .env file, JSON config file ($CONFIG_FILE), field defaults.
    """

    # Nearby API
    nearby_api_base_url: str = "https://whatyoudink.com"
    nearby_api_path: str = "/api/v1/locations/nearby.php"
    nearby_api_timeout_seconds: float = 10.0

    # Search radius (miles)
    default_radius_miles: float = 25.0
    min_radius_miles: float = 5.0
    max_radius_miles: float = 200.0
    radius_step_miles: float = 5.0

    # Location provider
    location_timeout_seconds: float = 8.0

    # Map rendering
    # A viewport spanning more than this many degrees renders fewer pins
    zoomed_out_delta_threshold: float = 3.0
    wide_render_cap: int = 250
    close_render_cap: int = 500
    default_render_cap: int = 250  # No viewport known yet
    recenter_on_fetch: bool = False

    # Initial map region (continental US) and "near me" span
    default_latitude: float = 39.8283
    default_longitude: float = -98.5795
    default_region_delta: float = 18.0
    near_me_delta: float = 0.25

    # Server
    server_port: int = 8080
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            JsonConfigSource(settings_cls),
            file_secret_settings,
        )

    @property
    def nearby_api_url(self) -> str:
        """Full URL of the nearby endpoint."""
        path = self.nearby_api_path if self.nearby_api_path.startswith("/") else f"/{self.nearby_api_path}"
        return f"{self.nearby_api_base_url.rstrip('/')}{path}"
