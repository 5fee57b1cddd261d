"""Configuration management for the wsbox CLI."""

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .core.exceptions import ConfigError

BUNDLED_DOCKERFILE = Path(__file__).parent / "docker" / "Dockerfile"


class WsboxSettings(BaseModel):
    """Runtime settings, resolved from ``WSBOX_*`` environment variables."""

    model_config = ConfigDict(frozen=True)

    engine: str = Field(default="docker", description="Container engine binary")
    image_prefix: str = Field(
        default="wsbox", description="Name prefix shared by all workspace images"
    )
    base_image: str = Field(
        default="wsbox-base", description="Shared base image, never cleaned up"
    )
    dockerfile: Path = Field(default=BUNDLED_DOCKERFILE)
    tool_manifest: str = Field(
        default=".tool-versions",
        description="Workspace-relative asdf tool manifest",
    )
    cleanup_days: int = Field(default=7, ge=0)
    image_state_file: str = ".wsbox-image"
    fingerprint_state_file: str = ".wsbox-fingerprint"

    @property
    def build_context(self) -> Path:
        """Directory handed to the engine as build context."""
        return self.dockerfile.parent


_ENV_FIELDS = {
    "WSBOX_ENGINE": "engine",
    "WSBOX_IMAGE_PREFIX": "image_prefix",
    "WSBOX_BASE_IMAGE": "base_image",
    "WSBOX_DOCKERFILE": "dockerfile",
    "WSBOX_TOOL_MANIFEST": "tool_manifest",
    "WSBOX_CLEANUP_DAYS": "cleanup_days",
}


def get_settings() -> WsboxSettings:
    """Build settings from the current environment."""
    overrides = {
        field: os.environ[env_name]
        for env_name, field in _ENV_FIELDS.items()
        if os.environ.get(env_name)
    }
    try:
        return WsboxSettings(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid WSBOX_* environment settings: {e}") from e
