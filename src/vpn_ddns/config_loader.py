"""Load and validate the vpn-ddns configuration document."""

from __future__ import annotations

import json
import os
from pathlib import Path

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .models import ConfigurationError


class KeySpec(BaseModel):
    """Schema for inline TSIG credentials (or overrides for key_file)."""

    name: str | None = None
    algorithm: str | None = None
    secret: str | None = None


class ConfigSpec(BaseModel):
    """Schema for the configuration document."""

    model_config = ConfigDict(extra="forbid")

    name_server: str = Field(min_length=1)
    name_server_port: int | None = Field(default=None, gt=0, lt=65536)
    key: KeySpec | None = None
    key_file: str | None = None
    zones: list[str] = Field(default_factory=list)
    private_zones: list[str] = Field(default_factory=list)
    public_zones: list[str] = Field(default_factory=list)
    search_domain: str | None = None
    public_search_domain: str | None = None
    reverse_zones: list[str] = Field(default_factory=list)
    updater_path: str = "nsupdate"
    updater_args: list[str] = Field(default_factory=list)
    updater_timeout: float = Field(default=10.0, gt=0)
    ttl: int = Field(default=3600, ge=0)
    batch_all_zones: bool = False
    server_name: str | None = None
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _uppercase_level(cls, value: str) -> str:
        """Normalise the log level name."""
        return value.upper()

    @model_validator(mode="after")
    def _single_private_shape(self) -> "ConfigSpec":
        """Reject mixing the single-list and split zone shapes."""
        if self.zones and self.private_zones:
            raise ValueError("Use either 'zones' or 'private_zones', not both.")
        return self

    def effective_private_zones(self) -> list[str]:
        """Return the private realm zones whichever shape was used."""
        return self.private_zones or self.zones


def _render_document(path: Path) -> str:
    """Render the configuration file through Jinja2 with the environment as 'env'."""
    env = Environment(
        loader=FileSystemLoader(str(path.parent)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    template = env.get_template(path.name)
    return template.render(env=os.environ)


def load_config_spec(path: Path) -> ConfigSpec:
    """Read, render and validate a configuration file."""
    if not path.is_file():
        raise ConfigurationError(f"Configuration file {path} does not exist.")
    try:
        rendered = _render_document(path)
    except TemplateError as exc:
        raise ConfigurationError(f"Failed to render {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data = json.loads(rendered) if rendered.strip() else {}
        else:
            data = yaml.safe_load(rendered) or {}
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Failed to parse {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping at the top level.")

    try:
        return ConfigSpec(**data)
    except ValidationError as exc:
        raise ConfigurationError(f"Configuration validation error: {exc}") from exc
