"""YAML configuration for dit runs."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from dit_core.errors import ConfigError
from dit_core.fsutil import strip_trailing_slash

yaml = YAML(typ="safe")

CONFIG_ENV = "DIT_CONFIG"
DEFAULT_WORKERS = 4


class DitConfig(BaseModel):
    """Roots and options for one run (e.g. in dit.yaml)."""

    # Accept both alias keys (e.g., "trust-destinations") and field names
    model_config = ConfigDict(populate_by_name=True)

    read: list[Path] = Field(default_factory=list, description="Read roots, in priority order")
    write: list[Path] = Field(default_factory=list, description="Write roots")
    workers: int = Field(default=DEFAULT_WORKERS, ge=1, description="Worker threads")
    trust_destinations: bool = Field(
        default=False,
        alias="trust-destinations",
        description="Skip hashing when every read and write copy already has the same size",
    )
    preserve_times: bool = Field(
        default=True, alias="preserve-times", description="Copy atime/mtime onto written files"
    )

    @field_validator("read", "write", mode="before")
    @classmethod
    def _normalize_paths(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (str, Path)):
            value = [value]
        return [Path(strip_trailing_slash(os.path.expanduser(str(v)))) for v in value]

    def merged(
        self,
        *,
        read: list[Path] | None = None,
        write: list[Path] | None = None,
        workers: int | None = None,
        trust_destinations: bool | None = None,
        preserve_times: bool | None = None,
    ) -> "DitConfig":
        """Return a copy with command-line values taking precedence over the file."""
        data = self.model_dump()
        if read:
            data["read"] = read
        if write:
            data["write"] = write
        if workers is not None:
            data["workers"] = workers
        if trust_destinations is not None:
            data["trust_destinations"] = trust_destinations
        if preserve_times is not None:
            data["preserve_times"] = preserve_times
        try:
            return DitConfig(**data)
        except ValidationError as e:
            raise ConfigError(str(e)) from e


def load_config(path: Path | None) -> DitConfig:
    """
    Load a DitConfig from a YAML file. ``None`` gives the defaults.

    Raises:
        ConfigError: if the file is missing, is not valid YAML, or fails validation.
    """
    if path is None:
        return DitConfig()
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.load(f) or {}
    except YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file must contain a mapping: {path}")
    try:
        return DitConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"invalid config in {path}: {e}") from e
