"""
Base model for settings persisted in a .yaml file or provided through the
environment.
"""

import os
from pathlib import Path
from typing import Any, ClassVar, Self

import dotenv
import yaml
from pydantic import BaseModel

__all__ = [
    "BaseSettingsModel",
]


class BaseSettingsModel(BaseModel):
    """
    Pydantic model populated from a .yaml file or from environment variables
    named `{env_prefix}{FIELD}`.
    """

    env_prefix: ClassVar[str] = ""
    """
    Prefix of environment variables, e.g. `EPIC_PARTY_`.
    """

    @classmethod
    def load_yaml(cls, file: Path) -> Self:
        """
        Load settings from .yaml file.

        :raises FileNotFoundError: File doesn't exist
        :raises ValueError: File doesn't contain a mapping
        """
        if not file.is_file():
            raise FileNotFoundError(f"file does not exist: '{file}'")

        with file.open() as fh:
            settings = yaml.safe_load(fh)

        if not isinstance(settings, dict):
            raise ValueError(f"Invalid yaml contents: {settings}")

        return cls(**settings)

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> Self:
        """
        Load settings from environment variables, after loading a `.env`
        file if present. Variables already set take precedence over the
        file.
        """
        dotenv.load_dotenv(env_file)

        fields: dict[str, Any] = {}
        for name in cls.model_fields:
            value = os.environ.get(f"{cls.env_prefix}{name.upper()}")
            if value is not None:
                fields[name] = value

        return cls(**fields)

    def dump_yaml(self, file: Path):
        """
        Dump settings to .yaml file, leaving out unset values.
        """
        settings = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        file.write_text(
            yaml.safe_dump(settings, default_flow_style=False, sort_keys=False)
        )
