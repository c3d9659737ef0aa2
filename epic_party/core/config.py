"""
Client configuration, loaded from a .yaml file or the environment.
"""

from __future__ import annotations

from logging import Logger
from typing import ClassVar

from pydantic import field_validator

from ..tools.settings import BaseSettingsModel
from .transport import REQUEST_TIMEOUT, RequestsTransport

__all__ = [
    "ClientConfig",
]


class ClientConfig(BaseSettingsModel):
    """
    Encapsulates settings of a {obj}`Client`. Environment variables are
    named `EPIC_PARTY_<FIELD>`, e.g. `EPIC_PARTY_TOKEN`.
    """

    env_prefix: ClassVar[str] = "EPIC_PARTY_"

    party_build_id: str = "1:3:"
    """
    Build id advertised in party invitations; must match the game's.
    """

    platform: str = "WIN"
    """
    Platform advertised in party invitations, e.g. `WIN`, `PSN`.
    """

    token: str | None = None
    """
    Bearer token used by {obj}`RequestsTransport`.
    """

    timeout: float = REQUEST_TIMEOUT
    """
    Timeout of each request in seconds.
    """

    @field_validator("platform")
    def validate_platform(cls, value: str) -> str:
        if not value or not value.isupper():
            raise ValueError(f"platform must be an uppercase code: '{value}'")
        return value

    def create_transport(self, *, logger: Logger | None = None) -> RequestsTransport:
        """
        Get transport from this config's fields.
        """
        if not self.token:
            raise ValueError("token is required to create a transport")

        return RequestsTransport(self.token, timeout=self.timeout, logger=logger)
