"""
Interface to the party service. The transport is responsible for
authentication, timeouts and retries; this package only interprets the
error codes it raises.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from logging import Logger
from typing import Any

import requests

from .exceptions import EpicgamesAPIError

__all__ = [
    "BR_PARTY",
    "BaseTransport",
    "RequestsTransport",
]

BR_PARTY = "https://party-service-prod.ol.epicgames.com/party/api/v1/Fortnite"
"""
Base path of party service endpoints.
"""

REQUEST_TIMEOUT = 10.0
"""
Timeout for each request.
"""


class BaseTransport(ABC):
    """
    Sends requests to the party service.
    """

    @abstractmethod
    async def request(
        self, method: str, url: str, *, json: Any | None = None
    ) -> Any:
        """
        Send a request and return the decoded response body, or `None` if
        there is none.

        :raises EpicgamesAPIError: Service returned an error response
        """
        ...


class RequestsTransport(BaseTransport):
    """
    Transport using `requests`; each blocking request is run in a worker
    thread so the event loop stays responsive.
    """

    _session: requests.Session
    _token: str
    _timeout: float
    _logger: Logger

    def __init__(
        self,
        token: str,
        *,
        timeout: float = REQUEST_TIMEOUT,
        logger: Logger | None = None,
    ):
        """
        :param token: Bearer token of the authenticated account
        :param timeout: Timeout for each request in seconds
        :param logger: Logger to use, or `None` to use default logger
        """
        self._token = token
        self._timeout = timeout
        self._logger = logger or logging.getLogger()

        self._session = requests.Session()
        self._session.headers.update({"Authorization": f"bearer {token}"})

    async def request(
        self, method: str, url: str, *, json: Any | None = None
    ) -> Any:
        self._logger.debug(f"{method} {url}")

        response: requests.Response = await asyncio.to_thread(
            self._session.request,
            method,
            url,
            json=json,
            timeout=self._timeout,
        )

        if not response.ok:
            raise self._parse_error(response)

        if not response.content:
            return None

        return response.json()

    def close(self):
        self._session.close()

    def _parse_error(self, response: requests.Response) -> EpicgamesAPIError:
        """
        Convert an error response to an exception.
        """
        try:
            body = response.json()
        except requests.JSONDecodeError:
            body = None

        if not isinstance(body, dict) or "errorCode" not in body:
            return EpicgamesAPIError(
                "errors.com.epicgames.common.unknown",
                f"status={response.status_code}, reason={response.reason}",
                status=response.status_code,
            )

        return EpicgamesAPIError(
            body["errorCode"],
            body.get("errorMessage", ""),
            message_vars=body.get("messageVars"),
            numeric_code=body.get("numericErrorCode"),
            status=response.status_code,
        )
