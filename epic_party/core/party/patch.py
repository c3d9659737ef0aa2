"""
Serializes meta patches for a party or party member and reconciles revision
conflicts with the service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from logging import Logger
from typing import Any, Callable

from ..exceptions import EpicgamesAPIError, PartyPermissionError
from ..transport import BaseTransport
from ..utils import CHANGE_FORBIDDEN, STALE_REVISION
from .queue import AsyncQueue
from .types import PatchState

__all__ = [
    "PendingPatch",
    "PatchSynchronizer",
]

BodyBuilder = Callable[[dict[str, str], list[str], int], dict[str, Any]]
"""
Builds a request body from updated keys, deleted keys and revision.
"""


@dataclass
class PendingPatch:
    """
    One logical mutation intent. Resubmitted unchanged after a stale
    revision; only the revision it's sent with changes.
    """

    updated: dict[str, str]
    deleted: list[str]
    state: PatchState = PatchState.QUEUED
    revision: int | None = None
    attempts: int = field(default=0)

    def __str__(self) -> str:
        return (
            f"Patch(revision={self.revision}, update={list(self.updated)}, "
            f"delete={self.deleted}, attempts={self.attempts}) {self.state}"
        )


class PatchSynchronizer:
    """
    Owns the revision of a party or party member and sends its patches one
    at a time, in submission order.

    On a stale revision the revision provided by the service is adopted and
    the same patch is resubmitted at the back of the queue, once per stale
    response.
    """

    _transport: BaseTransport
    _method: str
    _url: str
    _build_body: BodyBuilder | None
    _queue: AsyncQueue
    _revision: int
    _logger: Logger

    def __init__(
        self,
        transport: BaseTransport,
        url: str,
        build_body: BodyBuilder | None = None,
        *,
        revision: int = 0,
        method: str = "PATCH",
        logger: Logger | None = None,
    ):
        """
        :param transport: Transport to send patches with
        :param url: Endpoint receiving patches
        :param build_body: Callable building request body from `(updated, deleted, revision)`, or `None` if each patch provides its own
        :param revision: Initial revision as received from the service
        :param method: HTTP method of patch requests
        :param logger: Logger to use, or `None` to use default logger
        """
        assert revision >= 0, f"Invalid revision: {revision}"

        self._transport = transport
        self._url = url
        self._method = method
        self._build_body = build_body
        self._revision = revision
        self._queue = AsyncQueue()
        self._logger = logger or logging.getLogger()

    @property
    def revision(self) -> int:
        """
        Revision of the last state confirmed by the service.
        """
        return self._revision

    @property
    def pending_count(self) -> int:
        """
        Number of patches queued or in flight.
        """
        return len(self._queue)

    def observe(self, revision: int):
        """
        Adopt a revision pushed by the service if it's newer than the local
        one.
        """
        if revision > self._revision:
            self._revision = revision

    async def send(
        self,
        updated: dict[str, str],
        deleted: list[str] | None = None,
        *,
        build_body: BodyBuilder | None = None,
        on_commit: Callable[[], None] | None = None,
    ):
        """
        Queue a patch and wait until the service accepted it.

        :param updated: Mapping of key to encoded value
        :param deleted: Keys to delete
        :param build_body: Request body builder for this patch, overriding the default
        :param on_commit: Invoked upon success while still holding the turn, so the next patch observes its effects

        :raises PartyPermissionError: Service refused the change
        :raises EpicgamesAPIError: Any other error returned by the service
        """
        build_body = build_body or self._build_body
        assert build_body is not None, "No request body builder provided"

        patch = PendingPatch(dict(updated), list(deleted or []))

        while True:
            await self._attempt(patch, build_body, on_commit)

            if patch.state is not PatchState.STALE:
                return

            self._logger.debug(f"Resubmitting stale patch: {patch}")
            patch.state = PatchState.QUEUED

    async def _attempt(
        self,
        patch: PendingPatch,
        build_body: BodyBuilder,
        on_commit: Callable[[], None] | None,
    ):
        """
        Send the patch once, holding a turn for the duration.
        """
        async with self._queue.turn():
            patch.revision = self._revision
            patch.attempts += 1
            patch.state = PatchState.SENDING

            self._logger.debug(f"Sending {self._url}: {patch}")

            body = build_body(patch.updated, patch.deleted, patch.revision)

            try:
                await self._transport.request(self._method, self._url, json=body)
            except EpicgamesAPIError as e:
                stale_revision = _get_stale_revision(e)

                if stale_revision is not None:
                    self._logger.debug(
                        f"Stale revision {patch.revision}, service has {stale_revision}"
                    )
                    self._revision = stale_revision
                    patch.state = PatchState.STALE
                    return

                patch.state = PatchState.FAILED

                if e.code == CHANGE_FORBIDDEN:
                    self._logger.warning(f"Patch refused by service: {patch}")
                    raise PartyPermissionError("Party change forbidden by service") from e

                raise
            except BaseException:
                patch.state = PatchState.FAILED
                raise

            self._revision += 1
            patch.state = PatchState.DONE

            self._logger.debug(f"Committed revision {self._revision}: {patch}")

            if on_commit is not None:
                on_commit()


def _get_stale_revision(error: EpicgamesAPIError) -> int | None:
    """
    Get authoritative revision from a stale revision error, or `None` if
    the error is of another kind.
    """
    if error.code != STALE_REVISION:
        return None

    try:
        return int(error.message_vars[1])
    except (IndexError, ValueError):
        return None
