"""
Entry point tying together the transport, the client's account and its
party.
"""

from __future__ import annotations

import logging
from logging import Logger
from typing import Any

from .config import ClientConfig
from .exceptions import FriendNotFoundError
from .party.party import ClientParty
from .party.types import PartyData
from .transport import BaseTransport
from .user.user import Friend, User

__all__ = ["Client"]


class Client:
    """
    State of an authenticated account: its friends and the party it's in.

    Authentication, presence and friend list synchronization are handled
    elsewhere; their results are fed into this object.
    """

    http: BaseTransport
    """
    Transport used for all requests.
    """

    config: ClientConfig
    user: User

    friends: dict[str, Friend]
    """
    Mapping of account id to friend.
    """

    party: ClientParty | None
    """
    Party the client is currently in, if any.
    """

    _logger: Logger

    def __init__(
        self,
        http: BaseTransport,
        user_id: str,
        display_name: str | None = None,
        *,
        config: ClientConfig | None = None,
        logger: Logger | None = None,
    ):
        """
        :param http: Transport to use
        :param user_id: Account id of the authenticated account
        :param display_name: Display name of the authenticated account
        :param config: Config, or `None` to use defaults
        :param logger: Logger to use, or `None` to use default logger
        """
        self.http = http
        self.config = config or ClientConfig()
        self.user = User(self, user_id, display_name)
        self.friends = dict()
        self.party = None
        self._logger = logger or logging.getLogger()

    def __str__(self):
        return f"Client(user={self.user})"

    def add_friend(self, id: str, display_name: str | None = None, **kwargs: Any) -> Friend:
        """
        Register a friend, e.g. upon receiving the friend list.
        """
        friend = Friend(self, id, display_name, **kwargs)
        self.friends[id] = friend
        return friend

    def remove_friend(self, id: str) -> Friend | None:
        return self.friends.pop(id, None)

    def find_friend(self, friend: str) -> Friend:
        """
        Get friend by account id or display name.

        :raises FriendNotFoundError: No such friend
        """
        found = self.friends.get(friend) or next(
            (f for f in self.friends.values() if f.matches(friend)), None
        )
        if found is None:
            raise FriendNotFoundError(friend)
        return found

    def join_party(self, data: PartyData | dict[str, Any]) -> ClientParty:
        """
        Set the party the client is in from its data as received from the
        service.
        """
        if not isinstance(data, PartyData):
            data = PartyData.model_validate(data)

        self.party = ClientParty(self, data)
        self._logger.debug(f"Joined {self.party}, revision {self.party.revision}")

        return self.party
