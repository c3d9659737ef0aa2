from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

from ..utils import normalize_external_auths

if TYPE_CHECKING:
    from ..client import Client

__all__ = [
    "User",
    "Friend",
]


class User:
    """
    Account known to the client.
    """

    client: Client
    id: str

    _display_name: str | None
    _external_auths: dict[str, Any]

    def __init__(
        self,
        client: Client,
        id: str,
        display_name: str | None = None,
        external_auths: Any = None,
    ):
        """
        :param client: Client this user is known to
        :param id: Account id
        :param display_name: Display name, if known
        :param external_auths: Linked platforms as received from the service; may be a list if there are none
        """
        self.client = client
        self.id = id
        self.update(display_name, external_auths)

    def __str__(self):
        return f"{type(self).__name__}(id='{self.id}', display_name='{self.display_name}')"

    def __repr__(self):
        return str(self)

    @property
    def display_name(self) -> str | None:
        """
        Display name, falling back to the name on the first linked platform.
        """
        if self._display_name:
            return self._display_name

        for external_auth in self._external_auths.values():
            if isinstance(external_auth, dict):
                return external_auth.get("externalDisplayName")

        return None

    @property
    def external_auths(self) -> dict[str, Any]:
        return self._external_auths

    def update(self, display_name: str | None, external_auths: Any = None):
        """
        Replace display name and external auths.
        """
        self._display_name = display_name
        self._external_auths = normalize_external_auths(external_auths)

    def matches(self, query: str) -> bool:
        """
        Check if this user is identified by the given id or display name.
        """
        return query == self.id or query == self.display_name


class Friend(User):
    """
    User who is friends with the client.
    """

    favorite: bool
    created_at: datetime.datetime | None
    alias: str | None
    note: str | None

    def __init__(
        self,
        client: Client,
        id: str,
        display_name: str | None = None,
        external_auths: Any = None,
        *,
        favorite: bool = False,
        created_at: str | None = None,
        alias: str | None = None,
        note: str | None = None,
    ):
        super().__init__(client, id, display_name, external_auths)

        self.favorite = favorite
        self.created_at = (
            datetime.datetime.fromisoformat(created_at) if created_at else None
        )
        self.alias = alias
        self.note = note

    async def invite(self):
        """
        Invite this friend to the client's party.
        """
        party = self.client.party
        assert party is not None, "Client is not in a party"
        return await party.invite(self.id)
