from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any

from ..transport import BR_PARTY

if TYPE_CHECKING:
    from ..user.user import User
    from .party import ClientParty

__all__ = [
    "PartyMemberConfirmation",
    "SentPartyInvitation",
]


class PartyMemberConfirmation:
    """
    Request of a user to join the client's party, which the client needs to
    confirm or reject.
    """

    party: ClientParty
    user: User
    created_at: datetime.datetime | None

    def __init__(self, party: ClientParty, user: User, data: dict[str, Any]):
        self.party = party
        self.user = user

        sent = data.get("sent")
        self.created_at = datetime.datetime.fromisoformat(sent) if sent else None

    def __str__(self):
        return f"PartyMemberConfirmation(user={self.user}, party={self.party})"

    @property
    def is_active(self) -> bool:
        """
        Whether this confirmation can still be confirmed or rejected.
        """
        return self.party.pending_member_confirmations.get(self.user.id) is self

    async def confirm(self):
        """
        Let the user join the party.
        """
        await self._respond("confirm")

    async def reject(self):
        await self._respond("reject")

    async def _respond(self, action: str):
        await self.party.client.http.request(
            "POST",
            f"{BR_PARTY}/parties/{self.party.id}/members/{self.user.id}/{action}",
        )

        self.party.pending_member_confirmations.pop(self.user.id, None)


class SentPartyInvitation:
    """
    Invitation sent by the client to a friend.
    """

    party: ClientParty
    sender: User
    receiver: User
    sent_at: datetime.datetime
    response: Any

    def __init__(
        self, party: ClientParty, sender: User, receiver: User, response: Any
    ):
        self.party = party
        self.sender = sender
        self.receiver = receiver
        self.sent_at = datetime.datetime.now(datetime.UTC)
        self.response = response

    def __str__(self):
        return f"SentPartyInvitation(receiver={self.receiver}, party={self.party})"
