"""
Party members and the client's own member.
"""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING, Any, Protocol

from ..exceptions import PartyPermissionError
from ..meta.member_meta import PartyMemberMeta
from ..transport import BR_PARTY
from ..user.user import User
from .patch import PatchSynchronizer
from .types import MemberPatchBody, PartyMemberData, PartyMemberUpdateData

if TYPE_CHECKING:
    from .party import Party

__all__ = [
    "PartyControl",
    "PartyMember",
    "ClientPartyMember",
]

CAPTAIN = "CAPTAIN"
"""
Role of the party leader.
"""

LOBBY_STATE_KEY = "Default:LobbyState_j"
EMOTE_KEY = "Default:FrontendEmote_j"
CUSTOM_DATA_STORE_KEY = "Default:ArbitraryCustomDataStore_j"


class PartyControl(Protocol):
    """
    Leader operations a member may invoke on its party. Only provided to
    members of a party the client belongs to.
    """

    async def kick(self, member: str) -> None:
        ...

    async def promote(self, member: str) -> None:
        ...

    async def hide_member(self, member: str, hide: bool = True) -> None:
        ...


class PartyMember(User):
    """
    Member of a party.
    """

    party: Party
    role: str
    joined_at: datetime.datetime
    meta: PartyMemberMeta

    _revision: int
    _control: PartyControl | None

    def __init__(
        self,
        party: Party,
        data: PartyMemberData,
        control: PartyControl | None = None,
    ):
        """
        :param party: Party this member belongs to
        :param data: Member as received from the service
        :param control: Leader operations of the party, or `None` if the client can't control it
        """
        super().__init__(party.client, data.account_id, data.account_dn)

        self.party = party
        self.role = data.role
        self.joined_at = datetime.datetime.fromisoformat(data.joined_at)
        self.meta = PartyMemberMeta(self, data.meta)

        self._revision = data.revision
        self._control = control

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def is_leader(self) -> bool:
        return self.role == CAPTAIN

    @property
    def outfit(self) -> str | None:
        return self.meta.outfit

    @property
    def emote(self) -> str | None:
        return self.meta.emote

    @property
    def is_ready(self) -> bool:
        return self.meta.is_ready

    async def kick(self):
        """
        Kick this member from the client's party.

        :raises PartyPermissionError: Client isn't in this party or isn't its leader
        """
        await self._get_control().kick(self.id)

    async def promote(self):
        """
        Promote this member to leader.

        :raises PartyPermissionError: Client isn't in this party or isn't its leader
        """
        await self._get_control().promote(self.id)

    async def hide(self, hide: bool = True):
        """
        Hide or unhide this member.

        :raises PartyPermissionError: Client isn't in this party or isn't its leader
        """
        await self._get_control().hide_member(self.id, hide)

    def update_data(self, data: PartyMemberUpdateData):
        """
        Apply an update pushed by the service.
        """
        self._observe_revision(data.revision)

        if data.account_dn is not None and data.account_dn != self.display_name:
            self.update(data.account_dn, self.external_auths)

        self.meta.update(data.member_state_updated, is_remote=True)
        self.meta.remove(data.member_state_removed)

    def to_object(self) -> dict[str, Any]:
        """
        Convert to the representation used by the service.
        """
        return PartyMemberData(
            account_id=self.id,
            account_dn=self.display_name,
            role=self.role,
            joined_at=self.joined_at.isoformat(),
            updated_at=datetime.datetime.now(datetime.UTC).isoformat(),
            meta=self.meta.schema,
            revision=0,
        ).model_dump()

    def _observe_revision(self, revision: int):
        if revision > self._revision:
            self._revision = revision

    def _get_control(self) -> PartyControl:
        if self._control is None:
            raise PartyPermissionError(
                "Client is not a member of this member's party"
            )
        return self._control


class ClientPartyMember(PartyMember):
    """
    The client's own member, whose meta the client may patch.
    """

    _sync: PatchSynchronizer

    def __init__(
        self,
        party: Party,
        data: PartyMemberData,
        control: PartyControl | None = None,
    ):
        super().__init__(party, data, control)

        self._sync = PatchSynchronizer(
            self.client.http,
            f"{BR_PARTY}/parties/{party.id}/members/{self.id}/meta",
            _build_member_body,
            revision=data.revision,
            logger=self.client._logger,
        )

    @property
    def revision(self) -> int:
        return self._sync.revision

    async def send_patch(
        self,
        updated: dict[str, str] | None = None,
        deleted: list[str] | None = None,
    ):
        """
        Send a member meta patch.

        :param updated: Mapping of key to encoded value, or `None` to send the whole meta
        :param deleted: Keys to delete
        """
        if updated is None:
            updated = self.meta.schema

        await self._sync.send(updated, deleted)

    async def set_ready(self, ready: bool = True):
        """
        Set readiness state.
        """
        state = self.meta.get(LOBBY_STATE_KEY) or {}
        lobby_state = dict(state.get("LobbyState") or {})
        lobby_state["gameReadiness"] = "Ready" if ready else "NotReady"

        await self.send_patch(
            {
                LOBBY_STATE_KEY: self.meta.set(
                    LOBBY_STATE_KEY, {**state, "LobbyState": lobby_state}
                )
            }
        )

    async def set_emote(
        self,
        emote_id: str,
        path: str = "/BRCosmetics/Athena/Items/Cosmetics/Dances",
    ):
        """
        Start playing an emote.

        :param emote_id: Emote id, e.g. `EID_Floss`
        :param path: Asset folder of emote
        """
        await self._set_emote_def(
            f"AthenaDanceItemDefinition'{path}/{emote_id}.{emote_id}'"
        )

    async def clear_emote(self):
        """
        Stop playing any emote.
        """
        await self._set_emote_def("None")

    async def set_custom_data_store(self, store: list[str]):
        await self.send_patch(
            {
                CUSTOM_DATA_STORE_KEY: self.meta.set(
                    CUSTOM_DATA_STORE_KEY, {"ArbitraryCustomDataStore": store}
                )
            }
        )

    def _observe_revision(self, revision: int):
        self._sync.observe(revision)

    async def _set_emote_def(self, emote_def: str):
        emote = self.meta.get(EMOTE_KEY) or {}
        frontend_emote = dict(emote.get("FrontendEmote") or {})
        frontend_emote["emoteItemDef"] = emote_def
        frontend_emote["emoteSection"] = -2 if emote_def != "None" else -1

        await self.send_patch(
            {
                EMOTE_KEY: self.meta.set(
                    EMOTE_KEY, {**emote, "FrontendEmote": frontend_emote}
                )
            }
        )


def _build_member_body(
    updated: dict[str, str], deleted: list[str], revision: int
) -> dict[str, Any]:
    return MemberPatchBody(
        delete=deleted, revision=revision, update=updated
    ).model_dump()
