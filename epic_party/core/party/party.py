"""
Parties as observed by the client, and the party the client is a member of.
"""

from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Concatenate

from ..exceptions import (
    EpicgamesAPIError,
    PartyAlreadyJoinedError,
    PartyMaxSizeReachedError,
    PartyMemberNotFoundError,
    PartyPermissionError,
    PartySizeError,
)
from ..meta.party_meta import (
    CUSTOM_MATCH_KEY,
    PLAYLIST_KEY,
    PRIVACY_SETTINGS_KEY,
    SQUAD_ASSIGNMENTS_KEY,
    SQUAD_FILL_KEY,
    PartyMeta,
)
from ..transport import BR_PARTY
from ..utils import CHANGE_FORBIDDEN
from .confirmation import PartyMemberConfirmation, SentPartyInvitation
from .member import ClientPartyMember, PartyMember
from .patch import PatchSynchronizer
from .types import (
    PRIVACY_FRIENDS_ONLY,
    PRIVACY_PRIVATE,
    PRIVACY_PUBLIC,
    PartyConfig,
    PartyData,
    PartyMemberData,
    PartyMemberUpdateData,
    PartyPatchBody,
    PartyPrivacy,
    PartyUpdateData,
    Playlist,
)

if TYPE_CHECKING:
    from ..client import Client

__all__ = [
    "Party",
    "ClientParty",
    "MIN_PARTY_SIZE",
    "MAX_PARTY_SIZE",
]

MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 16

NOT_ACCEPTING_KEY = "urn:epic:cfg:not-accepting-members"
NOT_ACCEPTING_REASON_KEY = "urn:epic:cfg:not-accepting-members-reason_i"
PRESENCE_PERM_KEY = "urn:epic:cfg:presence-perm_s"
ACCEPTING_MEMBERS_KEY = "urn:epic:cfg:accepting-members_b"
INVITE_PERM_KEY = "urn:epic:cfg:invite-perm_s"

NOT_ACCEPTING_REASON_PRIVATE = 7
"""
Reason sent when a party stops accepting members because it became private.
"""

PRIVACY_MAP: dict[str, PartyPrivacy] = {
    p.party_type: p for p in (PRIVACY_PUBLIC, PRIVACY_FRIENDS_ONLY, PRIVACY_PRIVATE)
}


class Party:
    """
    Party as observed by the client. The client can't modify it unless it's
    a {obj}`ClientParty`.
    """

    client: Client
    id: str
    created_at: str | None
    config: PartyConfig
    meta: PartyMeta

    members: dict[str, PartyMember]
    """
    Mapping of account id to member, in join order.
    """

    _revision: int

    def __init__(self, client: Client, data: PartyData):
        """
        :param client: Client observing this party
        :param data: Party as received from the service
        """
        self.client = client
        self.id = data.id
        self.created_at = data.created_at
        self.meta = PartyMeta(self, data.meta)
        self.config = _parse_config(data.config, self.meta.privacy_settings)

        self._init_revision(data.revision)

        self.members = dict()
        for member_data in data.members:
            self.add_member(member_data)

    def __str__(self):
        return f"{type(self).__name__}(id='{self.id}', size={self.size})"

    def __repr__(self):
        return str(self)

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def max_size(self) -> int:
        return self.config.max_size

    @property
    def leader(self) -> PartyMember | None:
        return next((m for m in self.members.values() if m.is_leader), None)

    @property
    def me(self) -> PartyMember | None:
        """
        The client's member, if the client is in this party.
        """
        return None

    @property
    def hidden_member_ids(self) -> list[str]:
        return []

    @property
    def playlist(self) -> dict[str, Any] | None:
        return self.meta.playlist

    @property
    def squad_fill(self) -> bool:
        return self.meta.squad_fill

    @property
    def custom_matchmaking_key(self) -> str | None:
        return self.meta.custom_matchmaking_key

    def add_member(self, data: PartyMemberData) -> PartyMember:
        member = self._create_member(data)
        self.members[member.id] = member
        return member

    def remove_member(self, member_id: str) -> PartyMember | None:
        return self.members.pop(member_id, None)

    def update_member(self, data: PartyMemberUpdateData):
        """
        Apply a member update pushed by the service.
        """
        member = self.members.get(data.account_id)
        if member is None:
            self.client._logger.debug(
                f"Ignoring update of unknown member '{data.account_id}' in {self}"
            )
            return

        member.update_data(data)

    def update_data(self, data: PartyUpdateData):
        """
        Apply a party update pushed by the service.
        """
        self._observe_revision(data.revision)

        self.meta.update(data.party_state_updated, is_remote=True)
        self.meta.remove(data.party_state_removed)

        config_update: dict[str, Any] = {}

        if data.max_number_of_members is not None:
            config_update["max_size"] = data.max_number_of_members
        if data.party_type is not None:
            config_update["type"] = data.party_type
        if data.party_sub_type is not None:
            config_update["sub_type"] = data.party_sub_type
        if data.party_privacy_type is not None:
            config_update["joinability"] = data.party_privacy_type
        if data.invite_ttl_seconds is not None:
            config_update["invite_ttl"] = data.invite_ttl_seconds

        privacy = _parse_privacy(self.meta.privacy_settings)
        if privacy is not None:
            config_update["privacy"] = privacy

        self.config = self.config.model_copy(update=config_update)

    def find_member(self, member: str) -> PartyMember:
        """
        Get member by account id or display name.

        :raises PartyMemberNotFoundError: No such member
        """
        found = self.members.get(member) or next(
            (m for m in self.members.values() if m.matches(member)), None
        )
        if found is None:
            raise PartyMemberNotFoundError(member)
        return found

    def _create_member(self, data: PartyMemberData) -> PartyMember:
        return PartyMember(self, data)

    def _init_revision(self, revision: int):
        self._revision = revision

    def _observe_revision(self, revision: int):
        if revision > self._revision:
            self._revision = revision


def leader_only[**P, T](
    method: Callable[Concatenate[ClientParty, P], Awaitable[T]]
) -> Callable[Concatenate[ClientParty, P], Awaitable[T]]:
    """
    Fail with {obj}`PartyPermissionError` before doing anything if the client
    isn't the party leader.
    """

    @wraps(method)
    async def wrapper(self: ClientParty, *args: P.args, **kwargs: P.kwargs) -> T:
        if not self.is_leader:
            raise PartyPermissionError()
        return await method(self, *args, **kwargs)

    return wrapper


class ClientParty(Party):
    """
    Party the client is a member of. Meta changes are sent as patches, one
    at a time in the order they were made; only the leader may make them.
    """

    pending_member_confirmations: dict[str, PartyMemberConfirmation]
    """
    Mapping of account id to pending join confirmation.
    """

    _hidden_member_ids: list[str]
    _sync: PatchSynchronizer

    def __init__(self, client: Client, data: PartyData):
        self._hidden_member_ids = []
        self.pending_member_confirmations = dict()

        super().__init__(client, data)

    @property
    def revision(self) -> int:
        return self._sync.revision

    @property
    def me(self) -> ClientPartyMember:
        member = self.members.get(self.client.user.id)
        assert isinstance(
            member, ClientPartyMember
        ), f"Client is not a member of {self}"
        return member

    @property
    def is_leader(self) -> bool:
        member = self.members.get(self.client.user.id)
        return member is not None and member.is_leader

    @property
    def is_private(self) -> bool:
        return self.config.privacy.is_private

    @property
    def hidden_member_ids(self) -> list[str]:
        return self._hidden_member_ids

    async def send_patch(
        self,
        updated: dict[str, str] | None = None,
        deleted: list[str] | None = None,
        *,
        config_update: dict[str, Any] | None = None,
        on_commit: Callable[[], None] | None = None,
    ):
        """
        Send a party patch and wait until the service accepted it.

        :param updated: Mapping of key to encoded value as returned by {obj}`Meta.set`, or `None` to send the whole meta as of transmission
        :param deleted: Keys to delete
        :param config_update: Config fields to change along with this patch; committed to {obj}`Party.config` only once the service accepted it
        :param on_commit: Invoked once the service accepted the patch, along with the config change

        :raises PartyPermissionError: Service refused the change
        :raises EpicgamesAPIError: Any other error returned by the service
        """
        full_schema = updated is None
        sent_config: PartyConfig | None = None

        def build_body(
            updated: dict[str, str], deleted: list[str], revision: int
        ) -> dict[str, Any]:
            # derive from state as of transmission so earlier patches apply
            nonlocal sent_config
            sent_config = self.config.model_copy(update=config_update or {})
            return PartyPatchBody.build(
                sent_config,
                self.meta.schema if full_schema else updated,
                deleted,
                revision,
            ).model_dump()

        def commit():
            assert sent_config is not None
            self.config = sent_config
            if on_commit is not None:
                on_commit()

        await self._sync.send(
            updated or {}, deleted, build_body=build_body, on_commit=commit
        )

    async def leave(self):
        """
        Leave this party.
        """
        await self.client.http.request(
            "DELETE", f"{BR_PARTY}/parties/{self.id}/members/{self.me.id}"
        )

        if self.client.party is self:
            self.client.party = None

    @leader_only
    async def kick(self, member: str):
        """
        Kick a member.

        :param member: Account id or display name
        :raises PartyPermissionError: Client is not the leader
        :raises PartyMemberNotFoundError: No such member
        """
        target = self.find_member(member)
        await self._send_member_request(
            "DELETE", f"{BR_PARTY}/parties/{self.id}/members/{target.id}"
        )

    @leader_only
    async def promote(self, member: str):
        """
        Promote a member to leader.

        :param member: Account id or display name
        :raises PartyPermissionError: Client is not the leader
        :raises PartyMemberNotFoundError: No such member
        """
        target = self.find_member(member)
        await self._send_member_request(
            "POST", f"{BR_PARTY}/parties/{self.id}/members/{target.id}/promote"
        )

    @leader_only
    async def invite(self, friend: str) -> SentPartyInvitation:
        """
        Invite a friend. Private parties send an invitation, other parties
        ping the friend.

        :param friend: Account id or display name
        :raises FriendNotFoundError: No such friend
        :raises PartyAlreadyJoinedError: Friend is already a member
        :raises PartyMaxSizeReachedError: Party is full
        """
        target = self.client.find_friend(friend)

        if target.id in self.members:
            raise PartyAlreadyJoinedError(target.id)
        if self.size >= self.max_size:
            raise PartyMaxSizeReachedError(self.max_size)

        if self.is_private:
            response = await self.client.http.request(
                "POST",
                f"{BR_PARTY}/parties/{self.id}/invites/{target.id}?sendPing=true",
                json={
                    "urn:epic:cfg:build-id_s": self.client.config.party_build_id,
                    "urn:epic:conn:platform_s": self.client.config.platform,
                    "urn:epic:conn:type_s": "game",
                    "urn:epic:invite:platformdata_s": "",
                    "urn:epic:member:dn_s": self.client.user.display_name,
                },
            )
        else:
            response = await self.client.http.request(
                "POST",
                f"{BR_PARTY}/user/{target.id}/pings/{self.client.user.id}",
                json={"urn:epic:invite:platformdata_s": ""},
            )

        return SentPartyInvitation(self, self.client.user, target, response)

    @leader_only
    async def refresh_squad_assignments(self):
        """
        Recompute and send squad positions of visible members.
        """
        await self._send_squad_assignments(list(self._hidden_member_ids))

    @leader_only
    async def hide_member(self, member: str, hide: bool = True):
        """
        Hide or unhide a member by leaving them out of squad assignments.
        The member is only hidden once the service accepted the new
        assignments.

        :param member: Account id or display name
        """
        target = self.find_member(member)
        hidden = [m for m in self._hidden_member_ids if m != target.id]
        if hide:
            hidden.append(target.id)

        await self._send_squad_assignments(hidden)

    @leader_only
    async def hide_members(self, hide: bool = True):
        """
        Hide or unhide all members except the client.
        """
        hidden = (
            [m for m in self.members if m != self.client.user.id] if hide else []
        )

        await self._send_squad_assignments(hidden)

    @leader_only
    async def set_privacy(
        self, privacy: PartyPrivacy, send_patch: bool = True
    ) -> tuple[dict[str, str], list[str]]:
        """
        Change privacy. Discoverability and joinability always follow the
        privacy type; meta and config are changed together, and only once
        the service accepted the change.

        :param privacy: New privacy, e.g. {obj}`PRIVACY_PRIVATE`
        :param send_patch: Whether to send the change to the service, otherwise it's only applied locally
        :returns: Updated and deleted meta keys
        """
        updated: dict[str, str] = {}
        deleted: list[str] = []

        privacy_meta = self.meta.get(PRIVACY_SETTINGS_KEY)
        if privacy_meta:
            settings = {
                **(privacy_meta.get("PrivacySettings") or {}),
                "partyType": privacy.party_type,
                "bOnlyLeaderFriendsCanJoin": privacy.only_leader_friends_can_join,
                "partyInviteRestriction": privacy.invite_restriction,
            }
            updated[PRIVACY_SETTINGS_KEY] = self.meta.encode(
                PRIVACY_SETTINGS_KEY, {**privacy_meta, "PrivacySettings": settings}
            )

        updated[PRESENCE_PERM_KEY] = self.meta.encode(
            PRESENCE_PERM_KEY, privacy.presence_permission
        )
        updated[ACCEPTING_MEMBERS_KEY] = self.meta.encode(
            ACCEPTING_MEMBERS_KEY, privacy.accepting_members
        )
        updated[INVITE_PERM_KEY] = self.meta.encode(
            INVITE_PERM_KEY, privacy.invite_permission
        )

        if privacy.is_private:
            deleted.append(NOT_ACCEPTING_KEY)
            updated[NOT_ACCEPTING_REASON_KEY] = self.meta.encode(
                NOT_ACCEPTING_REASON_KEY, NOT_ACCEPTING_REASON_PRIVATE
            )
            config_update = {
                "discoverability": "INVITED_ONLY",
                "joinability": "INVITE_AND_FORMER",
            }
        else:
            deleted.append(NOT_ACCEPTING_REASON_KEY)
            config_update = {
                "discoverability": "ALL",
                "joinability": "OPEN",
            }

        config_update["privacy"] = privacy

        def apply_meta():
            self.meta.update(updated)
            self.meta.remove(deleted)

        if send_patch:
            await self.send_patch(
                updated,
                deleted,
                config_update=config_update,
                on_commit=apply_meta,
            )
        else:
            apply_meta()
            self.config = self.config.model_copy(update=config_update)

        return updated, deleted

    @leader_only
    async def set_custom_matchmaking_key(self, key: str | None = None):
        """
        Set custom matchmaking key, or clear it if `None`.
        """
        await self.send_patch(
            {CUSTOM_MATCH_KEY: self.meta.set(CUSTOM_MATCH_KEY, key or "")}
        )

    @leader_only
    async def set_playlist(self, playlist: Playlist):
        """
        Select a playlist; fields not provided keep their current value.
        """
        data = self.meta.get(PLAYLIST_KEY) or {}
        playlist_data = {
            **(data.get("PlaylistData") or {}),
            **playlist.to_meta(),
        }

        await self.send_patch(
            {
                PLAYLIST_KEY: self.meta.set(
                    PLAYLIST_KEY, {**data, "PlaylistData": playlist_data}
                )
            }
        )

    @leader_only
    async def set_squad_fill(self, fill: bool = True):
        await self.send_patch({SQUAD_FILL_KEY: self.meta.set(SQUAD_FILL_KEY, fill)})

    @leader_only
    async def set_max_size(self, max_size: int):
        """
        Change max number of members.

        :param max_size: New max size, between 1 and 16 inclusive and not less than the current number of members
        :raises PartySizeError: Size out of range
        """
        if not MIN_PARTY_SIZE <= max_size <= MAX_PARTY_SIZE:
            raise PartySizeError(
                f"Max size must be between {MIN_PARTY_SIZE} and {MAX_PARTY_SIZE} (inclusive), got {max_size}"
            )

        if max_size < self.size:
            raise PartySizeError(
                f"Max size {max_size} is less than current member count {self.size}"
            )

        await self.send_patch(config_update={"max_size": max_size})

    def add_confirmation(
        self, user_id: str, display_name: str | None, data: dict[str, Any]
    ) -> PartyMemberConfirmation:
        """
        Register a pending join confirmation pushed by the service.
        """
        from ..user.user import User

        user = User(self.client, user_id, display_name)
        confirmation = PartyMemberConfirmation(self, user, data)
        self.pending_member_confirmations[user_id] = confirmation
        return confirmation

    def _create_member(self, data: PartyMemberData) -> PartyMember:
        if data.account_id == self.client.user.id:
            return ClientPartyMember(self, data, control=self)
        return PartyMember(self, data, control=self)

    def _init_revision(self, revision: int):
        self._sync = PatchSynchronizer(
            self.client.http,
            f"{BR_PARTY}/parties/{self.id}",
            revision=revision,
            logger=self.client._logger,
        )

    def _observe_revision(self, revision: int):
        self._sync.observe(revision)

    async def _send_squad_assignments(self, hidden: list[str]):
        """
        Send squad assignments leaving out the given members; they're
        considered hidden once the service accepted them.
        """
        encoded = self.meta.encode(
            SQUAD_ASSIGNMENTS_KEY, self.meta.build_squad_assignments(hidden)
        )

        def commit():
            self._hidden_member_ids = hidden
            self.meta.update({SQUAD_ASSIGNMENTS_KEY: encoded}, is_remote=True)

        await self.send_patch({SQUAD_ASSIGNMENTS_KEY: encoded}, on_commit=commit)

    async def _send_member_request(self, method: str, url: str):
        """
        Send a one-off request concerning a member, outside of the patch
        queue.
        """
        try:
            await self.client.http.request(method, url)
        except EpicgamesAPIError as e:
            if e.code == CHANGE_FORBIDDEN:
                raise PartyPermissionError("Party change forbidden by service") from e
            raise


def _parse_privacy(settings: dict[str, Any] | None) -> PartyPrivacy | None:
    """
    Get privacy from the party's `PrivacySettings` meta, if set.
    """
    if not settings:
        return None

    base = PRIVACY_MAP.get(settings.get("partyType", ""))
    if base is None:
        return None

    return base.model_copy(
        update={
            "only_leader_friends_can_join": settings.get(
                "bOnlyLeaderFriendsCanJoin", base.only_leader_friends_can_join
            ),
            "invite_restriction": settings.get(
                "partyInviteRestriction", base.invite_restriction
            ),
        }
    )


def _parse_config(
    config: dict[str, Any], privacy_settings: dict[str, Any] | None
) -> PartyConfig:
    parsed = PartyConfig.model_validate(config)

    privacy = _parse_privacy(privacy_settings)
    if privacy is not None:
        parsed = parsed.model_copy(update={"privacy": privacy})

    return parsed
