"""
Models of data exchanged with the party service.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from rich.markup import escape

__all__ = [
    "PatchState",
    "PartyPrivacy",
    "PRIVACY_PUBLIC",
    "PRIVACY_FRIENDS_ONLY",
    "PRIVACY_PRIVATE",
    "PartyConfig",
    "Playlist",
    "PartyMemberData",
    "PartyMemberUpdateData",
    "PartyData",
    "PartyUpdateData",
    "PartyPatchBody",
    "MemberPatchBody",
]


class PatchState(Enum):
    """
    State of a pending patch.
    """

    QUEUED = auto()
    """Waiting for its turn"""

    SENDING = auto()
    """Transmitted, waiting for response"""

    STALE = auto()
    """Rejected due to stale revision, will be resubmitted"""

    DONE = auto()
    """Accepted by the service"""

    FAILED = auto()
    """Rejected by the service"""

    def __str__(self) -> str:
        color_map = {
            PatchState.QUEUED: "cyan",
            PatchState.SENDING: "bright_yellow",
            PatchState.STALE: "magenta",
            PatchState.DONE: "bright_green",
            PatchState.FAILED: "red",
        }

        start = escape("[")
        end = escape("]")
        return f"{start}[{color_map[self]}]{self.name}[/{color_map[self]}]{end}"


class PartyPrivacy(BaseModel):
    """
    Privacy settings of a party.
    """

    model_config = ConfigDict(frozen=True)

    party_type: str
    """One of `Public`, `FriendsOnly`, `Private`"""

    invite_restriction: str = "AnyMember"
    only_leader_friends_can_join: bool = False
    presence_permission: str = "Anyone"
    invite_permission: str = "Anyone"
    accepting_members: bool = True

    @property
    def is_private(self) -> bool:
        return self.party_type == "Private"


PRIVACY_PUBLIC = PartyPrivacy(party_type="Public")

PRIVACY_FRIENDS_ONLY = PartyPrivacy(
    party_type="FriendsOnly",
    only_leader_friends_can_join=True,
    invite_permission="AnyMember",
)

PRIVACY_PRIVATE = PartyPrivacy(
    party_type="Private",
    only_leader_friends_can_join=True,
    presence_permission="Noone",
    invite_permission="AnyMember",
    accepting_members=False,
)


class PartyConfig(BaseModel):
    """
    Configuration of a party. Field names match the service's `config`
    payload.
    """

    type: str = "DEFAULT"
    sub_type: str = "default"
    join_confirmation: bool = False
    joinability: str = "OPEN"
    discoverability: str = "ALL"
    max_size: int = 16
    invite_ttl: int = 14400
    chat_enabled: bool = True
    privacy: PartyPrivacy = PRIVACY_PUBLIC


class Playlist(BaseModel):
    """
    Playlist selection merged into the party's `PlaylistData`.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    playlist_name: str
    tournament_id: str = ""
    event_window_id: str = ""
    region_id: str | None = None
    link_id: dict[str, Any] | None = None

    def to_meta(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class PartyMemberData(BaseModel):
    """
    Member as received from the service.
    """

    account_id: str
    account_dn: str | None = None
    role: str = "MEMBER"
    joined_at: str
    updated_at: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)
    revision: int = 0


class PartyMemberUpdateData(BaseModel):
    """
    Partial member update pushed by the service.
    """

    account_id: str
    account_dn: str | None = None
    revision: int
    member_state_updated: dict[str, Any] = Field(default_factory=dict)
    member_state_removed: list[str] = Field(default_factory=list)


class PartyData(BaseModel):
    """
    Party as received from the service.
    """

    id: str
    created_at: str | None = None
    updated_at: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    members: list[PartyMemberData] = Field(default_factory=list)
    meta: dict[str, Any] = Field(default_factory=dict)
    revision: int = 0


class PartyUpdateData(BaseModel):
    """
    Partial party update pushed by the service.
    """

    revision: int
    party_state_updated: dict[str, Any] = Field(default_factory=dict)
    party_state_removed: list[str] = Field(default_factory=list)
    max_number_of_members: int | None = None
    party_type: str | None = None
    party_sub_type: str | None = None
    party_privacy_type: str | None = None
    invite_ttl_seconds: int | None = None


class _PatchConfig(BaseModel):
    join_confirmation: bool
    joinability: str
    max_size: int
    discoverability: str


class _PatchMeta(BaseModel):
    delete: list[str]
    update: dict[str, str]


class PartyPatchBody(BaseModel):
    """
    Body of a party patch request.
    """

    config: _PatchConfig
    meta: _PatchMeta
    party_state_overridden: dict[str, Any] = Field(default_factory=dict)
    party_privacy_type: str
    party_type: str
    party_sub_type: str
    max_number_of_members: int
    invite_ttl_seconds: int
    revision: int

    @classmethod
    def build(
        cls,
        config: PartyConfig,
        updated: dict[str, str],
        deleted: list[str],
        revision: int,
    ) -> PartyPatchBody:
        return cls(
            config=_PatchConfig(
                join_confirmation=config.join_confirmation,
                joinability=config.joinability,
                max_size=config.max_size,
                discoverability=config.discoverability,
            ),
            meta=_PatchMeta(delete=deleted, update=updated),
            party_privacy_type=config.joinability,
            party_type=config.type,
            party_sub_type=config.sub_type,
            max_number_of_members=config.max_size,
            invite_ttl_seconds=config.invite_ttl,
            revision=revision,
        )


class MemberPatchBody(BaseModel):
    """
    Body of a member meta patch request.
    """

    delete: list[str]
    revision: int
    update: dict[str, str]
