"""
Meta of a party member, with accessors for commonly used values.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from ..utils import last_path_segment, nested_get, pascal_case_keys
from .meta import Meta

if TYPE_CHECKING:
    from ..party.member import PartyMember

__all__ = [
    "PartyMemberMeta",
    "MatchMeta",
    "AssistedChallengeMeta",
]

LOADOUT_KEY = "Default:AthenaCosmeticLoadout_j"
EMOTE_KEY = "Default:FrontendEmote_j"
LOBBY_STATE_KEY = "Default:LobbyState_j"
MARKER_KEY = "Default:FrontEndMapMarker_j"


@dataclass
class MatchMeta:
    """
    Info about the match a member is currently in.
    """

    has_preloaded_athena: bool | None
    is_spectatable: bool | None
    location: str | None
    match_started_at: datetime.datetime | None
    player_count: int | None


@dataclass
class AssistedChallengeMeta:
    """
    Challenge a member is currently assisting with.
    """

    quest_item_def: str | None
    objectives_completed: int | None


class PartyMemberMeta(Meta):
    """
    Meta of a {obj}`PartyMember`.
    """

    member: PartyMember
    """
    Member owning this meta.
    """

    def __init__(
        self, member: PartyMember, schema: Mapping[str, Any] | None = None
    ):
        super().__init__(schema)
        self.member = member

    @property
    def outfit(self) -> str | None:
        """
        Currently equipped outfit id (CID).
        """
        return last_path_segment(self._loadout.get("characterDef"))

    @property
    def pickaxe(self) -> str | None:
        """
        Currently equipped pickaxe id.
        """
        return last_path_segment(self._loadout.get("pickaxeDef"))

    @property
    def backpack(self) -> str | None:
        """
        Currently equipped backpack id (BID).
        """
        return last_path_segment(self._loadout.get("backpackDef"))

    @property
    def emote(self) -> str | None:
        """
        Current emote id (EID), or `None` if not emoting.
        """
        emote = nested_get(self.get(EMOTE_KEY), "FrontendEmote", "emoteItemDef")
        return last_path_segment(emote)

    @property
    def is_ready(self) -> bool:
        return (
            nested_get(self.get(LOBBY_STATE_KEY), "LobbyState", "gameReadiness")
            == "Ready"
        )

    @property
    def input(self) -> str | None:
        """
        Current input method, e.g. `MouseAndKeyboard`.
        """
        return self.get("Default:CurrentInputType_s")

    @property
    def variants(self) -> dict[str, Any]:
        """
        Cosmetic variants keyed by cosmetic type, e.g. `AthenaCharacter`.
        """
        variants = nested_get(
            self.get("Default:AthenaCosmeticLoadoutVariants_j"), "vL"
        )
        if not variants:
            return {}
        return pascal_case_keys(variants)

    @property
    def custom_data_store(self) -> list[str]:
        store = nested_get(
            self.get("Default:ArbitraryCustomDataStore_j"),
            "ArbitraryCustomDataStore",
        )
        return store or []

    @property
    def banner(self) -> dict[str, Any] | None:
        return nested_get(self.get("Default:AthenaBannerInfo_j"), "AthenaBannerInfo")

    @property
    def battlepass(self) -> dict[str, Any] | None:
        return nested_get(self.get("Default:BattlePassInfo_j"), "BattlePassInfo")

    @property
    def platform(self) -> str | None:
        return nested_get(
            self.get("Default:PlatformData_j"),
            "PlatformData",
            "platform",
            "platformDescription",
            "name",
        )

    @property
    def match(self) -> MatchMeta:
        """
        Match info; fields are `None` if the member isn't in a match.
        """
        started_at = self.get("Default:UtcTimeStartedMatchAthena_s")

        return MatchMeta(
            has_preloaded_athena=self.get("Default:HasPreloadedAthena_b"),
            is_spectatable=self.get("Default:SpectateAPartyMemberAvailable_b"),
            location=self.get("Default:Location_s"),
            match_started_at=_parse_datetime(started_at),
            player_count=self.get("Default:NumAthenaPlayersLeft_U"),
        )

    @property
    def is_marker_set(self) -> bool:
        return bool(
            nested_get(self.get(MARKER_KEY), "FrontEndMapMarker", "bIsSet")
        )

    @property
    def marker_location(self) -> tuple[float, float]:
        """
        Marker location as a tuple `(y, x)` in the order used by the game, or
        `(0, 0)` if no marker is set.
        """
        marker = nested_get(
            self.get(MARKER_KEY), "FrontEndMapMarker", "markerLocation"
        )
        if not marker:
            return (0, 0)
        return (marker["y"], marker["x"])

    @property
    def assisted_challenge(self) -> AssistedChallengeMeta | None:
        challenge = nested_get(
            self.get("Default:AssistedChallengeInfo_j"), "AssistedChallengeInfo"
        )
        if not challenge:
            return None

        return AssistedChallengeMeta(
            quest_item_def=challenge.get("questItemDef"),
            objectives_completed=challenge.get("objectivesCompleted"),
        )

    @property
    def _loadout(self) -> dict[str, Any]:
        return nested_get(self.get(LOADOUT_KEY), "AthenaCosmeticLoadout") or {}


def _parse_datetime(value: str | None) -> datetime.datetime | None:
    if not value:
        return None
    return datetime.datetime.fromisoformat(value)
