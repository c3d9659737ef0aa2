"""
Meta of a party, with accessors for commonly used values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping

from ..utils import nested_get
from .meta import Meta

if TYPE_CHECKING:
    from ..party.party import Party

__all__ = [
    "PartyMeta",
    "PLAYLIST_KEY",
    "SQUAD_FILL_KEY",
    "SQUAD_ASSIGNMENTS_KEY",
    "CUSTOM_MATCH_KEY",
    "PRIVACY_SETTINGS_KEY",
]

PLAYLIST_KEY = "Default:PlaylistData_j"
SQUAD_FILL_KEY = "Default:AthenaSquadFill_b"
SQUAD_ASSIGNMENTS_KEY = "Default:RawSquadAssignments_j"
CUSTOM_MATCH_KEY = "Default:CustomMatchKey_s"
PRIVACY_SETTINGS_KEY = "Default:PrivacySettings_j"


class PartyMeta(Meta):
    """
    Meta of a {obj}`Party`.
    """

    party: Party
    """
    Party owning this meta.
    """

    def __init__(self, party: Party, schema: Mapping[str, Any] | None = None):
        super().__init__(schema)
        self.party = party

    @property
    def playlist(self) -> dict[str, Any] | None:
        """
        Current playlist data, e.g. `{"playlistName": "Playlist_DefaultDuo", ...}`.
        """
        return nested_get(self.get(PLAYLIST_KEY), "PlaylistData")

    @property
    def squad_fill(self) -> bool:
        return bool(self.get(SQUAD_FILL_KEY))

    @property
    def custom_matchmaking_key(self) -> str | None:
        """
        Custom matchmaking key, or `None` if not set.
        """
        return self.get(CUSTOM_MATCH_KEY) or None

    @property
    def privacy_settings(self) -> dict[str, Any] | None:
        return nested_get(self.get(PRIVACY_SETTINGS_KEY), "PrivacySettings")

    @property
    def squad_assignments(self) -> list[dict[str, Any]]:
        """
        Assignments of member ids to squad positions.
        """
        assignments = nested_get(
            self.get(SQUAD_ASSIGNMENTS_KEY), "RawSquadAssignments"
        )
        return assignments or []

    def refresh_squad_assignments(self) -> str:
        """
        Recompute squad assignments from the party's current members and
        store them. The client's own member is placed first; hidden members
        are left out.

        :returns: Encoded value to send in a patch
        """
        return self.set(
            SQUAD_ASSIGNMENTS_KEY,
            self.build_squad_assignments(self.party.hidden_member_ids),
        )

    def build_squad_assignments(self, hidden: Iterable[str]) -> dict[str, Any]:
        """
        Get squad assignments value for the party's current members without
        storing it. The client's own member is placed first.

        :param hidden: Ids of members to leave out
        """
        hidden_ids = set(hidden)
        me = self.party.me

        ordered = [me] if me is not None else []
        ordered += [m for m in self.party.members.values() if m is not me]

        assignments = [
            {"memberId": member.id, "absoluteMemberIdx": index}
            for index, member in enumerate(
                m for m in ordered if m.id not in hidden_ids
            )
        ]

        return {"RawSquadAssignments": assignments}
