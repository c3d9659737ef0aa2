"""
Test party members and patching of the client's own member.
"""

import datetime
import json

from pytest import mark, raises

from epic_party import *

from ..conftest import (
    CLIENT_ID,
    PARTY_ID,
    FakeTransport,
    member_data,
    party_data,
    stale_error,
)

MEMBER_URL = f"{BR_PARTY}/parties/{PARTY_ID}/members/{CLIENT_ID}/meta"


def test_member(party: ClientParty):
    me = party.me

    assert me.party is party
    assert me.role == "CAPTAIN"
    assert me.is_leader
    assert me.display_name == "ClientBot"
    assert me.joined_at == datetime.datetime(
        2023, 7, 5, 12, tzinfo=datetime.UTC
    )


@mark.members(2)
@mark.asyncio
async def test_control(party: ClientParty, transport: FakeTransport):
    """
    Members of the client's party can be controlled through the party.
    """
    member = party.members["member1"]

    await member.promote()
    await member.kick()
    await member.hide()

    assert [r.url for r in transport.requests[:2]] == [
        f"{BR_PARTY}/parties/{PARTY_ID}/members/member1/promote",
        f"{BR_PARTY}/parties/{PARTY_ID}/members/member1",
    ]
    assert party.hidden_member_ids == ["member1"]


@mark.members(2)
@mark.leader(False)
@mark.asyncio
async def test_control_not_leader(party: ClientParty, transport: FakeTransport):
    with raises(PartyPermissionError):
        await party.members["member1"].kick()

    assert transport.requests == []


@mark.asyncio
async def test_control_other_party(client: Client, transport: FakeTransport):
    """
    Members of a party the client isn't in can't be controlled.
    """
    data = PartyData.model_validate(party_data(leader=False))
    data.members = [m for m in data.members if m.account_id != CLIENT_ID]

    party = Party(client, data)
    member = party.members["member1"]

    assert party.me is None
    assert party.leader is member

    with raises(PartyPermissionError):
        await member.kick()

    with raises(PartyPermissionError):
        await member.promote()

    assert transport.requests == []


@mark.asyncio
async def test_set_ready(party: ClientParty, transport: FakeTransport):
    await party.me.set_ready()

    assert party.me.is_ready
    assert party.me.revision == 1

    request = transport.requests[0]
    assert request.method == "PATCH"
    assert request.url == MEMBER_URL
    assert request.json["revision"] == 0
    assert request.json["delete"] == []
    assert json.loads(request.json["update"]["Default:LobbyState_j"]) == {
        "LobbyState": {"gameReadiness": "Ready"}
    }

    await party.me.set_ready(False)
    assert not party.me.is_ready
    assert transport.requests[1].json["revision"] == 1


@mark.asyncio
async def test_emote(party: ClientParty, transport: FakeTransport):
    await party.me.set_emote("EID_Floss")
    assert party.me.emote == "EID_Floss"

    await party.me.clear_emote()
    assert party.me.emote is None

    emote = json.loads(transport.patches[1].json["update"]["Default:FrontendEmote_j"])
    assert emote == {
        "FrontendEmote": {"emoteItemDef": "None", "emoteSection": -1}
    }


@mark.asyncio
async def test_custom_data_store(party: ClientParty, transport: FakeTransport):
    await party.me.set_custom_data_store(["a", "b"])

    assert party.me.meta.custom_data_store == ["a", "b"]


@mark.leader(False)
@mark.asyncio
async def test_member_patch_not_leader(
    party: ClientParty, transport: FakeTransport
):
    """
    Any member may patch its own meta.
    """
    await party.me.set_ready()

    assert len(transport.patches) == 1


@mark.asyncio
async def test_member_stale(party: ClientParty, transport: FakeTransport):
    transport.script(stale_error(6))

    await party.me.send_patch()

    assert [r.json["revision"] for r in transport.patches] == [0, 6]
    assert party.me.revision == 7


def test_update_data(party: ClientParty):
    party.me.update_data(
        PartyMemberUpdateData(
            account_id=CLIENT_ID,
            revision=4,
            member_state_updated={"Default:Location_s": "InGame"},
        )
    )

    assert party.me.revision == 4
    assert party.me.meta.match.location == "InGame"

    party.me.update_data(
        PartyMemberUpdateData(
            account_id=CLIENT_ID,
            revision=2,
            member_state_removed=["Default:Location_s"],
        )
    )

    assert party.me.revision == 4
    assert party.me.meta.match.location is None


def test_to_object(party: ClientParty):
    member = party.add_member(
        PartyMemberData.model_validate(
            member_data("member5", "Member5", meta={"Default:Location_s": "PreLobby"})
        )
    )

    data = member.to_object()

    assert data["account_id"] == "member5"
    assert data["account_dn"] == "Member5"
    assert data["role"] == "MEMBER"
    assert data["meta"] == {"Default:Location_s": "PreLobby"}
