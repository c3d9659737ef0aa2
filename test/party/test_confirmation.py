"""
Test join confirmations.
"""

from pytest import mark

from epic_party import *

from ..conftest import PARTY_ID, FakeTransport


@mark.asyncio
async def test_confirm(party: ClientParty, transport: FakeTransport):
    confirmation = party.add_confirmation("user1", "User1", {})

    assert confirmation.created_at is None
    assert confirmation.user.display_name == "User1"

    await confirmation.confirm()

    request = transport.requests[0]
    assert request.method == "POST"
    assert request.url == f"{BR_PARTY}/parties/{PARTY_ID}/members/user1/confirm"

    assert not confirmation.is_active
    assert party.pending_member_confirmations == {}


@mark.asyncio
async def test_reject(party: ClientParty, transport: FakeTransport):
    confirmation = party.add_confirmation("user1", None, {})

    await confirmation.reject()

    assert transport.requests[0].url.endswith("/members/user1/reject")
    assert not confirmation.is_active


def test_superseded(party: ClientParty):
    """
    A newer confirmation from the same user replaces the old one.
    """
    old = party.add_confirmation("user1", "User1", {})
    new = party.add_confirmation("user1", "User1", {})

    assert not old.is_active
    assert new.is_active
