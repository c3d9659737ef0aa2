"""
Test serialization of patches and reconciliation of revisions.
"""

import asyncio
from typing import Any

from pytest import mark, raises

from epic_party import *

from ..conftest import FakeTransport, forbidden_error, stale_error

URL = "https://party.test/parties/party0"


def build_body(
    updated: dict[str, str], deleted: list[str], revision: int
) -> dict[str, Any]:
    return {"update": updated, "delete": deleted, "revision": revision}


def create_sync(transport: FakeTransport, revision: int = 0) -> PatchSynchronizer:
    return PatchSynchronizer(transport, URL, build_body, revision=revision)


@mark.asyncio
async def test_send(transport: FakeTransport):
    sync = create_sync(transport, revision=3)

    await sync.send({"Default:AthenaSquadFill_b": "true"}, ["Default:Old_s"])

    assert sync.revision == 4
    assert sync.pending_count == 0

    assert len(transport.requests) == 1
    request = transport.requests[0]
    assert request.method == "PATCH"
    assert request.url == URL
    assert request.json == {
        "update": {"Default:AthenaSquadFill_b": "true"},
        "delete": ["Default:Old_s"],
        "revision": 3,
    }


@mark.asyncio
async def test_serialized(transport: FakeTransport):
    """
    Patches are sent one at a time in submission order, each with the
    revision resulting from the previous one.
    """
    sync = create_sync(transport)

    await asyncio.gather(
        *(sync.send({"Default:Index_U": str(i)}) for i in range(4))
    )

    assert transport.max_in_flight == 1
    assert [r.json["update"]["Default:Index_U"] for r in transport.requests] == [
        "0",
        "1",
        "2",
        "3",
    ]
    assert [r.json["revision"] for r in transport.requests] == [0, 1, 2, 3]
    assert sync.revision == 4


@mark.asyncio
async def test_stale(transport: FakeTransport):
    """
    Stale patch adopts the service's revision and is resubmitted unchanged.
    """
    sync = create_sync(transport, revision=5)
    transport.script(stale_error(8))

    await sync.send({"Default:AthenaSquadFill_b": "true"})

    assert [r.json["revision"] for r in transport.patches] == [5, 8]
    assert transport.patches[0].json["update"] == transport.patches[1].json["update"]
    assert sync.revision == 9


@mark.asyncio
async def test_stale_repeated(transport: FakeTransport):
    sync = create_sync(transport, revision=1)
    transport.script(stale_error(4), stale_error(7))

    await sync.send({"Default:Location_s": "PreLobby"})

    assert [r.json["revision"] for r in transport.patches] == [1, 4, 7]
    assert sync.revision == 8


@mark.asyncio
async def test_stale_requeued(transport: FakeTransport):
    """
    Stale patch goes to the back of the queue, after patches submitted
    while it was in flight.
    """
    sync = create_sync(transport, revision=0)
    transport.script(stale_error(10))

    await asyncio.gather(
        sync.send({"Default:First_s": "a"}),
        sync.send({"Default:Second_s": "b"}),
    )

    assert [(list(r.json["update"]), r.json["revision"]) for r in transport.patches] == [
        (["Default:First_s"], 0),
        (["Default:Second_s"], 10),
        (["Default:First_s"], 11),
    ]
    assert sync.revision == 12


@mark.asyncio
async def test_forbidden(transport: FakeTransport):
    sync = create_sync(transport, revision=2)
    transport.script(forbidden_error())

    with raises(PartyPermissionError) as e:
        await sync.send({"Default:AthenaSquadFill_b": "true"})

    assert isinstance(e.value.__cause__, EpicgamesAPIError)
    assert sync.revision == 2
    assert len(transport.patches) == 1


@mark.asyncio
async def test_other_error(transport: FakeTransport):
    """
    Other errors propagate unchanged and aren't retried.
    """
    sync = create_sync(transport, revision=2)
    error = EpicgamesAPIError("errors.com.epicgames.common.server_error", "oops")
    transport.script(error)

    with raises(EpicgamesAPIError) as e:
        await sync.send({"Default:AthenaSquadFill_b": "true"})

    assert e.value is error
    assert sync.revision == 2
    assert len(transport.patches) == 1


@mark.asyncio
async def test_stale_without_revision(transport: FakeTransport):
    sync = create_sync(transport, revision=2)
    error = EpicgamesAPIError(STALE_REVISION, message_vars=["party0"])
    transport.script(error)

    with raises(EpicgamesAPIError) as e:
        await sync.send({"Default:AthenaSquadFill_b": "true"})

    assert e.value is error
    assert sync.revision == 2


@mark.asyncio
async def test_released_after_error(transport: FakeTransport):
    """
    A failed patch doesn't block subsequent patches.
    """
    sync = create_sync(transport, revision=0)
    transport.script(forbidden_error())

    results = await asyncio.gather(
        sync.send({"Default:First_s": "a"}),
        sync.send({"Default:Second_s": "b"}),
        return_exceptions=True,
    )

    assert isinstance(results[0], PartyPermissionError)
    assert results[1] is None
    assert transport.patches[1].json["revision"] == 0
    assert sync.revision == 1
    assert sync.pending_count == 0


@mark.asyncio
async def test_on_commit(transport: FakeTransport):
    """
    Commit callback runs only upon success, before the next patch is built.
    """
    sync = create_sync(transport)
    committed: list[str] = []
    built: list[list[str]] = []

    def builder(updated, deleted, revision):
        built.append(list(committed))
        return build_body(updated, deleted, revision)

    transport.script(forbidden_error())

    results = await asyncio.gather(
        sync.send({"a_s": "1"}, build_body=builder, on_commit=lambda: committed.append("a")),
        sync.send({"b_s": "2"}, build_body=builder, on_commit=lambda: committed.append("b")),
        sync.send({"c_s": "3"}, build_body=builder, on_commit=lambda: committed.append("c")),
        return_exceptions=True,
    )

    assert isinstance(results[0], PartyPermissionError)
    assert committed == ["b", "c"]
    assert built == [[], [], ["b"]]


@mark.asyncio
async def test_on_commit_error(transport: FakeTransport):
    """
    Revision reflects an accepted patch even if its commit callback fails,
    and the next patch isn't blocked.
    """
    sync = create_sync(transport, revision=2)
    revisions: list[int] = []

    def on_commit():
        revisions.append(sync.revision)
        raise RuntimeError("commit failed")

    with raises(RuntimeError):
        await sync.send({"a_s": "1"}, on_commit=on_commit)

    assert revisions == [3]
    assert sync.revision == 3
    assert sync.pending_count == 0

    await sync.send({"b_s": "2"})

    assert [r.json["revision"] for r in transport.patches] == [2, 3]
    assert sync.revision == 4


@mark.asyncio
async def test_observe(transport: FakeTransport):
    sync = create_sync(transport, revision=5)

    sync.observe(3)
    assert sync.revision == 5

    sync.observe(9)
    assert sync.revision == 9


def test_patch_str():
    patch = PendingPatch({"a_s": "1"}, [])
    assert "QUEUED" in str(patch)
