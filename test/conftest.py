import asyncio
import copy
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any

from pytest import Config, FixtureRequest, fixture

from epic_party import (
    CHANGE_FORBIDDEN,
    STALE_REVISION,
    BaseTransport,
    Client,
    ClientConfig,
    ClientParty,
    EpicgamesAPIError,
    PartyData,
)

logging.basicConfig(level=logging.WARNING)

CLIENT_ID = "client0000000000000000000000000"
CLIENT_NAME = "ClientBot"

PARTY_ID = "party000000000000000000000000000"

JOINED_AT = "2023-07-05T12:00:00.000Z"

MARKERS = [
    "leader",
    "members",
    "party_meta",
    "revision",
    "friends",
]


def pytest_configure(config: Config) -> None:
    for marker in MARKERS:
        config.addinivalue_line("markers", marker)


@dataclass
class Request:
    """
    Request as received by {obj}`FakeTransport`.
    """

    method: str
    url: str
    json: Any


class FakeTransport(BaseTransport):
    """
    Records requests and replays scripted outcomes in order. An outcome is
    either a response body or an exception to raise; once the script is
    exhausted every request succeeds with no body.

    Set `gate` to hold every request until it's set.
    """

    requests: list[Request]
    outcomes: deque[Any]
    in_flight: int
    max_in_flight: int
    gate: asyncio.Event | None

    def __init__(self):
        self.requests = list()
        self.outcomes = deque()
        self.in_flight = 0
        self.max_in_flight = 0
        self.gate = None

    def script(self, *outcomes: Any):
        self.outcomes.extend(outcomes)

    @property
    def patches(self) -> list[Request]:
        return [r for r in self.requests if r.method == "PATCH"]

    async def request(
        self, method: str, url: str, *, json: Any | None = None
    ) -> Any:
        self.requests.append(Request(method, url, copy.deepcopy(json)))

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)

        try:
            # suspend like a real round-trip would
            await asyncio.sleep(0)
            if self.gate is not None:
                await self.gate.wait()

            outcome = self.outcomes.popleft() if self.outcomes else None
        finally:
            self.in_flight -= 1

        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def stale_error(revision: int) -> EpicgamesAPIError:
    return EpicgamesAPIError(
        STALE_REVISION,
        "Stale revision",
        message_vars=[PARTY_ID, str(revision)],
        numeric_code=51014,
        status=409,
    )


def forbidden_error() -> EpicgamesAPIError:
    return EpicgamesAPIError(
        CHANGE_FORBIDDEN,
        "Party change forbidden",
        numeric_code=51015,
        status=403,
    )


def member_data(
    account_id: str,
    display_name: str,
    role: str = "MEMBER",
    meta: dict[str, str] | None = None,
    revision: int = 0,
) -> dict[str, Any]:
    return {
        "account_id": account_id,
        "account_dn": display_name,
        "role": role,
        "joined_at": JOINED_AT,
        "meta": meta or {},
        "revision": revision,
    }


def party_data(
    *,
    leader: bool = True,
    members: int = 1,
    meta: dict[str, str] | None = None,
    revision: int = 0,
    max_size: int = 16,
) -> dict[str, Any]:
    """
    Create party data as received from the service. The client is the
    first member; other members are named `Member1`, `Member2` etc.
    """
    assert members >= 1

    others = [
        member_data(
            f"member{i}",
            f"Member{i}",
            role="MEMBER" if leader or i > 1 else "CAPTAIN",
        )
        for i in range(1, members)
    ]

    if not leader and not others:
        # someone else must lead
        others.append(member_data("member1", "Member1", role="CAPTAIN"))

    return {
        "id": PARTY_ID,
        "created_at": JOINED_AT,
        "config": {
            "type": "DEFAULT",
            "sub_type": "default",
            "joinability": "OPEN",
            "discoverability": "ALL",
            "max_size": max_size,
            "invite_ttl": 14400,
            "join_confirmation": False,
        },
        "members": [
            member_data(
                CLIENT_ID, CLIENT_NAME, role="CAPTAIN" if leader else "MEMBER"
            ),
            *others,
        ],
        "meta": meta or {},
        "revision": revision,
    }


@fixture
def transport() -> FakeTransport:
    return FakeTransport()


@fixture
def client(request: FixtureRequest, transport: FakeTransport) -> Client:
    """
    Create a client with the friends given by `@mark.friends(("id", "name"), ...)`.
    """
    client = Client(
        transport,
        CLIENT_ID,
        CLIENT_NAME,
        config=ClientConfig(party_build_id="1:3:12345", platform="WIN"),
        logger=logging.getLogger("epic-party-test"),
    )

    marker = request.node.get_closest_marker("friends")
    if marker:
        for friend_id, display_name in marker.args:
            client.add_friend(friend_id, display_name)

    return client


@fixture
def party(request: FixtureRequest, client: Client) -> ClientParty:
    """
    Create the client's party. Configured by markers:

    @mark.leader(False): client is not the leader
    @mark.members(3): number of members including the client
    @mark.party_meta({"key": "encoded"}): initial meta
    @mark.revision(5): initial revision
    """

    def get_arg(name: str, default: Any) -> Any:
        marker = request.node.get_closest_marker(name)
        return marker.args[0] if marker else default

    data = party_data(
        leader=get_arg("leader", True),
        members=get_arg("members", 1),
        meta=get_arg("party_meta", None),
        revision=get_arg("revision", 0),
    )

    return client.join_party(PartyData.model_validate(data))
