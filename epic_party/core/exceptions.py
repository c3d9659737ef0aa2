__all__ = [
    "EpicgamesAPIError",
    "MetaDecodeError",
    "PartySizeError",
    "PartyPermissionError",
    "PartyMemberNotFoundError",
    "FriendNotFoundError",
    "PartyAlreadyJoinedError",
    "PartyMaxSizeReachedError",
]


class EpicgamesAPIError(Exception):
    """
    Raised by the transport when the remote service returns an error
    response. Propagated to the user unchanged unless its code is one of
    the few codes interpreted by this package.
    """

    code: str
    """Error code, e.g. `errors.com.epicgames.social.party.stale_revision`"""

    message: str
    """Human-readable message"""

    message_vars: list[str]
    """Positional message variables"""

    numeric_code: int | None
    """Numeric error code, if provided"""

    status: int | None
    """HTTP status, if known"""

    def __init__(
        self,
        code: str,
        message: str = "",
        message_vars: list[str] | None = None,
        numeric_code: int | None = None,
        status: int | None = None,
    ):
        self.code = code
        self.message = message
        self.message_vars = list(message_vars or [])
        self.numeric_code = numeric_code
        self.status = status
        super().__init__(f"{code}: {message}" if message else code)


class MetaDecodeError(ValueError):
    """
    Raised when an encoded meta value can't be decoded according to its
    key's type.
    """

    def __init__(self, key: str, raw: str, reason: str):
        self.key = key
        self.raw = raw
        super().__init__(f"Failed to decode meta key '{key}' ({reason}): {raw!r}")


class PartySizeError(ValueError):
    """
    Raised when a requested party size is out of range.
    """


class PartyPermissionError(Exception):
    """
    Raised when the client isn't allowed to perform a party operation, either
    because it isn't the leader or because the service rejected the change.
    """

    def __init__(self, message: str = "Client is not the leader of the party"):
        super().__init__(message)


class PartyMemberNotFoundError(Exception):
    """
    Raised when a party member can't be resolved by id or display name.
    """

    def __init__(self, member: str):
        self.member = member
        super().__init__(f"Party member not found: '{member}'")


class FriendNotFoundError(Exception):
    """
    Raised when a friend can't be resolved by id or display name.
    """

    def __init__(self, friend: str):
        self.friend = friend
        super().__init__(f"Friend not found: '{friend}'")


class PartyAlreadyJoinedError(Exception):
    """
    Raised when inviting a user who is already a member of the party.
    """

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User '{user_id}' is already a member of the party")


class PartyMaxSizeReachedError(Exception):
    """
    Raised when inviting a user to a party which is already full.
    """

    def __init__(self, max_size: int):
        self.max_size = max_size
        super().__init__(f"Party reached its max size of {max_size}")
