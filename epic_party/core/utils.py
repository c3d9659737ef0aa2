"""
Common utilities.
"""

import re
from typing import Any

__all__ = [
    "STALE_REVISION",
    "CHANGE_FORBIDDEN",
    "SENTINEL_NONE",
    "last_path_segment",
    "nested_get",
    "pascal_case_keys",
    "normalize_external_auths",
]

STALE_REVISION = "errors.com.epicgames.social.party.stale_revision"
"""
Error code returned when a patch was based on an outdated revision. The
authoritative revision is the second message variable.
"""

CHANGE_FORBIDDEN = "errors.com.epicgames.social.party.party_change_forbidden"
"""
Error code returned when the client isn't permitted to change the party.
"""

SENTINEL_NONE = "None"
"""
Literal value used by the game in place of an asset path when nothing is
selected.
"""

_SEGMENT_RE = re.compile(r"\w+")


def last_path_segment(path: Any) -> str | None:
    """
    Extract the object name from an asset path, e.g.:

    `"AthenaCharacterItemDefinition'/Game/Athena/CID_028.CID_028'"` -> `"CID_028"`

    Returns `None` for non-strings, the `"None"` sentinel, or paths without
    a segment.
    """
    if not isinstance(path, str) or path == SENTINEL_NONE:
        return None

    _, dot, tail = path.rpartition(".")
    if not dot:
        return None

    match = _SEGMENT_RE.match(tail)
    return match.group(0) if match else None


def nested_get(value: Any, *path: str) -> Any:
    """
    Walk nested mappings, returning `None` if any level is missing.
    """
    for key in path:
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def pascal_case_keys(mapping: dict[str, Any]) -> dict[str, Any]:
    """
    Return a copy of mapping with the first character of each key uppercased.
    """
    return {f"{k[:1].upper()}{k[1:]}": v for k, v in mapping.items()}


def normalize_external_auths(external_auths: Any) -> dict[str, Any]:
    """
    Normalize external auths as received from the service. Users without
    external auths are sometimes sent with an empty list rather than an
    empty mapping, so any list is treated as "no external auths".
    """
    if not external_auths or isinstance(external_auths, list):
        return {}

    assert isinstance(
        external_auths, dict
    ), f"Unexpected external auths: {external_auths}"
    return dict(external_auths)
