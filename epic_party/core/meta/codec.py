"""
Registry of codecs used to convert meta values to and from their encoded
(string) form. A key's codec is determined by the type suffix following the
last underscore of its name, e.g. `Default:AthenaSquadFill_b` is a boolean.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from functools import cache
from typing import Any, Callable

from ..exceptions import MetaDecodeError

__all__ = [
    "MetaCodec",
    "BOOL_CODEC",
    "INT_CODEC",
    "FLOAT_CODEC",
    "JSON_CODEC",
    "STR_CODEC",
    "CODEC_REGISTRY",
    "resolve_codec",
]


@dataclass(frozen=True)
class MetaCodec:
    """
    Pair of functions converting a meta value to and from its encoded form.
    """

    name: str
    """Name of value type, for diagnostics"""

    encode: Callable[[Any], str]
    """Convert a python value to its encoded form"""

    decode: Callable[[str], Any]
    """Convert an encoded value to a python value; raises `ValueError` if invalid"""

    def decode_key(self, key: str, raw: str) -> Any:
        """
        Decode value of given key, raising {obj}`MetaDecodeError` if invalid.
        """
        try:
            return self.decode(raw)
        except (ValueError, TypeError) as e:
            raise MetaDecodeError(key, raw, f"invalid {self.name}") from e


def _encode_bool(value: Any) -> str:
    return "true" if value else "false"


def _decode_bool(raw: str) -> bool:
    if raw not in ("true", "false"):
        raise ValueError(f"not a boolean: {raw!r}")
    return raw == "true"


def _encode_int(value: Any) -> str:
    return str(int(value))


def _encode_float(value: Any) -> str:
    return repr(float(value))


def _encode_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _encode_str(value: Any) -> str:
    return str(value)


def _decode_str(raw: str) -> str:
    return raw


BOOL_CODEC = MetaCodec("bool", _encode_bool, _decode_bool)
INT_CODEC = MetaCodec("int", _encode_int, int)
FLOAT_CODEC = MetaCodec("float", _encode_float, float)
JSON_CODEC = MetaCodec("json", _encode_json, json.loads)
STR_CODEC = MetaCodec("str", _encode_str, _decode_str)

CODEC_REGISTRY: dict[str, MetaCodec] = {
    "b": BOOL_CODEC,
    "U": INT_CODEC,
    "u": INT_CODEC,
    "i": INT_CODEC,
    "d": FLOAT_CODEC,
    "j": JSON_CODEC,
    "s": STR_CODEC,
}
"""
Mapping of type suffix to codec. Keys with any other suffix, or no suffix,
are treated as strings.
"""


@cache
def resolve_codec(key: str) -> MetaCodec:
    """
    Get codec for the given key based on its type suffix.
    """
    _, sep, suffix = key.rpartition("_")
    if not sep:
        return STR_CODEC
    return CODEC_REGISTRY.get(suffix, STR_CODEC)
