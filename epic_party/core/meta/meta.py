"""
Typed key/value document shared by parties and party members.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from .codec import MetaCodec, resolve_codec

__all__ = ["Meta"]


class Meta:
    """
    Key/value document holding encoded values. Values are encoded upon
    {obj}`Meta.set` and decoded upon {obj}`Meta.get` according to the type
    suffix of their key.

    Iteration order is insertion order.
    """

    _schema: dict[str, str]
    """
    Mapping of key to encoded value.
    """

    def __init__(self, schema: Mapping[str, Any] | None = None):
        """
        :param schema: Already-encoded values as received from the service
        """
        self._schema = dict()

        if schema:
            self.update(schema, is_remote=True)

    def __str__(self):
        return f"{type(self).__name__}({len(self._schema)} keys)"

    def __repr__(self):
        return str(self)

    def __contains__(self, key: object) -> bool:
        return key in self._schema

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._schema))

    def __len__(self) -> int:
        return len(self._schema)

    @property
    def schema(self) -> dict[str, str]:
        """
        Copy of all keys and their encoded values.
        """
        return dict(self._schema)

    def get(self, key: str) -> Any:
        """
        Get decoded value of key, or `None` if it isn't set.

        :raises MetaDecodeError: Stored value is malformed for the key's type
        """
        raw = self._schema.get(key)
        if raw is None:
            return None
        return self._codec(key).decode_key(key, raw)

    def get_raw(self, key: str) -> str | None:
        """
        Get encoded value of key, or `None` if it isn't set.
        """
        return self._schema.get(key)

    def set(self, key: str, value: Any) -> str:
        """
        Encode and store a value, overwriting any existing value.

        The encoded value is returned; this is what should be sent to the
        service as part of a patch.
        """
        # encode before storing so a failed encode leaves the store untouched
        encoded = self.encode(key, value)
        self._schema[key] = encoded
        return encoded

    def encode(self, key: str, value: Any) -> str:
        """
        Encode a value for the given key without storing it.
        """
        return self._codec(key).encode(value)

    def update(self, schema: Mapping[str, Any], is_remote: bool = False):
        """
        Merge already-encoded values without encoding them.

        :param schema: Mapping of key to encoded value
        :param is_remote: `True` if this is authoritative state received from the service, stored verbatim; otherwise every value is validated by decoding it first, and nothing is merged if any value is malformed
        """
        # primitives occasionally arrive unencoded, e.g. revision counters
        encoded = {
            key: value if isinstance(value, str) else self._codec(key).encode(value)
            for key, value in schema.items()
        }

        if not is_remote:
            for key, raw in encoded.items():
                self._codec(key).decode_key(key, raw)

        self._schema.update(encoded)

    def remove(self, keys: Iterable[str]):
        """
        Delete keys; keys which aren't set are ignored.
        """
        for key in keys:
            self._schema.pop(key, None)

    def _codec(self, key: str) -> MetaCodec:
        return resolve_codec(key)
