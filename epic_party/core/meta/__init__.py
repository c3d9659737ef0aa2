from pyrollup import rollup

from . import codec, member_meta, meta, party_meta
from .codec import *  # noqa
from .member_meta import *  # noqa
from .meta import *  # noqa
from .party_meta import *  # noqa

__all__ = rollup(meta, codec, party_meta, member_meta)

__canonical_children__ = [
    "meta",
    "codec",
    "party_meta",
    "member_meta",
]
