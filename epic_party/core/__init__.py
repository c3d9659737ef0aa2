"""
This module implements the party model: typed meta documents, the patch
pipeline keeping them in sync with the party service, and the operations
of the party leader.
"""

from pyrollup import rollup

from . import client, config, exceptions, meta, party, transport, user, utils
from .client import *  # noqa
from .config import *  # noqa
from .exceptions import *  # noqa
from .meta import *  # noqa
from .party import *  # noqa
from .transport import *  # noqa
from .user import *  # noqa
from .utils import *  # noqa

__all__ = rollup(
    client,
    config,
    party,
    meta,
    user,
    transport,
    exceptions,
    utils,
)

__canonical_children__ = [
    "client",
    "config",
    "party",
    "meta",
    "user",
    "transport",
    "exceptions",
]
