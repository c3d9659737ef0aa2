from pyrollup import rollup

from . import confirmation, member, party, patch, queue, types
from .confirmation import *  # noqa
from .member import *  # noqa
from .party import *  # noqa
from .patch import *  # noqa
from .queue import *  # noqa
from .types import *  # noqa

__all__ = rollup(
    party,
    member,
    confirmation,
    patch,
    queue,
    types,
)

__canonical_children__ = [
    "party",
    "member",
    "confirmation",
    "patch",
    "queue",
    "types",
]
