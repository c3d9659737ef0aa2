"""
EpicParty: a client-side model of a party's shared state, kept in sync with
the party service.
"""

from pyrollup import rollup

from . import core, tools
from .core import *  # noqa
from .tools import *  # noqa

__all__ = rollup(core, tools)

__canonical_children__ = [
    "core",
    "tools",
]
