"""
Helpers for applications built on this package.
"""

from pyrollup import rollup

from . import log, settings
from .log import *  # noqa
from .settings import *  # noqa

__all__ = rollup(log, settings)
