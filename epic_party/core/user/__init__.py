from pyrollup import rollup

from . import user
from .user import *  # noqa

__all__ = rollup(user)
