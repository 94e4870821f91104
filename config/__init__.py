"""Configuration constants for bw-export.

Everything lives in `config.settings`; this package re-exports it so
callers may write `from config import ARCHIVE_PREFIX`.
"""

from .settings import *  # noqa: F401,F403
from .settings import __all__  # noqa: F401
