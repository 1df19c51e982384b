"""tag merge が利用するホストアダプタ群."""

from .base_host import BaseHost
from .sqlite_host import SqliteTagHost, create_archive_database
from .stdio_host import NdjsonChannel, StdioHost

__all__ = [
    "BaseHost",
    "NdjsonChannel",
    "StdioHost",
    "SqliteTagHost",
    "create_archive_database",
]
