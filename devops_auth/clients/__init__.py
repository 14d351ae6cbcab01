"""Expose constructed client wrappers."""

from .devops_service import DevOpsServiceClient
from .sqlite_store import SQLiteStore

__all__ = [
    "DevOpsServiceClient",
    "SQLiteStore",
]
