"""
Persistence adapters.

Today the only backend is a single JSON document on disk.
"""

from .json_storage import IdAllocator, JsonStore, Transaction

__all__ = ["IdAllocator", "JsonStore", "Transaction"]
