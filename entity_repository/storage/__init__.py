"""
Queryable sources.

- SelectSource: SQL push-down through a sqlmodel AsyncSession
- MemorySource: in-process evaluation over a snapshot of records
"""

from entity_repository.storage.memory_source import MemorySource
from entity_repository.storage.select_source import SelectSource

__all__ = ["MemorySource", "SelectSource"]
