"""
Abstract base class for mock ledger adapters.
The mock backend keeps its documents and custom tags as JSON-able lists
under string keys; every adapter must implement these methods.
"""
import asyncio
import copy
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, TypeVar

from ...core.logging_config import get_logger

logger = get_logger(__name__)

DOCUMENTS_KEY = "uploadedDocuments"
CUSTOM_TAGS_KEY = "customTags"

T = TypeVar("T")


class LedgerInterface(ABC):
    """
    Abstract interface for the mock backend's persistence.
    This allows the mock backend to run against an in-memory store in unit
    tests and a file-backed one in manual-testing builds.
    """

    def __init__(self):
        # The underlying stores have no atomic append, so every
        # read-modify-write goes through this lock
        self._lock = asyncio.Lock()

    @abstractmethod
    async def initialize(self):
        """Initialize storage (create directories, load data, etc.)."""
        pass

    @abstractmethod
    async def close(self):
        """Flush and release storage."""
        pass

    @abstractmethod
    async def _load(self, key: str) -> List[Dict[str, Any]]:
        """Read the list stored under key (empty list if absent)."""
        pass

    @abstractmethod
    async def _store(self, key: str, items: List[Dict[str, Any]]) -> None:
        """Replace the list stored under key."""
        pass

    @abstractmethod
    async def _delete(self, key: str) -> None:
        """Remove key entirely."""
        pass

    async def read_list(self, key: str) -> List[Dict[str, Any]]:
        """
        Get a copy of the list stored under key.

        Args:
            key: Ledger key (DOCUMENTS_KEY or CUSTOM_TAGS_KEY)

        Returns:
            Deep copy of the stored list (empty if nothing stored)
        """
        async with self._lock:
            return copy.deepcopy(await self._load(key))

    async def write_list(self, key: str, items: List[Dict[str, Any]]) -> None:
        async with self._lock:
            await self._store(key, copy.deepcopy(items))

    async def remove(self, key: str) -> None:
        async with self._lock:
            await self._delete(key)

    async def update_list(self, key: str, mutator: Callable[[List[Dict[str, Any]]], T]) -> T:
        """
        Serialised load-mutate-save of one list.

        Args:
            key: Ledger key
            mutator: Called with the loaded list; mutates it in place and may return a value

        Returns:
            Whatever the mutator returned
        """
        async with self._lock:
            items = copy.deepcopy(await self._load(key))
            result = mutator(items)
            await self._store(key, items)
            return result
