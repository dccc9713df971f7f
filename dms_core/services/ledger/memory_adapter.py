"""
In-memory ledger adapter implementing LedgerInterface.
Perfect for unit tests - data is lost when the process exits.
"""
import copy
from typing import Any, Dict, List

from .base import LedgerInterface
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class MemoryLedger(LedgerInterface):
    """
    In-memory ledger using a plain dict of lists.
    """

    def __init__(self):
        super().__init__()
        self._data: Dict[str, List[Dict[str, Any]]] = {}

    async def initialize(self):
        """No-op for in-memory, but required by interface."""
        pass

    async def close(self):
        """No-op for in-memory."""
        pass

    async def _load(self, key: str) -> List[Dict[str, Any]]:
        return self._data.get(key, [])

    async def _store(self, key: str, items: List[Dict[str, Any]]) -> None:
        self._data[key] = copy.deepcopy(items)

    async def _delete(self, key: str) -> None:
        self._data.pop(key, None)
