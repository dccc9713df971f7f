"""
Ledger Factory for creating mock persistence adapters.
Implements Factory Pattern for plug-and-play ledger support.
"""
import os
from pathlib import Path
from typing import Optional

from .base import LedgerInterface
from .memory_adapter import MemoryLedger
from .json_adapter import JSONLedger
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class LedgerFactory:
    """
    Factory for creating ledger adapters.
    Supports JSON (file-based) and Memory (in-memory) backends.
    """

    @staticmethod
    def create(storage_type: Optional[str] = None, **kwargs) -> LedgerInterface:
        """
        Create a ledger adapter instance.

        Args:
            storage_type: 'json', 'memory', or None to read MOCK_STORAGE_TYPE
            **kwargs: data_dir for the JSON adapter

        Returns:
            LedgerInterface instance

        Examples:
            ledger = LedgerFactory.create('memory')
            ledger = LedgerFactory.create('json', data_dir=Path('data/mock_db'))
        """
        if storage_type is None:
            storage_type = os.getenv("MOCK_STORAGE_TYPE", "json")

        storage_type = storage_type.lower()

        if storage_type == "memory":
            return MemoryLedger()
        elif storage_type == "json":
            data_dir = kwargs.get("data_dir")
            if isinstance(data_dir, str):
                data_dir = Path(data_dir)
            return JSONLedger(data_dir=data_dir)
        else:
            raise ValueError(
                f"Unsupported ledger type: {storage_type}. "
                f"Supported types: 'json', 'memory'"
            )

    @staticmethod
    async def create_and_initialize(storage_type: Optional[str] = None, **kwargs) -> LedgerInterface:
        ledger = LedgerFactory.create(storage_type, **kwargs)
        await ledger.initialize()
        return ledger
