"""
Persistence port for the mock backend.
Supports JSON (file-based) and Memory (in-memory) ledgers.
"""
from .base import LedgerInterface, DOCUMENTS_KEY, CUSTOM_TAGS_KEY
from .memory_adapter import MemoryLedger
from .json_adapter import JSONLedger
from .factory import LedgerFactory

__all__ = [
    "LedgerInterface",
    "MemoryLedger",
    "JSONLedger",
    "LedgerFactory",
    "DOCUMENTS_KEY",
    "CUSTOM_TAGS_KEY",
]
