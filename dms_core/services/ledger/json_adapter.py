"""
JSON file-based ledger adapter implementing LedgerInterface.
Stores each key in its own JSON file so mock data survives restarts.
"""
import asyncio
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from .base import LedgerInterface
from ...core.logging_config import get_logger

logger = get_logger(__name__)


class JSONLedger(LedgerInterface):
    """
    JSON file-based ledger.
    One file per key ({data_dir}/{key}.json); files are read and written
    in the default executor.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize JSON ledger.

        Args:
            data_dir: Directory holding the JSON files (defaults to data/mock_db)
        """
        super().__init__()
        if data_dir is None:
            from ...core.config import MOCK_DB_DIR
            data_dir = MOCK_DB_DIR
        self.data_dir = Path(data_dir)

    def _file_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def initialize(self):
        """Ensure the data directory exists."""
        await self._run(lambda: self.data_dir.mkdir(parents=True, exist_ok=True))

    async def close(self):
        """Nothing buffered; every write goes straight to disk."""
        pass

    async def _load(self, key: str) -> List[Dict[str, Any]]:
        path = self._file_for(key)

        def _read() -> List[Dict[str, Any]]:
            if not path.exists():
                return []
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except json.JSONDecodeError as e:
                logger.warning(f"Could not parse {path.name}, treating as empty: {e}")
                return []
            return data if isinstance(data, list) else []

        return await self._run(_read)

    async def _store(self, key: str, items: List[Dict[str, Any]]) -> None:
        path = self._file_for(key)

        def _write():
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".json.tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(items, f, indent=2, ensure_ascii=False)
            tmp_path.replace(path)

        await self._run(_write)

    async def _delete(self, key: str) -> None:
        path = self._file_for(key)
        await self._run(lambda: path.unlink() if path.exists() else None)
