"""
Shared fixtures: temporary storage roots, an in-memory ledger and a
zero-latency mock configuration.
"""
from pathlib import Path

import pytest
import pytest_asyncio

from dms_core.api.dto import DocumentUploadData, Tag
from dms_core.core.config import BackendConfig
from dms_core.domain.entities import FileInfo
from dms_core.services.api_switcher import BackendSwitcher, create_backend_switcher
from dms_core.services.backends import MockBackend
from dms_core.services.file_manager import FileManager
from dms_core.services.ledger import MemoryLedger


@pytest.fixture
def config(tmp_path) -> BackendConfig:
    return BackendConfig(
        base_url="https://dms.test/api",
        mock_enabled=True,
        mock_delay_ms=0,
        storage_dir=tmp_path / "storage",
        mock_storage_type="memory",
    )


@pytest_asyncio.fixture
async def file_manager(config) -> FileManager:
    manager = FileManager(config.storage_dir)
    await manager.initialize()
    return manager


@pytest.fixture
def ledger() -> MemoryLedger:
    return MemoryLedger()


@pytest_asyncio.fixture
async def mock_backend(config, file_manager, ledger) -> MockBackend:
    backend = MockBackend(config, file_manager, ledger)
    await backend.initialize()
    return backend


@pytest_asyncio.fixture
async def switcher(config, file_manager, ledger) -> BackendSwitcher:
    switcher = create_backend_switcher(config, file_manager=file_manager, ledger=ledger)
    await switcher.initialize()
    yield switcher
    await switcher.close()


@pytest.fixture
def source_dir(tmp_path) -> Path:
    path = tmp_path / "picker"
    path.mkdir()
    return path


@pytest.fixture
def make_file(source_dir):
    """Write a picker-side file and return the FileInfo describing it."""
    def _make(name: str = "invoice.pdf", content: bytes = b"%PDF-1.4 test", mime_type: str = "application/pdf"):
        path = source_dir / name
        path.write_bytes(content)
        return FileInfo(uri=path.as_uri(), name=name, type=mime_type, size=len(content))
    return _make


@pytest.fixture
def upload_data() -> DocumentUploadData:
    return DocumentUploadData(
        major_head="Professional",
        minor_head="Accounts",
        document_date="2024-03-15",
        document_remarks="Quarterly invoice",
        tags=[Tag(tag_name="Invoice"), Tag(tag_name="Q1")],
        user_id="user_42",
    )
