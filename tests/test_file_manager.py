import os
import time
from pathlib import Path

import pytest

from dms_core.api.exceptions import FileOperationError
from dms_core.domain.entities import FileInfo
from dms_core.domain.value_objects import FileCategory, StorageRoot
from dms_core.services.file_manager import FileManager
from dms_core.utils.document_utils import uri_to_path


@pytest.mark.asyncio
async def test_initialize_creates_roots_and_is_idempotent(tmp_path):
    manager = FileManager(tmp_path / "base")
    await manager.initialize()
    await manager.initialize()

    assert manager.documents_dir.is_dir()
    assert manager.temp_dir.is_dir()
    assert manager.cache_dir.is_dir()
    assert manager.documents_dir.name == "DMSDocuments"


@pytest.mark.asyncio
async def test_save_file_copies_and_keeps_source(file_manager, make_file):
    info = make_file("My Invoice (1).pdf", b"abc123")

    managed = await file_manager.save_file(info)

    local = Path(managed.local_path)
    assert local.read_bytes() == b"abc123"
    assert local.parent == file_manager.documents_dir / "documents"
    assert local.name == f"{managed.id}_My_Invoice__1_.pdf"
    assert managed.name == "My_Invoice__1_.pdf"
    assert managed.size == 6
    assert managed.is_temporary is False
    assert managed.original_uri == info.uri
    # Source is copied, never moved
    assert uri_to_path(info.uri).exists()


@pytest.mark.asyncio
async def test_save_file_images_category(file_manager, make_file):
    info = make_file("photo.png", b"\x89PNG", "image/png")
    managed = await file_manager.save_file(info, FileCategory.IMAGES)
    assert Path(managed.local_path).parent == file_manager.documents_dir / "images"


@pytest.mark.asyncio
async def test_save_file_fills_size_and_type(file_manager, source_dir):
    path = source_dir / "notes.txt"
    path.write_bytes(b"hello")
    managed = await file_manager.save_file(FileInfo(uri=str(path), name="notes.txt"))
    assert managed.size == 5
    assert managed.type == "text/plain"


@pytest.mark.asyncio
async def test_save_file_missing_source_raises(file_manager, tmp_path):
    info = FileInfo(uri=str(tmp_path / "gone.pdf"), name="gone.pdf", type="application/pdf")
    with pytest.raises(FileOperationError, match="Failed to save file: gone.pdf"):
        await file_manager.save_file(info)
    assert list((file_manager.documents_dir / "documents").glob("*")) == []


@pytest.mark.asyncio
async def test_save_temporary_file(file_manager, make_file):
    managed = await file_manager.save_temporary_file(make_file())
    assert managed.is_temporary is True
    assert Path(managed.local_path).parent == file_manager.temp_dir


@pytest.mark.asyncio
async def test_delete_file_by_path_and_by_id(file_manager, make_file):
    first = await file_manager.save_file(make_file("a.pdf"))
    second = await file_manager.save_file(make_file("b.pdf"))

    assert await file_manager.delete_file(first.id, first.local_path) is True
    assert not Path(first.local_path).exists()

    # id-only lookup scans the roots recursively
    assert await file_manager.delete_file(second.id) is True
    assert not Path(second.local_path).exists()


@pytest.mark.asyncio
async def test_delete_missing_file_returns_false(file_manager):
    assert await file_manager.delete_file("nope") is False
    assert await file_manager.delete_file("nope", str(file_manager.documents_dir / "nope_x.pdf")) is False


@pytest.mark.asyncio
async def test_file_exists_and_get_file_info(file_manager, make_file):
    managed = await file_manager.save_file(make_file(content=b"12345678"))

    assert await file_manager.file_exists(managed.local_path) is True
    assert await file_manager.file_exists(managed.local_path + ".missing") is False

    stat = await file_manager.get_file_info(managed.local_path)
    assert stat.size == 8
    assert stat.is_file is True
    assert stat.is_directory is False
    assert await file_manager.get_file_info(managed.local_path + ".missing") is None


@pytest.mark.asyncio
async def test_list_files_only_regular_files(file_manager, make_file):
    await file_manager.save_temporary_file(make_file("one.pdf"))
    await file_manager.save_temporary_file(make_file("two.pdf"))
    (file_manager.temp_dir / "subdir").mkdir()

    files = await file_manager.list_files(StorageRoot.TEMP)
    assert len(files) == 2
    assert all(Path(p).is_file() for p in files)
    assert await file_manager.list_files("cache") == []


@pytest.mark.asyncio
async def test_clean_temporary_files_respects_age(file_manager, make_file):
    old = await file_manager.save_temporary_file(make_file("old.pdf"))
    fresh = await file_manager.save_temporary_file(make_file("fresh.pdf"))
    two_days_ago = time.time() - 48 * 60 * 60
    os.utime(old.local_path, (two_days_ago, two_days_ago))

    assert await file_manager.clean_temporary_files(24) == 1
    assert not Path(old.local_path).exists()
    assert Path(fresh.local_path).exists()

    assert await file_manager.clean_temporary_files(0) == 1
    assert await file_manager.list_files(StorageRoot.TEMP) == []


@pytest.mark.asyncio
async def test_storage_info_sums_recursively(file_manager, make_file):
    await file_manager.save_file(make_file("a.pdf", b"x" * 100))
    await file_manager.save_file(make_file("b.png", b"y" * 50, "image/png"), FileCategory.IMAGES)
    await file_manager.save_temporary_file(make_file("c.pdf", b"z" * 10))

    info = await file_manager.get_storage_info()
    assert info.documents_size == 150
    assert info.temp_size == 10
    assert info.cache_size == 0
    assert info.total_size == 160
    assert info.to_dict()["totalSize"] == 160


@pytest.mark.asyncio
async def test_storage_info_on_missing_roots(tmp_path):
    info = await FileManager(tmp_path / "never-created").get_storage_info()
    assert info.total_size == 0


@pytest.mark.asyncio
async def test_promote_temporary_file(file_manager, make_file):
    temp = await file_manager.save_temporary_file(make_file("stage.pdf"))

    new_path = await file_manager.promote_temporary_file(temp.local_path)

    assert Path(new_path).parent == file_manager.documents_dir / "documents"
    assert Path(new_path).name == Path(temp.local_path).name
    assert not Path(temp.local_path).exists()

    with pytest.raises(FileOperationError, match="Failed to promote temporary file"):
        await file_manager.promote_temporary_file(temp.local_path)
