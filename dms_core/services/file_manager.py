"""
Local file manager.

Owns the app's storage tree: a permanent store (DMSDocuments, split into
documents/ and images/), a temporary staging area (DMSTemp) and a cache
(DMSCache). Picked files are always copied in, never moved, so the picker's
own asset stays valid and the app never depends on a short-lived picker uri.
"""
import asyncio
import os
import shutil
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from ..api.exceptions import FileOperationError
from ..domain.entities import FileInfo, FileStat, ManagedFile, StorageInfo
from ..domain.value_objects import FileCategory, FilePath, FileId, StorageRoot
from ..utils.document_utils import (
    generate_file_id,
    mime_type_from_extension,
    sanitize_file_name,
    uri_to_path,
)
from ..core.logging_config import get_logger

logger = get_logger(__name__)

DOCUMENTS_DIR_NAME = "DMSDocuments"
TEMP_DIR_NAME = "DMSTemp"
CACHE_DIR_NAME = "DMSCache"


class FileManager:
    """
    Managed local file store.
    All filesystem work runs in the default executor so the event loop
    is never blocked by a copy or a directory walk.
    """

    def __init__(self, base_dir: Union[str, Path]):
        """
        Initialize file manager.

        Args:
            base_dir: Platform storage root; the three managed roots are created under it
        """
        self.base_dir = Path(base_dir)
        self.documents_dir = self.base_dir / DOCUMENTS_DIR_NAME
        self.temp_dir = self.base_dir / TEMP_DIR_NAME
        self.cache_dir = self.base_dir / CACHE_DIR_NAME

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    def _root_path(self, directory: Union[StorageRoot, str]) -> Path:
        root = StorageRoot(directory)
        if root == StorageRoot.TEMP:
            return self.temp_dir
        if root == StorageRoot.CACHE:
            return self.cache_dir
        return self.documents_dir

    async def initialize(self):
        """Create any missing root directory. Safe to call repeatedly and concurrently."""
        def _create():
            for directory in (self.documents_dir, self.temp_dir, self.cache_dir):
                if not directory.exists():
                    directory.mkdir(parents=True, exist_ok=True)
                    logger.info(f"Created directory: {directory}")

        try:
            await self._run(_create)
        except OSError as e:
            logger.error(f"Failed to initialize file manager: {e}")
            raise FileOperationError("File manager initialization failed") from e

    async def _copy_in(self, file_info: FileInfo, destination_dir: Path, is_temporary: bool) -> ManagedFile:
        await self.initialize()

        file_id = generate_file_id()
        file_name = sanitize_file_name(file_info.name)
        local_path = destination_dir / f"{file_id}_{file_name}"
        source = uri_to_path(file_info.uri) if file_info.uri else None

        def _copy() -> int:
            if source is None or not source.is_file():
                raise FileNotFoundError(f"Source file is not readable: {file_info.uri}")
            destination_dir.mkdir(parents=True, exist_ok=True)
            try:
                shutil.copyfile(source, local_path)
                return local_path.stat().st_size
            except OSError:
                # Never leave a partial copy behind
                if local_path.exists():
                    local_path.unlink()
                raise

        try:
            copied_size = await self._run(_copy)
        except OSError as e:
            kind = "temporary file" if is_temporary else "file"
            logger.error(f"Failed to save {kind} {file_info.name}: {e}")
            raise FileOperationError(f"Failed to save {kind}: {file_info.name}") from e

        managed_file = ManagedFile(
            id=FileId(file_id),
            original_uri=file_info.uri,
            local_path=FilePath(str(local_path)),
            name=file_name,
            type=file_info.type or mime_type_from_extension(file_name),
            size=file_info.size or copied_size,
            created_at=datetime.now().isoformat(),
            is_temporary=is_temporary,
        )
        logger.info(f"{'Temporary file' if is_temporary else 'File'} saved: {file_name} -> {local_path}")
        return managed_file

    async def save_file(
        self,
        file_info: FileInfo,
        category: Union[FileCategory, str] = FileCategory.DOCUMENTS
    ) -> ManagedFile:
        """
        Copy a picked file into the permanent store.

        Args:
            file_info: Source uri, name, type and optional size
            category: documents or images sub-directory

        Returns:
            ManagedFile with is_temporary=False

        Raises:
            FileOperationError: source unreadable or copy failed
        """
        category_dir = self.documents_dir / FileCategory(category).value
        return await self._copy_in(file_info, category_dir, is_temporary=False)

    async def save_temporary_file(self, file_info: FileInfo) -> ManagedFile:
        """Copy a picked file into the temporary staging area (is_temporary=True)."""
        return await self._copy_in(file_info, self.temp_dir, is_temporary=True)

    async def delete_file(self, file_id: str, file_path: Optional[str] = None) -> bool:
        """
        Delete a managed file by explicit path or, failing that, by id prefix.

        Returns:
            True if a file was deleted, False if nothing matched

        Raises:
            FileOperationError: the file exists but could not be removed
        """
        path_to_delete = Path(file_path) if file_path else await self._find_file_by_id(file_id)
        if path_to_delete is None:
            return False

        def _delete() -> bool:
            if not path_to_delete.is_file():
                return False
            path_to_delete.unlink()
            return True

        try:
            deleted = await self._run(_delete)
        except OSError as e:
            logger.error(f"Failed to delete file {path_to_delete}: {e}")
            raise FileOperationError(f"Failed to delete file: {path_to_delete.name}") from e

        if deleted:
            logger.info(f"File deleted: {path_to_delete}")
        return deleted

    async def file_exists(self, file_path: str) -> bool:
        try:
            return await self._run(os.path.exists, file_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to check file existence for {file_path}: {e}")
            return False

    async def get_file_info(self, file_path: str) -> Optional[FileStat]:
        """Stat a path; None if it does not exist."""
        def _stat() -> Optional[FileStat]:
            path = Path(file_path)
            if not path.exists():
                return None
            stats = path.stat()
            return FileStat(
                path=str(path),
                name=path.name,
                size=stats.st_size,
                modified_at=datetime.fromtimestamp(stats.st_mtime),
                is_file=path.is_file(),
                is_directory=path.is_dir(),
            )

        try:
            return await self._run(_stat)
        except OSError as e:
            logger.warning(f"Failed to get file info for {file_path}: {e}")
            return None

    async def list_files(self, directory: Union[StorageRoot, str] = StorageRoot.DOCUMENTS) -> List[str]:
        """Paths of regular files directly inside a root (empty if the root is absent)."""
        dir_path = self._root_path(directory)

        def _list() -> List[str]:
            if not dir_path.exists():
                return []
            with os.scandir(dir_path) as entries:
                return sorted(entry.path for entry in entries if entry.is_file())

        try:
            return await self._run(_list)
        except OSError as e:
            logger.warning(f"Failed to list files in {dir_path}: {e}")
            return []

    async def clean_temporary_files(self, older_than_hours: float = 24) -> int:
        """
        Delete temporary files whose modification time is older than the threshold.
        older_than_hours=0 deletes every temporary file.

        Returns:
            Number of files deleted
        """
        cutoff = time.time() - older_than_hours * 60 * 60

        def _clean() -> int:
            if not self.temp_dir.exists():
                return 0
            deleted_count = 0
            with os.scandir(self.temp_dir) as entries:
                for entry in entries:
                    try:
                        if not entry.is_file():
                            continue
                        if older_than_hours <= 0 or entry.stat().st_mtime < cutoff:
                            os.unlink(entry.path)
                            deleted_count += 1
                    except OSError as e:
                        logger.warning(f"Could not clean temporary file {entry.path}: {e}")
            return deleted_count

        deleted_count = await self._run(_clean)
        logger.info(f"Cleaned {deleted_count} temporary files")
        return deleted_count

    async def get_storage_info(self) -> StorageInfo:
        """Recursive byte totals per root."""
        documents_size, temp_size, cache_size = await asyncio.gather(
            self._run(self._directory_size, self.documents_dir),
            self._run(self._directory_size, self.temp_dir),
            self._run(self._directory_size, self.cache_dir),
        )
        return StorageInfo(
            documents_size=documents_size,
            temp_size=temp_size,
            cache_size=cache_size,
        )

    async def promote_temporary_file(
        self,
        temp_file_path: str,
        category: Union[FileCategory, str] = FileCategory.DOCUMENTS
    ) -> str:
        """
        Move a staged temporary file into the permanent store, keeping its name.

        Returns:
            New absolute path

        Raises:
            FileOperationError: source missing or move failed
        """
        source = Path(temp_file_path)
        category_dir = self.documents_dir / FileCategory(category).value
        new_path = category_dir / source.name

        def _move():
            if not source.is_file():
                raise FileNotFoundError(f"Temporary file not found: {source}")
            category_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(new_path))

        try:
            await self._run(_move)
        except OSError as e:
            logger.error(f"Failed to promote temporary file {source}: {e}")
            raise FileOperationError("Failed to promote temporary file") from e

        logger.info(f"File promoted: {source} -> {new_path}")
        return str(new_path)

    async def _find_file_by_id(self, file_id: str) -> Optional[Path]:
        """Scan all roots (recursively) for a file named {file_id}_*."""
        if not file_id:
            return None
        prefix = f"{file_id}_"

        def _find() -> Optional[Path]:
            for root in (self.documents_dir, self.temp_dir, self.cache_dir):
                if not root.exists():
                    continue
                for dirpath, _dirnames, filenames in os.walk(root):
                    for name in filenames:
                        if name.startswith(prefix):
                            return Path(dirpath) / name
            return None

        try:
            return await self._run(_find)
        except OSError as e:
            logger.warning(f"Failed to find file by id {file_id}: {e}")
            return None

    @staticmethod
    def _directory_size(dir_path: Path) -> int:
        if not dir_path.exists():
            return 0
        total_size = 0
        try:
            entries = list(os.scandir(dir_path))
        except OSError as e:
            logger.warning(f"Failed to read directory {dir_path}: {e}")
            return 0
        for entry in entries:
            try:
                if entry.is_file(follow_symlinks=False):
                    total_size += entry.stat(follow_symlinks=False).st_size
                elif entry.is_dir(follow_symlinks=False):
                    total_size += FileManager._directory_size(Path(entry.path))
            except OSError as e:
                logger.warning(f"Skipping {entry.path} while sizing {dir_path}: {e}")
        return total_size
