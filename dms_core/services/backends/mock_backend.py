"""
Mock document backend.

In-process simulation of the remote API for development and tests without
network access. Documents and custom tags live in a ledger; binaries are
copied into managed storage through the FileManager. Every call waits for
the configured artificial latency first.
"""
import asyncio
import shutil
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...api.dto import (
    CleanupResponse,
    DeleteResponse,
    Document,
    DocumentFile,
    DocumentSearchRequest,
    DocumentSearchResponse,
    DocumentTagsRequest,
    DocumentTagsResponse,
    DocumentUploadData,
    OTPGenerateRequest,
    OTPGenerateResponse,
    OTPValidateRequest,
    OTPValidateResponse,
    StorageInfoResponse,
    Tag,
    UploadResponse,
    UploadStatusResponse,
)
from ...api.exceptions import (
    DocumentNotFoundError,
    FileOperationError,
    ModeError,
    NotFoundError,
    ValidationError,
)
from ...core.config import BackendConfig
from ...domain.value_objects import FileCategory
from ...utils.document_utils import format_bytes, generate_document_id, unique_download_name
from ...utils.search_utils import DocumentFilters, filter_documents
from ..file_manager import FileManager
from ..ledger import CUSTOM_TAGS_KEY, DOCUMENTS_KEY, LedgerInterface
from .base import DocumentBackend, ProgressCallback, UploadFile, ensure_upload_file
from .mock_config import DEFAULT_TAGS, MOCK_USER_ID, create_mock_error, mock_delay
from ...core.logging_config import get_logger

logger = get_logger(__name__)


def _document_tag_names(records: List[Dict[str, Any]]) -> List[str]:
    names = []
    for record in records:
        for tag in record.get("tags") or []:
            name = tag.get("tag_name") if isinstance(tag, dict) else None
            if name:
                names.append(name)
    return names


def _dedupe_tags(*sources: List[str]) -> List[Tag]:
    """Merge tag name lists, keeping the first spelling of each case-insensitive name."""
    seen = set()
    merged = []
    for source in sources:
        for name in source:
            key = name.strip().lower()
            if key and key not in seen:
                seen.add(key)
                merged.append(Tag(tag_name=name.strip()))
    return merged


class MockBackend(DocumentBackend):
    """
    Mock backend for development and testing.

    Useful for:
    - Offline development
    - Unit and integration tests
    - Demos without a remote service
    """

    name = "mock"

    def __init__(self, config: BackendConfig, file_manager: FileManager, ledger: LedgerInterface):
        """
        Initialize mock backend.

        Args:
            config: Runtime configuration (static OTP, token, delay, download dir)
            file_manager: Managed file store used for uploaded binaries
            ledger: Persistence for documents and custom tags
        """
        self.config = config
        self.file_manager = file_manager
        self.ledger = ledger

    async def initialize(self):
        await self.file_manager.initialize()
        await self.ledger.initialize()

    async def close(self):
        await self.ledger.close()

    async def _delay(self):
        await mock_delay(self.config.mock_delay_ms)

    async def _load_documents(self) -> List[Document]:
        records = await self.ledger.read_list(DOCUMENTS_KEY)
        return [Document.model_validate(record) for record in records]

    # ------------------------------------------------------------ auth

    async def generate_otp(self, request: OTPGenerateRequest) -> OTPGenerateResponse:
        """Always succeeds for a plausible number and hands back the static OTP."""
        await self._delay()
        logger.info(f"Mock API: Generate OTP for {request.mobile_number}")

        if not request.mobile_number or len(request.mobile_number) < 10:
            raise create_mock_error("Invalid mobile number", ValidationError)

        return OTPGenerateResponse(
            success=True,
            message=f"OTP sent to {request.mobile_number}",
            otp=self.config.static_otp,
        )

    async def validate_otp(self, request: OTPValidateRequest) -> OTPValidateResponse:
        await self._delay()
        logger.info(f"Mock API: Validate OTP for {request.mobile_number}")

        if request.otp != self.config.static_otp:
            raise create_mock_error("Invalid OTP", ValidationError)

        return OTPValidateResponse(
            success=True,
            token=self.config.mock_token,
            message="OTP validated successfully",
        )

    # ------------------------------------------------------------ documents

    async def upload_document(
        self,
        file: UploadFile,
        data: DocumentUploadData,
        on_progress: Optional[ProgressCallback] = None
    ) -> UploadResponse:
        """
        Copy the file into managed storage and append a ledger entry.

        If the managed copy fails the entry is still recorded against the
        original uri (managed_file_saved=False in the response), matching
        the camera/gallery import behaviour of the app.
        """
        file_info = await ensure_upload_file(file)
        await self._delay()
        logger.info(f"Mock API: Upload Document {file_info.name} ({data.major_head}/{data.minor_head})")

        document_id = generate_document_id()
        category = FileCategory.for_mime_type(file_info.type)

        managed_file = None
        try:
            managed_file = await self.file_manager.save_file(file_info, category)
        except FileOperationError as e:
            logger.warning(f"⚠️  Managed copy failed, keeping original uri for {file_info.name}: {e}")

        if managed_file is not None:
            document_file = DocumentFile(
                id=managed_file.id,
                name=managed_file.name,
                type=managed_file.type,
                size=managed_file.size,
                uri=managed_file.original_uri,
                local_path=managed_file.local_path,
                managed_file=True,
            )
        else:
            document_file = DocumentFile(
                name=file_info.name or "document.pdf",
                type=file_info.type or "application/pdf",
                size=file_info.size or 0,
                uri=file_info.uri,
                managed_file=False,
            )

        document = Document(
            id=document_id,
            major_head=data.major_head,
            minor_head=data.minor_head,
            document_date=data.document_date,
            document_remarks=data.document_remarks,
            tags=data.tags,
            file=document_file,
            uploaded_at=datetime.now().isoformat(),
            uploaded_by=data.user_id or MOCK_USER_ID,
        )

        record = document.to_record()
        await self.ledger.update_list(DOCUMENTS_KEY, lambda docs: docs.append(record))

        if on_progress:
            on_progress(document_file.size, document_file.size)

        return UploadResponse(
            success=True,
            message="Document uploaded successfully",
            document_id=document_id,
            document=document,
            managed_file_saved=managed_file is not None,
            local_path=managed_file.local_path if managed_file else None,
        )

    async def search_documents(self, request: DocumentSearchRequest) -> DocumentSearchResponse:
        """
        Apply the same predicates as the local filter engine, then paginate.
        Without a length the whole filtered collection is returned.
        """
        await self._delay()
        logger.info(f"Mock API: Search Documents {request.to_payload()}")

        all_docs = await self._load_documents()
        filtered = filter_documents(all_docs, DocumentFilters.from_request(request))
        if request.uploaded_by:
            filtered = [doc for doc in filtered if doc.uploaded_by == request.uploaded_by]

        start = max(request.start or 0, 0)
        if request.length is not None:
            page = filtered[start:start + max(request.length, 0)]
        else:
            page = filtered[start:]

        return DocumentSearchResponse(
            data=page,
            records_total=len(all_docs),
            records_filtered=len(filtered),
        )

    async def get_document_tags(self, request: DocumentTagsRequest) -> DocumentTagsResponse:
        """Tags used on documents, then custom tags, then the seed list."""
        await self._delay()

        records = await self.ledger.read_list(DOCUMENTS_KEY)
        custom = await self.ledger.read_list(CUSTOM_TAGS_KEY)
        document_names = _document_tag_names(records)
        custom_names = [tag.get("tag_name", "") for tag in custom]

        tags = _dedupe_tags(document_names, custom_names, DEFAULT_TAGS)

        term = (request.term or "").strip().lower()
        if term:
            tags = [tag for tag in tags if term in tag.tag_name.lower()]

        logger.info(
            f"Mock API: Returning {len(tags)} tags "
            f"({len(set(n.lower() for n in document_names))} from documents, {len(custom_names)} custom)"
        )
        return DocumentTagsResponse(data=tags)

    async def save_tag(self, tag_name: str) -> None:
        """Persist a custom tag unless the name already exists in any tag source."""
        name = (tag_name or "").strip()
        if not name:
            raise ValidationError("Tag name cannot be empty")
        key = name.lower()

        records = await self.ledger.read_list(DOCUMENTS_KEY)
        known = {n.lower() for n in _document_tag_names(records)}
        known.update(n.lower() for n in DEFAULT_TAGS)

        def _append(custom_tags: List[Dict[str, Any]]) -> bool:
            if key in known or any(t.get("tag_name", "").lower() == key for t in custom_tags):
                return False
            custom_tags.append({"tag_name": name})
            return True

        if await self.ledger.update_list(CUSTOM_TAGS_KEY, _append):
            logger.info(f"New custom tag saved: {name}")
        else:
            logger.info(f"Tag already exists: {name}")

    async def download_document(
        self,
        document_id: str,
        file_name: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> str:
        """Copy the managed file into the downloads directory under a collision-safe name."""
        await self._delay()
        logger.info(f"Mock API: Download Document {document_id} {file_name}")

        document = next((doc for doc in await self._load_documents() if doc.id == document_id), None)
        if document is None:
            raise DocumentNotFoundError()
        if not document.has_local_file:
            raise NotFoundError("File not available for download")
        if not await self.file_manager.file_exists(document.file.local_path):
            raise NotFoundError("File not found on device")

        download_dir = Path(self.config.download_dir)
        download_path = download_dir / unique_download_name(Path(file_name or document.file.name).name)
        source = Path(document.file.local_path)

        def _copy() -> int:
            download_dir.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, download_path)
            return download_path.stat().st_size

        try:
            loop = asyncio.get_running_loop()
            size = await loop.run_in_executor(None, _copy)
        except OSError as e:
            logger.error(f"Mock download failed for {document_id}: {e}")
            raise FileOperationError("Failed to download document") from e

        if on_progress:
            on_progress(size, size)
        logger.info(f"Mock API: File downloaded to: {download_path}")
        return str(download_path)

    async def delete_document(self, document_id: str) -> DeleteResponse:
        await self._delay()

        document = next((doc for doc in await self._load_documents() if doc.id == document_id), None)
        if document is None:
            raise DocumentNotFoundError()

        if document.file and document.file.managed_file and document.file.id:
            await self.file_manager.delete_file(document.file.id, document.file.local_path)
            logger.info(f"Managed file deleted: {document.file.local_path}")

        def _remove(docs: List[Dict[str, Any]]):
            docs[:] = [doc for doc in docs if doc.get("id") != document_id]

        await self.ledger.update_list(DOCUMENTS_KEY, _remove)

        return DeleteResponse(
            success=True,
            message="Document deleted successfully",
            document_id=document_id,
        )

    async def get_upload_status(self, upload_id: str) -> UploadStatusResponse:
        raise ModeError("Upload status not available in mock mode")

    # ------------------------------------------------------------ maintenance

    async def clear_storage(self) -> None:
        """Drop all mock documents, custom tags and temporary files."""
        await self.ledger.remove(DOCUMENTS_KEY)
        await self.ledger.remove(CUSTOM_TAGS_KEY)
        await self.file_manager.clean_temporary_files(0)
        logger.info("Mock storage and file manager storage cleared")

    async def get_storage_info(self) -> StorageInfoResponse:
        storage_info = await self.file_manager.get_storage_info()
        documents_count = len(await self.ledger.read_list(DOCUMENTS_KEY))

        return StorageInfoResponse(
            storage=storage_info.to_dict(),
            documents_count=documents_count,
            formatted_sizes={
                "documents": format_bytes(storage_info.documents_size),
                "temp": format_bytes(storage_info.temp_size),
                "cache": format_bytes(storage_info.cache_size),
                "total": format_bytes(storage_info.total_size),
            },
        )

    async def cleanup_files(self) -> CleanupResponse:
        deleted_count = await self.file_manager.clean_temporary_files(24)
        return CleanupResponse(
            message=f"Cleaned up {deleted_count} temporary files",
            deleted_count=deleted_count,
        )
