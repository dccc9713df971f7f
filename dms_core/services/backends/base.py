"""
Base document backend interface.

The mock and the real backend both inherit from this class; the switcher
only ever talks to a DocumentBackend, so every consumer-facing method has
the same signature and the same response models on both routes.
"""
import asyncio
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional, Union

from ...api.dto import (
    CleanupResponse,
    DeleteResponse,
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
    UploadResponse,
    UploadStatusResponse,
)
from ...api.exceptions import ValidationError
from ...domain.entities import FileInfo
from ...utils.document_utils import uri_to_path
from ...utils.validators import validate_file

# on_progress(transferred_bytes, total_bytes); total is 0 when unknown
ProgressCallback = Callable[[int, int], None]

UploadFile = Union[FileInfo, Mapping[str, Any], None]


async def ensure_upload_file(file: UploadFile) -> FileInfo:
    """
    Normalise and validate the file handed to upload_document.

    A missing size is read from disk in the default executor.

    Raises:
        ValidationError: no file, no uri, or the upload rules reject it
    """
    if file is None:
        raise ValidationError("No file provided for upload")
    info = file if isinstance(file, FileInfo) else FileInfo.from_dict(file)
    if not info.uri:
        raise ValidationError("No file provided for upload")

    if info.size is None:
        path = uri_to_path(info.uri)

        def _size() -> Optional[int]:
            return path.stat().st_size if path.is_file() else None

        size = await asyncio.get_running_loop().run_in_executor(None, _size)
        if size is not None:
            info = replace(info, size=size)

    result = validate_file(info)
    if not result.is_valid:
        raise ValidationError(result.error)
    return info


class DocumentBackend(ABC):
    """
    Abstract base class for document backends.

    Not every method is meaningful on both routes. get_upload_status only
    works against the remote service and save_tag only persists in the mock.
    The storage maintenance methods act on the mock's local store.
    """

    name: str = "base"

    async def initialize(self):
        """Prepare resources (directories, ledgers, clients)."""
        pass

    async def close(self):
        """Release resources."""
        pass

    @abstractmethod
    async def generate_otp(self, request: OTPGenerateRequest) -> OTPGenerateResponse:
        """
        Ask for an OTP to be sent to a mobile number.

        Args:
            request: {mobile_number}

        Returns:
            OTPGenerateResponse (the mock also returns the otp itself)
        """
        pass

    @abstractmethod
    async def validate_otp(self, request: OTPValidateRequest) -> OTPValidateResponse:
        """Exchange mobile number + OTP for a bearer token."""
        pass

    @abstractmethod
    async def upload_document(
        self,
        file: UploadFile,
        data: DocumentUploadData,
        on_progress: Optional[ProgressCallback] = None
    ) -> UploadResponse:
        """
        Persist one document and its binary.

        Raises:
            ValidationError: missing file/uri or rejected by validate_file
        """
        pass

    @abstractmethod
    async def search_documents(self, request: DocumentSearchRequest) -> DocumentSearchResponse:
        """Search documents; an empty request fetches everything."""
        pass

    @abstractmethod
    async def get_document_tags(self, request: DocumentTagsRequest) -> DocumentTagsResponse:
        """Known tags, narrowed by a case-insensitive substring when term is set."""
        pass

    @abstractmethod
    async def download_document(
        self,
        document_id: str,
        file_name: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> str:
        """
        Materialise a document's file locally.

        Returns:
            Absolute local path of the downloaded file
        """
        pass

    @abstractmethod
    async def delete_document(self, document_id: str) -> DeleteResponse:
        """Remove a document record and its managed file, if any."""
        pass

    @abstractmethod
    async def get_upload_status(self, upload_id: str) -> UploadStatusResponse:
        pass

    @abstractmethod
    async def save_tag(self, tag_name: str) -> None:
        pass

    @abstractmethod
    async def clear_storage(self) -> None:
        pass

    @abstractmethod
    async def get_storage_info(self) -> StorageInfoResponse:
        pass

    @abstractmethod
    async def cleanup_files(self) -> CleanupResponse:
        pass
