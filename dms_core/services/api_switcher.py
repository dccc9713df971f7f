"""
Backend switcher.

The single entry point consumers call. It holds a reference to the active
DocumentBackend and delegates every operation to it; switching modes swaps
the reference instead of branching on each call.
"""
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

import httpx

from ..api.dto import (
    CleanupResponse,
    DeleteResponse,
    DocumentSearchRequest,
    DocumentSearchResponse,
    DocumentTagsRequest,
    DocumentTagsResponse,
    DocumentUploadData,
    FileValidationResult,
    OTPGenerateRequest,
    OTPGenerateResponse,
    OTPValidateRequest,
    OTPValidateResponse,
    StorageInfoResponse,
    UploadResponse,
    UploadStatusResponse,
)
from ..core.config import BackendConfig
from ..utils.validators import validate_file
from .backends import DocumentBackend, MockBackend, ProgressCallback, RealBackend, UploadFile
from .backends.real_backend import TokenProvider
from .file_manager import FileManager
from .ledger import LedgerFactory, LedgerInterface
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# on_progress(file_index, transferred_bytes, total_bytes)
MultiProgressCallback = Callable[[int, int, int], None]

Payload = Union[Mapping[str, Any], None]


class BackendSwitcher:
    """
    Routes the backend contract to the mock or the real implementation.

    Both backends are constructed up front; mock_enabled on the injected
    config decides which one is current.
    """

    def __init__(self, config: BackendConfig, mock_backend: DocumentBackend, real_backend: DocumentBackend):
        self.config = config
        self.mock_backend = mock_backend
        self.real_backend = real_backend
        self._backend = mock_backend if config.mock_enabled else real_backend

    @property
    def backend(self) -> DocumentBackend:
        """The currently active backend."""
        return self._backend

    async def initialize(self):
        await self.mock_backend.initialize()
        await self.real_backend.initialize()

    async def close(self):
        await self.mock_backend.close()
        await self.real_backend.close()

    # ------------------------------------------------------------ contract

    async def generate_otp(self, request: Union[OTPGenerateRequest, Payload]) -> OTPGenerateResponse:
        return await self._backend.generate_otp(_coerce(OTPGenerateRequest, request))

    async def validate_otp(self, request: Union[OTPValidateRequest, Payload]) -> OTPValidateResponse:
        return await self._backend.validate_otp(_coerce(OTPValidateRequest, request))

    async def upload_document(
        self,
        file: UploadFile,
        data: Union[DocumentUploadData, Payload],
        on_progress: Optional[ProgressCallback] = None
    ) -> UploadResponse:
        return await self._backend.upload_document(file, _coerce(DocumentUploadData, data), on_progress)

    async def upload_documents(
        self,
        files: Sequence[UploadFile],
        data: Union[DocumentUploadData, Payload],
        on_progress: Optional[MultiProgressCallback] = None
    ) -> List[UploadResponse]:
        """
        Upload several files with the same metadata, one after another.

        Each upload completes before the next one starts; the first failure
        propagates and the remaining files are not sent.
        """
        upload_data = _coerce(DocumentUploadData, data)
        responses = []
        for index, file in enumerate(files):
            callback = None
            if on_progress:
                def callback(transferred: int, total: int, _index: int = index):
                    on_progress(_index, transferred, total)
            responses.append(await self._backend.upload_document(file, upload_data, callback))
            logger.info(f"Uploaded file {index + 1} of {len(files)}")
        return responses

    async def search_documents(
        self,
        request: Union[DocumentSearchRequest, Payload] = None
    ) -> DocumentSearchResponse:
        return await self._backend.search_documents(_coerce(DocumentSearchRequest, request))

    async def get_document_tags(
        self,
        request: Union[DocumentTagsRequest, Payload] = None
    ) -> DocumentTagsResponse:
        return await self._backend.get_document_tags(_coerce(DocumentTagsRequest, request))

    async def download_document(
        self,
        document_id: str,
        file_name: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> str:
        return await self._backend.download_document(document_id, file_name, on_progress)

    async def delete_document(self, document_id: str) -> DeleteResponse:
        return await self._backend.delete_document(document_id)

    async def get_upload_status(self, upload_id: str) -> UploadStatusResponse:
        return await self._backend.get_upload_status(upload_id)

    def validate_file(self, file: UploadFile) -> FileValidationResult:
        """Same rule set in both modes."""
        return validate_file(file)

    async def save_tag(self, tag_name: str) -> None:
        await self._backend.save_tag(tag_name)

    async def clear_storage(self) -> None:
        await self._backend.clear_storage()

    async def get_storage_info(self) -> StorageInfoResponse:
        return await self._backend.get_storage_info()

    async def cleanup_files(self) -> CleanupResponse:
        return await self._backend.cleanup_files()

    # ------------------------------------------------------------ mode

    def is_mock_mode(self) -> bool:
        return self._backend is self.mock_backend

    def set_mock_mode(self, enabled: bool):
        self.config.mock_enabled = enabled
        self._backend = self.mock_backend if enabled else self.real_backend
        logger.info(f"API Mode switched to: {'Mock' if enabled else 'Real'}")

    def toggle_mock_mode(self):
        self.set_mock_mode(not self.is_mock_mode())

    def get_mock_otp(self) -> str:
        return self.config.static_otp


def _coerce(model, value):
    if value is None:
        return model()
    if isinstance(value, model):
        return value
    return model.model_validate(dict(value))


def create_backend_switcher(
    config: Optional[BackendConfig] = None,
    token_provider: Optional[TokenProvider] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    file_manager: Optional[FileManager] = None,
    ledger: Optional[LedgerInterface] = None
) -> BackendSwitcher:
    """
    Wire a switcher from configuration.

    Args:
        config: Runtime configuration (BackendConfig.from_env() when omitted)
        token_provider: Bearer token source for the real backend
        transport: httpx transport override for the real backend
        file_manager: Managed file store for the mock backend
        ledger: Mock persistence (built from config.mock_storage_type when omitted)

    Returns:
        BackendSwitcher whose current backend follows config.mock_enabled
    """
    config = config or BackendConfig.from_env()
    file_manager = file_manager or FileManager(config.storage_dir)
    if ledger is None:
        ledger_kwargs: Dict[str, Any] = {}
        if config.mock_db_dir is not None:
            ledger_kwargs["data_dir"] = config.mock_db_dir
        ledger = LedgerFactory.create(config.mock_storage_type, **ledger_kwargs)

    mock_backend = MockBackend(config, file_manager, ledger)
    real_backend = RealBackend(config, token_provider=token_provider, transport=transport)

    logger.info(f"Backend switcher created ({'Mock' if config.mock_enabled else 'Real'} API, {type(ledger).__name__})")
    return BackendSwitcher(config, mock_backend, real_backend)
