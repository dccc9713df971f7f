"""
Real document backend.

Talks to the remote DMS service over HTTP with a shared httpx.AsyncClient.
Every request carries the current bearer token in a `token` header, and a
2xx body whose `status` flag is falsy is treated as a failure.
"""
import asyncio
import json
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx

from ...api.dto import (
    CleanupResponse,
    DeleteResponse,
    Document,
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
    ApiResponseError,
    DocumentNotFoundError,
    FileOperationError,
    ModeError,
    NetworkError,
    NetworkTimeoutError,
    NotFoundError,
)
from ...core.config import BackendConfig
from ...utils.document_utils import uri_to_path
from .base import DocumentBackend, ProgressCallback, UploadFile, ensure_upload_file
from ...core.logging_config import get_logger

logger = get_logger(__name__)

TokenProvider = Callable[[], Optional[str]]

DOWNLOAD_CHUNK_SIZE = 64 * 1024


class _ProgressReader:
    """File wrapper that reports bytes handed to the multipart encoder."""

    def __init__(self, fileobj, total: int, on_progress: Optional[ProgressCallback]):
        self._file = fileobj
        self._total = total
        self._on_progress = on_progress
        self._transferred = 0

    def read(self, size: int = -1) -> bytes:
        chunk = self._file.read(size)
        if chunk:
            self._transferred += len(chunk)
            if self._on_progress:
                self._on_progress(self._transferred, self._total)
        return chunk

    def seek(self, offset: int, whence: int = 0) -> int:
        position = self._file.seek(offset, whence)
        self._transferred = position
        return position

    def tell(self) -> int:
        return self._file.tell()

    def fileno(self) -> int:
        return self._file.fileno()


def _failure_message(payload: Dict[str, Any]) -> str:
    message = payload.get("message")
    if not message and isinstance(payload.get("data"), str):
        message = payload["data"]
    return message or "Unknown error"


def _pick(payload: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Look a value up on the body first, then inside a nested `data` object."""
    nested = payload.get("data") if isinstance(payload.get("data"), dict) else {}
    for key in keys:
        if payload.get(key) is not None:
            return payload[key]
        if nested.get(key) is not None:
            return nested[key]
    return default


class RealBackend(DocumentBackend):
    """
    HTTP backend for the remote DMS service.

    The client is created lazily so constructing the backend never touches
    the network; tests inject an httpx.MockTransport through `transport`.
    """

    name = "real"

    def __init__(
        self,
        config: BackendConfig,
        token_provider: Optional[TokenProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize real backend.

        Args:
            config: Base URL, timeouts and download directory
            token_provider: Returns the current bearer token (or None) per request
            transport: Optional httpx transport override
        """
        self.config = config
        self.token_provider = token_provider
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=self.config.request_timeout,
                transport=self._transport,
                event_hooks={
                    "request": [self._attach_token],
                    "response": [self._log_error_response],
                },
            )
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _attach_token(self, request: httpx.Request):
        token = self.token_provider() if self.token_provider else None
        if token:
            request.headers["token"] = token

    async def _log_error_response(self, response: httpx.Response):
        if response.is_error:
            request = response.request
            logger.error(f"API Error: {request.method} {request.url} -> {response.status_code}")

    def _raise_for_status(
        self,
        response: httpx.Response,
        action: str,
        not_found: Optional[Callable[[], Exception]] = None
    ):
        if response.status_code == 404:
            if not_found:
                raise not_found()
            raise NotFoundError(f"Failed to {action}: not found")
        if not response.is_success:
            raise NetworkError(
                f"Failed to {action}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

    async def _request(
        self,
        method: str,
        path: str,
        action: str,
        timeout: Any = httpx.USE_CLIENT_DEFAULT,
        require_status: bool = True,
        not_found: Optional[Callable[[], Exception]] = None,
        **kwargs
    ) -> Dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        Raises:
            NetworkTimeoutError: the request timed out
            NetworkError: transport failure or non-2xx status
            NotFoundError: 404 (or the not_found factory's error)
            ApiResponseError: undecodable body, or status flag falsy
        """
        try:
            response = await self.client.request(method, path, timeout=timeout, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Timeout while trying to {action}: {e}")
            raise NetworkTimeoutError(f"Failed to {action}: request timed out") from e
        except httpx.TransportError as e:
            logger.error(f"Network error while trying to {action}: {e}")
            raise NetworkError(f"Failed to {action}: {e}") from e

        self._raise_for_status(response, action, not_found)

        try:
            payload = response.json()
        except ValueError as e:
            raise ApiResponseError(f"Failed to {action}: invalid response") from e
        if not isinstance(payload, dict):
            raise ApiResponseError(f"Failed to {action}: invalid response")

        if require_status and not payload.get("status"):
            raise ApiResponseError(f"Failed to {action}: {_failure_message(payload)}")
        return payload

    # ------------------------------------------------------------ auth

    async def generate_otp(self, request: OTPGenerateRequest) -> OTPGenerateResponse:
        payload = await self._request(
            "POST", "/generateOTP", "generate OTP", json=request.model_dump()
        )
        return OTPGenerateResponse(
            success=True,
            message=payload.get("message") or "",
            otp=_pick(payload, "otp"),
        )

    async def validate_otp(self, request: OTPValidateRequest) -> OTPValidateResponse:
        payload = await self._request(
            "POST", "/validateOTP", "validate OTP", json=request.model_dump()
        )
        return OTPValidateResponse(
            success=True,
            token=_pick(payload, "token"),
            message=payload.get("message") or "",
        )

    # ------------------------------------------------------------ documents

    async def upload_document(
        self,
        file: UploadFile,
        data: DocumentUploadData,
        on_progress: Optional[ProgressCallback] = None
    ) -> UploadResponse:
        """
        Multipart upload: the binary as `file`, the metadata as a JSON string
        in `data`, plus the same metadata flattened into individual fields.
        """
        file_info = await ensure_upload_file(file)
        source = uri_to_path(file_info.uri)
        metadata = data.model_dump()

        form = {
            "data": json.dumps(metadata),
            "major_head": data.major_head,
            "minor_head": data.minor_head,
            "document_date": data.document_date,
            "document_remarks": data.document_remarks,
            "tags": json.dumps(metadata["tags"]),
            "user_id": data.user_id,
        }

        loop = asyncio.get_running_loop()
        try:
            fileobj = await loop.run_in_executor(None, open, source, "rb")
        except OSError as e:
            logger.error(f"Could not open {source} for upload: {e}")
            raise FileOperationError(f"Failed to read file: {file_info.name}") from e

        try:
            reader = _ProgressReader(fileobj, file_info.size or 0, on_progress)
            payload = await self._request(
                "POST",
                "/saveDocumentEntry",
                "upload document",
                timeout=self.config.upload_timeout,
                data=form,
                files={"file": (file_info.name or source.name, reader, file_info.type or None)},
            )
        finally:
            await loop.run_in_executor(None, fileobj.close)

        document_id = _pick(payload, "document_id", "documentId", "id", default="")
        logger.info(f"Document uploaded: {file_info.name} ({document_id})")
        return UploadResponse(
            success=True,
            message=payload.get("message") or "Document uploaded successfully",
            document_id=str(document_id),
        )

    async def search_documents(self, request: DocumentSearchRequest) -> DocumentSearchResponse:
        payload = await self._request(
            "POST", "/searchDocumentEntry", "search documents", json=request.to_payload()
        )

        data = payload.get("data")
        if isinstance(data, dict):
            items: List[Any] = data.get("data") or []
        else:
            items = data or []
        documents = [Document.model_validate(item) for item in items]

        return DocumentSearchResponse(
            data=documents,
            records_total=_pick(payload, "recordsTotal", default=len(documents)),
            records_filtered=_pick(payload, "recordsFiltered", default=len(documents)),
        )

    async def get_document_tags(self, request: DocumentTagsRequest) -> DocumentTagsResponse:
        payload = await self._request(
            "POST", "/documentTags", "get document tags", json=request.model_dump()
        )
        tags = [
            Tag(tag_name=item) if isinstance(item, str) else Tag.model_validate(item)
            for item in payload.get("data") or []
        ]
        return DocumentTagsResponse(data=tags)

    async def download_document(
        self,
        document_id: str,
        file_name: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> str:
        """
        Stream the binary into the downloads directory as `file_name`.

        Bytes land in a sibling `.part` file that replaces the target only
        once the whole body has arrived, so an earlier download of the same
        name survives a failed transfer.
        """
        download_dir = Path(self.config.download_dir)
        download_path = download_dir / Path(file_name).name
        part_path = download_path.with_name(download_path.name + ".part")
        loop = asyncio.get_running_loop()

        try:
            async with self.client.stream("GET", f"/downloadDocument/{document_id}") as response:
                self._raise_for_status(response, "download document", DocumentNotFoundError)
                total = int(response.headers.get("Content-Length") or 0)

                await loop.run_in_executor(None, lambda: download_dir.mkdir(parents=True, exist_ok=True))
                fh = await loop.run_in_executor(None, open, part_path, "wb")
                try:
                    transferred = 0
                    async for chunk in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                        await loop.run_in_executor(None, fh.write, chunk)
                        transferred += len(chunk)
                        if on_progress:
                            on_progress(transferred, total)
                finally:
                    await loop.run_in_executor(None, fh.close)
            await loop.run_in_executor(None, part_path.replace, download_path)
        except httpx.TimeoutException as e:
            await self._discard(part_path)
            logger.error(f"Download timed out for {document_id}: {e}")
            raise NetworkTimeoutError("Failed to download document: request timed out") from e
        except httpx.TransportError as e:
            await self._discard(part_path)
            logger.error(f"Download failed for {document_id}: {e}")
            raise NetworkError(f"Failed to download document: {e}") from e
        except OSError as e:
            await self._discard(part_path)
            logger.error(f"Could not write download for {document_id}: {e}")
            raise FileOperationError("Failed to download document") from e

        logger.info(f"File downloaded to: {download_path}")
        return str(download_path)

    @staticmethod
    async def _discard(path: Path):
        """Remove a partially written download."""
        def _unlink():
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove partial download {path}: {e}")

        await asyncio.get_running_loop().run_in_executor(None, _unlink)

    async def delete_document(self, document_id: str) -> DeleteResponse:
        payload = await self._request(
            "DELETE",
            f"/deleteDocument/{document_id}",
            "delete document",
            not_found=DocumentNotFoundError,
        )
        return DeleteResponse(
            success=True,
            message=payload.get("message") or "Document deleted successfully",
            document_id=document_id,
        )

    async def get_upload_status(self, upload_id: str) -> UploadStatusResponse:
        # The status field here is the upload state ("completed", ...), not a success flag
        payload = await self._request(
            "GET", f"/uploadStatus/{upload_id}", "get upload status", require_status=False
        )
        fields = dict(payload)
        fields["upload_id"] = upload_id
        fields["status"] = str(fields.get("status") or "")
        fields["progress"] = int(fields.get("progress") or 0)
        return UploadStatusResponse.model_validate(fields)

    # ------------------------------------------------------------ mock-only operations

    async def save_tag(self, tag_name: str) -> None:
        # Tags are created server-side when a document carrying them is saved
        logger.info("Save tag not implemented for real API")

    async def clear_storage(self) -> None:
        logger.info("Clear storage not available for real API")

    async def get_storage_info(self) -> StorageInfoResponse:
        raise ModeError("Storage info is only available in mock mode")

    async def cleanup_files(self) -> CleanupResponse:
        raise ModeError("File cleanup is only available in mock mode")
