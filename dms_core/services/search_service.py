"""
Document search service.

Fetches the whole collection once, then narrows it locally on every filter
change. Opening a document prefers the managed local copy and falls back to
a download through the active backend.
"""
from typing import List, Optional

from ..api.dto import Document, DocumentSearchRequest
from ..api.exceptions import NotFoundError
from ..utils.search_utils import (
    DocumentFilters,
    empty_state_message,
    filter_documents,
    results_label,
)
from .api_switcher import BackendSwitcher
from .backends import ProgressCallback
from .file_manager import FileManager
from ..core.logging_config import get_logger

logger = get_logger(__name__)


class DocumentSearchService:
    def __init__(self, switcher: BackendSwitcher, file_manager: FileManager):
        self.switcher = switcher
        self.file_manager = file_manager
        self._documents: List[Document] = []

    @property
    def documents(self) -> List[Document]:
        """The collection from the last refresh()."""
        return list(self._documents)

    async def refresh(self) -> List[Document]:
        """Fetch every document (an empty search request) and cache the result."""
        response = await self.switcher.search_documents(DocumentSearchRequest())
        self._documents = list(response.data)
        logger.info(f"Loaded {len(self._documents)} documents")
        return self.documents

    def apply(self, filters: DocumentFilters) -> List[Document]:
        """Narrow the cached collection; no backend call."""
        return filter_documents(self._documents, filters)

    def label(self, filters: DocumentFilters) -> str:
        return results_label(filters, len(self.apply(filters)))

    def empty_message(self, filters: DocumentFilters) -> str:
        return empty_state_message(filters)

    async def resolve_local_copy(
        self,
        document: Document,
        on_progress: Optional[ProgressCallback] = None
    ) -> str:
        """
        Local path to open a document from.

        Returns the managed copy when it still exists on disk, otherwise
        downloads the file through the active backend.

        Raises:
            NotFoundError: the document has no file to open
        """
        if document.file is None:
            raise NotFoundError("File not available for download")

        local_path = document.file.local_path
        if local_path and await self.file_manager.file_exists(local_path):
            return local_path

        logger.info(f"No local copy for {document.id}, downloading")
        return await self.switcher.download_document(document.id, document.file.name, on_progress)
