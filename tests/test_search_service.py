from pathlib import Path

import httpx
import pytest

from dms_core.api.dto import Document
from dms_core.api.exceptions import NotFoundError
from dms_core.services.api_switcher import create_backend_switcher
from dms_core.services.search_service import DocumentSearchService
from dms_core.utils.search_utils import DocumentFilters


@pytest.fixture
def service(switcher, file_manager):
    return DocumentSearchService(switcher, file_manager)


@pytest.mark.asyncio
async def test_refresh_then_filter_locally(service, switcher, make_file, upload_data, monkeypatch):
    await switcher.upload_document(make_file("invoice.pdf"), upload_data)
    await switcher.upload_document(make_file("passport.png", b"png", "image/png"), upload_data.model_copy(update={"major_head": "Personal", "tags": []}))

    documents = await service.refresh()
    assert len(documents) == 2

    async def no_network(*args, **kwargs):
        raise AssertionError("apply() must not search again")

    monkeypatch.setattr(switcher, "search_documents", no_network)

    filters = DocumentFilters.create(major_head="Personal")
    assert [d.file.name for d in service.apply(filters)] == ["passport.png"]
    assert service.label(filters) == "Filtered Results (1)"
    assert service.label(DocumentFilters()) == "All Documents (2)"
    assert service.empty_message(DocumentFilters.create("zzz")) == "No documents match your search criteria"


@pytest.mark.asyncio
async def test_resolve_local_copy_prefers_managed_file(service, switcher, make_file, upload_data):
    uploaded = await switcher.upload_document(make_file(), upload_data)
    [document] = await service.refresh()

    assert document.can_preview_locally is True
    assert await service.resolve_local_copy(document) == uploaded.local_path


@pytest.mark.asyncio
async def test_resolve_local_copy_downloads_when_missing(config, file_manager, ledger):
    handler_calls = []

    def handler(request):
        handler_calls.append(request.url.path)
        return httpx.Response(200, content=b"remote bytes")

    config.mock_enabled = False
    switcher = create_backend_switcher(
        config, transport=httpx.MockTransport(handler), file_manager=file_manager, ledger=ledger
    )
    service = DocumentSearchService(switcher, file_manager)
    document = Document.model_validate({"id": "42", "file_name": "scan.pdf", "file_url": "https://files.test/scan.pdf"})

    path = await service.resolve_local_copy(document)
    await switcher.close()

    assert handler_calls == ["/api/downloadDocument/42"]
    assert Path(path).read_bytes() == b"remote bytes"
    assert Path(path).name == "scan.pdf"


@pytest.mark.asyncio
async def test_resolve_local_copy_without_file(service):
    with pytest.raises(NotFoundError):
        await service.resolve_local_copy(Document(id="meta"))
