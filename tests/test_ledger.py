import asyncio

import pytest

from dms_core.services.ledger import (
    CUSTOM_TAGS_KEY,
    DOCUMENTS_KEY,
    JSONLedger,
    LedgerFactory,
    MemoryLedger,
)


@pytest.fixture(params=["memory", "json"])
def any_ledger(request, tmp_path):
    if request.param == "memory":
        return MemoryLedger()
    return JSONLedger(data_dir=tmp_path / "mock_db")


@pytest.mark.asyncio
async def test_read_missing_key_is_empty(any_ledger):
    await any_ledger.initialize()
    assert await any_ledger.read_list(DOCUMENTS_KEY) == []


@pytest.mark.asyncio
async def test_write_read_remove(any_ledger):
    await any_ledger.initialize()
    await any_ledger.write_list(CUSTOM_TAGS_KEY, [{"tag_name": "Urgent"}])
    assert await any_ledger.read_list(CUSTOM_TAGS_KEY) == [{"tag_name": "Urgent"}]

    await any_ledger.remove(CUSTOM_TAGS_KEY)
    assert await any_ledger.read_list(CUSTOM_TAGS_KEY) == []


@pytest.mark.asyncio
async def test_read_list_returns_a_copy(any_ledger):
    await any_ledger.initialize()
    await any_ledger.write_list(DOCUMENTS_KEY, [{"id": "a"}])
    items = await any_ledger.read_list(DOCUMENTS_KEY)
    items.append({"id": "b"})
    items[0]["id"] = "changed"
    assert await any_ledger.read_list(DOCUMENTS_KEY) == [{"id": "a"}]


@pytest.mark.asyncio
async def test_update_list_returns_mutator_result(any_ledger):
    await any_ledger.initialize()
    result = await any_ledger.update_list(DOCUMENTS_KEY, lambda docs: docs.append({"id": "1"}) or len(docs))
    assert result == 1
    assert await any_ledger.read_list(DOCUMENTS_KEY) == [{"id": "1"}]


@pytest.mark.asyncio
async def test_concurrent_updates_never_lose_entries(any_ledger):
    await any_ledger.initialize()

    async def append(i):
        await any_ledger.update_list(DOCUMENTS_KEY, lambda docs: docs.append({"id": str(i)}))

    await asyncio.gather(*(append(i) for i in range(25)))

    stored = await any_ledger.read_list(DOCUMENTS_KEY)
    assert sorted(int(doc["id"]) for doc in stored) == list(range(25))


@pytest.mark.asyncio
async def test_json_ledger_persists_across_instances(tmp_path):
    data_dir = tmp_path / "mock_db"
    first = JSONLedger(data_dir=data_dir)
    await first.initialize()
    await first.write_list(DOCUMENTS_KEY, [{"id": "doc_1"}])

    second = JSONLedger(data_dir=data_dir)
    assert await second.read_list(DOCUMENTS_KEY) == [{"id": "doc_1"}]
    assert (data_dir / "uploadedDocuments.json").exists()


@pytest.mark.asyncio
async def test_json_ledger_treats_corrupt_file_as_empty(tmp_path):
    data_dir = tmp_path / "mock_db"
    data_dir.mkdir()
    (data_dir / "customTags.json").write_text("{not json", encoding="utf-8")
    assert await JSONLedger(data_dir=data_dir).read_list(CUSTOM_TAGS_KEY) == []


def test_factory_selects_adapter(tmp_path):
    assert isinstance(LedgerFactory.create("memory"), MemoryLedger)
    ledger = LedgerFactory.create("JSON", data_dir=str(tmp_path))
    assert isinstance(ledger, JSONLedger)
    assert ledger.data_dir == tmp_path
    with pytest.raises(ValueError, match="Unsupported ledger type"):
        LedgerFactory.create("sqlite")


@pytest.mark.asyncio
async def test_factory_create_and_initialize(tmp_path):
    ledger = await LedgerFactory.create_and_initialize("json", data_dir=tmp_path / "db")
    assert (tmp_path / "db").is_dir()
    await ledger.close()
