"""Tests for the Qdrant index store (embedded local mode)."""
import pytest
import pytest_asyncio

from site_rag.vector_db import QdrantIndexStore
from site_rag.vector_db.qdrant_store import passage_id

ABOUT = "https://site.example/about"
CONTACT = "https://site.example/contact"


@pytest_asyncio.fixture
async def store():
    store = QdrantIndexStore(url=":memory:", collection_name="test_docs", vector_size=3)
    await store.connect()
    await store.ensure_collection()
    yield store
    await store.disconnect()


@pytest.mark.asyncio
async def test_is_indexed_after_persist(store):
    assert await store.is_indexed(ABOUT) is False

    await store.persist(ABOUT, 0, "About us", [1.0, 0.0, 0.0])

    assert await store.is_indexed(ABOUT) is True
    assert await store.is_indexed(CONTACT) is False
    assert await store.is_indexed(ABOUT + "/") is False


@pytest.mark.asyncio
async def test_persist_appends_one_row_per_chunk(store):
    for idx, text in enumerate(["first", "second", "third"]):
        await store.persist(ABOUT, idx, text, [1.0, float(idx), 0.5])

    assert await store.count_passages() == 3


@pytest.mark.asyncio
async def test_search_ranks_by_similarity(store):
    await store.persist(ABOUT, 0, "About us", [1.0, 0.0, 0.0])
    await store.persist(CONTACT, 0, "Contact us", [0.0, 1.0, 0.0])
    await store.persist(CONTACT, 1, "Opening hours", [0.0, 0.9, 0.1])

    results = await store.search([0.0, 1.0, 0.0], limit=2)

    assert [r.text for r in results] == ["Contact us", "Opening hours"]
    assert results[0].url == CONTACT
    assert results[0].chunk_index == 0
    assert results[0].score >= results[1].score


@pytest.mark.asyncio
async def test_ensure_collection_is_idempotent(store):
    await store.persist(ABOUT, 0, "About us", [1.0, 0.0, 0.0])

    await store.ensure_collection()

    assert await store.is_indexed(ABOUT) is True


@pytest.mark.asyncio
async def test_calls_require_connection():
    store = QdrantIndexStore(url=":memory:", vector_size=3)

    with pytest.raises(RuntimeError):
        await store.is_indexed(ABOUT)


def test_passage_ids_are_stable_per_chunk():
    assert passage_id(ABOUT, 0) == passage_id(ABOUT, 0)
    assert passage_id(ABOUT, 0) != passage_id(ABOUT, 1)
    assert passage_id(ABOUT, 0) != passage_id(CONTACT, 0)
