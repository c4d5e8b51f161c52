"""Tests for the HTTP API."""
import time

import pytest
from fastapi.testclient import TestClient

from site_rag.config import RAGConfig
from site_rag.server import RAGServer, create_app

from conftest import FakeEmbedder, FakeRenderer, FakeStore, page

SEED = "https://site.example/"


class StubEmbedder(FakeEmbedder):
    async def close(self):
        pass

    async def health_check(self):
        return True


class StubLLM:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    async def generate_with_context(self, messages, context):
        self.calls.append((messages, context))
        if self.fail:
            raise RuntimeError("LLM server error: 503")
        return f"answer ({len(context)} chars of context)"

    async def close(self):
        pass

    async def health_check(self):
        return False


@pytest.fixture
def harness(long_text):
    config = RAGConfig(site_url=SEED, qdrant_url=":memory:", retrieval_limit=3)
    store = FakeStore()
    llm = StubLLM()
    renderers = []

    def renderer_factory():
        renderer = FakeRenderer({SEED: page(SEED + "about", body=long_text),
                                 SEED + "about": page(body="About " + long_text)})
        renderers.append(renderer)
        return renderer

    server = RAGServer(
        config,
        store=store,
        embedding_client=StubEmbedder(),
        llm_client=llm,
        renderer_factory=renderer_factory,
    )
    return server, store, llm, renderers


def wait_for_completion(client, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        status = client.get("/v1/index/status").json()
        if status["state"] == "completed":
            return status
        time.sleep(0.02)
    raise AssertionError("indexing did not complete")


def test_first_chat_triggers_indexing_once(harness):
    server, store, llm, renderers = harness

    with TestClient(create_app(server=server)) as client:
        assert client.get("/v1/index/status").json()["state"] == "not_started"

        first = client.post("/v1/chat", json={"messages": [{"role": "user", "content": "Who are you?"}]})
        second = client.post("/v1/chat", json={"query": "What do you do?"})
        status = wait_for_completion(client)

    assert first.status_code == 200
    assert second.status_code == 200
    assert len(renderers) == 1
    assert status["result"]["pages_indexed"] == 2
    assert {row["url"] for row in store.rows} == {SEED, SEED + "about"}


def test_chat_uses_retrieved_context(harness):
    server, store, llm, _ = harness

    with TestClient(create_app(server=server)) as client:
        client.post("/v1/index")
        wait_for_completion(client)
        response = client.post("/v1/chat", json={"messages": [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello!"},
            {"role": "user", "content": "What services do you offer?"},
        ]})

    body = response.json()
    assert response.status_code == 200
    assert body["indexing_state"] == "completed"
    assert body["context"].count("\n\n") == 2  # three passages
    messages, context = llm.calls[-1]
    assert context == body["context"]
    assert messages[-1]["content"] == "What services do you offer?"
    assert store.searches[-1] == 3


def test_chat_answers_without_context_when_search_fails(harness):
    server, store, llm, _ = harness
    store.search_error = ConnectionError("qdrant down")

    with TestClient(create_app(server=server)) as client:
        response = client.post("/v1/chat", json={"query": "Where are you located?"})

    assert response.status_code == 200
    assert response.json()["context"] == ""
    assert llm.calls[-1][1] == ""


def test_generation_failure_is_502(harness):
    server, _, llm, _ = harness
    llm.fail = True

    with TestClient(create_app(server=server)) as client:
        response = client.post("/v1/chat", json={"query": "Hello"})

    assert response.status_code == 502


def test_search_endpoint_returns_ranked_results(harness):
    server, _, _, _ = harness

    with TestClient(create_app(server=server)) as client:
        client.post("/v1/index")
        wait_for_completion(client)
        response = client.post("/v1/search", json={"query": "about", "limit": 2})

    body = response.json()
    assert response.status_code == 200
    assert body["query"] == "about"
    assert len(body["results"]) == 2
    assert body["results"][0]["url"] == SEED


def test_search_endpoint_reports_store_errors(harness):
    server, store, _, _ = harness
    store.search_error = ConnectionError("qdrant down")

    with TestClient(create_app(server=server)) as client:
        response = client.post("/v1/search", json={"query": "about"})

    assert response.status_code == 500


def test_index_trigger_reports_single_start(harness):
    server, _, _, renderers = harness

    with TestClient(create_app(server=server)) as client:
        first = client.post("/v1/index").json()
        second = client.post("/v1/index").json()
        wait_for_completion(client)

    assert first["started"] is True
    assert second["started"] is False
    assert len(renderers) == 1


def test_health_reports_degraded_llm(harness):
    server, _, _, _ = harness

    with TestClient(create_app(server=server)) as client:
        body = client.get("/health").json()

    assert body["status"] == "degraded"
    assert body["qdrant"]["connected"] is True
    assert body["embedding"]["connected"] is True
    assert body["llm"]["connected"] is False


def test_health_reports_stored_passages(harness):
    server, store, _, _ = harness
    server.config.site_url = "https://site.example"

    with TestClient(create_app(server=server)) as client:
        client.post("/v1/index")
        wait_for_completion(client)
        qdrant = client.get("/health").json()["qdrant"]

    assert qdrant["seed_indexed"] is True
    assert qdrant["passages"] == len(store.rows) > 0
