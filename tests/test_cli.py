"""Tests for the site-rag CLI."""
import pytest
from click.testing import CliRunner

from site_rag.indexing import cli as cli_module
from site_rag.indexing.models import IndexingResult


class RecordingServer:
    """Stands in for RAGServer and records the seeds it was asked to index."""

    instances = []

    def __init__(self, config):
        self.config = config
        self.orchestrator = self
        self.seeds = []
        RecordingServer.instances.append(self)

    async def startup(self):
        pass

    async def shutdown(self):
        pass

    async def index_site(self, seed_url):
        self.seeds.append(seed_url)
        return IndexingResult(seed_url=seed_url, total_urls=2, pages_indexed=2, chunks_created=5)


@pytest.fixture
def recording_server(monkeypatch):
    RecordingServer.instances = []
    monkeypatch.setattr(cli_module, "RAGServer", RecordingServer)
    monkeypatch.delenv("RAG_SITE_URL", raising=False)
    return RecordingServer


def test_index_takes_site_as_argument(recording_server):
    result = CliRunner().invoke(cli_module.cli, ["index", "https://site.example/", "--depth", "1"])

    assert result.exit_code == 0, result.output
    server = recording_server.instances[0]
    assert server.seeds == ["https://site.example/"]
    assert server.config.crawl_max_depth == 1
    assert "Indexed: 2" in result.output


def test_index_without_site_is_a_usage_error(recording_server):
    result = CliRunner().invoke(cli_module.cli, ["index"])

    assert result.exit_code == 2
    assert recording_server.instances == []
