"""CLI interface for site crawling, indexing and search."""
import asyncio
import logging
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from ..config import RAGConfig
from ..errors import ConfigurationError
from ..server import RAGServer
from .browser import PlaywrightRenderer
from .crawler import SiteCrawler

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _load_config(site_url: Optional[str] = None) -> RAGConfig:
    try:
        return RAGConfig.from_env(site_url=site_url)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """Site RAG CLI - crawl a website and index it into Qdrant."""
    load_dotenv()
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument("url")
@click.option("--depth", "-d", default=2, show_default=True, type=click.IntRange(min=0),
              help="Link depth to follow from URL")
@click.option("--timeout", default=30.0, show_default=True, help="Page timeout in seconds")
def crawl(url: str, depth: int, timeout: float):
    """List the same-origin pages reachable from URL (nothing is indexed)."""

    async def run():
        async with PlaywrightRenderer(timeout=timeout) as renderer:
            return await SiteCrawler(renderer).crawl(url, depth)

    try:
        urls = asyncio.run(run())
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(2)

    for found in urls:
        click.echo(found)
    click.echo(f"\n{len(urls)} pages found", err=True)


@cli.command()
@click.argument("url", required=False)
@click.option("--depth", "-d", type=click.IntRange(min=0), help="Override RAG_CRAWL_MAX_DEPTH")
def index(url: Optional[str], depth: Optional[int]):
    """Run one indexing pass over URL (default: RAG_SITE_URL) in the foreground."""
    config = _load_config(url)
    if depth is not None:
        config.crawl_max_depth = depth

    server = RAGServer(config)

    async def run():
        await server.startup()
        try:
            return await server.orchestrator.index_site(config.site_url)
        finally:
            await server.shutdown()

    result = asyncio.run(run())

    click.echo("\n" + "=" * 60)
    click.echo("INDEXING RESULTS")
    click.echo("=" * 60)
    click.echo(f"\nSite: {result.seed_url}")
    click.echo(f"  Pages found: {result.total_urls}")
    click.echo(f"  Indexed: {result.pages_indexed}")
    click.echo(f"  Already indexed: {result.pages_skipped}")
    click.echo(f"  Failed: {result.pages_failed}")
    click.echo(f"  Chunks: {result.chunks_created}")
    click.echo(f"  Duration: {result.duration_seconds:.1f}s")

    if result.errors:
        click.echo(f"  Errors: {len(result.errors)}")
        for err in result.errors[:5]:
            click.echo(f"    - {err[:100]}")
        sys.exit(1)


@cli.command()
@click.argument("query")
@click.option("--limit", "-n", default=5, show_default=True, type=click.IntRange(min=1),
              help="Number of passages")
def search(query: str, limit: int):
    """Show the indexed passages nearest to QUERY."""
    config = _load_config()
    server = RAGServer(config)

    async def run():
        await server.startup()
        try:
            return await server.retriever.search(query, limit)
        finally:
            await server.shutdown()

    try:
        results = asyncio.run(run())
    except Exception as e:
        click.echo(f"Search failed: {e}", err=True)
        sys.exit(1)

    if not results:
        click.echo("No passages found.")
        return

    for idx, result in enumerate(results, 1):
        click.echo(f"\n[{idx}] {result.score:.3f} {result.url} (chunk {result.chunk_index})")
        click.echo(f"    {result.text[:200]}")


def main():
    """Entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
