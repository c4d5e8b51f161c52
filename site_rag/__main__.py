"""Main entry point for the site RAG server."""
import logging
import sys
import uvicorn
from dotenv import load_dotenv

from . import __version__
from .config import RAGConfig
from .errors import ConfigurationError
from .server import create_app

logger = logging.getLogger(__name__)


def main():
    """Start site RAG server."""
    load_dotenv()

    try:
        config = RAGConfig.from_env()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    logger.info(f"=== Site RAG Server v{__version__} ===")
    logger.info(f"Site: {config.site_url} (depth {config.crawl_max_depth})")
    logger.info(f"Qdrant: {config.qdrant_url}")
    logger.info(f"Embedding: {config.embedding_url}")
    logger.info(f"LLM: {config.llm_url}")
    logger.info(f"Server: http://{config.host}:{config.port}")

    app = create_app(config)

    try:
        uvicorn.run(
            app,
            host=config.host,
            port=config.port,
            log_level="debug" if config.verbose else "info",
        )
    except KeyboardInterrupt:
        logger.info("Shutting down site RAG server...")
        sys.exit(0)


if __name__ == "__main__":
    main()
