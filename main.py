"""
STOCKNOTE - Main Entry Point
Serves the quote cache and chart API.
"""
import uvicorn

from stocknote.config.settings import load_settings
from stocknote.utils.logger import get_logger, setup_logging

logger = get_logger("main")


def run_api():
    """Run the FastAPI application."""
    settings = load_settings()
    setup_logging(settings)
    logger.info("starting_stocknote", version=settings.version, port=settings.port)
    uvicorn.run(
        "stocknote.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run_api()
