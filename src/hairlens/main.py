"""Application entry points for the HairLens session backend."""

import asyncio

import structlog

from hairlens.app import App
from hairlens.config import Config
from hairlens.logging import setup_logging
from hairlens.web.runner import run_server

logger = structlog.get_logger(__name__)


def main() -> None:
    config = Config()
    setup_logging(config)
    app = App(config)
    run_server(app, config)


async def _cleanup(app: App) -> int:
    async with app.lifespan():
        result = await app.run_cleanup()
    return result.deleted_count


def cleanup() -> None:
    """Run one expired-session sweep and exit; meant for cron or a job scheduler."""
    config = Config()
    setup_logging(config)
    deleted_count = asyncio.run(_cleanup(App(config)))
    logger.info("cleanup_finished", deleted_count=deleted_count)


if __name__ == "__main__":
    main()
