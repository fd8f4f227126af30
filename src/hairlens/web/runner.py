"""Uvicorn runner for the session API."""

from typing import Any

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from hairlens.app import App
from hairlens.config import Config
from hairlens.web.server import create_fastapi_app


def build_log_config(config: Config) -> dict[str, Any]:
    """Uvicorn logging config with compact formats and the app's log level."""
    log_config = {**LOGGING_CONFIG, "formatters": {name: dict(fmt) for name, fmt in LOGGING_CONFIG["formatters"].items()}}
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - %(client_addr)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"
    log_config["loggers"] = {
        name: {**logger, "level": "DEBUG" if config.debug else "INFO"} for name, logger in LOGGING_CONFIG["loggers"].items()
    }
    return log_config


def run_server(app: App, config: Config) -> None:
    """Serve the API behind the edge proxy named in config.forwarded_allow_ips."""
    uvicorn.run(
        create_fastapi_app(app, config),
        host=config.host,
        port=config.port,
        log_config=build_log_config(config),
        access_log=config.access_log,
        proxy_headers=True,
        forwarded_allow_ips=config.forwarded_allow_ips,
    )
