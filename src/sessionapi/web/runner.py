"""Uvicorn server runner with custom configuration."""

import copy
from typing import Any

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from sessionapi.app import App
from sessionapi.config import Config
from sessionapi.web.server import create_fastapi_app


def uvicorn_options(config: Config) -> dict[str, Any]:
    """Build uvicorn keyword arguments from the application config."""
    log_config = copy.deepcopy(LOGGING_CONFIG)
    log_config["formatters"]["access"]["fmt"] = '%(asctime)s - "%(request_line)s" %(status_code)s'
    log_config["formatters"]["default"]["fmt"] = "%(asctime)s - %(levelname)s - %(message)s"

    options: dict[str, Any] = {
        "host": config.host,
        "port": config.port,
        "log_config": log_config,
        "log_level": "debug" if config.debug else "info",
        "access_log": True,
    }
    if config.cookie_secure:
        # Secure cookies imply TLS terminated by a proxy, trust its X-Forwarded-* headers
        options["proxy_headers"] = True
        options["forwarded_allow_ips"] = config.forwarded_allow_ips
    return options


def run_server(app: App, config: Config) -> None:
    """Run the Uvicorn server for the session API."""
    uvicorn.run(create_fastapi_app(app, config), **uvicorn_options(config))
