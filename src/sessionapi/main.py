"""Application entry point for the session API server."""

from sessionapi.app import App
from sessionapi.config import Config
from sessionapi.logging import setup_logging
from sessionapi.web.runner import run_server


def main() -> None:
    config = Config()
    setup_logging(config.debug)
    app = App(config)
    run_server(app, config)


if __name__ == "__main__":
    main()
