"""Application entry point for the lead capture API server."""

import uvicorn

from src.api.app import create_app
from src.utils.config import load_config
from src.utils.logger import setup_logging


def main() -> None:
    """Start the FastAPI application server."""
    config = load_config()
    setup_logging(config.log_level, config.log_file)
    uvicorn.run(create_app(config=config), host=config.api.host, port=config.api.port)


if __name__ == "__main__":
    main()
