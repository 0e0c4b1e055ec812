#!/usr/bin/env python3
"""Main entry point for the visitor tracker."""

import uvicorn

from visitor_tracker.common.logging import get_logger
from visitor_tracker.common.config import get_config

logger = get_logger(__name__)


def main():
    """Serve the tracking API."""
    config = get_config()
    logger.info(
        f"Visitor tracker starting in {config.environment.value} mode "
        f"on {config.api_host}:{config.api_port}"
    )
    uvicorn.run(
        "visitor_tracker.api.gateway:app",
        host=config.api_host,
        port=config.api_port,
        log_level=config.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
