"""Logging helpers."""

from visitor_tracker.common.logging.logger import LOG_FORMAT, configure_logging, get_logger

__all__ = ["LOG_FORMAT", "configure_logging", "get_logger"]
