"""Logging configuration for confluent_ops."""

from confluent_ops.logging.config import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
