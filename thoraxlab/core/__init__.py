"""
Core utilities and configuration for ThoraxLab.

This package provides core functionality including logging configuration,
monitoring, domain errors, the persistence layer and shared I/O models.
"""

from thoraxlab.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
