"""
Utility modules for the Campaign Graph engine.
"""

from campaign_graph.utils.logger import (
    LogContext,
    get_logger,
    log_timing,
    setup_logging,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
    "log_timing",
]
