"""
Utilities module for Android USB Options.
"""
from .logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
