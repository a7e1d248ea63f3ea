"""
Exception hierarchy for Android USB Options.
"""
from typing import List, Optional


class AndroidUsbOptionsError(Exception):
    """Base exception for all Android USB Options errors."""


class CommandExecutionError(AndroidUsbOptionsError):
    """An external command could not be started, did not finish, or exited non-zero."""

    def __init__(self, message: str, argv: Optional[List[str]] = None, returncode: Optional[int] = None):
        self.argv = list(argv) if argv else []
        self.returncode = returncode
        super().__init__(message)
