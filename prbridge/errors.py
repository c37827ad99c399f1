"""Error taxonomy shared by clients, the sync service and entry points"""

from typing import Optional


class PRBridgeError(Exception):
    """Base class for all PRBridge errors"""


class NotFoundError(PRBridgeError):
    """The requested issue / pull request does not exist (or is not visible)."""


class TransportError(PRBridgeError):
    """Network or API failure talking to Backlog or GitHub."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(PRBridgeError):
    """Required configuration is missing or invalid. Fatal for the whole run."""
