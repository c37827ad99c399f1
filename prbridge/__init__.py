"""PRBridge: sync GitHub pull requests with Backlog issues"""

__version__ = "1.0.0"
