"""API routes"""
from prbridge.api import webhooks

__all__ = ["webhooks"]
