"""Relay API routes."""

from . import chat, system

__all__ = ["chat", "system"]
