"""HTTP API for the agent relay."""

from .server import create_app

__all__ = ["create_app"]
