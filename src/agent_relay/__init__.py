"""agent-relay: forwards chat messages to a hosted agent and returns its reply."""

__version__ = "0.1.0"
