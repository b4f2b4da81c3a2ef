"""Inbox model router - classifies correspondence and routes it to the right model tier."""

__version__ = "0.1.0"
