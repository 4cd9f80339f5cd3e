"""Case workflow and moderation audit service."""

__version__ = "0.1.0"
