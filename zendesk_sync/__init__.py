"""Synchronize local HTML articles with a Zendesk Help Center section."""

__version__ = "0.1.0"
