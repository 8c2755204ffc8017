"""Core primitives for talking to the remote API."""

from .http_client import HttpClient, HttpRequest

__all__ = [
    "HttpClient",
    "HttpRequest",
]
