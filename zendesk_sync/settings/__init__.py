"""Settings package exports."""

from .loader import (
    AppConfig,
    ConfigurationError,
    ConnectionSettings,
    HttpSettings,
    PathSettings,
    PublishSettings,
    build_connection,
    build_http,
    build_publish,
    load_config,
)

__all__ = [
    "AppConfig",
    "ConfigurationError",
    "ConnectionSettings",
    "HttpSettings",
    "PathSettings",
    "PublishSettings",
    "build_connection",
    "build_http",
    "build_publish",
    "load_config",
]
