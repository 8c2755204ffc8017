"""Helpers for loading configuration and static settings."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

DEFAULT_CONFIG_NAME = "config.toml"
CONFIG_ENV_VAR = "ZENDESK_SYNC_CONFIG"
DEFAULT_LOCALE = "en-us"

_ENV_OVERRIDES = {
    "host": "ZENDESK_HOST",
    "email": "ZENDESK_EMAIL",
    "api_token": "ZENDESK_API_TOKEN",
}


class ConfigurationError(ValueError):
    """Raised when a mandatory setting is missing or malformed."""


@dataclass(slots=True)
class HttpSettings:
    connect_timeout: float = 10.0
    write_timeout: float = 10.0
    read_timeout: float = 30.0
    max_auth_attempts: int = 3

    @property
    def timeout(self) -> tuple[float, float]:
        """Timeout pair understood by ``requests``.

        ``requests`` has no separate write timeout; the socket timeout that
        follows the connection covers both sending the body and waiting for
        the response, so the larger of the two budgets is used.
        """
        return (self.connect_timeout, max(self.write_timeout, self.read_timeout))


@dataclass(slots=True)
class ConnectionSettings:
    host: str
    email: str
    api_token: str
    scheme: str = "https"
    port: int | None = None

    @property
    def base_url(self) -> str:
        netloc = self.host if self.port is None else f"{self.host}:{self.port}"
        return f"{self.scheme}://{netloc}/api/v2"


@dataclass(slots=True)
class PublishSettings:
    section_id: int
    user_segment_id: int
    permission_group_id: int
    locale: str = DEFAULT_LOCALE
    notify_subscribers: bool = True
    comments_disabled: bool | None = None


@dataclass(slots=True)
class PathSettings:
    sources: list[Path] = field(default_factory=list)
    report: Path | None = None


@dataclass(slots=True)
class AppConfig:
    connection: ConnectionSettings
    publish: PublishSettings
    http: HttpSettings = field(default_factory=HttpSettings)
    paths: PathSettings = field(default_factory=PathSettings)


def _config_path(explicit: str | os.PathLike[str] | None = None) -> Path:
    if explicit:
        return Path(explicit)
    env_value = os.environ.get(CONFIG_ENV_VAR)
    return Path(env_value) if env_value else Path.cwd() / DEFAULT_CONFIG_NAME


def _load_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    try:
        with path.open("rb") as fp:
            return tomllib.load(fp)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc


def _to_path(value: str | None, *, base: Path) -> Path | None:
    if not value:
        return None
    candidate = Path(value)
    return candidate if candidate.is_absolute() else base / candidate


def _mandatory_id(section: Mapping[str, Any], key: str) -> int:
    value = section.get(key)
    if value is None:
        raise ConfigurationError(f"The {key} property is mandatory, aborting...")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"The {key} property must be an integer, got {value!r}")
    return value


def _mandatory_str(section: Mapping[str, Any], key: str) -> str:
    value = section.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"The {key} property is mandatory, aborting...")
    return value.strip()


def _optional_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    raise ConfigurationError(f"Expected a boolean value, got {value!r}")


def _bool_setting(section: Mapping[str, Any], key: str, default: bool) -> bool:
    value = section.get(key, default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"The {key} property must be a boolean, got {value!r}")
    return value


def _positive_number(
    section: Mapping[str, Any], key: str, default: float, *, integral: bool = False
) -> float:
    value = section.get(key, default)
    accepted = (int,) if integral else (int, float)
    if isinstance(value, bool) or not isinstance(value, accepted) or value <= 0:
        kind = "a positive integer" if integral else "a positive number"
        raise ConfigurationError(f"The {key} property must be {kind}, got {value!r}")
    return float(value)


def build_connection(
    section: Mapping[str, Any], env: Mapping[str, str] | None = None
) -> ConnectionSettings:
    env = env if env is not None else os.environ
    merged = dict(section)
    for key, env_key in _ENV_OVERRIDES.items():
        if env.get(env_key):
            merged[key] = env[env_key]

    port = merged.get("port")
    if port is not None and (isinstance(port, bool) or not isinstance(port, int)):
        raise ConfigurationError(f"The port property must be an integer, got {port!r}")

    return ConnectionSettings(
        host=_mandatory_str(merged, "host"),
        email=_mandatory_str(merged, "email"),
        api_token=_mandatory_str(merged, "api_token"),
        scheme=str(merged.get("scheme", "https")),
        port=port,
    )


def build_publish(section: Mapping[str, Any]) -> PublishSettings:
    return PublishSettings(
        section_id=_mandatory_id(section, "section_id"),
        user_segment_id=_mandatory_id(section, "user_segment_id"),
        permission_group_id=_mandatory_id(section, "permission_group_id"),
        locale=str(section.get("locale") or DEFAULT_LOCALE),
        notify_subscribers=_bool_setting(section, "notify_subscribers", True),
        comments_disabled=_optional_bool(section.get("comments_disabled")),
    )


def build_http(section: Mapping[str, Any]) -> HttpSettings:
    return HttpSettings(
        connect_timeout=_positive_number(section, "connect_timeout", 10),
        write_timeout=_positive_number(section, "write_timeout", 10),
        read_timeout=_positive_number(section, "read_timeout", 30),
        max_auth_attempts=int(_positive_number(section, "max_auth_attempts", 3, integral=True)),
    )


def load_config(
    config_path: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    path = _config_path(config_path)
    data = _load_toml(path)
    base = path.resolve().parent

    # Publishing ids are validated first: a missing id aborts before anything else.
    publish = build_publish(data.get("publish", {}))

    paths_section = data.get("paths", {})
    raw_sources = paths_section.get("sources", [])
    if not isinstance(raw_sources, list):
        raise ConfigurationError(f"The sources property must be a list of paths, got {raw_sources!r}")
    report = paths_section.get("report")
    if report is not None and not isinstance(report, str):
        raise ConfigurationError(f"The report property must be a path, got {report!r}")
    sources = [
        resolved
        for resolved in (_to_path(str(item), base=base) for item in raw_sources)
        if resolved is not None
    ]

    return AppConfig(
        connection=build_connection(data.get("zendesk", {}), env=env),
        publish=publish,
        http=build_http(data.get("http", {})),
        paths=PathSettings(
            sources=sources,
            report=_to_path(report, base=base),
        ),
    )
