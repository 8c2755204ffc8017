from __future__ import annotations

from pathlib import Path

import pytest

from zendesk_sync.settings import ConfigurationError, build_http, load_config

CONFIG = """
[zendesk]
host = "example.zendesk.com"
email = "user@domain.com"
api_token = "abcd"

[publish]
section_id = 789
user_segment_id = 123
permission_group_id = 456
{publish_extra}

[http]
read_timeout = 45

[paths]
sources = ["articles"]
report = "out/report.json"
"""


def _write_config(tmp_path: Path, publish_extra: str = "") -> Path:
    path = tmp_path / "config.toml"
    path.write_text(CONFIG.format(publish_extra=publish_extra), encoding="utf-8")
    return path


def test_load_config_reads_every_section(tmp_path: Path) -> None:
    config = load_config(_write_config(tmp_path), env={})

    assert config.connection.base_url == "https://example.zendesk.com/api/v2"
    assert config.connection.api_token == "abcd"
    assert config.publish.section_id == 789
    assert config.publish.locale == "en-us"
    assert config.publish.notify_subscribers is True
    assert config.publish.comments_disabled is None
    assert config.http.timeout == (10.0, 45.0)
    assert config.http.max_auth_attempts == 3
    assert config.paths.sources == [tmp_path.resolve() / "articles"]
    assert config.paths.report == tmp_path.resolve() / "out" / "report.json"


def test_publish_options(tmp_path: Path) -> None:
    extra = 'locale = "fr"\nnotify_subscribers = false\ncomments_disabled = true'

    publish = load_config(_write_config(tmp_path, extra), env={}).publish

    assert publish.locale == "fr"
    assert publish.notify_subscribers is False
    assert publish.comments_disabled is True


def test_environment_overrides_credentials(tmp_path: Path) -> None:
    env = {"ZENDESK_HOST": "other.zendesk.com", "ZENDESK_API_TOKEN": "secret"}

    connection = load_config(_write_config(tmp_path), env=env).connection

    assert connection.host == "other.zendesk.com"
    assert connection.api_token == "secret"
    assert connection.email == "user@domain.com"


@pytest.mark.parametrize("key", ["section_id", "user_segment_id", "permission_group_id"])
def test_missing_publish_id_is_rejected(tmp_path: Path, key: str) -> None:
    path = _write_config(tmp_path)
    path.write_text(
        "\n".join(line for line in path.read_text(encoding="utf-8").splitlines() if not line.startswith(key)),
        encoding="utf-8",
    )

    with pytest.raises(ConfigurationError, match=key):
        load_config(path, env={})


def test_non_integer_publish_id_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        '[zendesk]\nhost = "h"\nemail = "e"\napi_token = "t"\n'
        '[publish]\nsection_id = "789"\nuser_segment_id = 1\npermission_group_id = 2\n',
        encoding="utf-8",
    )

    with pytest.raises(ConfigurationError, match="section_id"):
        load_config(path, env={})


def test_missing_credentials_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        '[publish]\nsection_id = 1\nuser_segment_id = 2\npermission_group_id = 3\n',
        encoding="utf-8",
    )

    with pytest.raises(ConfigurationError, match="host"):
        load_config(path, env={})

    config = load_config(
        path,
        env={"ZENDESK_HOST": "h.zendesk.com", "ZENDESK_EMAIL": "e@x.com", "ZENDESK_API_TOKEN": "t"},
    )
    assert config.connection.host == "h.zendesk.com"


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.toml", env={})


def test_config_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ZENDESK_SYNC_CONFIG", str(_write_config(tmp_path)))

    assert load_config(env={}).publish.section_id == 789


def test_http_defaults() -> None:
    settings = build_http({})

    assert settings.timeout == (10.0, 30.0)
    assert settings.max_auth_attempts == 3


def test_invalid_toml_is_a_configuration_error(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("[publish\nsection_id = 1\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Invalid TOML"):
        load_config(path, env={})


@pytest.mark.parametrize(
    ("section", "key"),
    [
        ({"read_timeout": "slow"}, "read_timeout"),
        ({"connect_timeout": 0}, "connect_timeout"),
        ({"write_timeout": True}, "write_timeout"),
        ({"max_auth_attempts": "x"}, "max_auth_attempts"),
        ({"max_auth_attempts": 2.5}, "max_auth_attempts"),
    ],
)
def test_invalid_http_values_are_rejected(section: dict[str, object], key: str) -> None:
    with pytest.raises(ConfigurationError, match=key):
        build_http(section)


def test_http_values_accept_integers_and_floats() -> None:
    settings = build_http({"connect_timeout": 2, "read_timeout": 12.5, "max_auth_attempts": 1})

    assert settings.timeout == (2.0, 12.5)
    assert settings.max_auth_attempts == 1


def test_notify_subscribers_must_be_boolean(tmp_path: Path) -> None:
    path = _write_config(tmp_path, 'notify_subscribers = "false"')

    with pytest.raises(ConfigurationError, match="notify_subscribers"):
        load_config(path, env={})


def test_sources_must_be_a_list(tmp_path: Path) -> None:
    path = _write_config(tmp_path)
    path.write_text(
        path.read_text(encoding="utf-8").replace('sources = ["articles"]', 'sources = "build/html"'),
        encoding="utf-8",
    )

    with pytest.raises(ConfigurationError, match="sources"):
        load_config(path, env={})
