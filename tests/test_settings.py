from __future__ import annotations

import logging

import pytest

from config.logging_config import configure_logging, resolve_level
from config.settings import ENV_PREFIX, ConfigError, Settings, load_settings, parse_duration, usage
from main import build_parser


def test_defaults_when_environment_is_empty() -> None:
    settings = load_settings({})

    assert settings == Settings()
    assert settings.port == 5100
    assert settings.graceful == 5.0
    assert settings.log_level == "info"
    assert settings.database == "capturedcheckpoints"


def test_prefixed_variables_override_defaults() -> None:
    settings = load_settings({
        ENV_PREFIX + "PORT": "8080",
        ENV_PREFIX + "GRACEFUL": "250ms",
        ENV_PREFIX + "LOGLEVEL": "debug",
        ENV_PREFIX + "DATABASEURL": "postgresql://user:secret@db:5432",
        ENV_PREFIX + "DATABASE": "races",
        ENV_PREFIX + "DBECHO": "true",
        "PORT": "9999",
    })

    assert settings.port == 8080
    assert settings.graceful == pytest.approx(0.25)
    assert settings.log_level == "debug"
    assert settings.db_echo is True
    assert settings.sqlalchemy_url == "postgresql://user:secret@db:5432/races"


def test_masked_url_hides_password() -> None:
    settings = Settings(database_url="postgresql://user:secret@db:5432")

    assert "secret" not in settings.masked_url
    assert settings.masked_url.endswith("@db:5432/capturedcheckpoints")


def test_sqlite_url_keeps_its_path() -> None:
    settings = Settings(database_url="sqlite:///races.db")

    assert settings.sqlalchemy_url == "sqlite:///races.db"


@pytest.mark.parametrize(
    "raw, seconds",
    [("5s", 5.0), ("500ms", 0.5), ("1m", 60.0), ("1h", 3600.0), ("3", 3.0), ("1.5s", 1.5)],
)
def test_parse_duration(raw: str, seconds: float) -> None:
    assert parse_duration(raw) == pytest.approx(seconds)


@pytest.mark.parametrize(
    "name, value",
    [
        ("PORT", "http"),
        ("PORT", "70000"),
        ("GRACEFUL", "soon"),
        ("DBECHO", "maybe"),
        ("DATABASEURL", "not a url"),
    ],
)
def test_invalid_values_raise_config_error(name: str, value: str) -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_settings({ENV_PREFIX + name: value})

    assert ENV_PREFIX + name in str(excinfo.value)


def test_usage_lists_every_variable() -> None:
    text = usage()

    for name in ["PORT", "GRACEFUL", "LOGLEVEL", "DATABASEURL", "DATABASE", "DBECHO"]:
        assert ENV_PREFIX + name in text
    assert "5s" in text


def test_help_flag_prints_usage(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(["--help"])

    assert excinfo.value.code == 0
    assert ENV_PREFIX + "PORT" in capsys.readouterr().out


def test_resolve_level() -> None:
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("WARNING") == logging.WARNING
    with pytest.raises(ValueError):
        resolve_level("loud")


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_configure_logging_sets_root_level(restore_root_logger) -> None:
    assert configure_logging("debug") == logging.DEBUG
    assert restore_root_logger.level == logging.DEBUG


def test_unknown_log_level_falls_back_to_info(restore_root_logger) -> None:
    level = configure_logging("loud")

    assert level == logging.INFO
    assert restore_root_logger.level == logging.INFO
