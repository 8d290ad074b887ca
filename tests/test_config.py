"""Tests for environment-driven settings."""

import os

import pytest
from handler.config import Settings
from wire.faults import InvalidConfiguration

ENV_VARS = (
    "RPC_HOST",
    "RPC_PORT",
    "RPC_DEBUG",
    "RPC_MAX_BODY_SIZE",
    "RPC_READ_TIMEOUT",
    "RPC_RESPONSE_TIMEOUT",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the tests
    monkeypatch.chdir(tmp_path)
    yield
    # load_dotenv writes os.environ directly
    for name in ENV_VARS:
        os.environ.pop(name, None)


def test_defaults():
    settings = Settings.from_env()
    assert settings == Settings()
    assert settings.port == 8000
    assert settings.debug is False


def test_from_env(monkeypatch):
    monkeypatch.setenv("RPC_HOST", "0.0.0.0")
    monkeypatch.setenv("RPC_PORT", "9001")
    monkeypatch.setenv("RPC_DEBUG", "yes")
    monkeypatch.setenv("RPC_MAX_BODY_SIZE", "0")
    monkeypatch.setenv("RPC_READ_TIMEOUT", "2.5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    settings = Settings.from_env()
    assert settings.host == "0.0.0.0"
    assert settings.port == 9001
    assert settings.debug is True
    assert settings.read_timeout == 2.5
    assert settings.log_level == "DEBUG"
    assert settings.dispatcher_limits() == {
        "max_body_size": None,
        "read_timeout": 2.5,
        "response_timeout": 30.0,
    }


def test_from_dotenv_file(tmp_path):
    env_file = tmp_path / "rpc.env"
    env_file.write_text("RPC_PORT=8123\nRPC_DEBUG=true\n")
    settings = Settings.from_env(env_file)
    assert settings.port == 8123
    assert settings.debug is True


@pytest.mark.parametrize(
    ("name", "value"),
    [("RPC_PORT", "http"), ("RPC_DEBUG", "maybe"), ("RPC_READ_TIMEOUT", "-1")],
)
def test_malformed_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(InvalidConfiguration, match=name):
        Settings.from_env()
