"""Tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from habitstreak.config import BaseConfig, DevConfig, TestConfig, resolve_config


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("HABITSTREAK_DATA_DIR", str(tmp_path))
    for name in (
        "HABITSTREAK_SECRET_KEY",
        "HABITSTREAK_DEV_MODE",
        "HABITSTREAK_DATABASE_URL",
        "HABITSTREAK_STATS_WINDOW_DAYS",
        "HABITSTREAK_MAX_WINDOW_DAYS",
        "HABITSTREAK_STORE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path):
    config = BaseConfig()

    assert config.DATA_DIR == tmp_path.resolve()
    assert config.DATABASE_URL == f"sqlite:///{tmp_path.resolve() / 'habitstreak.db'}"
    assert config.STATS_WINDOW_DAYS == 30
    assert config.MAX_WINDOW_DAYS == 366
    assert config.STORE_BACKEND == "sql"
    assert config.DEV_MODE is True


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("HABITSTREAK_STATS_WINDOW_DAYS", "14")
    monkeypatch.setenv("HABITSTREAK_MAX_WINDOW_DAYS", "not-a-number")
    monkeypatch.setenv("HABITSTREAK_STORE", " Memory ")

    config = BaseConfig()

    assert config.STATS_WINDOW_DAYS == 14
    assert config.MAX_WINDOW_DAYS == 366
    assert config.STORE_BACKEND == "memory"


def test_secret_key_required_outside_dev_mode(monkeypatch):
    monkeypatch.setenv("HABITSTREAK_DEV_MODE", "false")

    with pytest.raises(ValueError, match="HABITSTREAK_SECRET_KEY"):
        BaseConfig()

    monkeypatch.setenv("HABITSTREAK_SECRET_KEY", "s3cret")
    assert BaseConfig().DEV_MODE is False


def test_test_config_uses_in_memory_sqlite():
    config = TestConfig()

    assert config.DATABASE_URL == "sqlite://"
    assert "poolclass" in config.sqlalchemy_engine_options()


def test_resolve_config():
    assert resolve_config("development") is DevConfig
    assert resolve_config("TESTING") is TestConfig
    assert resolve_config(None) is BaseConfig
    assert resolve_config("unknown") is BaseConfig


def test_window_days_clamped(monkeypatch, tmp_path):
    monkeypatch.setenv("HABITSTREAK_DATA_DIR", str(tmp_path))
    config = TestConfig()
    assert config.clamp_window_days(None) == config.STATS_WINDOW_DAYS

    config.MAX_WINDOW_DAYS = 10
    assert config.clamp_window_days(5000) == 10
    assert config.clamp_window_days(-3) == 0
