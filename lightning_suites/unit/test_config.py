import pytest
import yaml

from lightning_tools.common import get_config, reload_config, set_config
from lightning_suites.ui_testing.framework.run_context import (
    ConfigurationError,
    SuiteSettings,
    WaitPresets,
)


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("ENVIRONMENT", raising=False)
    monkeypatch.delenv("ENV", raising=False)
    (tmp_path / "config.yaml").write_text(
        yaml.dump(
            {
                "environment": "DEV",
                "environments": {
                    "DEV": {
                        "url": "https://dev.example.com",
                        "users": {
                            "SalesUser": {"username": "sales@dev", "password_env": "SF_TEST_PASSWORD"},
                            "Admin": {"username": "admin@dev"},
                        },
                    },
                    "SIT": {"url": "https://sit.example.com"},
                },
                "waits": {"short": 5},
            }
        ),
        encoding="utf-8",
    )
    yield tmp_path
    monkeypatch.undo()
    reload_config()


def test_file_values_and_defaults(config_dir):
    reload_config(config_dir)

    assert get_config("waits.short") == 5
    assert get_config("waits.long") == 360
    assert get_config("policy.treat_technical_errors_as_skips") is True
    assert get_config("missing.key", "fallback") == "fallback"


def test_env_override_parses_scalars(config_dir, monkeypatch):
    monkeypatch.setenv("WAITS__SHORT", "9")
    monkeypatch.setenv("BROWSER__LIVE", "true")
    monkeypatch.setenv("ENVIRONMENTS__DEV__URL", "https://override.example.com")
    reload_config(config_dir)

    assert get_config("waits.short") == 9
    assert get_config("browser.live") is True
    assert get_config("environments.DEV.url") == "https://override.example.com"
    assert get_config("browser.type") == "chromium"


def test_environment_file_is_merged(config_dir, monkeypatch):
    (config_dir / "sit.yaml").write_text(yaml.dump({"waits": {"short": 11}}), encoding="utf-8")
    monkeypatch.setenv("ENVIRONMENT", "SIT")
    reload_config(config_dir)

    assert get_config("waits.short") == 11
    assert SuiteSettings.from_config().url == "https://sit.example.com"


def test_set_config(config_dir):
    reload_config(config_dir)
    set_config("login.workaround_seconds", 30)

    assert SuiteSettings.from_config().login_workaround_seconds == 30


def test_suite_settings_from_config(config_dir):
    reload_config(config_dir)

    settings = SuiteSettings.from_config()

    assert settings.environment == "DEV"
    assert settings.url == "https://dev.example.com"
    assert settings.waits.short == 5
    assert settings.waits.default == 61


def test_credentials_resolve_password_from_environment(config_dir, monkeypatch):
    reload_config(config_dir)
    monkeypatch.setenv("SF_TEST_PASSWORD", "s3cret")
    settings = SuiteSettings.from_config()

    credentials = settings.credentials_for("Sales User")

    assert credentials.username == "sales@dev"
    assert credentials.password == "s3cret"
    assert "s3cret" not in repr(credentials)


def test_credentials_errors(config_dir):
    reload_config(config_dir)
    settings = SuiteSettings.from_config()

    with pytest.raises(ConfigurationError):
        settings.credentials_for("Service Agent")
    with pytest.raises(ConfigurationError):
        settings.credentials_for("Admin")


def test_wait_presets():
    presets = WaitPresets()

    assert presets.seconds("fifteen") == 15
    assert presets.seconds("two") == 2
    with pytest.raises(ValueError):
        presets.seconds("forever")
