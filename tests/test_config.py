import pytest

from k8s_healer.config import Config, ConfigurationError, EngineConfig, parse_duration


@pytest.mark.parametrize("text,seconds", [
    ("10m", 600.0),
    ("30s", 30.0),
    ("1h30m", 5400.0),
    ("500ms", 0.5),
    ("1.5s", 1.5),
    ("45", 45.0),
    (12, 12.0),
])
def test_parse_duration(text, seconds):
    assert parse_duration(text) == pytest.approx(seconds)


@pytest.mark.parametrize("text", ["", "ten minutes", "10x", "m10", "10m bogus"])
def test_parse_duration_rejects_garbage(text):
    with pytest.raises(ConfigurationError):
        parse_duration(text)


def test_engine_config_defaults_match_reference_cadence():
    config = EngineConfig()
    assert config.cooldown_window == 600
    assert config.restart_threshold == 3
    assert config.resync_period == 30
    assert config.delete_timeout == 10
    assert config.sweep_interval == 1800


def test_engine_config_is_immutable():
    config = EngineConfig()
    with pytest.raises(AttributeError):
        config.cooldown_window = 1


@pytest.mark.parametrize("kwargs", [
    {"restart_threshold": 0},
    {"cooldown_window": 0},
    {"resync_period": -1},
    {"delete_timeout": 0},
    {"shutdown_grace": -0.5},
])
def test_engine_config_validation(kwargs):
    with pytest.raises(ConfigurationError):
        EngineConfig(**kwargs)


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("NAMESPACES", "app-*")
    monkeypatch.setenv("HEAL_COOLDOWN", "5m")
    monkeypatch.setenv("RESTART_THRESHOLD", "7")
    monkeypatch.setenv("DRY_RUN", "true")

    settings = Config()

    assert settings.namespaces == "app-*"
    assert settings.heal_cooldown == "5m"
    assert settings.restart_threshold == 7
    assert settings.dry_run is True
