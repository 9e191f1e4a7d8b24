import pytest

from tourguide.config.settings import get_logging_config, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_packaged_defaults():
    settings = get_settings()
    assert settings.proximity.reward_radius_miles == 10
    assert settings.proximity.nearby_radius_miles == 200
    assert settings.nearby.result_limit == 5
    assert settings.ingestion.mode == "simulated"
    assert settings.ingestion.pricer.api_key == "test-server-api-key"
    assert settings.workers.tracking_pool_size >= 1
    assert settings.workers.reward_pool_size >= 1


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("TOURGUIDE_INTERNAL_USER_COUNT", "7")
    monkeypatch.setenv("TOURGUIDE_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("TOURGUIDE_TRIP_PRICER_API_KEY", "secret")

    settings = get_settings()

    assert settings.internal_users.count == 7
    assert settings.app.log_level == "DEBUG"
    assert settings.ingestion.pricer.api_key == "secret"


def test_external_config_file(monkeypatch, tmp_path):
    path = tmp_path / "tourguide.yaml"
    path.write_text("proximity:\n  reward_radius_miles: 25\n", encoding="utf-8")
    monkeypatch.setenv("TOURGUIDE_CONFIG_PATH", str(path))

    settings = get_settings()

    assert settings.proximity.reward_radius_miles == 25
    # Sections missing from the file fall back to model defaults.
    assert settings.nearby.result_limit == 5


def test_invalid_values_are_rejected(monkeypatch, tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("workers:\n  reward_pool_size: 0\n", encoding="utf-8")
    monkeypatch.setenv("TOURGUIDE_CONFIG_PATH", str(path))

    with pytest.raises(ValueError):
        get_settings()


def test_logging_config_is_a_dict_config():
    config = get_logging_config()
    assert config["version"] == 1
    assert "console" in config["handlers"]
