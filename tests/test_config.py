import pytest

from coffeewatch.config import ConfigError, load_settings


def test_default_profile(monkeypatch):
    monkeypatch.delenv("COFFEEWATCH_PROFILE", raising=False)
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://discord.example.com/main")
    monkeypatch.setenv("SIGNED_URL_MAX_AGE", "3600")
    settings = load_settings()
    assert settings.policy == "nonempty-subset"
    assert settings.products_endpoint == (
        "https://www.blackwhiteroasters.com/collections/specialty-instant-coffee/products.json"
    )
    assert settings.webhook_url == "https://discord.example.com/main"
    assert settings.token_max_age == 3600
    with pytest.raises(AttributeError):
        settings.policy = "strict"


def test_profiles_select_policy():
    assert load_settings("strict").policy == "strict"
    assert load_settings("subset").cache_key == "items-v1-subset"


def test_invalid_configuration(monkeypatch, tmp_path):
    with pytest.raises(ConfigError):
        load_settings("nope")
    monkeypatch.setenv("CHANGE_POLICY", "latest")
    with pytest.raises(ConfigError):
        load_settings("default")
    monkeypatch.delenv("CHANGE_POLICY")
    monkeypatch.setenv("SCHEDULE_MINUTES", "often")
    with pytest.raises(ConfigError):
        load_settings("default")
    monkeypatch.delenv("SCHEDULE_MINUTES")
    profiles = tmp_path / "profiles.yml"
    profiles.write_text("broken:\n  base_url: https://x.example.com\n  sections: typo\n")
    with pytest.raises(ConfigError):
        load_settings("broken", path=profiles)


@pytest.mark.parametrize("minutes", ["0", "60", "90"])
def test_schedule_minutes_out_of_range(monkeypatch, minutes):
    monkeypatch.setenv("SCHEDULE_MINUTES", minutes)
    with pytest.raises(ConfigError, match="schedule_minutes"):
        load_settings("default")


def test_beat_schedule_follows_profile(monkeypatch):
    import importlib

    import coffeewatch.jobs.celery_app as celery_module

    monkeypatch.delenv("COFFEEWATCH_PROFILE", raising=False)
    monkeypatch.setenv("SCHEDULE_MINUTES", "20")
    module = importlib.reload(celery_module)
    schedule = module.celery_app.conf.beat_schedule["availability-check"]["schedule"]
    assert schedule.minute == {0, 20, 40}

    monkeypatch.delenv("SCHEDULE_MINUTES")
    module = importlib.reload(celery_module)
    schedule = module.celery_app.conf.beat_schedule["availability-check"]["schedule"]
    assert schedule.minute == {0, 15, 30, 45}
