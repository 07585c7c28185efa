import json

import pytest

from autoleveler.utils.config import DEFAULT_SETTINGS, Settings, get_settings_path
from autoleveler.utils.exceptions import SettingsLoadError, SettingsValidationError


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "autoleveler.json"


def test_missing_file_uses_defaults(settings_path):
    settings = Settings(str(settings_path))
    assert settings.load() is False
    assert settings.get("probe.probe_feedrate") == DEFAULT_SETTINGS["probe"]["probe_feedrate"]
    assert settings.validate()


def test_save_and_load_merge_defaults(settings_path):
    settings = Settings(str(settings_path))
    settings.set("probe.feedrate", 800)
    settings.set("grid.end_x", 120.0)
    settings.save()

    data = json.loads(settings_path.read_text(encoding="utf-8"))
    del data["grid"]["step_y"]
    settings_path.write_text(json.dumps(data), encoding="utf-8")

    reloaded = Settings(str(settings_path))
    assert reloaded.load() is True
    assert reloaded.get("probe.feedrate") == 800
    assert reloaded.get("grid.end_x") == 120.0
    assert reloaded.get("grid.step_y") == DEFAULT_SETTINGS["grid"]["step_y"]


def test_save_keeps_backup(settings_path):
    settings = Settings(str(settings_path))
    settings.save()
    settings.set("log_level", "DEBUG")
    settings.save()
    assert settings_path.with_name("autoleveler.json.bak").exists()
    assert not settings_path.with_name("autoleveler.json.tmp").exists()


def test_invalid_json(settings_path):
    settings_path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SettingsLoadError):
        Settings(str(settings_path)).load()


def test_non_object_json(settings_path):
    settings_path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SettingsLoadError):
        Settings(str(settings_path)).load()


@pytest.mark.parametrize(
    "key, value",
    [
        ("grid.step_x", 0),
        ("grid.step_y", -2),
        ("grid.path_order", "zigzag"),
        ("probe.probe_feedrate", 0),
        ("probe.feedrate", -10),
        ("grid.end_x", "far"),
        ("log_level", "LOUD"),
    ],
)
def test_validate_rejects(settings_path, key, value):
    settings = Settings(str(settings_path))
    settings.set(key, value)
    with pytest.raises(SettingsValidationError):
        settings.validate()


def test_get_with_missing_key(settings_path):
    settings = Settings(str(settings_path))
    assert settings.get("grid.nope", 5) == 5
    assert settings.get("nope.deeper") is None


def test_reset_to_defaults(settings_path):
    settings = Settings(str(settings_path))
    settings.set("grid.end_x", 99)
    settings.reset_to_defaults()
    assert settings.get("grid.end_x") == 0.0
    assert DEFAULT_SETTINGS["grid"]["end_x"] == 0.0


def test_settings_path_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("AUTOLEVELER_CONFIG_DIR", str(tmp_path / "cfg"))
    path = get_settings_path()
    assert path == str(tmp_path / "cfg" / "autoleveler.json")
    assert (tmp_path / "cfg").is_dir()
