import json

import pytest
from pydantic import ValidationError

from signaling.core import config as config_module
from signaling.core.config import ConfigManager, configure, get_config_manager


def test_config_read_default():
    manager = ConfigManager()
    assert manager.data.context.primary == "main_queue"
    assert manager.data.context.always_async is False
    assert manager.get("logging", "debug_mode") is False


def test_config_update_event():
    manager = ConfigManager()
    received = []
    manager.on_changed.subscribe(received.append)

    manager.update("context", "always_async", True)

    assert manager.data.context.always_async is True
    assert received == [("context", "always_async", True)]


def test_config_update_rejects_unknown_section_and_key():
    manager = ConfigManager()
    with pytest.raises(ValueError):
        manager.update("network", "port", 1)
    with pytest.raises(ValueError):
        manager.update("context", "colour", "blue")


def test_config_update_validates_value():
    manager = ConfigManager()
    with pytest.raises(ValidationError):
        manager.update("context", "primary", "carrier_pigeon")
    assert manager.data.context.primary == "main_queue"


def test_config_loads_json(tmp_path):
    path = tmp_path / "signaling.json"
    path.write_text(json.dumps({"context": {"primary": "qt", "always_async": True}}), encoding="utf-8")

    manager = ConfigManager(str(path))

    assert manager.data.context.primary == "qt"
    assert manager.data.context.always_async is True


def test_config_loads_toml(tmp_path):
    path = tmp_path / "signaling.toml"
    path.write_text('[logging]\ndebug_mode = true\nlog_dir = "logs"\n', encoding="utf-8")

    manager = ConfigManager(str(path))

    assert manager.data.logging.debug_mode is True
    assert manager.data.logging.log_dir == "logs"


def test_config_broken_file_keeps_defaults(tmp_path):
    path = tmp_path / "signaling.json"
    path.write_text("{not json", encoding="utf-8")

    manager = ConfigManager(str(path))

    assert manager.data.context.primary == "main_queue"


def test_config_update_persists(tmp_path):
    path = tmp_path / "nested" / "signaling.json"
    manager = ConfigManager(str(path))

    manager.update("logging", "debug_mode", True)

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["logging"]["debug_mode"] is True
    assert ConfigManager(str(path)).data.logging.debug_mode is True


def test_process_wide_manager_reads_env(tmp_path, monkeypatch, restore_logger):
    path = tmp_path / "env.json"
    path.write_text(json.dumps({"context": {"always_async": True}}), encoding="utf-8")
    monkeypatch.setenv(config_module.CONFIG_ENV_VAR, str(path))
    monkeypatch.setattr(config_module, "_manager", None)

    manager = get_config_manager()

    assert manager.filepath == str(path)
    assert manager.data.context.always_async is True
    assert get_config_manager() is manager


def test_configure_replaces_manager(tmp_path):
    before = get_config_manager()
    after = configure(None)
    assert after is not before
    assert get_config_manager() is after
