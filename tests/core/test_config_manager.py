import pytest
import yaml
from pathlib import Path
from treecopy import __version__
from treecopy.core.config_manager import ConfigManager, TransferConfig
from treecopy.core.exceptions import ConfigError
from treecopy.core.interfaces.types import ConflictPolicy

def write_yaml(path: Path, data: dict):
    with open(path, 'w') as f:
        yaml.dump(data, f)

def test_defaults():
    config = TransferConfig()
    assert config.version == __version__
    assert config.default_policy == ConflictPolicy.ABORT
    assert config.max_depth is None
    assert config.preserve_metadata is False
    assert config.verify_transfers is False
    assert config.progress_byte_interval == 0

def test_load_valid_config(valid_config_file, monkeypatch):
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_PATHS", [valid_config_file])
    config = ConfigManager().load_config()
    assert isinstance(config, TransferConfig)
    assert config.default_policy == ConflictPolicy.SKIP
    assert config.max_depth == 2
    assert config.verify_transfers is True
    assert config.progress_byte_interval == 65536
    assert config.log_level == "DEBUG"

def test_explicit_config_path(valid_config_file):
    config = ConfigManager(config_path=valid_config_file).load_config()
    assert config.default_policy == ConflictPolicy.SKIP

def test_load_creates_default_if_missing(tmp_path, monkeypatch):
    config_path = tmp_path / "nested" / "config.yml"
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_PATHS", [config_path])
    config = ConfigManager().load_config()
    assert config_path.exists()
    assert config == TransferConfig()
    text = config_path.read_text()
    assert "# Transfer behaviour" in text
    assert "default_policy: abort" in text

def test_save_and_load_roundtrip(tmp_path, monkeypatch):
    config_path = tmp_path / "config.yml"
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_PATHS", [config_path])
    mgr = ConfigManager()
    assert mgr.save_config(TransferConfig(default_policy="overwrite", max_depth=4)) is True
    loaded = ConfigManager().load_config()
    assert loaded.default_policy == ConflictPolicy.OVERWRITE
    assert loaded.max_depth == 4

def test_save_without_config_returns_false(tmp_path):
    assert ConfigManager(config_path=tmp_path / "c.yml").save_config() is False

def test_load_malformed_yaml(invalid_config_file):
    config = ConfigManager(config_path=invalid_config_file).load_config()
    # Should fall back to defaults and leave the file alone
    assert config == TransferConfig()
    assert "verify_transfers: [yes" in invalid_config_file.read_text()

def test_load_non_mapping_yaml(tmp_path):
    config_path = tmp_path / "config.yml"
    config_path.write_text("- just\n- a list\n")
    assert ConfigManager(config_path=config_path).load_config() == TransferConfig()

def test_version_mismatch_migrates_with_backup(tmp_path):
    config_path = tmp_path / "config.yml"
    write_yaml(config_path, {
        "version": "0.0.1",
        "default_policy": "skip",
        "verify_transfers": "not a bool",
        "obsolete_setting": 42,
    })
    config = ConfigManager(config_path=config_path).load_config()
    assert config.version == __version__
    assert config.default_policy == ConflictPolicy.SKIP
    assert config.verify_transfers is False
    backup = tmp_path / "config.yml.bak"
    assert backup.exists()
    assert "obsolete_setting" in backup.read_text()
    assert "obsolete_setting" not in config_path.read_text()

def test_missing_fields_are_written_back(tmp_path):
    config_path = tmp_path / "config.yml"
    write_yaml(config_path, {"version": __version__, "default_policy": "skip"})
    ConfigManager(config_path=config_path).load_config()
    saved = yaml.safe_load(config_path.read_text())
    assert saved["default_policy"] == "skip"
    assert "progress_byte_interval" in saved

def test_update_config(tmp_path):
    config_path = tmp_path / "config.yml"
    mgr = ConfigManager(config_path=config_path)
    mgr.load_config()
    updated = mgr.update_config({"default_policy": "overwrite", "verify_transfers": True})
    assert updated.default_policy == ConflictPolicy.OVERWRITE
    assert updated.verify_transfers is True
    loaded = ConfigManager(config_path=config_path).load_config()
    assert loaded.default_policy == ConflictPolicy.OVERWRITE

def test_update_config_rejects_invalid_values(tmp_path):
    mgr = ConfigManager(config_path=tmp_path / "config.yml")
    with pytest.raises(ConfigError) as exc_info:
        mgr.update_config({"default_policy": "replace"})
    assert exc_info.value.config_key == "default_policy"

def test_policy_validator_accepts_any_case():
    assert TransferConfig(default_policy="SKIP").default_policy == ConflictPolicy.SKIP

def test_numeric_validators():
    assert TransferConfig(max_depth=-3).max_depth is None
    assert TransferConfig(progress_byte_interval=-1).progress_byte_interval == 0
    assert TransferConfig(log_file_rotation=0).log_file_rotation == 1

def test_log_level_validator():
    assert TransferConfig(log_level="debug").log_level == "DEBUG"
    assert TransferConfig(log_level="chatty").log_level == "INFO"

def test_get_with_default():
    config = TransferConfig()
    assert config.get("verify_transfers") is False
    assert config.get("unknown", "fallback") == "fallback"

def test_appdata_dir_on_linux(monkeypatch, tmp_path):
    monkeypatch.setattr("sys.platform", "linux")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    assert ConfigManager.get_appdata_dir() == tmp_path / "treecopy"
