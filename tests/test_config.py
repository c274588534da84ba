import pytest
import yaml

from lockgraph.config import ConfigManager, get_config, get_config_manager
from lockgraph.error_handling import ConfigurationError


def test_defaults():
    config = ConfigManager().load_config()

    assert config.resolution.ecosystems == ["composer", "npm"]
    assert config.resolution.include_dev_dependencies is True
    assert config.resolution.license_detection is True
    assert config.resolution.composer_url_host == "github.com"
    assert config.resolution.npm_registry_url == "https://registry.npmjs.org"
    assert config.logging.level == "INFO"
    assert config.logging.file is None


def test_yaml_file_overrides_defaults(tmp_path):
    config_file = tmp_path / "lockgraph.yaml"
    config_file.write_text(yaml.safe_dump({
        "resolution": {"ecosystems": ["composer"], "include_dev_dependencies": False},
        "logging": {"level": "debug"},
    }), encoding="utf-8")

    config = ConfigManager(config_file).load_config()

    assert config.resolution.ecosystems == ["composer"]
    assert config.resolution.include_dev_dependencies is False
    assert config.resolution.license_detection is True
    assert config.logging.level == "DEBUG"


def test_environment_overrides_file(tmp_path, monkeypatch):
    config_file = tmp_path / "lockgraph.yaml"
    config_file.write_text(yaml.safe_dump({"resolution": {"ecosystems": ["composer"]}}), encoding="utf-8")
    monkeypatch.setenv("LOCKGRAPH_ECOSYSTEMS", "npm, composer")
    monkeypatch.setenv("LOCKGRAPH_INCLUDE_DEV", "no")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    config = ConfigManager(config_file).load_config()

    assert config.resolution.ecosystems == ["npm", "composer"]
    assert config.resolution.include_dev_dependencies is False
    assert config.logging.level == "WARNING"


def test_variable_substitution(tmp_path, monkeypatch):
    config_file = tmp_path / "lockgraph.yaml"
    config_file.write_text(yaml.safe_dump({"resolution": {"npm_registry_url": "${NPM_MIRROR}"}}), encoding="utf-8")
    monkeypatch.setenv("NPM_MIRROR", "https://npm.internal.example")

    assert ConfigManager(config_file).load_config().resolution.npm_registry_url == "https://npm.internal.example"


def test_unknown_ecosystem_rejected(monkeypatch):
    monkeypatch.setenv("LOCKGRAPH_ECOSYSTEMS", "cargo")

    with pytest.raises(ConfigurationError) as excinfo:
        ConfigManager().load_config()

    assert excinfo.value.config_key == "ecosystems"


def test_invalid_log_level_rejected(tmp_path):
    config_file = tmp_path / "lockgraph.yaml"
    config_file.write_text("logging:\n  level: LOUD\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()


def test_unknown_section_rejected(tmp_path):
    config_file = tmp_path / "lockgraph.yaml"
    config_file.write_text("aws:\n  region: us-east-1\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as excinfo:
        ConfigManager(config_file).load_config()

    assert excinfo.value.config_section == "aws"


def test_unknown_key_rejected(tmp_path):
    config_file = tmp_path / "lockgraph.yaml"
    config_file.write_text("resolution:\n  max_depth: 3\n", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        ConfigManager(config_file).load_config()


def test_unparseable_file_rejected(tmp_path):
    config_file = tmp_path / "lockgraph.yaml"
    config_file.write_text("resolution: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigurationError) as excinfo:
        ConfigManager(config_file).load_config()

    assert excinfo.value.cause is not None


def test_save_and_reload(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCKGRAPH_COMPOSER_HOST", "gitlab.com")
    manager = ConfigManager()
    saved = tmp_path / "saved.yaml"
    manager.save_config(saved)

    monkeypatch.delenv("LOCKGRAPH_COMPOSER_HOST")
    reloaded = ConfigManager(saved).load_config()

    assert reloaded.resolution.composer_url_host == "gitlab.com"
    assert manager.reload_config().resolution.composer_url_host == "github.com"


def test_global_manager_is_shared():
    assert get_config_manager() is get_config_manager()
    assert get_config() is get_config_manager().get_config()
