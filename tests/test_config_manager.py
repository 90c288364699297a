"""
Tests for ConfigManager
"""

import json

import pytest

from memoryseed.config_manager import ConfigManager


class TestConfigManager:
    """Test configuration loading and dot-notation access"""

    def test_defaults_without_file(self, isolated_cwd):
        config = ConfigManager()

        assert config.get('extraction.backend') == "auto"
        assert config.get('extraction.batch_size') == 5
        assert config.get('dedup.enabled') is True
        assert config.get('dedup.similarity_threshold') == 0.8
        assert config.get('thresholds.tech_min_conversations') == 3
        assert config.config_path == isolated_cwd / ".memoryseed" / "config.json"

    def test_defaults_are_not_shared(self, isolated_cwd):
        first = ConfigManager()
        first.config['dedup']['enabled'] = False

        assert ConfigManager().get('dedup.enabled') is True

    def test_user_config_overrides_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"dedup": {"similarity_threshold": 0.9}}))

        config = ConfigManager(str(path))

        assert config.get('dedup.similarity_threshold') == 0.9
        assert config.get('dedup.enabled') is True

    def test_finds_project_config(self, isolated_cwd):
        project_config = isolated_cwd / ".memoryseed" / "config.json"
        project_config.parent.mkdir()
        project_config.write_text(json.dumps({"extraction": {"backend": "heuristic"}}))

        assert ConfigManager().get('extraction.backend') == "heuristic"

    def test_invalid_json_uses_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{oops")

        assert ConfigManager(str(path)).get('extraction.backend') == "auto"

    def test_non_object_uses_defaults(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps([1, 2, 3]))

        assert ConfigManager(str(path)).get('dedup.enabled') is True

    def test_get_missing_key_returns_default(self, tmp_path):
        config = ConfigManager(str(tmp_path / "config.json"))

        assert config.get('nope.missing') is None
        assert config.get('nope.missing', 42) == 42

    def test_set_persists(self, tmp_path):
        path = tmp_path / "sub" / "config.json"
        config = ConfigManager(str(path))

        config.set('dedup.enabled', False)

        assert json.loads(path.read_text())['dedup']['enabled'] is False
        assert ConfigManager(str(path)).get('dedup.enabled') is False

    def test_set_creates_intermediate_sections(self, tmp_path):
        config = ConfigManager(str(tmp_path / "config.json"))
        config.set('custom.nested.value', 1)

        assert config.get('custom.nested.value') == 1

    def test_get_path(self, tmp_path):
        config = ConfigManager(str(tmp_path / "config.json"))

        assert str(config.get_path('candidates_file')) == ".memoryseed/candidates.json"

    def test_get_path_unknown_key(self, tmp_path):
        config = ConfigManager(str(tmp_path / "config.json"))

        with pytest.raises(ValueError):
            config.get_path('nowhere')
