"""Tests for Config validation"""
from pathlib import Path

import pytest

from git_preview_flow.config import Config


class TestConfig:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        config = Config()
        assert config.remote_name == "origin"
        assert config.preview_branch == "preview"
        assert config.base_branches == ["main", "master"]
        assert config.data_path == Path.home() / ".git-preview-flow"

    def test_base_branches_not_shared(self):
        first, second = Config(), Config()
        first.base_branches.append("develop")
        assert second.base_branches == ["main", "master"]

    @pytest.mark.parametrize("kwargs", [
        {"remote_name": "  "},
        {"preview_branch": "pre view"},
        {"preview_branch": "preview\n"},
        {"base_branches": []},
        {"base_branches": ["main", "bad/name"]},
        {"preview_branch": "main"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            Config(**kwargs)

    def test_from_dict_ignores_unknown_keys(self):
        config = Config.from_dict({"preview_branch": "staging", "theme": "dark"})
        assert config.preview_branch == "staging"

    def test_coerce(self, temp_dir):
        config = Config(data_dir=str(temp_dir))
        assert Config.coerce(config) is config
        assert Config.coerce(None) == Config()
        assert Config.coerce({"data_dir": str(temp_dir)}).data_path == temp_dir

    def test_get_and_to_dict(self):
        config = Config(github_token="abc")
        assert config.get("github_token") == "abc"
        assert config.get("missing", "fallback") == "fallback"
        assert config.to_dict()["preview_branch"] == "preview"
