"""Tests for configuration loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from crudviews.config import DEFAULT_READ_ONLY, CrudViewsConfig, load_config


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_when_missing(self, tmp_path: Path):
        config = load_config(tmp_path)
        assert config == CrudViewsConfig()
        assert config.default_read_only == DEFAULT_READ_ONLY
        assert config.lookup_url_param == "id"

    def test_crudviews_toml(self, tmp_path: Path):
        (tmp_path / "crudviews.toml").write_text(
            'lookup_field = "uuid"\n'
            'lookup_url_param = "uuid"\n'
            'tags = ["api"]\n'
            "\n"
            "[descriptions]\n"
            'LIST = "Fetch all records."\n'
        )

        config = load_config(tmp_path)

        assert config.lookup_field == "uuid"
        assert config.tags == ["api"]
        assert config.descriptions == {"LIST": "Fetch all records."}

    def test_pyproject_tool_table(self, tmp_path: Path):
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            '[project]\nname = "shop"\n\n'
            "[tool.crudviews]\n"
            'default_read_only = ["id", "created"]\n'
        )

        config = load_config(pyproject)

        assert config.default_read_only == ("id", "created")

    def test_pyproject_without_table(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[project]\nname = "shop"\n')
        assert load_config(tmp_path) == CrudViewsConfig()

    def test_crudviews_toml_wins_over_pyproject(self, tmp_path: Path):
        (tmp_path / "pyproject.toml").write_text('[tool.crudviews]\nlookup_field = "pk"\n')
        (tmp_path / "crudviews.toml").write_text('lookup_field = "slug"\n')
        assert load_config(tmp_path).lookup_field == "slug"

    def test_unknown_keys_rejected(self, tmp_path: Path):
        (tmp_path / "crudviews.toml").write_text('lookup_feild = "slug"\n')
        with pytest.raises(ValidationError):
            load_config(tmp_path)

    def test_config_is_frozen(self):
        with pytest.raises(ValidationError):
            CrudViewsConfig().lookup_field = "slug"  # type: ignore[misc]
