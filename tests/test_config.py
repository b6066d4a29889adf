"""
Tests for appcastkit.config module.

Tests configuration loading and merging including:
- YAML file loading
- Layering (defaults -> config file -> overrides)
- Path resolution relative to the YAML file
- Option type validation
- Error handling
"""

from __future__ import annotations

from pathlib import Path

import pytest

from appcastkit.config import AppcastOptions, load_effective_config, load_options
from appcastkit.config.loader import _deep_merge_dicts
from appcastkit.exceptions import ConfigError

pytestmark = pytest.mark.unit


class TestConfigLoading:
    """Tests for basic configuration loading."""

    def test_load_simple_config(self, create_yaml_file):
        """Test loading a config file without defaults."""
        path = create_yaml_file(
            "project/appcast.yaml",
            {"product_name": "MyApp", "extensions": ["exe", "msi"], "channel": "beta"},
        )

        opts = load_options(path)

        assert opts.product_name == "MyApp"
        assert opts.extensions == ("exe", "msi")
        assert opts.channel == "beta"
        assert opts.appcast_format == "xml"

    def test_no_config_gives_defaults(self):
        """Test that no file and no overrides yields default options."""
        assert load_options() == AppcastOptions()

    def test_load_with_org_defaults(self, tmp_test_dir):
        """Test that defaults/appcast.yaml is found upward and merged."""
        (tmp_test_dir / "defaults").mkdir()
        (tmp_test_dir / "defaults" / "appcast.yaml").write_text(
            "base_url: https://downloads.example.com\nchannel: stable\n"
        )
        project = tmp_test_dir / "apps" / "myapp"
        project.mkdir(parents=True)
        (project / "appcast.yaml").write_text("channel: beta\n")

        config = load_effective_config(project / "appcast.yaml")

        assert config["base_url"] == "https://downloads.example.com"
        assert config["channel"] == "beta"

    def test_empty_file_is_empty_mapping(self, tmp_test_dir):
        """Test that an empty YAML file is accepted."""
        path = tmp_test_dir / "appcast.yaml"
        path.write_text("")
        assert load_effective_config(path) == {}


class TestOverrides:
    """Tests for command-line style overrides."""

    def test_overrides_win(self, create_yaml_file):
        """Test that overrides replace file values."""
        path = create_yaml_file("appcast.yaml", {"channel": "beta", "product_name": "A"})
        opts = load_options(path, {"channel": "preview"})
        assert opts.channel == "preview"
        assert opts.product_name == "A"

    def test_none_overrides_ignored(self, create_yaml_file):
        """Test that unset flags do not clobber file values."""
        path = create_yaml_file("appcast.yaml", {"overwrite_old_items": True})
        opts = load_options(path, {"overwrite_old_items": None, "channel": None})
        assert opts.overwrite_old_items is True
        assert opts.channel is None

    def test_comma_separated_overrides(self):
        """Test list options given as comma-separated strings."""
        opts = load_options(overrides={"extensions": "exe, msi,exe", "critical_versions": "1.3"})
        assert opts.extensions == ("exe", "msi")
        assert opts.critical_versions == ("1.3",)


class TestPathResolution:
    """Tests for resolving relative paths."""

    def test_paths_relative_to_config_file(self, create_yaml_file, tmp_test_dir):
        """Test that YAML paths are resolved against the file's directory."""
        path = create_yaml_file(
            "release/appcast.yaml",
            {"source_directory": "../dist", "changelog_path": "notes", "key_directory": "/abs/keys"},
        )

        opts = load_options(path)

        assert opts.source_directory == (tmp_test_dir / "dist").resolve()
        assert opts.changelog_path == (tmp_test_dir / "release" / "notes").resolve()
        assert opts.key_directory == Path("/abs/keys")

    def test_override_paths_not_resolved(self, create_yaml_file):
        """Test that override paths are kept as given."""
        path = create_yaml_file("appcast.yaml", {})
        opts = load_options(path, {"output_directory": "out"})
        assert opts.output_directory == Path("out")

    def test_effective_output_directory(self):
        """Test fallback of the output directory to the source directory."""
        opts = AppcastOptions(source_directory=Path("dist"))
        assert opts.effective_output_directory == Path("dist")
        opts = AppcastOptions(source_directory=Path("dist"), output_directory=Path("out"))
        assert opts.effective_output_directory == Path("out")


class TestConfigMerging:
    """Tests for the deep merge helper."""

    def test_deep_merge(self):
        """Test nested dicts merge and lists replace."""
        base = {"a": {"x": 1, "y": 2}, "b": [1, 2], "c": "keep"}
        overlay = {"a": {"y": 3}, "b": [9]}
        merged = _deep_merge_dicts(base, overlay)
        assert merged == {"a": {"x": 1, "y": 3}, "b": [9], "c": "keep"}
        assert base["a"]["y"] == 2


class TestValidation:
    """Tests for option validation."""

    def test_unknown_option_raises(self, create_yaml_file):
        """Test that typos in option names are reported."""
        path = create_yaml_file("appcast.yaml", {"chanel": "beta"})
        with pytest.raises(ConfigError, match="Unknown option"):
            load_options(path)

    def test_wrong_bool_type_raises(self):
        """Test that booleans must be real booleans."""
        with pytest.raises(ConfigError, match="true or false"):
            AppcastOptions.from_dict({"prefix_version": "yes"})

    def test_wrong_list_type_raises(self):
        """Test that list options reject mappings."""
        with pytest.raises(ConfigError, match="comma-separated"):
            AppcastOptions.from_dict({"extensions": {"exe": True}})

    def test_numbers_become_strings(self):
        """Test that YAML numbers are accepted for string options."""
        opts = AppcastOptions.from_dict({"file_version": 1.4, "critical_versions": [1.3]})
        assert opts.file_version == "1.4"
        assert opts.critical_versions == ("1.3",)

    def test_validate(self):
        """Test the list of option problems."""
        assert AppcastOptions().validate() == []
        problems = AppcastOptions(
            extensions=(), operating_system="beos", output_file_name=" "
        ).validate()
        assert len(problems) == 3
        assert AppcastOptions(operating_system="").validate() == []
        assert AppcastOptions(operating_system="MacOS").validate() == []


class TestErrorHandling:
    """Tests for file and YAML errors."""

    def test_missing_file_raises(self, tmp_test_dir):
        """Test that a missing config file raises ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            load_options(tmp_test_dir / "nonexistent.yaml")

    def test_invalid_yaml_raises(self, tmp_test_dir):
        """Test that invalid YAML raises ConfigError."""
        path = tmp_test_dir / "bad.yaml"
        path.write_text("channel: [unclosed\n")
        with pytest.raises(ConfigError, match="Error parsing YAML"):
            load_options(path)

    def test_non_mapping_raises(self, tmp_test_dir):
        """Test that a top-level list is rejected."""
        path = tmp_test_dir / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_options(path)
