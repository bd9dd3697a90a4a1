"""Tests for configuration loading."""

import pytest

from logbook_search.config import (
    SearchConfig,
    dict_to_config,
    find_config_file,
    load_config,
    load_json_config,
    load_python_config,
    load_toml_config,
)

# Fixture temp_project is provided by conftest.py


class TestFindConfigFile:
    """Tests for find_config_file."""

    def test_finds_python_config(self, temp_project):
        """Python config is found first."""
        (temp_project / "logbook_search.py").write_text("CONFIG = {}")
        (temp_project / "logbook_search.toml").write_text("")

        found = find_config_file(temp_project)
        assert found.name == "logbook_search.py"

    def test_finds_toml_config(self, temp_project):
        """TOML config is found if no Python config."""
        (temp_project / "logbook_search.toml").write_text("")

        found = find_config_file(temp_project)
        assert found.name == "logbook_search.toml"

    def test_finds_json_config(self, temp_project):
        """JSON config is found if no Python/TOML."""
        (temp_project / "logbook_search.json").write_text("{}")

        found = find_config_file(temp_project)
        assert found.name == "logbook_search.json"

    def test_finds_dotfile_config(self, temp_project):
        """Dotfile configs are found."""
        (temp_project / ".logbook_search.toml").write_text("")

        found = find_config_file(temp_project)
        assert found.name == ".logbook_search.toml"

    def test_returns_none_if_no_config(self, temp_project):
        """Returns None if no config file found."""
        assert find_config_file(temp_project) is None


class TestLoaders:
    """Tests for the per-format loaders."""

    def test_loads_toml(self, temp_project):
        """Loads TOML config file."""
        config_file = temp_project / "config.toml"
        config_file.write_text('[elasticsearch]\nindex = "logs"\n')

        assert load_toml_config(config_file) == {"elasticsearch": {"index": "logs"}}

    def test_loads_json(self, temp_project):
        """Loads JSON config file."""
        config_file = temp_project / "config.json"
        config_file.write_text('{"service": {"name": "test"}}')

        assert load_json_config(config_file)["service"]["name"] == "test"

    def test_loads_python_config_dict(self, temp_project):
        """Loads CONFIG dict from Python file."""
        config_file = temp_project / "logbook_search.py"
        config_file.write_text('CONFIG = {"search": {"max_size": 20 * 10}}\n')

        assert load_python_config(config_file) == {"search": {"max_size": 200}}

    def test_python_config_without_dict(self, temp_project):
        """A Python file without CONFIG gives an empty dict."""
        config_file = temp_project / "logbook_search.py"
        config_file.write_text("X = 1\n")

        assert load_python_config(config_file) == {}


class TestDictToConfig:
    """Tests for dict_to_config."""

    def test_defaults(self):
        """An empty dict gives the defaults."""
        config = dict_to_config({})

        assert config == SearchConfig()
        assert config.default_size == 100
        assert config.max_size == 1000
        assert config.index == "olog_logs"
        assert config.timestamp_field == "createdDate"

    def test_all_sections(self):
        """Every section is applied."""
        config = dict_to_config({
            "service": {"name": "Ops Log", "version": 2},
            "elasticsearch": {"hosts": "http://es:9200", "index": "ops_logs"},
            "search": {"default_size": 25, "max_size": 250, "timestamp_field": "created"},
        })

        assert config.service_name == "Ops Log"
        assert config.version == "2"
        assert config.hosts == ["http://es:9200"]
        assert config.index == "ops_logs"
        assert config.default_size == 25
        assert config.max_size == 250
        assert config.timestamp_field == "created"

    def test_hosts_list(self):
        """A list of hosts is kept."""
        config = dict_to_config({"elasticsearch": {"hosts": ["http://a:9200", "http://b:9200"]}})
        assert config.hosts == ["http://a:9200", "http://b:9200"]


class TestValidation:
    """Tests for pagination bound validation."""

    def test_max_size_must_be_positive(self):
        """A zero maximum is rejected."""
        with pytest.raises(ValueError, match="max_size"):
            SearchConfig(max_size=0, default_size=1)

    def test_default_must_fit_maximum(self):
        """The default page cannot exceed the maximum."""
        with pytest.raises(ValueError, match="default_size"):
            SearchConfig(default_size=50, max_size=10)

    def test_invalid_file_values(self):
        """Invalid values from a file are rejected."""
        with pytest.raises(ValueError):
            dict_to_config({"search": {"default_size": 0}})


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_config_file(self, temp_project):
        """Defaults are used without a config file."""
        assert load_config(temp_project) == SearchConfig()

    def test_toml_file(self, temp_project):
        """TOML files are found and applied."""
        (temp_project / "logbook_search.toml").write_text('[search]\nmax_size = 500\n')

        assert load_config(temp_project).max_size == 500

    def test_json_file(self, temp_project):
        """JSON files are applied."""
        (temp_project / ".logbook_search.json").write_text('{"elasticsearch": {"index": "x"}}')

        assert load_config(temp_project).index == "x"

    def test_python_file(self, temp_project):
        """Python files are applied."""
        (temp_project / "logbook_search.py").write_text('CONFIG = {"service": {"name": "py"}}\n')

        assert load_config(temp_project).service_name == "py"

    def test_explicit_path(self, temp_project):
        """An explicit path overrides discovery."""
        (temp_project / "logbook_search.toml").write_text('[search]\nmax_size = 500\n')
        other = temp_project / "other.json"
        other.write_text('{"search": {"max_size": 300}}')

        assert load_config(temp_project, other).max_size == 300

    def test_unsupported_suffix(self, temp_project):
        """Unknown config formats are rejected."""
        path = temp_project / "config.yaml"
        path.write_text("")

        with pytest.raises(ValueError, match="Unsupported config file type"):
            load_config(temp_project, path)
