"""Tests for precommit_supervisor.config module."""

from argparse import Namespace
from pathlib import Path

from precommit_supervisor.config import (
    ALL_FILES_ARGS,
    HOOKS_CONFIG_FILENAME,
    SupervisorConfig,
    build_config,
    load_config_from_yaml,
)


class TestSupervisorConfig:
    def test_defaults(self):
        c = SupervisorConfig()
        assert c.executable == "pre-commit"
        assert c.subcommand == "run"
        assert c.color_flag == "--color=always"
        assert c.extra_args == []
        assert c.show_output_on_failure is True
        assert c.project_root is None
        assert c.config_filename == ".pre-commit-config.yaml"

    def test_project_root_resolved_to_absolute(self):
        c = SupervisorConfig(project_root=Path("."))
        assert c.project_root.is_absolute()

    def test_extra_args_not_shared(self):
        a = SupervisorConfig()
        a.extra_args.append("--verbose")
        assert SupervisorConfig().extra_args == []

    def test_log_level_default(self):
        assert SupervisorConfig().log_level == "info"


class TestConstants:
    def test_all_files_args(self):
        assert ALL_FILES_ARGS == ("--all-files",)

    def test_hooks_config_filename(self):
        assert HOOKS_CONFIG_FILENAME == ".pre-commit-config.yaml"


class TestLoadConfigFromYaml:
    def test_returns_empty_dict_for_missing_file(self, tmp_path):
        result = load_config_from_yaml(tmp_path / "nonexistent.yaml")
        assert result == {}

    def test_loads_yaml_values(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text(
            "supervisor:\n"
            "  executable: /opt/bin/pre-commit\n"
            "  log_level: debug\n"
            "  extra_args: [--show-diff-on-failure]\n"
        )
        result = load_config_from_yaml(cfg)
        assert result["executable"] == "/opt/bin/pre-commit"
        assert result["log_level"] == "debug"
        assert result["extra_args"] == ["--show-diff-on-failure"]

    def test_loads_display_and_paths(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text(
            "supervisor:\n"
            "  display:\n"
            "    show_output_on_failure: false\n"
            "  paths:\n"
            "    hooks_config: ci/pre-commit.yaml\n"
            "    root: /srv/project\n"
        )
        result = load_config_from_yaml(cfg)
        assert result["show_output_on_failure"] is False
        assert result["config_filename"] == "ci/pre-commit.yaml"
        assert result["project_root"] == Path("/srv/project")

    def test_unset_keys_are_none(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text("supervisor:\n  subcommand: run\n")
        result = load_config_from_yaml(cfg)
        assert result["subcommand"] == "run"
        assert result["executable"] is None
        assert result["extra_args"] is None

    def test_returns_empty_dict_for_invalid_yaml(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text(": invalid: yaml: [")
        result = load_config_from_yaml(cfg)
        assert result == {}

    def test_returns_empty_dict_for_wrong_shape(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text("- just\n- a list\n")
        assert load_config_from_yaml(cfg) == {}

    def test_returns_empty_dict_for_impossible_date(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text("supervisor:\n  log_level: 2020-99-99\n")
        assert load_config_from_yaml(cfg) == {}

    def test_returns_empty_dict_for_deep_nesting(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text("[" * 5000)
        assert load_config_from_yaml(cfg) == {}

    def test_empty_file(self, tmp_path):
        cfg = tmp_path / "config.yaml"
        cfg.write_text("")
        result = load_config_from_yaml(cfg)
        assert all(value is None for value in result.values())


class TestBuildConfig:
    def _default_args(self, **overrides) -> Namespace:
        """Create a Namespace with default CLI arg values."""
        defaults = {
            "executable": "",
            "project_root": "",
            "no_popup": False,
            "log_level": None,
        }
        defaults.update(overrides)
        return Namespace(**defaults)

    def test_yaml_overrides_defaults(self):
        config = build_config({"subcommand": "try-repo"}, self._default_args())
        assert config.subcommand == "try-repo"

    def test_none_values_ignored(self):
        config = build_config({"executable": None}, self._default_args())
        assert config.executable == "pre-commit"

    def test_cli_overrides_yaml(self):
        args = self._default_args(executable="prek")
        config = build_config({"executable": "pre-commit-3"}, args)
        assert config.executable == "prek"

    def test_no_popup_flag(self):
        config = build_config({}, self._default_args(no_popup=True))
        assert config.show_output_on_failure is False

    def test_project_root_from_cli(self, tmp_path):
        config = build_config({}, self._default_args(project_root=str(tmp_path)))
        assert config.project_root == tmp_path.resolve()

    def test_log_level_from_cli(self):
        config = build_config({"log_level": "warning"}, self._default_args(log_level="debug"))
        assert config.log_level == "debug"

    def test_missing_attributes_tolerated(self):
        config = build_config({}, Namespace())
        assert config.executable == "pre-commit"
