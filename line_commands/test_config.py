"""
Tests for line_commands configuration loading, validation and CLI overrides.

Run with:  python -m pytest line_commands/test_config.py -v
"""

import logging

import pytest
import yaml

from line_commands.config import (
    ConfigurationManager,
    ConsoleConfig,
    DispatchConfig,
    LineCommandsConfig,
    create_argument_parser,
    setup_configuration,
    setup_logging,
)
from line_commands.demo import build_dispatcher
from line_commands.dispatcher import Outcome


@pytest.fixture
def config_file(tmp_path):
    """Write a YAML config and return its path."""

    def write(data, name="line_commands.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(data))
        return path

    return write


# ============================================================
# Dataclass conversion
# ============================================================

class TestConfigDataclasses:

    def test_defaults(self):
        config = LineCommandsConfig()
        assert config.dispatch.delimiter == " "
        assert config.dispatch.strict_arity is False
        assert config.console.verbose is False
        assert config.repl.exit_commands == ["quit", "exit"]

    def test_from_dict_partial(self):
        config = LineCommandsConfig.from_dict({"dispatch": {"strict_arity": True}})
        assert config.dispatch.strict_arity is True
        assert config.dispatch.delimiter == " "
        assert config.repl.prompt == "cmd> "

    def test_legacy_debug_section(self):
        config = LineCommandsConfig.from_dict({"debug": {"verbose": True}})
        assert config.console.verbose is True

    def test_to_dict_sections(self):
        data = LineCommandsConfig().to_dict()
        assert set(data) == {"config_version", "dispatch", "console", "repl"}
        assert data["dispatch"]["delimiter"] == " "


# ============================================================
# ConfigurationManager
# ============================================================

class TestConfigurationManager:

    def test_load_file(self, config_file):
        path = config_file({
            "dispatch": {"delimiter": ",", "strict_arity": True},
            "repl": {"prompt": "> "},
        })
        config = ConfigurationManager().load_config(str(path))
        assert config.dispatch.delimiter == ","
        assert config.dispatch.strict_arity is True
        assert config.repl.prompt == "> "

    def test_missing_file_uses_defaults(self, tmp_path):
        config = ConfigurationManager().load_config(str(tmp_path / "absent.yaml"))
        assert config == LineCommandsConfig()

    def test_malformed_yaml_uses_defaults(self, tmp_path, caplog):
        path = tmp_path / "broken.yaml"
        path.write_text("dispatch: [unclosed\n")
        with caplog.at_level(logging.ERROR):
            config = ConfigurationManager().load_config(str(path))
        assert config == LineCommandsConfig()
        assert "Error loading config file" in caplog.text

    def test_unknown_section_warns(self, config_file, caplog):
        path = config_file({"network": {"port": 1}})
        with caplog.at_level(logging.WARNING):
            ConfigurationManager().load_config(str(path))
        assert "Unknown config section 'network'" in caplog.text

    def test_save_and_reload(self, tmp_path):
        manager = ConfigurationManager()
        manager.config.dispatch.delimiter = ";"
        manager.config.console.quiet = True
        target = tmp_path / "nested" / "saved.yaml"
        assert manager.save_config(str(target))

        reloaded = ConfigurationManager().load_config(str(target))
        assert reloaded.dispatch.delimiter == ";"
        assert reloaded.console.quiet is True

    def test_sample_config_loads_as_defaults(self, tmp_path):
        path = tmp_path / "sample.yaml"
        manager = ConfigurationManager()
        assert manager.create_sample_config(str(path))
        assert ConfigurationManager().load_config(str(path)) == LineCommandsConfig()

    def test_validate_defaults(self):
        assert ConfigurationManager().validate_config() == (True, [])

    def test_validate_errors(self):
        manager = ConfigurationManager()
        manager.config.dispatch.delimiter = ""
        manager.config.console.verbose = True
        manager.config.console.quiet = True
        manager.config.repl.exit_commands = ["quit", ""]
        is_valid, errors = manager.validate_config()
        assert not is_valid
        assert len(errors) == 3

    def test_scalar_exit_commands_rejected(self, config_file):
        path = config_file({"repl": {"exit_commands": "quit"}})
        manager = ConfigurationManager()
        config = manager.load_config(str(path))
        assert config.repl.exit_commands == "quit"
        is_valid, errors = manager.validate_config()
        assert not is_valid
        assert errors == ["repl.exit_commands must be a list of non-empty strings"]

    def test_update_config(self):
        manager = ConfigurationManager()
        assert manager.update_config({"dispatch.strict_arity": True, "repl.prompt": "$ "})
        assert manager.config.dispatch.strict_arity is True
        assert manager.config.repl.prompt == "$ "

    def test_update_unknown_key(self):
        manager = ConfigurationManager()
        assert not manager.update_config({"dispatch.colour": "red"})

    def test_get_config_is_a_copy(self):
        manager = ConfigurationManager()
        copy = manager.get_config()
        copy.dispatch.delimiter = ","
        assert manager.config.dispatch.delimiter == " "


# ============================================================
# CLI integration
# ============================================================

class TestCommandLine:

    def test_cli_overrides_file(self, config_file):
        path = config_file({"dispatch": {"delimiter": ","}})
        args = create_argument_parser().parse_args(
            ["-c", str(path), "--delimiter", ";", "--strict-arity", "-v"])
        manager = ConfigurationManager()
        manager.load_config(args.config)
        config = manager.merge_cli_args(args)
        assert config.dispatch.delimiter == ";"
        assert config.dispatch.strict_arity is True
        assert config.console.verbose is True

    def test_verbose_and_quiet_exclusive(self):
        with pytest.raises(SystemExit):
            create_argument_parser().parse_args(["-v", "-q"])

    def test_setup_configuration(self, config_file):
        path = config_file({"repl": {"prompt": ">> "}})
        config, should_exit, manager = setup_configuration(["-c", str(path)])
        assert not should_exit
        assert manager is not None
        assert config.repl.prompt == ">> "

    def test_setup_configuration_create_config(self, tmp_path):
        path = tmp_path / "new.yaml"
        _, should_exit, manager = setup_configuration(["--create-config", str(path)])
        assert should_exit
        assert manager is None
        assert path.exists()

    def test_setup_configuration_invalid(self, config_file):
        path = config_file({"dispatch": {"delimiter": ""}})
        _, should_exit, _ = setup_configuration(["-c", str(path)])
        assert should_exit


class TestSetupLogging:

    @pytest.mark.parametrize("console, level", [
        (ConsoleConfig(verbose=True), logging.DEBUG),
        (ConsoleConfig(quiet=True), logging.WARNING),
        (ConsoleConfig(), logging.INFO),
    ])
    def test_levels(self, console, level):
        assert setup_logging(console) == level
        assert logging.getLogger().level == level


# ============================================================
# Demo host wiring
# ============================================================

class TestDemoDispatcher:

    def test_demo_commands(self):
        dispatcher = build_dispatcher()
        assert dispatcher.dispatch("greet world").value == "Hello, world!"
        assert dispatcher.dispatch("add 2 3").value == 5
        assert dispatcher.dispatch("initial ada").value == "A"
        assert dispatcher.dispatch("count 2").value == 2
        assert dispatcher.dispatch("count 3").value == 5
        assert dispatcher.dispatch("reset").handled
        assert dispatcher.dispatch("count 1").value == 1

    def test_demo_respects_dispatch_config(self):
        dispatcher = build_dispatcher(DispatchConfig(delimiter=",", strict_arity=True))
        assert dispatcher.dispatch("add,2,3").value == 5
        assert dispatcher.dispatch("add,2,3,4").outcome is Outcome.ARITY_ERROR
