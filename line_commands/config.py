#!/usr/bin/env python3
"""
Configuration system for line_commands
Supports YAML files, CLI overrides, and programmatic access for hosts
"""

import argparse
import logging
from copy import deepcopy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


CONFIG_VERSION = "1.0"


@dataclass
class DispatchConfig:
    """How lines are split and matched"""
    delimiter: str = " "
    strict_arity: bool = False  # surplus tokens are an arity error
    log_not_found: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            'delimiter': self.delimiter,
            'strict_arity': self.strict_arity,
            'log_not_found': self.log_not_found,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DispatchConfig':
        return cls(
            delimiter=data.get('delimiter', " "),
            strict_arity=data.get('strict_arity', False),
            log_not_found=data.get('log_not_found', True),
        )


@dataclass
class ConsoleConfig:
    """Console messages logging level configuration"""
    verbose: bool = False
    quiet: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'verbose': self.verbose,
            'quiet': self.quiet,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConsoleConfig':
        return cls(
            verbose=data.get('verbose', False),
            quiet=data.get('quiet', False),
        )


@dataclass
class ReplConfig:
    """Interactive demo settings"""
    prompt: str = "cmd> "
    exit_commands: List[str] = field(default_factory=lambda: ["quit", "exit"])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'prompt': self.prompt,
            'exit_commands': (list(self.exit_commands)
                              if isinstance(self.exit_commands, (list, tuple))
                              else self.exit_commands),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ReplConfig':
        exit_commands = data.get('exit_commands', ["quit", "exit"])
        if isinstance(exit_commands, (list, tuple)):
            exit_commands = list(exit_commands)
        # anything else is kept as-is for validate_config to reject
        return cls(
            prompt=data.get('prompt', "cmd> "),
            exit_commands=exit_commands,
        )


@dataclass
class LineCommandsConfig:
    """Complete configuration for a line_commands host"""
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    console: ConsoleConfig = field(default_factory=ConsoleConfig)
    repl: ReplConfig = field(default_factory=ReplConfig)

    # Metadata
    config_version: str = CONFIG_VERSION

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization"""
        return {
            'config_version': self.config_version,
            'dispatch': self.dispatch.to_dict(),
            'console': self.console.to_dict(),
            'repl': self.repl.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'LineCommandsConfig':
        """Create from dictionary (YAML loading); missing sections keep defaults"""
        config = cls()
        if 'config_version' in data:
            config.config_version = str(data['config_version'])
        if 'dispatch' in data:
            config.dispatch = DispatchConfig.from_dict(data['dispatch'] or {})
        if 'console' in data:
            config.console = ConsoleConfig.from_dict(data['console'] or {})
        # "debug" was the old name of the console section
        elif 'debug' in data:
            config.console = ConsoleConfig.from_dict(data['debug'] or {})
        if 'repl' in data:
            config.repl = ReplConfig.from_dict(data['repl'] or {})
        return config


def setup_logging(console: ConsoleConfig) -> int:
    """Configure the root logger from the console section; returns the level"""
    if console.verbose:
        level = logging.DEBUG
    elif console.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    logging.getLogger().setLevel(level)
    return level


class ConfigurationManager:
    """
    Manages configuration loading, merging, and validation
    """

    def __init__(self, config_file: str = "line_commands.yaml"):
        self.config_file = config_file
        self.config = LineCommandsConfig()
        self.config_file_path: Optional[Path] = None

        self.logger = logging.getLogger(__name__)

        # Standard config file locations (in order of preference)
        self.config_search_paths = [
            Path.cwd() / config_file,
            Path.cwd() / "config" / config_file,
            Path.home() / ".config" / "line_commands" / "config.yaml",
        ]

    def load_config(self, config_file: Optional[str] = None) -> LineCommandsConfig:
        """
        Load configuration from file with fallback chain

        Args:
            config_file: Specific config file path, or None for auto-discovery

        Returns:
            Loaded configuration object (defaults if nothing was found)
        """
        if config_file:
            config_path = Path(config_file)
            if config_path.exists():
                self.config = self._load_yaml_file(config_path)
                self.config_file_path = config_path
                self.logger.info(f"Loaded config from: {config_path}")
            else:
                self.logger.warning(f"Config file not found: {config_path}")
                self.logger.info("Using default configuration")
        else:
            for path in self.config_search_paths:
                if path.exists():
                    self.config = self._load_yaml_file(path)
                    self.config_file_path = path
                    self.logger.info(f"Auto-discovered config: {path}")
                    break
            else:
                self.logger.info("No config file found, using defaults")

        return self.config

    def _load_yaml_file(self, file_path: Path) -> LineCommandsConfig:
        """Load configuration from YAML file"""
        try:
            with open(file_path, 'r') as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Error loading config file {file_path}: {e}")
            return LineCommandsConfig()

        if not isinstance(yaml_data, dict):
            self.logger.error(f"Config file {file_path} does not contain a mapping")
            return LineCommandsConfig()

        for key in yaml_data:
            if key not in ('config_version', 'dispatch', 'console', 'debug', 'repl'):
                self.logger.warning(f"Unknown config section '{key}' in {file_path}")

        return LineCommandsConfig.from_dict(yaml_data)

    def merge_cli_args(self, args: argparse.Namespace) -> LineCommandsConfig:
        """Apply command line overrides on top of the loaded file"""
        if getattr(args, 'delimiter', None) is not None:
            self.config.dispatch.delimiter = args.delimiter
        if getattr(args, 'strict_arity', False):
            self.config.dispatch.strict_arity = True
        if getattr(args, 'prompt', None) is not None:
            self.config.repl.prompt = args.prompt
        if getattr(args, 'verbose', False):
            self.config.console.verbose = True
        if getattr(args, 'quiet', False):
            self.config.console.quiet = True
        return self.config

    def save_config(self, file_path: Optional[str] = None) -> bool:
        """
        Save current configuration to YAML file

        Args:
            file_path: Target file path, or None to use loaded file path

        Returns:
            True if saved successfully
        """
        if file_path:
            target_path = Path(file_path)
        elif self.config_file_path:
            target_path = self.config_file_path
        else:
            target_path = Path(self.config_file)

        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            with open(target_path, 'w') as f:
                f.write("# line_commands configuration\n")
                f.write(f"# Version: {self.config.config_version}\n\n")
                yaml.dump(self.config.to_dict(), f,
                          default_flow_style=False,
                          sort_keys=False,
                          indent=2)
        except OSError as e:
            self.logger.error(f"Error saving config to {target_path}: {e}")
            return False

        self.logger.info(f"Configuration saved to: {target_path}")
        return True

    def create_sample_config(self, file_path: str = "line_commands_sample.yaml") -> bool:
        """Create a sample configuration file with comments"""
        try:
            with open(file_path, 'w') as f:
                f.write(self._generate_sample_yaml())
        except OSError as e:
            self.logger.error(f"Error creating sample config {file_path}: {e}")
            return False
        return True

    def _generate_sample_yaml(self) -> str:
        return f"""# line_commands configuration
config_version: "{CONFIG_VERSION}"

dispatch:
  # Single character separating the command name and its arguments.
  # Consecutive delimiters produce empty arguments.
  delimiter: " "
  # Reject lines carrying more arguments than the command declares
  strict_arity: false
  # Log an INFO line for every unknown command
  log_not_found: true

console:
  verbose: false   # DEBUG logging
  quiet: false     # WARNING and above only

repl:
  prompt: "cmd> "
  exit_commands:
    - quit
    - exit
"""

    def validate_config(self) -> tuple[bool, list[str]]:
        """
        Validate configuration for common issues

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        delimiter = self.config.dispatch.delimiter
        if not isinstance(delimiter, str) or not delimiter:
            errors.append(f"Invalid delimiter: {delimiter!r}. Must be a non-empty string")

        if not isinstance(self.config.dispatch.strict_arity, bool):
            errors.append("dispatch.strict_arity must be true or false")

        if self.config.console.verbose and self.config.console.quiet:
            errors.append("console.verbose and console.quiet cannot both be set")

        if not isinstance(self.config.repl.prompt, str):
            errors.append("repl.prompt must be a string")

        exit_commands = self.config.repl.exit_commands
        if not isinstance(exit_commands, list) or not all(
                isinstance(c, str) and c for c in exit_commands):
            errors.append("repl.exit_commands must be a list of non-empty strings")

        return len(errors) == 0, errors

    def get_config(self) -> LineCommandsConfig:
        """Get current configuration"""
        return deepcopy(self.config)

    def update_config(self, updates: Dict[str, Any]) -> bool:
        """
        Update configuration programmatically

        Args:
            updates: Dictionary of configuration updates in dot notation
                    e.g., {"dispatch.strict_arity": True, "repl.prompt": "> "}

        Returns:
            True if all updates applied successfully
        """
        try:
            for key, value in updates.items():
                self._set_nested_attr(self.config, key, value)
        except AttributeError as e:
            self.logger.error(f"Error updating config: {e}")
            return False
        return True

    def _set_nested_attr(self, obj, attr_path: str, value):
        """Set nested attribute using dot notation"""
        attrs = attr_path.split('.')
        for attr in attrs[:-1]:
            obj = getattr(obj, attr)
        if not hasattr(obj, attrs[-1]):
            raise AttributeError(f"Unknown config key '{attr_path}'")
        setattr(obj, attrs[-1], value)


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactive typed command dispatcher",
    )
    parser.add_argument('-c', '--config', help='Configuration file (YAML)')
    parser.add_argument('--create-config', metavar='FILE',
                        help='Write a sample configuration file and exit')
    parser.add_argument('--save-config', metavar='FILE',
                        help='Save the effective configuration to FILE')
    parser.add_argument('--delimiter', help='Argument delimiter (default: space)')
    parser.add_argument('--strict-arity', action='store_true',
                        help='Reject surplus arguments')
    parser.add_argument('--prompt', help='REPL prompt')

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Warnings only')
    return parser


def setup_configuration(argv=None) -> tuple[LineCommandsConfig, bool, Optional[ConfigurationManager]]:
    """
    Setup configuration system with CLI integration

    Args:
        argv: Command line arguments (None for sys.argv)

    Returns:
        (config_object, should_exit, config_manager)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if args.create_config:
        manager = ConfigurationManager()
        if manager.create_sample_config(args.create_config):
            print(f"Sample configuration created: {args.create_config}")
            print(f"Edit the file and run again with: -c {args.create_config}")
        return LineCommandsConfig(), True, None

    manager = ConfigurationManager()
    manager.load_config(args.config)
    config = manager.merge_cli_args(args)

    is_valid, errors = manager.validate_config()
    if not is_valid:
        print("Configuration errors:")
        for error in errors:
            print(f"  ✗ {error}")
        return LineCommandsConfig(), True, None

    if args.save_config:
        if manager.save_config(args.save_config):
            print(f"Configuration saved to: {args.save_config}")

    return config, False, manager
