#!/usr/bin/env python3
"""Command-line interface for minifyimg.

This module provides the CLI for minifying a tree of images:
- Argument parsing and validation
- Configuration assembly (defaults, flags, minifyimg.json, environment)
- Logging setup
- Exit codes

Example:
    >>> from minifyimg.cli import parse_arguments
    >>> args = parse_arguments(["-i", "src/images/**/*", "-o", "dist", "-w"])
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional

from minifyimg.core.config import ConfigError, ConfigManager, ConfigSource
from minifyimg.core.constants import MINIFYIMG_VERSION, ConfigKey
from minifyimg.core.logging import Logger, set_global_logger
from minifyimg.core.validators import InvalidConfiguration
from minifyimg.engine.batch import BatchError
from minifyimg.plugins.registry import PluginError

DESCRIPTION = "minifyimg - Minify images in bulk"


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


def parse_arguments(args: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        args: Argument list to parse (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace

    Raises:
        SystemExit: On invalid arguments or --help/--version
    """
    parser = argparse.ArgumentParser(
        prog="minifyimg",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Minify into assets/images, keeping the directory layout
  minifyimg --input-dir='src/images/**/*' --out-dir=assets/images --deep-copy

  # Also convert everything to WebP, with explicit plugins
  minifyimg -i 'src/images/**/*' -o assets/images -w -p pngquant -p jpegtran

  # Several patterns, excluding a directory
  minifyimg -i 'src/**/*.png' -i '!src/raw/**' -o dist --flatten
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {MINIFYIMG_VERSION}",
    )

    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        type=str,
        help="Configuration file (default: minifyimg.json in the working directory)",
    )

    io_group = parser.add_argument_group("input/output options")

    io_group.add_argument(
        "-i",
        "--input-dir",
        metavar="PATTERN",
        action="append",
        dest="input_dir",
        help="Input glob pattern (repeatable, default: src/images/**/*)",
    )

    io_group.add_argument(
        "-o",
        "--out-dir",
        metavar="DIR",
        dest="out_dir",
        help="Output directory (default: assets/images)",
    )

    io_group.add_argument(
        "-d",
        "--deep-copy",
        action="store_true",
        default=None,
        dest="deep_copy",
        help="Keep the source directory structure under the output directory (default)",
    )

    io_group.add_argument(
        "--flatten",
        action="store_false",
        dest="deep_copy",
        help="Write every file directly into the output directory",
    )

    io_group.add_argument(
        "--no-glob",
        action="store_false",
        default=None,
        dest="glob",
        help="Treat inputs as literal file paths",
    )

    io_group.add_argument(
        "--no-clean",
        action="store_false",
        default=None,
        dest="clean",
        help="Do not delete the output directory before running",
    )

    plugin_group = parser.add_argument_group("plugin options")

    plugin_group.add_argument(
        "-p",
        "--plugin",
        metavar="NAME",
        action="append",
        dest="plugins",
        help="Plugin to run (repeatable, overrides the default plugins)",
    )

    plugin_group.add_argument(
        "-w",
        "--use-webp",
        action="store_true",
        default=None,
        dest="use_webp",
        help="Convert images to WebP after the other plugins",
    )

    log_group = parser.add_argument_group("logging options")

    log_group.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    log_group.add_argument(
        "--log-file",
        metavar="FILE",
        type=str,
        help="Also write logs to FILE",
    )

    parsed = parser.parse_args(args)

    _validate_arguments(parsed)

    return parsed


def _validate_arguments(args: argparse.Namespace) -> None:
    """
    Validate parsed arguments.

    Raises:
        CLIError: If validation fails
    """
    if args.config:
        config_path = Path(args.config)

        if not config_path.exists():
            raise CLIError(f"Configuration file does not exist: {args.config}")

        if not config_path.is_file():
            raise CLIError(f"Configuration path is not a file: {args.config}")

    if args.input_dir is not None and not all(args.input_dir):
        raise CLIError("Input patterns must not be empty")


def build_config_from_args(args: argparse.Namespace) -> Dict:
    """
    Build configuration dictionary from command-line arguments.

    Flags that were not given are left out so they do not hide values
    from the defaults.
    """
    config = {
        ConfigKey.INPUT_DIR: args.input_dir,
        ConfigKey.OUT_DIR: args.out_dir,
        ConfigKey.DEEP_COPY: args.deep_copy,
        ConfigKey.GLOB: args.glob,
        ConfigKey.CLEAN: args.clean,
        ConfigKey.PLUGINS: args.plugins,
        ConfigKey.USE_WEBP: args.use_webp,
    }

    logging_config = {}
    if args.debug:
        logging_config["level"] = "DEBUG"
    if args.log_file:
        logging_config["file"] = args.log_file
    if logging_config:
        config[ConfigKey.LOGGING] = logging_config

    return {key: value for key, value in config.items() if value is not None}


def load_config(args: argparse.Namespace, cwd: Optional[str] = None) -> ConfigManager:
    """
    Assemble the configuration for a run.

    Precedence, lowest first: defaults, command-line flags, the project file
    (--config or minifyimg.json), environment variables.

    Raises:
        ConfigError: If the configuration file cannot be parsed
    """
    config = ConfigManager()
    config.load_dict(build_config_from_args(args), ConfigSource.CLI_ARGS)

    if args.config:
        config.load_file(args.config, ConfigSource.PROJECT_FILE)
    else:
        config.load_project_file(cwd or Path.cwd())

    return config


def setup_logging(args: argparse.Namespace, config: ConfigManager) -> Logger:
    """
    Setup logging based on arguments and configuration.

    Returns:
        Configured logger, also installed as the global logger
    """
    log_level = "DEBUG" if args.debug else config.get("logging.level", "INFO")
    log_file = args.log_file or config.get("logging.file")

    logger = Logger("minifyimg", level=log_level)
    if log_file:
        logger.add_handler(logger.create_file_handler(log_file))

    set_global_logger(logger)
    return logger


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Parses arguments, assembles configuration and hands over to
    run_minifyimg() for the actual work.
    """
    try:
        args = parse_arguments(argv)
        config = load_config(args)
        logger = setup_logging(args, config)

        if config.loaded_file is not None:
            logger.debug("Loaded configuration file", path=config.loaded_file)

        from minifyimg.main import run_minifyimg

        return run_minifyimg(config, logger)

    except (CLIError, ConfigError, PluginError, InvalidConfiguration, BatchError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        import traceback

        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
