"""
Entry point for Penguin Exporter.

Usage:
    python -m penguin_exporter /path/to/config.conf
    python -m penguin_exporter --once
    python -m penguin_exporter --help
"""

import argparse
import asyncio
import sys
from pathlib import Path

from . import __version__
from .app import apply_web_overrides, build_log_config, run_app, scrape_once
from .collectors import Factories
from .config.loader import ConfigError, ConfigLoader
from .config.schema import Config
from .const import APP_NAME, DEFAULT_CONFIG_PATH
from .logging import LogConfig, get_logger, setup_logging

logger = get_logger("main")


def validate_config(config_path: str | None) -> int:
    """Validate configuration file and print warnings."""
    try:
        loader = ConfigLoader()
        config = loader.load_file(config_path) if config_path else Config()

        warnings = loader.validate(config, known_collectors=set(Factories))

        if warnings:
            print(f"Configuration warnings ({len(warnings)}):")
            for warning in warnings:
                print(f"  - {warning}")

        print("\nConfiguration summary:")
        print(f"  Listen: {config.web.listen}:{config.web.port}")
        print(f"  sysfs: {config.paths.sysfs}")
        print(f"  procfs: {config.paths.procfs}")
        print(f"  Logging level: {config.logging.level}")
        if config.logging.file:
            print(f"  Log file: {config.logging.file}")
        print(f"  Collectors: {', '.join(config.collectors.names) or 'none'}")

        print("\nConfiguration is valid!")
        return 0

    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1


def print_once(config_path: str | None, args: argparse.Namespace, log_config: LogConfig | None) -> int:
    """Run one scrape and print the exposition text to stdout."""
    try:
        config = ConfigLoader().load_file(config_path) if config_path else Config()
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    apply_web_overrides(config, args.listen, args.port)
    once_log_config = build_log_config(config, log_config)
    once_log_config.console_stderr = True
    setup_logging(once_log_config)

    try:
        output = scrape_once(config)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    sys.stdout.write(output.decode("utf-8"))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="penguin-exporter",
        description="Hardware and kernel counter exporter for Prometheus",
    )

    parser.add_argument(
        "config",
        nargs="?",
        default=None,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH} if present)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )
    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only errors)",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    parser.add_argument(
        "--listen",
        metavar="ADDRESS",
        help="Address to listen on (overrides config)",
    )
    parser.add_argument(
        "--port",
        type=int,
        help="Port to listen on (overrides config)",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and exit",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Scrape once, print metrics to stdout and exit",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{APP_NAME} {__version__}",
    )
    return parser


def cli_log_config(args: argparse.Namespace) -> LogConfig | None:
    """
    Build logging config from command-line flags.

    Returns None when no logging flag was given, so the config file applies.
    """
    if not (args.debug or args.verbose or args.quiet or args.no_color or args.log_file):
        return None

    log_config = LogConfig()

    if args.debug:
        log_config.console_level = "debug"
    elif args.verbose:
        log_config.console_level = "info"
    elif args.quiet:
        log_config.console_level = "error"
    else:
        log_config.console_level = "warning"

    if args.no_color:
        log_config.console_colors = False

    if args.log_file:
        log_config.file_enabled = True
        log_config.file_path = args.log_file

    return log_config


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    if args.config is not None:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Configuration file not found: {config_path}", file=sys.stderr)
            return 1
    elif Path(DEFAULT_CONFIG_PATH).exists():
        config_path = Path(DEFAULT_CONFIG_PATH)
    else:
        config_path = None

    config_arg = str(config_path) if config_path else None
    log_config = cli_log_config(args)

    # Logging until the config file is read
    setup_logging(log_config)

    if args.validate:
        return validate_config(config_arg)

    if args.once:
        return print_once(config_arg, args, log_config)

    try:
        asyncio.run(run_app(config_arg, cli_log_config=log_config, listen=args.listen, port=args.port))
        return 0
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except OSError as e:
        logger.error(f"Failed to start HTTP server: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0


if __name__ == "__main__":
    sys.exit(main())
