"""
Main application orchestrator.

Handles:
- Configuration loading
- Collector creation
- HTTP exposition via prometheus_client
- Graceful shutdown
"""

import asyncio
import signal

import psutil
from prometheus_client import CollectorRegistry, generate_latest, start_http_server

from .collectors import Collector, Factories
from .config.loader import ConfigLoader
from .config.schema import Config
from .const import APP_NAME
from .logging import LogConfig, get_logger, setup_logging
from .registry import NodeCollector, build_collectors
from .utils.paths import configure_paths

logger = get_logger("app")


def configure_sources(config: Config) -> None:
    """Point sysfs lookups and psutil at the configured mount points."""
    resolver = configure_paths(config.paths.sysfs, config.paths.procfs)
    psutil.PROCFS_PATH = str(resolver.procfs)


def create_registry(collectors: dict[str, Collector]) -> CollectorRegistry:
    """Create a fresh prometheus_client registry holding one NodeCollector."""
    registry = CollectorRegistry()
    registry.register(NodeCollector(collectors))
    return registry


def scrape_once(config: Config) -> bytes:
    """Run a single scrape and render it in the text exposition format."""
    configure_sources(config)
    registry = create_registry(build_collectors(config))
    return generate_latest(registry)


class Application:
    """
    Main application class.

    Owns the collectors, the prometheus_client registry and the HTTP server.
    """

    def __init__(self, config: Config):
        self.config = config
        self.collectors: dict[str, Collector] = {}
        self.registry: CollectorRegistry | None = None

        self._server = None
        self._server_thread = None
        self._shutdown_event = asyncio.Event()

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._signal_handler)

    def _signal_handler(self) -> None:
        logger.info("Received shutdown signal")
        self._shutdown_event.set()

    async def start(self) -> None:
        """Start serving metrics and wait for shutdown."""
        logger.info(f"Starting {APP_NAME}")

        configure_sources(self.config)
        logger.debug(f"sysfs: {self.config.paths.sysfs}, procfs: {self.config.paths.procfs}")

        self.collectors = build_collectors(self.config)
        logger.info(f"Created {len(self.collectors)} collectors")

        self.registry = create_registry(self.collectors)

        web = self.config.web
        self._server, self._server_thread = start_http_server(
            web.port, addr=web.listen, registry=self.registry
        )
        logger.info(f"Listening on {web.listen}:{web.port}")

        self._setup_signal_handlers()

        await self._shutdown_event.wait()
        await self.stop()

    async def stop(self) -> None:
        """Stop the HTTP server."""
        logger.info(f"Stopping {APP_NAME}")

        if self._server is not None:
            self._server.shutdown()
            self._server.server_close()
            self._server = None

        if self._server_thread is not None:
            self._server_thread.join(timeout=5.0)
            self._server_thread = None

        logger.info(f"{APP_NAME} stopped")


def apply_web_overrides(config: Config, listen: str | None = None, port: int | None = None) -> None:
    """Apply --listen / --port from the command line."""
    if listen is not None:
        config.web.listen = listen
    if port is not None:
        config.web.port = port


def build_log_config(config: Config, cli_log_config: LogConfig | None = None) -> LogConfig:
    """
    Merge logging settings from the config file and the command line.

    CLI settings win; the file output of the config file is kept when the
    command line does not set one.
    """
    file_cfg = config.logging

    if cli_log_config is None:
        return LogConfig(
            console_level=file_cfg.level,
            console_colors=file_cfg.colors,
            file_enabled=file_cfg.file is not None,
            file_path=file_cfg.file or LogConfig.file_path,
            file_level=file_cfg.file_level,
            file_max_bytes=file_cfg.file_max_size * 1024 * 1024,
            file_backup_count=file_cfg.file_keep,
            format=file_cfg.format,
        )

    if not cli_log_config.file_enabled and file_cfg.file:
        cli_log_config.file_enabled = True
        cli_log_config.file_path = file_cfg.file
        cli_log_config.file_level = file_cfg.file_level
        cli_log_config.file_max_bytes = file_cfg.file_max_size * 1024 * 1024
        cli_log_config.file_backup_count = file_cfg.file_keep
    return cli_log_config


async def run_app(
    config_path: str | None,
    cli_log_config: LogConfig | None = None,
    listen: str | None = None,
    port: int | None = None,
) -> None:
    """
    Load configuration and run the application.

    Args:
        config_path: Path to configuration file (built-in defaults if None)
        cli_log_config: Logging config from CLI args (overrides file config)
        listen: Listen address override
        port: Listen port override
    """
    loader = ConfigLoader()
    config = loader.load_file(config_path) if config_path else Config()
    apply_web_overrides(config, listen, port)

    setup_logging(build_log_config(config, cli_log_config))

    if config_path:
        logger.info(f"Loaded configuration from {config_path}")
    else:
        logger.info("No configuration file, using defaults")

    for warning in loader.validate(config, known_collectors=set(Factories)):
        logger.warning(f"Config warning: {warning}")

    app = Application(config)
    await app.start()
