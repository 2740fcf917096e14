"""
Configuration loader with file reading and validation.
"""

from pathlib import Path

from ..collectors.stat import BOOT_TIME_SOURCES
from .parser import ConfigDocument, LexerError, ParseError, parse_config, parse_config_file
from .schema import Config


class ConfigError(Exception):
    """Exception raised for configuration errors."""

    pass


class ConfigLoader:
    """
    Loads and validates configuration from files or strings.

    Usage:
        loader = ConfigLoader()
        config = loader.load_file("/etc/penguin-exporter/config.conf")
        # or
        config = loader.load_string(config_text)
    """

    # Known directives for each block type
    KNOWN_DIRECTIVES = {
        "web": {"listen", "port"},
        "paths": {"sysfs", "procfs"},
        "logging": {"level", "file", "file_level", "file_max_size", "file_keep", "colors", "format"},
        "edac": {"csrows"},
        "stat": {"source"},
    }

    def __init__(self):
        self.last_document: ConfigDocument | None = None

    def load_file(self, path: str | Path) -> Config:
        """
        Load configuration from a file.

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        path = Path(path)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {path}")

        if not path.is_file():
            raise ConfigError(f"Not a file: {path}")

        try:
            document = parse_config_file(path)
        except (LexerError, ParseError) as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read configuration: {e}") from e

        return self._build(document)

    def load(self, path: str | Path) -> Config:
        """Alias for load_file."""
        return self.load_file(path)

    def load_string(
        self,
        source: str,
        filename: str = "<string>",
        base_path: str | Path | None = None,
    ) -> Config:
        """
        Load configuration from a string.

        Args:
            source: Configuration source text
            filename: Filename for error messages
            base_path: Base path for resolving includes

        Raises:
            ConfigError: If configuration cannot be parsed
        """
        try:
            document = parse_config(source, filename, Path(base_path) if base_path else None)
        except (LexerError, ParseError) as e:
            raise ConfigError(f"Failed to parse configuration: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read included configuration: {e}") from e

        return self._build(document)

    def _build(self, document: ConfigDocument) -> Config:
        self.last_document = document
        try:
            return Config.from_document(document)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

    def validate(self, config: Config, known_collectors: set[str] | None = None) -> list[str]:
        """
        Validate configuration and return list of warnings.

        Args:
            config: Configuration to validate
            known_collectors: Registered collector names (skip check if None)

        Returns:
            List of warning messages (empty if no issues)
        """
        warnings = []

        if self.last_document:
            warnings.extend(self._check_unknown_directives(self.last_document))

        if not 0 < config.web.port < 65536:
            warnings.append(f"Web port {config.web.port} is out of range")

        if known_collectors is not None:
            for name in sorted(config.collectors.enabled):
                if name not in known_collectors:
                    warnings.append(f"Unknown collector '{name}' in collectors block")

        if config.stat.source not in BOOT_TIME_SOURCES:
            warnings.append(
                f"Unknown boot time source '{config.stat.source}' "
                f"(expected one of: {', '.join(BOOT_TIME_SOURCES)})"
            )

        if not config.collectors.names:
            warnings.append("All collectors are disabled")

        return warnings

    def _check_unknown_directives(self, document: ConfigDocument) -> list[str]:
        """Check for unknown blocks and directives in parsed document."""
        warnings = []

        for block in document.blocks:
            if block.type == "collectors":
                # Directive names are collector names, checked separately
                continue

            known = self.KNOWN_DIRECTIVES.get(block.type)
            if known is None:
                warnings.append(f"Unknown block '{block.type}' (line {block.line})")
                continue

            for directive in block.directives:
                if directive.name not in known:
                    warnings.append(
                        f"Unknown directive '{directive.name}' in {block.type} block "
                        f"(line {directive.line})"
                    )

            for nested in block.blocks:
                warnings.append(
                    f"Unexpected nested block '{nested.type}' in {block.type} block "
                    f"(line {nested.line})"
                )

        for directive in document.directives:
            warnings.append(f"Unknown top-level directive '{directive.name}' (line {directive.line})")

        return warnings


def load_config(path: str | Path | None = None) -> Config:
    """
    Load configuration from a file, or built-in defaults if path is None.
    """
    if path is None:
        return Config()
    return ConfigLoader().load_file(path)
