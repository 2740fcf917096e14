"""
Configuration schema with dataclasses for validation and type safety.

Defines all configuration sections, their fields and defaults.
"""

from dataclasses import dataclass, field

from ..const import DEFAULT_LISTEN_ADDRESS, DEFAULT_LISTEN_PORT, DEFAULT_PROCFS, DEFAULT_SYSFS
from .parser import BOOLEAN_KEYWORDS, Block, ConfigDocument

# Collectors enabled when the config does not mention them
DEFAULT_COLLECTORS = {"edac": True, "stat": True}


def parse_bool(value: object, name: str) -> bool:
    """Accept a boolean token or a quoted on/off keyword."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in BOOLEAN_KEYWORDS:
        return BOOLEAN_KEYWORDS[value.lower()]
    raise ValueError(f"{name}: expected on/off, got {value!r}")


@dataclass
class WebConfig:
    """HTTP exposition endpoint."""

    listen: str = DEFAULT_LISTEN_ADDRESS
    port: int = DEFAULT_LISTEN_PORT

    @classmethod
    def from_block(cls, block: Block | None) -> "WebConfig":
        """Create WebConfig from a parsed 'web' block."""
        if block is None:
            return cls()

        return cls(
            listen=str(block.get_value("listen", DEFAULT_LISTEN_ADDRESS)),
            port=int(block.get_value("port", DEFAULT_LISTEN_PORT)),
        )


@dataclass
class PathsConfig:
    """Mount points of the kernel pseudo-filesystems."""

    sysfs: str = DEFAULT_SYSFS
    procfs: str = DEFAULT_PROCFS

    @classmethod
    def from_block(cls, block: Block | None) -> "PathsConfig":
        """Create PathsConfig from a parsed 'paths' block."""
        if block is None:
            return cls()

        return cls(
            sysfs=str(block.get_value("sysfs", DEFAULT_SYSFS)),
            procfs=str(block.get_value("procfs", DEFAULT_PROCFS)),
        )


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"  # debug, info, warning, error
    file: str | None = None  # Log file path
    file_level: str = "debug"
    file_max_size: int = 10  # Max file size in MB
    file_keep: int = 5  # Number of backup files to keep
    colors: bool = True
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    @classmethod
    def from_block(cls, block: Block | None) -> "LoggingConfig":
        """Create LoggingConfig from a parsed 'logging' block."""
        if block is None:
            return cls()

        defaults = cls()
        return cls(
            level=str(block.get_value("level", defaults.level)),
            file=block.get_value("file"),
            file_level=str(block.get_value("file_level", defaults.file_level)),
            file_max_size=int(block.get_value("file_max_size", defaults.file_max_size)),
            file_keep=int(block.get_value("file_keep", defaults.file_keep)),
            colors=parse_bool(block.get_value("colors", defaults.colors), "colors"),
            format=str(block.get_value("format", defaults.format)),
        )


@dataclass
class CollectorsConfig:
    """Which collectors are enabled (name -> on/off)."""

    enabled: dict[str, bool] = field(default_factory=lambda: dict(DEFAULT_COLLECTORS))

    @classmethod
    def from_block(cls, block: Block | None) -> "CollectorsConfig":
        """
        Create CollectorsConfig from a parsed 'collectors' block.

        Unknown names are kept so the loader can warn about them.
        """
        enabled = dict(DEFAULT_COLLECTORS)
        if block is not None:
            for directive in block.directives:
                enabled[directive.name] = (
                    parse_bool(directive.value, directive.name) if directive.values else True
                )
        return cls(enabled=enabled)

    @property
    def names(self) -> list[str]:
        """Names of enabled collectors, sorted."""
        return sorted(name for name, on in self.enabled.items() if on)


@dataclass
class EdacConfig:
    """EDAC collector settings."""

    csrows: bool = True

    @classmethod
    def from_block(cls, block: Block | None) -> "EdacConfig":
        if block is None:
            return cls()
        return cls(csrows=parse_bool(block.get_value("csrows", True), "csrows"))


@dataclass
class StatConfig:
    """Boot time collector settings."""

    source: str = "auto"  # auto, sysctl, psutil

    @classmethod
    def from_block(cls, block: Block | None) -> "StatConfig":
        if block is None:
            return cls()
        return cls(source=str(block.get_value("source", "auto")).lower())


def merge_blocks(doc: ConfigDocument, type_name: str) -> Block | None:
    """
    Combine all top-level blocks of a type into one.

    Lets included files extend or override a section; later directives win.
    """
    blocks = doc.get_blocks(type_name)
    if not blocks:
        return None

    merged = Block(type=type_name, line=blocks[0].line, column=blocks[0].column)
    for block in blocks:
        merged.directives.extend(block.directives)
        merged.blocks.extend(block.blocks)
    return merged


@dataclass
class Config:
    """Root configuration."""

    web: WebConfig = field(default_factory=WebConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    collectors: CollectorsConfig = field(default_factory=CollectorsConfig)
    edac: EdacConfig = field(default_factory=EdacConfig)
    stat: StatConfig = field(default_factory=StatConfig)

    @classmethod
    def from_document(cls, doc: ConfigDocument) -> "Config":
        """Create Config from a parsed ConfigDocument."""
        return cls(
            web=WebConfig.from_block(merge_blocks(doc, "web")),
            paths=PathsConfig.from_block(merge_blocks(doc, "paths")),
            logging=LoggingConfig.from_block(merge_blocks(doc, "logging")),
            collectors=CollectorsConfig.from_block(merge_blocks(doc, "collectors")),
            edac=EdacConfig.from_block(merge_blocks(doc, "edac")),
            stat=StatConfig.from_block(merge_blocks(doc, "stat")),
        )
