"""
Root path resolution for the kernel pseudo-filesystems.

Collectors never hardcode /sys or /proc; they ask the resolver, so the
exporter can run against a tree mounted elsewhere (containers, tests).
"""

from pathlib import Path

from ..const import DEFAULT_PROCFS, DEFAULT_SYSFS


class PathResolver:
    """Builds paths below the configured sysfs and procfs mount points."""

    def __init__(self, sysfs: str | Path = DEFAULT_SYSFS, procfs: str | Path = DEFAULT_PROCFS):
        self.sysfs = Path(sysfs)
        self.procfs = Path(procfs)

    def sys_path(self, *parts: str) -> Path:
        """Path below the sysfs root."""
        return self.sysfs.joinpath(*parts)

    def __repr__(self) -> str:
        return f"PathResolver(sysfs={str(self.sysfs)!r}, procfs={str(self.procfs)!r})"


_default_resolver = PathResolver()


def get_resolver() -> PathResolver:
    """Get the process-wide resolver."""
    return _default_resolver


def configure_paths(sysfs: str | Path = DEFAULT_SYSFS, procfs: str | Path = DEFAULT_PROCFS) -> PathResolver:
    """
    Replace the process-wide resolver.

    Called once at startup from the ``paths`` config block.
    """
    global _default_resolver
    _default_resolver = PathResolver(sysfs, procfs)
    return _default_resolver
