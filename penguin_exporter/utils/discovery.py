"""
Instance discovery in kernel pseudo-filesystem trees.

Hardware such as memory controllers shows up as numbered directories
(mc0, mc1, ...) whose count is only known at runtime. A pattern pairs a
glob, with one wildcard segment per topology level, and a regex that pulls
the instance index(es) back out of each matched path.
"""

import fnmatch
import os
import re
from dataclasses import dataclass
from pathlib import Path

from ..errors import DiscoveryError, IdentityError

GLOB_MAGIC = "*?["


@dataclass(frozen=True)
class Instance:
    """A discovered hardware instance."""

    path: Path
    identity: tuple[str, ...]

    def __str__(self) -> str:
        return f"{'/'.join(self.identity)} ({self.path})"


def _has_magic(segment: str) -> bool:
    return any(char in segment for char in GLOB_MAGIC)


def _natural_key(identity: tuple[str, ...]) -> tuple:
    return tuple(
        (0, int(part), "") if part.isascii() and part.isdigit() else (1, 0, part)
        for part in identity
    )


def _exists(path: Path) -> bool:
    """
    Check a fixed leaf path.

    Missing entries (or a file where a directory was expected) are absent;
    any other stat failure raises DiscoveryError.
    """
    try:
        os.stat(path)
    except (FileNotFoundError, NotADirectoryError):
        return False
    except OSError as e:
        raise DiscoveryError(f"couldn't enumerate {path}: {e}") from e
    return True


def walk_pattern(base: Path, segments: list[str]) -> list[Path]:
    """
    Expand a segmented glob below base in a single walk.

    Fixed segments are followed directly, wildcard segments list their
    parent directory once. A missing directory yields no matches; any other
    enumeration failure raises DiscoveryError.
    """
    if not segments:
        return [base]

    head, rest = segments[0], segments[1:]

    if not _has_magic(head):
        child = base / head
        if rest:
            return walk_pattern(child, rest)
        return [child] if _exists(child) else []

    try:
        with os.scandir(base) as entries:
            names = [entry.name for entry in entries]
    except (FileNotFoundError, NotADirectoryError):
        return []
    except OSError as e:
        raise DiscoveryError(f"couldn't enumerate {base}: {e}") from e

    if not head.startswith("."):
        names = [name for name in names if not name.startswith(".")]

    matches: list[Path] = []
    for name in sorted(fnmatch.filter(names, head)):
        child = base / name
        if rest:
            matches.extend(walk_pattern(child, rest))
        else:
            matches.append(child)

    return matches


class InstancePattern:
    """
    Discovery glob plus identity regex for one topology level.

    The regex must match the whole discovered path and carry one capture
    group per identity component.

    Example:
        InstancePattern(
            "devices/system/edac/mc/mc[0-9]*",
            r".*devices/system/edac/mc/mc([0-9]+)",
        )
    """

    def __init__(self, glob: str, regex: str):
        self.glob = glob
        self.segments = [segment for segment in glob.split("/") if segment]
        self.regex = re.compile(regex)

        if not self.segments:
            raise ValueError("Discovery glob must not be empty")
        if self.regex.groups < 1:
            raise ValueError(f"Identity regex needs at least one group: {regex}")

    def extract_identity(self, path: Path | str) -> tuple[str, ...]:
        """
        Parse the identity out of a discovered path.

        Raises:
            IdentityError: If the path does not have the expected shape
        """
        path_str = Path(path).as_posix()
        match = self.regex.fullmatch(path_str)
        if match is None:
            raise IdentityError(
                f"instance path didn't match regexp {self.regex.pattern!r}: {path_str}",
                path=path_str,
            )
        return match.groups()

    def discover(self, root: Path | str) -> list[Instance]:
        """
        Enumerate instances below root.

        Returns:
            Instances sorted by identity; empty if nothing matches

        Raises:
            DiscoveryError: If the tree cannot be enumerated
            IdentityError: If a match has the wrong shape or two matches
                share an identity
        """
        instances: list[Instance] = []
        seen: dict[tuple[str, ...], Path] = {}

        for path in walk_pattern(Path(root), self.segments):
            identity = self.extract_identity(path)
            if identity in seen:
                raise IdentityError(
                    f"duplicate identity {identity} for {seen[identity]} and {path}",
                    path=path.as_posix(),
                )
            seen[identity] = path
            instances.append(Instance(path=path, identity=identity))

        instances.sort(key=lambda instance: _natural_key(instance.identity))
        return instances

    def __repr__(self) -> str:
        return f"InstancePattern({self.glob!r}, {self.regex.pattern!r})"
