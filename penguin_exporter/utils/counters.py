"""
Counter readers.

Both strategies answer the same question, "what is the current value of
this counter", and fail with a ReadError that names the instance and the
counter:

- TextCounterReader: one unsigned integer per sysfs file
- RawStructReader: one field of a fixed-layout C structure returned by a
  system information query (sysctl)
"""

import re
import struct
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path

from ..errors import ReadError
from .discovery import Instance
from .sysctl import sysctl_raw

UINT_RE = re.compile(r"[0-9]+")


def read_uint_from_file(path: Path | str) -> int:
    """
    Read a single unsigned integer from a text file.

    Raises:
        OSError: If the file is missing or unreadable
        ValueError: If the content is not an unsigned integer
    """
    data = Path(path).read_text().strip()
    if not UINT_RE.fullmatch(data):
        raise ValueError(f"invalid unsigned integer {data!r} in {path}")
    return int(data)


class CounterReader(ABC):
    """Reads one counter value."""

    @abstractmethod
    def read(self, counter: str, instance: Instance | None = None, kind: str = "instance") -> int:
        """
        Read the current value of a counter.

        Args:
            counter: Counter file name or query key
            instance: Instance the counter belongs to, if any
            kind: Instance kind used in error messages ("controller", ...)

        Returns:
            Non-negative integer value

        Raises:
            ReadError: If the value cannot be retrieved or parsed
        """
        pass


class TextCounterReader(CounterReader):
    """Reads ``<instance path>/<counter>`` as an unsigned integer."""

    def read(self, counter: str, instance: Instance | None = None, kind: str = "instance") -> int:
        if instance is None:
            raise ReadError(f"couldn't get {counter}: no instance path", counter=counter)

        try:
            return read_uint_from_file(instance.path / counter)
        except (OSError, ValueError) as e:
            raise ReadError(
                f"couldn't get {counter} for {kind} {instance}: {e}",
                identity=instance.identity,
                counter=counter,
            ) from e


@dataclass(frozen=True)
class StructField:
    """Field position inside a raw structure."""

    offset: int
    format: str  # struct format character, standard size

    @property
    def width(self) -> int:
        return struct.calcsize("=" + self.format)


@dataclass(frozen=True, eq=False)
class StructLayout:
    """
    Byte layout of a C structure.

    Offsets and widths are explicit; padding is simply never covered by a
    field. Values use the host byte order with standard (not native)
    sizes.
    """

    name: str
    size: int
    fields: Mapping[str, StructField]

    def decode(self, buffer: bytes, field: str) -> int:
        """
        Decode one integer field from a raw buffer.

        Raises:
            ValueError: If the buffer size or field bounds do not fit
        """
        if len(buffer) != self.size:
            raise ValueError(f"{self.name}: expected {self.size} bytes, got {len(buffer)}")

        spec = self.fields.get(field)
        if spec is None:
            raise ValueError(f"{self.name} has no field {field!r}")
        if spec.offset < 0 or spec.offset + spec.width > self.size:
            raise ValueError(f"{self.name}.{field} lies outside the structure")

        (value,) = struct.unpack_from("=" + spec.format, buffer, spec.offset)
        return value


# struct timeval, keyed by size. Only tv_sec is declared: tv_usec is an
# int64 on FreeBSD LP64 but an int32 followed by padding on macOS.
TIMEVAL_LAYOUTS: dict[int, StructLayout] = {
    16: StructLayout("timeval", 16, {"tv_sec": StructField(0, "q")}),
    8: StructLayout("timeval", 8, {"tv_sec": StructField(0, "i")}),
}


class RawStructReader(CounterReader):
    """
    Decodes a field from the raw structure returned by a query.

    The layout is chosen by the exact size of the returned buffer; an
    unexpected size is an error rather than a guess.
    """

    def __init__(
        self,
        layouts: Mapping[int, StructLayout],
        field: str,
        query: Callable[[str], bytes] = sysctl_raw,
    ):
        self.layouts = layouts
        self.field = field
        self.query = query

    def read(self, counter: str, instance: Instance | None = None, kind: str = "instance") -> int:
        where = f" for {kind} {instance}" if instance is not None else ""
        identity = instance.identity if instance is not None else ()

        try:
            buffer = self.query(counter)
        except OSError as e:
            raise ReadError(
                f"couldn't query {counter}{where}: {e}", identity=identity, counter=counter
            ) from e

        layout = self.layouts.get(len(buffer))
        if layout is None:
            raise ReadError(
                f"couldn't decode {counter}{where}: unexpected size {len(buffer)} "
                f"(known: {sorted(self.layouts)})",
                identity=identity,
                counter=counter,
            )

        try:
            value = layout.decode(buffer, self.field)
        except (ValueError, struct.error) as e:
            raise ReadError(
                f"couldn't decode {counter}{where}: {e}", identity=identity, counter=counter
            ) from e

        if value < 0:
            raise ReadError(
                f"negative {layout.name}.{self.field} in {counter}{where}: {value}",
                identity=identity,
                counter=counter,
            )
        return value
