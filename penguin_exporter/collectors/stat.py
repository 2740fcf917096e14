"""
Kernel statistics collector: node boot time.

On BSD-family kernels the boot time is read from the raw ``kern.boottime``
sysctl (a ``struct timeval``). Elsewhere psutil provides it.
"""

from typing import TYPE_CHECKING

import psutil

from ..const import NAMESPACE
from ..errors import ReadError
from ..models.metric import MetricDescriptor, Sample, ValueType, new_sample
from ..utils.counters import TIMEVAL_LAYOUTS, CounterReader, RawStructReader
from ..utils.discovery import Instance
from ..utils.sysctl import has_sysctl
from .base import Collector, register

if TYPE_CHECKING:
    from ..config.schema import Config

BOOTTIME_SYSCTL = "kern.boottime"

BOOT_TIME_SOURCES = ("auto", "sysctl", "psutil")


class PsutilBootTimeReader(CounterReader):
    """Boot time from psutil, truncated to whole seconds."""

    def read(self, counter: str, instance: Instance | None = None, kind: str = "instance") -> int:
        try:
            return int(psutil.boot_time())
        except (OSError, RuntimeError, psutil.Error) as e:
            raise ReadError(f"couldn't get {counter} from psutil: {e}", counter=counter) from e


def create_boot_time_reader(source: str = "auto") -> CounterReader:
    """
    Create the boot time reader for a source name.

    Args:
        source: "sysctl", "psutil" or "auto" (sysctl when libc has it)

    Raises:
        ValueError: If the source is unknown
    """
    if source not in BOOT_TIME_SOURCES:
        raise ValueError(f"Unknown boot time source: {source!r}")

    if source == "sysctl" or (source == "auto" and has_sysctl()):
        return RawStructReader(TIMEVAL_LAYOUTS, "tv_sec")
    return PsutilBootTimeReader()


@register("stat")
class StatCollector(Collector):
    """Collector exposing the node boot time as a single unlabeled gauge."""

    def __init__(self, source: str = "auto", reader: CounterReader | None = None):
        self.source = source
        self.reader = reader or create_boot_time_reader(source)
        super().__init__()

    @classmethod
    def from_config(cls, config: "Config") -> "StatCollector":
        return cls(source=config.stat.source)

    def create_descriptors(self) -> dict[str, MetricDescriptor]:
        return {
            "btime": MetricDescriptor.new(
                NAMESPACE, "", "boot_time", "Node boot time, in unixtime.", ValueType.GAUGE
            ),
        }

    def collect(self) -> list[Sample]:
        try:
            boot_time = self.reader.read(BOOTTIME_SYSCTL)
        except ReadError as e:
            raise ReadError(f"couldn't get boottime: {e}", counter=BOOTTIME_SYSCTL) from e

        return [new_sample(self.descriptor("btime"), boot_time)]
