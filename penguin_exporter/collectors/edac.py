"""
EDAC (Error Detection and Correction) memory error collector.

Reads error counters of every memory controller from
/sys/devices/system/edac/mc/mc*/ and, per controller, of every chip-select
row (csrow*). Controllers are re-discovered on every cycle.

Collects:
- Correctable / uncorrectable errors per controller
- Errors without DIMM information per controller
- Correctable / uncorrectable errors per csrow
"""

from pathlib import Path
from typing import TYPE_CHECKING

from ..const import NAMESPACE
from ..models.metric import MetricDescriptor, Sample, ValueType, new_sample
from ..utils.counters import CounterReader, TextCounterReader
from ..utils.discovery import Instance, InstancePattern
from ..utils.paths import PathResolver, get_resolver
from .base import Collector, register

if TYPE_CHECKING:
    from ..config.schema import Config

EDAC_SUBSYSTEM = "edac"

CONTROLLER_PATTERN = InstancePattern(
    "devices/system/edac/mc/mc[0-9]*",
    r".*devices/system/edac/mc/mc([0-9]+)",
)
CSROW_PATTERN = InstancePattern(
    "csrow[0-9]*",
    r".*devices/system/edac/mc/mc[0-9]+/csrow([0-9]+)",
)

# Counter files read per controller, in order
CONTROLLER_COUNTERS = ("ce_count", "ce_noinfo_count", "ue_count", "ue_noinfo_count")

# Counter files read per csrow, in order (file name -> descriptor key)
CSROW_COUNTERS = {"ce_count": "csrow_ce_count", "ue_count": "csrow_ue_count"}


@register("edac")
class EdacCollector(Collector):
    """
    Collector for EDAC memory controller error counters.

    A missing or malformed counter file fails the whole cycle: the sysfs
    layout and the metric names move together, so a gap means the kernel
    interface changed.
    """

    def __init__(
        self,
        resolver: PathResolver | None = None,
        csrows: bool = True,
        reader: CounterReader | None = None,
    ):
        """
        Initialize EDAC collector.

        Args:
            resolver: sysfs root resolver (process-wide one if None)
            csrows: Whether to report per-csrow counters
            reader: Counter reader (sysfs text files by default)
        """
        self.resolver = resolver
        self.csrows = csrows
        self.reader = reader or TextCounterReader()
        super().__init__()

    @classmethod
    def from_config(cls, config: "Config") -> "EdacCollector":
        return cls(csrows=config.edac.csrows)

    def create_descriptors(self) -> dict[str, MetricDescriptor]:
        def counter(name: str, help: str, labels: tuple[str, ...]) -> MetricDescriptor:
            return MetricDescriptor.new(
                NAMESPACE, EDAC_SUBSYSTEM, name, help, ValueType.COUNTER, labels
            )

        return {
            "ce_count": counter(
                "correctable_errors_total",
                "Total correctable memory errors.",
                ("controller",),
            ),
            "ce_noinfo_count": counter(
                "no_csrow_correctable_errors_total",
                "Total correctable memory errors with no DIMM information.",
                ("controller",),
            ),
            "ue_count": counter(
                "uncorrectable_errors_total",
                "Total uncorrectable memory errors.",
                ("controller",),
            ),
            "ue_noinfo_count": counter(
                "no_csrow_uncorrectable_errors_total",
                "Total uncorrectable memory errors with no DIMM information.",
                ("controller",),
            ),
            "csrow_ce_count": counter(
                "csrow_correctable_errors_total",
                "Total correctable memory errors for this csrow.",
                ("controller", "csrow"),
            ),
            "csrow_ue_count": counter(
                "csrow_uncorrectable_errors_total",
                "Total uncorrectable memory errors for this csrow.",
                ("controller", "csrow"),
            ),
        }

    @property
    def root(self) -> Path:
        return (self.resolver or get_resolver()).sysfs

    def collect(self) -> list[Sample]:
        """Collect error counters of all memory controllers."""
        samples: list[Sample] = []

        controllers = CONTROLLER_PATTERN.discover(self.root)
        self.logger.debug(f"Discovered {len(controllers)} memory controllers")

        for controller in controllers:
            (controller_id,) = controller.identity

            for counter in CONTROLLER_COUNTERS:
                value = self.reader.read(counter, controller, kind="controller")
                samples.append(new_sample(self.descriptor(counter), value, controller_id))

            if self.csrows:
                samples.extend(self._collect_csrows(controller))

        return samples

    def _collect_csrows(self, controller: Instance) -> list[Sample]:
        """Collect error counters of the csrows below one controller."""
        samples: list[Sample] = []
        (controller_id,) = controller.identity

        for csrow in CSROW_PATTERN.discover(controller.path):
            (csrow_id,) = csrow.identity
            row = Instance(path=csrow.path, identity=(controller_id, csrow_id))

            for counter, key in CSROW_COUNTERS.items():
                value = self.reader.read(counter, row, kind="controller/csrow")
                samples.append(new_sample(self.descriptor(key), value, controller_id, csrow_id))

        return samples
