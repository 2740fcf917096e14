"""
Metric descriptors and samples.

A descriptor is the immutable definition of one metric family: its fully
qualified name, value semantics, help text and ordered label names. A sample
is one reading of that family for one set of label values.
"""

import re
from dataclasses import dataclass
from enum import Enum

METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")
LABEL_NAME_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class ValueType(Enum):
    """Value semantics of a metric family."""

    COUNTER = "counter"  # monotonically non-decreasing
    GAUGE = "gauge"  # point-in-time


class DescriptorError(ValueError):
    """Raised when a descriptor or a sample does not fit its schema."""


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """
    Join namespace, subsystem and name with underscores.

    Empty components are skipped, so ("node", "", "boot_time") gives
    "node_boot_time".
    """
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class MetricDescriptor:
    """
    Immutable definition of one metric family.

    Created once when a collector is constructed and shared read-only by
    every collection cycle.
    """

    fq_name: str
    help: str
    value_type: ValueType
    label_names: tuple[str, ...] = ()

    def __post_init__(self):
        if not METRIC_NAME_RE.match(self.fq_name):
            raise DescriptorError(f"Invalid metric name: {self.fq_name!r}")

        for label in self.label_names:
            if not LABEL_NAME_RE.match(label) or label.startswith("__"):
                raise DescriptorError(f"Invalid label name {label!r} for {self.fq_name}")

        if len(set(self.label_names)) != len(self.label_names):
            raise DescriptorError(f"Duplicate label names for {self.fq_name}: {self.label_names}")

    @classmethod
    def new(
        cls,
        namespace: str,
        subsystem: str,
        name: str,
        help: str,
        value_type: ValueType,
        label_names: tuple[str, ...] | list[str] = (),
    ) -> "MetricDescriptor":
        """Build a descriptor from its name components."""
        return cls(
            fq_name=build_fq_name(namespace, subsystem, name),
            help=help,
            value_type=value_type,
            label_names=tuple(label_names),
        )

    def __repr__(self) -> str:
        labels = ", ".join(self.label_names)
        return f"MetricDescriptor({self.fq_name}, {self.value_type.value}, [{labels}])"


@dataclass(frozen=True)
class Sample:
    """One reading of a metric family, valid for a single cycle."""

    descriptor: MetricDescriptor
    value: float
    label_values: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.descriptor.fq_name

    @property
    def labels(self) -> dict[str, str]:
        """Label name -> value, in descriptor order."""
        return dict(zip(self.descriptor.label_names, self.label_values))


def new_sample(descriptor: MetricDescriptor, value: int | float, *label_values: str) -> Sample:
    """
    Create a sample for a descriptor.

    Args:
        descriptor: Metric family definition
        value: Reading (converted to float)
        *label_values: Values in the descriptor's label order

    Returns:
        Sample instance

    Raises:
        DescriptorError: If the number of label values does not match
    """
    if len(label_values) != len(descriptor.label_names):
        raise DescriptorError(
            f"{descriptor.fq_name}: expected {len(descriptor.label_names)} label values "
            f"{descriptor.label_names}, got {len(label_values)}"
        )

    return Sample(
        descriptor=descriptor,
        value=float(value),
        label_values=tuple(str(v) for v in label_values),
    )
