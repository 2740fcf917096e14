"""
Base collector interface.

Every collector owns a fixed set of metric descriptors, built once in its
constructor, and implements collect() to produce this cycle's samples.
The registry drives collectors through update(), which only forwards
samples to the output channel once the whole cycle has succeeded.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..errors import CollectorError, DiscoveryError, IdentityError, ReadError
from ..logging import get_logger
from ..models.metric import MetricDescriptor, Sample

if TYPE_CHECKING:
    from ..config.schema import Config

# Output channel: accepts one sample per call (list.append works)
Channel = Callable[[Sample], Any]

# Collector name -> collector class, filled by @register
Factories: dict[str, type["Collector"]] = {}


def register(name: str) -> Callable[[type["Collector"]], type["Collector"]]:
    """
    Class decorator adding a collector to Factories.

    Example:
        @register("edac")
        class EdacCollector(Collector): ...
    """

    def decorator(cls: type["Collector"]) -> type["Collector"]:
        if name in Factories:
            raise ValueError(f"Collector {name!r} is already registered")
        cls.NAME = name
        Factories[name] = cls
        return cls

    return decorator


class Collector(ABC):
    """
    Abstract base class for metric collectors.

    Each collector is responsible for:
    1. Defining its metric descriptors (create_descriptors)
    2. Producing samples for one cycle (collect)

    Collectors keep no state between cycles beyond their descriptors, so
    different collectors may be updated concurrently.
    """

    # Registry name (set by @register)
    NAME: str = "unknown"

    def __init__(self):
        self._descriptors = self.create_descriptors()
        self.logger = get_logger(f"collectors.{self.NAME}")

    @classmethod
    def from_config(cls, config: "Config") -> "Collector":
        """Construct the collector from application configuration."""
        return cls()

    @abstractmethod
    def create_descriptors(self) -> dict[str, MetricDescriptor]:
        """
        Create the metric descriptors for this collector.

        Returns:
            Mapping of collector-specific key -> descriptor
        """
        pass

    @abstractmethod
    def collect(self) -> list[Sample]:
        """
        Produce all samples of one cycle.

        Raises:
            CollectorError: If any discovery, identity or read step fails
        """
        pass

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def descriptors(self) -> tuple[MetricDescriptor, ...]:
        """All descriptors, in declaration order."""
        return tuple(self._descriptors.values())

    def descriptor(self, key: str) -> MetricDescriptor:
        """Get a descriptor by its collector-specific key."""
        return self._descriptors[key]

    def update(self, channel: Channel) -> None:
        """
        Run one cycle and deliver its samples to channel.

        Nothing is delivered unless collect() completes; errors propagate
        to the caller unchanged.
        """
        samples = self.collect()
        self.logger.debug(f"Collected {len(samples)} samples")

        for sample in samples:
            channel(sample)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.NAME!r}, {len(self._descriptors)} descriptors)"


__all__ = [
    "Channel",
    "Collector",
    "CollectorError",
    "DiscoveryError",
    "Factories",
    "IdentityError",
    "ReadError",
    "register",
]
