"""
Scrape orchestration on top of prometheus_client.

NodeCollector is registered in a prometheus_client CollectorRegistry. On
every scrape it updates all enabled collectors in parallel, each with its
own cycle-local channel, turns their samples into metric families and
reports per-collector duration and success.
"""

import time
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from .collectors import Factories
from .collectors.base import Collector, CollectorError
from .config.loader import ConfigError
from .config.schema import Config
from .const import NAMESPACE
from .logging import get_logger
from .models.metric import MetricDescriptor, Sample, ValueType

logger = get_logger("registry")

SCRAPE_DURATION = MetricDescriptor.new(
    NAMESPACE,
    "scrape",
    "collector_duration_seconds",
    "penguin_exporter: Duration of a collector scrape.",
    ValueType.GAUGE,
    ("collector",),
)
SCRAPE_SUCCESS = MetricDescriptor.new(
    NAMESPACE,
    "scrape",
    "collector_success",
    "penguin_exporter: Whether a collector succeeded.",
    ValueType.GAUGE,
    ("collector",),
)


@dataclass
class ScrapeResult:
    """Outcome of one collector's cycle."""

    name: str
    samples: list[Sample] = field(default_factory=list)
    duration: float = 0.0
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def execute(name: str, collector: Collector) -> ScrapeResult:
    """
    Run one collector cycle and time it.

    A failed cycle keeps no samples; the error is logged and returned.
    """
    result = ScrapeResult(name=name)
    samples: list[Sample] = []
    start = time.perf_counter()

    try:
        collector.update(samples.append)
    except Exception as e:
        result.error = e

    result.duration = time.perf_counter() - start

    if result.error is None:
        result.samples = samples
        logger.debug(f"Collector {name} succeeded in {result.duration:.6f}s")
    else:
        # Tracebacks only for errors outside the collector hierarchy
        logger.error(
            f"Collector {name} failed after {result.duration:.6f}s: {result.error}",
            exc_info=None if isinstance(result.error, CollectorError) else result.error,
        )

    return result


def new_family(descriptor: MetricDescriptor) -> CounterMetricFamily | GaugeMetricFamily:
    """Create an empty prometheus_client family for a descriptor."""
    family_class = (
        CounterMetricFamily if descriptor.value_type == ValueType.COUNTER else GaugeMetricFamily
    )
    return family_class(descriptor.fq_name, descriptor.help, labels=list(descriptor.label_names))


def to_families(samples: list[Sample]) -> list[Metric]:
    """Group samples into families, keeping first-seen order."""
    families: dict[MetricDescriptor, CounterMetricFamily | GaugeMetricFamily] = {}

    for sample in samples:
        family = families.get(sample.descriptor)
        if family is None:
            family = families[sample.descriptor] = new_family(sample.descriptor)
        family.add_metric(list(sample.label_values), sample.value)

    return list(families.values())


class NodeCollector:
    """prometheus_client custom collector driving all enabled collectors."""

    def __init__(self, collectors: dict[str, Collector]):
        self.collectors = dict(sorted(collectors.items()))

    def scrape(self) -> list[ScrapeResult]:
        """Update every collector concurrently, one thread per collector."""
        if not self.collectors:
            return []

        with ThreadPoolExecutor(
            max_workers=len(self.collectors), thread_name_prefix="collector"
        ) as pool:
            futures = [
                pool.submit(execute, name, collector) for name, collector in self.collectors.items()
            ]
            return [future.result() for future in futures]

    def describe(self) -> Iterator[Metric]:
        for collector in self.collectors.values():
            for descriptor in collector.descriptors:
                yield new_family(descriptor)
        yield new_family(SCRAPE_DURATION)
        yield new_family(SCRAPE_SUCCESS)

    def collect(self) -> Iterator[Metric]:
        results = self.scrape()

        samples: list[Sample] = []
        for result in results:
            samples.extend(result.samples)
        yield from to_families(samples)

        duration = new_family(SCRAPE_DURATION)
        success = new_family(SCRAPE_SUCCESS)
        for result in results:
            duration.add_metric([result.name], result.duration)
            success.add_metric([result.name], 1.0 if result.success else 0.0)
        yield duration
        yield success


def build_collectors(config: Config) -> dict[str, Collector]:
    """
    Instantiate the enabled collectors.

    Raises:
        ConfigError: For unknown collector names or invalid settings
    """
    collectors: dict[str, Collector] = {}

    for name in config.collectors.names:
        factory = Factories.get(name)
        if factory is None:
            raise ConfigError(
                f"Unknown collector '{name}' (available: {', '.join(sorted(Factories))})"
            )

        try:
            collectors[name] = factory.from_config(config)
        except ValueError as e:
            raise ConfigError(f"Couldn't create collector {name}: {e}") from e

        logger.info(f"Enabled collector: {name}")

    return collectors
