"""
Metric collectors for kernel and hardware counters.

Importing this package registers every collector in Factories.
"""

from .base import Collector, Factories, register
from .edac import EdacCollector
from .stat import StatCollector

__all__ = [
    "Collector",
    "Factories",
    "register",
    "EdacCollector",
    "StatCollector",
]
