"""
Utility functions and helpers.
"""

from .counters import (
    TIMEVAL_LAYOUTS,
    CounterReader,
    RawStructReader,
    StructField,
    StructLayout,
    TextCounterReader,
    read_uint_from_file,
)
from .discovery import Instance, InstancePattern
from .paths import PathResolver, configure_paths, get_resolver
from .sysctl import has_sysctl, sysctl_raw

__all__ = [
    "Instance",
    "InstancePattern",
    "CounterReader",
    "TextCounterReader",
    "RawStructReader",
    "StructField",
    "StructLayout",
    "TIMEVAL_LAYOUTS",
    "read_uint_from_file",
    "PathResolver",
    "configure_paths",
    "get_resolver",
    "has_sysctl",
    "sysctl_raw",
]
