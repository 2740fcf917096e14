"""
Penguin Exporter - Linux/BSD hardware counter exporter for Prometheus.
"""

from .const import APP_VERSION

__version__ = APP_VERSION

__all__ = ["__version__"]
