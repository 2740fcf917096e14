"""
Data models for metric descriptors and samples.
"""

from .metric import DescriptorError, MetricDescriptor, Sample, ValueType, build_fq_name, new_sample

__all__ = [
    "MetricDescriptor",
    "Sample",
    "ValueType",
    "DescriptorError",
    "build_fq_name",
    "new_sample",
]
