"""
Data models for parsed samples and metric label sets.
"""

from .sample import LabelSet, Sample, SampleKind

__all__ = [
    "Sample",
    "SampleKind",
    "LabelSet",
]
