"""
Normalization boundary for Control Inference.

Converts loosely-typed upstream records into strict engine types.
"""

from .adapter import NormalizationResult, RejectedEntry, SignalNormalizer

__all__ = ["NormalizationResult", "RejectedEntry", "SignalNormalizer"]
