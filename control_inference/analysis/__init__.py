"""
Evidence analysis for Control Inference.

Decays evidence over its validity window and aggregates it into
control-zone claims.
"""

from .decay import DecayFunction
from .zone_aggregator import ZoneAggregator, resolve_control_zones

__all__ = ["DecayFunction", "ZoneAggregator", "resolve_control_zones"]
