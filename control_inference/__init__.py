"""
Control Inference - Explainable control zones and command risk estimation.

Turns a stream of decaying, confidence-weighted evidence into
probabilistic "who controls where" claims and a composite command-risk
estimate with deterministic recommendations. Control is never binary
certainty: every claim stays traceable to its evidence, and evidence
fades as it ages past its validity window.

Quick Start:
    >>> from control_inference import resolve_control_zones, estimate_command_risk
    >>> zones = resolve_control_zones(records, now)
    >>> snapshot = estimate_command_risk(zones, overlay, intel, operations, now=now)
    >>> print(snapshot.command_risk_score)

For raw upstream payloads:
    >>> from control_inference import InferenceEngine
    >>> engine = InferenceEngine()
    >>> result = engine.run_pipeline(payload, now)

Key Components:
    - SignalNormalizer: Adapter from loose upstream dicts to strict types
    - DecayFunction: Linear time-decay of evidence influence
    - ZoneAggregator: Evidence -> control zones
    - CommandRiskEstimator: Zones + comms + intel -> inference snapshot
    - RecommendationSynthesizer: Fixed-template action hints

Design Principles:
    - Explainable: every zone keeps its full evidence list
    - Fading claims: expired evidence contributes nothing
    - Clock-free: "now" is always supplied by the caller
    - No fabrication: reports only restate the snapshot

Author: Control Inference Team
Version: 0.1.0
License: MIT
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Control Inference Team"
__license__ = "MIT"

from control_inference.analysis import DecayFunction, ZoneAggregator, resolve_control_zones

# Configuration
from control_inference.config import load_config, save_config
from control_inference.decision import (
    CommandRiskEstimator,
    RecommendationSynthesizer,
    estimate_command_risk,
)

# Main orchestrator
from control_inference.engine import InferenceEngine
from control_inference.normalization import SignalNormalizer
from control_inference.types import (
    CalloutPriority,
    CommsCallout,
    CommsLink,
    CommsNet,
    CommsOverlay,
    ControllerAssertion,
    ControlZone,
    EngineConfig,
    EvidenceCategory,
    EvidenceRecord,
    GeometryHint,
    InferenceSnapshot,
    IntelItem,
    LoadBand,
    NetQuality,
    Operation,
    SourceRef,
    ZoneScope,
)

__all__ = [
    "CalloutPriority",
    "CommandRiskEstimator",
    "CommsCallout",
    "CommsLink",
    "CommsNet",
    "CommsOverlay",
    "ControlZone",
    "ControllerAssertion",
    "DecayFunction",
    # Configuration
    "EngineConfig",
    "EvidenceCategory",
    "EvidenceRecord",
    "GeometryHint",
    # Main class
    "InferenceEngine",
    "InferenceSnapshot",
    "IntelItem",
    "LoadBand",
    "NetQuality",
    "Operation",
    "RecommendationSynthesizer",
    "SignalNormalizer",
    "SourceRef",
    "ZoneAggregator",
    "ZoneScope",
    "__author__",
    "__license__",
    # Version info
    "__version__",
    "estimate_command_risk",
    "load_config",
    "resolve_control_zones",
    "save_config",
]
