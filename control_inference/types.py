"""
Core type definitions for Control Inference.

This module defines all data structures used throughout the engine.
Design principles:
- Immutable where possible (frozen dataclasses)
- Values clamped or validated at construction time
- Serialization with explicit methods
- No magic strings - all categories and bands are enums

Author: Control Inference Team
"""

from __future__ import annotations

import logging

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Final

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MIN_UNIT: Final[float] = 0.0
MAX_UNIT: Final[float] = 1.0
MIN_SCORE: Final[int] = 0
MAX_SCORE: Final[int] = 100

DEFAULT_VALIDITY_PROFILE_ID: Final[str] = "TTL-CONTROL-ZONE-DEFAULT"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _clamp_unit(name: str, value: float) -> float:
    """Clamp a value into [0, 1], logging when it had to be corrected."""
    if value != value:  # NaN
        logger.warning(f"{name} was NaN, treated as 0.0")
        return MIN_UNIT
    if not (MIN_UNIT <= value <= MAX_UNIT):
        clamped = max(MIN_UNIT, min(MAX_UNIT, value))
        logger.warning(f"{name} {value} clamped to {clamped}")
        return clamped
    return value


# =============================================================================
# ENUMS
# =============================================================================

class EvidenceCategory(str, Enum):
    """
    Kinds of observation that can back a control claim.

    Each category has its own default validity window (see
    EngineConfig.default_ttl_seconds).
    """

    PRESENCE_DECLARED = "PRESENCE_DECLARED"
    """A unit or member declared presence at a location."""

    ENGAGEMENT_EVENT = "ENGAGEMENT_EVENT"
    """A contact or engagement was reported."""

    LOGISTICS_FLOW = "LOGISTICS_FLOW"
    """Supply or transport activity through a location."""

    INTEL_NOTE = "INTEL_NOTE"
    """An intelligence note referencing a location."""

    COMMAND_ENDORSEMENT = "COMMAND_ENDORSEMENT"
    """Command explicitly endorsed a claim."""

    OTHER = "OTHER"
    """Anything else."""

    def __str__(self) -> str:
        return self.value


class ZoneScope(str, Enum):
    """Declared spatial scope of a record or zone."""

    SYSTEM = "system"
    BODY = "body"
    REGION = "region"
    SITE = "site"

    def __str__(self) -> str:
        return self.value


class NetQuality(str, Enum):
    """Quality category of a communications net."""

    CLEAR = "CLEAR"
    """Nominal."""

    DEGRADED = "DEGRADED"
    CONTESTED = "CONTESTED"

    def __str__(self) -> str:
        return self.value

    @property
    def is_degraded(self) -> bool:
        """True for anything other than the nominal category."""
        return self != NetQuality.CLEAR


class CalloutPriority(str, Enum):
    """
    Priority tier of a comms callout.

    Ordered by severity: STANDARD < HIGH < CRITICAL
    """

    STANDARD = "STANDARD"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"

    def __str__(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        """Numeric rank, higher is more urgent."""
        return _CALLOUT_RANK[self]


_CALLOUT_RANK: Final[dict[CalloutPriority, int]] = {
    CalloutPriority.STANDARD: 1,
    CalloutPriority.HIGH: 2,
    CalloutPriority.CRITICAL: 3,
}


class LoadBand(str, Enum):
    """Coarse classification of aggregate comms traffic."""

    LOW = "LOW"
    MED = "MED"
    HIGH = "HIGH"

    def __str__(self) -> str:
        return self.value


class ActionPriority(str, Enum):
    """Urgency of a prioritized action."""

    NOW = "NOW"
    NEXT = "NEXT"
    WATCH = "WATCH"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# EVIDENCE
# =============================================================================

@dataclass(frozen=True, slots=True)
class SourceRef:
    """Reference to the system or record that produced a piece of evidence."""

    id: str
    kind: str = "unknown"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "kind": self.kind}


@dataclass(frozen=True, slots=True)
class GeometryHint:
    """
    Spatial anchor of a record or zone.

    Attributes:
        node_id: Map node the record refers to
        anchor_x: Optional offset from the node, map units
        anchor_y: Optional offset from the node, map units
    """

    node_id: str | None = None
    anchor_x: float | None = None
    anchor_y: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "node_id": self.node_id,
            "anchor_x": self.anchor_x,
            "anchor_y": self.anchor_y,
        }


@dataclass(frozen=True, slots=True)
class EvidenceRecord:
    """
    A single observation used to justify a control claim.

    This is the atomic input of the engine. Records are immutable once
    created and are never mutated by any component.

    Attributes:
        evidence_id: Unique identifier of the record
        category: What kind of observation this is
        source: Where the observation came from
        weight: Declared base weight [0, 1]
        confidence: Independent confidence in the observation [0, 1]
        occurred_at: When the observation was made
        expires_at: End of the record's validity window
        org_id: Organization the record claims control for, if any
        scope: Declared spatial scope, if any
        geometry: Spatial anchor, if any

    Example:
        >>> record = EvidenceRecord(
        ...     evidence_id="ev-1",
        ...     category=EvidenceCategory.PRESENCE_DECLARED,
        ...     source=SourceRef(id="roster:alpha", kind="roster"),
        ...     weight=0.6,
        ...     confidence=0.8,
        ...     occurred_at=datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc),
        ...     expires_at=datetime(2026, 1, 1, 12, 6, tzinfo=timezone.utc),
        ...     org_id="RS",
        ...     geometry=GeometryHint(node_id="stanton-hurston"),
        ... )
    """

    evidence_id: str
    category: EvidenceCategory
    source: SourceRef
    weight: float
    confidence: float
    occurred_at: datetime
    expires_at: datetime
    org_id: str | None = None
    scope: ZoneScope | None = None
    geometry: GeometryHint | None = None

    def __post_init__(self) -> None:
        """Clamp weight and confidence into [0, 1]."""
        # Use object.__setattr__ because dataclass is frozen
        object.__setattr__(self, "weight", _clamp_unit("weight", float(self.weight)))
        object.__setattr__(
            self, "confidence", _clamp_unit("confidence", float(self.confidence))
        )

    @property
    def validity_seconds(self) -> float:
        """Length of the validity window in seconds (may be <= 0 if malformed)."""
        return (self.expires_at - self.occurred_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "evidence_id": self.evidence_id,
            "category": self.category.value,
            "source": self.source.to_dict(),
            "weight": self.weight,
            "confidence": self.confidence,
            "occurred_at": self.occurred_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "org_id": self.org_id,
            "scope": self.scope.value if self.scope else None,
            "geometry": self.geometry.to_dict() if self.geometry else None,
        }


# =============================================================================
# CONTROL ZONES
# =============================================================================

@dataclass(frozen=True, slots=True)
class ControllerAssertion:
    """
    One organization's claim over a zone.

    Attributes:
        org_id: Claimant organization
        confidence: Share of the zone's claimant influence [0, 1]
        updated_at: Most recent occurrence among the org's records
    """

    org_id: str
    confidence: float
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "org_id": self.org_id,
            "confidence": self.confidence,
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class ControlZone:
    """
    A probabilistic claim of organizational dominance over a spatial anchor.

    Zones have no persistent identity; they are recomputed on every call.
    The evidence tuple is never summarized away, so every confidence and
    contestation value can be re-derived from it.

    Attributes:
        zone_id: "<scope>:<node>" identifier
        scope: Declared scope of the zone
        geometry: Anchor of the zone
        asserted_controllers: Strongest claimants first, at most two
        contestation_level: 0 = uncontested, 1 = perfectly split
        evidence: Every record that was binned into this zone
        validity_profile_id: TTL profile the zone was computed under
        created_at: Earliest occurrence among the evidence
        updated_at: Latest occurrence among the evidence
        claim_dispersion: Normalized entropy over all claimant shares
    """

    zone_id: str
    scope: ZoneScope
    geometry: GeometryHint
    asserted_controllers: tuple[ControllerAssertion, ...]
    contestation_level: float
    evidence: tuple[EvidenceRecord, ...]
    validity_profile_id: str
    created_at: datetime
    updated_at: datetime
    claim_dispersion: float = 0.0

    def __post_init__(self) -> None:
        if not (MIN_UNIT <= self.contestation_level <= MAX_UNIT):
            raise ValueError(
                f"contestation_level must be in [0, 1], got {self.contestation_level}"
            )

    @property
    def leading_controller(self) -> ControllerAssertion | None:
        """Strongest claimant, or None for a zone with no live claim."""
        return self.asserted_controllers[0] if self.asserted_controllers else None

    @property
    def evidence_count(self) -> int:
        return len(self.evidence)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "zone_id": self.zone_id,
            "scope": self.scope.value,
            "geometry": self.geometry.to_dict(),
            "asserted_controllers": [c.to_dict() for c in self.asserted_controllers],
            "contestation_level": self.contestation_level,
            "claim_dispersion": self.claim_dispersion,
            "evidence": [e.to_dict() for e in self.evidence],
            "validity_profile_id": self.validity_profile_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class ZoneResolution:
    """
    Full output of the zone aggregator.

    Attributes:
        zones: Emitted control zones
        audit: Records left out of spatial binning (stale unclaimed
            records and unanchored records), only filled on request
        unanchored_count: Records that had no anchor at all
        dropped_count: Records with zero influence and no claimant
    """

    zones: tuple[ControlZone, ...]
    audit: tuple[EvidenceRecord, ...] = ()
    unanchored_count: int = 0
    dropped_count: int = 0

    @property
    def audit_total(self) -> int:
        """Every record the aggregator saw, binned or not."""
        binned = sum(z.evidence_count for z in self.zones)
        return binned + self.unanchored_count + self.dropped_count


# =============================================================================
# COMMS / INTEL / OPERATIONS (inputs built by upstream collaborators)
# =============================================================================

@dataclass(frozen=True, slots=True)
class CommsNet:
    """A communications channel with its quality category and traffic."""

    net_id: str
    quality: NetQuality = NetQuality.CLEAR
    traffic_score: float = 0.0
    label: str = ""
    node_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "net_id": self.net_id,
            "label": self.label,
            "quality": self.quality.value,
            "traffic_score": self.traffic_score,
            "node_id": self.node_id,
        }


@dataclass(frozen=True, slots=True)
class CommsLink:
    """A bridge between two nets."""

    link_id: str
    from_net_id: str
    to_net_id: str
    status: str = "active"

    def to_dict(self) -> dict[str, Any]:
        return {
            "link_id": self.link_id,
            "from_net_id": self.from_net_id,
            "to_net_id": self.to_net_id,
            "status": self.status,
        }


@dataclass(frozen=True, slots=True)
class CommsCallout:
    """
    A priority callout raised on a net.

    Attributes:
        callout_id: Unique identifier
        priority: STANDARD, HIGH or CRITICAL
        net_id: Net the callout was raised on
        lane: Named lane, if any
        message: Callout text
        stale: Flagged stale by the overlay builder
        expires_at: Optional explicit expiry
    """

    callout_id: str
    priority: CalloutPriority
    net_id: str = ""
    lane: str = ""
    message: str = ""
    stale: bool = False
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Stale callouts, and callouts past an explicit expiry, are expired."""
        if self.stale:
            return True
        if now is not None and self.expires_at is not None:
            return _utc(self.expires_at) <= _utc(now)
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "callout_id": self.callout_id,
            "priority": self.priority.value,
            "net_id": self.net_id,
            "lane": self.lane,
            "message": self.message,
            "stale": self.stale,
            "expires_at": _iso(self.expires_at),
        }


@dataclass(frozen=True, slots=True)
class CommsOverlay:
    """Typed communications overlay snapshot."""

    nets: tuple[CommsNet, ...] = ()
    links: tuple[CommsLink, ...] = ()
    callouts: tuple[CommsCallout, ...] = ()

    @property
    def signal_count(self) -> int:
        """Nets + links + callouts, used for evidence accounting."""
        return len(self.nets) + len(self.links) + len(self.callouts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nets": [n.to_dict() for n in self.nets],
            "links": [link.to_dict() for link in self.links],
            "callouts": [c.to_dict() for c in self.callouts],
        }


@dataclass(frozen=True, slots=True)
class IntelItem:
    """A scoped intel record carrying a staleness flag."""

    intel_id: str
    stale: bool = False
    title: str = ""
    updated_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "intel_id": self.intel_id,
            "stale": self.stale,
            "title": self.title,
            "updated_at": _iso(self.updated_at),
        }


@dataclass(frozen=True, slots=True)
class Operation:
    """An operation record, used only to label the focus scope."""

    operation_id: str
    name: str = ""
    status: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"operation_id": self.operation_id, "name": self.name, "status": self.status}


# =============================================================================
# INFERENCE SNAPSHOT
# =============================================================================

@dataclass(frozen=True, slots=True)
class EvidenceBreakdown:
    """Evidence counts by category, kept purely for auditability."""

    zone_signals: int = 0
    comms_signals: int = 0
    intel_signals: int = 0

    @property
    def total(self) -> int:
        return self.zone_signals + self.comms_signals + self.intel_signals

    def to_dict(self) -> dict[str, int]:
        return {
            "zone_signals": self.zone_signals,
            "comms_signals": self.comms_signals,
            "intel_signals": self.intel_signals,
        }


@dataclass(frozen=True, slots=True)
class InferenceFactor:
    """
    One scored dimension of the command estimate.

    Attributes:
        factor_id: "zones", "comms", "intel" or "tempo"
        score: Factor score [0, 100]
        weight: Relative weight of the factor
        rationale: Fixed-template explanation
        evidence_refs: Counts the score was derived from
    """

    factor_id: str
    score: int
    weight: float
    rationale: str
    evidence_refs: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.factor_id,
            "score": self.score,
            "weight": self.weight,
            "rationale": self.rationale,
            "evidence_refs": list(self.evidence_refs),
        }


@dataclass(frozen=True, slots=True)
class PrioritizedAction:
    """A structured action hint with its urgency."""

    action_id: str
    priority: ActionPriority
    title: str
    rationale: str
    expected_impact: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.action_id,
            "priority": self.priority.value,
            "title": self.title,
            "rationale": self.rationale,
            "expected_impact": self.expected_impact,
        }


@dataclass(frozen=True, slots=True)
class InferenceSnapshot:
    """
    The output of the command risk estimator.

    This is the artifact downstream consumers read. It must be treated as
    read-only; anything built on top of it (reports, prompts) may restate
    its fields but never add claims.

    Attributes:
        generated_at: Caller-supplied "now" (None when not supplied)
        focus_scope: Focus scope id echoed from the caller
        focus_label: Resolved name of the focus scope
        command_risk_score: Composite severity [0, 100]
        confidence_score: Evidence-backed confidence [0, 100]
        contested_zone_count: Zones at or above the contested threshold
        degraded_net_count: Nets not in the nominal quality category
        stale_intel_count: Intel items flagged stale
        critical_callout_count: Non-expired CRITICAL callouts
        high_callout_count: Non-expired HIGH callouts
        projected_load_score: Sum of net traffic scores
        projected_load_band: LOW, MED or HIGH
        recommendations: Ordered, deduplicated action hints
        evidence: Evidence counts by category
        factors: Per-dimension factor breakdown
        prioritized_actions: Structured action list
    """

    generated_at: datetime | None
    focus_scope: str
    focus_label: str
    command_risk_score: int
    confidence_score: int
    contested_zone_count: int
    degraded_net_count: int
    stale_intel_count: int
    critical_callout_count: int
    high_callout_count: int
    projected_load_score: float
    projected_load_band: LoadBand
    recommendations: tuple[str, ...]
    evidence: EvidenceBreakdown
    factors: tuple[InferenceFactor, ...] = ()
    prioritized_actions: tuple[PrioritizedAction, ...] = ()

    def __post_init__(self) -> None:
        for name in ("command_risk_score", "confidence_score"):
            value = getattr(self, name)
            if not (MIN_SCORE <= value <= MAX_SCORE):
                raise ValueError(f"{name} must be in [0, 100], got {value}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging and CLI output."""
        return {
            "generated_at": _iso(self.generated_at),
            "focus_scope": self.focus_scope,
            "focus_label": self.focus_label,
            "command_risk_score": self.command_risk_score,
            "confidence_score": self.confidence_score,
            "contested_zone_count": self.contested_zone_count,
            "degraded_net_count": self.degraded_net_count,
            "stale_intel_count": self.stale_intel_count,
            "critical_callout_count": self.critical_callout_count,
            "high_callout_count": self.high_callout_count,
            "projected_load_score": self.projected_load_score,
            "projected_load_band": self.projected_load_band.value,
            "recommendations": list(self.recommendations),
            "evidence": self.evidence.to_dict(),
            "factors": [f.to_dict() for f in self.factors],
            "prioritized_actions": [a.to_dict() for a in self.prioritized_actions],
        }


# =============================================================================
# CONFIGURATION
# =============================================================================

def _default_ttl_seconds() -> dict[str, int]:
    return {
        EvidenceCategory.PRESENCE_DECLARED.value: 360,
        EvidenceCategory.ENGAGEMENT_EVENT.value: 240,
        EvidenceCategory.LOGISTICS_FLOW.value: 600,
        EvidenceCategory.INTEL_NOTE.value: 480,
        EvidenceCategory.COMMAND_ENDORSEMENT.value: 720,
        EvidenceCategory.OTHER.value: 300,
    }


@dataclass
class EngineConfig:
    """
    Configuration for the inference engine.

    Every threshold, weight and cap used by the scoring logic lives here
    and is passed into the entry points explicitly. Nothing is read from
    module-level mutable state.

    Configuration can be loaded from:
    - Python code (direct instantiation)
    - JSON file (via config.load_config)
    - Environment variable pointing to JSON file

    Attributes:
        contested_threshold: Contestation at or above which a zone counts
            as contested
        max_asserted_controllers: Claimants surfaced per zone
        validity_profile_id: TTL profile reference stamped on zones
        default_ttl_seconds: Validity window per category when a record
            carries no expiry
        fallback_ttl_seconds: Validity window for unknown categories
        load_high_threshold: Traffic sum at or above which load is HIGH
        load_med_threshold: Traffic sum at or above which load is MED
        contested_zone_weight: Risk points per contested zone
        degraded_net_weight: Risk points per degraded net
        critical_callout_weight: Risk points per critical callout
        high_callout_weight: Risk points per high callout
        stale_intel_weight: Risk points per stale intel item
        stale_intel_cap: Maximum risk points from stale intel
        evidence_saturation: Evidence count at which confidence saturates
        stale_intel_confidence_penalty: Confidence points per stale item
        degraded_net_confidence_penalty: Confidence points per degraded
            net beyond the first
        confidence_floor: Lowest reportable confidence score
        confidence_ceiling: Highest reportable confidence score
        max_prioritized_actions: Length cap of the structured action list
    """

    MIN_THRESHOLD: ClassVar[float] = 0.0
    MAX_THRESHOLD: ClassVar[float] = 1.0

    # Zone aggregation
    contested_threshold: float = 0.45
    max_asserted_controllers: int = 2
    validity_profile_id: str = DEFAULT_VALIDITY_PROFILE_ID
    default_ttl_seconds: dict[str, int] = field(default_factory=_default_ttl_seconds)
    fallback_ttl_seconds: int = 240

    # Load bands
    load_high_threshold: float = 70.0
    load_med_threshold: float = 35.0

    # Command risk weights
    contested_zone_weight: int = 18
    degraded_net_weight: int = 14
    critical_callout_weight: int = 22
    high_callout_weight: int = 8
    stale_intel_weight: int = 6
    stale_intel_cap: int = 22

    # Confidence model
    evidence_saturation: int = 80
    stale_intel_confidence_penalty: int = 5
    degraded_net_confidence_penalty: int = 4
    confidence_floor: int = 8
    confidence_ceiling: int = 96

    max_prioritized_actions: int = 5

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate_thresholds()
        self._validate_weights()
        self._validate_confidence()

    def _validate_thresholds(self) -> None:
        if not (self.MIN_THRESHOLD <= self.contested_threshold <= self.MAX_THRESHOLD):
            raise ValueError(
                f"contested_threshold must be between {self.MIN_THRESHOLD} and "
                f"{self.MAX_THRESHOLD}, got {self.contested_threshold}"
            )

        if self.max_asserted_controllers < 1:
            raise ValueError(
                f"max_asserted_controllers must be at least 1, "
                f"got {self.max_asserted_controllers}"
            )

        if self.load_med_threshold < 0 or self.load_high_threshold < self.load_med_threshold:
            raise ValueError(
                f"load thresholds must satisfy 0 <= med <= high, got "
                f"med={self.load_med_threshold}, high={self.load_high_threshold}"
            )

        if self.fallback_ttl_seconds <= 0:
            raise ValueError(
                f"fallback_ttl_seconds must be positive, got {self.fallback_ttl_seconds}"
            )

        for category, seconds in self.default_ttl_seconds.items():
            if seconds <= 0:
                raise ValueError(f"default TTL for {category} must be positive, got {seconds}")

    def _validate_weights(self) -> None:
        weights = [
            ("contested_zone_weight", self.contested_zone_weight),
            ("degraded_net_weight", self.degraded_net_weight),
            ("critical_callout_weight", self.critical_callout_weight),
            ("high_callout_weight", self.high_callout_weight),
            ("stale_intel_weight", self.stale_intel_weight),
            ("stale_intel_cap", self.stale_intel_cap),
        ]

        for name, value in weights:
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}")

    def _validate_confidence(self) -> None:
        if self.evidence_saturation <= 0:
            raise ValueError(
                f"evidence_saturation must be positive, got {self.evidence_saturation}"
            )

        if not (MIN_SCORE <= self.confidence_floor <= self.confidence_ceiling <= MAX_SCORE):
            raise ValueError(
                f"confidence bounds must satisfy 0 <= floor <= ceiling <= 100, got "
                f"floor={self.confidence_floor}, ceiling={self.confidence_ceiling}"
            )

    def ttl_for(self, category: EvidenceCategory) -> int:
        """Default validity window in seconds for a category."""
        return self.default_ttl_seconds.get(category.value, self.fallback_ttl_seconds)

    def to_dict(self) -> dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "contested_threshold": self.contested_threshold,
            "max_asserted_controllers": self.max_asserted_controllers,
            "validity_profile_id": self.validity_profile_id,
            "default_ttl_seconds": dict(self.default_ttl_seconds),
            "fallback_ttl_seconds": self.fallback_ttl_seconds,
            "load_high_threshold": self.load_high_threshold,
            "load_med_threshold": self.load_med_threshold,
            "contested_zone_weight": self.contested_zone_weight,
            "degraded_net_weight": self.degraded_net_weight,
            "critical_callout_weight": self.critical_callout_weight,
            "high_callout_weight": self.high_callout_weight,
            "stale_intel_weight": self.stale_intel_weight,
            "stale_intel_cap": self.stale_intel_cap,
            "evidence_saturation": self.evidence_saturation,
            "stale_intel_confidence_penalty": self.stale_intel_confidence_penalty,
            "degraded_net_confidence_penalty": self.degraded_net_confidence_penalty,
            "confidence_floor": self.confidence_floor,
            "confidence_ceiling": self.confidence_ceiling,
            "max_prioritized_actions": self.max_prioritized_actions,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EngineConfig:
        """
        Create configuration from dictionary.

        Missing TTL categories keep their defaults.
        """
        data = data.copy()
        if "default_ttl_seconds" in data:
            ttl = _default_ttl_seconds()
            ttl.update({str(k): int(v) for k, v in data["default_ttl_seconds"].items()})
            data["default_ttl_seconds"] = ttl
        return cls(**data)
