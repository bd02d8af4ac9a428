"""
Command Risk Estimator - the scoring core of Control Inference.

This module combines control zones with the comms overlay and intel
freshness into a bounded composite risk score, a confidence score and a
load-pressure band. Every number is a fixed, readable formula over counts.

Design Principles:
1. Each risk term is weighted by operational severity
2. Stale intel is capped so chronic staleness cannot dominate
3. Confidence saturates with evidence and never reaches 0 or 100
4. The engine never reads the clock; "now" is caller-supplied

Scoring:
    risk = clamp(contested*18 + degraded*14 + critical*22 + high*8
                 + min(stale*6, 22), 0, 100)
    confidence = clamp(round(min(evidence, 80) / 80 * 100)
                       - stale*5 - max(0, degraded - 1)*4, 8, 96)

Author: Control Inference Team
"""

from __future__ import annotations

import logging

from collections.abc import Sequence
from datetime import datetime

import numpy as np

from ..types import (
    CalloutPriority,
    CommsOverlay,
    ControlZone,
    EngineConfig,
    EvidenceBreakdown,
    InferenceFactor,
    InferenceSnapshot,
    IntelItem,
    LoadBand,
    Operation,
)
from .recommendations import RecommendationSynthesizer
from .signals import CommandSignalSummary, projected_load_band, round_half_up

logger = logging.getLogger(__name__)


# =============================================================================
# FACTOR WEIGHTS
# =============================================================================

ZONES_FACTOR_WEIGHT = 0.30
COMMS_FACTOR_WEIGHT = 0.32
INTEL_FACTOR_WEIGHT = 0.18
TEMPO_FACTOR_WEIGHT = 0.20


def _clamp(value: float, low: int, high: int) -> int:
    return int(np.clip(value, low, high))


# =============================================================================
# ESTIMATOR
# =============================================================================

class CommandRiskEstimator:
    """
    Produces inference snapshots from zones, comms and intel.

    Usage:
        >>> estimator = CommandRiskEstimator(config)
        >>> snapshot = estimator.estimate(zones, overlay, intel, operations, now=now)
        >>> print(snapshot.command_risk_score)
        22
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        """
        Initialize the estimator.

        Args:
            config: Engine configuration with thresholds and weights
        """
        self._config = config or EngineConfig()
        self._synthesizer = RecommendationSynthesizer(self._config)
        logger.debug(
            f"CommandRiskEstimator initialized with contested_threshold="
            f"{self._config.contested_threshold}, load bands="
            f"{self._config.load_med_threshold}/{self._config.load_high_threshold}"
        )

    @property
    def config(self) -> EngineConfig:
        """Read-only access to configuration."""
        return self._config

    def estimate(
        self,
        control_zones: Sequence[ControlZone] | None = None,
        communications_overlay: CommsOverlay | None = None,
        intel_items: Sequence[IntelItem] | None = None,
        operations: Sequence[Operation] | None = None,
        focus_scope: str | None = None,
        now: datetime | None = None,
    ) -> InferenceSnapshot:
        """
        Build an inference snapshot.

        Args:
            control_zones: Zones from the aggregator
            communications_overlay: Typed comms overlay
            intel_items: Staleness-flagged intel
            operations: Operations, used only to label the focus scope
            focus_scope: Focus scope id
            now: Caller-supplied current time; echoed as generated_at

        Returns:
            InferenceSnapshot with scores, counts and recommendations
        """
        zones = tuple(control_zones or ())
        overlay = communications_overlay or CommsOverlay()
        intel = tuple(intel_items or ())

        signals = self.extract_signals(zones, overlay, intel, now)
        risk = self.command_risk_score(signals)
        confidence = self.confidence_score(signals)

        recommendations = self._synthesizer.synthesize(signals, overlay.callouts, now)
        actions = self._synthesizer.prioritized_actions(signals, recommendations)

        snapshot = InferenceSnapshot(
            generated_at=now,
            focus_scope=focus_scope or "",
            focus_label=self.resolve_focus_label(focus_scope, operations or ()),
            command_risk_score=risk,
            confidence_score=confidence,
            contested_zone_count=signals.contested_zone_count,
            degraded_net_count=signals.degraded_net_count,
            stale_intel_count=signals.stale_intel_count,
            critical_callout_count=signals.critical_callout_count,
            high_callout_count=signals.high_callout_count,
            projected_load_score=signals.projected_load_score,
            projected_load_band=signals.load_band,
            recommendations=recommendations,
            evidence=EvidenceBreakdown(
                zone_signals=signals.zone_signals,
                comms_signals=signals.comms_signals,
                intel_signals=signals.intel_signals,
            ),
            factors=self.build_factors(signals),
            prioritized_actions=actions,
        )

        logger.info(
            f"Estimate: risk={risk}, confidence={confidence}, "
            f"band={signals.load_band.value}, recommendations={len(recommendations)}"
        )

        return snapshot

    def extract_signals(
        self,
        zones: Sequence[ControlZone],
        overlay: CommsOverlay,
        intel: Sequence[IntelItem],
        now: datetime | None = None,
    ) -> CommandSignalSummary:
        """
        Count the signals that drive the estimate.

        Args:
            zones: Control zones
            overlay: Comms overlay
            intel: Intel items
            now: Optional current time for explicit callout expiry

        Returns:
            Summary of counts and load
        """
        live_callouts = [c for c in overlay.callouts if not c.is_expired(now)]
        load_score = float(np.sum([net.traffic_score for net in overlay.nets])) if overlay.nets else 0.0

        return CommandSignalSummary(
            contested_zone_count=sum(
                1 for z in zones if z.contestation_level >= self._config.contested_threshold
            ),
            degraded_net_count=sum(1 for net in overlay.nets if net.quality.is_degraded),
            critical_callout_count=sum(
                1 for c in live_callouts if c.priority == CalloutPriority.CRITICAL
            ),
            high_callout_count=sum(1 for c in live_callouts if c.priority == CalloutPriority.HIGH),
            stale_intel_count=sum(1 for item in intel if item.stale),
            projected_load_score=load_score,
            load_band=projected_load_band(load_score, self._config),
            zone_signals=sum(z.evidence_count for z in zones),
            comms_signals=overlay.signal_count,
            intel_signals=len(intel),
        )

    def command_risk_score(self, signals: CommandSignalSummary) -> int:
        """
        Composite command risk in [0, 100].

        Monotonically non-decreasing in every count.
        """
        cfg = self._config
        stale_term = min(signals.stale_intel_count * cfg.stale_intel_weight, cfg.stale_intel_cap)
        raw = (
            signals.contested_zone_count * cfg.contested_zone_weight
            + signals.degraded_net_count * cfg.degraded_net_weight
            + signals.critical_callout_count * cfg.critical_callout_weight
            + signals.high_callout_count * cfg.high_callout_weight
            + stale_term
        )
        return _clamp(raw, 0, 100)

    def confidence_score(self, signals: CommandSignalSummary) -> int:
        """
        Evidence-backed confidence in [floor, ceiling].

        More corroborating evidence raises confidence up to saturation;
        stale intel and multiple degraded nets reduce it.
        """
        cfg = self._config
        saturation = cfg.evidence_saturation
        coverage = round_half_up(min(signals.evidence_total, saturation) / saturation * 100)
        raw = (
            coverage
            - signals.stale_intel_count * cfg.stale_intel_confidence_penalty
            - max(0, signals.degraded_net_count - 1) * cfg.degraded_net_confidence_penalty
        )
        return _clamp(raw, cfg.confidence_floor, cfg.confidence_ceiling)

    @staticmethod
    def resolve_focus_label(focus_scope: str | None, operations: Sequence[Operation]) -> str:
        """Name of the focus operation, else the scope id, else empty."""
        if not focus_scope:
            return ""
        for operation in operations:
            if operation.operation_id == focus_scope:
                return operation.name or focus_scope
        return focus_scope

    def build_factors(self, signals: CommandSignalSummary) -> tuple[InferenceFactor, ...]:
        """
        Per-dimension breakdown of the estimate.

        Each factor carries its score, weight, a fixed-template rationale
        and the counts it was derived from.
        """
        zones_score = _clamp(
            round_half_up(signals.contested_zone_count * 28 + min(signals.zone_signals, 12) * 2), 0, 100
        )
        comms_score = _clamp(
            round_half_up(
                signals.degraded_net_count * 24
                + signals.critical_callout_count * 18
                + signals.high_callout_count * 8
            ),
            0,
            100,
        )
        intel_score = _clamp(
            round_half_up(signals.stale_intel_count * 22 + min(signals.intel_signals, 8) * 2), 0, 100
        )
        tempo_score = _clamp(round_half_up(min(signals.projected_load_score, 40) * 2.2), 0, 100)

        if signals.has_contested_zones:
            zones_rationale = (
                f"{signals.contested_zone_count} contested zones are currently "
                f"affecting control confidence."
            )
        else:
            zones_rationale = "No contested control zones detected in scoped records."

        if signals.has_degraded_nets or signals.has_critical_callouts:
            comms_rationale = (
                f"Comms pressure is elevated with {signals.degraded_net_count} degraded nets "
                f"and {signals.critical_callout_count} critical callouts."
            )
        else:
            comms_rationale = "Comms network quality is nominal for scoped lanes."

        if signals.has_stale_intel:
            intel_rationale = (
                f"{signals.stale_intel_count} stale intel records reduce confidence "
                f"in current assumptions."
            )
        else:
            intel_rationale = "Intel freshness is within expected bounds."

        if signals.load_band == LoadBand.HIGH:
            tempo_rationale = "Projected comms load is high and likely to reduce command bandwidth."
        elif signals.load_band == LoadBand.MED:
            tempo_rationale = "Projected comms load is moderate and should be monitored."
        else:
            tempo_rationale = "Projected command tempo remains manageable."

        return (
            InferenceFactor(
                factor_id="zones",
                score=zones_score,
                weight=ZONES_FACTOR_WEIGHT,
                rationale=zones_rationale,
                evidence_refs=(f"zone-signals:{signals.zone_signals}",),
            ),
            InferenceFactor(
                factor_id="comms",
                score=comms_score,
                weight=COMMS_FACTOR_WEIGHT,
                rationale=comms_rationale,
                evidence_refs=(f"comms-signals:{signals.comms_signals}",),
            ),
            InferenceFactor(
                factor_id="intel",
                score=intel_score,
                weight=INTEL_FACTOR_WEIGHT,
                rationale=intel_rationale,
                evidence_refs=(f"intel-signals:{signals.intel_signals}",),
            ),
            InferenceFactor(
                factor_id="tempo",
                score=tempo_score,
                weight=TEMPO_FACTOR_WEIGHT,
                rationale=tempo_rationale,
                evidence_refs=(f"load-score:{round_half_up(signals.projected_load_score)}",),
            ),
        )


def estimate_command_risk(
    control_zones: Sequence[ControlZone] | None = None,
    communications_overlay: CommsOverlay | None = None,
    intel_items: Sequence[IntelItem] | None = None,
    operations: Sequence[Operation] | None = None,
    focus_scope: str | None = None,
    now: datetime | None = None,
    config: EngineConfig | None = None,
) -> InferenceSnapshot:
    """
    Estimate command risk and confidence.

    Pure function; never raises on missing optional inputs.
    """
    return CommandRiskEstimator(config).estimate(
        control_zones=control_zones,
        communications_overlay=communications_overlay,
        intel_items=intel_items,
        operations=operations,
        focus_scope=focus_scope,
        now=now,
    )
