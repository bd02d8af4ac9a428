"""
Control Inference - Main orchestration module.

This is the primary entry point for using Control Inference.
Brings together normalization, zone aggregation and risk estimation.
"""

import logging

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from .analysis import ZoneAggregator
from .config import load_config
from .decision import CommandRiskEstimator
from .normalization import NormalizationResult, SignalNormalizer
from .normalization.helpers import coerce_str, first_present, parse_timestamp
from .types import (
    CommsOverlay,
    ControlZone,
    EngineConfig,
    EvidenceRecord,
    InferenceSnapshot,
    IntelItem,
    Operation,
    ZoneResolution,
)

logger = logging.getLogger(__name__)


class InferenceEngine:
    """
    Main orchestration class for Control Inference.

    Usage:
        engine = InferenceEngine()

        # Typed inputs
        zones = engine.resolve_zones(records, now)
        snapshot = engine.estimate(zones, overlay, intel, operations, now=now)

        # Raw upstream payload
        result = engine.run_pipeline(payload, now)
    """

    def __init__(self, config: EngineConfig | None = None):
        """
        Initialize the engine.

        Args:
            config: Configuration (loads from file if not provided)
        """
        self.config = config or load_config()

        # Initialize components
        self.normalizer = SignalNormalizer(self.config)
        self.aggregator = ZoneAggregator(self.config)
        self.estimator = CommandRiskEstimator(self.config)

    def resolve_evidence(
        self,
        records: Iterable[EvidenceRecord],
        now: datetime,
    ) -> ZoneResolution:
        """
        Aggregate evidence inside a failure boundary.

        An unexpected failure in the aggregator is logged and degrades to
        an empty resolution so that estimation can still proceed.

        Returns:
            ZoneResolution with unanchored and dropped counts, or an empty
            resolution on failure
        """
        try:
            return self.aggregator.aggregate(records, now)
        except Exception as e:
            logger.warning(f"Control zone resolution failed, continuing with no zones: {e}")
            return ZoneResolution(zones=())

    def resolve_zones(
        self,
        records: Iterable[EvidenceRecord],
        now: datetime,
    ) -> list[ControlZone]:
        """Resolve control zones, or [] when the aggregator fails."""
        return list(self.resolve_evidence(records, now).zones)

    def estimate(
        self,
        control_zones: Iterable[ControlZone] | None = None,
        communications_overlay: CommsOverlay | None = None,
        intel_items: Iterable[IntelItem] | None = None,
        operations: Iterable[Operation] | None = None,
        focus_scope: str | None = None,
        now: datetime | None = None,
    ) -> InferenceSnapshot:
        """
        Build an inference snapshot from typed inputs.

        Returns:
            InferenceSnapshot with scores, counts and recommendations
        """
        return self.estimator.estimate(
            control_zones=tuple(control_zones or ()),
            communications_overlay=communications_overlay,
            intel_items=tuple(intel_items or ()),
            operations=tuple(operations or ()),
            focus_scope=focus_scope,
            now=now,
        )

    def analyze(
        self,
        payload: Mapping[str, Any],
        now: datetime,
    ) -> tuple[NormalizationResult, ZoneResolution, InferenceSnapshot]:
        """
        Normalize a raw payload, resolve zones and estimate, keeping typed results.

        Args:
            payload: Raw upstream payload with "evidence", "comms",
                "intel", "operations" and optional "focusScope"
            now: Caller-supplied current time

        Returns:
            (normalized evidence, zone resolution, snapshot)
        """
        if not isinstance(payload, Mapping):
            logger.warning(f"Pipeline payload is not a mapping: {type(payload).__name__}")
            payload = {}

        normalized = self.normalizer.normalize_evidence(
            first_present(payload, "evidence", "signals", "controlSignals"), now
        )
        overlay = self.normalizer.normalize_overlay(
            first_present(payload, "comms", "commsOverlay", "communicationsOverlay"), now
        )
        intel = self.normalizer.normalize_intel(
            first_present(payload, "intel", "intelItems", "intelObjects"), now
        )
        operations = self.normalizer.normalize_operations(payload.get("operations"))
        focus_scope = coerce_str(first_present(payload, "focusScope", "focus_scope", "focusOperationId"))

        resolution = self.resolve_evidence(normalized.records, now)
        snapshot = self.estimate(
            control_zones=resolution.zones,
            communications_overlay=overlay,
            intel_items=intel,
            operations=operations,
            focus_scope=focus_scope,
            now=now,
        )
        return normalized, resolution, snapshot

    def run_pipeline(
        self,
        payload: Mapping[str, Any],
        now: datetime,
    ) -> dict[str, Any]:
        """
        Run the complete pipeline: normalize -> resolve -> estimate.

        Returns:
            JSON-ready result with snapshot, zones, rejections and audit counts
        """
        normalized, resolution, snapshot = self.analyze(payload, now)
        return self.build_result(normalized, resolution, snapshot, now)

    @staticmethod
    def build_result(
        normalized: NormalizationResult,
        resolution: ZoneResolution,
        snapshot: InferenceSnapshot,
        now: datetime,
    ) -> dict[str, Any]:
        """Shape the typed results of analyze into a JSON-ready dict."""
        return {
            "timestamp": now.isoformat(),
            "snapshot": snapshot.to_dict(),
            "zones": [zone.to_dict() for zone in resolution.zones],
            "rejected": [entry.to_dict() for entry in normalized.rejected],
            "audit": {
                "accepted_records": normalized.accepted_count,
                "rejected_records": normalized.rejected_count,
                "binned_records": sum(zone.evidence_count for zone in resolution.zones),
                "unanchored_records": resolution.unanchored_count,
                "dropped_records": resolution.dropped_count,
            },
        }

    def get_status(self) -> dict[str, Any]:
        """
        Get current engine status.

        Returns the effective configuration.
        """
        return {"config": self.config.to_dict()}


def parse_now(value: Any, default: datetime) -> datetime:
    """Parse a caller-supplied "now", falling back to default."""
    return parse_timestamp(value) or default
