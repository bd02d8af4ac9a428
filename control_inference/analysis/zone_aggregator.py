"""
Zone Aggregator - turns decayed evidence into control-zone claims.

Groups evidence by spatial anchor, resolves competing claimants and emits
probabilistic control zones. Every confidence and contestation value on a
zone is derived from the zone's own evidence tuple, which is kept whole.

Aggregation rules:
1. Influence comes from DecayFunction; expired records weigh nothing
2. Unclaimed records with no influence are left out of binning
3. Claimants are ranked by summed influence, then most recent
   occurrence, then org id ascending
4. Controller confidence is the claimant's share of claimant influence
5. Contestation = 1 - (lead share - runner-up share)

Author: Control Inference Team
"""

from __future__ import annotations

import logging
import math

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Final

import numpy as np

from scipy import stats

from ..types import (
    ControllerAssertion,
    ControlZone,
    EngineConfig,
    EvidenceRecord,
    GeometryHint,
    ZoneResolution,
    ZoneScope,
)
from .decay import DecayFunction, as_utc

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

UNCONTESTED: Final[float] = 0.0
SCOPE_WIDE_NODE: Final[str] = "*"

# Influence sums are compared at this precision when breaking ties
TIE_PRECISION: Final[int] = 12


# =============================================================================
# DATA CLASSES
# =============================================================================

@dataclass(frozen=True, slots=True)
class ZoneAnchor:
    """Where a record is binned."""

    zone_id: str
    scope: ZoneScope
    geometry: GeometryHint


@dataclass(frozen=True, slots=True)
class ClaimantStanding:
    """
    One claimant's aggregate position in a zone.

    Attributes:
        org_id: Claimant organization
        influence: Summed decayed influence of the org's records
        latest_at: Most recent occurrence among the org's live records
        share: influence / total claimant influence in the zone
    """

    org_id: str
    influence: float
    latest_at: datetime
    share: float = 0.0

    def sort_key(self) -> tuple[float, float, str]:
        return (
            -round(self.influence, TIE_PRECISION),
            -as_utc(self.latest_at).timestamp(),
            self.org_id,
        )


# =============================================================================
# ZONE AGGREGATOR
# =============================================================================

class ZoneAggregator:
    """
    Aggregates evidence records into control zones.

    The aggregator holds configuration only; every call is independent
    and pure given its explicit "now".

    Usage:
        >>> aggregator = ZoneAggregator(config)
        >>> zones = aggregator.resolve(records, now)
        >>> resolution = aggregator.aggregate(records, now, include_stale=True)
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()

    @property
    def config(self) -> EngineConfig:
        """Read-only access to configuration."""
        return self._config

    def resolve(self, records: Iterable[EvidenceRecord], now: datetime) -> list[ControlZone]:
        """Aggregate records and return only the zones."""
        return list(self.aggregate(records, now).zones)

    def aggregate(
        self,
        records: Iterable[EvidenceRecord],
        now: datetime,
        include_stale: bool = False,
    ) -> ZoneResolution:
        """
        Aggregate evidence into control zones.

        Args:
            records: Normalized evidence records
            now: Caller-supplied current time
            include_stale: Keep records left out of binning in the audit list

        Returns:
            ZoneResolution with zones ordered by contestation (desc), then id
        """
        records = list(records)
        influences = DecayFunction.influences(records, now)

        groups: dict[str, list[EvidenceRecord]] = {}
        anchors: dict[str, ZoneAnchor] = {}
        audit: list[EvidenceRecord] = []
        dropped = 0
        unanchored = 0

        for record, influence in zip(records, influences):
            if influence <= 0 and record.org_id is None:
                dropped += 1
                if include_stale:
                    audit.append(record)
                continue

            anchor = self.resolve_anchor(record)
            if anchor is None:
                unanchored += 1
                if include_stale:
                    audit.append(record)
                continue

            if anchor.zone_id not in groups:
                groups[anchor.zone_id] = []
                anchors[anchor.zone_id] = anchor
            groups[anchor.zone_id].append(record)

        zones = [
            self._build_zone(anchors[zone_id], evidence, now)
            for zone_id, evidence in groups.items()
        ]
        zones.sort(key=lambda z: (-z.contestation_level, z.zone_id))

        logger.debug(
            f"Aggregated {len(records)} records into {len(zones)} zones "
            f"(dropped={dropped}, unanchored={unanchored})"
        )

        return ZoneResolution(
            zones=tuple(zones),
            audit=tuple(audit),
            unanchored_count=unanchored,
            dropped_count=dropped,
        )

    # -------------------------------------------------------------------------
    # Anchoring
    # -------------------------------------------------------------------------

    @staticmethod
    def infer_node_id(record: EvidenceRecord) -> str | None:
        """
        Find the node a record refers to.

        Uses the geometry hint first, then the source reference id:
        "<x>@<node>" yields node, "<a>:<b>" yields the last segment.
        """
        if record.geometry is not None and record.geometry.node_id:
            return record.geometry.node_id

        source_id = record.source.id
        if not source_id:
            return None
        if "@" in source_id:
            return source_id.split("@")[1].strip() or None
        parts = source_id.split(":")
        if len(parts) > 1:
            return parts[-1].strip() or None
        return None

    @staticmethod
    def resolve_anchor(record: EvidenceRecord) -> ZoneAnchor | None:
        """
        Resolve the zone a record belongs to.

        Returns:
            ZoneAnchor, or None when the record has neither a node nor a
            declared scope
        """
        node_id = ZoneAggregator.infer_node_id(record)
        if node_id is not None:
            scope = record.scope or ZoneScope.SYSTEM
            hint = record.geometry or GeometryHint()
            return ZoneAnchor(
                zone_id=f"{scope.value}:{node_id}",
                scope=scope,
                geometry=GeometryHint(node_id=node_id, anchor_x=hint.anchor_x, anchor_y=hint.anchor_y),
            )

        if record.scope is not None:
            return ZoneAnchor(
                zone_id=f"{record.scope.value}:{SCOPE_WIDE_NODE}",
                scope=record.scope,
                geometry=GeometryHint(),
            )

        return None

    # -------------------------------------------------------------------------
    # Claimant ranking
    # -------------------------------------------------------------------------

    @staticmethod
    def rank_claimants(
        evidence: Sequence[EvidenceRecord],
        now: datetime,
    ) -> list[ClaimantStanding]:
        """
        Rank the claimants of a zone from its evidence alone.

        Records without a claimant and claimants whose influence has
        fully decayed are left out of the ranking.

        Returns:
            Standings ordered strongest first, with shares filled in
        """
        totals: dict[str, float] = {}
        latest: dict[str, datetime] = {}

        for record in evidence:
            if record.org_id is None:
                continue
            influence = DecayFunction.influence(record, now)
            if influence <= 0:
                continue
            totals[record.org_id] = totals.get(record.org_id, 0.0) + influence
            previous = latest.get(record.org_id)
            if previous is None or as_utc(record.occurred_at) > as_utc(previous):
                latest[record.org_id] = record.occurred_at

        if not totals:
            return []

        standings = sorted(
            (ClaimantStanding(org_id, totals[org_id], latest[org_id]) for org_id in totals),
            key=ClaimantStanding.sort_key,
        )

        weights = np.array([s.influence for s in standings], dtype=np.float64)
        shares = weights / float(np.sum(weights))

        return [
            ClaimantStanding(s.org_id, s.influence, s.latest_at, float(share))
            for s, share in zip(standings, shares)
        ]

    @staticmethod
    def contestation(shares: Sequence[float]) -> float:
        """
        Contestation of a zone from its ranked claimant shares.

        Mathematical Definition:
            contestation = clamp(1 - (share_lead - share_second), 0, 1)

        A single claimant (or none) is uncontested: 0.0.
        """
        if len(shares) < 2:
            return UNCONTESTED
        return float(np.clip(1.0 - (shares[0] - shares[1]), 0.0, 1.0))

    @staticmethod
    def claim_dispersion(shares: Sequence[float]) -> float:
        """
        Normalized Shannon entropy over all claimant shares.

        Covers every claimant, not only the two surfaced as controllers.
        0.0 for one claimant, 1.0 for a perfectly even split.
        """
        if len(shares) < 2:
            return 0.0
        entropy = stats.entropy(np.asarray(shares, dtype=np.float64))
        return float(np.clip(entropy / math.log(len(shares)), 0.0, 1.0))

    # -------------------------------------------------------------------------
    # Zone assembly
    # -------------------------------------------------------------------------

    def _build_zone(
        self,
        anchor: ZoneAnchor,
        evidence: list[EvidenceRecord],
        now: datetime,
    ) -> ControlZone:
        # Newest first; evidence_id keeps ties independent of input order
        ordered = sorted(
            evidence,
            key=lambda r: (-as_utc(r.occurred_at).timestamp(), r.evidence_id),
        )
        standings = self.rank_claimants(ordered, now)
        shares = [s.share for s in standings]

        controllers = tuple(
            ControllerAssertion(org_id=s.org_id, confidence=s.share, updated_at=s.latest_at)
            for s in standings[: self._config.max_asserted_controllers]
        )

        occurred = [r.occurred_at for r in ordered]
        return ControlZone(
            zone_id=anchor.zone_id,
            scope=anchor.scope,
            geometry=anchor.geometry,
            asserted_controllers=controllers,
            contestation_level=self.contestation(shares),
            evidence=tuple(ordered),
            validity_profile_id=self._config.validity_profile_id,
            created_at=min(occurred, key=as_utc),
            updated_at=max(occurred, key=as_utc),
            claim_dispersion=self.claim_dispersion(shares),
        )


def resolve_control_zones(
    records: Iterable[EvidenceRecord],
    now: datetime,
    config: EngineConfig | None = None,
) -> list[ControlZone]:
    """
    Resolve evidence records into control zones.

    Pure function: identical inputs always produce identical output.

    Args:
        records: Normalized evidence records
        now: Caller-supplied current time
        config: Engine configuration (defaults if omitted)

    Returns:
        Control zones, most contested first
    """
    return ZoneAggregator(config).resolve(records, now)
