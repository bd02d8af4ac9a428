"""
Signal Normalizer - the single translation boundary of the engine.

Upstream systems hand over loosely-typed dictionaries with varying
field-name conventions. This module converts them into the strict types
in control_inference.types. Scoring code never sees a raw dictionary.

Rules:
- Never raise on bad input; reject the entry and record why
- Malformed numbers become 0, malformed timestamps become "now"
- A missing expiry falls back to the category's default validity window

Author: Control Inference Team
"""

from __future__ import annotations

import logging

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from ..types import (
    CalloutPriority,
    CommsCallout,
    CommsLink,
    CommsNet,
    CommsOverlay,
    EngineConfig,
    EvidenceCategory,
    EvidenceRecord,
    GeometryHint,
    IntelItem,
    NetQuality,
    Operation,
    SourceRef,
    ZoneScope,
)
from .helpers import (
    coerce_bool,
    coerce_float,
    coerce_str,
    coerce_unit,
    content_id,
    first_present,
    parse_timestamp,
)

logger = logging.getLogger(__name__)


# =============================================================================
# ALIASES
# =============================================================================

CATEGORY_ALIASES: dict[str, EvidenceCategory] = {
    "PRESENCE": EvidenceCategory.PRESENCE_DECLARED,
    "PRESENCE_DECLARED": EvidenceCategory.PRESENCE_DECLARED,
    "ENGAGEMENT": EvidenceCategory.ENGAGEMENT_EVENT,
    "ENGAGEMENT_EVENT": EvidenceCategory.ENGAGEMENT_EVENT,
    "CQB_EVENT": EvidenceCategory.ENGAGEMENT_EVENT,
    "CONTACT": EvidenceCategory.ENGAGEMENT_EVENT,
    "LOGISTICS": EvidenceCategory.LOGISTICS_FLOW,
    "LOGISTICS_FLOW": EvidenceCategory.LOGISTICS_FLOW,
    "INTEL": EvidenceCategory.INTEL_NOTE,
    "INTEL_NOTE": EvidenceCategory.INTEL_NOTE,
    "ENDORSEMENT": EvidenceCategory.COMMAND_ENDORSEMENT,
    "COMMAND_ENDORSEMENT": EvidenceCategory.COMMAND_ENDORSEMENT,
    "OTHER": EvidenceCategory.OTHER,
}

QUALITY_ALIASES: dict[str, NetQuality] = {
    "CLEAR": NetQuality.CLEAR,
    "NOMINAL": NetQuality.CLEAR,
    "OK": NetQuality.CLEAR,
    "DEGRADED": NetQuality.DEGRADED,
    "CONTESTED": NetQuality.CONTESTED,
    "JAMMED": NetQuality.CONTESTED,
}

PRIORITY_ALIASES: dict[str, CalloutPriority] = {
    "STANDARD": CalloutPriority.STANDARD,
    "NORMAL": CalloutPriority.STANDARD,
    "ROUTINE": CalloutPriority.STANDARD,
    "HIGH": CalloutPriority.HIGH,
    "URGENT": CalloutPriority.HIGH,
    "CRITICAL": CalloutPriority.CRITICAL,
    "FLASH": CalloutPriority.CRITICAL,
}


def _token(value: Any) -> str:
    text = coerce_str(value) or ""
    return text.upper().replace("-", "_").replace(" ", "_")


def parse_category(value: Any) -> EvidenceCategory:
    """Map an upstream category label onto EvidenceCategory (default OTHER)."""
    return CATEGORY_ALIASES.get(_token(value), EvidenceCategory.OTHER)


def parse_quality(value: Any) -> NetQuality:
    """Unknown quality labels are treated as degraded, not nominal."""
    token = _token(value)
    if not token:
        return NetQuality.CLEAR
    return QUALITY_ALIASES.get(token, NetQuality.DEGRADED)


def parse_priority(value: Any) -> CalloutPriority:
    return PRIORITY_ALIASES.get(_token(value), CalloutPriority.STANDARD)


def parse_scope(value: Any) -> ZoneScope | None:
    text = (coerce_str(value) or "").lower()
    try:
        return ZoneScope(text)
    except ValueError:
        return None


# =============================================================================
# RESULT TYPES
# =============================================================================

@dataclass(frozen=True, slots=True)
class RejectedEntry:
    """An upstream entry the normalizer could not use."""

    index: int
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"index": self.index, "reason": self.reason}


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    """Validated records plus the entries that were excluded."""

    records: tuple[EvidenceRecord, ...]
    rejected: tuple[RejectedEntry, ...] = ()

    @property
    def accepted_count(self) -> int:
        return len(self.records)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)


# =============================================================================
# NORMALIZER
# =============================================================================

class SignalNormalizer:
    """
    Converts arbitrary upstream shapes into the engine's strict types.

    Usage:
        >>> normalizer = SignalNormalizer(config)
        >>> result = normalizer.normalize_evidence(raw_signals, now)
        >>> zones = resolve_control_zones(result.records, now)
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()

    @property
    def config(self) -> EngineConfig:
        """Read-only access to configuration."""
        return self._config

    # -------------------------------------------------------------------------
    # Evidence
    # -------------------------------------------------------------------------

    def normalize_evidence(self, raw: Any, now: datetime) -> NormalizationResult:
        """
        Validate and clamp a batch of raw evidence records.

        Args:
            raw: Iterable of upstream dictionaries (anything else is empty)
            now: Caller-supplied current time

        Returns:
            NormalizationResult with accepted records and rejections
        """
        now = _require_now(now)
        records: list[EvidenceRecord] = []
        rejected: list[RejectedEntry] = []

        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, Mapping):
                rejected.append(RejectedEntry(index, f"not a mapping: {type(entry).__name__}"))
                continue
            records.append(self.normalize_record(entry, now))

        if rejected:
            logger.warning(
                f"Evidence normalization rejected {len(rejected)} of "
                f"{len(records) + len(rejected)} entries"
            )
        logger.debug(f"Normalized {len(records)} evidence records")

        return NormalizationResult(records=tuple(records), rejected=tuple(rejected))

    def normalize_record(self, entry: Mapping[str, Any], now: datetime) -> EvidenceRecord:
        """
        Convert one upstream dictionary into an EvidenceRecord.

        Never raises for a mapping input.
        """
        now = _require_now(now)
        category = parse_category(first_present(entry, "category", "type", "signalType", "kind"))

        occurred_at = parse_timestamp(
            first_present(entry, "occurredAt", "occurred_at", "timestamp", "createdAt", "created_date")
        ) or now

        expires_at = self._resolve_expiry(entry, category, occurred_at)

        return EvidenceRecord(
            evidence_id=coerce_str(first_present(entry, "id", "evidenceId", "evidence_id", "signalId"))
            or content_id("ev", entry),
            category=category,
            source=self._source_ref(entry),
            weight=coerce_unit(first_present(entry, "weight", "baseWeight", "base_weight")),
            confidence=coerce_unit(first_present(entry, "confidence", "conf")),
            occurred_at=occurred_at,
            expires_at=expires_at,
            org_id=coerce_str(first_present(entry, "orgId", "org_id", "claimantId", "claimant_id", "org")),
            scope=parse_scope(first_present(entry, "scope", "region_scope")),
            geometry=self._geometry(entry),
        )

    def _resolve_expiry(
        self,
        entry: Mapping[str, Any],
        category: EvidenceCategory,
        occurred_at: datetime,
    ) -> datetime:
        explicit = parse_timestamp(first_present(entry, "expiresAt", "expires_at", "expiry"))
        if explicit is not None:
            return explicit

        ttl_seconds = coerce_float(first_present(entry, "ttlSeconds", "ttl_seconds", "ttl"), default=-1.0)
        if ttl_seconds <= 0:
            ttl_seconds = float(self._config.ttl_for(category))
        try:
            return occurred_at + timedelta(seconds=ttl_seconds)
        except OverflowError:
            return datetime.max.replace(tzinfo=timezone.utc)

    @staticmethod
    def _source_ref(entry: Mapping[str, Any]) -> SourceRef:
        raw_ref = first_present(entry, "sourceRef", "source_ref", "source")
        if isinstance(raw_ref, Mapping):
            return SourceRef(
                id=coerce_str(raw_ref.get("id")) or "",
                kind=coerce_str(raw_ref.get("kind")) or "unknown",
            )
        return SourceRef(
            id=coerce_str(raw_ref) or coerce_str(first_present(entry, "sourceId", "source_id")) or "",
            kind=coerce_str(first_present(entry, "sourceKind", "source_kind")) or "unknown",
        )

    @staticmethod
    def _geometry(entry: Mapping[str, Any]) -> GeometryHint | None:
        raw_hint = first_present(entry, "geometryHint", "geometry_hint", "geometry")
        hint: Mapping[str, Any] = raw_hint if isinstance(raw_hint, Mapping) else {}

        node_id = coerce_str(first_present(hint, "nodeId", "node_id")) or coerce_str(
            first_present(entry, "nodeId", "node_id", "anchor")
        )
        anchor_x = first_present(hint, "anchorX", "anchor_x", "x")
        anchor_y = first_present(hint, "anchorY", "anchor_y", "y")

        if node_id is None and anchor_x is None and anchor_y is None:
            return None

        return GeometryHint(
            node_id=node_id,
            anchor_x=coerce_float(anchor_x) if anchor_x is not None else None,
            anchor_y=coerce_float(anchor_y) if anchor_y is not None else None,
        )

    # -------------------------------------------------------------------------
    # Comms overlay
    # -------------------------------------------------------------------------

    def normalize_overlay(self, raw: Any, now: datetime | None = None) -> CommsOverlay:
        """
        Convert an upstream comms overlay into a CommsOverlay.

        Non-mapping nets, links and callouts are skipped with a warning.
        """
        if not isinstance(raw, Mapping):
            return CommsOverlay()

        nets = [self._net(i, n) for i, n in enumerate(_as_list(raw.get("nets"))) if isinstance(n, Mapping)]
        links = [self._link(i, link) for i, link in enumerate(_as_list(raw.get("links"))) if isinstance(link, Mapping)]
        callouts = [
            self._callout(i, c, now)
            for i, c in enumerate(_as_list(raw.get("callouts")))
            if isinstance(c, Mapping)
        ]

        skipped = sum(
            len(_as_list(raw.get(key))) for key in ("nets", "links", "callouts")
        ) - (len(nets) + len(links) + len(callouts))
        if skipped:
            logger.warning(f"Comms overlay normalization skipped {skipped} malformed entries")

        return CommsOverlay(nets=tuple(nets), links=tuple(links), callouts=tuple(callouts))

    @staticmethod
    def _net(index: int, entry: Mapping[str, Any]) -> CommsNet:
        return CommsNet(
            net_id=coerce_str(first_present(entry, "id", "netId", "net_id")) or f"net-{index}",
            quality=parse_quality(first_present(entry, "quality", "status")),
            traffic_score=max(0.0, coerce_float(first_present(entry, "trafficScore", "traffic_score", "traffic"))),
            label=coerce_str(first_present(entry, "label", "code", "name")) or "",
            node_id=coerce_str(first_present(entry, "nodeId", "node_id")),
        )

    @staticmethod
    def _link(index: int, entry: Mapping[str, Any]) -> CommsLink:
        return CommsLink(
            link_id=coerce_str(first_present(entry, "id", "linkId", "link_id")) or f"link-{index}",
            from_net_id=coerce_str(first_present(entry, "fromNetId", "from_net_id", "sourceNetId")) or "",
            to_net_id=coerce_str(first_present(entry, "toNetId", "to_net_id", "targetNetId")) or "",
            status=coerce_str(first_present(entry, "status")) or "active",
        )

    @staticmethod
    def _callout(index: int, entry: Mapping[str, Any], now: datetime | None) -> CommsCallout:
        expires_at = parse_timestamp(first_present(entry, "expiresAt", "expires_at"))
        stale = coerce_bool(first_present(entry, "stale", "expired"))
        reference = parse_timestamp(now) if now is not None else None
        if not stale and reference is not None and expires_at is not None:
            stale = expires_at <= reference

        return CommsCallout(
            callout_id=coerce_str(first_present(entry, "id", "calloutId", "callout_id")) or f"callout-{index}",
            priority=parse_priority(first_present(entry, "priority", "severity")),
            net_id=coerce_str(first_present(entry, "netId", "net_id")) or "",
            lane=coerce_str(first_present(entry, "lane")) or "",
            message=coerce_str(first_present(entry, "message", "text")) or "",
            stale=stale,
            expires_at=expires_at,
        )

    # -------------------------------------------------------------------------
    # Intel and operations
    # -------------------------------------------------------------------------

    def normalize_intel(self, raw: Any, now: datetime | None = None) -> tuple[IntelItem, ...]:
        """
        Convert upstream intel records into IntelItems.

        The stale flag is read from "stale" or "ttl.stale". When neither is
        present it is computed from updated_at + ttl_seconds against now,
        and a retired record is always stale.
        """
        items: list[IntelItem] = []
        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, Mapping):
                logger.warning(f"Skipping malformed intel entry at index {index}")
                continue
            updated_at = parse_timestamp(first_present(entry, "updatedAt", "updated_at", "createdAt"))
            items.append(IntelItem(
                intel_id=coerce_str(first_present(entry, "id", "intelId", "intel_id")) or content_id("intel", entry),
                stale=self._intel_stale(entry, updated_at, now),
                title=coerce_str(first_present(entry, "title", "summary")) or "",
                updated_at=updated_at,
            ))
        return tuple(items)

    @staticmethod
    def _intel_stale(entry: Mapping[str, Any], updated_at: datetime | None, now: datetime | None) -> bool:
        if first_present(entry, "retiredAt", "retired_at") is not None:
            return True

        ttl = entry.get("ttl")
        if isinstance(ttl, Mapping) and "stale" in ttl:
            return coerce_bool(ttl["stale"])
        if "stale" in entry:
            return coerce_bool(entry["stale"])

        ttl_seconds = coerce_float(first_present(entry, "ttlSeconds", "ttl_seconds"), default=-1.0)
        reference = parse_timestamp(now) if now is not None else None
        if ttl_seconds > 0 and updated_at is not None and reference is not None:
            return updated_at + timedelta(seconds=ttl_seconds) <= reference
        return False

    @staticmethod
    def normalize_operations(raw: Any) -> tuple[Operation, ...]:
        """Convert upstream operation records into Operations."""
        operations: list[Operation] = []
        for index, entry in enumerate(_as_list(raw)):
            if not isinstance(entry, Mapping):
                continue
            operations.append(Operation(
                operation_id=coerce_str(first_present(entry, "id", "operationId", "operation_id")) or f"op-{index}",
                name=coerce_str(first_present(entry, "name", "title", "label")) or "",
                status=coerce_str(first_present(entry, "status", "state")) or "",
            ))
        return tuple(operations)


def _as_list(raw: Any) -> list[Any]:
    """Treat anything that is not a non-string iterable as empty."""
    if raw is None or isinstance(raw, (str, bytes, Mapping)):
        return []
    if isinstance(raw, Iterable):
        return list(raw)
    return []


def _require_now(now: Any) -> datetime:
    """Resolve the caller's current time; naive values are taken as UTC."""
    if not isinstance(now, datetime):
        raise TypeError(f"now must be a datetime, got {type(now).__name__}")
    return parse_timestamp(now)
