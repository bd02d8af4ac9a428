"""
Example: Watching a control claim fade and a zone become contested.

This demonstrates:
1. A fresh, uncontested claim
2. A rival claimant arriving (contestation rises)
3. The original evidence expiring (the rival takes over)
4. Everything expiring (the zone has no controller)
"""

import random
from datetime import datetime, timedelta, timezone

from control_inference.analysis import ZoneAggregator
from control_inference.decision import estimate_command_risk
from control_inference.types import (
    EngineConfig,
    EvidenceCategory,
    EvidenceRecord,
    GeometryHint,
    SourceRef,
)


START = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_evidence(index: int, org_id: str, occurred_at: datetime, ttl_minutes: int) -> EvidenceRecord:
    """One presence report at the demo node."""
    return EvidenceRecord(
        evidence_id=f"{org_id.lower()}-{index}",
        category=EvidenceCategory.PRESENCE_DECLARED,
        source=SourceRef(id=f"patrol-{index}", kind="patrol"),
        weight=random.uniform(0.4, 0.7),
        confidence=random.uniform(0.6, 0.9),
        occurred_at=occurred_at,
        expires_at=occurred_at + timedelta(minutes=ttl_minutes),
        org_id=org_id,
        geometry=GeometryHint(node_id="stanton-hurston"),
    )


def report(aggregator: ZoneAggregator, records: list, now: datetime, label: str) -> None:
    resolution = aggregator.aggregate(records, now, include_stale=True)
    snapshot = estimate_command_risk(list(resolution.zones), now=now)

    print("\n" + "=" * 60)
    print(f"{label} (t+{int((now - START).total_seconds() // 60)} min)")
    print("=" * 60)
    for zone in resolution.zones:
        controllers = ", ".join(f"{c.org_id} {c.confidence:.0%}" for c in zone.asserted_controllers) or "none"
        print(f"{zone.zone_id}: controllers [{controllers}]")
        print(f"  contestation {zone.contestation_level:.2f}, dispersion {zone.claim_dispersion:.2f}")
    print(f"Contested zones: {snapshot.contested_zone_count}, risk {snapshot.command_risk_score}")
    print(f"First recommendation: {snapshot.recommendations[0]}")


def main():
    random.seed(42)
    aggregator = ZoneAggregator(EngineConfig())

    # Phase 1: RS holds the node alone
    records = [make_evidence(i, "RS", START + timedelta(minutes=i), ttl_minutes=10) for i in range(3)]
    report(aggregator, records, START + timedelta(minutes=3), "PHASE 1: UNCONTESTED")

    # Phase 2: VX reports presence at the same node
    records += [make_evidence(i, "VX", START + timedelta(minutes=4 + i), ttl_minutes=15) for i in range(3)]
    report(aggregator, records, START + timedelta(minutes=7), "PHASE 2: RIVAL ARRIVES")

    # Phase 3: RS evidence has expired, VX still live
    report(aggregator, records, START + timedelta(minutes=13), "PHASE 3: CLAIM FADES")

    # Phase 4: nothing live
    report(aggregator, records, START + timedelta(minutes=30), "PHASE 4: ALL EXPIRED")


if __name__ == "__main__":
    main()
