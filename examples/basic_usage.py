"""
Example: Resolving control zones and estimating command risk.

This example demonstrates:
1. Normalizing raw upstream records
2. Resolving control zones
3. Estimating command risk
4. Explaining the result
"""

import json
from datetime import datetime, timedelta, timezone

from control_inference import InferenceEngine
from control_inference.reporting import build_summary_prompt, explain_snapshot, explain_zone
from control_inference.types import EngineConfig


def build_payload(now: datetime) -> dict:
    """A small mixed payload in the loose shape upstream systems send."""
    def ago(minutes: float) -> str:
        return (now - timedelta(minutes=minutes)).isoformat()

    return {
        "evidence": [
            {"id": "ev-1", "category": "PRESENCE_DECLARED", "source": "roster@stanton-hurston",
             "weight": 0.6, "confidence": 0.8, "occurredAt": ago(1), "orgId": "RS"},
            {"id": "ev-2", "category": "COMMAND_ENDORSEMENT", "source": "command@stanton-hurston",
             "weight": 0.6, "confidence": 0.8, "occurredAt": ago(2), "orgId": "RS"},
            {"id": "ev-3", "category": "CQB_EVENT", "source": "contact@stanton-hurston",
             "weight": 0.4, "confidence": 0.5, "occurredAt": ago(1), "orgId": "VX"},
            {"id": "ev-4", "category": "LOGISTICS_FLOW", "source": "freight:crusader",
             "weight": 0.5, "confidence": 0.6, "occurredAt": ago(3), "orgId": "VX"},
            {"id": "ev-5", "category": "ENGAGEMENT_EVENT", "source": "scan@crusader",
             "weight": 0.5, "confidence": 0.6, "occurredAt": ago(2), "orgId": "RS"},
        ],
        "comms": {
            "nets": [
                {"id": "net-command", "quality": "CLEAR", "trafficScore": 22},
                {"id": "net-logistics", "quality": "DEGRADED", "trafficScore": 18},
            ],
            "links": [{"id": "bridge-1", "fromNetId": "net-command", "toNetId": "net-logistics"}],
            "callouts": [
                {"id": "c-1", "priority": "HIGH", "lane": "logistics"},
                {"id": "c-2", "priority": "CRITICAL", "lane": "command"},
            ],
        },
        "intel": [
            {"id": "intel-1", "title": "Patrol route", "updatedAt": ago(5), "ttlSeconds": 3600},
            {"id": "intel-2", "title": "Old sighting", "stale": True},
        ],
        "operations": [{"id": "op-nightwatch", "name": "Night Watch"}],
        "focusScope": "op-nightwatch",
    }


def main():
    now = datetime.now(timezone.utc)
    engine = InferenceEngine(EngineConfig())

    print("=== Resolving Zones ===")
    normalized, resolution, snapshot = engine.analyze(build_payload(now), now)
    print(f"Accepted {normalized.accepted_count} records, rejected {normalized.rejected_count}")
    for zone in resolution.zones:
        print(explain_zone(zone))

    print("\n=== Command Estimate ===")
    print(explain_snapshot(snapshot))

    print("\n=== Summarizer Prompt ===")
    print(build_summary_prompt(snapshot))

    print("\n=== Audit Counts ===")
    result = engine.build_result(normalized, resolution, snapshot, now)
    print(json.dumps(result["audit"], indent=2))


if __name__ == "__main__":
    main()
