"""
Tests for the InferenceEngine orchestrator.
"""

import pytest
from datetime import datetime, timezone

from control_inference import InferenceEngine
from control_inference.decision.recommendations import MAINTAIN_CADENCE
from control_inference.engine import parse_now
from control_inference.types import EngineConfig


NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_payload() -> dict:
    """Helper to create a raw upstream payload."""
    return {
        "evidence": [
            {
                "id": "rs-1",
                "category": "PRESENCE_DECLARED",
                "source": "roster@stanton-hurston",
                "weight": 0.6,
                "confidence": 0.8,
                "occurredAt": "2026-01-01T11:59:00Z",
                "orgId": "RS",
            },
            {
                "id": "vx-1",
                "category": "ENGAGEMENT_EVENT",
                "source": "scan@stanton-hurston",
                "weight": 0.6,
                "confidence": 0.8,
                "occurredAt": "2026-01-01T11:59:00Z",
                "orgId": "VX",
            },
            "not-a-record",
        ],
        "comms": {
            "nets": [{"id": "n1", "quality": "DEGRADED", "trafficScore": 20}],
            "callouts": [{"id": "c1", "priority": "CRITICAL", "lane": "command"}],
        },
        "intel": [{"id": "i1", "stale": True}],
        "operations": [{"id": "op-1", "name": "Night Watch"}],
        "focusScope": "op-1",
    }


class FailingAggregator:
    """Aggregator stand-in that always fails."""

    def aggregate(self, records, now, include_stale=False):
        raise RuntimeError("aggregator exploded")


class TestRunPipeline:
    """Tests for the raw-payload pipeline."""

    def test_full_pipeline(self):
        """A mixed payload flows through to a scored snapshot."""
        result = InferenceEngine(EngineConfig()).run_pipeline(make_payload(), NOW)

        snapshot = result["snapshot"]
        assert result["timestamp"] == NOW.isoformat()
        assert len(result["zones"]) == 1
        assert result["zones"][0]["zone_id"] == "system:stanton-hurston"
        assert snapshot["contested_zone_count"] == 1
        # 18 contested + 14 degraded + 22 critical + 6 stale
        assert snapshot["command_risk_score"] == 60
        assert snapshot["focus_label"] == "Night Watch"

    def test_rejections_reported(self):
        """Unusable entries are reported with their index."""
        result = InferenceEngine(EngineConfig()).run_pipeline(make_payload(), NOW)

        assert result["rejected"] == [{"index": 2, "reason": "not a mapping: str"}]
        assert result["audit"]["accepted_records"] == 2
        assert result["audit"]["binned_records"] == 2

    def test_audit_counts_every_record(self):
        """Unanchored and dropped records are reported next to binned ones."""
        payload = make_payload()
        payload["evidence"] += [
            {
                "id": "lost",
                "source": "plain",
                "weight": 0.5,
                "confidence": 0.5,
                "occurredAt": "2026-01-01T11:59:00Z",
            },
            {
                "id": "faded",
                "source": "scan@stanton-hurston",
                "weight": 0.5,
                "confidence": 0.5,
                "occurredAt": "2026-01-01T10:00:00Z",
                "expiresAt": "2026-01-01T10:05:00Z",
            },
        ]
        audit = InferenceEngine(EngineConfig()).run_pipeline(payload, NOW)["audit"]

        assert audit["accepted_records"] == 4
        assert audit["binned_records"] == 2
        assert audit["unanchored_records"] == 1
        assert audit["dropped_records"] == 1
        assert (
            audit["binned_records"] + audit["unanchored_records"] + audit["dropped_records"]
            == audit["accepted_records"]
        )

    def test_non_mapping_payload(self):
        """A payload that is not a mapping degrades to empty inputs."""
        result = InferenceEngine(EngineConfig()).run_pipeline(["junk"], NOW)

        assert result["zones"] == []
        assert result["snapshot"]["recommendations"] == [MAINTAIN_CADENCE]

    def test_alias_keys(self):
        """Alternate top-level keys are accepted."""
        payload = make_payload()
        payload["signals"] = payload.pop("evidence")
        result = InferenceEngine(EngineConfig()).run_pipeline(payload, NOW)
        assert len(result["zones"]) == 1


class TestFailureBoundary:
    """Zone resolution failures must not stop estimation."""

    def test_aggregator_failure_yields_no_zones(self, caplog):
        """A crashing aggregator degrades to an empty zone list."""
        engine = InferenceEngine(EngineConfig())
        engine.aggregator = FailingAggregator()

        result = engine.run_pipeline(make_payload(), NOW)

        assert result["zones"] == []
        assert result["snapshot"]["contested_zone_count"] == 0
        # comms and intel are still scored: 14 degraded + 22 critical + 6 stale
        assert result["snapshot"]["command_risk_score"] == 42
        assert "aggregator exploded" in caplog.text

    def test_aggregator_failure_resolve_zones(self):
        """resolve_zones degrades to an empty list too."""
        engine = InferenceEngine(EngineConfig())
        engine.aggregator = FailingAggregator()
        assert engine.resolve_zones([], NOW) == []


class TestTypedApi:
    """Tests for the typed entry points."""

    def test_analyze_returns_typed_results(self):
        """analyze exposes the normalized records, zones and snapshot."""
        normalized, resolution, snapshot = InferenceEngine(EngineConfig()).analyze(make_payload(), NOW)

        assert normalized.accepted_count == 2
        assert resolution.zones[0].leading_controller is not None
        assert resolution.audit_total == 2
        assert snapshot.generated_at == NOW

    def test_get_status(self):
        """Status exposes the effective configuration."""
        status = InferenceEngine(EngineConfig(contested_threshold=0.5)).get_status()
        assert status["config"]["contested_threshold"] == 0.5


class TestParseNow:
    """Tests for caller-supplied now parsing."""

    def test_parses_iso(self):
        """An ISO string becomes an aware datetime."""
        assert parse_now("2026-01-01T12:00:00Z", datetime.min) == NOW

    @pytest.mark.parametrize("value", [None, "", "later"])
    def test_falls_back(self, value):
        """Missing or unreadable values use the default."""
        assert parse_now(value, NOW) is NOW
