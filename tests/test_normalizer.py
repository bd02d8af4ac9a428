"""
Tests for the signal normalization boundary.
"""

import pytest
from datetime import datetime, timezone

from control_inference.normalization import SignalNormalizer
from control_inference.normalization.adapter import parse_category, parse_priority, parse_quality
from control_inference.normalization.helpers import (
    coerce_float,
    coerce_unit,
    content_id,
    first_present,
    parse_timestamp,
)
from control_inference.types import (
    CalloutPriority,
    EngineConfig,
    EvidenceCategory,
    NetQuality,
    ZoneScope,
)


NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_raw(**overrides) -> dict:
    """Helper to create a camelCase upstream evidence dict."""
    raw = {
        "id": "sig-1",
        "category": "PRESENCE_DECLARED",
        "sourceRef": {"id": "roster:alpha", "kind": "roster"},
        "weight": 0.6,
        "confidence": 0.8,
        "occurredAt": "2026-01-01T11:58:00Z",
        "expiresAt": "2026-01-01T12:04:00Z",
        "orgId": "RS",
        "geometryHint": {"nodeId": "stanton-hurston"},
    }
    raw.update(overrides)
    return raw


class TestNormalizeEvidence:
    """Tests for evidence record normalization."""

    def test_camel_case_record(self):
        """A well-formed upstream record maps field for field."""
        result = SignalNormalizer().normalize_evidence([make_raw()], NOW)

        assert result.accepted_count == 1
        record = result.records[0]
        assert record.evidence_id == "sig-1"
        assert record.category == EvidenceCategory.PRESENCE_DECLARED
        assert record.source.id == "roster:alpha"
        assert record.org_id == "RS"
        assert record.geometry.node_id == "stanton-hurston"
        assert record.occurred_at == datetime(2026, 1, 1, 11, 58, tzinfo=timezone.utc)

    def test_snake_case_record(self):
        """snake_case field names are accepted too."""
        raw = {
            "evidence_id": "sig-2",
            "type": "engagement",
            "source_id": "scan@yela",
            "base_weight": "0.5",
            "confidence": "0.5",
            "occurred_at": "2026-01-01T11:59:00+00:00",
            "org_id": "VX",
            "scope": "BODY",
        }
        record = SignalNormalizer().normalize_evidence([raw], NOW).records[0]

        assert record.evidence_id == "sig-2"
        assert record.category == EvidenceCategory.ENGAGEMENT_EVENT
        assert record.source.id == "scan@yela"
        assert abs(record.weight - 0.5) < 0.001
        assert record.scope == ZoneScope.BODY

    def test_out_of_range_values_clamped(self):
        """Weights and confidences are clamped into [0, 1]."""
        record = SignalNormalizer().normalize_evidence(
            [make_raw(weight=4.2, confidence=-1)], NOW
        ).records[0]

        assert record.weight == 1.0
        assert record.confidence == 0.0

    def test_malformed_numbers_become_zero(self):
        """Non-numeric weight is treated as zero."""
        record = SignalNormalizer().normalize_evidence([make_raw(weight="heavy")], NOW).records[0]
        assert record.weight == 0.0

    def test_missing_occurrence_uses_now(self):
        """A record with no occurrence time is treated as observed now."""
        raw = make_raw()
        del raw["occurredAt"]
        record = SignalNormalizer().normalize_evidence([raw], NOW).records[0]
        assert record.occurred_at == NOW

    def test_garbage_never_raises(self):
        """Non-mapping entries are rejected, not raised."""
        result = SignalNormalizer().normalize_evidence([None, 42, "text", make_raw(), []], NOW)

        assert result.accepted_count == 1
        assert result.rejected_count == 4
        assert [r.index for r in result.rejected] == [0, 1, 2, 4]

    @pytest.mark.parametrize("raw", [None, "evidence", 17, {"id": "x"}])
    def test_non_list_payload_is_empty(self, raw):
        """Anything that is not a list of records yields nothing."""
        result = SignalNormalizer().normalize_evidence(raw, NOW)
        assert result.records == ()

    def test_missing_id_is_deterministic(self):
        """Records without ids get the same content-derived id every time."""
        raw = make_raw()
        del raw["id"]
        first = SignalNormalizer().normalize_evidence([raw], NOW).records[0]
        second = SignalNormalizer().normalize_evidence([dict(raw)], NOW).records[0]

        assert first.evidence_id.startswith("ev-")
        assert first.evidence_id == second.evidence_id

    @pytest.mark.parametrize("field", ["weight", "confidence", "occurredAt", "expiresAt", "ttlSeconds"])
    def test_oversized_integers_never_raise(self, field):
        """Integers too large for a float read as missing values."""
        result = SignalNormalizer().normalize_evidence([make_raw(**{field: 10**400})], NOW)

        assert result.accepted_count == 1
        record = result.records[0]
        assert 0.0 <= record.weight <= 1.0
        assert record.occurred_at.tzinfo is not None

    def test_oversized_integers_read_as_neutral(self):
        """An oversized weight is zero and an oversized time is now."""
        raw = make_raw(weight=10**400, occurredAt=10**400)
        record = SignalNormalizer().normalize_evidence([raw], NOW).records[0]

        assert record.weight == 0.0
        assert record.occurred_at == NOW

    def test_huge_ttl_saturates(self):
        """A validity window past the calendar limit ends at the latest time."""
        raw = make_raw(ttlSeconds=1e300)
        del raw["expiresAt"]
        record = SignalNormalizer().normalize_evidence([raw], NOW).records[0]

        assert record.expires_at == datetime.max.replace(tzinfo=timezone.utc)

    @pytest.mark.parametrize("raw", [
        {1: "x", "weight": 0.5},
        {("tuple", "key"): "x", "weight": 0.5},
        {"weight": 0.5, "geometryHint": {1: "a", "nodeId": "stanton-hurston"}},
    ])
    def test_mixed_key_records_get_ids(self, raw):
        """Records without ids and with non-string keys still get stable ids."""
        first = SignalNormalizer().normalize_evidence([raw], NOW)
        second = SignalNormalizer().normalize_evidence([dict(raw)], NOW)

        assert first.accepted_count == 1
        assert first.records[0].evidence_id.startswith("ev-")
        assert first.records[0].evidence_id == second.records[0].evidence_id

    @pytest.mark.parametrize("now", [None, "2026-01-01T12:00:00Z", 1767268800])
    def test_now_must_be_datetime(self, now):
        """A non-datetime now is a caller error, not bad upstream data."""
        with pytest.raises(TypeError):
            SignalNormalizer().normalize_evidence([make_raw()], now)

    def test_naive_now_is_utc(self):
        """A naive now is taken as UTC."""
        raw = make_raw()
        del raw["occurredAt"]
        record = SignalNormalizer().normalize_evidence([raw], datetime(2026, 1, 1, 12, 0)).records[0]
        assert record.occurred_at == NOW


class TestExpiry:
    """Tests for validity window resolution."""

    def test_category_ttl_fallback(self):
        """No expiry uses the category's default window."""
        raw = make_raw(category="LOGISTICS_FLOW")
        del raw["expiresAt"]
        record = SignalNormalizer().normalize_evidence([raw], NOW).records[0]
        assert record.validity_seconds == 600

    def test_explicit_ttl_seconds(self):
        """A ttlSeconds field overrides the category default."""
        raw = make_raw(ttlSeconds=90)
        del raw["expiresAt"]
        record = SignalNormalizer().normalize_evidence([raw], NOW).records[0]
        assert record.validity_seconds == 90

    def test_malformed_expiry_falls_back(self):
        """An unreadable expiry is replaced by the default window."""
        record = SignalNormalizer().normalize_evidence(
            [make_raw(expiresAt="soon", category="INTEL_NOTE")], NOW
        ).records[0]
        assert record.validity_seconds == 480

    def test_configured_ttl(self):
        """TTL overrides come from configuration."""
        config = EngineConfig.from_dict({"default_ttl_seconds": {"PRESENCE_DECLARED": 30}})
        raw = make_raw()
        del raw["expiresAt"]
        record = SignalNormalizer(config).normalize_evidence([raw], NOW).records[0]
        assert record.validity_seconds == 30


class TestAliases:
    """Tests for label aliasing."""

    @pytest.mark.parametrize("label,expected", [
        ("presence", EvidenceCategory.PRESENCE_DECLARED),
        ("CQB_EVENT", EvidenceCategory.ENGAGEMENT_EVENT),
        ("command-endorsement", EvidenceCategory.COMMAND_ENDORSEMENT),
        ("mystery", EvidenceCategory.OTHER),
        (None, EvidenceCategory.OTHER),
    ])
    def test_category(self, label, expected):
        """Category labels map onto the enum, unknowns to OTHER."""
        assert parse_category(label) == expected

    @pytest.mark.parametrize("label,expected", [
        ("clear", NetQuality.CLEAR),
        ("jammed", NetQuality.CONTESTED),
        ("flaky", NetQuality.DEGRADED),
        (None, NetQuality.CLEAR),
    ])
    def test_quality(self, label, expected):
        """Unknown non-empty quality labels read as degraded."""
        assert parse_quality(label) == expected

    def test_priority(self):
        """Unknown priorities are standard."""
        assert parse_priority("flash") == CalloutPriority.CRITICAL
        assert parse_priority("whenever") == CalloutPriority.STANDARD


class TestNormalizeOverlay:
    """Tests for comms overlay normalization."""

    def test_overlay_fields(self):
        """Nets, links and callouts are read with their aliases."""
        raw = {
            "nets": [{"id": "n1", "quality": "degraded", "trafficScore": 12.5}, "junk"],
            "links": [{"id": "l1", "fromNetId": "n1", "toNetId": "n2"}],
            "callouts": [{"id": "c1", "priority": "critical", "lane": "command"}],
        }
        overlay = SignalNormalizer().normalize_overlay(raw, NOW)

        assert len(overlay.nets) == 1
        assert overlay.nets[0].quality == NetQuality.DEGRADED
        assert abs(overlay.nets[0].traffic_score - 12.5) < 0.001
        assert overlay.links[0].to_net_id == "n2"
        assert overlay.callouts[0].priority == CalloutPriority.CRITICAL

    def test_past_expiry_callout_stale(self):
        """A callout past its expiry is flagged stale."""
        raw = {"callouts": [{"id": "c1", "priority": "HIGH", "expiresAt": "2026-01-01T11:00:00Z"}]}
        overlay = SignalNormalizer().normalize_overlay(raw, NOW)
        assert overlay.callouts[0].stale

    def test_non_mapping_overlay_empty(self):
        """A missing overlay is an empty one."""
        assert SignalNormalizer().normalize_overlay(None).signal_count == 0


class TestNormalizeIntel:
    """Tests for intel staleness."""

    def test_explicit_stale_flag(self):
        """The stale flag is read from the record or its ttl block."""
        items = SignalNormalizer().normalize_intel([
            {"id": "a", "stale": True},
            {"id": "b", "ttl": {"stale": "true"}},
            {"id": "c", "stale": False},
        ])
        assert [i.stale for i in items] == [True, True, False]

    def test_retired_is_stale(self):
        """Retired intel is always stale."""
        items = SignalNormalizer().normalize_intel([{"id": "a", "retiredAt": "2026-01-01T00:00:00Z"}])
        assert items[0].stale

    def test_computed_from_ttl(self):
        """Without a flag, staleness is computed against now."""
        items = SignalNormalizer().normalize_intel(
            [
                {"id": "old", "updatedAt": "2026-01-01T10:00:00Z", "ttlSeconds": 600},
                {"id": "new", "updatedAt": "2026-01-01T11:55:00Z", "ttlSeconds": 600},
            ],
            NOW,
        )
        assert [i.stale for i in items] == [True, False]

    def test_operations(self):
        """Operations keep their id and name."""
        operations = SignalNormalizer.normalize_operations([{"id": "op-1", "name": "Night Watch"}, None])
        assert len(operations) == 1
        assert operations[0].name == "Night Watch"


class TestHelpers:
    """Tests for low-level coercion helpers."""

    def test_first_present_skips_empty(self):
        """Empty strings and None fall through to the next alias."""
        assert first_present({"a": "", "b": None, "c": 3}, "a", "b", "c") == 3

    @pytest.mark.parametrize("value", [None, True, "abc", float("nan"), float("inf")])
    def test_coerce_float_default(self, value):
        """Unusable values give the default."""
        assert coerce_float(value, default=-1.0) == -1.0

    def test_coerce_unit_clamps(self):
        """Values are clamped into [0, 1]."""
        assert coerce_unit(7) == 1.0
        assert coerce_unit("-0.5") == 0.0

    @pytest.mark.parametrize("value", [
        "2026-01-01T12:00:00Z",
        "2026-01-01T12:00:00+00:00",
        "2026-01-01T13:00:00+01:00",
        1767268800,
        1767268800000,
        datetime(2026, 1, 1, 12, 0),
    ])
    def test_parse_timestamp_forms(self, value):
        """ISO strings, epoch seconds/ms and naive datetimes all parse to UTC."""
        assert parse_timestamp(value) == NOW

    @pytest.mark.parametrize("value", [None, "", "yesterday", True, {"t": 1}])
    def test_parse_timestamp_invalid(self, value):
        """Unreadable timestamps are None."""
        assert parse_timestamp(value) is None

    def test_content_id_key_order(self):
        """Content ids do not depend on key order."""
        assert content_id("ev", {"a": 1, "b": 2}) == content_id("ev", {"b": 2, "a": 1})

    def test_coerce_float_oversized_int(self):
        """Integers beyond float range give the default."""
        assert coerce_float(10**400, default=-1.0) == -1.0
        assert coerce_float(str(10**400)) == 0.0

    @pytest.mark.parametrize("value", [10**400, -(10**400), 1e300])
    def test_parse_timestamp_out_of_range(self, value):
        """Epoch values outside the calendar are None."""
        assert parse_timestamp(value) is None

    def test_content_id_mixed_keys(self):
        """Non-string keys are hashed by their text."""
        assert content_id("ev", {1: "x", "w": 2}) == content_id("ev", {"w": 2, 1: "x"})

    def test_now_is_aware(self):
        """Timestamps are returned timezone-aware."""
        assert parse_timestamp("2026-01-01T12:00:00").tzinfo is not None
        assert parse_timestamp("2026-01-01T12:00:00") == NOW
