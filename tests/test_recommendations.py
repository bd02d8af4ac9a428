"""
Tests for the Recommendation Synthesizer.
"""

import pytest
from datetime import datetime, timedelta, timezone

from control_inference.decision.recommendations import (
    DOWNGRADE_STALE_INTEL,
    ESCALATE_POSTURE,
    HARDEN_RELAYS,
    MAINTAIN_CADENCE,
    REFRESH_RECON,
    STAGE_RESERVE_STAFF,
    RecommendationSynthesizer,
)
from control_inference.decision.signals import CommandSignalSummary
from control_inference.types import (
    ActionPriority,
    CalloutPriority,
    CommsCallout,
    EngineConfig,
    LoadBand,
)


NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_signals(**overrides) -> CommandSignalSummary:
    """Helper to create a signal summary with selected counts."""
    return CommandSignalSummary(**overrides)


class TestSynthesize:
    """Tests for the ordered recommendation list."""

    def test_fallback_when_quiet(self):
        """No triggers yields only the steady-state hint."""
        synthesizer = RecommendationSynthesizer()
        assert synthesizer.synthesize(make_signals()) == (MAINTAIN_CADENCE,)

    def test_fixed_rule_order(self):
        """Every trigger fires in the documented order."""
        signals = make_signals(
            critical_callout_count=1,
            degraded_net_count=1,
            contested_zone_count=1,
            stale_intel_count=1,
            load_band=LoadBand.HIGH,
        )
        hints = RecommendationSynthesizer().synthesize(signals)

        assert hints == (
            ESCALATE_POSTURE,
            HARDEN_RELAYS,
            REFRESH_RECON,
            DOWNGRADE_STALE_INTEL,
            STAGE_RESERVE_STAFF,
        )

    def test_medium_load_no_reserve_staff(self):
        """Only HIGH load stages reserve staff."""
        hints = RecommendationSynthesizer().synthesize(make_signals(load_band=LoadBand.MED))
        assert STAGE_RESERVE_STAFF not in hints
        assert hints == (MAINTAIN_CADENCE,)

    def test_fallback_excluded_when_any_rule_fires(self):
        """The steady-state hint only appears alone."""
        hints = RecommendationSynthesizer().synthesize(make_signals(stale_intel_count=2))
        assert hints == (DOWNGRADE_STALE_INTEL,)

    def test_no_duplicates(self):
        """Output never repeats a hint."""
        callouts = [
            CommsCallout(callout_id="a", priority=CalloutPriority.HIGH, lane="north"),
            CommsCallout(callout_id="b", priority=CalloutPriority.HIGH, lane="north"),
        ]
        hints = RecommendationSynthesizer().synthesize(make_signals(high_callout_count=2), callouts)
        assert len(hints) == len(set(hints))


class TestCalloutHint:
    """Tests for the lane-specific hint."""

    def test_names_highest_priority_lane(self):
        """The most urgent callout's lane is named."""
        callouts = [
            CommsCallout(callout_id="a", priority=CalloutPriority.STANDARD, lane="routine"),
            CommsCallout(callout_id="b", priority=CalloutPriority.CRITICAL, lane="command"),
            CommsCallout(callout_id="c", priority=CalloutPriority.HIGH, lane="logistics"),
        ]
        hint = RecommendationSynthesizer().callout_hint(callouts)
        assert hint == "Prioritize CRITICAL comms lane command and rebalance monitoring coverage."

    def test_tie_keeps_list_order(self):
        """Equal priority keeps the first callout."""
        callouts = [
            CommsCallout(callout_id="a", priority=CalloutPriority.HIGH, lane="first"),
            CommsCallout(callout_id="b", priority=CalloutPriority.HIGH, lane="second"),
        ]
        top = RecommendationSynthesizer.select_priority_callout(callouts)
        assert top.callout_id == "a"

    def test_lane_falls_back_to_net(self):
        """Without a lane the net id is named, then UNKNOWN."""
        synthesizer = RecommendationSynthesizer()
        with_net = [CommsCallout(callout_id="a", priority=CalloutPriority.HIGH, net_id="net-3")]
        bare = [CommsCallout(callout_id="b", priority=CalloutPriority.HIGH)]

        assert "lane net-3 " in synthesizer.callout_hint(with_net)
        assert "lane UNKNOWN " in synthesizer.callout_hint(bare)

    def test_expired_callouts_skipped(self):
        """Stale and past-expiry callouts are not named."""
        callouts = [
            CommsCallout(callout_id="a", priority=CalloutPriority.CRITICAL, lane="old", stale=True),
            CommsCallout(
                callout_id="b",
                priority=CalloutPriority.CRITICAL,
                lane="gone",
                expires_at=NOW - timedelta(minutes=1),
            ),
            CommsCallout(callout_id="c", priority=CalloutPriority.STANDARD, lane="live"),
        ]
        top = RecommendationSynthesizer.select_priority_callout(callouts, NOW)
        assert top.callout_id == "c"

    def test_no_callouts_no_hint(self):
        """Nothing live yields no hint."""
        assert RecommendationSynthesizer().callout_hint([]) is None

    def test_hint_follows_rule_hints(self):
        """The callout hint comes after the count-driven hints."""
        callouts = [CommsCallout(callout_id="a", priority=CalloutPriority.CRITICAL, lane="command")]
        hints = RecommendationSynthesizer().synthesize(make_signals(critical_callout_count=1), callouts)

        assert hints[0] == ESCALATE_POSTURE
        assert hints[-1].startswith("Prioritize CRITICAL comms lane command")
        assert MAINTAIN_CADENCE not in hints


class TestPrioritizedActions:
    """Tests for the structured action list."""

    def test_quiet_maintain_cadence(self):
        """No triggers yields a single WATCH action."""
        synthesizer = RecommendationSynthesizer()
        actions = synthesizer.prioritized_actions(make_signals(), (MAINTAIN_CADENCE,))

        assert len(actions) == 1
        assert actions[0].action_id == "maintain-cadence"
        assert actions[0].priority == ActionPriority.WATCH
        assert actions[0].rationale == MAINTAIN_CADENCE

    def test_priorities(self):
        """Critical and degraded are NOW, contested and stale NEXT, load WATCH."""
        signals = make_signals(
            critical_callout_count=1,
            degraded_net_count=1,
            contested_zone_count=1,
            stale_intel_count=1,
            load_band=LoadBand.MED,
        )
        actions = RecommendationSynthesizer().prioritized_actions(signals)

        assert [a.priority for a in actions] == [
            ActionPriority.NOW,
            ActionPriority.NOW,
            ActionPriority.NEXT,
            ActionPriority.NEXT,
            ActionPriority.WATCH,
        ]

    @pytest.mark.parametrize("limit", [1, 3])
    def test_length_capped(self, limit):
        """The action list respects the configured cap."""
        signals = make_signals(critical_callout_count=1, degraded_net_count=1, contested_zone_count=1)
        config = EngineConfig(max_prioritized_actions=limit)
        actions = RecommendationSynthesizer(config).prioritized_actions(signals)
        assert len(actions) == limit
