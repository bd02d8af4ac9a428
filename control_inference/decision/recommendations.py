"""
Recommendation Synthesizer - fixed-template action hints.

Rules are evaluated in a fixed priority order and each contributes at
most one line. Nothing is looked up or generated: the output is a pure
function of the signal summary and the callout list.

Rule order:
    | # | Trigger                      | Hint                  |
    |---|------------------------------|-----------------------|
    | 1 | critical callouts > 0        | escalate posture      |
    | 2 | degraded nets > 0            | harden relays         |
    | 3 | contested zones > 0          | refresh recon         |
    | 4 | stale intel > 0              | downgrade to advisory |
    | 5 | load band HIGH               | stage reserve staff   |
    | 6 | any non-expired callout      | name top callout lane |
    | 7 | nothing above                | maintain cadence      |

Author: Control Inference Team
"""

from __future__ import annotations

import logging

from collections.abc import Sequence
from datetime import datetime
from typing import Final

from ..types import (
    ActionPriority,
    CommsCallout,
    EngineConfig,
    LoadBand,
    PrioritizedAction,
)
from .signals import CommandSignalSummary

logger = logging.getLogger(__name__)


# =============================================================================
# TEMPLATES
# =============================================================================

ESCALATE_POSTURE: Final[str] = (
    "Escalate command posture and enforce single authoritative speaking lane."
)
HARDEN_RELAYS: Final[str] = (
    "Shift cross-net relay to hardened bridge pairs and throttle non-essential traffic."
)
REFRESH_RECON: Final[str] = (
    "Queue immediate reconnaissance refresh for contested control zones before route commits."
)
DOWNGRADE_STALE_INTEL: Final[str] = (
    "Mark stale intel as advisory-only and require renewed confirmation before tasking."
)
STAGE_RESERVE_STAFF: Final[str] = (
    "Pre-stage reserve command staff for overflow coordination and casualty response."
)
MAINTAIN_CADENCE: Final[str] = (
    "Maintain current command cadence and continue periodic intel/comms validation sweeps."
)
CALLOUT_HINT_TEMPLATE: Final[str] = (
    "Prioritize {priority} comms lane {lane} and rebalance monitoring coverage."
)
UNKNOWN_LANE: Final[str] = "UNKNOWN"


# =============================================================================
# SYNTHESIZER
# =============================================================================

class RecommendationSynthesizer:
    """
    Turns a signal summary into ordered, deduplicated action hints.

    Usage:
        >>> synthesizer = RecommendationSynthesizer()
        >>> hints = synthesizer.synthesize(signals, overlay.callouts, now)
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()

    def synthesize(
        self,
        signals: CommandSignalSummary,
        callouts: Sequence[CommsCallout] = (),
        now: datetime | None = None,
    ) -> tuple[str, ...]:
        """
        Build the recommendation list.

        Args:
            signals: Counts from the estimator
            callouts: Callouts from the comms overlay, in original order
            now: Optional current time for explicit callout expiry

        Returns:
            Ordered tuple of hints, never empty
        """
        recommendations: list[str] = []

        if signals.has_critical_callouts:
            recommendations.append(ESCALATE_POSTURE)
        if signals.has_degraded_nets:
            recommendations.append(HARDEN_RELAYS)
        if signals.has_contested_zones:
            recommendations.append(REFRESH_RECON)
        if signals.has_stale_intel:
            recommendations.append(DOWNGRADE_STALE_INTEL)
        if signals.is_high_load:
            recommendations.append(STAGE_RESERVE_STAFF)

        hint = self.callout_hint(callouts, now)
        if hint is not None:
            recommendations.append(hint)

        if not recommendations:
            recommendations.append(MAINTAIN_CADENCE)

        return tuple(dict.fromkeys(recommendations))

    @staticmethod
    def select_priority_callout(
        callouts: Sequence[CommsCallout],
        now: datetime | None = None,
    ) -> CommsCallout | None:
        """
        Highest-priority non-expired callout.

        Ties keep the earliest callout in list order.
        """
        best: CommsCallout | None = None
        for callout in callouts:
            if callout.is_expired(now):
                continue
            if best is None or callout.priority.rank > best.priority.rank:
                best = callout
        return best

    def callout_hint(
        self,
        callouts: Sequence[CommsCallout],
        now: datetime | None = None,
    ) -> str | None:
        """Hint naming the top callout's lane, or None if there is none."""
        top = self.select_priority_callout(callouts, now)
        if top is None:
            return None
        lane = top.lane or top.net_id or UNKNOWN_LANE
        return CALLOUT_HINT_TEMPLATE.format(priority=top.priority.value, lane=lane)

    def prioritized_actions(
        self,
        signals: CommandSignalSummary,
        recommendations: Sequence[str] = (),
    ) -> tuple[PrioritizedAction, ...]:
        """
        Structured NOW / NEXT / WATCH actions for the same signals.

        Falls back to a single "maintain cadence" action whose rationale
        is the first recommendation.
        """
        actions: list[PrioritizedAction] = []

        if signals.has_critical_callouts:
            actions.append(PrioritizedAction(
                action_id="stabilize-speaking-lane",
                priority=ActionPriority.NOW,
                title="Stabilize speaking authority",
                rationale="Critical callouts are active and require command-lane discipline.",
                expected_impact="Reduces overlap and speeds command acknowledgement.",
            ))
        if signals.has_degraded_nets:
            actions.append(PrioritizedAction(
                action_id="rebalance-bridges",
                priority=ActionPriority.NOW,
                title="Rebalance degraded nets",
                rationale="At least one net is degraded/contested and needs rerouting.",
                expected_impact="Improves relay clarity and lowers missed transmissions.",
            ))
        if signals.has_contested_zones:
            actions.append(PrioritizedAction(
                action_id="refresh-zone-recon",
                priority=ActionPriority.NEXT,
                title="Refresh contested zone recon",
                rationale="Control claims are contested and need updated evidence.",
                expected_impact="Increases confidence before movement commitments.",
            ))
        if signals.has_stale_intel:
            actions.append(PrioritizedAction(
                action_id="revalidate-stale-intel",
                priority=ActionPriority.NEXT,
                title="Revalidate stale intel",
                rationale="Stale intel should not drive primary tasking decisions.",
                expected_impact="Reduces probability of acting on expired assumptions.",
            ))
        if signals.load_band != LoadBand.LOW:
            actions.append(PrioritizedAction(
                action_id="prestage-command-overflow",
                priority=ActionPriority.WATCH,
                title="Pre-stage overflow coordination",
                rationale="Projected comms load may exceed current command capacity.",
                expected_impact="Protects command tempo during spike windows.",
            ))

        if not actions:
            actions.append(PrioritizedAction(
                action_id="maintain-cadence",
                priority=ActionPriority.WATCH,
                title="Maintain current cadence",
                rationale=recommendations[0] if recommendations else "No immediate escalations detected.",
                expected_impact="Keeps operations steady while continuing periodic validation.",
            ))

        return tuple(actions[: self._config.max_prioritized_actions])
