"""
Command signal summary shared by the estimator and the synthesizer.
"""

from __future__ import annotations

import math

from dataclasses import dataclass

from ..types import EngineConfig, LoadBand


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def projected_load_band(score: float, config: EngineConfig | None = None) -> LoadBand:
    """
    Classify aggregate comms traffic.

    HIGH at or above load_high_threshold, MED at or above
    load_med_threshold, else LOW.
    """
    config = config or EngineConfig()
    if score >= config.load_high_threshold:
        return LoadBand.HIGH
    if score >= config.load_med_threshold:
        return LoadBand.MED
    return LoadBand.LOW


@dataclass(frozen=True, slots=True)
class CommandSignalSummary:
    """
    Counts extracted from zones, comms and intel for one estimate.

    Attributes:
        contested_zone_count: Zones at or above the contested threshold
        degraded_net_count: Nets not in the nominal quality category
        critical_callout_count: Non-expired CRITICAL callouts
        high_callout_count: Non-expired HIGH callouts
        stale_intel_count: Intel items flagged stale
        projected_load_score: Sum of net traffic scores
        load_band: Band of projected_load_score
        zone_signals: Evidence records retained across all zones
        comms_signals: Nets + links + callouts
        intel_signals: Intel items
    """

    contested_zone_count: int = 0
    degraded_net_count: int = 0
    critical_callout_count: int = 0
    high_callout_count: int = 0
    stale_intel_count: int = 0
    projected_load_score: float = 0.0
    load_band: LoadBand = LoadBand.LOW
    zone_signals: int = 0
    comms_signals: int = 0
    intel_signals: int = 0

    @property
    def evidence_total(self) -> int:
        """All evidence backing the estimate."""
        return self.zone_signals + self.comms_signals + self.intel_signals

    @property
    def has_critical_callouts(self) -> bool:
        return self.critical_callout_count > 0

    @property
    def has_degraded_nets(self) -> bool:
        return self.degraded_net_count > 0

    @property
    def has_contested_zones(self) -> bool:
        return self.contested_zone_count > 0

    @property
    def has_stale_intel(self) -> bool:
        return self.stale_intel_count > 0

    @property
    def is_high_load(self) -> bool:
        return self.load_band == LoadBand.HIGH
