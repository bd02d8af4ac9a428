"""
Time-decay of evidence influence for Control Inference.

This module provides stateless, pure functions that turn an evidence
record and a caller-supplied "now" into a scalar influence weight.
Each function is:
- Stateless: No side effects, deterministic output
- Clock-free: "now" is always an argument, never read from the system
- Total: Malformed validity windows decay to zero instead of raising

Mathematical Definition:
    remaining = clamp((expires_at - now) / (expires_at - occurred_at), 0, 1)
    influence = weight * confidence * remaining

    influence = 0 when now >= expires_at or expires_at <= occurred_at

Author: Control Inference Team
"""

from __future__ import annotations

import logging

from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any, Final

import numpy as np

from ..types import EvidenceRecord

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

FULLY_DECAYED: Final[float] = 0.0


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC so mixed inputs still compare."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def seconds_between(start: datetime, end: datetime) -> float:
    """Signed number of seconds from start to end."""
    return (as_utc(end) - as_utc(start)).total_seconds()


# =============================================================================
# DECAY FUNCTION
# =============================================================================

class DecayFunction:
    """
    Linear fading-claim decay.

    A record contributes weight * confidence at its occurrence time and
    fades linearly to zero at its expiry. It can never contribute more
    than its declared weight * confidence, even when fresh.

    Usage:
        >>> from control_inference.analysis import DecayFunction
        >>> weight = DecayFunction.influence(record, now)
        >>> weights = DecayFunction.influences(records, now)
    """

    @staticmethod
    def is_expired(record: EvidenceRecord, now: datetime) -> bool:
        """
        True when the record contributes nothing at `now`.

        A malformed window (expires_at <= occurred_at) counts as expired.
        """
        if seconds_between(record.occurred_at, record.expires_at) <= 0:
            return True
        return seconds_between(record.expires_at, now) >= 0

    @staticmethod
    def remaining_fraction(record: EvidenceRecord, now: datetime) -> float:
        """
        Fraction of the validity window still ahead of `now`, in [0, 1].

        Records observed "in the future" relative to `now` are clamped to
        1.0, so they count as fresh rather than amplified.
        """
        if DecayFunction.is_expired(record, now):
            return FULLY_DECAYED

        lifetime = seconds_between(record.occurred_at, record.expires_at)
        remaining = seconds_between(now, record.expires_at)
        return float(np.clip(remaining / lifetime, 0.0, 1.0))

    @staticmethod
    def influence(record: EvidenceRecord, now: datetime) -> float:
        """
        Current influence weight of a record, in [0, 1].

        Args:
            record: Evidence record
            now: Caller-supplied current time

        Returns:
            weight * confidence * remaining_fraction, or 0.0 once expired

        Example:
            >>> DecayFunction.influence(record, record.occurred_at)
            0.48  # weight 0.6, confidence 0.8
        """
        fraction = DecayFunction.remaining_fraction(record, now)
        if fraction <= FULLY_DECAYED:
            return FULLY_DECAYED
        return float(np.clip(record.weight * record.confidence * fraction, 0.0, 1.0))

    @staticmethod
    def influences(
        records: Sequence[EvidenceRecord],
        now: datetime,
    ) -> np.ndarray[Any, np.dtype[np.float64]]:
        """
        Vectorized influence for a batch of records.

        Returns:
            Array of influences aligned with `records` (empty for no records)
        """
        if not records:
            return np.zeros(0, dtype=np.float64)

        lifetimes = np.array(
            [seconds_between(r.occurred_at, r.expires_at) for r in records],
            dtype=np.float64,
        )
        remaining = np.array(
            [seconds_between(now, r.expires_at) for r in records],
            dtype=np.float64,
        )
        base = np.array([r.weight * r.confidence for r in records], dtype=np.float64)

        live = (lifetimes > 0) & (remaining > 0)
        # Divide only where the window is well formed
        fractions = np.zeros_like(lifetimes)
        np.divide(remaining, lifetimes, out=fractions, where=live)

        result = np.where(live, base * np.clip(fractions, 0.0, 1.0), FULLY_DECAYED)

        expired = int(np.count_nonzero(~live))
        if expired:
            logger.debug(f"{expired} of {len(records)} records fully decayed")

        return np.clip(result, 0.0, 1.0)
