"""
Decision layer for Control Inference.

Scores command risk and confidence, and synthesizes recommendations.
"""

from .engine import CommandRiskEstimator, estimate_command_risk
from .recommendations import RecommendationSynthesizer
from .signals import CommandSignalSummary

__all__ = [
    "CommandRiskEstimator",
    "CommandSignalSummary",
    "RecommendationSynthesizer",
    "estimate_command_risk",
]
