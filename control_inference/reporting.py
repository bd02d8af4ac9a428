"""
Read-only renderings of engine output.

Explanations for logs and terminals, and a prompt for an optional
natural-language summarizer. Everything here restates fields of the
snapshot or zone it is given; nothing adds new claims.
"""

from .types import ControlZone, InferenceSnapshot

SUMMARY_PROMPT_PREAMBLE = (
    "Provide a concise tactical command estimate using only provided records.",
    "Do not invent telemetry or external facts.",
)


def explain_snapshot(snapshot: InferenceSnapshot) -> str:
    """
    Generate a human-readable explanation of a snapshot.

    Useful for logging, alerting, and debugging.

    Args:
        snapshot: The inference snapshot to explain

    Returns:
        Multi-line string explanation
    """
    generated = snapshot.generated_at.isoformat() if snapshot.generated_at else "n/a"
    lines = [
        "=" * 40,
        "COMMAND INFERENCE SNAPSHOT",
        "=" * 40,
        f"Generated:     {generated}",
        f"Focus:         {snapshot.focus_label or '-'}",
        f"Command Risk:  {snapshot.command_risk_score}/100",
        f"Confidence:    {snapshot.confidence_score}/100",
        f"Load Band:     {snapshot.projected_load_band.value}",
        "",
        "COUNTS:",
        f"  contested zones:   {snapshot.contested_zone_count}",
        f"  degraded nets:     {snapshot.degraded_net_count}",
        f"  critical callouts: {snapshot.critical_callout_count}",
        f"  high callouts:     {snapshot.high_callout_count}",
        f"  stale intel:       {snapshot.stale_intel_count}",
        "",
        "RECOMMENDATIONS:",
    ]

    for recommendation in snapshot.recommendations:
        lines.append(f"  • {recommendation}")

    if snapshot.factors:
        lines.append("")
        lines.append("FACTORS:")
        for factor in snapshot.factors:
            lines.append(f"  {factor.factor_id}: {factor.score} (weight {factor.weight:.2f})")

    lines.append("")
    lines.append("EVIDENCE:")
    for key, value in snapshot.evidence.to_dict().items():
        lines.append(f"  {key}: {value}")

    lines.append("=" * 40)

    return "\n".join(lines)


def explain_zone(zone: ControlZone) -> str:
    """One block per zone: controllers, contestation and evidence count."""
    lines = [f"Zone {zone.zone_id} ({zone.scope.value})"]
    if zone.asserted_controllers:
        for controller in zone.asserted_controllers:
            lines.append(f"  {controller.org_id}: {controller.confidence:.0%}")
    else:
        lines.append("  no live claim")
    lines.append(f"  contestation: {zone.contestation_level:.2f}")
    lines.append(f"  evidence: {zone.evidence_count} records")
    return "\n".join(lines)


def build_summary_prompt(snapshot: InferenceSnapshot) -> str:
    """
    Build a prompt that restates the snapshot for a summarizer.

    Only snapshot fields appear in the prompt, and the summarizer is told
    not to add facts.
    """
    evidence = snapshot.evidence
    lines = list(SUMMARY_PROMPT_PREAMBLE)
    lines.extend([
        f"Risk score: {snapshot.command_risk_score}/100",
        f"Confidence score: {snapshot.confidence_score}/100",
        f"Contested zones: {snapshot.contested_zone_count}",
        f"Degraded nets: {snapshot.degraded_net_count}",
        f"Critical callouts: {snapshot.critical_callout_count}",
        f"Stale intel records: {snapshot.stale_intel_count}",
        f"Load band: {snapshot.projected_load_band.value}",
        f"Evidence counts - zone: {evidence.zone_signals}, "
        f"comms: {evidence.comms_signals}, intel: {evidence.intel_signals}",
        "Prioritized actions: "
        + " | ".join(f"{a.priority.value}:{a.title}" for a in snapshot.prioritized_actions),
        "Recommended actions: " + " | ".join(snapshot.recommendations),
    ])
    return "\n".join(lines)
