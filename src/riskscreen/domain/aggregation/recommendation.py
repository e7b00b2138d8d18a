"""Deterministic analyst guidance derived from a verdict's level, triggers and overrides."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from riskscreen.domain.model import RiskLevel

if TYPE_CHECKING:
    from collections.abc import Sequence

    from riskscreen.domain.model import Domain

_ACTIONS: Final[dict[RiskLevel, str]] = {
    RiskLevel.LOW: "No material risk indicators; proceed with standard due diligence.",
    RiskLevel.MEDIUM: (
        "Elevated risk indicators; complete enhanced due diligence before proceeding."
    ),
    RiskLevel.HIGH: (
        "Significant risk indicators; escalate to compliance review before proceeding."
    ),
    RiskLevel.CRITICAL: (
        "Critical risk; block the relationship and escalate to compliance immediately."
    ),
}

INSUFFICIENT_DATA: Final = (
    "Insufficient data: no source returned evidence for this entity; "
    "re-run the assessment or screen manually."
)


def recommend(
    level: RiskLevel,
    triggers: Sequence[str],
    overrides: Sequence[str],
    *,
    insufficient_data: bool = False,
    missing: Sequence[Domain] = (),
) -> str:
    if insufficient_data:
        return INSUFFICIENT_DATA

    parts = [_ACTIONS[level]]
    if overrides:
        parts.append(f"Overrides applied: {', '.join(overrides)}.")
    if triggers:
        parts.append(f"Triggers fired: {', '.join(triggers)}.")
    if missing:
        parts.append(f"No data from: {', '.join(str(domain) for domain in missing)}.")
    return " ".join(parts)
