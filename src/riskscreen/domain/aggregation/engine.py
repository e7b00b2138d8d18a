"""Combine per-domain match evidence into one explainable risk verdict."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from riskscreen.domain.aggregation.recommendation import recommend
from riskscreen.domain.aggregation.rules import RiskRules
from riskscreen.domain.matching.engine import ordering_key
from riskscreen.domain.model import Domain, DomainScore, RiskLevel, RiskVerdict

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from riskscreen.domain.model import MatchResult

log = getLogger(__name__)

type DomainEvidence = Mapping[Domain, Sequence[MatchResult]]


def weighted_composite(scores: Mapping[Domain, float], weights: Mapping[Domain, float]) -> float:
    """``100 * sum(w_i * s_i)`` with weights renormalised over the domains present in ``scores``."""

    total = sum(weights.get(domain, 0.0) for domain in scores)
    if total <= 0.0:
        return 0.0
    composite = sum(weights.get(domain, 0.0) / total * score for domain, score in scores.items())
    return max(0.0, min(100.0, 100.0 * composite))


@dataclass(slots=True)
class RiskAggregator:
    rules: RiskRules = field(default_factory=RiskRules)

    def aggregate(self, evidence: DomainEvidence) -> RiskVerdict:
        """Build the verdict for one assessment.

        ``evidence`` holds an entry for every domain that produced data, even when
        no match survived (an empty sequence scores 0). Domains without an entry
        are reported as lacking data and are left out of weight normalisation.
        """

        present = [domain for domain in Domain if domain in evidence]
        missing = tuple(domain for domain in Domain if domain not in evidence)

        scores = {
            domain: max((result.composite for result in evidence[domain]), default=0.0)
            for domain in present
        }
        total_weight = sum(self.rules.weight_for(domain) for domain in present)
        domain_scores = tuple(
            DomainScore(
                domain=domain,
                score=scores[domain],
                weight=self.rules.weight_for(domain),
                effective_weight=(
                    self.rules.weight_for(domain) / total_weight if total_weight > 0 else 0.0
                ),
                top_matches=tuple(sorted(evidence[domain], key=ordering_key))[
                    : self.rules.top_matches
                ],
            )
            for domain in present
        )

        insufficient = total_weight <= 0.0
        composite = weighted_composite(scores, self.rules.weights)
        score_level = self.rules.bands.level_for(composite)

        fired = [trigger for trigger in self.rules.triggers if trigger.fires(scores)]
        level = score_level.escalate() if any(t.escalate for t in fired) else score_level

        applied = [
            override
            for override in self.rules.overrides
            if override.domain in evidence and override.applies(evidence[override.domain])
        ]
        if applied:
            # overrides only ever raise the level
            level = RiskLevel.highest(level, *(override.level for override in applied))

        triggers = tuple(trigger.name for trigger in fired)
        overrides = tuple(override.name for override in applied)
        if insufficient:
            log.warning("No domain produced weighted evidence; verdict marked insufficient")

        return RiskVerdict(
            composite_score=composite,
            level=level,
            score_level=score_level,
            triggers=triggers,
            overrides=overrides,
            recommendation=recommend(
                level,
                triggers,
                overrides,
                insufficient_data=insufficient and not overrides,
                missing=missing,
            ),
            domain_scores=domain_scores,
            domains_without_data=missing,
            insufficient_data=insufficient,
        )


def aggregate(evidence: DomainEvidence, rules: RiskRules | None = None) -> RiskVerdict:
    return RiskAggregator(rules or RiskRules()).aggregate(evidence)
