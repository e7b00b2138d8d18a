from __future__ import annotations

import pytest

from riskscreen.domain.aggregation import (
    INSUFFICIENT_DATA,
    OverrideRule,
    RiskAggregator,
    RiskRules,
    TriggerRule,
    aggregate,
    weighted_composite,
)
from riskscreen.domain.model import Domain, MatchType, RiskLevel
from tests.support.screening import make_result


def test_domain_score_is_the_strongest_match() -> None:
    verdict = aggregate(
        {
            Domain.PEP: [
                make_result(Domain.PEP, 0.3, record_id="a"),
                make_result(Domain.PEP, 0.9, record_id="b"),
                make_result(Domain.PEP, 0.3, record_id="c"),
            ]
        }
    )

    pep = verdict.domain_score(Domain.PEP)
    assert pep is not None
    assert pep.score == 0.9
    assert pep.effective_weight == 1.0
    assert pep.top_matches[0].candidate.record_id == "b"
    assert verdict.composite_score == pytest.approx(90.0)


def test_missing_domains_are_renormalised_away() -> None:
    weights = RiskRules().weights
    scores = {Domain.SANCTIONS: 0.4, Domain.PEP: 0.8, Domain.CRIMINAL: 0.1}

    with_missing = weighted_composite(scores, weights)
    subset_weights = {domain: weights[domain] for domain in scores}
    total = sum(subset_weights.values())
    from_scratch = 100 * sum(subset_weights[d] / total * s for d, s in scores.items())

    assert with_missing == pytest.approx(from_scratch)


def test_domain_with_data_but_no_match_counts_as_zero() -> None:
    verdict = aggregate(
        {
            Domain.SANCTIONS: [make_result(Domain.SANCTIONS, 0.6)],
            Domain.PEP: [],
        }
    )

    expected = 100 * 0.35 / 0.55 * 0.6
    assert verdict.composite_score == pytest.approx(expected)
    assert Domain.PEP not in verdict.domains_without_data
    assert set(verdict.domains_without_data) == {
        Domain.CRIMINAL,
        Domain.OWNERSHIP,
        Domain.THREAT_ACTOR,
    }


def test_override_wins_over_a_low_composite() -> None:
    verdict = aggregate(
        {
            Domain.SANCTIONS: [make_result(Domain.SANCTIONS, 0.3, match_type=MatchType.EXACT)],
            Domain.PEP: [],
        }
    )

    assert verdict.score_level is RiskLevel.LOW
    assert verdict.level is RiskLevel.CRITICAL
    assert verdict.overrides == ("sanctions-exact-match",)
    assert verdict.composite_score == pytest.approx(100 * 0.35 / 0.55 * 0.3)
    assert "sanctions-exact-match" in verdict.recommendation


def test_override_never_lowers_the_level() -> None:
    rules = RiskRules(
        overrides=(OverrideRule("soft", Domain.PEP, level=RiskLevel.MEDIUM),),
    )

    verdict = RiskAggregator(rules).aggregate({Domain.PEP: [make_result(Domain.PEP, 0.95)]})

    assert verdict.overrides == ("soft",)
    assert verdict.level is RiskLevel.CRITICAL


def test_trigger_escalates_one_step() -> None:
    evidence = {
        Domain.SANCTIONS: [make_result(Domain.SANCTIONS, 0.72)],
        Domain.OWNERSHIP: [make_result(Domain.OWNERSHIP, 0.65)],
        Domain.PEP: [],
        Domain.CRIMINAL: [],
    }

    verdict = aggregate(evidence)

    assert verdict.triggers == ("sanctioned-ownership",)
    assert verdict.score_level is RiskLevel.MEDIUM
    assert verdict.level is RiskLevel.HIGH


def test_non_escalating_trigger_is_only_recorded() -> None:
    rules = RiskRules(
        triggers=(TriggerRule("note", {Domain.PEP: 0.5}, escalate=False),),
        overrides=(),
    )

    verdict = RiskAggregator(rules).aggregate({Domain.PEP: [make_result(Domain.PEP, 0.6)]})

    assert verdict.triggers == ("note",)
    assert verdict.level is verdict.score_level is RiskLevel.HIGH


def test_no_evidence_is_marked_insufficient() -> None:
    verdict = aggregate({})

    assert verdict.insufficient_data
    assert verdict.composite_score == 0.0
    assert verdict.level is RiskLevel.LOW
    assert verdict.recommendation == INSUFFICIENT_DATA
    assert verdict.domains_without_data == tuple(Domain)


def test_zero_weight_domains_are_insufficient() -> None:
    rules = RiskRules(weights={Domain.SANCTIONS: 0.0})

    verdict = RiskAggregator(rules).aggregate(
        {Domain.SANCTIONS: [make_result(Domain.SANCTIONS, 0.9)]}
    )

    assert verdict.insufficient_data
    assert verdict.composite_score == 0.0


def test_top_matches_are_capped() -> None:
    results = [make_result(Domain.PEP, 0.5 + i / 100, record_id=str(i)) for i in range(6)]

    verdict = RiskAggregator(RiskRules(top_matches=2)).aggregate({Domain.PEP: results})

    pep = verdict.domain_score(Domain.PEP)
    assert pep is not None
    assert [m.candidate.record_id for m in pep.top_matches] == ["5", "4"]
