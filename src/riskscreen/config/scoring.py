"""Scoring rules: domain weights, level bands, triggers, overrides and match weights.

Built-in defaults apply unless a TOML rules file is given, either explicitly or
through ``RISKSCREEN_RULES_FILE``. A rules file only needs the sections it changes::

    match_floor = 0.5

    [weights]
    sanctions = 0.4

    [bands]
    medium = 30
    high = 55
    critical = 80

    [[triggers]]
    name = "sanctioned-ownership"
    thresholds = { sanctions = 0.7, ownership = 0.6 }

    [[overrides]]
    name = "sanctions-exact-match"
    domain = "sanctions"
    match_types = ["exact"]

    [matching.attributes.dob]
    bonus = 0.06
    penalty = 0.06

Listing ``triggers`` or ``overrides`` replaces the built-in list; an empty list
disables them.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from logging import getLogger
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from riskscreen.domain.aggregation import LevelBands, OverrideRule, RiskRules, TriggerRule
from riskscreen.domain.matching import AttributeWeight, MatchWeights
from riskscreen.domain.model import Domain, MatchType, RiskLevel

from .env import optional_env_var
from .errors import ConfigurationError

log = getLogger(__name__)

DEFAULT_MATCH_FLOOR = 0.5


class _RulesModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class BandsModel(_RulesModel):
    medium: float = Field(default=25.0, gt=0.0, le=100.0)
    high: float = Field(default=50.0, gt=0.0, le=100.0)
    critical: float = Field(default=75.0, gt=0.0, le=100.0)

    @model_validator(mode="after")
    def _ascending(self) -> BandsModel:
        if not self.medium < self.high < self.critical:
            raise ValueError("bands must ascend: medium < high < critical")
        return self


class TriggerModel(_RulesModel):
    name: str = Field(min_length=1)
    thresholds: dict[Domain, float] = Field(min_length=1)
    escalate: bool = True
    description: str = ""

    @model_validator(mode="after")
    def _unit_thresholds(self) -> TriggerModel:
        for domain, threshold in self.thresholds.items():
            if not 0.0 <= threshold <= 1.0:
                raise ValueError(f"threshold for {domain} must lie in [0, 1]")
        return self


class OverrideModel(_RulesModel):
    name: str = Field(min_length=1)
    domain: Domain
    level: RiskLevel = RiskLevel.CRITICAL
    match_types: list[MatchType] = Field(default_factory=list)
    min_score: float = Field(default=0.0, ge=0.0, le=1.0)
    require_identifier: bool = False
    description: str = ""


AttributeName = Literal["dob", "nationality", "identifier"]


class AttributeWeightModel(_RulesModel):
    bonus: float = Field(ge=0.0, le=1.0)
    penalty: float = Field(default=0.0, ge=0.0, le=1.0)


class MatchingModel(_RulesModel):
    phonetic_threshold: float = Field(default=0.85, ge=0.0, le=1.0)
    phonetic_lift: float = Field(default=0.9, ge=0.0, le=1.0)
    agreement_threshold: float = Field(default=0.75, ge=0.0, le=1.0)
    attributes: dict[AttributeName, AttributeWeightModel] = Field(default_factory=dict)


class RulesFile(_RulesModel):
    match_floor: float = Field(default=DEFAULT_MATCH_FLOOR, ge=0.0, le=1.0)
    top_matches: int = Field(default=3, ge=1)
    weights: dict[Domain, float] = Field(default_factory=dict)
    bands: BandsModel = Field(default_factory=BandsModel)
    triggers: list[TriggerModel] | None = None
    overrides: list[OverrideModel] | None = None
    matching: MatchingModel = Field(default_factory=MatchingModel)

    @model_validator(mode="after")
    def _non_negative_weights(self) -> RulesFile:
        for domain, weight in self.weights.items():
            if weight < 0.0:
                raise ValueError(f"weight for {domain} must be non-negative")
        return self

    def to_config(self) -> ScoringConfig:
        defaults = RiskRules()
        weights = {**defaults.weights, **self.weights}
        triggers = defaults.triggers
        if self.triggers is not None:
            triggers = tuple(
                TriggerRule(
                    name=trigger.name,
                    thresholds=dict(trigger.thresholds),
                    escalate=trigger.escalate,
                    description=trigger.description,
                )
                for trigger in self.triggers
            )
        overrides = defaults.overrides
        if self.overrides is not None:
            overrides = tuple(
                OverrideRule(
                    name=override.name,
                    domain=override.domain,
                    level=override.level,
                    match_types=frozenset(override.match_types),
                    min_score=override.min_score,
                    require_identifier=override.require_identifier,
                    description=override.description,
                )
                for override in self.overrides
            )

        default_matching = MatchWeights()
        attributes = dict(default_matching.attributes)
        for key, weight in self.matching.attributes.items():
            attributes[key] = AttributeWeight(bonus=weight.bonus, penalty=weight.penalty)

        return ScoringConfig(
            rules=RiskRules(
                weights=weights,
                bands=LevelBands(
                    medium=self.bands.medium,
                    high=self.bands.high,
                    critical=self.bands.critical,
                ),
                triggers=triggers,
                overrides=overrides,
                top_matches=self.top_matches,
            ),
            match_weights=MatchWeights(
                phonetic_threshold=self.matching.phonetic_threshold,
                phonetic_lift=self.matching.phonetic_lift,
                agreement_threshold=self.matching.agreement_threshold,
                attributes=attributes,
            ),
            match_floor=self.match_floor,
        )


@dataclass(frozen=True, slots=True)
class ScoringConfig:
    rules: RiskRules = field(default_factory=RiskRules)
    match_weights: MatchWeights = field(default_factory=MatchWeights)
    match_floor: float = DEFAULT_MATCH_FLOOR


def load_scoring_config(path: str | Path) -> ScoringConfig:
    """Read and validate a TOML rules file."""

    rules_path = Path(path).expanduser()
    try:
        with rules_path.open("rb") as rules_file:
            document = tomllib.load(rules_file)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Rules file not found: {rules_path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Rules file {rules_path} is not valid TOML: {exc}") from exc

    try:
        config = RulesFile.model_validate(document).to_config()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid rules file {rules_path}:\n{exc}") from exc
    log.info("Loaded scoring rules from %s", rules_path)
    return config


def get_scoring_config(path: str | Path | None = None) -> ScoringConfig:
    """Scoring config from ``path``, else ``RISKSCREEN_RULES_FILE``, else the defaults."""

    source = path or optional_env_var("RISKSCREEN_RULES_FILE")
    if source is None:
        return ScoringConfig()
    return load_scoring_config(source)
