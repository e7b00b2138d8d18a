"""Pydantic models for the threat-actor intelligence feed."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _none_to_list(value: object) -> object:
    return [] if value is None else value


class ThreatFeedBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ActorPayload(ThreatFeedBaseModel):
    id: str
    name: str
    aliases: list[str] = Field(default_factory=list)
    country: str | None = None
    indicators: list[str] = Field(default_factory=list)
    campaigns: list[str] = Field(default_factory=list)
    reference: str | None = None

    _normalize_lists = field_validator("aliases", "indicators", "campaigns", mode="before")(
        _none_to_list
    )


class ActorSearchResponse(ThreatFeedBaseModel):
    actors: list[dict[str, object]] = Field(default_factory=list, alias="data")
    next_cursor: str | None = Field(default=None, alias="nextCursor")
