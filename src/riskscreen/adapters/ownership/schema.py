"""Pydantic models for the beneficial-ownership GraphQL API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _none_to_list(value: object) -> object:
    return [] if value is None else value


class OwnershipBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class IdentifierPayload(OwnershipBaseModel):
    scheme: str | None = None
    value: str


class OwnershipLink(OwnershipBaseModel):
    relationship: str
    counterparty: str
    share: float | None = None


class PartyPayload(OwnershipBaseModel):
    id: str
    name: str
    kind: str | None = None
    aliases: list[str] = Field(default_factory=list)
    birth_date: str | None = Field(default=None, alias="birthDate")
    jurisdictions: list[str] = Field(default_factory=list)
    identifiers: list[IdentifierPayload] = Field(default_factory=list)
    links: list[OwnershipLink] = Field(default_factory=list)
    url: str | None = None

    _normalize_lists = field_validator(
        "aliases", "jurisdictions", "identifiers", "links", mode="before"
    )(_none_to_list)


class PartySearch(OwnershipBaseModel):
    parties: list[dict[str, object]] = Field(default_factory=list)


class GraphQLError(OwnershipBaseModel):
    message: str
    path: list[str | int] | None = None


class GraphQLResponse(OwnershipBaseModel):
    data: dict[str, PartySearch | None] | None = None
    errors: list[GraphQLError] = Field(default_factory=list)

    _normalize_errors = field_validator("errors", mode="before")(_none_to_list)
