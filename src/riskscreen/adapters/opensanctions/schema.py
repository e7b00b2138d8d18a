"""Pydantic models describing the OpenSanctions search API payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OpenSanctionsBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class EntityPayload(OpenSanctionsBaseModel):
    id: str
    schema_: str = Field(alias="schema")
    caption: str | None = None
    datasets: list[str] = Field(default_factory=list)
    properties: dict[str, list[str]] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _keep_string_values(cls, value: object) -> object:
        # nested entities (e.g. sanctions, addresses) come back as objects
        if not isinstance(value, dict):
            return value
        return {
            key: [item for item in items if isinstance(item, str)]
            for key, items in value.items()
            if isinstance(items, list)
        }

    def property_values(self, *keys: str) -> list[str]:
        collected: list[str] = []
        for key in keys:
            for item in self.properties.get(key, []):
                stripped = item.strip()
                if stripped and stripped not in collected:
                    collected.append(stripped)
        return collected


class SearchTotal(OpenSanctionsBaseModel):
    value: int = 0
    relation: str = "eq"


class SearchResponse(OpenSanctionsBaseModel):
    results: list[dict[str, object]] = Field(default_factory=list)
    total: SearchTotal | None = None


class ErrorResponse(OpenSanctionsBaseModel):
    detail: str
