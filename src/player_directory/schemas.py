"""Wire models for directory records, pages and bundles."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class PlayerSuggestion(_CamelModel):
    """Minimal display record kept in the search index for each player."""

    id: str
    short_name: str
    name_lower: str
    surname_lower: Optional[str] = None
    player_positions: str = ""
    overall: Optional[int] = None
    potential: Optional[int] = None
    age: Optional[int] = None
    nationality_name: Optional[str] = None
    preferred_foot: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class PlayerRecord(PlayerSuggestion):
    """A row of the reference player directory as served by the backend."""

    club_position: Optional[str] = None
    version: Optional[str] = None

    @field_validator("preferred_foot", mode="before")
    @classmethod
    def _fold_foot(cls, value):
        if value is None or value == "":
            return None
        return "L" if str(value).strip().upper() in ("L", "LEFT") else "R"

    def suggestion(self) -> PlayerSuggestion:
        return PlayerSuggestion.model_validate(self.model_dump(include=set(PlayerSuggestion.model_fields)))


class DirectoryPage(_CamelModel):
    """One page of the directory listing plus its continuation token."""

    records: List[PlayerRecord] = Field(default_factory=list)
    next_token: Optional[str] = None


class DirectoryBundle(BaseModel):
    """Pre-packaged directory snapshot shipped as a static file."""

    version: str
    players: List[PlayerRecord]
