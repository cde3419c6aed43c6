# teamlogos/models/provider.py
"""Response shapes of the logo provider APIs.

Only the fields the logo tools read are declared; anything else is ignored.
A payload that does not fit these shapes is treated as "no result".
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SportsDbTeam(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id_team: Optional[str] = Field(None, alias="idTeam")
    str_team: Optional[str] = Field(None, alias="strTeam")
    str_badge: Optional[str] = Field(None, alias="strBadge")
    str_logo: Optional[str] = Field(None, alias="strLogo")

    @field_validator("id_team", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value


class SportsDbTeamsResponse(BaseModel):
    # null when nothing matches
    teams: Optional[List[SportsDbTeam]] = None


class ApiSportsTeam(BaseModel):
    id: Optional[int] = None
    name: Optional[str] = None
    logo: Optional[str] = None


class ApiSportsEntry(BaseModel):
    team: Optional[ApiSportsTeam] = None


class ApiSportsTeamsResponse(BaseModel):
    # [] on success; a list or an object describing the problem otherwise
    errors: Any = None
    response: Optional[List[ApiSportsEntry]] = None
