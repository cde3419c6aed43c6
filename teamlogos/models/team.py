# teamlogos/models/team.py
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Columns every logo tool reads from the teams table
TEAM_COLUMNS = "id, name, apiTeamId, apiTeamName, logoUrl, resolvedLogoUrl"


class Team(BaseModel):
    """A row of the Supabase 'teams' table, restricted to the logo-related columns."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str = ""
    api_team_id: Optional[str] = Field(None, alias="apiTeamId")
    api_team_name: Optional[str] = Field(None, alias="apiTeamName")
    # Locally bundled fallback image (filename or legacy URL)
    logo_url: Optional[str] = Field(None, alias="logoUrl")
    resolved_logo_url: Optional[str] = Field(None, alias="resolvedLogoUrl")

    @field_validator("id", "api_team_id", mode="before")
    @classmethod
    def _stringify_ids(cls, value: Any) -> Any:
        # apiTeamId was filled by hand for years; some rows carry integers
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("api_team_id", "api_team_name", "logo_url", "resolved_logo_url")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value
