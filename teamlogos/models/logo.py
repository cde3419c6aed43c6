from typing import Optional

from pydantic import BaseModel, Field


class CachedLogo(BaseModel):
    """A cache entry as persisted in the local store."""

    url: str
    timestamp: int = Field(..., description="Creation time in epoch milliseconds.")


class UploadResult(BaseModel):
    """Outcome of uploading or migrating one logo into Supabase Storage."""

    success: bool
    url: Optional[str] = None
    error: Optional[str] = None


class ApiQuota(BaseModel):
    remaining: Optional[int] = None
    limit: Optional[int] = None
