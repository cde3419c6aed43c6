from enum import Enum


class MigrationStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class LogoSource(str, Enum):
    API_SPORTS = "API-Sports"
    THESPORTSDB = "TheSportsDB"
    SUPABASE_STORAGE = "Supabase Storage"
    LOCAL = "Local asset"
    UNKNOWN = "API"
