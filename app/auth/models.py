# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database. Phone-auth users may have no email.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
    phone: Optional[str] = None

    @property
    def id_fragment(self) -> str:
        """First 8 characters of the user id, used in transaction references."""
        return str(self.id)[:8]
