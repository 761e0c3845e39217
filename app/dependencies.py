# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers as annotated parameters.
# =============================================================================

from typing import Annotated

from fastapi import Depends

from app.auth import AuthUser, get_current_user

# Type alias for dependency injection
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
