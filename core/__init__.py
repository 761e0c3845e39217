# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the marketplace's server-side business logic:
# - models/: Pydantic schemas for requests, responses and stored rows
# - services/: Payment, subscription, phone verification, search and
#   notification operations, plus the post-payment side-effect outbox
#
# Code in this package should NOT import from FastAPI routers or Celery
# directly (the outbox reaches the Celery tasks lazily). This keeps the
# logic testable with a mocked Supabase client.
# =============================================================================
