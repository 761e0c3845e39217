# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the marketplace API:
# - test_models.py: Unit tests for Pydantic model validation
# - test_subscription.py: Expiry, countdown and status rules
# - test_payment_service.py: Payment initiation and verification flow
# - test_payment_gateways.py: Flutterwave / Paystack clients
# - test_verification.py: Phone verification flows and Termii client
# - test_side_effects.py: Post-payment side-effect outbox and tasks
# - test_api.py: Endpoint tests through the FastAPI TestClient
#
# Run tests with: poetry run pytest
# =============================================================================
