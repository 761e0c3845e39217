#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker for the post-payment side-effect queue. Only needed
# when SIDE_EFFECTS_ASYNC=true; otherwise side effects run inline in the API.
#
# Usage:
#   # Start worker (development)
#   poetry run python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   poetry run celery -A workers.celery_app worker -Q side_effects,default --loglevel=info
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app


def main():
    """Start the Celery worker on both queues."""
    print("=" * 60)
    print("Marketplace Side-Effect Worker")
    print("=" * 60)
    print()
    print("Queues: side_effects, default")
    print("Press Ctrl+C to stop")
    print()

    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        "--queues=side_effects,default",
        "--concurrency=2",
    ])


if __name__ == "__main__":
    main()
