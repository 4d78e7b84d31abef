# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration, the job function registry
# the job bridge dispatches through, and the task definitions.
#
# Components:
# - celery_app.py: Celery application configuration
# - config.py: Worker-specific settings
# - registry.py: Job functions (trigger event -> task)
# - tasks.py: Task definitions (user sync/delete)
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker --loglevel=info -Q default,users
#
#   # Or use the poetry script
#   poetry run start-worker
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
