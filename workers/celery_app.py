# =============================================================================
# workers/celery_app.py - Celery Application Configuration
# =============================================================================
# This module creates and configures the Celery application instance that
# runs the jobs the job bridge dispatches.
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker --loglevel=info -Q default,users
#
#   # Check status
#   celery -A workers.celery_app status
# =============================================================================

import logging

from celery import Celery
from celery.signals import celeryd_init, task_failure, task_postrun, task_prerun

from app.config import get_settings

logger = logging.getLogger(__name__)

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


def _redacted(redis_url: str) -> str:
    # Don't log credentials embedded in the URL
    return redis_url.split("@")[-1]


def create_celery_app(redis_url: str = DEFAULT_REDIS_URL) -> Celery:
    """
    Create and configure Celery application.

    Args:
        redis_url: Broker/result backend URL. Processes rebind it from
            settings.REDIS_URL with configure_broker() before first use.

    Returns:
        Configured Celery app instance
    """
    app = Celery(
        "interview_arena_worker",
        broker=redis_url,
        backend=redis_url,
        include=["workers.tasks"],
    )

    app.config_from_object("workers.config:CeleryConfig")

    logger.info(f"Celery app created with broker: {_redacted(redis_url)}")

    return app


# The worker process entry point (celery -A workers.celery_app)
celery_app = create_celery_app()


def configure_broker(redis_url: str, app: Celery = celery_app) -> None:
    """Point `app` at the Redis instance named by settings.REDIS_URL."""
    app.conf.update(broker_url=redis_url, result_backend=redis_url)
    logger.info(f"Celery broker set to: {_redacted(redis_url)}")


# =============================================================================
# Celery Signals (Lifecycle Hooks)
# =============================================================================

@celeryd_init.connect
def celeryd_init_handler(sender=None, conf=None, **extra):
    """Bind the worker to settings.REDIS_URL before it connects."""
    redis_url = get_settings().REDIS_URL
    conf.broker_url = redis_url
    conf.result_backend = redis_url
    logger.info(f"Worker {sender} using broker: {_redacted(redis_url)}")


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, **extra):
    """Log when a task starts."""
    logger.info(f"Task started: {task.name} [{task_id}]")


@task_postrun.connect
def task_postrun_handler(sender=None, task_id=None, task=None, state=None, **extra):
    """Log when a task completes."""
    logger.info(f"Task completed: {task.name} [{task_id}] - State: {state}")


@task_failure.connect
def task_failure_handler(sender=None, task_id=None, exception=None, **extra):
    """Log when a task fails."""
    logger.error(f"Task failed: {sender.name} [{task_id}] - Error: {exception}")


# =============================================================================
# CLI Entry Point
# =============================================================================

def start_worker() -> None:
    """Start a worker on both queues (poetry run start-worker)."""
    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        "--queues=default,users",
        "--concurrency=2",
    ])


if __name__ == "__main__":
    start_worker()
