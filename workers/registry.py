# =============================================================================
# workers/registry.py - Job Function Registry
# =============================================================================
# The set of job functions the job bridge serves. Each function pairs a
# trigger event with the Celery task that handles it.
#
# Usage:
#   registry = default_registry()
#   queued = registry.dispatch({"name": "clerk/user.created", "data": {...}})
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

APP_ID = "interview-arena"


@dataclass(frozen=True)
class JobFunction:
    """
    A registered job function.

    Attributes:
        id: Stable function id the orchestrator addresses (fnId)
        name: Human-readable name
        event: Trigger event name
        task: Celery task (anything with .delay()) that runs the job
    """

    id: str
    name: str
    event: str
    task: Any

    def to_config(self, url: str) -> dict[str, Any]:
        """Function definition as the orchestrator expects it at sync time."""
        return {
            "id": f"{APP_ID}-{self.id}",
            "name": self.name,
            "triggers": [{"event": self.event}],
            "steps": {
                "step": {
                    "id": "step",
                    "name": "step",
                    "runtime": {
                        "type": "http",
                        "url": f"{url}?fnId={self.id}&stepId=step",
                    },
                }
            },
        }


class JobRegistry:
    """
    Lookup and dispatch for registered job functions.
    """

    def __init__(self, functions: list[JobFunction]):
        ids = [function.id for function in functions]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate job function ids: {ids}")
        self._functions = {function.id: function for function in functions}

    def __len__(self) -> int:
        return len(self._functions)

    @property
    def functions(self) -> list[JobFunction]:
        return list(self._functions.values())

    @property
    def ids(self) -> list[str]:
        return list(self._functions)

    def get(self, function_id: str) -> JobFunction | None:
        # The orchestrator may send the app-prefixed id
        return self._functions.get(function_id.removeprefix(f"{APP_ID}-"))

    def for_event(self, event_name: str) -> list[JobFunction]:
        return [function for function in self._functions.values() if function.event == event_name]

    def dispatch(self, event: dict[str, Any], function: JobFunction | None = None) -> list[dict[str, str]]:
        """
        Enqueue the task of every function the event triggers.

        Args:
            event: {"name": ..., "data": {...}}
            function: Restrict dispatch to this function

        Returns:
            One {"function", "task_id"} entry per queued task
        """
        targets = [function] if function else self.for_event(event["name"])
        if not targets:
            logger.warning(f"No job function for event: {event['name']}")

        queued = []
        for target in targets:
            result = target.task.delay(event.get("data") or {})
            logger.info(f"Queued {target.id} for {event['name']} [{result.id}]")
            queued.append({"function": target.id, "task_id": str(result.id)})
        return queued


def default_registry(redis_url: str | None = None) -> JobRegistry:
    """
    The job functions this app serves.

    Args:
        redis_url: Broker the tasks are published to (settings.REDIS_URL)
    """
    from workers.celery_app import configure_broker
    from workers.tasks import delete_user, sync_user

    if redis_url:
        configure_broker(redis_url)

    return JobRegistry([
        JobFunction(
            id="sync-user",
            name="Sync User",
            event="clerk/user.created",
            task=sync_user,
        ),
        JobFunction(
            id="delete-user-from-db",
            name="Delete User From DB",
            event="clerk/user.deleted",
            task=delete_user,
        ),
    ])
