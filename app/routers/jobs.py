# =============================================================================
# app/routers/jobs.py - Background Job Bridge
# =============================================================================
# The endpoint the job orchestrator (Inngest) calls into.
#
# - GET  : introspection (which functions this app serves)
# - PUT  : registration payload for syncing the app with the orchestrator
# - POST : event delivery; matching functions' Celery tasks are enqueued
#
# The bridge has no logic of its own beyond signature checks; the work
# happens in workers/tasks.py.
# =============================================================================

import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, status
from starlette.concurrency import run_in_threadpool

from app.dependencies import SettingsDep
from app.exceptions import (
    InvalidJobEventError,
    InvalidJobSignatureError,
    JobFunctionNotFoundError,
)
from lib.job_signature import SIGNATURE_HEADER, SignatureError, verify_signature
from workers.registry import APP_ID, JobRegistry

logger = logging.getLogger(__name__)

router = APIRouter()


def get_job_registry(request: Request) -> JobRegistry:
    """Get the registry the app was built with."""
    return request.app.state.job_registry


RegistryDep = Annotated[JobRegistry, Depends(get_job_registry)]


def _served_url(request: Request) -> str:
    return str(request.url.replace(query=""))


@router.get("")
async def introspect(request: Request, registry: RegistryDep, settings: SettingsDep) -> dict[str, Any]:
    """Describe the functions this app serves."""
    url = _served_url(request)
    return {
        "message": "Job endpoint configured correctly.",
        "app_id": APP_ID,
        "mode": "cloud" if settings.is_production else "dev",
        "has_signing_key": bool(settings.INNGEST_SIGNING_KEY),
        "has_event_key": bool(settings.INNGEST_EVENT_KEY),
        "function_count": len(registry),
        "functions": [function.to_config(url) for function in registry.functions],
    }


@router.put("")
async def register(request: Request, registry: RegistryDep) -> dict[str, Any]:
    """Registration payload the orchestrator syncs this app from."""
    url = _served_url(request)
    logger.info(f"Job registration requested ({len(registry)} functions)")
    return {
        "url": url,
        "deployType": "ping",
        "framework": "fastapi",
        "appName": APP_ID,
        "functions": [function.to_config(url) for function in registry.functions],
    }


@router.post("", status_code=status.HTTP_202_ACCEPTED)
async def deliver(
    request: Request,
    registry: RegistryDep,
    settings: SettingsDep,
    fn_id: Annotated[str | None, Query(alias="fnId")] = None,
) -> dict[str, Any]:
    """
    Accept an event delivery and enqueue the matching job functions.

    Body: {"event": {"name": "clerk/user.created", "data": {...}}}

    Signatures are required in production and checked whenever present
    elsewhere.

    Raises:
        401: Bad signature
        400: Body isn't an event
        404: fnId names no registered function
    """
    body = await request.body()

    header = request.headers.get(SIGNATURE_HEADER)
    if settings.is_production or header:
        try:
            verify_signature(body, header, settings.INNGEST_SIGNING_KEY)
        except SignatureError as e:
            logger.warning(f"Rejected job delivery: {e}")
            raise InvalidJobSignatureError(str(e))

    try:
        payload = json.loads(body or b"{}")
    except ValueError as e:
        raise InvalidJobEventError(f"body is not JSON ({e})")

    event = payload.get("event") if isinstance(payload, dict) else None
    if not isinstance(event, dict) or not event.get("name"):
        raise InvalidJobEventError("missing event name")

    function = None
    if fn_id:
        function = registry.get(fn_id)
        if function is None:
            raise JobFunctionNotFoundError(fn_id, registry.ids)

    # .delay() publishes to the broker synchronously
    queued = await run_in_threadpool(registry.dispatch, event, function=function)
    return {"event": event["name"], "queued": queued}
