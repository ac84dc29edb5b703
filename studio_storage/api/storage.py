from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError

from ..dependencies import ServiceContainer, get_services
from ..models import (
    CacheStatus,
    DetectResult,
    MountResult,
    NetworkAvailability,
    NetworkStatus,
    SyncRequest,
    SyncResult,
)

router = APIRouter(prefix="/api", tags=["storage"])

MASKED_PASSWORD = "********"


def _public_config(services: ServiceContainer) -> Dict[str, Any]:
    data = services.config_store.config.model_dump(by_alias=True)
    if data.get("nas_password"):
        data["nas_password"] = MASKED_PASSWORD
    return data


@router.get("/storage/network", response_model=NetworkStatus)
async def get_network_status(
    services: ServiceContainer = Depends(get_services),
) -> NetworkStatus:
    """Cached NAS status; re-probed at most once per cache window."""
    return await services.monitor.get_status()


@router.post("/storage/network/check", response_model=NetworkAvailability)
async def check_network(
    services: ServiceContainer = Depends(get_services),
) -> NetworkAvailability:
    """Fresh probe with the detailed path report."""
    return await services.monitor.check_network_availability()


@router.get("/storage/cache", response_model=CacheStatus)
async def get_cache_status(
    services: ServiceContainer = Depends(get_services),
) -> CacheStatus:
    return await services.reconciler.get_cache_status()


@router.post("/storage/cache/sync", response_model=SyncResult)
async def sync_cache(
    request: SyncRequest,
    services: ServiceContainer = Depends(get_services),
) -> SyncResult:
    return await services.reconciler.sync_cache_to_nas(
        request.client_name,
        request.session_id,
        request.date,
        request.booking_details,
    )


@router.post("/storage/cache/sync-all", response_model=SyncResult)
async def sync_all_cache(
    services: ServiceContainer = Depends(get_services),
) -> SyncResult:
    return await services.reconciler.sync_all_cached_sessions()


@router.post("/storage/mount", response_model=MountResult)
async def mount_network(
    services: ServiceContainer = Depends(get_services),
) -> MountResult:
    return await services.auto_mounter.mount_nas()


@router.post("/storage/detect", response_model=DetectResult)
async def detect_network(
    services: ServiceContainer = Depends(get_services),
) -> DetectResult:
    return await services.auto_mounter.detect_nas()


@router.post("/storage/auto-mount", response_model=MountResult)
async def auto_mount(
    services: ServiceContainer = Depends(get_services),
) -> MountResult:
    return await services.auto_mounter.auto_mount_on_startup()


@router.get("/storage/config")
async def get_config(
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    return _public_config(services)


@router.patch("/storage/config")
async def update_config(
    changes: Dict[str, Any] = Body(...),
    services: ServiceContainer = Depends(get_services),
) -> Dict[str, Any]:
    """
    HTTP Status Codes:
        200: Config validated and persisted
        400: Unknown field
        422: Invalid field value
    """
    changes.pop("_version", None)
    changes.pop("version", None)
    if changes.get("nas_password") == MASKED_PASSWORD:
        changes.pop("nas_password")

    try:
        services.config_store.update(**changes)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    services.monitor.invalidate()
    return _public_config(services)
