import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from fastapi import Request

from .config import Settings
from .services.config_store import ConfigStore
from .services.network_mount import AutoMounter, BaseMounter, PlatformFactory, UnsupportedPlatformError
from .services.sessions import DirectoryProvisioner
from .services.sync import CacheSyncMonitor, CacheSyncReconciler
from .services.volume import ConnectivityMonitor, VolumeResolver


@lru_cache
def get_settings() -> Settings:
    """Settings instance read from settings.env / environment."""
    return Settings()


@dataclass
class ServiceContainer:
    """Every long-lived service, built once per process by create_services."""

    settings: Settings
    platform_name: str
    config_store: ConfigStore
    resolver: VolumeResolver
    monitor: ConnectivityMonitor
    mounter: Optional[BaseMounter]
    auto_mounter: AutoMounter
    provisioner: DirectoryProvisioner
    reconciler: CacheSyncReconciler
    sync_monitor: CacheSyncMonitor


def create_services(
    settings: Settings,
    platform_name: Optional[str] = None,
    mounter: Optional[BaseMounter] = None,
) -> ServiceContainer:
    """
    Wire the storage core.

    platform_name and mounter override detection, which tests use to run the
    whole container against a fake mount backend.
    """
    factory = PlatformFactory()
    if platform_name is None:
        try:
            platform_name = factory.detect_platform()
        except UnsupportedPlatformError as e:
            logging.warning(f"{e} - auto-mount disabled, using macOS paths")
            platform_name = "unknown"

    if mounter is None and platform_name != "unknown":
        mounter = factory.create_mounter(platform_name)

    config_store = ConfigStore(settings.config_file)
    resolver = VolumeResolver(
        config_store,
        platform_name,
        probe_timeout_seconds=settings.probe_timeout_seconds,
        verify_write_access=settings.verify_write_access,
    )
    monitor = ConnectivityMonitor(
        resolver, config_store, cache_ttl_seconds=settings.status_cache_ttl_seconds
    )
    reconciler = CacheSyncReconciler(settings, config_store, monitor)

    return ServiceContainer(
        settings=settings,
        platform_name=platform_name,
        config_store=config_store,
        resolver=resolver,
        monitor=monitor,
        mounter=mounter,
        auto_mounter=AutoMounter(settings, config_store, resolver, mounter, monitor),
        provisioner=DirectoryProvisioner(settings, config_store, monitor),
        reconciler=reconciler,
        sync_monitor=CacheSyncMonitor(settings, monitor, reconciler),
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services
