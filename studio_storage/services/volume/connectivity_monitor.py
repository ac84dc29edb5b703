"""
Connectivity Monitor - NAS availability with TTL-based caching.
"""

import asyncio
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Optional

from .volume_resolver import VolumeResolver
from ..config_store import ConfigStore
from ...core.exceptions import PathResolutionError
from ...models import NetworkAvailability, NetworkStatus, StorageMode, StorageRoot


class ConnectivityMonitor:
    """Bounds how often the filesystem is probed while the UI polls for status."""

    def __init__(
        self,
        resolver: VolumeResolver,
        config_store: ConfigStore,
        cache_ttl_seconds: float = 30.0,
    ):
        self.resolver = resolver
        self.cache_ttl_seconds = cache_ttl_seconds
        self._config_store = config_store

        self._cached_status: Optional[NetworkStatus] = None
        self._cache_timestamp = 0.0
        self._check_lock = asyncio.Lock()

        logging.debug(f"ConnectivityMonitor initialized (ttl={cache_ttl_seconds}s)")

    async def get_status(self) -> NetworkStatus:
        """Cached status while younger than the TTL, otherwise a fresh probe."""
        if self._is_cache_valid():
            return self._cached_status.model_copy(update={"cached": True})

        async with self._check_lock:
            if self._is_cache_valid():
                return self._cached_status.model_copy(update={"cached": True})

            logging.debug("Performing fresh NAS availability check")
            base_path = await self.resolver.resolve_root()
            status = NetworkStatus(connected=base_path is not None, path=base_path)

            self._log_transition(status)
            self._cached_status = status
            self._cache_timestamp = time.time()
            return status

    async def refresh_status(self) -> NetworkStatus:
        """Force an immediate re-probe."""
        self.invalidate()
        return await self.get_status()

    def invalidate(self) -> None:
        self._cache_timestamp = 0.0

    async def is_network_available(self) -> bool:
        status = await self.get_status()
        return status.connected

    async def get_active_root(self) -> StorageRoot:
        """
        NAS root when reachable, else the local cache.

        Raises PathResolutionError when the NAS is down and the local cache
        is disabled in the config.
        """
        status = await self.get_status()
        config = self._config_store.config

        if status.connected and status.path:
            return StorageRoot(
                mode=StorageMode.NETWORK,
                path=self.resolver.compose_network_root(status.path),
            )

        if not config.use_local_cache:
            raise PathResolutionError(self.resolver.get_candidate_paths())

        return StorageRoot(mode=StorageMode.LOCAL_CACHE, path=config.local_cache_path)

    def get_network_root(self) -> Optional[str]:
        """Composed NAS root from the last probe, without probing."""
        if self._cached_status and self._cached_status.connected and self._cached_status.path:
            return self.resolver.compose_network_root(self._cached_status.path)
        return None

    async def check_network_availability(self) -> NetworkAvailability:
        """Detailed report based on a fresh probe."""
        status = await self.refresh_status()
        config = self._config_store.config

        photo_folder_path = None
        app_folder_path = None
        if status.connected and status.path:
            photo_folder_path = status.path
            if config.photo_folder and Path(status.path).name != config.photo_folder:
                photo_folder_path = str(Path(status.path) / config.photo_folder)
            app_folder_path = self.resolver.compose_network_root(status.path)

        found_paths = await self.resolver.find_existing_paths(
            self.resolver.get_candidate_paths()
        )

        return NetworkAvailability(
            connected=status.connected,
            base_path=status.path,
            photo_folder_path=photo_folder_path,
            app_folder_path=app_folder_path,
            is_local_cache=not status.connected,
            local_cache_path=config.local_cache_path,
            smb_url=config.smb_url,
            photo_folder=config.photo_folder,
            app_subfolder=config.app_subfolder,
            platform=self.resolver.platform_name,
            found_paths=found_paths,
            timestamp=datetime.now(),
        )

    def get_cache_info(self) -> dict:
        """Get information about cache state (for debugging/monitoring)."""
        return {
            "has_cached_result": self._cached_status is not None,
            "cache_timestamp": self._cache_timestamp,
            "cache_age_seconds": time.time() - self._cache_timestamp
            if self._cache_timestamp > 0
            else None,
            "cache_ttl_seconds": self.cache_ttl_seconds,
            "is_cache_valid": self._is_cache_valid(),
        }

    def _is_cache_valid(self) -> bool:
        if self._cached_status is None or self._cache_timestamp <= 0:
            return False
        return time.time() - self._cache_timestamp < self.cache_ttl_seconds

    def _log_transition(self, status: NetworkStatus) -> None:
        previous = self._cached_status.connected if self._cached_status else None
        if previous is None or previous == status.connected:
            return
        if status.connected:
            logging.info(f"NAS RECOVERY DETECTED: available at {status.path}")
        else:
            logging.warning("NAS UNAVAILABLE: switching to local cache")
