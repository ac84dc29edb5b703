import asyncio
import logging
from typing import Optional

from .cache_sync import CacheSyncReconciler
from ..volume.connectivity_monitor import ConnectivityMonitor
from ...config import Settings


class CacheSyncMonitor:
    """Polls NAS connectivity and reconciles the local cache after each recovery."""

    def __init__(
        self,
        settings: Settings,
        monitor: ConnectivityMonitor,
        reconciler: CacheSyncReconciler,
    ):
        self._settings = settings
        self._monitor = monitor
        self._reconciler = reconciler

        self._last_connected: Optional[bool] = None
        self._is_running = False
        self._monitor_task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._is_running

    async def start_monitoring(self) -> None:
        if self._is_running:
            logging.warning("Cache sync monitoring already running")
            return

        self._is_running = True
        self._monitor_task = asyncio.create_task(self._monitoring_loop())
        logging.info("Cache sync monitoring started")

    async def stop_monitoring(self) -> None:
        if not self._is_running:
            return

        self._is_running = False

        if self._monitor_task:
            self._monitor_task.cancel()
            try:
                await self._monitor_task
            except asyncio.CancelledError:
                pass

        logging.info("Cache sync monitoring stopped")

    async def _monitoring_loop(self) -> None:
        logging.info(
            f"Cache sync loop starting - checking every {self._settings.sync_check_interval_seconds}s"
        )
        while self._is_running:
            try:
                await self.check_once()
            except Exception as e:
                logging.error(f"Error in cache sync loop: {e}")

            await asyncio.sleep(self._settings.sync_check_interval_seconds)

    async def check_once(self) -> bool:
        """
        Returns True when a sync ran.

        A sync runs when the NAS comes back after being unavailable, and on
        the first check when the NAS is already up but the cache still holds
        sessions from an earlier run.
        """
        status = await self._monitor.refresh_status()
        first_check = self._last_connected is None
        recovered = status.connected and self._last_connected is False
        self._last_connected = status.connected

        if recovered:
            logging.info("NAS recovered - reconciling local cache")
        elif first_check and status.connected and await self._reconciler.has_cached_sessions():
            logging.info("NAS available at startup with sessions left in local cache - reconciling")
        else:
            return False

        result = await self._reconciler.sync_all_cached_sessions()
        if not result.success:
            logging.warning(f"Cache sync after recovery incomplete: {result.error}")
        return True
