from .cache_sync import CacheSyncReconciler
from .sync_monitor import CacheSyncMonitor

__all__ = ["CacheSyncReconciler", "CacheSyncMonitor"]
