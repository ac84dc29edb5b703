from .connectivity_monitor import ConnectivityMonitor
from .volume_resolver import VolumeResolver

__all__ = ["ConnectivityMonitor", "VolumeResolver"]
