# studio_storage/core/exceptions.py

from typing import Optional


class StorageError(Exception):
    """Base class for storage core failures."""


class PathResolutionError(StorageError):
    """Raised when neither the NAS nor the local cache can serve as root."""
    def __init__(self, nas_candidates: Optional[list] = None):
        self.nas_candidates = nas_candidates or []
        super().__init__(
            "Storage not available: NAS unreachable and local cache disabled "
            f"(checked {len(self.nas_candidates)} NAS paths)"
        )


class DirectoryCreationError(StorageError):
    """Raised when a session folder cannot be created."""
    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not create directory {path}: {reason}")


class MountAttemptError(StorageError):
    """Raised by a mounter when a single mount attempt fails."""
    def __init__(self, share_path: str, mount_point: str, reason: str):
        self.share_path = share_path
        self.mount_point = mount_point
        self.reason = reason
        super().__init__(f"Mount failed: {share_path} -> {mount_point}: {reason}")


class ConfigCorruptionError(StorageError):
    """Raised when the persisted NAS config cannot be parsed."""
    def __init__(self, config_path: str, reason: str):
        self.config_path = config_path
        self.reason = reason
        super().__init__(f"Corrupt config file {config_path}: {reason}")
