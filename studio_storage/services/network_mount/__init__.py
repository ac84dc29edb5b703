"""
Network Mount Module

Components:
- AutoMounter: detect / connect / brute-force auto-mount orchestration
- BaseMounter: abstract platform operations (mount, list mounts, open, ping)
- MacOSMounter, LinuxMounter, WindowsMounter: one implementation per platform
- build_mount_candidates: ordered (mount point, share path, user) search space
- PlatformFactory: platform detection and mounter creation
"""

from .auto_mounter import AutoMounter
from .base_mounter import BaseMounter, CommandResult, run_command
from .mount_candidates import MountCandidate, build_mount_candidates, candidate_users
from .platform_factory import PlatformFactory, UnsupportedPlatformError

__all__ = [
    "AutoMounter",
    "BaseMounter",
    "CommandResult",
    "run_command",
    "MountCandidate",
    "build_mount_candidates",
    "candidate_users",
    "PlatformFactory",
    "UnsupportedPlatformError",
]
