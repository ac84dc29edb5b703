"""macOS Network Mounter."""

from typing import List
from urllib.parse import quote

from .base_mounter import BaseMounter
from .mount_candidates import MountCandidate
from ..config_store import NasConfig


class MacOSMounter(BaseMounter):
    """macOS-specific network mount implementation (mount_smbfs / Finder)."""

    def get_platform_name(self) -> str:
        return "macOS"

    def default_mount_points(self, config: NasConfig) -> List[str]:
        return list(config.macos_mount_points)

    def build_share_path(self, config: NasConfig, user: str) -> str:
        if user:
            return f"//{user}@{config.nas_ip_address}/{config.share_name}"
        return f"//{config.nas_ip_address}/{config.share_name}"

    def build_mount_command(self, candidate: MountCandidate) -> List[str]:
        share_path = candidate.share_path
        if candidate.user and candidate.password:
            # //user@host/share -> //user:password@host/share
            credentials = f"{quote(candidate.user, safe='')}:{quote(candidate.password, safe='')}"
            share_path = share_path.replace(f"//{candidate.user}@", f"//{credentials}@", 1)
        return ["mount_smbfs", share_path, candidate.mount_point]

    def build_open_command(self, share_url: str) -> List[str]:
        # Finder shows its own connect dialog; returns before the mount completes
        return ["open", share_url]

    def build_ping_command(self, host: str, timeout_seconds: float) -> List[str]:
        # macOS ping takes -W in milliseconds
        return ["ping", "-c", "1", "-W", str(int(timeout_seconds * 1000)), host]
