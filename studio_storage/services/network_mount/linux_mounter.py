"""Linux Network Mounter."""

from typing import List

from .base_mounter import BaseMounter
from .mount_candidates import MountCandidate
from ..config_store import NasConfig


class LinuxMounter(BaseMounter):
    """Linux network mount implementation using mount.cifs."""

    def get_platform_name(self) -> str:
        return "Linux"

    def default_mount_points(self, config: NasConfig) -> List[str]:
        return list(config.linux_mount_points)

    def build_share_path(self, config: NasConfig, user: str) -> str:
        # cifs takes credentials as options, the user is kept on the candidate
        return f"//{config.nas_ip_address}/{config.share_name}"

    def build_mount_command(self, candidate: MountCandidate) -> List[str]:
        if candidate.user and candidate.user != "guest":
            options = f"username={candidate.user}"
            if candidate.password:
                options += f",password={candidate.password}"
        else:
            options = "guest"
        return [
            "mount", "-t", "cifs",
            candidate.share_path, candidate.mount_point,
            "-o", options,
        ]

    def build_open_command(self, share_url: str) -> List[str]:
        return ["gio", "open", share_url]

    def build_ping_command(self, host: str, timeout_seconds: float) -> List[str]:
        # Linux ping takes -W in whole seconds
        return ["ping", "-c", "1", "-W", str(max(1, int(timeout_seconds))), host]
