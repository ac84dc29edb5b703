"""Windows Network Mounter."""

import logging
import re
from typing import List

from .base_mounter import BaseMounter
from .mount_candidates import MountCandidate
from ..config_store import NasConfig


class WindowsMounter(BaseMounter):
    """Windows-specific network mount implementation using net use."""

    _DRIVE = re.compile(r"\b([A-Z]:)\s")
    _UNC = re.compile(r"(\\\\\S+)")

    def get_platform_name(self) -> str:
        return "Windows"

    def default_mount_points(self, config: NasConfig) -> List[str]:
        return [f"{letter.rstrip(':').upper()}:" for letter in config.windows_drive_letters]

    def build_share_path(self, config: NasConfig, user: str) -> str:
        return f"\\\\{config.nas_ip_address}\\{config.share_name}"

    def build_mount_command(self, candidate: MountCandidate) -> List[str]:
        cmd = ["net", "use", candidate.mount_point, candidate.share_path]
        if candidate.user:
            # net use takes the password positionally before /user
            cmd += [candidate.password, f"/user:{candidate.user}"]
        cmd.append("/persistent:no")
        return cmd

    def build_open_command(self, share_url: str) -> List[str]:
        return ["explorer", self._convert_url_to_unc(share_url)]

    def build_ping_command(self, host: str, timeout_seconds: float) -> List[str]:
        return ["ping", "-n", "1", "-w", str(int(timeout_seconds * 1000)), host]

    def mount_table_command(self) -> List[str]:
        return ["net", "use"]

    def mount_point_path(self, mount_point: str) -> str:
        return f"{mount_point}\\"

    async def prepare_mount_point(self, mount_point: str) -> bool:
        # Drive letters need no directory
        return True

    def parse_mounted_paths(self, mount_table: str, markers: List[str]) -> List[str]:
        """
        Parse `net use` output.

        Mapped drives yield "Z:\\", connections without a drive letter yield
        their UNC path.
        """
        lowered = [m.lower() for m in markers if m]
        paths = []
        for line in mount_table.splitlines():
            if not any(marker in line.lower() for marker in lowered):
                continue
            drive = self._DRIVE.search(line)
            unc = self._UNC.search(line)
            if drive:
                path = f"{drive.group(1)}\\"
            elif unc:
                path = unc.group(1)
            else:
                continue
            if path not in paths:
                paths.append(path)
        return paths

    def is_mount_point_busy(self, mount_point: str, mount_table: str) -> bool:
        pattern = re.compile(rf"(^|\s){re.escape(mount_point)}\s", re.IGNORECASE)
        return any(pattern.search(line) for line in mount_table.splitlines())

    def _convert_url_to_unc(self, share_url: str) -> str:
        """Convert SMB URL to Windows UNC path format."""
        path_part = share_url[6:] if share_url.startswith("smb://") else share_url
        unc_path = "\\\\" + path_part.replace("/", "\\")
        logging.debug(f"Converted {share_url} to UNC path: {unc_path}")
        return unc_path
