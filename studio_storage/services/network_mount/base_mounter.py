"""Abstract Base Mounter - one implementation per platform."""

import asyncio
import logging
import os
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from .mount_candidates import MountCandidate
from ...core.exceptions import MountAttemptError
from ..config_store import NasConfig


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def error_text(self) -> str:
        return (self.stderr or self.stdout).strip() or f"exit code {self.returncode}"


async def run_command(cmd: List[str], timeout: float) -> CommandResult:
    """
    Run a platform tool and collect its output.

    The process is killed when it does not finish within timeout and
    asyncio.TimeoutError is raised. A missing executable raises OSError.
    """
    process = await asyncio.create_subprocess_exec(
        *cmd, stdout=asyncio.subprocess.PIPE, stderr=asyncio.subprocess.PIPE
    )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        logging.warning(f"Command timed out after {timeout}s: {cmd[0]}")
        process.kill()
        await process.wait()
        raise

    return CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode(errors="replace") if stdout else "",
        stderr=stderr.decode(errors="replace") if stderr else "",
    )


def _make_directories(path: Path) -> List[Path]:
    """mkdir -p that returns the directories it created, deepest first."""
    missing = []
    current = path
    while not current.exists() and current != current.parent:
        missing.append(current)
        current = current.parent
    path.mkdir(parents=True, exist_ok=True)
    return missing


class BaseMounter(ABC):
    """Abstract base class for platform-specific mount operations."""

    # "//host/share on /Volumes/Gallery (smbfs, ...)" and
    # "//host/share on /mnt/gallery type cifs (rw, ...)"
    _MOUNT_LINE = re.compile(r"\son\s+(.+?)\s+(?:\(|type\s)")

    def __init__(self):
        # mount point -> directories created for it, deepest first
        self._created_mount_points: Dict[str, List[Path]] = {}

    @abstractmethod
    def get_platform_name(self) -> str:
        """Get platform name for logging."""

    @abstractmethod
    def default_mount_points(self, config: NasConfig) -> List[str]:
        """Mount points the auto-mount search iterates over."""

    @abstractmethod
    def build_share_path(self, config: NasConfig, user: str) -> str:
        """Share address as shown in diagnostics (never contains a password)."""

    @abstractmethod
    def build_mount_command(self, candidate: MountCandidate) -> List[str]:
        """Platform mount command for one candidate."""

    @abstractmethod
    def build_open_command(self, share_url: str) -> List[str]:
        """Command that hands the share URL to the OS connection flow."""

    @abstractmethod
    def build_ping_command(self, host: str, timeout_seconds: float) -> List[str]:
        """Single-packet reachability probe."""

    def mount_table_command(self) -> List[str]:
        return ["mount"]

    def mount_point_path(self, mount_point: str) -> str:
        """Filesystem path that becomes accessible after a successful mount."""
        return mount_point

    def parse_mounted_paths(self, mount_table: str, markers: List[str]) -> List[str]:
        """Mount paths of table lines mentioning any marker (host name or IP)."""
        lowered = [m.lower() for m in markers if m]
        paths = []
        for line in mount_table.splitlines():
            if not any(marker in line.lower() for marker in lowered):
                continue
            match = self._MOUNT_LINE.search(line)
            if match and match.group(1) not in paths:
                paths.append(match.group(1))
        return paths

    def is_mount_point_busy(self, mount_point: str, mount_table: str) -> bool:
        needle = f" on {mount_point.rstrip('/')} "
        return any(needle in line for line in mount_table.splitlines())

    async def prepare_mount_point(self, mount_point: str) -> bool:
        """Create the mount point directory if missing; remembers what was created."""
        try:
            created = await asyncio.to_thread(_make_directories, Path(mount_point))
        except OSError as e:
            logging.debug(f"Cannot create mount point {mount_point}: {e}")
            return False

        if created:
            self._created_mount_points[mount_point] = created
        return True

    async def release_mount_point(self, mount_point: str) -> None:
        """
        Remove directories prepare_mount_point created for a failed attempt.

        A leftover empty folder passes the accessibility check and would be
        reported as the mounted NAS. Folders that existed before are kept.
        """
        created = self._created_mount_points.pop(mount_point, [])
        for directory in created:
            try:
                await asyncio.to_thread(os.rmdir, directory)
            except OSError as e:
                logging.warning(f"Could not remove mount point {directory}: {e}")
                return
            logging.debug(f"Removed unused mount point {directory}")

    async def mount(self, candidate: MountCandidate, timeout: float) -> None:
        """Run the mount command; raises MountAttemptError on any failure."""
        logging.info(f"Attempting {self.get_platform_name()} mount: {candidate.describe()}")
        try:
            result = await run_command(self.build_mount_command(candidate), timeout)
        except asyncio.TimeoutError:
            raise MountAttemptError(
                candidate.share_path, candidate.mount_point, f"timed out after {timeout}s"
            )
        except OSError as e:
            raise MountAttemptError(candidate.share_path, candidate.mount_point, str(e))

        if not result.ok:
            raise MountAttemptError(
                candidate.share_path, candidate.mount_point, result.error_text
            )

    async def list_mounts(self, timeout: float) -> str:
        """Current OS mount table, or an empty string when it cannot be read."""
        try:
            result = await run_command(self.mount_table_command(), timeout)
        except (asyncio.TimeoutError, OSError) as e:
            logging.warning(f"Could not read mount table: {e}")
            return ""
        return result.stdout if result.ok else ""

    async def open_share(self, share_url: str, timeout: float) -> bool:
        try:
            result = await run_command(self.build_open_command(share_url), timeout)
        except (asyncio.TimeoutError, OSError) as e:
            logging.error(f"Could not open {share_url}: {e}")
            return False
        if not result.ok:
            logging.error(f"Opening {share_url} failed: {result.error_text}")
        return result.ok

    async def ping(self, host: str, timeout: float) -> bool:
        # Extra second so the tool can report its own timeout first
        try:
            result = await run_command(self.build_ping_command(host, timeout), timeout + 1.0)
        except (asyncio.TimeoutError, OSError) as e:
            logging.debug(f"Ping {host} failed: {e}")
            return False
        return result.ok
