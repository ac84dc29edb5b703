"""
Pytest configuration og shared fixtures.
"""

import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Set, Tuple

import pytest

from studio_storage.config import Settings
from studio_storage.core.exceptions import MountAttemptError
from studio_storage.services.config_store import ConfigStore, NasConfig
from studio_storage.services.network_mount.base_mounter import BaseMounter
from studio_storage.services.network_mount.mount_candidates import MountCandidate
from studio_storage.services.volume import ConnectivityMonitor, VolumeResolver


class FakeMounter(BaseMounter):
    """
    Mount backend that never spawns processes.

    A candidate succeeds when its (mount_point, user) pair is in
    accepted_logins; success creates the mount point directory and adds a
    line to the fake mount table.
    """

    def __init__(self, accepted_logins: Optional[Set[Tuple[str, str]]] = None):
        super().__init__()
        self.accepted_logins = accepted_logins or set()
        self.mount_table = ""
        self.ping_result = False
        self.open_result = True
        self.mount_calls: List[MountCandidate] = []
        self.opened_urls: List[str] = []

    def get_platform_name(self) -> str:
        return "Fake"

    def default_mount_points(self, config: NasConfig) -> List[str]:
        return list(config.linux_mount_points)

    def build_share_path(self, config: NasConfig, user: str) -> str:
        return f"//{config.nas_ip_address}/{config.share_name}"

    def build_mount_command(self, candidate: MountCandidate) -> List[str]:
        return ["fake-mount", candidate.share_path, candidate.mount_point]

    def build_open_command(self, share_url: str) -> List[str]:
        return ["fake-open", share_url]

    def build_ping_command(self, host: str, timeout_seconds: float) -> List[str]:
        return ["fake-ping", host]

    async def mount(self, candidate: MountCandidate, timeout: float) -> None:
        self.mount_calls.append(candidate)
        if (candidate.mount_point, candidate.user) not in self.accepted_logins:
            raise MountAttemptError(candidate.share_path, candidate.mount_point, "Permission denied")
        Path(candidate.mount_point).mkdir(parents=True, exist_ok=True)
        self.mount_table += f"{candidate.share_path} on {candidate.mount_point} type cifs (rw)\n"

    async def list_mounts(self, timeout: float) -> str:
        return self.mount_table

    async def open_share(self, share_url: str, timeout: float) -> bool:
        self.opened_urls.append(share_url)
        return self.open_result

    async def ping(self, host: str, timeout: float) -> bool:
        return self.ping_result


@pytest.fixture
def temp_dir():
    """Create temporary directory for testing."""
    path = Path(tempfile.mkdtemp())
    yield path
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def settings(temp_dir):
    return Settings(
        config_file_path=str(temp_dir / "data" / "nas-config.json"),
        log_file_path=str(temp_dir / "logs" / "studio_storage.log"),
        enable_auto_mount=False,
        enable_auto_sync=False,
        probe_timeout_seconds=2.0,
        max_concurrent_scans=2,
    )


@pytest.fixture
def nas_dir(temp_dir):
    """Primary NAS mount path; not created until a test needs it online."""
    return temp_dir / "nas"


@pytest.fixture
def cache_dir(temp_dir):
    return temp_dir / "cache"


@pytest.fixture
def config_store(settings, nas_dir, cache_dir):
    store = ConfigStore(settings.config_file)
    store.update(
        linux_mount_path=str(nas_dir),
        macos_mount_path=str(nas_dir),
        alternative_paths=[],
        detect_paths=[],
        linux_mount_points=[],
        local_cache_path=str(cache_dir),
    )
    return store


@pytest.fixture
def resolver(config_store):
    return VolumeResolver(config_store, "linux", probe_timeout_seconds=2.0)


@pytest.fixture
def monitor(resolver, config_store):
    return ConnectivityMonitor(resolver, config_store, cache_ttl_seconds=30.0)


@pytest.fixture
def fake_mounter():
    return FakeMounter()
