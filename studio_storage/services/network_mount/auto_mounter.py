"""
Auto Mounter - gets the NAS mounted without user interaction.

All three operations are idempotent: they look before they act, so calling
them again after a success only re-confirms the existing mount.
"""

import logging
from pathlib import Path
from typing import Optional

from .base_mounter import BaseMounter
from .mount_candidates import build_mount_candidates
from ..config_store import ConfigStore
from ..volume.connectivity_monitor import ConnectivityMonitor
from ..volume.volume_resolver import VolumeResolver
from ...config import Settings
from ...core.exceptions import MountAttemptError
from ...models import DetectResult, MountResult


class AutoMounter:
    def __init__(
        self,
        settings: Settings,
        config_store: ConfigStore,
        resolver: VolumeResolver,
        mounter: Optional[BaseMounter],
        monitor: Optional[ConnectivityMonitor] = None,
    ):
        self._settings = settings
        self._config_store = config_store
        self._resolver = resolver
        self._mounter = mounter
        self._monitor = monitor

    async def detect_nas(self) -> DetectResult:
        """
        Probe the known NAS paths; when none is accessible, ping the NAS so the
        diagnostics can tell "host offline" from "online but not mounted".
        """
        config = self._config_store.config
        attempts = []

        for test_path in config.detect_paths:
            attempts.append(f"Checking: {test_path}")
            if await self._resolver.is_path_accessible(test_path):
                attempts.append(f"Found: {test_path}")
                return DetectResult(found=True, path=test_path, attempts=attempts)

        host = config.nas_ip_address
        attempts.append(f"Pinging: {host}")
        if self._mounter and await self._mounter.ping(host, self._settings.ping_timeout_seconds):
            attempts.append(f"NAS is online at {host} but not mounted")
        else:
            attempts.append(f"NAS not reachable at {host}")

        return DetectResult(found=False, path=None, attempts=attempts)

    async def mount_nas(self) -> MountResult:
        """
        Hand the SMB URL to the OS connection flow.

        The OS dialog completes on its own schedule, so callers must re-probe
        availability afterwards.
        """
        base_path = await self._resolver.resolve_root()
        if base_path:
            return MountResult(
                success=True,
                path=base_path,
                message="NAS already mounted",
                already_connected=True,
            )

        if not self._mounter:
            return MountResult(success=False, error="No mounter available for this platform")

        smb_url = self._config_store.config.smb_url
        logging.info(f"Attempting to connect NAS via OS dialog: {smb_url}")
        opened = await self._mounter.open_share(smb_url, self._settings.command_timeout_seconds)

        if not opened:
            return MountResult(
                success=False,
                message=f"Could not open {smb_url}",
                error=f"Could not open {smb_url}",
            )

        self._invalidate_status()
        return MountResult(
            success=True,
            message="Connection dialog opened. Select the shared folder to finish connecting.",
            action="finder_dialog_opened",
        )

    async def auto_mount_on_startup(self) -> MountResult:
        logging.info("Auto-mount check on startup...")

        base_path = await self._resolver.resolve_root()
        if base_path:
            logging.info(f"NAS already mounted at: {base_path}")
            return MountResult(success=True, path=base_path, method="already-mounted")

        if not self._mounter:
            return MountResult(success=False, error="No mounter available for this platform")

        attempts = []
        existing = await self._adopt_existing_mount(attempts)
        if existing:
            return existing

        return await self._search_candidates(attempts)

    async def _adopt_existing_mount(self, attempts: list) -> Optional[MountResult]:
        """Use a NAS mount made by another user or session, if the mount table has one."""
        config = self._config_store.config
        mount_table = await self._mounter.list_mounts(self._settings.command_timeout_seconds)
        mounted_paths = self._mounter.parse_mounted_paths(
            mount_table, [config.nas_host_name, config.nas_ip_address]
        )
        if not mounted_paths:
            attempts.append("No existing NAS mount in mount table")
            return None

        for mounted_path in mounted_paths:
            share_path = str(Path(mounted_path) / config.share_name)
            if await self._resolver.is_path_accessible(share_path):
                logging.info(f"Found existing NAS mount with share folder: {share_path}")
                return self._persist_success(share_path, "existing-mount-detected", attempts)

            if await self._resolver.is_path_accessible(mounted_path):
                logging.info(f"Using existing NAS mount as share root: {mounted_path}")
                return self._persist_success(mounted_path, "existing-mount-root", attempts)

            attempts.append(f"Existing mount not accessible: {mounted_path}")

        return None

    async def _search_candidates(self, attempts: list) -> MountResult:
        config = self._config_store.config
        candidates = build_mount_candidates(
            config,
            self._mounter.default_mount_points(config),
            self._mounter.build_share_path,
        )

        for candidate in candidates:
            description = candidate.describe()

            if not await self._mounter.prepare_mount_point(candidate.mount_point):
                attempts.append(f"Skipped (cannot create mount point): {description}")
                continue

            mount_table = await self._mounter.list_mounts(self._settings.command_timeout_seconds)
            if self._mounter.is_mount_point_busy(candidate.mount_point, mount_table):
                attempts.append(f"Skipped (mount point in use): {description}")
                continue

            try:
                await self._mounter.mount(candidate, self._settings.mount_timeout_seconds)
            except MountAttemptError as e:
                logging.info(f"Mount attempt failed: {e}")
                attempts.append(f"Failed: {description} - {e.reason}")
                await self._mounter.release_mount_point(candidate.mount_point)
                continue

            mounted_path = self._mounter.mount_point_path(candidate.mount_point)
            if await self._resolver.is_path_accessible(mounted_path):
                logging.info(f"Auto-mounted successfully at: {mounted_path}")
                attempts.append(f"Mounted: {description}")
                return self._persist_success(mounted_path, "auto-mounted", attempts)

            attempts.append(f"Mounted but not accessible: {description}")
            await self._mounter.release_mount_point(candidate.mount_point)

        logging.warning(f"All {len(candidates)} auto-mount attempts failed")
        return MountResult(
            success=False, error="Could not auto-mount NAS", attempts=attempts
        )

    def _persist_success(self, path: str, method: str, attempts: list) -> MountResult:
        self._config_store.set_primary_mount_path(self._resolver.platform_name, path)
        self._invalidate_status()
        return MountResult(success=True, path=path, method=method, attempts=attempts)

    def _invalidate_status(self) -> None:
        if self._monitor:
            self._monitor.invalidate()
