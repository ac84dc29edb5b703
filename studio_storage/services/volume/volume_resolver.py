"""
Volume Resolver - finds the mounted NAS path.

The accessibility check inspects permission bits (os.access) by default, so
a share with misleading ACLs can pass here and still fail on the first real
write. Set verify_write_access to probe with an actual test file instead.
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional
from uuid import uuid4

import aiofiles
import aiofiles.os

from ..config_store import ConfigStore

PROBE_FILE_PREFIX = ".studio_storage_probe_"


class VolumeResolver:
    def __init__(
        self,
        config_store: ConfigStore,
        platform_name: str,
        probe_timeout_seconds: float = 5.0,
        verify_write_access: bool = False,
    ):
        self._config_store = config_store
        self._platform_name = platform_name
        self._probe_timeout = probe_timeout_seconds
        self._verify_write_access = verify_write_access

    @property
    def platform_name(self) -> str:
        return self._platform_name

    def get_primary_path(self) -> str:
        return self._config_store.config.get_primary_mount_path(self._platform_name)

    def get_candidate_paths(self) -> List[str]:
        """Primary path first, then the configured alternatives in order."""
        candidates = []
        for path in [self.get_primary_path(), *self._config_store.config.alternative_paths]:
            if path and path not in candidates:
                candidates.append(path)
        return candidates

    async def resolve_root(self) -> Optional[str]:
        """First accessible candidate, or None when the local cache must be used."""
        for candidate in self.get_candidate_paths():
            if await self.is_path_accessible(candidate):
                logging.debug(f"NAS resolved at {candidate}")
                return candidate

        logging.info("NAS not found, local cache will be used")
        return None

    async def find_existing_paths(self, paths: List[str]) -> List[str]:
        found = []
        for path in paths:
            if await self._run_probe(lambda p=path: os.path.exists(p), path):
                found.append(path)
        return found

    def compose_network_root(self, base_path: str) -> str:
        """NAS base + photo folder (unless already part of the base) + app subfolder."""
        config = self._config_store.config
        root = Path(base_path)
        photo_folder = config.photo_folder.strip("/\\")
        if photo_folder and root.name != photo_folder:
            root = root / photo_folder
        app_subfolder = config.app_subfolder.strip("/\\")
        if app_subfolder:
            root = root / app_subfolder
        return str(root)

    async def is_path_accessible(self, path: str) -> bool:
        """Path exists and is readable + writable. Never raises."""
        if not path:
            return False

        # UNC paths cannot be checked with access bits
        if path.startswith("\\\\"):
            return await self._run_probe(lambda: os.path.exists(path), path)

        def _sync_check() -> bool:
            if not os.path.isdir(path):
                return False
            return os.access(path, os.R_OK | os.W_OK)

        if not await self._run_probe(_sync_check, path):
            logging.debug(f"Path not accessible: {path}")
            return False

        if self._verify_write_access:
            return await self._check_write_access(path)
        return True

    async def _run_probe(self, check, path: str) -> bool:
        try:
            return await asyncio.wait_for(asyncio.to_thread(check), timeout=self._probe_timeout)
        except asyncio.TimeoutError:
            logging.warning(f"Accessibility check timed out for {path}")
            return False
        except OSError as e:
            logging.debug(f"Accessibility check failed for {path}: {e}")
            return False

    async def _check_write_access(self, directory: str) -> bool:
        test_file_path = os.path.join(directory, f"{PROBE_FILE_PREFIX}{uuid4().hex}.tmp")

        async def _write_and_remove() -> None:
            async with aiofiles.open(test_file_path, "w") as f:
                await f.write("storage_write_test")
            await aiofiles.os.remove(test_file_path)

        try:
            await asyncio.wait_for(_write_and_remove(), timeout=self._probe_timeout)
            logging.debug(f"Write access verified for {directory}")
            return True
        except (OSError, asyncio.TimeoutError) as e:
            logging.debug(f"Write access check failed for {directory}: {e!r}")
            await self._cleanup_probe_file(test_file_path)
            return False

    async def _cleanup_probe_file(self, test_file_path: str) -> None:
        try:
            if await aiofiles.os.path.exists(test_file_path):
                await aiofiles.os.remove(test_file_path)
        except OSError as e:
            logging.warning(f"Could not clean up probe file {test_file_path}: {e}")
