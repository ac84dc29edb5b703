"""
Cache Sync Reconciler - copies session files from the local cache to the NAS.

One-way and additive: files missing on the NAS are copied, files already
there are left alone, and the local cache is never modified or cleared.
"""

import asyncio
import logging
import os
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import aiofiles.os

from ..config_store import ConfigStore
from ..sessions.session_naming import SUBFOLDERS, session_relative_path
from ..volume.connectivity_monitor import ConnectivityMonitor
from ...config import Settings
from ...models import BookingDetails, CacheStatus, SyncFileError, SyncResult
from ...utils.file_operations import copy_file_verified, format_bytes_human_readable

TEMP_SUFFIX = ".tmp"


def _walk_files(directory: Path) -> List[Path]:
    """Files below directory, relative to it, sorted."""
    files = []
    for current, _dirs, names in os.walk(directory):
        for name in names:
            files.append((Path(current) / name).relative_to(directory))
    return sorted(files)


def _directory_size(directory: str) -> int:
    total = 0
    for current, _dirs, names in os.walk(directory):
        for name in names:
            try:
                total += os.path.getsize(os.path.join(current, name))
            except OSError:
                continue
    return total


def _list_cached_sessions(cache_root: Path) -> List[Path]:
    """Session folders laid out as {YYYY}/{MM}/{folder}, relative to the cache root."""
    sessions = []
    for year_dir in sorted(cache_root.iterdir()):
        if not (year_dir.is_dir() and year_dir.name.isdigit()):
            continue
        for month_dir in sorted(year_dir.iterdir()):
            if not (month_dir.is_dir() and month_dir.name.isdigit()):
                continue
            for session_dir in sorted(month_dir.iterdir()):
                if session_dir.is_dir():
                    sessions.append(session_dir.relative_to(cache_root))
    return sessions


class CacheSyncReconciler:
    def __init__(
        self,
        settings: Settings,
        config_store: ConfigStore,
        monitor: ConnectivityMonitor,
    ):
        self._settings = settings
        self._config_store = config_store
        self._monitor = monitor
        self._chunk_size = settings.copy_chunk_size_kb * 1024
        self._session_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    @property
    def cache_root(self) -> Path:
        return Path(self._config_store.config.local_cache_path)

    async def sync_cache_to_nas(
        self,
        client_name: str,
        session_id: str,
        date_str: Union[str, date, None] = None,
        booking_details: Optional[BookingDetails] = None,
    ) -> SyncResult:
        """Reconcile one session. date_str defaults to today."""
        nas_root = await self._fresh_network_root()
        if nas_root is None:
            return SyncResult(success=False, error="NAS not available")

        try:
            relative_path = session_relative_path(client_name, session_id, date_str, booking_details)
        except ValueError as e:
            return SyncResult(success=False, error=f"Invalid date '{date_str}': {e}")

        return await self._sync_session(relative_path, Path(nas_root))

    async def sync_all_cached_sessions(self) -> SyncResult:
        """Reconcile every session folder found in the local cache."""
        nas_root = await self._fresh_network_root()
        if nas_root is None:
            return SyncResult(success=False, error="NAS not available")

        if not await aiofiles.os.path.isdir(self.cache_root):
            return SyncResult(success=True, message="No cache found")

        try:
            sessions = await asyncio.to_thread(_list_cached_sessions, self.cache_root)
        except OSError as e:
            logging.error(f"Cannot list cached sessions in {self.cache_root}: {e}")
            return SyncResult(success=False, error=f"Cannot read local cache: {e}")

        total = SyncResult(success=True)
        for relative_path in sessions:
            result = await self._sync_session(relative_path, Path(nas_root))
            total.transferred += result.transferred
            total.skipped += result.skipped
            total.conflicts += result.conflicts
            total.errors.extend(result.errors)
            if not result.success:
                total.success = False
                total.error = result.error

        total.message = f"Synced {len(sessions)} cached sessions. Cache preserved for safety."
        logging.info(
            f"Cache sync of {len(sessions)} sessions: {total.transferred} transferred, "
            f"{total.skipped} skipped, {total.conflicts} conflicts, {len(total.errors)} errors"
        )
        return total

    async def has_cached_sessions(self) -> bool:
        if not await aiofiles.os.path.isdir(self.cache_root):
            return False
        try:
            return bool(await asyncio.to_thread(_list_cached_sessions, self.cache_root))
        except OSError as e:
            logging.warning(f"Cannot list cached sessions in {self.cache_root}: {e}")
            return False

    async def _fresh_network_root(self) -> Optional[str]:
        status = await self._monitor.refresh_status()
        if not status.connected or not status.path:
            logging.info("Cache sync skipped: NAS not available")
            return None
        return self._monitor.resolver.compose_network_root(status.path)

    async def _sync_session(self, relative_path: Path, nas_root: Path) -> SyncResult:
        cache_session = self.cache_root / relative_path
        nas_session = nas_root / relative_path

        if cache_session.resolve() == nas_session.resolve():
            return SyncResult(success=True, message="Cache and NAS are the same folder")

        async with self._session_locks[str(relative_path)]:
            if not await aiofiles.os.path.isdir(cache_session):
                return SyncResult(success=True, message="No cache found")

            result = SyncResult(success=True)
            try:
                for folder in SUBFOLDERS:
                    await aiofiles.os.makedirs(nas_session / folder, exist_ok=True)
                    await self._sync_folder(cache_session / folder, nas_session / folder, folder, result)
            except OSError as e:
                logging.error(f"Cache sync of {relative_path} aborted: {e}")
                result.success = False
                result.error = str(e)
                return result

            result.message = "Sync completed. Cache preserved for safety."
            logging.info(
                f"Sync of {relative_path}: {result.transferred} transferred, {result.skipped} skipped, "
                f"{result.conflicts} conflicts, {len(result.errors)} errors"
            )
            return result

    async def _sync_folder(
        self, cache_folder: Path, nas_folder: Path, folder: str, result: SyncResult
    ) -> None:
        if not await aiofiles.os.path.isdir(cache_folder):
            return

        for relative_file in await asyncio.to_thread(_walk_files, cache_folder):
            if relative_file.suffix == TEMP_SUFFIX:
                # Leftover of an interrupted copy, never a finished file
                logging.info(f"Sync skipped temp file {folder}/{relative_file}")
                result.skipped += 1
                continue

            source = cache_folder / relative_file
            dest = nas_folder / relative_file
            try:
                action, reason = await self._reconcile_file(source, dest)
            except (OSError, ValueError) as e:
                logging.warning(f"Sync failed for {folder}/{relative_file}: {e}")
                result.errors.append(
                    SyncFileError(file=str(relative_file), folder=folder, error=str(e))
                )
                continue

            if action == "transferred":
                result.transferred += 1
            elif action == "skipped":
                result.skipped += 1
            else:
                logging.warning(f"Sync conflict for {folder}/{relative_file}: {reason}")
                result.conflicts += 1

    async def _reconcile_file(self, source: Path, dest: Path) -> Tuple[str, str]:
        if await aiofiles.os.path.exists(dest):
            source_size = (await aiofiles.os.stat(source)).st_size
            dest_size = (await aiofiles.os.stat(dest)).st_size
            if source_size == dest_size:
                return "skipped", ""
            return "conflict", f"Size differs on NAS (cache={source_size}, nas={dest_size}); left untouched"

        await aiofiles.os.makedirs(dest.parent, exist_ok=True)
        await copy_file_verified(source, dest, self._chunk_size)
        return "transferred", ""

    async def get_cache_status(self) -> CacheStatus:
        nas_available = await self._monitor.is_network_available()
        cache_path = str(self.cache_root)

        cache_size = 0
        if await aiofiles.os.path.isdir(cache_path):
            cache_size = await asyncio.to_thread(_directory_size, cache_path)

        return CacheStatus(
            using_cache=not nas_available,
            nas_available=nas_available,
            cache_path=cache_path,
            cache_size=format_bytes_human_readable(cache_size),
            cache_size_bytes=cache_size,
            nas_path=self._monitor.get_network_root(),
        )
