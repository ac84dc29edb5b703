"""
Directory Provisioner - creates and inspects per-booking session folders.

Layout: {root}/{YYYY}/{MM}/{YYYY-MM-DD}_{name}/{01_RAW|02_SELECTED|03_EDITED|04_FINAL}
"""

import asyncio
import logging
import os
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Tuple, Union

import aiofiles
import aiofiles.os

from .session_documents import (
    BOOKING_DETAILS_FILE_NAME,
    README_FILE_NAME,
    render_booking_details,
    render_readme,
)
from .session_naming import (
    EDITED_FOLDER,
    EDITOR_IMAGE_EXTENSIONS,
    FINAL_FOLDER,
    IMAGE_EXTENSIONS,
    RAW_FOLDER,
    SELECTED_FOLDER,
    SUBFOLDERS,
    folder_structure,
    session_relative_path,
)
from ..config_store import ConfigStore
from ..volume.connectivity_monitor import ConnectivityMonitor
from ...config import Settings
from ...core.exceptions import DirectoryCreationError, PathResolutionError
from ...models import (
    BookingDetails,
    CopyBatchResult,
    FolderStats,
    ImageFileInfo,
    SessionDirectoryResult,
    SessionFolders,
    StorageRoot,
)
from ...utils.file_operations import copy_file_verified, has_extension

DateInput = Union[str, date, None]


def _split_entries(path: str) -> Tuple[List[str], List[str]]:
    files, directories = [], []
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                directories.append(entry.path)
            elif entry.is_file():
                files.append(entry.name)
    return files, directories


class DirectoryProvisioner:
    def __init__(
        self,
        settings: Settings,
        config_store: ConfigStore,
        monitor: ConnectivityMonitor,
    ):
        self._settings = settings
        self._config_store = config_store
        self._monitor = monitor
        self._scan_semaphore = asyncio.Semaphore(settings.max_concurrent_scans)
        self._chunk_size = settings.copy_chunk_size_kb * 1024

    async def create_session_directory(
        self,
        client_name: str,
        session_id: str,
        date_str: DateInput,
        booking_details: Optional[BookingDetails] = None,
    ) -> SessionDirectoryResult:
        """
        Create the session folder on the active root.

        Idempotent: existing folders are kept and README is rewritten. Partial
        folders are not rolled back when a later step fails.
        """
        try:
            root = await self._monitor.get_active_root()
            relative_path = session_relative_path(client_name, session_id, date_str, booking_details)
        except PathResolutionError as e:
            logging.error(f"Cannot create session folder for {client_name}: {e}")
            return SessionDirectoryResult(success=False, error=str(e))
        except ValueError as e:
            return SessionDirectoryResult(success=False, error=f"Invalid date '{date_str}': {e}")

        session_path = Path(root.path) / relative_path
        logging.info(
            f"Creating session folder {session_path} "
            f"({'local cache' if root.is_local_cache else 'NAS'})"
        )

        try:
            created_on = str(date_str) if date_str else date.today().isoformat()
            await self._provision(session_path, client_name, session_id, created_on, booking_details)
        except DirectoryCreationError as e:
            logging.error(str(e))
            return SessionDirectoryResult(
                success=False,
                session_path=str(session_path),
                using_cache=root.is_local_cache,
                error=str(e),
            )

        return SessionDirectoryResult(
            success=True,
            session_path=str(session_path),
            folders=SessionFolders(**folder_structure(session_path)),
            using_cache=root.is_local_cache,
        )

    async def _provision(
        self,
        session_path: Path,
        client_name: str,
        session_id: str,
        date_str: str,
        booking_details: Optional[BookingDetails],
    ) -> None:
        try:
            await aiofiles.os.makedirs(session_path, exist_ok=True)
            await asyncio.gather(
                *(aiofiles.os.makedirs(session_path / name, exist_ok=True) for name in SUBFOLDERS)
            )

            async with aiofiles.open(session_path / README_FILE_NAME, "w", encoding="utf-8") as f:
                await f.write(render_readme(client_name, session_id, date_str))

            if booking_details is not None:
                content = render_booking_details(booking_details, client_name, session_id, date_str)
                async with aiofiles.open(
                    session_path / BOOKING_DETAILS_FILE_NAME, "w", encoding="utf-8"
                ) as f:
                    await f.write(content)
        except OSError as e:
            raise DirectoryCreationError(str(session_path), e.strerror or str(e)) from e

    async def check_session_exists(
        self,
        client_name: str,
        session_id: str,
        date_str: DateInput,
        booking_details: Optional[BookingDetails] = None,
    ) -> bool:
        """Looks on both the NAS and the local cache."""
        try:
            relative_path = session_relative_path(client_name, session_id, date_str, booking_details)
        except ValueError:
            return False

        roots = [self._config_store.config.local_cache_path]
        status = await self._monitor.get_status()
        if status.connected and status.path:
            roots.insert(0, self._monitor.resolver.compose_network_root(status.path))

        for root in roots:
            if await aiofiles.os.path.isdir(Path(root) / relative_path):
                return True
        return False

    async def get_session_path(
        self,
        client_name: str,
        session_id: str,
        date_str: DateInput,
        booking_details: Optional[BookingDetails] = None,
    ) -> str:
        """Session path on the active root, without creating anything."""
        root: StorageRoot = await self._monitor.get_active_root()
        relative_path = session_relative_path(client_name, session_id, date_str, booking_details)
        return str(Path(root.path) / relative_path)

    def get_folder_structure(self, session_path: str) -> SessionFolders:
        return SessionFolders(**folder_structure(session_path))

    async def get_folder_stats(self, session_path: str) -> FolderStats:
        folders = self.get_folder_structure(session_path)
        raw, selected, edited, final = await asyncio.gather(
            self._count_images(folders.raw),
            self._count_images(folders.selected),
            self._count_images(folders.edited),
            self._count_images(folders.final),
        )
        return FolderStats(raw=raw, selected=selected, edited=edited, final=final)

    async def _count_images(self, directory: str) -> int:
        try:
            async with self._scan_semaphore:
                files, subdirectories = await asyncio.to_thread(_split_entries, directory)
        except OSError:
            return 0

        count = sum(1 for name in files if has_extension(Path(name), IMAGE_EXTENSIONS))
        for subdirectory in subdirectories:
            count += await self._count_images(subdirectory)
        return count

    async def move_to_selected(self, from_path: str, session_path: str) -> str:
        """Copy into 02_SELECTED; the source stays where it is."""
        return await self._copy_into(from_path, session_path, SELECTED_FOLDER)

    async def move_to_edited(
        self, from_path: str, session_path: str, new_file_name: Optional[str] = None
    ) -> str:
        return await self._copy_into(from_path, session_path, EDITED_FOLDER, new_file_name)

    async def copy_to_final(
        self, from_path: str, session_path: str, new_file_name: Optional[str] = None
    ) -> str:
        return await self._copy_into(from_path, session_path, FINAL_FOLDER, new_file_name)

    async def _copy_into(
        self,
        from_path: str,
        session_path: str,
        folder: str,
        new_file_name: Optional[str] = None,
    ) -> str:
        source = Path(from_path)
        dest_dir = Path(session_path) / folder
        dest = dest_dir / (new_file_name or source.name)

        await aiofiles.os.makedirs(dest_dir, exist_ok=True)
        await copy_file_verified(source, dest, self._chunk_size)
        logging.debug(f"Copied {source.name} into {folder}")
        return str(dest)

    async def copy_to_selected(self, session_path: str, file_names: List[str]) -> CopyBatchResult:
        """Copy picked files from 01_RAW to 02_SELECTED, collecting per-file failures."""
        result = CopyBatchResult()
        raw_dir = Path(session_path) / RAW_FOLDER
        selected_dir = Path(session_path) / SELECTED_FOLDER
        await aiofiles.os.makedirs(selected_dir, exist_ok=True)

        for file_name in file_names:
            if Path(file_name).name != file_name:
                result.failed += 1
                result.errors.append(f"Invalid file name: {file_name}")
                continue

            source = raw_dir / file_name
            if not await aiofiles.os.path.isfile(source):
                result.failed += 1
                result.errors.append(f"Not found: {file_name}")
                continue

            try:
                await copy_file_verified(source, selected_dir / file_name, self._chunk_size)
                result.copied += 1
            except (OSError, ValueError) as e:
                result.failed += 1
                result.errors.append(f"{file_name}: {e}")

        if result.failed:
            logging.warning(f"copy_to_selected: {result.failed} of {len(file_names)} files failed")
        return result

    def get_original_image_path(
        self, session_path: str, image_file_name: str, source_folder: str = RAW_FOLDER
    ) -> str:
        folder = source_folder if source_folder in SUBFOLDERS else RAW_FOLDER
        return str(Path(session_path) / folder / image_file_name)

    async def get_original_images(
        self, session_path: str, folder: str = RAW_FOLDER
    ) -> List[ImageFileInfo]:
        """Images directly inside one subfolder, sorted by name."""
        target = Path(session_path) / (folder if folder in SUBFOLDERS else RAW_FOLDER)
        if not await aiofiles.os.path.isdir(target):
            return []

        images = []
        try:
            for name in sorted(await aiofiles.os.listdir(target)):
                file_path = target / name
                if not has_extension(file_path, EDITOR_IMAGE_EXTENSIONS):
                    continue
                if not await aiofiles.os.path.isfile(file_path):
                    continue
                stat = await aiofiles.os.stat(file_path)
                images.append(
                    ImageFileInfo(
                        name=name,
                        path=str(file_path),
                        size=stat.st_size,
                        modified=datetime.fromtimestamp(stat.st_mtime),
                        folder=target.name,
                    )
                )
        except OSError as e:
            logging.error(f"Error listing images in {target}: {e}")
            return []

        return images

    async def save_edited_image(
        self,
        session_path: str,
        original_file_name: str,
        data: bytes,
        output_format: str = "jpg",
    ) -> str:
        """Write editor output as {name}_edited.{format} into 03_EDITED."""
        edited_dir = Path(session_path) / EDITED_FOLDER
        await aiofiles.os.makedirs(edited_dir, exist_ok=True)

        edited_path = edited_dir / f"{Path(original_file_name).stem}_edited.{output_format}"
        async with aiofiles.open(edited_path, "wb") as f:
            await f.write(data)

        logging.info(f"Edited image saved: {edited_path}")
        return str(edited_path)
