import logging
from pathlib import Path

import aiofiles
import aiofiles.os


def validate_file_sizes(source_size: int, dest_size: int) -> bool:
    return source_size == dest_size


def create_temp_file_path(dest_path: Path) -> Path:
    return dest_path.with_suffix(dest_path.suffix + ".tmp")


def format_bytes_human_readable(bytes_value: int) -> str:
    if bytes_value < 1024:
        return f"{bytes_value} B"
    elif bytes_value < 1024 * 1024:
        kb = bytes_value / 1024
        return f"{kb:.1f} KB"
    elif bytes_value < 1024 * 1024 * 1024:
        mb = bytes_value / (1024 * 1024)
        return f"{mb:.1f} MB"
    else:
        gb = bytes_value / (1024 * 1024 * 1024)
        return f"{gb:.1f} GB"


def has_extension(path: Path, extensions: frozenset) -> bool:
    return path.suffix.lower().lstrip(".") in extensions


async def copy_file_verified(source: Path, dest: Path, chunk_size: int = 2 * 1024 * 1024) -> int:
    """
    Copy source to a temp file next to dest, verify the size and rename.

    Returns the number of bytes copied. Raises OSError on I/O failure and
    ValueError on a size mismatch; the temp file is removed in both cases.
    """
    temp_path = create_temp_file_path(dest)
    bytes_copied = 0

    try:
        async with aiofiles.open(source, "rb") as src:
            async with aiofiles.open(temp_path, "wb") as dst:
                while True:
                    chunk = await src.read(chunk_size)
                    if not chunk:
                        break
                    await dst.write(chunk)
                    bytes_copied += len(chunk)

        source_size = (await aiofiles.os.stat(source)).st_size
        temp_size = (await aiofiles.os.stat(temp_path)).st_size
        if not validate_file_sizes(source_size, temp_size):
            raise ValueError(f"File size mismatch: source={source_size}, dest={temp_size}")

        await aiofiles.os.replace(temp_path, dest)
        return bytes_copied

    except (OSError, ValueError):
        await _remove_temp_file(temp_path)
        raise


async def _remove_temp_file(temp_path: Path) -> None:
    try:
        if await aiofiles.os.path.exists(temp_path):
            await aiofiles.os.remove(temp_path)
            logging.debug(f"Cleaned up temp file after error: {temp_path}")
    except OSError as e:
        logging.warning(f"Could not remove temp file {temp_path}: {e}")
