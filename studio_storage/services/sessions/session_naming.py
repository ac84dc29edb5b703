"""
Session folder naming.

One naming scheme is used everywhere a session folder is computed: creation,
lookups and cache reconciliation all go through session_relative_path, so a
lookup always finds what creation produced.
"""

import re
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Optional, Union

from ...models import BookingDetails

RAW_FOLDER = "01_RAW"
SELECTED_FOLDER = "02_SELECTED"
EDITED_FOLDER = "03_EDITED"
FINAL_FOLDER = "04_FINAL"

SUBFOLDERS = (RAW_FOLDER, SELECTED_FOLDER, EDITED_FOLDER, FINAL_FOLDER)

# Extensions counted by folder stats
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "raw", "cr2", "arw", "heic", "webp"})

# Extensions listed for the editor
EDITOR_IMAGE_EXTENSIONS = IMAGE_EXTENSIONS | {"tiff", "psd"}

WEDDING_CONNECTOR = "_و_"
MAX_NAME_LENGTH = 30

_DISALLOWED_CHARS = re.compile(r"[^a-zA-Z0-9\u0600-\u06FF\s]")
_WHITESPACE_RUN = re.compile(r"\s+")


def sanitize_folder_name(name: str) -> str:
    """Keep ASCII alphanumerics, Arabic letters and whitespace; whitespace runs become '_'."""
    cleaned = _DISALLOWED_CHARS.sub("", name or "")
    cleaned = _WHITESPACE_RUN.sub("_", cleaned)
    return cleaned[:MAX_NAME_LENGTH]


def build_display_name(client_name: str, booking_details: Optional[BookingDetails] = None) -> str:
    if booking_details is None:
        return client_name

    groom_name = booking_details.details.groom_name
    bride_name = booking_details.details.bride_name
    if groom_name and bride_name:
        return f"{groom_name}{WEDDING_CONNECTOR}{bride_name}"
    if groom_name:
        return groom_name
    if bride_name:
        return bride_name
    return client_name


def parse_session_date(date_str: Union[str, date, None]) -> date:
    """
    Accept an ISO date or datetime string; None means today.

    Raises ValueError for anything else.
    """
    if date_str is None or date_str == "":
        return date.today()
    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str

    value = date_str.strip()
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        # Full timestamps such as 2026-02-03T10:00:00Z
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()


def session_folder_name(
    client_name: str,
    session_id: str,
    session_date: date,
    booking_details: Optional[BookingDetails] = None,
) -> str:
    sanitized = sanitize_folder_name(build_display_name(client_name, booking_details))
    if not sanitized:
        # Names made only of punctuation still need a unique suffix
        sanitized = sanitize_folder_name(session_id) or "session"
    return f"{session_date.isoformat()}_{sanitized}"


def session_relative_path(
    client_name: str,
    session_id: str,
    date_str: Union[str, date, None],
    booking_details: Optional[BookingDetails] = None,
) -> Path:
    """YYYY/MM/YYYY-MM-DD_name, relative to a storage root."""
    session_date = parse_session_date(date_str)
    folder_name = session_folder_name(client_name, session_id, session_date, booking_details)
    return Path(f"{session_date.year:04d}") / f"{session_date.month:02d}" / folder_name


def folder_structure(session_path: Union[str, Path]) -> Dict[str, str]:
    root = Path(session_path)
    return {
        "root": str(root),
        "raw": str(root / RAW_FOLDER),
        "selected": str(root / SELECTED_FOLDER),
        "edited": str(root / EDITED_FOLDER),
        "final": str(root / FINAL_FOLDER),
    }
