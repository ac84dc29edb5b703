from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StorageMode(str, Enum):
    """Which storage root is active for new session folders"""

    NETWORK = "NETWORK"  # NAS mounted and accessible
    LOCAL_CACHE = "LOCAL_CACHE"  # Fallback folder on the local disk


class StorageRoot(BaseModel):
    """The storage root selected for the current operation."""

    mode: StorageMode = Field(..., description="Network or local cache")
    path: str = Field(..., description="Absolute path to the root folder")

    @property
    def is_local_cache(self) -> bool:
        return self.mode == StorageMode.LOCAL_CACHE


class NetworkStatus(BaseModel):
    """Result of a (possibly cached) NAS availability probe."""

    connected: bool
    path: Optional[str] = Field(
        default=None, description="Resolved NAS root when connected"
    )
    cached: bool = Field(
        default=False, description="True when served from the status cache"
    )
    checked_at: datetime = Field(default_factory=datetime.now)


class NetworkAvailability(BaseModel):
    """
    Detailed NAS report for settings/diagnostic screens.

    Always based on a fresh probe, never on the status cache.
    """

    connected: bool
    base_path: Optional[str] = None
    photo_folder_path: Optional[str] = None
    app_folder_path: Optional[str] = None
    is_local_cache: bool
    local_cache_path: str
    smb_url: str
    photo_folder: str = ""
    app_subfolder: str = ""
    platform: str
    found_paths: List[str] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=datetime.now)


class SessionFolders(BaseModel):
    root: str
    raw: str
    selected: str
    edited: str
    final: str


class SessionDirectoryResult(BaseModel):
    success: bool
    session_path: Optional[str] = None
    folders: Optional[SessionFolders] = None
    using_cache: bool = False
    error: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "session_path": "/Volumes/Gallery/2026/02/2026-02-03_Ahmed",
                "folders": {
                    "root": "/Volumes/Gallery/2026/02/2026-02-03_Ahmed",
                    "raw": "/Volumes/Gallery/2026/02/2026-02-03_Ahmed/01_RAW",
                    "selected": "/Volumes/Gallery/2026/02/2026-02-03_Ahmed/02_SELECTED",
                    "edited": "/Volumes/Gallery/2026/02/2026-02-03_Ahmed/03_EDITED",
                    "final": "/Volumes/Gallery/2026/02/2026-02-03_Ahmed/04_FINAL",
                },
                "using_cache": False,
            }
        }
    )


class FolderStats(BaseModel):
    """Image count per session subfolder."""

    raw: int = Field(default=0, ge=0)
    selected: int = Field(default=0, ge=0)
    edited: int = Field(default=0, ge=0)
    final: int = Field(default=0, ge=0)


class SyncFileError(BaseModel):
    file: str = Field(..., description="File name inside the subfolder")
    folder: str = Field(..., description="Subfolder, e.g. 01_RAW")
    error: str


class SyncResult(BaseModel):
    """
    Outcome of one cache -> NAS reconciliation.

    cache_kept is always True: reconciliation never clears the local cache.
    """

    success: bool
    transferred: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    conflicts: int = Field(
        default=0,
        ge=0,
        description="Files present on both sides with different sizes (left untouched)",
    )
    errors: List[SyncFileError] = Field(default_factory=list)
    cache_kept: bool = True
    message: Optional[str] = None
    error: Optional[str] = None


class CacheStatus(BaseModel):
    using_cache: bool
    nas_available: bool
    cache_path: str
    cache_size: str = Field(..., description="Human readable, e.g. '1.5 GB'")
    cache_size_bytes: int = Field(default=0, ge=0)
    nas_path: Optional[str] = None


class MountResult(BaseModel):
    """Result shape shared by mount, auto-mount and connect operations."""

    success: bool
    path: Optional[str] = None
    method: Optional[str] = Field(
        default=None,
        description="already-mounted, existing-mount-detected, existing-mount-root or auto-mounted",
    )
    message: Optional[str] = None
    action: Optional[str] = None
    already_connected: bool = False
    error: Optional[str] = None
    attempts: List[str] = Field(default_factory=list)


class DetectResult(BaseModel):
    found: bool
    path: Optional[str] = None
    attempts: List[str] = Field(default_factory=list)


class CopyBatchResult(BaseModel):
    success: bool = True
    copied: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    errors: List[str] = Field(default_factory=list)


class ImageFileInfo(BaseModel):
    name: str
    path: str
    size: int = Field(default=0, ge=0)
    modified: datetime
    folder: str


class BookingExtraDetails(BaseModel):
    """Category specific booking fields (wedding party names, timing, notes)."""

    groom_name: Optional[str] = None
    bride_name: Optional[str] = None
    start_time: Optional[str] = None
    photo_count: Optional[int] = None
    duration: Optional[int] = Field(default=None, description="Minutes")
    notes: Optional[str] = None


class BookingDetails(BaseModel):
    """
    Booking data passed in by the booking UI when a session folder is created.

    Only used to name wedding folders and to write the booking metadata file.
    """

    id: Optional[str] = None
    title: Optional[str] = None
    shoot_date: Optional[str] = None
    total_amount: float = 0.0
    paid_amount: float = 0.0
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    package_name: Optional[str] = None
    status: Optional[str] = None
    assigned_to_name: Optional[str] = None
    created_by_name: Optional[str] = None
    details: BookingExtraDetails = Field(default_factory=BookingExtraDetails)

    @property
    def balance(self) -> float:
        return self.total_amount - self.paid_amount

    @property
    def is_wedding(self) -> bool:
        return bool(self.details.groom_name and self.details.bride_name)


class CreateSessionRequest(BaseModel):
    client_name: str
    session_id: str
    date: str = Field(..., description="ISO date, e.g. 2026-02-03")
    booking_details: Optional[BookingDetails] = None


class CopyToSelectedRequest(BaseModel):
    session_path: str
    file_names: List[str]


class SubfolderTarget(str, Enum):
    """Session subfolder a file can be copied into"""

    SELECTED = "selected"
    EDITED = "edited"
    FINAL = "final"


class SubfolderCopyRequest(BaseModel):
    session_path: str
    source_path: str
    target: SubfolderTarget
    new_file_name: Optional[str] = Field(
        default=None, description="Keep the source name when omitted (ignored for selected)"
    )


class SavedFileResult(BaseModel):
    success: bool = True
    path: str


class SyncRequest(BaseModel):
    client_name: str
    session_id: str
    date: Optional[str] = None
    booking_details: Optional[BookingDetails] = None

