from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from ..core.exceptions import PathResolutionError
from ..dependencies import ServiceContainer, get_services
from ..models import (
    BookingDetails,
    BookingExtraDetails,
    CopyBatchResult,
    CopyToSelectedRequest,
    CreateSessionRequest,
    FolderStats,
    ImageFileInfo,
    SavedFileResult,
    SessionDirectoryResult,
    SubfolderCopyRequest,
    SubfolderTarget,
)
from ..services.sessions.session_naming import RAW_FOLDER

router = APIRouter(prefix="/api", tags=["sessions"])


def _lookup_booking(groom_name: Optional[str], bride_name: Optional[str]) -> Optional[BookingDetails]:
    """Wedding folders are named after the couple, so lookups need the same names."""
    if not groom_name and not bride_name:
        return None
    return BookingDetails(
        details=BookingExtraDetails(groom_name=groom_name, bride_name=bride_name)
    )


@router.post("/sessions", response_model=SessionDirectoryResult)
async def create_session(
    request: CreateSessionRequest,
    services: ServiceContainer = Depends(get_services),
) -> SessionDirectoryResult:
    """Create (or re-confirm) the session folder on the active storage root."""
    return await services.provisioner.create_session_directory(
        request.client_name,
        request.session_id,
        request.date,
        request.booking_details,
    )


@router.get("/sessions/exists")
async def session_exists(
    client_name: str,
    session_id: str,
    date: str,
    groom_name: Optional[str] = None,
    bride_name: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> dict:
    exists = await services.provisioner.check_session_exists(
        client_name, session_id, date, _lookup_booking(groom_name, bride_name)
    )
    return {"exists": exists}


@router.get("/sessions/path")
async def session_path(
    client_name: str,
    session_id: str,
    date: str,
    groom_name: Optional[str] = None,
    bride_name: Optional[str] = None,
    services: ServiceContainer = Depends(get_services),
) -> dict:
    """
    HTTP Status Codes:
        200: Path computed on the active root
        400: Date could not be parsed
        503: NAS unreachable and local cache disabled
    """
    try:
        path = await services.provisioner.get_session_path(
            client_name, session_id, date, _lookup_booking(groom_name, bride_name)
        )
    except PathResolutionError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Invalid date: {e}")

    return {"success": True, "session_path": path}


@router.get("/sessions/stats", response_model=FolderStats)
async def session_stats(
    session_path: str,
    services: ServiceContainer = Depends(get_services),
) -> FolderStats:
    return await services.provisioner.get_folder_stats(session_path)


@router.post("/sessions/copy-to-selected", response_model=CopyBatchResult)
async def copy_to_selected(
    request: CopyToSelectedRequest,
    services: ServiceContainer = Depends(get_services),
) -> CopyBatchResult:
    return await services.provisioner.copy_to_selected(request.session_path, request.file_names)


@router.get("/sessions/images", response_model=List[ImageFileInfo])
async def session_images(
    session_path: str,
    folder: str = Query(default=RAW_FOLDER),
    services: ServiceContainer = Depends(get_services),
) -> List[ImageFileInfo]:
    return await services.provisioner.get_original_images(session_path, folder)


@router.get("/sessions/original-path")
async def original_image_path(
    session_path: str,
    image_file_name: str,
    source_folder: str = Query(default=RAW_FOLDER),
    services: ServiceContainer = Depends(get_services),
) -> dict:
    return {
        "path": services.provisioner.get_original_image_path(
            session_path, image_file_name, source_folder
        )
    }


@router.post("/sessions/copy", response_model=SavedFileResult)
async def copy_into_subfolder(
    request: SubfolderCopyRequest,
    services: ServiceContainer = Depends(get_services),
) -> SavedFileResult:
    """
    Copy one file into 02_SELECTED, 03_EDITED or 04_FINAL. The source is kept.

    HTTP Status Codes:
        200: File copied and verified
        400: new_file_name is not a bare file name
        404: Source file not found
        500: Copy failed
    """
    new_file_name = request.new_file_name
    if new_file_name and Path(new_file_name).name != new_file_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file name: {new_file_name}",
        )

    provisioner = services.provisioner
    try:
        if request.target == SubfolderTarget.SELECTED:
            path = await provisioner.move_to_selected(request.source_path, request.session_path)
        elif request.target == SubfolderTarget.EDITED:
            path = await provisioner.move_to_edited(
                request.source_path, request.session_path, new_file_name
            )
        else:
            path = await provisioner.copy_to_final(
                request.source_path, request.session_path, new_file_name
            )
    except FileNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Not found: {request.source_path}",
        )
    except (OSError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Copy failed: {e}",
        )

    return SavedFileResult(path=path)


@router.post("/sessions/edited", response_model=SavedFileResult)
async def save_edited_image(
    request: Request,
    session_path: str,
    original_file_name: str,
    output_format: str = Query(default="jpg"),
    services: ServiceContainer = Depends(get_services),
) -> SavedFileResult:
    """
    Store editor output sent as the raw request body in 03_EDITED.

    HTTP Status Codes:
        200: Image written as {name}_edited.{format}
        400: Empty body or invalid format
        500: Write failed
    """
    if not output_format.isalnum():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid output format: {output_format}",
        )

    data = await request.body()
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty image data")

    try:
        path = await services.provisioner.save_edited_image(
            session_path, original_file_name, data, output_format.lower()
        )
    except OSError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Could not save edited image: {e}",
        )

    return SavedFileResult(path=path)
