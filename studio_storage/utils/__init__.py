"""
Utilities package for the studio storage core.

Pure helpers plus the verified async file copy shared by the session
provisioner and the cache reconciler.
"""

from .file_operations import (
    copy_file_verified,
    create_temp_file_path,
    format_bytes_human_readable,
    has_extension,
    validate_file_sizes,
)

__all__ = [
    "copy_file_verified",
    "create_temp_file_path",
    "format_bytes_human_readable",
    "has_extension",
    "validate_file_sizes",
]
