from .directory_provisioner import DirectoryProvisioner
from .session_naming import sanitize_folder_name, session_relative_path

__all__ = ["DirectoryProvisioner", "sanitize_folder_name", "session_relative_path"]
