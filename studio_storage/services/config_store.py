"""
Persisted NAS configuration.

The record is stored as JSON next to the application data. When the stored
version is older than CONFIG_VERSION the file is deleted and replaced with
defaults; nothing is migrated. A file that cannot be parsed is handled the
same way as a missing one, so user edits in a corrupt file are lost.
"""

import json
import logging
from pathlib import Path
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.exceptions import ConfigCorruptionError

# Increment to force a reset of every stored config
CONFIG_VERSION = 6


def _default_local_cache_path() -> str:
    return str(Path.home() / "Documents" / "Studio_Cache")


class NasConfig(BaseModel):
    """Strongly typed NAS settings, editable from the settings screen."""

    version: int = Field(default=CONFIG_VERSION, alias="_version")

    # SMB URL used for the native "connect to server" flow
    smb_url: str = "smb://StudioNAS._smb._tcp.local"

    # Primary mount path per platform
    macos_mount_path: str = "/Volumes/Gallery"
    linux_mount_path: str = "/mnt/studionas/Gallery"
    windows_unc_path: str = "\\\\StudioNAS\\Gallery"

    # Subfolders inside the mounted share ("" = use the share root)
    photo_folder: str = ""
    app_subfolder: str = ""

    # Checked in order after the primary path
    alternative_paths: List[str] = Field(
        default_factory=lambda: [
            "/Volumes/Gallery",
            "/Volumes/Gallery-1",
            "/Volumes/StudioNAS/Gallery",
            "/Volumes/StudioNAS",
            "/Volumes/StudioNAS-1/Gallery",
            "/Volumes/StudioNAS-1",
            "/Volumes/Studio Archive",
        ]
    )

    # Probed by detect_nas
    detect_paths: List[str] = Field(
        default_factory=lambda: [
            "/Volumes/StudioNAS/Gallery",
            "/Volumes/StudioNAS",
            "/Volumes/StudioNAS-1/Gallery",
            "/Volumes/StudioNAS-1",
            "/Volumes/Gallery",
            "/Volumes/Gallery-1",
        ]
    )

    nas_host_name: str = "StudioNAS"
    nas_ip_address: str = "192.168.1.50"
    smb_port: int = 445
    share_name: str = "Gallery"

    # Credentials; an empty user means anonymous
    nas_user: str = ""
    nas_password: str = ""
    alternative_users: List[str] = Field(
        default_factory=lambda: ["admin", "guest", ""]
    )

    # Mount points tried by the auto-mount search
    macos_mount_points: List[str] = Field(
        default_factory=lambda: [
            "/Volumes/StudioNAS-Gallery",
            "/Volumes/StudioNAS",
            "/Volumes/Gallery-StudioNAS",
        ]
    )
    linux_mount_points: List[str] = Field(
        default_factory=lambda: ["/mnt/studionas", "/mnt/studionas-1"]
    )
    windows_drive_letters: List[str] = Field(default_factory=lambda: ["Z", "Y"])

    restrict_to_app_folder: bool = True
    connection_type: str = "auto"  # auto, smb, mounted, local

    use_local_cache: bool = True
    local_cache_path: str = Field(default_factory=_default_local_cache_path)

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    def primary_path_field(self, platform_name: str) -> str:
        """Name of the field holding the primary mount path for a platform."""
        if platform_name == "windows":
            return "windows_unc_path"
        if platform_name == "linux":
            return "linux_mount_path"
        return "macos_mount_path"

    def get_primary_mount_path(self, platform_name: str) -> str:
        return getattr(self, self.primary_path_field(platform_name))


class ConfigStore:
    """Loads, resets and rewrites the persisted NasConfig."""

    def __init__(self, config_path: Path):
        self._config_path = Path(config_path)
        self._config = self.load()

    @property
    def config(self) -> NasConfig:
        return self._config

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> NasConfig:
        """Load config from disk, resetting to defaults when outdated or corrupt."""
        if self._config_path.exists():
            try:
                stored = self._read_file()
                stored_version = stored.get("_version")

                if not isinstance(stored_version, int) or stored_version < CONFIG_VERSION:
                    logging.warning(
                        f"Outdated NAS config detected ({stored_version or 'none'} < "
                        f"{CONFIG_VERSION}) - resetting {self._config_path} to defaults"
                    )
                    self._config_path.unlink()
                    return self._write_defaults()

                config = NasConfig.model_validate(stored)
                logging.info(f"NAS config loaded from {self._config_path}")
                return config

            except (ConfigCorruptionError, ValidationError) as e:
                logging.error(f"{e} - overwriting with defaults")
                return self._write_defaults()
            except OSError as e:
                logging.error(f"Failed to load NAS config {self._config_path}: {e}")

        return self._write_defaults()

    def save(self) -> bool:
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)
            self._config_path.write_text(self._serialize(self._config), encoding="utf-8")
            return True
        except OSError as e:
            logging.error(f"Failed to save NAS config {self._config_path}: {e}")
            return False

    def update(self, **changes: Any) -> NasConfig:
        """Apply changes, persist and return the new config."""
        unknown = [key for key in changes if key not in NasConfig.model_fields]
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(sorted(unknown))}")

        merged = self._config.model_dump()
        merged.update(changes)
        merged["version"] = CONFIG_VERSION
        self._config = NasConfig.model_validate(merged)
        self.save()
        logging.info(f"NAS config updated: {', '.join(sorted(changes))}")
        return self._config

    def set_primary_mount_path(self, platform_name: str, path: str) -> NasConfig:
        field_name = self._config.primary_path_field(platform_name)
        return self.update(**{field_name: path})

    def _read_file(self) -> dict:
        raw = self._config_path.read_text(encoding="utf-8")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigCorruptionError(str(self._config_path), str(e)) from e
        if not isinstance(data, dict):
            raise ConfigCorruptionError(
                str(self._config_path), "top-level JSON value is not an object"
            )
        return data

    def _write_defaults(self) -> NasConfig:
        self._config = NasConfig()
        if self.save():
            logging.info(f"Default NAS config written to {self._config_path}")
        return self._config

    @staticmethod
    def _serialize(config: NasConfig) -> str:
        return json.dumps(config.model_dump(by_alias=True), indent=2, ensure_ascii=False)
