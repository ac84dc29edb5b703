from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Persisted NAS configuration (paths, credentials, toggles)
    config_file_path: str = "data/nas-config.json"

    # Logging konfiguration
    log_level: str = "INFO"
    log_file_path: str = "logs/studio_storage.log"
    log_retention_days: int = 30

    # Connectivity probing
    status_cache_ttl_seconds: float = 30.0
    probe_timeout_seconds: float = 5.0
    verify_write_access: bool = False  # Real write probe instead of permission bits

    # Mount tooling
    enable_auto_mount: bool = True
    mount_timeout_seconds: float = 30.0  # Per mount attempt
    command_timeout_seconds: float = 10.0  # mount table listing, open dialogs
    ping_timeout_seconds: float = 3.0

    # Cache reconciliation
    enable_auto_sync: bool = True
    sync_check_interval_seconds: int = 60
    copy_chunk_size_kb: int = 2048

    # Recursive file counting
    max_concurrent_scans: int = 8

    # HTTP surface
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    model_config = SettingsConfigDict(env_file="settings.env", extra="ignore")

    @property
    def log_directory(self) -> Path:
        """Returnerer log directory som Path objekt"""
        return Path(self.log_file_path).parent

    @property
    def config_file(self) -> Path:
        return Path(self.config_file_path)
