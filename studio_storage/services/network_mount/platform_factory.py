"""Platform Factory - platform detection and mounter creation."""

import logging
import platform
from typing import Optional

from .base_mounter import BaseMounter


class UnsupportedPlatformError(Exception):
    """Raised when platform is not supported for network mounting."""
    pass


class PlatformFactory:
    """Factory for creating platform-specific mount implementations."""

    def detect_platform(self) -> str:
        """Detect current platform. Returns: macos, windows, or linux."""
        system = platform.system().lower()

        if system == "darwin":
            return "macos"
        elif system == "windows":
            return "windows"
        elif system == "linux":
            return "linux"
        else:
            raise UnsupportedPlatformError(f"Platform {system} not supported for network mounting")

    def create_mounter(self, platform_name: Optional[str] = None) -> BaseMounter:
        """Create platform-specific mounter instance."""
        platform_name = platform_name or self.detect_platform()

        if platform_name == "macos":
            from .macos_mounter import MacOSMounter
            mounter = MacOSMounter()
        elif platform_name == "windows":
            from .windows_mounter import WindowsMounter
            mounter = WindowsMounter()
        elif platform_name == "linux":
            from .linux_mounter import LinuxMounter
            mounter = LinuxMounter()
        else:
            raise UnsupportedPlatformError(f"No mounter implementation for platform: {platform_name}")

        logging.info(f"Initialized {mounter.get_platform_name()} mounter")
        return mounter
