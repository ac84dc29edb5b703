"""Studio session storage core: NAS resolution, session folders and cache sync."""

__version__ = "1.0.0"
