import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request

from .api import sessions, storage
from .config import Settings
from .dependencies import ServiceContainer, create_services, get_settings
from .logging_config import setup_logging


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager"""
        # Startup
        setup_logging(settings)
        logging.info("Studio storage service starting up...")

        container = services or create_services(settings)
        app.state.services = container

        config = container.config_store.config
        logging.info(f"NAS config: {container.config_store.config_path}")
        logging.info(f"Platform: {container.platform_name}")
        logging.info(f"Local cache: {config.local_cache_path}")

        if settings.enable_auto_mount:
            result = await container.auto_mounter.auto_mount_on_startup()
            if result.success:
                logging.info(f"NAS ready at {result.path} ({result.method})")
            else:
                logging.warning(f"Auto-mount failed, using local cache: {result.error}")

        if settings.enable_auto_sync:
            await container.sync_monitor.start_monitoring()

        yield

        # Shutdown
        logging.info("Studio storage service shutting down...")
        await container.sync_monitor.stop_monitoring()

    app = FastAPI(
        title="Studio Storage",
        description="NAS resolution, session folders and local cache sync for the photo studio",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logging.debug(f"Incoming request: {request.method} {request.url.path}")
        response = await call_next(request)
        logging.debug(f"Response: {response.status_code} for {request.url.path}")
        return response

    app.include_router(sessions.router)
    app.include_router(storage.router)

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"status": "ok", "message": "Studio storage service is running"}

    @app.get("/health")
    async def health():
        """Detailed health check."""
        container: ServiceContainer = app.state.services
        status = await container.monitor.get_status()
        return {
            "status": "healthy",
            "service": "studio-storage",
            "platform": container.platform_name,
            "nas_connected": status.connected,
            "sync_monitor_running": container.sync_monitor.is_running,
        }

    return app


app = create_app()


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "studio_storage.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
