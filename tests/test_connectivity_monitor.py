"""
Tests for ConnectivityMonitor caching and active-root selection.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from studio_storage.core.exceptions import PathResolutionError
from studio_storage.models import StorageMode
from studio_storage.services.volume import ConnectivityMonitor


class TestStatusCaching:
    @pytest.mark.asyncio
    async def test_second_call_within_ttl_is_cached(self, monitor, nas_dir):
        nas_dir.mkdir()
        monitor.resolver.resolve_root = AsyncMock(return_value=str(nas_dir))

        first = await monitor.get_status()
        second = await monitor.get_status()

        assert first.connected is True
        assert first.cached is False
        assert second.cached is True
        assert monitor.resolver.resolve_root.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_cache_checks_again(self, resolver, config_store):
        monitor = ConnectivityMonitor(resolver, config_store, cache_ttl_seconds=0.05)
        resolver.resolve_root = AsyncMock(return_value=None)

        await monitor.get_status()
        await asyncio.sleep(0.1)
        await monitor.get_status()

        assert resolver.resolve_root.await_count == 2

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_check(self, monitor):
        async def slow_resolve():
            await asyncio.sleep(0.05)
            return None

        monitor.resolver.resolve_root = AsyncMock(side_effect=slow_resolve)

        results = await asyncio.gather(*(monitor.get_status() for _ in range(5)))

        assert monitor.resolver.resolve_root.await_count == 1
        assert all(not status.connected for status in results)

    @pytest.mark.asyncio
    async def test_stale_status_until_refresh(self, monitor, nas_dir):
        assert (await monitor.get_status()).connected is False

        nas_dir.mkdir()
        # Still inside the cache window
        assert (await monitor.get_status()).connected is False

        refreshed = await monitor.refresh_status()
        assert refreshed.connected is True
        assert refreshed.path == str(nas_dir)

    @pytest.mark.asyncio
    async def test_cache_info(self, monitor):
        assert monitor.get_cache_info()["has_cached_result"] is False

        await monitor.get_status()

        info = monitor.get_cache_info()
        assert info["has_cached_result"] is True
        assert info["is_cache_valid"] is True
        assert info["cache_ttl_seconds"] == 30.0


class TestActiveRoot:
    @pytest.mark.asyncio
    async def test_network_root_when_available(self, monitor, config_store, nas_dir):
        nas_dir.mkdir()
        config_store.update(app_subfolder="Studio")

        root = await monitor.get_active_root()

        assert root.mode == StorageMode.NETWORK
        assert root.path == str(nas_dir / "Studio")

    @pytest.mark.asyncio
    async def test_local_cache_when_unavailable(self, monitor, cache_dir):
        root = await monitor.get_active_root()

        assert root.mode == StorageMode.LOCAL_CACHE
        assert root.is_local_cache
        assert root.path == str(cache_dir)

    @pytest.mark.asyncio
    async def test_raises_when_cache_disabled(self, monitor, config_store):
        config_store.update(use_local_cache=False)

        with pytest.raises(PathResolutionError):
            await monitor.get_active_root()

    @pytest.mark.asyncio
    async def test_check_network_availability_report(self, monitor, config_store, nas_dir):
        nas_dir.mkdir()
        (nas_dir / "Photos").mkdir()
        config_store.update(photo_folder="Photos")

        report = await monitor.check_network_availability()

        assert report.connected is True
        assert report.base_path == str(nas_dir)
        assert report.photo_folder_path == str(nas_dir / "Photos")
        assert report.app_folder_path == str(nas_dir / "Photos")
        assert report.is_local_cache is False
        assert report.platform == "linux"
        assert report.found_paths == [str(nas_dir)]
