"""
Tests for CacheSyncReconciler and the recovery-triggered CacheSyncMonitor.
"""

import asyncio
import os
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from studio_storage.models import SyncResult
from studio_storage.services.sessions import DirectoryProvisioner
from studio_storage.services.sync import CacheSyncMonitor, CacheSyncReconciler


def _snapshot(root: Path) -> dict:
    """Relative path -> (size, mtime) for every file below root."""
    snapshot = {}
    for current, _dirs, names in os.walk(root):
        for name in names:
            path = Path(current) / name
            stat = path.stat()
            snapshot[str(path.relative_to(root))] = (stat.st_size, stat.st_mtime_ns)
    return snapshot


@pytest.fixture
def provisioner(settings, config_store, monitor):
    return DirectoryProvisioner(settings, config_store, monitor)


@pytest.fixture
def reconciler(settings, config_store, monitor):
    return CacheSyncReconciler(settings, config_store, monitor)


async def _cached_session(provisioner, files: dict) -> Path:
    result = await provisioner.create_session_directory("Ahmed", "S1", "2026-02-03")
    session_path = Path(result.session_path)
    for relative, content in files.items():
        path = session_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
    return session_path


class TestSyncCacheToNas:
    @pytest.mark.asyncio
    async def test_nas_unavailable(self, reconciler):
        result = await reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03")

        assert result.success is False
        assert result.error == "NAS not available"
        assert result.transferred == 0

    @pytest.mark.asyncio
    async def test_no_cache_found(self, reconciler, nas_dir):
        nas_dir.mkdir()

        result = await reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03")

        assert result.success is True
        assert result.message == "No cache found"
        assert (result.transferred, result.skipped, result.conflicts) == (0, 0, 0)

    @pytest.mark.asyncio
    async def test_transfers_and_keeps_cache(self, provisioner, reconciler, nas_dir, cache_dir):
        session_path = await _cached_session(
            provisioner,
            {"01_RAW/a.CR2": b"raw-a", "01_RAW/card2/b.CR2": b"raw-b", "04_FINAL/c.jpg": b"final"},
        )
        before = _snapshot(cache_dir)
        nas_dir.mkdir()

        result = await reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03")

        nas_session = nas_dir / session_path.relative_to(cache_dir)
        assert result.success is True
        assert result.cache_kept is True
        assert result.transferred == 3
        assert result.errors == []
        assert (nas_session / "01_RAW" / "card2" / "b.CR2").read_bytes() == b"raw-b"
        for name in ("01_RAW", "02_SELECTED", "03_EDITED", "04_FINAL"):
            assert (nas_session / name).is_dir()
        assert _snapshot(cache_dir) == before

    @pytest.mark.asyncio
    async def test_second_run_transfers_nothing(self, provisioner, reconciler, nas_dir):
        await _cached_session(provisioner, {"01_RAW/a.CR2": b"raw-a", "02_SELECTED/a.jpg": b"sel"})
        nas_dir.mkdir()

        first = await reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03")
        second = await reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03")

        assert first.transferred == 2
        assert second.transferred == 0
        assert second.skipped == 2

    @pytest.mark.asyncio
    async def test_different_size_is_a_conflict(self, provisioner, reconciler, nas_dir, cache_dir):
        session_path = await _cached_session(provisioner, {"01_RAW/a.CR2": b"cache-version"})
        nas_raw = nas_dir / session_path.relative_to(cache_dir) / "01_RAW"
        nas_raw.mkdir(parents=True)
        (nas_raw / "a.CR2").write_bytes(b"nas")

        result = await reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03")

        assert result.success is True
        assert result.conflicts == 1
        assert result.transferred == 0
        assert (nas_raw / "a.CR2").read_bytes() == b"nas"

    @pytest.mark.asyncio
    async def test_per_file_error_does_not_stop_batch(self, provisioner, reconciler, nas_dir):
        await _cached_session(provisioner, {"01_RAW/a.CR2": b"a", "01_RAW/b.CR2": b"b"})
        nas_dir.mkdir()
        real_copy = CacheSyncReconciler._reconcile_file

        async def flaky(self, source, dest):
            if source.name == "a.CR2":
                raise OSError("Input/output error")
            return await real_copy(self, source, dest)

        with patch.object(CacheSyncReconciler, "_reconcile_file", flaky):
            result = await reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03")

        assert result.success is True
        assert result.transferred == 1
        assert len(result.errors) == 1
        assert result.errors[0].file == "a.CR2"
        assert result.errors[0].folder == "01_RAW"

    @pytest.mark.asyncio
    async def test_sync_all_cached_sessions(self, provisioner, reconciler, nas_dir):
        await _cached_session(provisioner, {"01_RAW/a.CR2": b"a"})
        await provisioner.create_session_directory("Sara", "S2", "2026-03-10")
        nas_dir.mkdir()

        result = await reconciler.sync_all_cached_sessions()

        assert result.success is True
        assert result.transferred == 1
        assert (nas_dir / "2026" / "03" / "2026-03-10_Sara" / "01_RAW").is_dir()

    @pytest.mark.asyncio
    async def test_concurrent_syncs_of_one_session(self, provisioner, reconciler, nas_dir, cache_dir):
        files = {f"01_RAW/IMG_{i}.CR2": b"x" * (4096 + i) for i in range(6)}
        session_path = await _cached_session(provisioner, files)
        nas_dir.mkdir()

        first, second = await asyncio.gather(
            reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03"),
            reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03"),
        )

        nas_session = nas_dir / session_path.relative_to(cache_dir)
        assert first.transferred + second.transferred == len(files)
        assert first.skipped + second.skipped == len(files)
        assert first.errors == [] and second.errors == []
        assert list(nas_session.rglob("*.tmp")) == []
        assert len(list((nas_session / "01_RAW").iterdir())) == len(files)

    @pytest.mark.asyncio
    async def test_temp_file_counted_as_skipped(self, provisioner, reconciler, nas_dir, cache_dir):
        session_path = await _cached_session(
            provisioner, {"01_RAW/a.CR2": b"a", "02_SELECTED/b.jpg.tmp": b"partial"}
        )
        nas_dir.mkdir()

        result = await reconciler.sync_cache_to_nas("Ahmed", "S1", "2026-02-03")

        nas_session = nas_dir / session_path.relative_to(cache_dir)
        assert result.transferred == 1
        assert result.skipped == 1
        assert not (nas_session / "02_SELECTED" / "b.jpg.tmp").exists()

    @pytest.mark.asyncio
    async def test_sync_all_reports_unreadable_cache(self, reconciler, nas_dir, cache_dir):
        cache_dir.mkdir(parents=True)
        nas_dir.mkdir()

        with patch(
            "studio_storage.services.sync.cache_sync._list_cached_sessions",
            side_effect=PermissionError("Permission denied: '2026'"),
        ):
            result = await reconciler.sync_all_cached_sessions()

        assert result.success is False
        assert "Permission denied" in result.error

    @pytest.mark.asyncio
    async def test_has_cached_sessions(self, provisioner, reconciler):
        assert await reconciler.has_cached_sessions() is False

        await provisioner.create_session_directory("Ahmed", "S1", "2026-02-03")

        assert await reconciler.has_cached_sessions() is True


class TestCacheStatus:
    @pytest.mark.asyncio
    async def test_reports_size_and_mode(self, provisioner, reconciler, cache_dir):
        await _cached_session(provisioner, {"01_RAW/a.CR2": b"x" * 2048})

        status = await reconciler.get_cache_status()

        assert status.using_cache is True
        assert status.nas_available is False
        assert status.cache_path == str(cache_dir)
        assert status.cache_size_bytes >= 2048
        assert status.cache_size.endswith("KB")


class TestCacheSyncMonitor:
    @pytest.mark.asyncio
    async def test_sync_runs_only_on_recovery(self, settings, monitor, nas_dir):
        reconciler = AsyncMock()
        reconciler.sync_all_cached_sessions.return_value = SyncResult(success=True)
        sync_monitor = CacheSyncMonitor(settings, monitor, reconciler)

        assert await sync_monitor.check_once() is False
        nas_dir.mkdir()
        assert await sync_monitor.check_once() is True
        assert await sync_monitor.check_once() is False

        assert reconciler.sync_all_cached_sessions.await_count == 1

    @pytest.mark.asyncio
    async def test_first_check_with_nas_up_syncs_leftover_cache(self, settings, monitor, nas_dir):
        reconciler = AsyncMock()
        reconciler.has_cached_sessions.return_value = True
        reconciler.sync_all_cached_sessions.return_value = SyncResult(success=True)
        sync_monitor = CacheSyncMonitor(settings, monitor, reconciler)
        nas_dir.mkdir()

        assert await sync_monitor.check_once() is True
        assert await sync_monitor.check_once() is False

        assert reconciler.sync_all_cached_sessions.await_count == 1

    @pytest.mark.asyncio
    async def test_first_check_with_empty_cache_does_not_sync(self, settings, monitor, nas_dir):
        reconciler = AsyncMock()
        reconciler.has_cached_sessions.return_value = False
        sync_monitor = CacheSyncMonitor(settings, monitor, reconciler)
        nas_dir.mkdir()

        assert await sync_monitor.check_once() is False

        reconciler.sync_all_cached_sessions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_start_and_stop(self, settings, monitor):
        reconciler = AsyncMock()
        sync_monitor = CacheSyncMonitor(settings, monitor, reconciler)

        await sync_monitor.start_monitoring()
        assert sync_monitor.is_running is True

        await sync_monitor.stop_monitoring()
        assert sync_monitor.is_running is False
