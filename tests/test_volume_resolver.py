"""
Tests for VolumeResolver candidate ordering and accessibility probing.
"""

import time
from unittest.mock import patch

import pytest

from studio_storage.services.volume import VolumeResolver
from studio_storage.services.volume.volume_resolver import PROBE_FILE_PREFIX


class TestCandidatePaths:
    def test_primary_first_then_alternatives_without_duplicates(self, config_store, resolver, nas_dir, temp_dir):
        config_store.update(alternative_paths=[str(temp_dir / "alt1"), str(nas_dir), str(temp_dir / "alt2")])

        assert resolver.get_candidate_paths() == [
            str(nas_dir),
            str(temp_dir / "alt1"),
            str(temp_dir / "alt2"),
        ]

    def test_platform_selects_primary_field(self, config_store):
        config_store.update(windows_unc_path="\\\\NAS\\Gallery", macos_mount_path="/Volumes/Gallery")

        assert VolumeResolver(config_store, "windows").get_primary_path() == "\\\\NAS\\Gallery"
        assert VolumeResolver(config_store, "unknown").get_primary_path() == "/Volumes/Gallery"


class TestResolveRoot:
    @pytest.mark.asyncio
    async def test_prefers_primary_when_both_accessible(self, config_store, resolver, nas_dir, temp_dir):
        alternative = temp_dir / "alt"
        alternative.mkdir()
        nas_dir.mkdir()
        config_store.update(alternative_paths=[str(alternative)])

        assert await resolver.resolve_root() == str(nas_dir)

    @pytest.mark.asyncio
    async def test_falls_back_to_alternative(self, config_store, resolver, temp_dir):
        alternative = temp_dir / "alt"
        alternative.mkdir()
        config_store.update(alternative_paths=[str(temp_dir / "missing"), str(alternative)])

        assert await resolver.resolve_root() == str(alternative)

    @pytest.mark.asyncio
    async def test_none_when_nothing_accessible(self, resolver):
        assert await resolver.resolve_root() is None

    @pytest.mark.asyncio
    async def test_file_is_not_a_root(self, resolver, nas_dir):
        nas_dir.write_text("not a directory")

        assert await resolver.resolve_root() is None

    @pytest.mark.asyncio
    async def test_find_existing_paths(self, resolver, nas_dir, temp_dir):
        nas_dir.mkdir()

        found = await resolver.find_existing_paths([str(nas_dir), str(temp_dir / "missing")])

        assert found == [str(nas_dir)]


class TestAccessibility:
    @pytest.mark.asyncio
    async def test_check_timeout_counts_as_inaccessible(self, config_store, nas_dir):
        nas_dir.mkdir()
        resolver = VolumeResolver(config_store, "linux", probe_timeout_seconds=0.05)

        def slow_isdir(path):
            time.sleep(0.5)
            return True

        with patch("studio_storage.services.volume.volume_resolver.os.path.isdir", side_effect=slow_isdir):
            assert await resolver.is_path_accessible(str(nas_dir)) is False

    @pytest.mark.asyncio
    async def test_check_error_counts_as_inaccessible(self, resolver, nas_dir):
        nas_dir.mkdir()

        with patch(
            "studio_storage.services.volume.volume_resolver.os.access",
            side_effect=OSError("stale handle"),
        ):
            assert await resolver.is_path_accessible(str(nas_dir)) is False

    @pytest.mark.asyncio
    async def test_empty_path_is_inaccessible(self, resolver):
        assert await resolver.is_path_accessible("") is False

    @pytest.mark.asyncio
    async def test_write_check_leaves_no_files(self, config_store, nas_dir):
        nas_dir.mkdir()
        resolver = VolumeResolver(config_store, "linux", verify_write_access=True)

        assert await resolver.is_path_accessible(str(nas_dir)) is True
        assert not [p for p in nas_dir.iterdir() if p.name.startswith(PROBE_FILE_PREFIX)]


class TestComposeNetworkRoot:
    def test_without_subfolders(self, resolver):
        assert resolver.compose_network_root("/mnt/nas") == "/mnt/nas"

    def test_photo_folder_and_app_subfolder(self, config_store, resolver):
        config_store.update(photo_folder="Photos", app_subfolder="Studio")

        assert resolver.compose_network_root("/mnt/nas") == "/mnt/nas/Photos/Studio"

    def test_photo_folder_not_repeated(self, config_store, resolver):
        config_store.update(photo_folder="Photos")

        assert resolver.compose_network_root("/mnt/nas/Photos") == "/mnt/nas/Photos"
