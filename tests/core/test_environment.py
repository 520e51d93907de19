"""Tests for usysconf.core.environment probes."""

import pytest

from usysconf.core.environment import is_chrooted, is_container, is_live_medium
from usysconf.core.errors import EnvironmentDetectionError


class TestIsChrooted:
    @pytest.fixture
    def mounts(self, tmp_path):
        table = tmp_path / "mounts"
        table.write_text("proc /proc proc rw,nosuid 0 0\n/dev/sda2 / ext4 rw,relatime 0 0\n")
        return str(table)

    def test_same_root_is_not_chroot(self, tmp_path, mounts):
        assert is_chrooted(root=str(tmp_path), init_root=str(tmp_path), mounts=mounts) is False

    def test_different_root_is_chroot(self, tmp_path, mounts):
        jail = tmp_path / "jail"
        jail.mkdir()
        assert is_chrooted(root=str(jail), init_root=str(tmp_path), mounts=mounts) is True

    def test_unreadable_init_root_assumes_chroot(self, tmp_path, mounts):
        assert is_chrooted(root=str(tmp_path), init_root=str(tmp_path / "proc-1-root"), mounts=mounts) is True

    def test_missing_root_raises(self, tmp_path, mounts):
        with pytest.raises(EnvironmentDetectionError):
            is_chrooted(root=str(tmp_path / "gone"), init_root=str(tmp_path), mounts=mounts)

    def test_overlay_root_is_chroot(self, tmp_path):
        table = tmp_path / "mounts"
        table.write_text("overlay / overlay rw,lowerdir=/l,upperdir=/u,workdir=/w 0 0\n")
        assert is_chrooted(root=str(tmp_path), init_root=str(tmp_path), mounts=str(table)) is True

    def test_unreadable_mounts_falls_back_to_inode_check(self, tmp_path):
        missing = str(tmp_path / "no-mounts")
        assert is_chrooted(root=str(tmp_path), init_root=str(tmp_path), mounts=missing) is False


class TestIsLiveMedium:
    def test_marker_absent(self, tmp_path):
        assert is_live_medium(str(tmp_path / "livedev")) is False

    def test_marker_present(self, tmp_path):
        marker = tmp_path / "livedev"
        marker.write_text("")
        assert is_live_medium(str(marker)) is True

    def test_probe_error_raises(self, tmp_path):
        not_a_dir = tmp_path / "file"
        not_a_dir.write_text("")
        with pytest.raises(EnvironmentDetectionError):
            is_live_medium(str(not_a_dir / "livedev"))


class TestIsContainer:
    def test_container_env_var(self):
        assert is_container(markers=(), environ={"container": "podman"}) is True

    def test_marker_file(self, tmp_path):
        marker = tmp_path / ".dockerenv"
        marker.write_text("")
        assert is_container(markers=(str(marker),), environ={}) is True

    def test_bare_host(self, tmp_path):
        assert is_container(markers=(str(tmp_path / ".dockerenv"),), environ={}) is False
