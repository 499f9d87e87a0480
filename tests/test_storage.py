"""Tests for atomic asset writes, rollback and path resolution."""

import io
import os

import pytest

from diary.assets import storage
from diary.assets.storage import (
    generate_saved_name,
    resolve_asset_path,
    rollback_files,
    save_file_atomically,
    user_asset_dir,
)
from diary.exceptions import AssetNotFoundError, AssetStorageError, FileTooLargeError, UnauthorizedError


class FailingStream(io.BytesIO):
    """Stream that breaks after the first read, like an aborted upload."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        if self.reads > 1:
            raise OSError(104, "Connection reset by peer")
        return super().read(1)


class TestSaveFileAtomically:
    """Test the temp-file-then-rename writer."""

    def test_writes_content_under_generated_name(self, tmp_path):
        target = tmp_path / 'user'

        saved_name, path, size = save_file_atomically(str(target), "Photo.JPG", io.BytesIO(b"hello"))

        assert saved_name.endswith(".jpg")
        assert saved_name != "Photo.JPG"
        assert path == os.path.abspath(target / saved_name)
        assert size == 5
        assert (target / saved_name).read_bytes() == b"hello"
        assert os.listdir(target) == [saved_name]

    def test_creates_missing_parent_directories(self, tmp_path):
        target = tmp_path / 'a' / 'b' / 'c'

        saved_name, _, _ = save_file_atomically(str(target), "x.png", io.BytesIO(b"1"))

        assert (target / saved_name).is_file()

    def test_zero_byte_stream(self, tmp_path):
        saved_name, path, size = save_file_atomically(str(tmp_path), "empty.gif", io.BytesIO(b""))

        assert size == 0
        assert os.path.getsize(path) == 0

    def test_large_stream_written_in_pieces(self, tmp_path):
        data = os.urandom(storage.WRITE_PIECE_SIZE * 3 + 17)

        _, path, size = save_file_atomically(str(tmp_path), "clip.mp4", io.BytesIO(data))

        assert size == len(data)
        with open(path, 'rb') as f:
            assert f.read() == data

    def test_stream_over_limit_leaves_nothing(self, tmp_path):
        with pytest.raises(FileTooLargeError):
            save_file_atomically(str(tmp_path), "big.jpg", io.BytesIO(b"x" * 101), max_bytes=100)

        assert os.listdir(tmp_path) == []

    def test_stream_at_limit_is_accepted(self, tmp_path):
        _, _, size = save_file_atomically(str(tmp_path), "ok.jpg", io.BytesIO(b"x" * 100), max_bytes=100)

        assert size == 100

    def test_read_error_removes_temp_file(self, tmp_path):
        with pytest.raises(AssetStorageError) as exc_info:
            save_file_atomically(str(tmp_path), "broken.jpg", FailingStream(b"abcdef"))

        assert "broken.jpg" in str(exc_info.value)
        assert str(tmp_path) not in str(exc_info.value)
        assert os.listdir(tmp_path) == []

    def test_rename_error_removes_temp_file(self, tmp_path, monkeypatch):
        def failing_replace(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(storage.os, "replace", failing_replace)

        with pytest.raises(AssetStorageError):
            save_file_atomically(str(tmp_path), "a.jpg", io.BytesIO(b"abc"))

        assert os.listdir(tmp_path) == []

    def test_unwritable_destination(self, tmp_path):
        blocker = tmp_path / 'not-a-dir'
        blocker.write_bytes(b"")

        with pytest.raises(AssetStorageError):
            save_file_atomically(str(blocker / 'user'), "a.jpg", io.BytesIO(b"abc"))

    def test_same_declared_name_gives_distinct_files(self, tmp_path):
        first, _, _ = save_file_atomically(str(tmp_path), "same.jpg", io.BytesIO(b"1"))
        second, _, _ = save_file_atomically(str(tmp_path), "same.jpg", io.BytesIO(b"2"))

        assert first != second
        assert sorted(os.listdir(tmp_path)) == sorted([first, second])


class TestGenerateSavedName:
    def test_regenerates_on_collision(self, tmp_path, monkeypatch):
        import uuid

        ids = iter([
            uuid.UUID("00000000-0000-0000-0000-000000000001"),
            uuid.UUID("00000000-0000-0000-0000-000000000002"),
        ])
        monkeypatch.setattr(storage.uuid, "uuid4", lambda: next(ids))
        (tmp_path / "00000000-0000-0000-0000-000000000001.png").write_bytes(b"taken")

        assert generate_saved_name("a.PNG", tmp_path) == "00000000-0000-0000-0000-000000000002.png"

    def test_name_without_extension(self, tmp_path):
        assert "." not in generate_saved_name("README", tmp_path)


class TestRollbackFiles:
    """Test best-effort reverse-order deletion."""

    def test_removes_in_reverse_order(self, tmp_path, monkeypatch):
        paths = []
        for i in range(3):
            p = tmp_path / f"{i}.jpg"
            p.write_bytes(b"x")
            paths.append(str(p))

        removed = []
        real_remove = os.remove

        def tracking_remove(path):
            removed.append(path)
            real_remove(path)

        monkeypatch.setattr(storage.os, "remove", tracking_remove)

        assert rollback_files(paths) == []
        assert removed == list(reversed(paths))
        assert os.listdir(tmp_path) == []

    def test_missing_files_are_ignored(self, tmp_path):
        assert rollback_files([str(tmp_path / "gone.jpg")]) == []

    def test_failures_are_reported_not_raised(self, tmp_path):
        stuck = tmp_path / "stuck.jpg"
        stuck.mkdir()
        other = tmp_path / "other.jpg"
        other.write_bytes(b"x")

        failed = rollback_files([str(other), str(stuck)])

        assert failed == [str(stuck)]
        assert not other.exists()


class TestUserAssetDir:
    def test_joins_root_and_user(self, tmp_path):
        assert user_asset_dir(str(tmp_path), "alice") == tmp_path / "alice"

    @pytest.mark.parametrize("user_id", ["", ".", "..", "a/b", "..\\x"])
    def test_rejects_unsafe_identifiers(self, tmp_path, user_id):
        with pytest.raises(UnauthorizedError):
            user_asset_dir(str(tmp_path), user_id)


class TestResolveAssetPath:
    def test_finds_existing_asset(self, tmp_path):
        (tmp_path / "alice").mkdir()
        (tmp_path / "alice" / "a.jpg").write_bytes(b"x")

        assert resolve_asset_path(str(tmp_path), "alice", "a.jpg") == (tmp_path / "alice" / "a.jpg").resolve()

    @pytest.mark.parametrize("relative", ["missing.jpg", "../bob/b.jpg", "", "/etc/passwd", "."])
    def test_missing_or_outside_user_dir(self, tmp_path, relative):
        (tmp_path / "alice").mkdir()
        (tmp_path / "bob").mkdir()
        (tmp_path / "bob" / "b.jpg").write_bytes(b"x")

        with pytest.raises(AssetNotFoundError):
            resolve_asset_path(str(tmp_path), "alice", relative)
