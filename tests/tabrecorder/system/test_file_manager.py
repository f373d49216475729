from pathlib import Path

import pytest

from tabrecorder.system.file_manager import FileManager


@pytest.fixture
def file_manager(path_resolver, tmp_path):
    """Provide a FileManager rooted at an empty directory of its own."""
    path_resolver.data_dir = tmp_path / "files"
    path_resolver.data_dir.mkdir()
    return FileManager(path_resolver=path_resolver)


def test_create_directory(file_manager):
    """Should create a directory and its parents."""
    file_manager.create_directory(Path("a/b"))
    assert (file_manager.base_path / "a" / "b").is_dir()


def test_write_and_read_bytes(file_manager):
    """Should write binary content and read back a byte range."""
    file_manager.write_bytes(Path("rec/track.mp3"), b"0123456789")

    assert file_manager.read_bytes(Path("rec/track.mp3")) == b"0123456789"
    assert file_manager.read_bytes(Path("rec/track.mp3"), 2, 3) == b"234"
    assert file_manager.read_bytes(Path("rec/track.mp3"), 8) == b"89"
    assert file_manager.file_size(Path("rec/track.mp3")) == 10


def test_write_file_atomic_replaces_content(file_manager):
    """Should replace existing content and leave no temporary files."""
    target = Path("index.json")
    file_manager.write_file_atomic(target, "old")
    file_manager.write_file_atomic(target, "new")

    assert (file_manager.base_path / target).read_text() == "new"
    assert [p.name for p in file_manager.base_path.iterdir()] == ["index.json"]


def test_write_file_atomic_keeps_old_content_on_failure(file_manager, monkeypatch):
    """Should leave the previous file untouched and clean up when the replace fails."""
    target = Path("index.json")
    file_manager.write_file_atomic(target, "old")

    def fail(src, dst):
        raise OSError("replace failed")

    monkeypatch.setattr("tabrecorder.system.file_manager.os.replace", fail)

    with pytest.raises(OSError, match="replace failed"):
        file_manager.write_file_atomic(target, "new")

    assert (file_manager.base_path / target).read_text() == "old"
    assert [p.name for p in file_manager.base_path.iterdir()] == ["index.json"]


@pytest.mark.parametrize(
    "method,path,setup_action,expected_exists",
    [
        pytest.param("delete_file", Path("f.txt"), "create_file", False, id="delete_file"),
        pytest.param("delete_file", Path("missing.txt"), None, False, id="delete_missing_file"),
        pytest.param("delete_directory", Path("d"), "create_dir", False, id="delete_directory"),
    ],
)
def test_delete_operations(file_manager, method, path, setup_action, expected_exists):
    """Should delete files and directories, tolerating missing targets."""
    full_path = file_manager.base_path / path
    if setup_action == "create_file":
        full_path.write_text("x")
    elif setup_action == "create_dir":
        full_path.mkdir()
        (full_path / "inner.txt").write_text("x")

    getattr(file_manager, method)(path)

    assert full_path.exists() is expected_exists


def test_delete_directory_reports_removal(file_manager):
    """Should report whether anything was removed."""
    (file_manager.base_path / "d").mkdir()

    assert file_manager.delete_directory(Path("d")) is True
    assert file_manager.delete_directory(Path("d")) is False


def test_list_subdirectories(file_manager):
    """Should list only directories, and nothing for a missing parent."""
    (file_manager.base_path / "root" / "one").mkdir(parents=True)
    (file_manager.base_path / "root" / "two").mkdir()
    (file_manager.base_path / "root" / "file.txt").write_text("x")

    assert sorted(file_manager.list_subdirectories(Path("root"))) == ["one", "two"]
    assert file_manager.list_subdirectories(Path("absent")) == []


def test_existence_checks(file_manager):
    """Should distinguish files from directories."""
    (file_manager.base_path / "d").mkdir()
    (file_manager.base_path / "f").write_text("x")

    assert file_manager.file_exists(Path("f"))
    assert not file_manager.file_exists(Path("d"))
