import os

import pytest

from mdrcp.utils.fs import copy_executable


def test_copy_executable_keeps_mode(tmp_path):
    source = tmp_path / "tool"
    source.write_text("binary")
    source.chmod(0o755)
    dest = tmp_path / "installed"

    assert copy_executable(source, dest) == dest
    assert dest.read_text() == "binary"
    assert os.access(dest, os.X_OK)


def test_copy_executable_overwrites_file(tmp_path):
    source = tmp_path / "tool"
    source.write_text("new")
    dest = tmp_path / "installed"
    dest.write_text("old")

    copy_executable(source, dest)

    assert dest.read_text() == "new"


def test_copy_executable_refuses_directory(tmp_path):
    source = tmp_path / "tool"
    source.write_text("binary")
    dest = tmp_path / "occupied"
    dest.mkdir()

    with pytest.raises(OSError):
        copy_executable(source, dest)
    assert list(dest.iterdir()) == []
