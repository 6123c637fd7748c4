import sys

import pytest

from geno.local_app_data import local_app_data_dir


@pytest.fixture
def linux(monkeypatch):
    monkeypatch.setattr(sys, "platform", "linux")
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    monkeypatch.delenv("XDG_DATA_DIRS", raising=False)
    return monkeypatch


def test_xdg_data_home(linux, tmp_path):
    linux.setenv("XDG_DATA_HOME", str(tmp_path))
    result = local_app_data_dir()
    assert result == tmp_path / "geno"
    assert result.is_dir()


def test_existing_directory_is_reused(linux, tmp_path):
    linux.setenv("XDG_DATA_HOME", str(tmp_path))
    first = local_app_data_dir()
    assert local_app_data_dir() == first


def test_xdg_data_dirs_first_entry(linux, tmp_path):
    (tmp_path / "first").mkdir()
    linux.setenv("XDG_DATA_DIRS", f"{tmp_path / 'first'}:{tmp_path / 'second'}")
    assert local_app_data_dir() == tmp_path / "first" / "geno"
    assert not (tmp_path / "second").exists()


def test_no_environment(linux):
    assert local_app_data_dir() is None


def test_missing_parent(linux, tmp_path):
    linux.setenv("XDG_DATA_HOME", str(tmp_path / "absent"))
    assert local_app_data_dir() is None


def test_windows(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "win32")
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    assert local_app_data_dir() == tmp_path / "Geno"
    assert (tmp_path / "Geno").is_dir()


def test_other_platform(monkeypatch, tmp_path):
    monkeypatch.setattr(sys, "platform", "darwin")
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))
    assert local_app_data_dir() is None