import os

import pytest

from hudstats.file_utils import (
    LsFlags,
    _wine_exe_name,
    dir_exists,
    file_exists,
    get_basename,
    get_config_dir,
    get_data_dir,
    get_home_dir,
    ls,
    read_line,
    read_symlink,
)


def test_read_line_first_line(tmp_path):
    f = tmp_path / "x"
    f.write_text("first\nsecond\n")
    assert read_line(str(f)) == "first"


def test_read_line_missing(tmp_path):
    assert read_line(str(tmp_path / "none")) == ""


@pytest.mark.parametrize(
    "path, expected",
    [
        ("a/b/c", "c"),
        ("a\\b\\game.exe", "game.exe"),
        ("plain", "plain"),
        ("dir/", "dir/"),
    ],
)
def test_get_basename(path, expected):
    assert get_basename(path) == expected


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "temp1_input").write_text("1")
    (tmp_path / "temp1_label").write_text("x")
    (tmp_path / "other").write_text("y")
    (tmp_path / "tempdir").mkdir()
    os.symlink(tmp_path / "tempdir", tmp_path / "templink")
    os.symlink(tmp_path / "missing", tmp_path / "tempbroken")
    return tmp_path


def test_ls_files_with_prefix(tree):
    assert sorted(ls(str(tree), "temp", LsFlags.FILES)) == ["temp1_input", "temp1_label"]


def test_ls_dirs_follows_links(tree):
    assert sorted(ls(str(tree))) == ["tempdir", "templink"]


def test_ls_both(tree):
    names = ls(str(tree), None, LsFlags.DIRS | LsFlags.FILES)
    assert "tempbroken" not in names
    assert set(names) == {"temp1_input", "temp1_label", "other", "tempdir", "templink"}


def test_ls_missing_dir(tmp_path):
    assert ls(str(tmp_path / "nope")) == []


def test_exists_helpers(tree):
    assert file_exists(str(tree / "other"))
    assert not file_exists(str(tree / "tempdir"))
    assert dir_exists(str(tree / "tempdir"))
    assert not dir_exists(str(tree / "other"))
    assert not file_exists(str(tree / "missing"))


def test_read_symlink(tree):
    assert read_symlink(str(tree / "templink")) == str(tree / "tempdir")
    assert read_symlink(str(tree / "other")) == ""


def test_wine_not_preloader():
    assert _wine_exe_name("/usr/bin/game", "game.exe", [], False) == ""


def test_wine_from_comm():
    assert _wine_exe_name("/usr/bin/wine64-preloader", "Game.EXE", [], False) == "Game"
    assert _wine_exe_name("/usr/bin/wine-preloader", "game.exe", [], True) == "game.exe"


def test_wine_from_cmdline_path():
    args = ["C:\\Games\\game.exe", "-arg"]
    assert _wine_exe_name("/x/wine-preloader", "wine", args, False) == "game"
    assert _wine_exe_name("/x/wine-preloader", "wine", args, True) == "game.exe"


def test_wine_from_cmdline_dot_before_separator():
    args = ["/opt/v1.2/launcher"]
    assert _wine_exe_name("/x/wine-preloader", "wine", args, False) == "launcher"


def test_wine_from_cmdline_bare_exe():
    assert _wine_exe_name("/x/wine-preloader", "wine", ["", "app.exe"], False) == "app"


def test_home_dirs(monkeypatch):
    monkeypatch.setenv("HOME", "/home/u")
    monkeypatch.delenv("XDG_DATA_HOME", raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    assert get_home_dir() == "/home/u"
    assert get_data_dir() == "/home/u/.local/share"
    assert get_config_dir() == "/home/u/.config"


def test_xdg_override(monkeypatch):
    monkeypatch.setenv("XDG_DATA_HOME", "/d")
    monkeypatch.setenv("XDG_CONFIG_HOME", "/c")
    assert get_data_dir() == "/d"
    assert get_config_dir() == "/c"


def test_no_home(monkeypatch):
    monkeypatch.delenv("HOME", raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    assert get_config_dir() == ""