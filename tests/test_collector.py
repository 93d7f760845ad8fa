"""
Tests for the artifact collector
"""
import os
import sys

import pytest

from monobuild.build.collector import copy_tree, Collector
from monobuild.scripts.cli import cli_with_error_catching
from tests.utils import create_monorepo, create_project, list_tree, read_file, run_monobuild, write_file


def test_copy_tree_union(tmp_path):
    write_file(str(tmp_path / "a" / "index.html"), "a")
    write_file(str(tmp_path / "a" / "assets" / "a.js"), "a")
    write_file(str(tmp_path / "b" / "assets" / "b.js"), "b")
    dest = str(tmp_path / "out" / "nested")
    copy_tree(str(tmp_path / "a"), dest)
    stats = copy_tree(str(tmp_path / "b"), dest)
    assert stats.files == 1
    assert list_tree(dest) == {
        "index.html": "a",
        os.path.join("assets", "a.js"): "a",
        os.path.join("assets", "b.js"): "b"
    }


def test_copy_tree_later_source_wins(tmp_path):
    write_file(str(tmp_path / "a" / "index.html"), "old")
    write_file(str(tmp_path / "b" / "index.html"), "new")
    dest = str(tmp_path / "out")
    copy_tree(str(tmp_path / "a"), dest)
    copy_tree(str(tmp_path / "b"), dest)
    assert read_file(os.path.join(dest, "index.html")) == "new"


def test_copy_tree_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        copy_tree(str(tmp_path / "missing"), str(tmp_path / "out"))


def test_collect(tmp_path):
    root = str(tmp_path)
    for name in ["client", "author", "admin"]:
        create_project(root, name, output={"index.html": name, "assets/app.js": "js"})
    stats = Collector(root=root).collect()
    assert stats.files == 6
    for name in ["client", "author", "admin"]:
        assert read_file(os.path.join(root, "public", name, "index.html")) == name
        assert read_file(os.path.join(root, "public", name, "assets", "app.js")) == "js"


def test_collect_keeps_stale_files(tmp_path):
    root = str(tmp_path)
    create_monorepo(root, output={"index.html": "1"})
    write_file(os.path.join(root, "public", "client", "old.js"), "stale")
    Collector(root=root).collect()
    assert read_file(os.path.join(root, "public", "client", "old.js")) == "stale"


def test_collect_clean_removes_stale_files(tmp_path):
    root = str(tmp_path)
    create_monorepo(root, output={"index.html": "1"})
    write_file(os.path.join(root, "public", "client", "old.js"), "stale")
    write_file(os.path.join(root, "public", "other", "keep.js"), "keep")
    Collector(root=root, clean=True).collect()
    assert not os.path.exists(os.path.join(root, "public", "client", "old.js"))
    assert os.path.exists(os.path.join(root, "public", "other", "keep.js"))


def test_collect_custom_output_directory(tmp_path):
    root = str(tmp_path / "repo")
    create_monorepo(root, output={"index.html": "1"})
    Collector(root=root, out=str(tmp_path / "www")).collect()
    assert os.path.isfile(str(tmp_path / "www" / "admin" / "index.html"))


def test_collect_missing_output(tmp_path):
    root = str(tmp_path)
    create_project(root, "client", output={"index.html": "1"})
    create_project(root, "author")
    with pytest.raises(OSError):
        Collector(root=root).collect()
    assert os.path.isfile(os.path.join(root, "public", "client", "index.html"))


def test_collect_command(tmp_path):
    root = str(tmp_path)
    create_monorepo(root, output={"index.html": "1"})
    res = run_monobuild("collect --root {} --collect_out dist_all".format(root))
    assert "All builds copied" in res.out
    assert os.path.isfile(os.path.join(root, "dist_all", "author", "index.html"))


def test_collect_command_missing_output(tmp_path):
    root = str(tmp_path)
    create_monorepo(root)
    res = run_monobuild("collect --root {}".format(root), expect_success=False)
    assert res.ret_code == 1
    assert isinstance(res.exception, OSError)


def test_entry_point_logs_missing_output(tmp_path, monkeypatch, caplog):
    root = str(tmp_path)
    create_monorepo(root)
    monkeypatch.setattr(sys, "argv", ["monobuild", "collect", "--root", root])
    with pytest.raises(SystemExit) as err:
        cli_with_error_catching()
    assert err.value.code == 1
    assert os.path.join(root, "client", "dist") in caplog.text
